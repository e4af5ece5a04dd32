from __future__ import annotations

import streamlit as st

from pharmacy.config import get_config

st.set_page_config(page_title="Pharmacy Admin", page_icon="💊", layout="wide")

st.title("💊 Pharmacy Inventory Admin")
st.caption("Product catalog, batches, orders and system settings for a pharmaceutical inventory.")

config = get_config()

with st.sidebar:
    st.subheader("Environment")
    if config.backend == "postgrest":
        st.write(f"**Database:** hosted (`{config.supabase_url}`)")
    else:
        st.write(f"**Data directory:** `{config.data_dir}`")
        st.write(f"**Database:** `{config.db_path.name}` (local)")

st.info(
    "Use the left sidebar navigation. On a fresh local database, start with **🧪 Data Management** to load demo data, then browse **Products** and adjust **Settings**.",
    icon="ℹ️",
)
