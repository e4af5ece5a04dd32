from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import streamlit as st

CONFIG_FILE_NAME = "config.json"
ENV_DATA_DIR = "PHARMACY_DATA_DIR"
ENV_SUPABASE_URL = "SUPABASE_URL"
ENV_SUPABASE_KEY = "SUPABASE_KEY"
ENV_LOG_LEVEL = "PHARMACY_LOG_LEVEL"
SESSION_DATA_DIR = "pharmacy_data_dir"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Config:
    data_dir: Path
    db_path: Path
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    currency: str = "USD"
    log_level: str = "INFO"

    @property
    def backend(self) -> str:
        # Hosted database when credentials are present, local SQLite otherwise.
        if self.supabase_url and self.supabase_key:
            return "postgrest"
        return "sqlite"


def _default_data_dir() -> Path:
    return Path.home() / ".pharmacy_admin"


def _load_persisted_config(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logging.getLogger(__name__).warning(f"Ignoring unreadable {cfg}")
            return {}
    return {}


def persist_data_dir(data_dir_str: str, *, config_dir: Optional[Path] = None) -> Path:
    data_dir = Path(data_dir_str).expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)

    # Written where the next start looks for it (the default folder).
    target = config_dir or _default_data_dir()
    target.mkdir(parents=True, exist_ok=True)
    cfg = target / CONFIG_FILE_NAME
    payload = {"data_dir": str(data_dir)}
    cfg.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return data_dir


def load_config(environ: Mapping[str, str], session: Optional[Mapping] = None, *, default_dir: Optional[Path] = None) -> Config:
    # Priority order for the data directory:
    # 1) Session state (set via Data Management page)
    # 2) Environment variable
    # 3) Persisted config in default folder
    # 4) Default folder
    session = session or {}
    default_dir = default_dir or _default_data_dir()
    if session.get(SESSION_DATA_DIR):
        data_dir = Path(session[SESSION_DATA_DIR]).expanduser().resolve()
    elif environ.get(ENV_DATA_DIR):
        data_dir = Path(environ[ENV_DATA_DIR]).expanduser().resolve()
    else:
        persisted = _load_persisted_config(default_dir)
        data_dir = Path(persisted.get("data_dir", default_dir)).expanduser().resolve()

    return Config(
        data_dir=data_dir,
        db_path=data_dir / "pharmacy.db",
        supabase_url=environ.get(ENV_SUPABASE_URL) or None,
        supabase_key=environ.get(ENV_SUPABASE_KEY) or None,
        log_level=(environ.get(ENV_LOG_LEVEL) or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not any(getattr(h, "_pharmacy", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._pharmacy = True
        root.addHandler(handler)
    logging.getLogger("pharmacy").setLevel(getattr(logging, level, logging.INFO))


@st.cache_resource
def get_config() -> Config:
    config = load_config(os.environ, st.session_state)
    config.data_dir.mkdir(parents=True, exist_ok=True)
    configure_logging(config.log_level)
    return config
