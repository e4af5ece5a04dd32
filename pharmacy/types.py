"""
Row / Insert / Update shapes for every table.

Row: every column, as returned by reads.
Insert: required columns are mandatory, server-defaulted ones optional.
Update: everything optional (partial patch).

Postponed annotations are deliberately not enabled here: TypedDict computes
its required/optional key sets from the class bodies.
"""

from typing import Any, Optional, TypedDict


# ---- users (auth owner of every user_id) ----
class UserRow(TypedDict):
    id: str
    email: Optional[str]
    created_at: str


class _UserInsertBase(TypedDict):
    email: Optional[str]


class UserInsert(_UserInsertBase, total=False):
    id: str
    created_at: str


class UserUpdate(TypedDict, total=False):
    id: str
    email: Optional[str]


# ---- profiles ----
class ProfileRow(TypedDict):
    id: str
    full_name: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _ProfileInsertBase(TypedDict):
    id: str


class ProfileInsert(_ProfileInsertBase, total=False):
    full_name: Optional[str]
    created_at: str
    updated_at: Optional[str]


class ProfileUpdate(TypedDict, total=False):
    id: str
    full_name: Optional[str]
    updated_at: Optional[str]


# ---- products ----
class ProductRow(TypedDict):
    id: str
    name: str
    sku: Optional[str]
    category: Optional[str]
    description: Optional[str]
    strength: Optional[str]
    unit: Optional[str]
    price: float
    stock_quantity: int
    status: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _ProductInsertBase(TypedDict):
    name: str
    price: float


class ProductInsert(_ProductInsertBase, total=False):
    id: str
    sku: Optional[str]
    category: Optional[str]
    description: Optional[str]
    strength: Optional[str]
    unit: Optional[str]
    stock_quantity: int
    status: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class ProductUpdate(TypedDict, total=False):
    id: str
    name: str
    sku: Optional[str]
    category: Optional[str]
    description: Optional[str]
    strength: Optional[str]
    unit: Optional[str]
    price: float
    stock_quantity: int
    status: Optional[str]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- batches ----
class BatchRow(TypedDict):
    id: str
    batch_number: str
    product_id: Optional[str]
    quantity: int
    manufacture_date: Optional[str]
    expiry_date: Optional[str]
    location: Optional[str]
    status: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _BatchInsertBase(TypedDict):
    batch_number: str
    quantity: int


class BatchInsert(_BatchInsertBase, total=False):
    id: str
    product_id: Optional[str]
    manufacture_date: Optional[str]
    expiry_date: Optional[str]
    location: Optional[str]
    status: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class BatchUpdate(TypedDict, total=False):
    id: str
    batch_number: str
    product_id: Optional[str]
    quantity: int
    manufacture_date: Optional[str]
    expiry_date: Optional[str]
    location: Optional[str]
    status: Optional[str]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- suppliers ----
class SupplierRow(TypedDict):
    id: str
    name: str
    contact_person: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    city: Optional[str]
    status: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _SupplierInsertBase(TypedDict):
    name: str


class SupplierInsert(_SupplierInsertBase, total=False):
    id: str
    contact_person: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    city: Optional[str]
    status: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class SupplierUpdate(TypedDict, total=False):
    id: str
    name: str
    contact_person: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    city: Optional[str]
    status: Optional[str]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- purchase_orders ----
class PurchaseOrderRow(TypedDict):
    id: str
    po_number: Optional[str]
    supplier_id: Optional[str]
    order_date: str
    expected_delivery_date: Optional[str]
    status: str
    total_amount: Optional[float]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _PurchaseOrderInsertBase(TypedDict):
    order_date: str


class PurchaseOrderInsert(_PurchaseOrderInsertBase, total=False):
    id: str
    po_number: Optional[str]
    supplier_id: Optional[str]
    expected_delivery_date: Optional[str]
    status: str
    total_amount: Optional[float]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class PurchaseOrderUpdate(TypedDict, total=False):
    id: str
    po_number: Optional[str]
    supplier_id: Optional[str]
    order_date: str
    expected_delivery_date: Optional[str]
    status: str
    total_amount: Optional[float]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- purchase_order_items ----
class PurchaseOrderItemRow(TypedDict):
    id: str
    purchase_order_id: Optional[str]
    product_id: Optional[str]
    quantity: int
    unit_price: float
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _PurchaseOrderItemInsertBase(TypedDict):
    quantity: int
    unit_price: float


class PurchaseOrderItemInsert(_PurchaseOrderItemInsertBase, total=False):
    id: str
    purchase_order_id: Optional[str]
    product_id: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class PurchaseOrderItemUpdate(TypedDict, total=False):
    id: str
    purchase_order_id: Optional[str]
    product_id: Optional[str]
    quantity: int
    unit_price: float
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- sales_orders ----
class SalesOrderRow(TypedDict):
    id: str
    so_number: Optional[str]
    customer_name: str
    order_date: str
    status: str
    total_amount: Optional[float]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _SalesOrderInsertBase(TypedDict):
    customer_name: str
    order_date: str


class SalesOrderInsert(_SalesOrderInsertBase, total=False):
    id: str
    so_number: Optional[str]
    status: str
    total_amount: Optional[float]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class SalesOrderUpdate(TypedDict, total=False):
    id: str
    so_number: Optional[str]
    customer_name: str
    order_date: str
    status: str
    total_amount: Optional[float]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- sales_order_items ----
class SalesOrderItemRow(TypedDict):
    id: str
    sales_order_id: Optional[str]
    product_id: Optional[str]
    quantity: int
    unit_price: float
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _SalesOrderItemInsertBase(TypedDict):
    quantity: int
    unit_price: float


class SalesOrderItemInsert(_SalesOrderItemInsertBase, total=False):
    id: str
    sales_order_id: Optional[str]
    product_id: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class SalesOrderItemUpdate(TypedDict, total=False):
    id: str
    sales_order_id: Optional[str]
    product_id: Optional[str]
    quantity: int
    unit_price: float
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- quality_control_records ----
class QualityControlRecordRow(TypedDict):
    id: str
    batch_id: Optional[str]
    inspection_date: str
    inspector_id: Optional[str]
    result: str
    notes: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _QualityControlRecordInsertBase(TypedDict):
    inspection_date: str
    result: str


class QualityControlRecordInsert(_QualityControlRecordInsertBase, total=False):
    id: str
    batch_id: Optional[str]
    inspector_id: Optional[str]
    notes: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class QualityControlRecordUpdate(TypedDict, total=False):
    id: str
    batch_id: Optional[str]
    inspection_date: str
    inspector_id: Optional[str]
    result: str
    notes: Optional[str]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- roles ----
class RoleRow(TypedDict):
    id: str
    name: str
    description: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _RoleInsertBase(TypedDict):
    name: str


class RoleInsert(_RoleInsertBase, total=False):
    id: str
    description: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class RoleUpdate(TypedDict, total=False):
    id: str
    name: str
    description: Optional[str]
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- user_roles (composite key, no surrogate id) ----
class UserRoleRow(TypedDict):
    user_id: str
    role_id: str
    created_at: str
    updated_at: Optional[str]


class _UserRoleInsertBase(TypedDict):
    user_id: str
    role_id: str


class UserRoleInsert(_UserRoleInsertBase, total=False):
    created_at: str
    updated_at: Optional[str]


class UserRoleUpdate(TypedDict, total=False):
    user_id: str
    role_id: str
    updated_at: Optional[str]


# ---- settings (unique natural key) ----
class SettingRow(TypedDict):
    id: str
    key: str
    value: Any
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _SettingInsertBase(TypedDict):
    key: str


class SettingInsert(_SettingInsertBase, total=False):
    id: str
    value: Any
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class SettingUpdate(TypedDict, total=False):
    id: str
    key: str
    value: Any
    user_id: Optional[str]
    updated_at: Optional[str]


# ---- reports ----
class ReportRow(TypedDict):
    id: str
    name: str
    report_type: str
    period: Optional[str]
    format: Optional[str]
    generated_by_user_id: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class _ReportInsertBase(TypedDict):
    name: str
    report_type: str


class ReportInsert(_ReportInsertBase, total=False):
    id: str
    period: Optional[str]
    format: Optional[str]
    generated_by_user_id: Optional[str]
    user_id: Optional[str]
    created_at: str
    updated_at: Optional[str]


class ReportUpdate(TypedDict, total=False):
    id: str
    name: str
    report_type: str
    period: Optional[str]
    format: Optional[str]
    generated_by_user_id: Optional[str]
    user_id: Optional[str]
    updated_at: Optional[str]
