"""
Shared constants for the backend application.
"""
from decimal import Decimal

# ---------------------------------------------------------------------------
# Principals and roles
# ---------------------------------------------------------------------------
ROLE_SUPER_ADMIN = "SUPER_ADMIN"
ROLE_ADMIN = "ADMIN"
ROLE_STAFF = "STAFF"

# ---------------------------------------------------------------------------
# Pesanan (order) statuses
# ---------------------------------------------------------------------------
ORDER_PENDING = "PENDING"
ORDER_PROCESSING = "PROCESSING"
ORDER_READY = "READY"
ORDER_SHIPPED = "SHIPPED"
ORDER_COMPLETED = "COMPLETED"
ORDER_CANCELLED = "CANCELLED"

ORDER_STATUSES = (
    ORDER_PENDING, ORDER_PROCESSING, ORDER_READY,
    ORDER_SHIPPED, ORDER_COMPLETED, ORDER_CANCELLED,
)

# Terminal statuses map to an empty tuple
ORDER_STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    ORDER_PENDING: (ORDER_PROCESSING, ORDER_CANCELLED),
    ORDER_PROCESSING: (ORDER_READY, ORDER_CANCELLED),
    ORDER_READY: (ORDER_SHIPPED, ORDER_CANCELLED),
    ORDER_SHIPPED: (ORDER_COMPLETED, ORDER_CANCELLED),
    ORDER_COMPLETED: (),
    ORDER_CANCELLED: (),
}

# Timestamp column set when an order enters the status
ORDER_STATUS_TIMESTAMP = {
    ORDER_PROCESSING: "processed_at",
    ORDER_READY: "ready_at",
    ORDER_SHIPPED: "shipped_at",
    ORDER_COMPLETED: "completed_at",
    ORDER_CANCELLED: "cancelled_at",
}

PAYMENT_STATUSES = ("PENDING", "PARTIAL", "PAID", "EXPIRED", "FAILED", "REFUNDED")
PAYMENT_PAID = "PAID"
PAYMENT_TYPES = ("REGULAR", "SPLIT")
DELIVERY_TYPES = ("PICKUP", "DELIVEREE", "FORWARDER")

STATUS_TYPE_ORDER = "ORDER"
STATUS_TYPE_PAYMENT = "PAYMENT"

# ---------------------------------------------------------------------------
# Kupon
# ---------------------------------------------------------------------------
JENIS_DISKON_PERSENTASE = "persentase"
JENIS_DISKON_JUMLAH_TETAP = "jumlah_tetap"
KUPON_KODE_CHARSET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------
ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
ALLOWED_REVIEW_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png"}
MAX_IMAGE_BYTES = 2 * 1024 * 1024
UPLOAD_MAX_SIDE_PX = 1600

# ---------------------------------------------------------------------------
# Decimal helpers
# ---------------------------------------------------------------------------
ZERO = Decimal("0")
ONE_CENT = Decimal("0.01")
PERCENT_BASE = Decimal("100")

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100

# ---------------------------------------------------------------------------
# Permissions ("<modul>:<action>")
# ---------------------------------------------------------------------------
PERMISSION_MODULES = (
    "admin", "buyer", "wilayah", "master", "produk",
    "kupon", "pesanan", "ulasan", "konten",
)
PERMISSION_ACTIONS = ("read", "create", "update", "delete")

# Role -> permission kodes; SUPER_ADMIN bypasses the check entirely
ROLE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    ROLE_SUPER_ADMIN: tuple(f"{m}:{a}" for m in PERMISSION_MODULES for a in PERMISSION_ACTIONS),
    ROLE_ADMIN: tuple(
        f"{m}:{a}" for m in PERMISSION_MODULES if m != "admin" for a in PERMISSION_ACTIONS
    ),
    ROLE_STAFF: tuple(f"{m}:read" for m in PERMISSION_MODULES if m != "admin") + (
        "pesanan:update", "ulasan:update",
    ),
}
