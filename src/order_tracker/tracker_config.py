"""
Order Tracker Configuration
Loads environment variables (optionally from a project .env file) and
provides defaults for the order tracker.
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Project root (two levels up from this file: src/order_tracker/tracker_config.py)
# ---------------------------------------------------------------------------
TRACKER_ROOT = Path(__file__).parent
PROJECT_ROOT = TRACKER_ROOT.parent.parent

env_file = PROJECT_ROOT / ".env"
if env_file.exists():
    load_dotenv(env_file)

# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------
CSV_URL: str = os.getenv(
    "ORDER_TRACKER_CSV_URL",
    "https://docs.google.com/spreadsheets/d/e/2PACX-1vRZiGRgDxVjlJupwCAb29TPzNlksU5kISHLkmfpqbdwO_NQ__PEOk8FxuHe_UwzxWe5pcnfTJ1MFX3b/pub?gid=0&single=true&output=csv",
)
PRICES_SOURCE: str = os.getenv(
    "ORDER_TRACKER_PRICES_SOURCE",
    str(PROJECT_ROOT / "config" / "prices.json"),
)
# Empty means "use the promo block embedded in the prices document"
PROMO_SOURCE: str = os.getenv("ORDER_TRACKER_PROMO_SOURCE", "")
HTTP_TIMEOUT: int = int(os.getenv("ORDER_TRACKER_HTTP_TIMEOUT", "20"))

# ---------------------------------------------------------------------------
# Persisted input
# ---------------------------------------------------------------------------
STORAGE_KEY: str = os.getenv("ORDER_TRACKER_STORAGE_KEY", "order_tracker_last_input")
STORAGE_FILE: str = os.getenv(
    "ORDER_TRACKER_STORAGE_FILE",
    str(PROJECT_ROOT / "data" / "order_tracker_state.json"),
)

# ---------------------------------------------------------------------------
# Locale
# ---------------------------------------------------------------------------
TIME_ZONE: str = os.getenv("ORDER_TRACKER_TIMEZONE", "Asia/Jakarta")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_DIR: str = os.getenv("ORDER_TRACKER_LOG_DIR", str(PROJECT_ROOT / "logs" / "order_tracker"))
LOG_LEVEL: str = os.getenv("ORDER_TRACKER_LOG_LEVEL", "INFO").upper()
AUDIT_ENABLED: bool = os.getenv("ORDER_TRACKER_AUDIT_ENABLED", "true").lower() == "true"
AUDIT_LOG_MAX_MB: int = int(os.getenv("ORDER_TRACKER_AUDIT_LOG_MAX_MB", "10"))
AUDIT_LOG_BACKUP_COUNT: int = int(os.getenv("ORDER_TRACKER_AUDIT_LOG_BACKUP_COUNT", "5"))

# ---------------------------------------------------------------------------
# Order code format
# ---------------------------------------------------------------------------
CODE_PREFIX = "KYS-"

# ---------------------------------------------------------------------------
# Sheet columns: semantic key -> accepted header spellings (lower-case)
# ---------------------------------------------------------------------------
COLUMN_HEADERS = {
    "title": ("judul",),
    "status_progress": ("status progres",),
    "order_date": ("tanggal order",),
    "finish_date": ("tanggal selesai",),
    "backup_expired": ("expired backup", "backup expired"),
    "status": ("status file", "status"),
    "project_code": ("code projek",),
    "order_code": ("code order",),
    "revision": ("revisi",),
}

DEFAULT_COLUMN_INDEXES = {
    "title": 0,
    "status_progress": 1,
    "order_date": 2,
    "finish_date": 3,
    "backup_expired": 4,
    "status": 5,
    "project_code": 6,
    "order_code": 7,
    "revision": 8,
}

# ---------------------------------------------------------------------------
# Pricing defaults
# ---------------------------------------------------------------------------
DEFAULT_FREE_MINUTES = 5

# ---------------------------------------------------------------------------
# Backup request
# ---------------------------------------------------------------------------
BACKUP_READY_PROGRESS = "Approved"
BACKUP_READY_FILE_STATUS = "File Tersedia"
WHATSAPP_BASE_URL = "https://wa.me/"

# ---------------------------------------------------------------------------
# User-facing messages
# ---------------------------------------------------------------------------
MSG_ENTER_CODE = "Masukkan Code Order dulu"
MSG_NOT_FOUND = "Code Order tidak ditemukan silahkan konfirmasi ke Freelancer."
MSG_LOAD_ERROR = "Terjadi kesalahan saat memuat data. Silakan coba lagi."
MSG_PACKAGE_NOT_FOUND = "Detail paket dari code KYS tidak ditemukan pada konfigurasi harga terbaru."
MSG_PLAIN_CODE = "Rincian harga akan muncul otomatis untuk code baru (KYS)."


@dataclass
class TrackerSettings:
    """Snapshot of the configuration above, overridable per context."""
    csv_url: str = CSV_URL
    prices_source: str = PRICES_SOURCE
    promo_source: str = PROMO_SOURCE
    http_timeout: int = HTTP_TIMEOUT
    storage_key: str = STORAGE_KEY
    storage_file: str = STORAGE_FILE
    time_zone: str = TIME_ZONE
    log_dir: str = LOG_DIR
    log_level: str = LOG_LEVEL
    audit_enabled: bool = AUDIT_ENABLED
    code_prefix: str = CODE_PREFIX
    default_column_indexes: dict = field(
        default_factory=lambda: dict(DEFAULT_COLUMN_INDEXES)
    )

    def with_overrides(self, **overrides) -> "TrackerSettings":
        """Return a copy with the given fields replaced (None values ignored)."""
        clean = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **clean)
