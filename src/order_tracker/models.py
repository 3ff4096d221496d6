"""
Order Tracker Data Models
Dataclasses and enumerations passed between the tracker components.

Pure definitions -- no side effects, no imports of external services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Lookup state machine
# ---------------------------------------------------------------------------

class LookupStatus(Enum):
    """Lifecycle states for a single lookup request."""
    IDLE = "idle"
    LOADING = "loading"
    INVALID_INPUT = "invalid-input"
    FOUND_PLAIN = "found-plain"
    FOUND_DECODABLE = "found-decodable"
    NOT_FOUND = "not-found"
    ERROR = "error"


class PricingStatus(Enum):
    """Pricing sub-states, only entered for decodable codes."""
    NONE = "none"
    PENDING = "pricing-pending"
    READY = "pricing-ready"
    UNRESOLVED = "pricing-unresolved"


# ---------------------------------------------------------------------------
# Status display
# ---------------------------------------------------------------------------

NEUTRAL_COLOR = "#9e9e9e"


class ProgressStatus(Enum):
    """Known progress values from the 'Status Progres' column."""
    WAITING_ASSET = "waiting asset"
    PREPARING_ASSET = "preparing asset"
    ONGOING = "ongoing"
    RENDERING = "rendering"
    REVISION = "revision"
    PAYMENT = "payment"
    APPROVED = "approved"
    NONE = "none"
    UNKNOWN = "unknown"

    @property
    def color(self) -> str:
        return _PROGRESS_COLORS.get(self, NEUTRAL_COLOR)

    @classmethod
    def from_text(cls, value: Optional[str]) -> "ProgressStatus":
        text = str(value or "").strip().lower()
        if not text:
            return cls.NONE
        if text.startswith("ongoing"):
            return cls.ONGOING
        for member in cls:
            if member not in (cls.ONGOING, cls.UNKNOWN) and member.value == text:
                return member
        if text == "kosong" or "none" in text or "kosong" in text:
            return cls.NONE
        return cls.UNKNOWN


_PROGRESS_COLORS = {
    ProgressStatus.WAITING_ASSET: "#ff9800",
    ProgressStatus.PREPARING_ASSET: "#ffc107",
    ProgressStatus.ONGOING: "#fbc02d",
    ProgressStatus.RENDERING: "#2196f3",
    ProgressStatus.REVISION: "#9c27b0",
    ProgressStatus.PAYMENT: "#4caf50",
    ProgressStatus.APPROVED: "#2e7d32",
}


class FileStatusTone(Enum):
    """Display tone for the 'Status File' column."""
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    NEUTRAL = "neutral"

    @property
    def color(self) -> str:
        if self is FileStatusTone.AVAILABLE:
            return "#4CAF50"
        if self is FileStatusTone.UNAVAILABLE:
            return "#F44336"
        return ""

    @classmethod
    def from_text(cls, value: Optional[str]) -> "FileStatusTone":
        text = str(value or "").strip().lower()
        if text == "file tersedia":
            return cls.AVAILABLE
        if text == "file tidak tersedia":
            return cls.UNAVAILABLE
        return cls.NEUTRAL


# ---------------------------------------------------------------------------
# Decoded order code
# ---------------------------------------------------------------------------

@dataclass
class DecodedPayload:
    """Pricing parameters embedded in a KYS order code."""
    package_id: float = 0
    duration: float = 0
    deadline: float = 0
    order_date: Any = None
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_id": self.package_id,
            "duration": self.duration,
            "deadline": self.deadline,
            "order_date": self.order_date,
        }


# ---------------------------------------------------------------------------
# Sheet models
# ---------------------------------------------------------------------------

@dataclass
class ColumnMap:
    """Header-derived column indexes; -1 means the header was not found."""
    indexes: Dict[str, int] = field(default_factory=dict)

    def mapped(self, key: str) -> int:
        return self.indexes.get(key, -1)


@dataclass
class OrderRecord:
    """Normalized values of one matched sheet row."""
    title: str = "-"
    status_progress: str = ""
    order_date: str = "-"
    finish_date: str = "-"
    finish_date_value: Optional[datetime] = None
    backup_expired: str = "-"
    status_file: str = ""
    project_code: str = "-"
    order_code: str = "-"
    revision: int = 0

    # Metadata (not from CSV)
    row_number: int = 0  # 0-based index into the parsed rows, header is 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "judul": self.title,
            "status_progres": self.status_progress,
            "tanggal_order": self.order_date,
            "tanggal_selesai": self.finish_date,
            "backup_expired": self.backup_expired,
            "status_file": self.status_file,
            "code_projek": self.project_code,
            "code_order": self.order_code,
            "revisi": self.revision,
        }


# ---------------------------------------------------------------------------
# Pricing models
# ---------------------------------------------------------------------------

@dataclass
class PriceBreakdown:
    """Output of the package pricing calculation."""
    base_final: int = 0
    over_min: float = 0
    over_rate: int = 0
    over_cost: int = 0
    surcharge_val: int = 0
    buf_val: int = 0

    @property
    def subtotal(self) -> int:
        return self.base_final + self.over_cost + self.surcharge_val + self.buf_val

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_final": self.base_final,
            "over_min": self.over_min,
            "over_rate": self.over_rate,
            "over_cost": self.over_cost,
            "surcharge_val": self.surcharge_val,
            "buf_val": self.buf_val,
        }


@dataclass
class RevisionFee:
    """Extra-revision charge beyond the package's included quota."""
    used: int = 0
    included: int = 0
    extra_count: int = 0
    percent: float = 0
    fee: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "used": self.used,
            "included": self.included,
            "extra_count": self.extra_count,
            "percent": self.percent,
            "fee": self.fee,
        }


@dataclass
class Invoice:
    """Itemized invoice for one decoded order."""
    package_id: Any = None
    package_name: str = "-"
    duration: float = 0
    deadline: float = 0
    breakdown: PriceBreakdown = field(default_factory=PriceBreakdown)
    subtotal: int = 0
    revision: RevisionFee = field(default_factory=RevisionFee)
    total: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "package_id": self.package_id,
            "package_name": self.package_name,
            "duration": self.duration,
            "deadline": self.deadline,
            "breakdown": self.breakdown.to_dict(),
            "subtotal": self.subtotal,
            "revision": self.revision.to_dict(),
            "total": self.total,
        }


# ---------------------------------------------------------------------------
# Lookup result
# ---------------------------------------------------------------------------

@dataclass
class LookupResult:
    """Display-ready outcome of one lookup."""
    sequence: int = 0
    code: str = ""
    status: LookupStatus = LookupStatus.IDLE
    pricing_status: PricingStatus = PricingStatus.NONE
    message: str = ""
    record: Optional[OrderRecord] = None
    decoded: Optional[DecodedPayload] = None
    invoice: Optional[Invoice] = None
    progress: ProgressStatus = ProgressStatus.NONE
    file_tone: FileStatusTone = FileStatusTone.NEUTRAL
    can_request_backup: bool = False
    can_export_invoice: bool = False
    show_finish_warning: bool = False
    error: str = ""
    error_code: str = ""
    notes: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.error_code

    @property
    def found(self) -> bool:
        return self.status in (LookupStatus.FOUND_PLAIN, LookupStatus.FOUND_DECODABLE)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "success": self.success,
            "sequence": self.sequence,
            "status": self.status.value,
            "message": self.message,
        }
        if self.error:
            d["error"] = self.error
            d["error_code"] = self.error_code
        if self.record is not None:
            d["order"] = self.record.to_dict()
            d["progress"] = {
                "status": self.progress.value,
                "color": self.progress.color,
            }
            d["file_status_tone"] = self.file_tone.value
            d["can_request_backup"] = self.can_request_backup
        if self.decoded is not None:
            d["decoded"] = self.decoded.to_dict()
            d["pricing_status"] = self.pricing_status.value
        if self.invoice is not None:
            d["invoice"] = self.invoice.to_dict()
            d["can_export_invoice"] = self.can_export_invoice
            d["show_finish_warning"] = self.show_finish_warning
        if self.notes:
            d["notes"] = self.notes
        return d
