"""
Pydantic models for the pricing configuration and promo documents.
Unknown fields are kept so package data the tracker does not use still
reaches a custom pricing calculation.

Documents are edited by hand, so null or non-numeric values fall back to
the same defaults as a missing field instead of rejecting the document.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .order_code import to_number


def _number_or(value: Any, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    number = to_number(value)
    return default if number is None else number


def _text_or(value: Any, default: str) -> str:
    if value is None:
        return default
    text = str(value)
    return text if text.strip() else default


def _objects(value: Any) -> List[Any]:
    """Keep only the mapping entries of a list; anything else is empty."""
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, (dict, BaseModel))]


class DeadlineTier(BaseModel):
    """Surcharge applied when the deadline is at most ``days`` days."""
    model_config = ConfigDict(extra="allow")

    days: Optional[float] = Field(None, description="Upper bound (inclusive) in days")
    percent: float = Field(0, description="Surcharge as a percent of the base fee")
    amount: Optional[float] = Field(None, description="Fixed surcharge, overrides percent")

    @field_validator("days", "amount", mode="before")
    @classmethod
    def optional_number(cls, v: Any) -> Optional[float]:
        return _number_or(v, None)

    @field_validator("percent", mode="before")
    @classmethod
    def number_or_zero(cls, v: Any) -> float:
        return _number_or(v, 0)


class PricingPackage(BaseModel):
    """One sellable package from the pricing document."""
    model_config = ConfigDict(extra="allow")

    id: Any = None
    name: str = "-"
    price: float = 0
    included_revisions: Optional[float] = None
    revisions: Optional[float] = None
    extra_revision_percent: float = 0
    overtime_rate: Optional[float] = None
    free_minutes: Optional[float] = None
    deadline_tiers: Optional[List[DeadlineTier]] = None
    buffer_fee: Optional[float] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_or_dash(cls, v: Any) -> str:
        return _text_or(v, "-")

    @field_validator("price", "extra_revision_percent", mode="before")
    @classmethod
    def number_or_zero(cls, v: Any) -> float:
        return _number_or(v, 0)

    @field_validator(
        "included_revisions", "revisions", "overtime_rate", "free_minutes", "buffer_fee",
        mode="before",
    )
    @classmethod
    def optional_number(cls, v: Any) -> Optional[float]:
        return _number_or(v, None)

    @field_validator("deadline_tiers", mode="before")
    @classmethod
    def tier_list(cls, v: Any) -> Optional[List[Any]]:
        return None if v is None else _objects(v)

    @property
    def included(self) -> int:
        if self.included_revisions is not None:
            return int(self.included_revisions)
        if self.revisions is not None:
            return int(self.revisions)
        return 0


class PromoDocument(BaseModel):
    """Promo rules consumed by the pricing calculation."""
    model_config = ConfigDict(extra="allow")

    active: bool = False
    percent: float = 0
    amount: float = 0
    package_ids: List[Any] = Field(default_factory=list)

    @field_validator("active", mode="before")
    @classmethod
    def truthy(cls, v: Any) -> bool:
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes", "ya")
        return bool(v)

    @field_validator("percent", "amount", mode="before")
    @classmethod
    def number_or_zero(cls, v: Any) -> float:
        return _number_or(v, 0)

    @field_validator("package_ids", mode="before")
    @classmethod
    def id_list(cls, v: Any) -> List[Any]:
        if v is None:
            return []
        if isinstance(v, (list, tuple)):
            return [pid for pid in v if pid is not None]
        return [v]

    def applies_to(self, package_id: Any) -> bool:
        if not self.active:
            return False
        if not self.package_ids:
            return True
        return str(package_id) in {str(pid) for pid in self.package_ids}


class PricingDocument(BaseModel):
    """The packages/contact document served by the pricing configuration."""
    model_config = ConfigDict(extra="allow")

    packages: List[PricingPackage] = Field(default_factory=list)
    whatsapp: str = ""
    backup_request_message: str = ""
    overtime_rate: float = 0
    free_minutes: Optional[float] = None
    deadline_tiers: List[DeadlineTier] = Field(default_factory=list)
    buffer_fee: float = 0
    promo: Optional[PromoDocument] = None

    @field_validator("packages", "deadline_tiers", mode="before")
    @classmethod
    def object_list(cls, v: Any) -> List[Any]:
        return _objects(v)

    @field_validator("whatsapp", "backup_request_message", mode="before")
    @classmethod
    def text_or_blank(cls, v: Any) -> str:
        return _text_or(v, "")

    @field_validator("overtime_rate", "buffer_fee", mode="before")
    @classmethod
    def number_or_zero(cls, v: Any) -> float:
        return _number_or(v, 0)

    @field_validator("free_minutes", mode="before")
    @classmethod
    def optional_number(cls, v: Any) -> Optional[float]:
        return _number_or(v, None)

    @field_validator("promo", mode="before")
    @classmethod
    def promo_object(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, BaseModel)) else None

    def find_package(self, package_id: Any) -> Optional[PricingPackage]:
        """Match by string form of the id, first match wins."""
        wanted = str(package_id)
        for pkg in self.packages:
            if str(pkg.id) == wanted:
                return pkg
        return None


def load_pricing_document(data: Optional[Dict[str, Any]]) -> PricingDocument:
    return PricingDocument.model_validate(data or {})


def load_promo_document(data: Optional[Dict[str, Any]]) -> PromoDocument:
    return PromoDocument.model_validate(data if isinstance(data, dict) else {})
