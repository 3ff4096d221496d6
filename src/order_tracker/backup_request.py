"""
Backup Request Link
Builds the WhatsApp link a customer uses to ask for their project backup.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple
from urllib.parse import quote

from . import tracker_config as cfg
from .models import OrderRecord

_NEWLINE_RE = re.compile(r"%0A", re.IGNORECASE)
_PLACEHOLDERS = (
    ("judul", "title"),
    ("code_projek", "project_code"),
    ("code_order", "order_code"),
)


def can_request_backup(status_progress: Optional[str], status_file: Optional[str]) -> bool:
    """Only approved projects whose files are still available."""
    return (
        str(status_progress or "").strip() == cfg.BACKUP_READY_PROGRESS
        and str(status_file or "").strip() == cfg.BACKUP_READY_FILE_STATUS
    )


def render_backup_message(template: str, record: OrderRecord) -> str:
    """Fill ``{{judul}}``, ``{{code_projek}}`` and ``{{code_order}}``; ``%0A`` becomes a newline."""
    message = _NEWLINE_RE.sub("\n", template.strip())
    for placeholder, attr in _PLACEHOLDERS:
        value = getattr(record, attr) or "-"
        pattern = re.compile(r"{{\s*" + placeholder + r"\s*}}", re.IGNORECASE)
        message = pattern.sub(lambda _m, v=value: v, message)
    return message


def build_backup_request_url(
    whatsapp: str,
    template: str,
    record: OrderRecord,
) -> Tuple[str, str, str]:
    """Return (url, error, error_code); url is "" when configuration is missing."""
    raw_number = str(whatsapp or "").strip()
    template_raw = str(template or "").strip()
    if not raw_number or not template_raw:
        return "", "Konfigurasi WhatsApp belum tersedia.", "WHATSAPP_NOT_CONFIGURED"

    number = re.sub(r"[^\d]", "", raw_number)
    if not number:
        return "", "Nomor WhatsApp tidak valid.", "WHATSAPP_INVALID_NUMBER"

    message = render_backup_message(template_raw, record)
    encoded = quote(message, safe="!~*'()")
    return f"{cfg.WHATSAPP_BASE_URL}{number}?text={encoded}", "", ""
