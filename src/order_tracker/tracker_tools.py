"""
Tool Endpoints for the Order Tracker
Defines the public operations: lookup_order, refresh_order,
backup_request_link, remember_input and restore_input.

These functions are the public API of the order tracker. Every failure is
reported as a dict with ``success``, ``error`` and ``error_code``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .backup_request import build_backup_request_url
from .input_store import InputStore
from .lookup_orchestrator import LookupOrchestrator, TrackerContext
from .models import LookupResult, LookupStatus
from .tracker_report import render_lookup_result


# ======================================================================
# Helpers
# ======================================================================

def _error(message: str, error_code: str, **extra: Any) -> Dict[str, Any]:
    d: Dict[str, Any] = {"success": False, "error": message, "error_code": error_code}
    d.update(extra)
    return d


def _result_dict(result: LookupResult) -> Dict[str, Any]:
    d = result.to_dict()
    d["report"] = render_lookup_result(result)
    return d


def _input_store(context: TrackerContext) -> InputStore:
    return InputStore(
        storage_file=context.settings.storage_file,
        storage_key=context.settings.storage_key,
    )


# ======================================================================
# Tool 1: lookup_order
# ======================================================================

async def lookup_order(
    context: TrackerContext,
    code: Optional[str],
    force_refresh: bool = False,
) -> Dict[str, Any]:
    """Look up an order code and return the display-ready result.

    Blank input returns ``success=False`` with ``INVALID_INPUT``; transport
    and parse failures carry the source's error code.
    """
    result = await LookupOrchestrator(context).lookup(code, force_refresh=force_refresh)
    d = _result_dict(result)
    if result.status == LookupStatus.INVALID_INPUT:
        d.update(success=False, error=result.message, error_code="INVALID_INPUT")
    return d


# ======================================================================
# Tool 2: refresh_order
# ======================================================================

async def refresh_order(context: TrackerContext, code: Optional[str]) -> Dict[str, Any]:
    """Same as lookup_order, bypassing the cached sheet."""
    return await lookup_order(context, code, force_refresh=True)


# ======================================================================
# Tool 3: backup_request_link
# ======================================================================

async def backup_request_link(
    context: TrackerContext,
    code: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the WhatsApp backup-request link for an order.

    Uses the context's last result when ``code`` is omitted or matches it;
    otherwise the order is looked up first.
    """
    orchestrator = LookupOrchestrator(context)
    result = context.last_result
    wanted = str(code or "").strip()
    if wanted and (result is None or result.code != wanted):
        result = await orchestrator.lookup(wanted)

    if result is None or result.record is None:
        return _error("Order belum ditemukan.", "ORDER_NOT_FOUND")
    if not result.can_request_backup:
        return _error(
            "Backup hanya tersedia untuk project Approved dengan file tersedia.",
            "BACKUP_NOT_AVAILABLE",
        )

    try:
        prices, _promo = await orchestrator.ensure_pricing()
    except Exception as e:
        context.logger.error(f"Pricing unavailable for backup link: {e}", component="Backup")
        return _error(str(e), "PRICING_UNAVAILABLE")

    url, error, error_code = build_backup_request_url(
        prices.whatsapp,
        prices.backup_request_message,
        result.record,
    )
    if error:
        context.logger.warning(error, component="Backup")
        return _error(error, error_code)

    return {"success": True, "url": url, "code": result.code}


# ======================================================================
# Tools 4-5: persisted input
# ======================================================================

def remember_input(context: TrackerContext, code: Optional[str]) -> Dict[str, Any]:
    """Persist the last entered order code (trimmed)."""
    try:
        value = _input_store(context).save(code or "")
    except OSError as e:
        return _error(str(e), "STORAGE_ERROR")
    return {"success": True, "value": value}


def restore_input(context: TrackerContext) -> Dict[str, Any]:
    """Return the last persisted order code, or "" when none is stored."""
    return {"success": True, "value": _input_store(context).restore()}
