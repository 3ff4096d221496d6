"""
Lookup Orchestrator
Main coordinator for an order lookup: load (or reuse) the sheet, find the
row, decode KYS codes, price them and produce a display-ready result.

All caches live on a TrackerContext owned by the caller. The only awaits are
the sheet fetch and the pricing fetch; everything else is synchronous.

Concurrent lookups are not cancelled or de-duplicated. Each result carries
its sequence number and the last one to finish becomes
``context.last_result``, even if it was started earlier.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from . import tracker_config as cfg
from .backup_request import can_request_backup
from .csv_ingestor import Row, get_cell_value, map_columns, parse_csv
from .date_normalizer import (
    date_key,
    format_finish_date,
    format_tracker_date,
    format_ui_date,
    parse_ddmmyyyy,
    parse_decoded_order_date,
)
from .lookup_audit_logger import LookupAuditLogger
from .models import (
    ColumnMap,
    DecodedPayload,
    FileStatusTone,
    LookupResult,
    LookupStatus,
    OrderRecord,
    PricingStatus,
    ProgressStatus,
)
from .order_code import BAD_BASE64, BAD_JSON, inspect_order_code, is_self_describing, normalize_order_code
from .price_engine import PackageNotFoundError, parse_revision_count, price_decoded_order
from .pricing_calculation import CalcTotal
from .pricing_config import PricingDocument, PromoDocument, load_pricing_document, load_promo_document
from .sheet_source import SheetSource
from .tracker_logger import TrackerLogger, get_logger


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TrackerContext:
    """Everything one tracker session needs; passed explicitly, never global."""
    settings: cfg.TrackerSettings = field(default_factory=cfg.TrackerSettings)
    source: Optional[SheetSource] = None
    logger: Optional[TrackerLogger] = None
    audit_logger: Optional[LookupAuditLogger] = None
    calc: Optional[CalcTotal] = None
    clock: Callable[[], datetime] = _utc_now

    # Caches
    order_rows: Optional[List[Row]] = None
    order_columns: Optional[ColumnMap] = None
    prices: Optional[PricingDocument] = None
    promo: Optional[PromoDocument] = None

    # Session state
    state: LookupStatus = LookupStatus.IDLE
    sequence: int = 0
    last_result: Optional[LookupResult] = None

    def __post_init__(self) -> None:
        if self.source is None:
            self.source = SheetSource(
                csv_url=self.settings.csv_url,
                prices_source=self.settings.prices_source,
                promo_source=self.settings.promo_source,
                timeout=self.settings.http_timeout,
            )
        if self.logger is None:
            self.logger = get_logger(self.settings)
        if self.audit_logger is None and self.settings.audit_enabled:
            self.audit_logger = LookupAuditLogger(log_dir=self.settings.log_dir)

    def next_sequence(self) -> int:
        self.sequence += 1
        return self.sequence

    def close(self) -> None:
        if self.logger is not None:
            self.logger.close()
        if self.audit_logger is not None:
            self.audit_logger.close()


# ----------------------------------------------------------------------
# Row helpers
# ----------------------------------------------------------------------

def find_order_row(
    rows: Sequence[Row],
    columns: Optional[ColumnMap],
    normalized_code: str,
    defaults: Optional[dict] = None,
) -> Tuple[int, Optional[Row]]:
    """First data row whose normalized order code matches; header skipped."""
    for idx, row in enumerate(rows[1:], start=1):
        cell = get_cell_value(columns, row, "order_code", defaults)
        if normalize_order_code(cell) == normalized_code:
            return idx, row
    return -1, None


def build_order_record(
    columns: Optional[ColumnMap],
    row: Row,
    row_number: int = 0,
    defaults: Optional[dict] = None,
) -> OrderRecord:
    def cell(key: str) -> str:
        return get_cell_value(columns, row, key, defaults)

    finish_raw = cell("finish_date")
    return OrderRecord(
        title=cell("title") or "-",
        status_progress=cell("status_progress"),
        order_date=format_tracker_date(cell("order_date")),
        finish_date=format_finish_date(finish_raw),
        finish_date_value=parse_ddmmyyyy(finish_raw),
        backup_expired=cell("backup_expired") or "-",
        status_file=cell("status"),
        project_code=cell("project_code") or "-",
        order_code=cell("order_code") or "-",
        revision=parse_revision_count(cell("revision")),
        row_number=row_number,
    )


def invoice_controls(
    finish_date: Optional[datetime],
    now: datetime,
    time_zone: str = cfg.TIME_ZONE,
) -> Tuple[bool, bool]:
    """Return (can_export_invoice, show_finish_warning).

    Export is only offered on the finish day itself; the warning is shown
    while the finish day is still ahead.
    """
    if finish_date is None:
        return False, False
    today = date_key(now, time_zone)
    finish = date_key(finish_date, time_zone)
    return finish == today, finish > today


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------

class LookupOrchestrator:
    """Orchestrates sheet loading, row matching, decoding and pricing."""

    def __init__(self, context: Optional[TrackerContext] = None):
        self.context = context or TrackerContext()

    @property
    def log(self) -> TrackerLogger:
        return self.context.logger

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load_order_rows(self, force_refresh: bool = False) -> List[Row]:
        """Return cached rows, fetching the sheet on first use or when forced.

        The cache is only replaced after a successful fetch.
        """
        ctx = self.context
        if ctx.order_rows is not None and not force_refresh:
            if ctx.order_columns is None:
                ctx.order_columns = map_columns(ctx.order_rows[0] if ctx.order_rows else [])
            return ctx.order_rows

        text = await asyncio.to_thread(ctx.source.fetch_csv_text, force_refresh)
        rows = parse_csv(text)
        ctx.order_rows = rows
        ctx.order_columns = map_columns(rows[0] if rows else [])
        self.log.log_sheet_loaded(len(rows), force_refresh)
        return rows

    async def ensure_pricing(self) -> Tuple[PricingDocument, PromoDocument]:
        """Fetch the pricing and promo documents once per session."""
        ctx = self.context
        if ctx.prices is not None and ctx.promo is not None:
            return ctx.prices, ctx.promo

        prices_raw, promo_raw = await asyncio.to_thread(ctx.source.fetch_pricing)
        prices = load_pricing_document(prices_raw)
        promo = load_promo_document(promo_raw)
        ctx.prices, ctx.promo = prices, promo
        self.log.info(f"Loaded pricing with {len(prices.packages)} package(s)", component="Pricing")
        return prices, promo

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def lookup(self, code: Optional[str], force_refresh: bool = False) -> LookupResult:
        """Run one lookup and return its result.

        Pipeline:
        1. Normalize the input (blank input never fetches)
        2. Load or reuse the sheet rows
        3. Find the first matching row
        4. Decode the code if it is a KYS code
        5. Price the decoded package
        """
        ctx = self.context
        trimmed = str(code or "").strip()
        result = LookupResult(sequence=ctx.next_sequence(), code=trimmed)
        started = time.time()

        normalized = normalize_order_code(trimmed)
        if not normalized:
            result.status = LookupStatus.INVALID_INPUT
            result.message = cfg.MSG_ENTER_CODE
            return result

        self.log.log_lookup_start(result.sequence, trimmed, force_refresh)
        ctx.state = LookupStatus.LOADING
        try:
            await self._run_lookup(result, trimmed, normalized, force_refresh)
        except Exception as e:
            self.log.error(f"Error fetching order data: {e}", component="Lookup", exc_info=True)
            result.status = LookupStatus.ERROR
            result.message = cfg.MSG_LOAD_ERROR
            result.error = str(e)
            result.error_code = result.error_code or getattr(e, "error_code", "INTERNAL_ERROR")
            if result.pricing_status == PricingStatus.PENDING:
                result.pricing_status = PricingStatus.UNRESOLVED
            result.invoice = None
            result.can_export_invoice = False
            result.show_finish_warning = False
        finally:
            ctx.state = LookupStatus.IDLE

        ctx.last_result = result
        elapsed = time.time() - started
        self.log.log_lookup_complete(result.sequence, result.status.value, elapsed)
        if ctx.audit_logger is not None:
            ctx.audit_logger.log_lookup(result, force_refresh=force_refresh, elapsed_seconds=elapsed)
        return result

    async def refresh(self, code: Optional[str]) -> LookupResult:
        """Lookup that bypasses the sheet cache and HTTP caches."""
        return await self.lookup(code, force_refresh=True)

    async def _run_lookup(
        self,
        result: LookupResult,
        trimmed: str,
        normalized: str,
        force_refresh: bool,
    ) -> None:
        ctx = self.context
        defaults = ctx.settings.default_column_indexes

        rows = await self.load_order_rows(force_refresh=force_refresh)
        row_number, row = find_order_row(rows, ctx.order_columns, normalized, defaults)
        if row is None:
            result.status = LookupStatus.NOT_FOUND
            result.message = cfg.MSG_NOT_FOUND
            return

        record = build_order_record(ctx.order_columns, row, row_number, defaults)
        result.record = record
        result.progress = ProgressStatus.from_text(record.status_progress)
        result.file_tone = FileStatusTone.from_text(record.status_file)
        result.can_request_backup = can_request_backup(record.status_progress, record.status_file)

        decoded = self._decode(trimmed)
        if decoded is None:
            result.status = LookupStatus.FOUND_PLAIN
            result.message = cfg.MSG_PLAIN_CODE
            return

        result.status = LookupStatus.FOUND_DECODABLE
        result.decoded = decoded
        if decoded.order_date:
            decoded_date = parse_decoded_order_date(decoded.order_date)
            record.order_date = (
                format_ui_date(decoded_date, ctx.settings.time_zone)
                if decoded_date is not None
                else str(decoded.order_date)
            )

        result.pricing_status = PricingStatus.PENDING
        try:
            prices, promo = await self.ensure_pricing()
        except Exception:
            result.error_code = "PRICING_UNAVAILABLE"
            raise

        try:
            invoice = price_decoded_order(decoded, prices, promo, record.revision, calc=ctx.calc)
        except PackageNotFoundError as e:
            self.log.warning(str(e), component="Pricing")
            result.pricing_status = PricingStatus.UNRESOLVED
            result.message = cfg.MSG_PACKAGE_NOT_FOUND
            result.notes.append("package not found")
            return

        result.invoice = invoice
        result.pricing_status = PricingStatus.READY
        result.can_export_invoice, result.show_finish_warning = invoice_controls(
            record.finish_date_value, ctx.clock(), ctx.settings.time_zone
        )

    def _decode(self, trimmed: str) -> Optional[DecodedPayload]:
        if not is_self_describing(trimmed, self.context.settings.code_prefix):
            return None
        decoded, reason = inspect_order_code(trimmed, self.context.settings.code_prefix)
        if reason in (BAD_BASE64, BAD_JSON):
            self.log.warning(f"KYS payload could not be decoded ({reason})", component="Decoder")
        elif reason:
            self.log.debug(f"KYS code not decodable ({reason})", component="Decoder")
        return decoded
