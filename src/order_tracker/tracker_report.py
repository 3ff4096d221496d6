"""
Plain-text rendering of a lookup result, one labelled line per field.
"""

from __future__ import annotations

from typing import List

from .models import Invoice, LookupResult, LookupStatus
from .price_engine import format_idr, format_minutes, format_percent


def format_order_details(result: LookupResult) -> str:
    """Row fields of a found order; the code line only for plain codes."""
    record = result.record
    if record is None:
        return ""

    progress = record.status_progress or "-"
    lines = [
        f"Status Progres: {progress}",
        f"Judul: {record.title}",
        f"Tanggal Order: {record.order_date}",
        f"Tanggal Selesai: {record.finish_date}",
        f"Backup Expired: {record.backup_expired}",
        f"Status File: {record.status_file or '-'}",
        f"Code Projek: {record.project_code}",
    ]
    if result.status == LookupStatus.FOUND_PLAIN:
        lines.append(f"Code Order: {record.order_code}")
    return "\n".join(lines)


def format_invoice(invoice: Invoice) -> str:
    """Itemized invoice: package fees, subtotal, revision fee and total."""
    calc = invoice.breakdown
    rev = invoice.revision
    deadline = f"{_plain_number(invoice.deadline)} hari" if invoice.deadline else "-"

    message = f"Paket: {invoice.package_name} (ID {invoice.package_id})\n"
    message += f"Durasi: {format_minutes(invoice.duration)}\n"
    message += f"Deadline: {deadline}\n\n"

    message += f"  Biaya Paket: {format_idr(calc.base_final)}\n"
    message += (
        f"  Biaya 5+: {_plain_number(calc.over_min)} mnt x "
        f"{format_idr(calc.over_rate)} = {format_idr(calc.over_cost)}\n"
    )
    message += f"  Deadline Surcharge: {format_idr(calc.surcharge_val)}\n"
    message += f"  Buffer Fee: {format_idr(calc.buf_val)}\n"
    message += f"  Subtotal (tanpa revisi): {format_idr(invoice.subtotal)}\n\n"

    message += (
        f"Revisi: {rev.used}x (gratis {rev.included}x, tambahan {rev.extra_count}x)\n"
    )
    message += (
        f"  Biaya Revisi Tambahan: {format_idr(rev.fee)} "
        f"({format_percent(rev.percent)}% x Subtotal {format_idr(invoice.subtotal)} x {rev.extra_count}x)\n"
    )
    message += f"Total: {format_idr(invoice.total)}"
    return message


def render_lookup_result(result: LookupResult) -> str:
    """Full report for a lookup, suitable for a terminal or a chat message."""
    sections: List[str] = []

    if result.status in (LookupStatus.INVALID_INPUT, LookupStatus.NOT_FOUND):
        return result.message

    if result.record is not None:
        sections.append(format_order_details(result))

    if result.invoice is not None:
        sections.append(format_invoice(result.invoice))
        if result.show_finish_warning:
            sections.append("Project belum selesai, invoice belum bisa diunduh.")
        elif result.can_export_invoice:
            sections.append("Invoice siap diunduh.")
    elif result.message:
        sections.append(result.message)

    if result.can_request_backup:
        sections.append("Backup project dapat diminta melalui WhatsApp.")

    return "\n\n".join(s for s in sections if s)


def _plain_number(value) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
