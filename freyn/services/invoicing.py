"""Invoice numbering, line-item sanitizing and totals.

Everything except the number generator is pure and works on the raw JSON
the client sends. Sanitized values use snake_case keys, the same shape the
JSON columns store.
"""

import logging
import math
import random
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from freyn.models.base import as_naive_utc, utcnow
from freyn.models.invoice import Invoice, InvoiceStatus, PaymentMethodType

logger = logging.getLogger(__name__)

MAX_LOGO_BYTES = 900 * 1024
MAX_NUMBER_ATTEMPTS = 15

STATUSES = tuple(s.value for s in InvoiceStatus)


class InvoiceNumberExhausted(RuntimeError):
    """No free invoice number was found within the attempt bound."""


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    total: float


# ── Numbering ────────────────────────────────────────────────

def format_invoice_date(date: datetime) -> str:
    return date.strftime("%d%m%Y")


async def invoice_number_exists(
    session: AsyncSession, invoice_number: str, exclude_id=None
) -> bool:
    """Global check: invoice numbers are unique across workspaces."""
    stmt = select(Invoice.id).where(Invoice.invoice_number == invoice_number)
    if exclude_id is not None:
        stmt = stmt.where(Invoice.id != exclude_id)
    result = await session.execute(stmt.limit(1))
    return result.first() is not None


async def generate_invoice_number(session: AsyncSession, date: datetime) -> str:
    base = format_invoice_date(date)
    for _ in range(MAX_NUMBER_ATTEMPTS):
        candidate = f"INV-{base}{random.randint(100, 999)}"
        if not await invoice_number_exists(session, candidate):
            return candidate
    logger.error("Invoice number space exhausted for %s", base)
    raise InvoiceNumberExhausted("Unable to generate a unique invoice number")


async def ensure_invoice_number(
    session: AsyncSession, explicit: str | None, date: datetime
) -> str:
    """Use the caller's number as-is (trimmed) or generate a fresh one."""
    if explicit and explicit.strip():
        return explicit.strip()
    return await generate_invoice_number(session, date)


# ── Sanitizing ───────────────────────────────────────────────

def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _number(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return int(number) if number.is_integer() else number


def sanitize_party(raw) -> dict:
    party = raw if isinstance(raw, dict) else {}
    return {
        "name": _text(party.get("name")),
        "email": _text(party.get("email")),
        "phone": _text(party.get("phone")),
        "company": _text(party.get("company")),
        "address": _text(party.get("address")),
        "client_id": _text(party.get("clientId", party.get("client_id"))),
    }


def sanitize_items(raw_items) -> list[dict]:
    """Drop lines without a service, clamp numbers, recompute subtotals."""
    items = raw_items if isinstance(raw_items, list) else []
    sanitized = []
    for item in items:
        if not isinstance(item, dict):
            continue
        service_id = _text(item.get("serviceId", item.get("service_id")))
        service_name = _text(item.get("serviceName", item.get("service_name")))
        if not service_id or not service_name:
            continue

        quantity = _number(item.get("quantity"))
        if quantity is None or quantity <= 0:
            quantity = 1
        price = _number(item.get("price"))
        if price is None or price < 0:
            price = 0
        deliverables = item.get("deliverables")

        sanitized.append({
            "service_id": service_id,
            "service_name": service_name,
            "deliverables": str(deliverables) if deliverables is not None else "",
            "quantity": quantity,
            "price": price,
            "subtotal": quantity * price,
        })
    return sanitized


def calculate_totals(items: Iterable[dict]) -> InvoiceTotals:
    subtotal = sum(item["subtotal"] for item in items)
    # No tax / fee layer: total mirrors subtotal.
    return InvoiceTotals(subtotal=subtotal, total=subtotal)


def sanitize_payment_method(raw) -> dict:
    """Collapse the body into one tagged variant keyed by ``type``."""
    data = raw if isinstance(raw, dict) else {}
    if data.get("type") == PaymentMethodType.E_WALLET:
        ewallet = data.get("ewallet") if isinstance(data.get("ewallet"), dict) else {}
        return {
            "type": PaymentMethodType.E_WALLET.value,
            "ewallet": {
                "provider": _text(ewallet.get("provider")),
                "account_name": _text(ewallet.get("accountName", ewallet.get("account_name"))),
                "phone_number": _text(ewallet.get("phoneNumber", ewallet.get("phone_number"))),
            },
        }

    bank = data.get("bank") if isinstance(data.get("bank"), dict) else {}
    return {
        "type": PaymentMethodType.BANK_TRANSFER.value,
        "bank": {
            "name": _text(bank.get("name")),
            "account_name": _text(bank.get("accountName", bank.get("account_name"))),
            "account_number": _text(bank.get("accountNumber", bank.get("account_number"))),
        },
    }


def coerce_status(raw) -> InvoiceStatus:
    """Unknown statuses fall back to draft on create / full update."""
    if isinstance(raw, str) and raw in STATUSES:
        return InvoiceStatus(raw)
    return InvoiceStatus.DRAFT


# ── Data URLs ────────────────────────────────────────────────

_PADDING = re.compile(r"=+$")


def estimate_data_url_bytes(data_url: str | None) -> int:
    """Decoded size of a base64 data URL, without decoding it."""
    if not data_url:
        return 0
    parts = data_url.split(",", 1)
    payload = parts[1] if len(parts) > 1 else ""
    if not payload:
        return 0
    match = _PADDING.search(payload)
    padding = len(match.group(0)) if match else 0
    return math.floor(len(payload) * 3 / 4) - padding


# ── Dates ────────────────────────────────────────────────────

_DATETIME = TypeAdapter(datetime)


def parse_invoice_date(raw) -> datetime | None:
    """Empty means "now"; returns None when the value cannot be parsed."""
    if raw is None or raw == "":
        return utcnow()
    try:
        return as_naive_utc(_DATETIME.validate_python(raw))
    except ValidationError:
        return None
