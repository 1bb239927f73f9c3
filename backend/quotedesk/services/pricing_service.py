# Overview: Pure pricing computations for window and material quotes; no database access.

"""
Pricing Engine

Window line:   sq_ft  = round2((height / 12) * (width / 12))
               amount = round2(sq_ft * price_per_sqft * quantity)
Material line: amount = round2(qty * rate)

Quote totals:
    subtotal          = sum of stored line amounts
    first_tax_amount  = subtotal * first_tax_percent / 100   (0 if not apply_tax)
    second_tax_amount = subtotal * second_tax_percent / 100  (0 if not apply_tax)
    grand_total       = subtotal + both taxes + packing_charge

Tax amounts and grand total are not rounded; only per-line values are.

Non-numeric amounts raise ValidationError. A financial total never
silently drops a line.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

from ..models import WINDOW_TYPES, WINDOW_SPEC_FIELDS, MATERIAL_UNITS
from ..validation import ValidationError, coerce_bool, coerce_number, MAX_MONEY_VALUE


CENT = Decimal("0.01")
INCHES_PER_FOOT = 12

DEFAULT_FIRST_TAX_PERCENT = 9.0
DEFAULT_SECOND_TAX_PERCENT = 9.0


def round_money(value: float) -> float:
    """Round half-up to 2 decimals (str() first so 0.285 rounds to 0.29)."""
    return float(Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class TaxConfig:
    apply_tax: bool = True
    first_tax_percent: float = DEFAULT_FIRST_TAX_PERCENT
    second_tax_percent: float = DEFAULT_SECOND_TAX_PERCENT
    packing_charge: float = 0.0

    @classmethod
    def from_payload(cls, data: Mapping[str, Any] | None) -> "TaxConfig":
        """
        Build from a dict that may omit any key; omitted keys take defaults.

        packing_charge of None counts as 0; anything non-numeric is rejected.
        """
        data = data or {}
        apply_tax = data.get("apply_tax")
        first = data.get("first_tax_percent")
        second = data.get("second_tax_percent")
        packing = data.get("packing_charge")
        return cls(
            apply_tax=True if apply_tax is None else coerce_bool("apply_tax", apply_tax),
            first_tax_percent=DEFAULT_FIRST_TAX_PERCENT if first is None else coerce_number("first_tax_percent", first),
            second_tax_percent=DEFAULT_SECOND_TAX_PERCENT if second is None else coerce_number("second_tax_percent", second),
            packing_charge=0.0 if packing is None else coerce_number("packing_charge", packing),
        )

    @classmethod
    def from_quote(cls, quote) -> "TaxConfig":
        return cls.from_payload({
            "apply_tax": quote.apply_tax,
            "first_tax_percent": quote.first_tax_percent,
            "second_tax_percent": quote.second_tax_percent,
            "packing_charge": quote.packing_charge,
        })


@dataclass(frozen=True)
class QuoteTotals:
    subtotal: float
    first_tax_amount: float
    second_tax_amount: float
    grand_total: float

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "first_tax_amount": self.first_tax_amount,
            "second_tax_amount": self.second_tax_amount,
            "grand_total": self.grand_total,
        }


def _line_amount(line: Any, index: int) -> float:
    if isinstance(line, Mapping):
        value = line.get("amount")
    else:
        value = getattr(line, "amount", None)
    if value is None:
        raise ValidationError(f"Line {index + 1}: amount is required")
    return coerce_number(f"Line {index + 1}: amount", value)


def sum_line_amounts(lines: Iterable[Any]) -> float:
    """Sum the stored per-line amounts (dicts or model rows)."""
    return sum((_line_amount(line, i) for i, line in enumerate(lines)), 0.0)


def compute_tax_totals(subtotal: float, tax: TaxConfig | None = None) -> QuoteTotals:
    tax = tax or TaxConfig()
    first = subtotal * tax.first_tax_percent / 100 if tax.apply_tax else 0.0
    second = subtotal * tax.second_tax_percent / 100 if tax.apply_tax else 0.0
    packing = tax.packing_charge or 0.0
    return QuoteTotals(
        subtotal=subtotal,
        first_tax_amount=first,
        second_tax_amount=second,
        grand_total=subtotal + first + second + packing,
    )


def compute_window_totals(lines: Iterable[Any], tax: TaxConfig | None = None) -> QuoteTotals:
    return compute_tax_totals(sum_line_amounts(lines), tax)


def compute_material_total(lines: Iterable[Any]) -> float:
    return sum_line_amounts(lines)


def _bounded_amount(value: float, label: str) -> float:
    # Each factor is capped on input, their product is not
    if value > MAX_MONEY_VALUE:
        raise ValidationError(f"{label}: amount cannot exceed {MAX_MONEY_VALUE:,.2f}")
    return round_money(value)


def compute_window_line(
    width: float, height: float, price_per_sqft: float, quantity: int, *, label: str = "Line"
) -> tuple[float, float]:
    """Return (sq_ft, amount) for one window configuration."""
    sq_ft = round_money((height / INCHES_PER_FOOT) * (width / INCHES_PER_FOOT))
    amount = _bounded_amount(sq_ft * price_per_sqft * quantity, label)
    return sq_ft, amount


def compute_material_amount(qty: float, rate: float, *, label: str = "Line") -> float:
    return _bounded_amount(qty * rate, label)


# =============================================================================
# Line normalisation (client JSON -> priced line dicts)
# =============================================================================

def _text(raw: Mapping, field: str, label: str, *, max_length: int = 255) -> str:
    value = raw.get(field)
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{label}: {field} must be text")
    value = str(value).strip()
    if len(value) > max_length:
        raise ValidationError(f"{label}: {field} exceeds max length {max_length}")
    return value


def _positive(raw: Mapping, field: str, label: str, *, integer: bool = False):
    if raw.get(field) is None:
        raise ValidationError(f"{label}: {field} is required")
    value = coerce_number(f"{label}: {field}", raw[field], integer=integer)
    if value <= 0:
        raise ValidationError(f"{label}: {field} must be greater than 0")
    if value > MAX_MONEY_VALUE:
        raise ValidationError(f"{label}: {field} is too large")
    return value


def price_window_line(raw: Any, index: int) -> dict:
    """
    Validate one window line and compute its derived sq_ft and amount.

    Client-sent sq_ft/amount/id keys are ignored; the server always prices.
    """
    label = f"Window {index + 1}"
    if not isinstance(raw, Mapping):
        raise ValidationError(f"{label}: must be an object")

    window_type = raw.get("window_type") or "normal"
    if window_type not in WINDOW_TYPES:
        raise ValidationError(f"{label}: window_type must be one of: {', '.join(WINDOW_TYPES)}")

    width = _positive(raw, "width", label)
    height = _positive(raw, "height", label)
    quantity = _positive(raw, "quantity", label, integer=True)
    price_per_sqft = _positive(raw, "price_per_sqft", label)

    sq_ft, amount = compute_window_line(width, height, price_per_sqft, quantity, label=label)

    line = {
        "window_type": window_type,
        "width": width,
        "height": height,
        "quantity": quantity,
        "price_per_sqft": price_per_sqft,
        "sq_ft": sq_ft,
        "amount": amount,
    }
    for field in WINDOW_SPEC_FIELDS:
        line[field] = _text(raw, field, label)
    return line


def price_material_line(raw: Any, index: int) -> dict:
    label = f"Material {index + 1}"
    if not isinstance(raw, Mapping):
        raise ValidationError(f"{label}: must be an object")

    description = _text(raw, "description", label, max_length=500)
    if not description:
        raise ValidationError(f"{label}: description is required")

    unit = raw.get("unit") or "pcs"
    if unit not in MATERIAL_UNITS:
        raise ValidationError(f"{label}: unit must be one of: {', '.join(MATERIAL_UNITS)}")

    qty = _positive(raw, "qty", label)

    if raw.get("rate") is None:
        raise ValidationError(f"{label}: rate is required")
    rate = coerce_number(f"{label}: rate", raw["rate"])
    if rate < 0:
        raise ValidationError(f"{label}: rate must be >= 0")
    if rate > MAX_MONEY_VALUE:
        raise ValidationError(f"{label}: rate is too large")

    notes = _text(raw, "notes", label, max_length=2000) or None

    return {
        "description": description,
        "unit": unit,
        "qty": qty,
        "rate": rate,
        "amount": compute_material_amount(qty, rate, label=label),
        "notes": notes,
    }


def price_window_lines(raw_lines: Any) -> list[dict]:
    if not isinstance(raw_lines, list) or not raw_lines:
        raise ValidationError("Window list is empty")
    return [price_window_line(raw, i) for i, raw in enumerate(raw_lines)]


def price_material_lines(raw_lines: Any) -> list[dict]:
    if not isinstance(raw_lines, list) or not raw_lines:
        raise ValidationError("Material list is empty")
    return [price_material_line(raw, i) for i, raw in enumerate(raw_lines)]
