"""Pricing engine — server-side order totals with proportional VAT allocation.

A subtotal-level voucher discount is spread across lines in proportion to
each line's share of the pre-discount subtotal *before* tax is computed, so
every line is taxed at its own category rate on its discounted amount.

Every intermediate value is rounded to 2 decimal places (half-up). The
stored order snapshot and any later recomputation only agree if this exact
rounding cascade is reproduced.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from types import MappingProxyType

from ordering.errors import InvalidInput
from ordering.settings import DEFAULT_VOUCHERS

_CENT = Decimal("0.01")


def round2(value: float) -> float:
    """Round half-up to 2 decimal places."""
    return float(Decimal(repr(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


class VoucherType(Enum):
    DISCOUNT = "discount"
    FREESHIP = "freeship"


@dataclass(frozen=True, slots=True)
class VoucherRule:
    type: VoucherType
    rate: float = 0.0


@dataclass(frozen=True, slots=True)
class AppliedVoucher:
    code: str
    type: VoucherType
    discount: float


@dataclass(frozen=True, slots=True)
class PriceLine:
    unit_price: float
    quantity: int
    tax_rate: float


@dataclass(frozen=True, slots=True)
class PricedLine:
    effective_subtotal: float
    tax_amount: float
    line_total: float


@dataclass(frozen=True, slots=True)
class PricingResult:
    subtotal: float
    voucher_discount: float
    final_subtotal: float
    lines: tuple[PricedLine, ...]
    total_vat: float
    total_amount: float
    voucher: AppliedVoucher | None = None


def voucher_rules(table: Mapping[str, Mapping]) -> Mapping[str, VoucherRule]:
    """Build an immutable rule map from plain ``{"CODE": {"type", "rate"}}`` config."""
    return MappingProxyType(
        {
            code.strip().upper(): VoucherRule(type=VoucherType(rule["type"]), rate=float(rule.get("rate", 0.0)))
            for code, rule in table.items()
        }
    )


class PricingEngine:
    """Pure pricing computation over an injected, immutable voucher table."""

    def __init__(self, vouchers: Mapping[str, VoucherRule] | None = None):
        self._vouchers = vouchers if vouchers is not None else voucher_rules(DEFAULT_VOUCHERS)

    @property
    def vouchers(self) -> Mapping[str, VoucherRule]:
        return self._vouchers

    def resolve_voucher(self, voucher_code: str | None, subtotal: float) -> AppliedVoucher | None:
        """Look up a voucher and compute its discount on ``subtotal``.

        Unknown codes resolve to ``None``: they are treated as no voucher
        rather than rejected.
        """
        if not voucher_code:
            return None

        code = voucher_code.strip().upper()
        rule = self._vouchers.get(code)
        if rule is None:
            return None

        discount = 0.0
        if rule.type == VoucherType.DISCOUNT:
            discount = round2(subtotal * rule.rate)

        return AppliedVoucher(code=code, type=rule.type, discount=discount)

    def price(self, lines: Iterable[PriceLine], voucher_code: str | None = None) -> PricingResult:
        lines = list(lines)
        for line in lines:
            if line.unit_price < 0 or line.quantity < 0 or line.tax_rate < 0:
                raise InvalidInput(
                    "Price, quantity, and tax rate must be non-negative",
                    unit_price=line.unit_price,
                    quantity=line.quantity,
                    tax_rate=line.tax_rate,
                )

        line_subtotals = [line.unit_price * line.quantity for line in lines]
        subtotal = round2(sum(line_subtotals))

        voucher = self.resolve_voucher(voucher_code, subtotal)
        voucher_discount = voucher.discount if voucher else 0.0
        final_subtotal = round2(subtotal - voucher_discount)

        proportion = final_subtotal / subtotal if subtotal > 0 else 1

        priced = []
        for line, line_subtotal in zip(lines, line_subtotals, strict=True):
            effective_subtotal = round2(line_subtotal * proportion)
            tax_amount = round2(effective_subtotal * line.tax_rate)
            priced.append(
                PricedLine(
                    effective_subtotal=effective_subtotal,
                    tax_amount=tax_amount,
                    line_total=round2(effective_subtotal + tax_amount),
                )
            )

        total_vat = round2(sum(p.tax_amount for p in priced))

        return PricingResult(
            subtotal=subtotal,
            voucher_discount=voucher_discount,
            final_subtotal=final_subtotal,
            lines=tuple(priced),
            total_vat=total_vat,
            total_amount=round2(final_subtotal + total_vat),
            voucher=voucher,
        )
