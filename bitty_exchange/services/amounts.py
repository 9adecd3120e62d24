"""Coercion of heterogeneous token amounts into floats, plus display formatting.

Quote sources hand back amounts as plain numbers, numeric strings or
structured token amounts (raw integer units plus decimals). Everything is
funnelled through :func:`normalize_amount`, which never raises: anything
that cannot be turned into a finite float comes back as ``None``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Iterable, Optional, Union

PLACEHOLDER = "—"


class ConversionStrategy(str, Enum):
    """How a structured token amount is turned into a float."""

    EXACT = "exact"  # exact decimal value of the raw units
    NUMERIC = "numeric"  # float approximation of raw / 10**decimals
    FIXED = "fixed"  # decimal string rounded to the caller's precision


# Most precise first: later strategies lose precision or round.
PRECISION_ORDER = (
    ConversionStrategy.EXACT,
    ConversionStrategy.NUMERIC,
    ConversionStrategy.FIXED,
)


@dataclass(frozen=True)
class TokenAmount:
    """Structured token amount expressed in the token's smallest units."""

    raw: int
    token_decimals: int
    strategy: ConversionStrategy = ConversionStrategy.EXACT

    @property
    def exact(self) -> Decimal:
        return Decimal(f"{self.raw}E-{self.token_decimals}")

    @classmethod
    def preferred(
        cls,
        raw: int,
        token_decimals: int,
        supported: Iterable[ConversionStrategy],
    ) -> "TokenAmount":
        """Build an amount using the most precise strategy the source supports."""

        available = set(supported)
        for strategy in PRECISION_ORDER:
            if strategy in available:
                return cls(raw=raw, token_decimals=token_decimals, strategy=strategy)
        raise ValueError("At least one conversion strategy is required")


AmountLike = Union[None, int, float, Decimal, str, TokenAmount]


def _finite(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def _from_string(value: str) -> Optional[float]:
    text = value.strip()
    if not text or "_" in text:
        return None
    try:
        return _finite(float(text))
    except ValueError:
        return None


def _from_token_amount(amount: TokenAmount, decimals: int) -> Optional[float]:
    try:
        if amount.strategy is ConversionStrategy.EXACT:
            return _finite(float(amount.exact))
        if amount.strategy is ConversionStrategy.NUMERIC:
            return _finite(amount.raw / 10 ** amount.token_decimals)
        places = max(decimals, 0)
        exact = amount.exact
        with localcontext() as ctx:
            # room for every integer digit plus the requested fraction digits
            ctx.prec = max(ctx.prec, exact.adjusted() + places + 2)
            fixed = exact.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
        return _finite(float(str(fixed)))
    except (ArithmeticError, InvalidOperation, OverflowError, ValueError):
        return None


def normalize_amount(value: AmountLike, decimals: int = 0) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` when it cannot be coerced.

    Args:
        value: Plain number, numeric string or :class:`TokenAmount`.
        decimals: Precision used by the ``FIXED`` strategy.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return _finite(float(value))
        except OverflowError:
            return None
    if isinstance(value, Decimal):
        return _finite(float(value)) if value.is_finite() else None
    if isinstance(value, str):
        return _from_string(value)
    if isinstance(value, TokenAmount):
        return _from_token_amount(value, decimals)
    return None


def to_ui_amount(raw_units: Union[int, str], decimals: int) -> Optional[float]:
    """Convert smallest units (lamports etc.) to a UI amount."""

    try:
        units = int(raw_units)
    except (TypeError, ValueError):
        return None
    return normalize_amount(TokenAmount(raw=units, token_decimals=decimals))


def to_raw_units(ui_amount: float, decimals: int) -> int:
    """Convert a UI amount to smallest units, rounding down."""

    scaled = Decimal(repr(ui_amount)).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_DOWN))


def _is_displayable(value: Optional[float]) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def format_amount(value: Optional[float], max_fraction_digits: int = 6) -> str:
    if not _is_displayable(value):
        return PLACEHOLDER
    text = f"{value:,.{max_fraction_digits}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(value: Optional[float], max_fraction_digits: int = 2) -> str:
    if not _is_displayable(value):
        return PLACEHOLDER
    text = f"{abs(value):,.{max_fraction_digits}f}"
    return f"-${text}" if value < 0 else f"${text}"


def format_percent(value: Optional[float], max_fraction_digits: int = 2) -> str:
    """Signed percentage: ``+`` for non-negative values, the numeral's own ``-`` otherwise."""

    if not _is_displayable(value):
        return PLACEHOLDER
    numeric = 0.0 if value == 0 else float(value)
    sign = "+" if numeric >= 0 else ""
    return f"{sign}{numeric:.{max_fraction_digits}f}%"


def format_token_summary(amount: Optional[float], token: str, digits: int = 2) -> str:
    if not _is_displayable(amount):
        return token
    return f"{format_amount(amount, digits)} {token}"


__all__ = [
    "AmountLike",
    "ConversionStrategy",
    "PLACEHOLDER",
    "PRECISION_ORDER",
    "TokenAmount",
    "format_amount",
    "format_currency",
    "format_percent",
    "format_token_summary",
    "normalize_amount",
    "to_raw_units",
    "to_ui_amount",
]
