# src/models/money.py

"""Money codec: exact integer cents <-> decimal currency strings.

Prices are carried as integer minor units everywhere in the project.
Conversions go through :class:`decimal.Decimal` so that values such as
``19.99`` never pick up binary floating-point drift.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.config.settings import Settings
from src.models.errors import InvalidPriceFormat

_CENT = Decimal("0.01")

# Marketing words retailers prepend to a price ("Now $199.00")
_NOISE_WORDS_RE = re.compile(
    r"\b(?:now|was|from|sale|price|only)\b", re.IGNORECASE
)
_CURRENCY_SYMBOLS_RE = re.compile(r"[$€£¥₹]")
_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?|-?\.\d+")
_AMOUNT_RE = re.compile(r"-?\$?(?:\d+(?:\.\d+)?|\.\d+)")


def to_minor_units(amount: Decimal | str | int | float) -> int:
    """Round a decimal amount to the nearest cent and return it as int."""
    try:
        value = (
            amount if isinstance(amount, Decimal) else Decimal(str(amount))
        )
        cents = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidPriceFormat(str(amount)) from exc
    return int(cents)


def cents_to_decimal(cents: int) -> Decimal:
    """Return ``cents`` as a two-place :class:`Decimal` amount."""
    return (Decimal(cents) / 100).quantize(_CENT)


def to_decimal_string(
    cents: int, currency: str = Settings.DEFAULT_CURRENCY,
) -> str:
    """Format cents as ``$249.99`` (USD) or ``249.99 EUR`` otherwise."""
    amount = cents_to_decimal(abs(cents))
    sign = "-" if cents < 0 else ""
    if currency == "USD":
        return f"{sign}${amount}"
    return f"{sign}{amount} {currency}"


def parse_price(text: str) -> int:
    """Parse retailer price text such as ``'Now $1,299.99'`` into cents.

    Noise words, currency symbols and thousands separators are stripped,
    then the first decimal number (with its sign) is converted.  Raises
    :class:`InvalidPriceFormat` when nothing numeric is left.
    """
    cleaned = _NOISE_WORDS_RE.sub("", text)
    cleaned = _CURRENCY_SYMBOLS_RE.sub("", cleaned)
    cleaned = cleaned.replace(",", "").strip()

    match = _NUMBER_RE.search(cleaned)
    if not match:
        raise InvalidPriceFormat(text)
    return to_minor_units(match.group(0))


def parse_amount(text: str) -> int:
    """Parse a user-typed amount (``'50'``, ``'$1,299.99'``) into cents.

    Stricter than :func:`parse_price`: the whole string must be one
    number with an optional sign and ``$``.
    """
    cleaned = text.replace(",", "").strip()
    if not _AMOUNT_RE.fullmatch(cleaned):
        raise InvalidPriceFormat(text)
    return to_minor_units(cleaned.replace("$", ""))


def detect_currency(text: str) -> str:
    """Return the currency code for a price string.

    Only US retailers are registered, so every price resolves to the
    configured default (USD).
    """
    return Settings.DEFAULT_CURRENCY
