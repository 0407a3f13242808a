"""Major-to-minor currency unit conversion."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

DEFAULT_EXPONENT = 2

# ISO 4217 currencies whose minor unit is not 1/100.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {"BIF", "CLP", "DJF", "GNF", "ISK", "JPY", "KMF", "KRW", "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF"}
)
THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"})


def minor_unit_exponent(currency: str, overrides: dict[str, int] | None = None) -> int:
    """Number of decimal places between the major and minor unit of `currency`."""

    code = currency.upper()
    if overrides and code in overrides:
        return overrides[code]
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return DEFAULT_EXPONENT


def to_minor_units(amount: int | float | str | Decimal, currency: str, overrides: dict[str, int] | None = None) -> int:
    """Convert a major-unit amount to an integer count of minor units.

    Rounds half away from zero. The amount goes through `str` first so that
    e.g. 19.99 INR becomes 1999 paise rather than 1998.
    """

    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValueError(f"not a number: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"not a finite number: {amount!r}")
    scaled = value.scaleb(minor_unit_exponent(currency, overrides))
    return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))
