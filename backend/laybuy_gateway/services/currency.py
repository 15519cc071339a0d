"""Currency conversion and money formatting for the storefront."""

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional

CURRENCY_SYMBOLS = {
    "AUD": "$",
    "NZD": "$",
    "USD": "$",
    "CAD": "$",
    "GBP": "£",
    "EUR": "€",
    "JPY": "¥",
}

TWO_PLACES = Decimal("0.01")


class UnknownCurrencyError(Exception):
    def __init__(self, currency_code: str):
        self.currency_code = currency_code
        super().__init__(f"Currency {currency_code} is not configured")


class CurrencyService:
    """Converts between the primary store currency and customer working currencies.

    ``rates`` holds units of each currency per one unit of the primary currency.
    Conversions are exact; rounding happens only when a price is formatted.
    """

    def __init__(self, primary_currency_code: str, rates: Optional[dict[str, Decimal]] = None):
        self.primary_currency_code = primary_currency_code.upper()
        self._rates = {code.upper(): Decimal(rate) for code, rate in (rates or {}).items()}
        self._rates[self.primary_currency_code] = Decimal("1")

    def lookup_currency(self, currency_code: str) -> Optional[str]:
        code = (currency_code or "").upper()
        return code if code in self._rates else None

    def _rate(self, currency_code: str) -> Decimal:
        code = (currency_code or self.primary_currency_code).upper()
        if code not in self._rates:
            raise UnknownCurrencyError(code)
        return self._rates[code]

    def convert_to_primary(self, amount: Decimal, from_currency: str) -> Decimal:
        return Decimal(amount) / self._rate(from_currency)

    def convert_from_primary(self, amount: Decimal, to_currency: str) -> Decimal:
        return Decimal(amount) * self._rate(to_currency)


class PriceFormatter:

    def format_price(self, amount: Decimal, currency_code: str,
                     show_currency: bool = True, show_tax: bool = False,
                     price_includes_tax: bool = False) -> str:
        rounded = Decimal(amount).quantize(TWO_PLACES, rounding=ROUND_HALF_EVEN)
        sign = "-" if rounded < 0 else ""
        text = f"{abs(rounded):,.2f}"
        if show_currency:
            symbol = CURRENCY_SYMBOLS.get(currency_code.upper())
            text = f"{symbol}{text}" if symbol else f"{text} {currency_code.upper()}"
        text = f"{sign}{text}"
        if show_tax:
            text += " incl tax" if price_includes_tax else " excl tax"
        return text
