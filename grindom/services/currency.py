"""Money formatting for the active currency code."""
from typing import Dict

_SYMBOLS: Dict[str, str] = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'JPY': '¥',
    'CNY': '¥',
    'INR': '₹',
    'KRW': '₩',
    'RUB': '₽',
    'UAH': '₴',
    'TRY': '₺',
    'ILS': '₪',
    'BRL': 'R$',
    'CAD': 'CA$',
    'AUD': 'A$',
    'CHF': 'CHF ',
    'PLN': 'zł ',
}

# ISO 4217 currencies without minor units
_ZERO_DECIMAL = frozenset({'JPY', 'KRW', 'VND', 'CLP', 'ISK', 'HUF'})


def format_currency(value: float, code: str) -> str:
    """Format *value* as money, e.g. ``format_currency(1234.5, 'USD')`` -> ``'$1,234.50'``.

    Codes without a known symbol are written as a prefix: ``'XYZ 12.00'``.
    """
    code = code.upper()
    decimals = 0 if code in _ZERO_DECIMAL else 2
    amount = f"{abs(value):,.{decimals}f}"
    sign = '-' if round(value, decimals) < 0 else ''
    symbol = _SYMBOLS.get(code)
    if symbol is None:
        return f"{sign}{code} {amount}"
    return f"{sign}{symbol}{amount}"
