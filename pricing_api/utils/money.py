# pricing_api/utils/money.py

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

Money = Decimal

CENT = Decimal("0.01")

# largest price, quantity or charge we accept; keeps every product and
# cent-rounded result well inside the default 28-digit context
MAX_AMOUNT = Decimal("1000000000")

def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x if x not in (None, "") else "0"))

def to_decimal(x):
    """Like D() but returns None instead of raising on junk input."""
    try:
        return D(x)
    except (InvalidOperation, TypeError, ValueError):
        return None

def round_money(x: Money) -> Money:
    return D(x).quantize(CENT, rounding=ROUND_HALF_UP)

def format_money(x) -> str:
    # "$5.00"
    return f"${round_money(x)}"

def format_number(x) -> str:
    # 10 -> "10", 12.50 -> "12.5"
    d = D(x)
    if d == d.to_integral_value():
        return str(d.quantize(Decimal(1)))
    return format(d.normalize(), "f")
