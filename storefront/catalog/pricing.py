"""
Sale-price resolution shared by products, courses, carts and orders.

Any object (model instance or dict) exposing ``price``, ``sale_enabled`` and
``sale_price`` can be priced here.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

TWO_PLACES = Decimal('0.01')


def _field(item, name, default=None):
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def to_decimal(value, default=Decimal('0.00')):
    if value is None or value == '':
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def has_active_sale(item):
    """A sale applies only when enabled and strictly cheaper than a positive base price"""
    if not _field(item, 'sale_enabled', False):
        return False
    sale_price = _field(item, 'sale_price')
    if sale_price is None:
        return False
    price = to_decimal(_field(item, 'price'))
    return price > 0 and to_decimal(sale_price) < price


def effective_price(item):
    if has_active_sale(item):
        return to_decimal(_field(item, 'sale_price')).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    return to_decimal(_field(item, 'price')).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def discount_percentage(item):
    """Whole-number percentage saved by the sale price, 0 without a sale"""
    if not has_active_sale(item):
        return 0
    price = to_decimal(_field(item, 'price'))
    sale_price = to_decimal(_field(item, 'sale_price'))
    return int(((price - sale_price) / price * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def line_total(item, quantity=1):
    return (effective_price(item) * Decimal(quantity)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def cart_total(lines):
    """
    Sum sale-resolved prices over cart lines.

    ``lines`` is an iterable of ``(item, quantity)`` pairs or of bare items
    (quantity 1).
    """
    total = Decimal('0.00')
    for line in lines:
        if isinstance(line, tuple):
            item, quantity = line
        else:
            item, quantity = line, 1
        total += line_total(item, quantity)
    return total.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def to_cents(amount):
    """Convert a currency amount to integer minor units for the payment provider"""
    return int((to_decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
