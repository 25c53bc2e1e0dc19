"""Sales and price consistency repair.

Both validity decisions are taken on the original values before either
field is repaired. Sales is rebuilt from quantity and the original
price; price is then rebuilt from the repaired sales, which never
depends on a repaired price.
"""

from __future__ import annotations

from dataclasses import dataclass

from transforms.field_coercion import fits_stored_integer


@dataclass(frozen=True)
class RepairedAmounts:
    """Sales line amounts after repair.

    Attributes:
        sales: Repaired sales amount.
        price: Repaired unit price.
        sales_repaired: Whether the stored sales value was replaced.
        price_repaired: Whether the stored price value was replaced.
    """

    sales: int | None
    price: int | None
    sales_repaired: bool
    price_repaired: bool


def is_price_valid(price: int | None) -> bool:
    """Return whether a stored unit price is usable as-is."""
    return price is not None and price > 0


def is_sales_valid(sales: int | None, quantity: int | None, price: int | None) -> bool:
    """Return whether a stored sales amount is usable as-is.

    Sales must be positive and, when a price is present, equal to
    ``quantity * abs(price)``.
    """
    if sales is None or sales <= 0:
        return False
    if price is None or quantity is None:
        return True
    return sales == quantity * abs(price)


def repair_sales_amounts(
    sales: int | None,
    quantity: int | None,
    price: int | None,
) -> RepairedAmounts:
    """Repair sales and price from the trusted quantity.

    Args:
        sales: Stored sales amount.
        quantity: Stored quantity, never repaired.
        price: Stored unit price.

    Returns:
        Repaired amounts with flags describing what changed.
    """
    sales_valid = is_sales_valid(sales, quantity, price)
    price_valid = is_price_valid(price)
    repaired_sales = sales if sales_valid else _multiply(quantity, price)
    repaired_price = price if price_valid else _divide(repaired_sales, quantity)
    return RepairedAmounts(
        sales=repaired_sales,
        price=repaired_price,
        sales_repaired=not sales_valid,
        price_repaired=not price_valid,
    )


def _multiply(quantity: int | None, price: int | None) -> int | None:
    """Sales from quantity and price; ``None`` when it overflows 64 bits."""
    if quantity is None or price is None:
        return None
    sales = quantity * abs(price)
    return sales if fits_stored_integer(sales) else None


def _divide(sales: int | None, quantity: int | None) -> int | None:
    """Integer division truncated toward zero; zero quantity yields ``None``."""
    if sales is None or quantity is None or quantity == 0:
        return None
    quotient = abs(sales) // abs(quantity)
    price = quotient if (sales >= 0) == (quantity > 0) else -quotient
    return price if fits_stored_integer(price) else None
