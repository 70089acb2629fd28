"""订单汇总：总重量与外包装尺寸估算。"""

from __future__ import annotations

from decimal import Decimal

from parcel_rates.modules.rates.models import ZERO, OrderItem


def total_weight(items: list[OrderItem], exclude_free_shipping: bool = True) -> Decimal:
    total = ZERO
    for item in items:
        if exclude_free_shipping and item.is_free_shipping:
            continue
        total += item.weight * item.quantity
    return total


def bounding_dimensions(items: list[OrderItem]) -> tuple[Decimal, Decimal, Decimal]:
    """
    估算整单外包装尺寸，返回 (width, length, height)。

    单件商品直接使用自身尺寸；多件时取总体积的立方根，
    每个轴再不小于该轴上最大的单件尺寸（如 1x1x20 的细长件）。
    """
    if not items:
        return ZERO, ZERO, ZERO

    if len(items) == 1 and items[0].quantity == 1:
        item = items[0]
        return item.width, item.length, item.height

    volume = sum((item.length * item.width * item.height * item.quantity for item in items), ZERO)
    edge = _cube_root(volume)

    width = max([edge, *(item.width for item in items)])
    length = max([edge, *(item.length for item in items)])
    height = max([edge, *(item.height for item in items)])
    return width, length, height


def _cube_root(value: Decimal) -> Decimal:
    if value <= 0:
        return ZERO
    root = Decimal(str(round(float(value) ** (1.0 / 3.0), 6)))
    # 浮点开方可能差一个末位，用一次牛顿迭代校正
    return (2 * root + value / (root * root)) / 3
