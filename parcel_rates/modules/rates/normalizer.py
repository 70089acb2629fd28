"""整单包裹归一化：换算为 kg / cm 并按承运商约定排列三边。"""

from __future__ import annotations

from decimal import Decimal

from parcel_rates.modules.rates.measures import (
    CARRIER_DIMENSION_UNIT,
    CARRIER_WEIGHT_UNIT,
    MeasureService,
)
from parcel_rates.modules.rates.models import NormalizedParcel, OrderItem, round_decimal, to_decimal
from parcel_rates.modules.rates.order import bounding_dimensions, total_weight

CENTIMETERS_PER_METER = Decimal("100")


class UnitNormalizer:
    def __init__(self, measures: MeasureService) -> None:
        self.measures = measures

    def normalize(
        self,
        total_weight_value: Decimal,
        bounding_dims: tuple[Decimal, Decimal, Decimal],
    ) -> NormalizedParcel:
        """
        Args:
            total_weight_value: 店铺主单位下的总重量（已排除包邮商品）
            bounding_dims: 店铺主单位下的三边，顺序不限

        Raises:
            UnitUnavailableError: kg 或 meters 未注册
        """
        weight = self.measures.convert_weight(to_decimal(total_weight_value), CARRIER_WEIGHT_UNIT)
        # 先按原始值排序：比例换算单调，排序结果与换算后一致
        length, width, height = canonical_dimensions(*(to_decimal(value) for value in bounding_dims))
        return NormalizedParcel(
            weight=weight,
            length=self._to_centimeters(length),
            width=self._to_centimeters(width),
            height=self._to_centimeters(height),
        )

    def normalize_items(self, items: list[OrderItem]) -> NormalizedParcel:
        return self.normalize(
            total_weight(items, exclude_free_shipping=True),
            bounding_dimensions(items),
        )

    def _to_centimeters(self, value: Decimal) -> Decimal:
        meters = self.measures.convert_dimension(value, CARRIER_DIMENSION_UNIT)
        return round_decimal(meters * CENTIMETERS_PER_METER, 1)


def canonical_dimensions(a: Decimal, b: Decimal, c: Decimal) -> tuple[Decimal, Decimal, Decimal]:
    """返回 (length, width, height)，从大到小。"""
    smallest, middle, largest = sorted((a, b, c))
    return largest, middle, smallest
