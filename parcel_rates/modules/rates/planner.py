"""按服务限制计算包裹数并均分重量与尺寸。"""

from __future__ import annotations

import math
from decimal import Decimal

from parcel_rates.modules.rates.models import NormalizedParcel, ParcelPlan, RestrictionSet, round_decimal

GRAMS_PER_KILOGRAM = Decimal("1000")


class ParcelPlanner:
    """
    六项限制各自求出所需包裹数，取最大者；随后把整单均分到每个包裹。

    均分而非装箱求解：约束不同时收紧时包裹数可能偏多（运费也随之偏高），
    这是已知取舍，修正会改变报价结果。
    """

    def plan(self, parcel: NormalizedParcel, restrictions: RestrictionSet) -> ParcelPlan:
        count = self.parcel_count(parcel, restrictions)
        return ParcelPlan(
            parcel_count=count,
            weight=round_decimal(parcel.weight / count, 3),
            length=round_decimal(parcel.length / count, 1),
            width=round_decimal(parcel.width / count, 1),
            height=round_decimal(parcel.height / count, 1),
        )

    def parcel_count(self, parcel: NormalizedParcel, restrictions: RestrictionSet) -> int:
        counts = self.constraint_counts(parcel, restrictions)
        return max(1, *counts.values())

    @staticmethod
    def constraint_counts(parcel: NormalizedParcel, restrictions: RestrictionSet) -> dict[str, int]:
        return {
            "weight": _ceil_count(parcel.weight * GRAMS_PER_KILOGRAM, restrictions.max_weight),
            "length": _ceil_count(parcel.length, restrictions.max_length),
            "width": _ceil_count(parcel.width, restrictions.max_width),
            "height": _ceil_count(parcel.height, restrictions.max_height),
            "girth": _ceil_count(parcel.girth, restrictions.max_girth),
            "dimension_sum": _ceil_count(parcel.dimension_sum, restrictions.max_dimension_sum),
        }


def _ceil_count(value: Decimal, bound: Decimal | None) -> int:
    if bound is None or value <= bound:
        return 1
    return math.ceil(value / bound)
