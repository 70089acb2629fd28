"""
度量单位与货币换算
Measure and Currency Conversion
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from parcel_rates.core.error_handler import CurrencyUnavailableError, UnitUnavailableError
from parcel_rates.core.config_models import DEFAULT_DIMENSION_UNITS, DEFAULT_WEIGHT_UNITS
from parcel_rates.modules.rates.models import to_decimal

CARRIER_WEIGHT_UNIT = "kg"
CARRIER_DIMENSION_UNIT = "meters"
CARRIER_CURRENCY = "CAD"


class MeasureService:
    """
    按比例换算：目标值 = 商品数值 × 目标单位比例 / 商品所用单位比例。

    比例表以同一基准单位为 1；商品所用单位（primary）不必是基准单位。
    """

    def __init__(
        self,
        *,
        weight_units: dict[str, Any] | None = None,
        dimension_units: dict[str, Any] | None = None,
        primary_weight_unit: str | None = None,
        primary_dimension_unit: str | None = None,
    ) -> None:
        raw_weight = DEFAULT_WEIGHT_UNITS if weight_units is None else weight_units
        raw_dimension = DEFAULT_DIMENSION_UNITS if dimension_units is None else dimension_units
        self.weight_units = {_unit_key(k): to_decimal(v) for k, v in raw_weight.items()}
        self.dimension_units = {_unit_key(k): to_decimal(v) for k, v in raw_dimension.items()}
        self.primary_weight_unit = primary_weight_unit
        self.primary_dimension_unit = primary_dimension_unit

    @classmethod
    def from_config(cls, store_cfg: dict[str, Any]) -> "MeasureService":
        return cls(
            weight_units=store_cfg.get("weight_units"),
            dimension_units=store_cfg.get("dimension_units"),
            primary_weight_unit=store_cfg.get("primary_weight_unit"),
            primary_dimension_unit=store_cfg.get("primary_dimension_unit"),
        )

    def convert_weight(self, value: Decimal, unit: str = CARRIER_WEIGHT_UNIT) -> Decimal:
        ratio = _ratio(self.weight_units, unit, self.primary_weight_unit, "weight")
        return to_decimal(value) * ratio

    def convert_dimension(self, value: Decimal, unit: str = CARRIER_DIMENSION_UNIT) -> Decimal:
        ratio = _ratio(self.dimension_units, unit, self.primary_dimension_unit, "dimension")
        return to_decimal(value) * ratio


class CurrencyService:
    """汇率表以基础货币为 1，其余为每 1 单位基础货币可兑换的数量。"""

    def __init__(self, *, base_currency: str = "CAD", rates: dict[str, Any] | None = None) -> None:
        self.base_currency = base_currency.strip().upper()
        self.rates = {str(k).strip().upper(): to_decimal(v) for k, v in (rates or {}).items()}
        self.rates.setdefault(self.base_currency, Decimal("1"))

    @classmethod
    def from_config(cls, store_cfg: dict[str, Any]) -> "CurrencyService":
        return cls(
            base_currency=str(store_cfg.get("base_currency") or "CAD"),
            rates=store_cfg.get("currency_rates"),
        )

    def convert_to_base(self, amount: Decimal, currency_code: str = CARRIER_CURRENCY) -> Decimal:
        code = currency_code.strip().upper()
        rate = self.rates.get(code)
        if rate is None or rate <= 0:
            raise CurrencyUnavailableError(
                f"{code} currency cannot be loaded",
                details={"currency": code, "base_currency": self.base_currency},
            )
        if code == self.base_currency:
            return to_decimal(amount)
        return to_decimal(amount) / rate


def _unit_key(unit: str) -> str:
    return str(unit or "").strip().lower()


def _ratio(table: dict[str, Decimal], unit: str, primary: str | None, kind: str) -> Decimal:
    target = _lookup(table, unit, kind)
    if not primary:
        return target
    return target / _lookup(table, primary, kind)


def _lookup(table: dict[str, Decimal], unit: str, kind: str) -> Decimal:
    ratio = table.get(_unit_key(unit))
    if ratio is None:
        raise UnitUnavailableError(
            f'Could not load "{unit}" measure {kind}',
            details={"unit": unit, "registered": sorted(table)},
        )
    return ratio
