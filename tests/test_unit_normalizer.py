"""整单包裹归一化测试。"""

from decimal import Decimal

import pytest

from parcel_rates.core.error_handler import UnitUnavailableError
from parcel_rates.modules.rates.measures import MeasureService
from parcel_rates.modules.rates.models import OrderItem
from parcel_rates.modules.rates.normalizer import UnitNormalizer, canonical_dimensions


def test_normalize_converts_to_kilograms_and_centimeters() -> None:
    normalizer = UnitNormalizer(MeasureService())

    parcel = normalizer.normalize(Decimal("10"), (Decimal("12"), Decimal("20"), Decimal("8")))

    assert parcel.weight == Decimal("4.5359237")
    assert parcel.length == Decimal("50.8")
    assert parcel.width == Decimal("30.5")
    assert parcel.height == Decimal("20.3")


def test_normalize_orders_dimensions_regardless_of_input_order() -> None:
    normalizer = UnitNormalizer(MeasureService())
    expected = normalizer.normalize(Decimal("1"), (Decimal("20"), Decimal("12"), Decimal("8")))

    for dims in [(8, 12, 20), (12, 8, 20), (20, 8, 12)]:
        parcel = normalizer.normalize(Decimal("1"), tuple(Decimal(v) for v in dims))
        assert parcel == expected
        assert parcel.length >= parcel.width >= parcel.height


def test_normalize_rounds_dimensions_to_one_decimal_half_even() -> None:
    normalizer = UnitNormalizer(MeasureService(dimension_units={"meters": "1"}))

    parcel = normalizer.normalize(
        Decimal("1"), (Decimal("0.0025"), Decimal("0.0035"), Decimal("0.0015"))
    )

    assert parcel.length == Decimal("0.4")
    assert parcel.width == Decimal("0.2")
    assert parcel.height == Decimal("0.2")


def test_normalize_keeps_weight_unrounded() -> None:
    normalizer = UnitNormalizer(MeasureService(weight_units={"kg": "0.0001"}))

    parcel = normalizer.normalize(Decimal("1.23456"), (Decimal("1"), Decimal("1"), Decimal("1")))

    assert parcel.weight == Decimal("0.000123456")


def test_normalize_without_kg_unit_raises() -> None:
    normalizer = UnitNormalizer(MeasureService(weight_units={"lb": 1}))

    with pytest.raises(UnitUnavailableError):
        normalizer.normalize(Decimal("1"), (Decimal("1"), Decimal("1"), Decimal("1")))


def test_normalize_without_meters_unit_raises() -> None:
    normalizer = UnitNormalizer(MeasureService(dimension_units={"inches": 1}))

    with pytest.raises(UnitUnavailableError):
        normalizer.normalize(Decimal("1"), (Decimal("1"), Decimal("1"), Decimal("1")))


def test_canonical_dimensions_is_idempotent() -> None:
    once = canonical_dimensions(Decimal("3"), Decimal("9"), Decimal("5"))

    assert once == (Decimal("9"), Decimal("5"), Decimal("3"))
    assert canonical_dimensions(*once) == once


def test_normalize_items_excludes_free_shipping_weight() -> None:
    normalizer = UnitNormalizer(MeasureService(weight_units={"kg": 1}, dimension_units={"meters": "0.01"}))
    items = [
        OrderItem(weight=Decimal("2"), length=Decimal("30"), width=Decimal("20"), height=Decimal("10")),
        OrderItem(weight=Decimal("7"), length=Decimal("1"), width=Decimal("1"), height=Decimal("1"), is_free_shipping=True),
    ]

    parcel = normalizer.normalize_items(items)

    assert parcel.weight == Decimal("2")
    assert parcel.length == Decimal("30.0")
