"""询价请求组装测试。"""

from decimal import Decimal

import pytest

from parcel_rates.modules.rates.models import (
    CarrierSettings,
    CrossBorderDestination,
    DomesticDestination,
    InternationalDestination,
    ParcelPlan,
    QuoteType,
    ServiceDescriptor,
)
from parcel_rates.modules.rates.request_builder import (
    QuoteRequestBuilder,
    normalize_postal_code,
    select_destination,
)


@pytest.fixture
def plan() -> ParcelPlan:
    return ParcelPlan(
        parcel_count=2,
        weight=Decimal("12.500"),
        length=Decimal("60.0"),
        width=Decimal("30.0"),
        height=Decimal("25.0"),
    )


def test_domestic_request_uses_normalized_postal_code(plan) -> None:
    builder = QuoteRequestBuilder()

    request = builder.build(
        "k2b 8j6", "CA", "h2x 1y4", plan, ServiceDescriptor(code="DOM.EP"), CarrierSettings()
    )

    assert request.destination == DomesticDestination(postal_code="H2X1Y4")
    assert request.origin_postal_code == "K2B8J6"
    assert request.service_code == "DOM.EP"
    assert request.plan is plan


def test_counter_quote_without_customer_number(plan) -> None:
    builder = QuoteRequestBuilder()

    request = builder.build(
        "K2B8J6", "CA", "H2X1Y4", plan, ServiceDescriptor(code="DOM.EP"), CarrierSettings(contract_id="42708517")
    )

    assert request.quote_type is QuoteType.COUNTER
    assert request.customer_number is None
    assert request.contract_id is None


def test_commercial_quote_with_customer_number(plan) -> None:
    builder = QuoteRequestBuilder()
    settings = CarrierSettings(customer_number="0001234567", contract_id="42708517")

    request = builder.build("K2B8J6", "CA", "H2X1Y4", plan, ServiceDescriptor(code="DOM.XP"), settings)

    assert request.quote_type is QuoteType.COMMERCIAL
    assert request.customer_number == "0001234567"
    assert request.contract_id == "42708517"


def test_commercial_quote_without_contract(plan) -> None:
    builder = QuoteRequestBuilder()

    request = builder.build(
        "K2B8J6", "CA", "H2X1Y4", plan, ServiceDescriptor(code="DOM.XP"), CarrierSettings(customer_number="2004381")
    )

    assert request.quote_type is QuoteType.COMMERCIAL
    assert request.contract_id is None


def test_select_destination_variants() -> None:
    assert select_destination("ca", "h2x 1y4") == DomesticDestination(postal_code="H2X1Y4")
    assert select_destination("us", "10001-1234") == CrossBorderDestination(zip_code="10001-1234")
    assert select_destination("gb", "SW1A 1AA") == InternationalDestination(country_code="GB")
    assert select_destination("US", None) == CrossBorderDestination(zip_code="")


def test_normalize_postal_code() -> None:
    assert normalize_postal_code(" k1a 0b1 ") == "K1A0B1"
    assert normalize_postal_code(None) == ""
