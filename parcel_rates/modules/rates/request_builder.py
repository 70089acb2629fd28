"""单个服务的询价请求组装。"""

from __future__ import annotations

from parcel_rates.modules.rates.models import (
    CarrierSettings,
    CrossBorderDestination,
    Destination,
    DomesticDestination,
    InternationalDestination,
    ParcelPlan,
    QuoteType,
    RateRequest,
    ServiceDescriptor,
)

DOMESTIC_COUNTRY = "CA"
CROSS_BORDER_COUNTRY = "US"


def normalize_postal_code(value: str | None) -> str:
    return (value or "").replace(" ", "").upper()


def select_destination(country_code: str, postal_or_zip: str | None) -> Destination:
    country = (country_code or "").strip().upper()
    if country == DOMESTIC_COUNTRY:
        return DomesticDestination(postal_code=normalize_postal_code(postal_or_zip))
    if country == CROSS_BORDER_COUNTRY:
        return CrossBorderDestination(zip_code=postal_or_zip or "")
    return InternationalDestination(country_code=country)


class QuoteRequestBuilder:
    def build(
        self,
        origin: str,
        destination_country: str,
        destination_postal_or_zip: str | None,
        plan: ParcelPlan,
        service: ServiceDescriptor,
        settings: CarrierSettings,
    ) -> RateRequest:
        if settings.is_commercial:
            quote_type = QuoteType.COMMERCIAL
            customer_number = settings.customer_number
            contract_id = settings.contract_id or None
        else:
            quote_type = QuoteType.COUNTER
            customer_number = None
            contract_id = None

        return RateRequest(
            quote_type=quote_type,
            service_code=service.code,
            origin_postal_code=normalize_postal_code(origin),
            destination=select_destination(destination_country, destination_postal_or_zip),
            plan=plan,
            customer_number=customer_number,
            contract_id=contract_id,
        )
