"""运价汇总：逐个服务询价并合并为统一的运费选项。"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Iterable

from parcel_rates.core.error_handler import InputValidationError
from parcel_rates.core.logger import get_logger
from parcel_rates.modules.rates.carrier import CanadaPostClient, ICarrierClient
from parcel_rates.modules.rates.measures import CARRIER_CURRENCY, CurrencyService, MeasureService
from parcel_rates.modules.rates.models import (
    CarrierResult,
    CarrierSettings,
    NormalizedParcel,
    QuoteResult,
    RateResponse,
    ServiceDescriptor,
    ShippingOption,
    ShippingRequest,
)
from parcel_rates.modules.rates.normalizer import UnitNormalizer
from parcel_rates.modules.rates.planner import ParcelPlanner
from parcel_rates.modules.rates.request_builder import QuoteRequestBuilder


class QuoteAggregator:
    """Canada Post 运价汇总。"""

    def __init__(
        self,
        client: ICarrierClient,
        settings: CarrierSettings,
        *,
        measures: MeasureService | None = None,
        currencies: CurrencyService | None = None,
        max_concurrency: int = 1,
    ) -> None:
        self.client = client
        self.settings = settings
        self.normalizer = UnitNormalizer(measures or MeasureService())
        self.planner = ParcelPlanner()
        self.builder = QuoteRequestBuilder()
        self.currencies = currencies or CurrencyService()
        self.max_concurrency = max(1, int(max_concurrency))
        self.logger = get_logger()

    @classmethod
    def from_config(cls, config: dict[str, Any], client: ICarrierClient | None = None) -> "QuoteAggregator":
        carrier_cfg = config.get("carrier", {})
        store_cfg = config.get("store", {})
        settings = CarrierSettings.from_config(carrier_cfg)
        return cls(
            client or CanadaPostClient.from_config(carrier_cfg, settings=settings),
            settings,
            measures=MeasureService.from_config(store_cfg),
            currencies=CurrencyService.from_config(store_cfg),
            max_concurrency=int(carrier_cfg.get("max_concurrency", 1)),
        )

    async def aggregate(
        self,
        request: ShippingRequest,
        selected_services: Iterable[str] | None = None,
    ) -> RateResponse:
        """
        计算所有已开通服务的运费选项

        Args:
            request: 询价请求
            selected_services: 参与询价的服务代码，不指定则使用商户配置

        Returns:
            RateResponse：有选项时错误只写日志；没有任何选项时错误汇总返回

        Raises:
            UnitUnavailableError: kg / meters 未注册
            CurrencyUnavailableError: CAD 未注册
        """
        try:
            self.validate(request)
        except InputValidationError as exc:
            return RateResponse(errors=[exc.message])

        address = request.shipping_address
        country = address.country_code.strip().upper()

        catalog = await self.client.fetch_service_catalog(country)
        if not catalog.ok:
            return RateResponse(errors=[catalog.error.message])

        selected = set(self.settings.selected_services if selected_services is None else selected_services)
        services = [service for service in catalog.value or [] if service.code in selected]

        parcel = self.normalizer.normalize_items(request.items)
        self.logger.debug(
            f"Normalized parcel for {country}: {parcel.weight}kg "
            f"{parcel.length}x{parcel.width}x{parcel.height}cm, {len(services)} services selected"
        )

        if self.max_concurrency > 1 and len(services) > 1:
            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def _bounded(service: ServiceDescriptor) -> tuple[list[ShippingOption], str | None]:
                async with semaphore:
                    return await self._quote_service(request, parcel, service)

            tasks = [asyncio.create_task(_bounded(service)) for service in services]
            try:
                outcomes = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            outcomes = [await self._quote_service(request, parcel, service) for service in services]

        response = RateResponse()
        errors: list[str] = []
        for options, error in outcomes:
            response.shipping_options.extend(options)
            if error:
                errors.append(error)

        self._finalize(response, errors, country)
        return response

    @staticmethod
    def validate(request: ShippingRequest) -> None:
        if not request.items:
            raise InputValidationError("No shipment items")
        if request.shipping_address is None:
            raise InputValidationError("Shipping address is not set")
        if not (request.shipping_address.country_code or "").strip():
            raise InputValidationError("Shipping country is not set")
        if not (request.origin_postal_code or "").strip():
            raise InputValidationError("Origin postal code is not set")

    async def _quote_service(
        self,
        request: ShippingRequest,
        parcel: NormalizedParcel,
        service: ServiceDescriptor,
    ) -> tuple[list[ShippingOption], str | None]:
        detail = await self.client.fetch_service_detail(service)
        if not detail.ok:
            return [], detail.error.message

        plan = self.planner.plan(parcel, detail.value.restrictions)
        rate_request = self.builder.build(
            request.origin_postal_code,
            request.shipping_address.country_code,
            request.shipping_address.zip_postal_code,
            plan,
            ServiceDescriptor(code=detail.value.code or service.code, name=detail.value.name or service.name),
            self.settings,
        )

        quotes: CarrierResult[list[QuoteResult]] = await self.client.fetch_rate_quotes(rate_request)
        if not quotes.ok:
            return [], quotes.error.message

        options = [self._to_option(quote, plan.parcel_count) for quote in quotes.value or []]
        return options, None

    def _to_option(self, quote: QuoteResult, parcel_count: int) -> ShippingOption:
        # 每个包裹按单包裹运价计费
        rate = self.currencies.convert_to_base(quote.due * Decimal(parcel_count), CARRIER_CURRENCY)
        description = None
        if quote.expected_transit_time:
            description = f"Delivery in {quote.expected_transit_time} days"
            if parcel_count > 1:
                description = f"{description} into {parcel_count} parcels"
        return ShippingOption(name=quote.service_name, rate=rate, description=description)

    def _finalize(self, response: RateResponse, errors: list[str], country: str) -> None:
        if errors:
            summary = "\n".join(errors)
            self.logger.error(f"Canada Post rate errors:\n{summary}")
        elif not response.shipping_options:
            summary = f"No Canada Post services available for {country}"
            self.logger.warning(summary)
        else:
            return
        if not response.shipping_options:
            response.add_error(summary)

    async def get_fixed_rate(self, request: ShippingRequest) -> Decimal | None:
        """运费随包裹与服务实时计算，没有固定运费。"""
        return None

    async def list_available_services(self) -> CarrierResult[list[ServiceDescriptor]]:
        """不限目的地的完整服务目录，用于挑选 selected_services。"""
        return await self.client.fetch_service_catalog(None)
