"""承运商接口适配层。"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import InvalidOperation
from typing import Any, Callable, TypeVar
from urllib.parse import urljoin
from xml.etree import ElementTree as ET

import httpx

from parcel_rates.core.error_handler import (
    CarrierError,
    CatalogUnavailableError,
    QuoteUnavailableError,
    ServiceDetailUnavailableError,
    TransientCarrierError,
    retry,
)
from parcel_rates.core.logger import get_logger
from parcel_rates.modules.rates.codec import (
    RATE_MEDIA_TYPE,
    build_mailing_scenario,
    parse_messages,
    parse_price_quotes,
    parse_service_detail,
    parse_services,
)
from parcel_rates.modules.rates.models import (
    CarrierResult,
    CarrierSettings,
    QuoteResult,
    RateRequest,
    ServiceDescriptor,
    ServiceDetail,
)

T = TypeVar("T")

DEFAULT_BASE_URL = "https://soa-gw.canadapost.ca"
DEFAULT_SANDBOX_URL = "https://ct.soa-gw.canadapost.ca"


class ICarrierClient(ABC):
    """承运商接口：调用失败以 CarrierResult.error 返回，不抛异常。"""

    @abstractmethod
    async def fetch_service_catalog(self, country_code: str | None) -> CarrierResult[list[ServiceDescriptor]]:
        pass

    @abstractmethod
    async def fetch_service_detail(self, service: ServiceDescriptor) -> CarrierResult[ServiceDetail]:
        pass

    @abstractmethod
    async def fetch_rate_quotes(self, request: RateRequest) -> CarrierResult[list[QuoteResult]]:
        pass


class CanadaPostClient(ICarrierClient):
    """Canada Post rating REST 接口。"""

    def __init__(
        self,
        settings: CarrierSettings,
        *,
        base_url: str = DEFAULT_BASE_URL,
        sandbox_url: str = DEFAULT_SANDBOX_URL,
        timeout_seconds: float = 10.0,
        retry_times: int = 2,
        retry_delay_seconds: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.base_url = str(base_url or DEFAULT_BASE_URL).rstrip("/")
        self.sandbox_url = str(sandbox_url or DEFAULT_SANDBOX_URL).rstrip("/")
        self.timeout_seconds = max(0.1, float(timeout_seconds))
        self.retry_times = max(1, int(retry_times))
        self.retry_delay_seconds = max(0.0, float(retry_delay_seconds))
        self.transport = transport
        self.logger = get_logger()

    @classmethod
    def from_config(
        cls,
        carrier_cfg: dict[str, Any],
        settings: CarrierSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "CanadaPostClient":
        return cls(
            settings or CarrierSettings.from_config(carrier_cfg),
            base_url=str(carrier_cfg.get("base_url") or DEFAULT_BASE_URL),
            sandbox_url=str(carrier_cfg.get("sandbox_url") or DEFAULT_SANDBOX_URL),
            timeout_seconds=float(carrier_cfg.get("timeout_seconds", 10.0)),
            retry_times=int(carrier_cfg.get("retry_times", 2)),
            retry_delay_seconds=float(carrier_cfg.get("retry_delay_seconds", 0.5)),
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        return self.sandbox_url if self.settings.use_sandbox else self.base_url

    async def fetch_service_catalog(self, country_code: str | None) -> CarrierResult[list[ServiceDescriptor]]:
        params = {"country": country_code.upper()} if country_code else None
        return await self._call(
            "GET",
            f"{self.endpoint}/rs/ship/service",
            parser=parse_services,
            error_cls=CatalogUnavailableError,
            operation="services",
            params=params,
        )

    async def fetch_service_detail(self, service: ServiceDescriptor) -> CarrierResult[ServiceDetail]:
        url = service.link or f"/rs/ship/service/{service.code}"
        return await self._call(
            "GET",
            urljoin(f"{self.endpoint}/", url),
            parser=parse_service_detail,
            error_cls=ServiceDetailUnavailableError,
            operation=f"service {service.code}",
            media_type=service.media_type or RATE_MEDIA_TYPE,
        )

    async def fetch_rate_quotes(self, request: RateRequest) -> CarrierResult[list[QuoteResult]]:
        return await self._call(
            "POST",
            f"{self.endpoint}/rs/ship/price",
            parser=parse_price_quotes,
            error_cls=QuoteUnavailableError,
            operation=f"price {request.service_code}",
            content=build_mailing_scenario(request),
        )

    async def _call(
        self,
        method: str,
        url: str,
        *,
        parser: Callable[[bytes], T],
        error_cls: type[CarrierError],
        operation: str,
        media_type: str = RATE_MEDIA_TYPE,
        params: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> CarrierResult[T]:
        send = retry(
            max_attempts=self.retry_times,
            delay=self.retry_delay_seconds,
            exceptions=(TransientCarrierError,),
        )(self._send_once)

        try:
            response = await send(method, url, media_type=media_type, params=params, content=content)
        except TransientCarrierError as exc:
            return CarrierResult.failure(
                error_cls(f"Canada Post {operation} request failed: {exc.message}", details=exc.details)
            )

        if response.status_code >= 400:
            messages = parse_messages(response.content)
            detail = "; ".join(messages) if messages else f"http {response.status_code}"
            return CarrierResult.failure(
                error_cls(
                    f"Canada Post {operation} error: {detail}",
                    details={"status_code": response.status_code, "messages": messages},
                )
            )

        try:
            return CarrierResult.success(parser(response.content))
        except (ET.ParseError, ValueError, InvalidOperation) as exc:
            return CarrierResult.failure(error_cls(f"Canada Post {operation} invalid response: {exc}"))

    async def _send_once(
        self,
        method: str,
        url: str,
        *,
        media_type: str,
        params: dict[str, str] | None,
        content: bytes | None,
    ) -> httpx.Response:
        headers = {"Accept": media_type, "Accept-language": "en-CA"}
        if content is not None:
            headers["Content-Type"] = media_type

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                auth=self._auth(),
                transport=self.transport,
            ) as client:
                response = await client.request(method, url, params=params, content=content, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransientCarrierError(f"timeout after {self.timeout_seconds}s", details={"url": url}) from exc
        except httpx.TransportError as exc:
            raise TransientCarrierError(f"network error: {exc}", details={"url": url}) from exc

        if response.status_code >= 500:
            raise TransientCarrierError(f"http {response.status_code}", details={"url": url})
        return response

    def _auth(self) -> httpx.BasicAuth | None:
        if not self.settings.api_key:
            return None
        username, _, password = self.settings.api_key.partition(":")
        return httpx.BasicAuth(username, password)
