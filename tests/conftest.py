"""
测试工具和fixtures
Test Utilities and Fixtures
"""

import sys
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from parcel_rates.core.config import Config
from parcel_rates.core.error_handler import CatalogUnavailableError
from parcel_rates.modules.rates.carrier import ICarrierClient
from parcel_rates.modules.rates.models import (
    Address,
    CarrierResult,
    OrderItem,
    RestrictionSet,
    ServiceDescriptor,
    ServiceDetail,
    ShippingRequest,
)

SERVICES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<services xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <service>
    <service-code>DOM.EP</service-code>
    <service-name>Expedited Parcel</service-name>
    <link href="https://ct.soa-gw.canadapost.ca/rs/ship/service/DOM.EP?country=CA"
          media-type="application/vnd.cpc.ship.rate-v4+xml" rel="service"/>
  </service>
  <service>
    <service-code>DOM.XP</service-code>
    <service-name>Xpresspost</service-name>
    <link href="https://ct.soa-gw.canadapost.ca/rs/ship/service/DOM.XP?country=CA"
          media-type="application/vnd.cpc.ship.rate-v4+xml" rel="service"/>
  </service>
</services>
"""

SERVICE_DETAIL_XML = """<?xml version="1.0" encoding="UTF-8"?>
<service xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <service-code>DOM.EP</service-code>
  <service-name>Expedited Parcel</service-name>
  <restrictions>
    <weight-restriction min="0" max="30000"/>
    <dimensional-restrictions>
      <length min="0.1" max="200"/>
      <width min="0.1" max="200"/>
      <height min="0.1" max="200"/>
      <length-plus-girth-max>300</length-plus-girth-max>
      <length-height-width-sum-max>0</length-height-width-sum-max>
    </dimensional-restrictions>
  </restrictions>
</service>
"""

PRICE_QUOTES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<price-quotes xmlns="http://www.canadapost.ca/ws/ship/rate-v4">
  <price-quote>
    <service-code>DOM.EP</service-code>
    <service-name>Expedited Parcel</service-name>
    <price-details>
      <base>9.59</base>
      <due>10.84</due>
    </price-details>
    <service-standard>
      <am-delivery>false</am-delivery>
      <guaranteed-delivery>true</guaranteed-delivery>
      <expected-transit-time>1</expected-transit-time>
      <expected-delivery-date>2026-10-20</expected-delivery-date>
    </service-standard>
  </price-quote>
</price-quotes>
"""

MESSAGES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<messages xmlns="http://www.canadapost.ca/ws/messages">
  <message>
    <code>E002</code>
    <description>AA004: You cannot mail on behalf of the requested customer.</description>
  </message>
</messages>
"""


class FakeCarrierClient(ICarrierClient):
    """按预设结果应答的承运商，记录每次调用。"""

    def __init__(self, catalog=None, details=None, quotes=None):
        self.catalog = catalog if catalog is not None else CarrierResult.success([])
        self.details = details or {}
        self.quotes = quotes or {}
        self.calls: list[tuple[str, object]] = []

    async def fetch_service_catalog(self, country_code):
        self.calls.append(("catalog", country_code))
        return self.catalog

    async def fetch_service_detail(self, service):
        self.calls.append(("detail", service.code))
        return self.details[service.code]

    async def fetch_rate_quotes(self, request):
        self.calls.append(("quote", request))
        return self.quotes[request.service_code]


@pytest.fixture
def temp_dir():
    """创建临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_config_file(temp_dir):
    """创建临时配置文件"""
    config_file = temp_dir / "config.yaml"
    config_file.write_text(
        """
app:
  name: "parcel-rates"
  version: "1.0.0"
  debug: true
  log_level: "DEBUG"

carrier:
  api_key: "${TEST_CP_API_KEY}"
  customer_number: "0001234567"
  contract_id: "42708517"
  use_sandbox: true
  selected_services: ["DOM.EP", "DOM.XP"]
  timeout_seconds: 5

store:
  base_currency: "USD"
  currency_rates:
    CAD: 1.25
  origin_postal_code: "K2B 8J6"
""",
        encoding="utf-8",
    )
    return config_file


@pytest.fixture
def config(temp_config_file, monkeypatch):
    """测试配置实例"""
    monkeypatch.setenv("TEST_CP_API_KEY", "user : secret")
    return Config(str(temp_config_file))


@pytest.fixture
def fake_carrier():
    return FakeCarrierClient


@pytest.fixture
def services_xml():
    return SERVICES_XML.encode("utf-8")


@pytest.fixture
def service_detail_xml():
    return SERVICE_DETAIL_XML.encode("utf-8")


@pytest.fixture
def price_quotes_xml():
    return PRICE_QUOTES_XML.encode("utf-8")


@pytest.fixture
def messages_xml():
    return MESSAGES_XML.encode("utf-8")


@pytest.fixture
def two_services():
    return [
        ServiceDescriptor(code="DOM.EP", name="Expedited Parcel", link="https://example.test/DOM.EP"),
        ServiceDescriptor(code="DOM.XP", name="Xpresspost", link="https://example.test/DOM.XP"),
    ]


@pytest.fixture
def shipping_request():
    """一件 10lb、20x12x8 英寸的商品寄往加拿大境内"""
    return ShippingRequest(
        origin_postal_code="k2b 8j6",
        shipping_address=Address(country_code="CA", zip_postal_code="h2x 1y4"),
        items=[OrderItem(weight=Decimal("10"), length=Decimal("20"), width=Decimal("12"), height=Decimal("8"))],
    )


@pytest.fixture
def catalog_failure():
    return CarrierResult.failure(CatalogUnavailableError("Canada Post services error: http 401"))


@pytest.fixture
def detail_for():
    def _detail(code: str, name: str = "", **restrictions) -> CarrierResult:
        return CarrierResult.success(ServiceDetail(code=code, name=name, restrictions=RestrictionSet(**restrictions)))

    return _detail
