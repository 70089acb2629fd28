"""
Canada Post rating 接口 XML 编解码
Rating XML codec (rate-v4)
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from xml.etree import ElementTree as ET

from parcel_rates.modules.rates.models import (
    CrossBorderDestination,
    Destination,
    DomesticDestination,
    InternationalDestination,
    QuoteResult,
    RateRequest,
    RestrictionSet,
    ServiceDescriptor,
    ServiceDetail,
    to_decimal,
)

RATE_NS = "http://www.canadapost.ca/ws/ship/rate-v4"
MESSAGES_NS = "http://www.canadapost.ca/ws/messages"
RATE_MEDIA_TYPE = "application/vnd.cpc.ship.rate-v4+xml"


def build_mailing_scenario(request: RateRequest) -> bytes:
    root = ET.Element("mailing-scenario", xmlns=RATE_NS)
    if request.customer_number:
        _text(root, "customer-number", request.customer_number)
    if request.contract_id:
        _text(root, "contract-id", request.contract_id)
    _text(root, "quote-type", request.quote_type.value)

    parcel = ET.SubElement(root, "parcel-characteristics")
    _text(parcel, "weight", str(request.plan.weight))
    dimensions = ET.SubElement(parcel, "dimensions")
    _text(dimensions, "length", str(request.plan.length))
    _text(dimensions, "width", str(request.plan.width))
    _text(dimensions, "height", str(request.plan.height))

    services = ET.SubElement(root, "services")
    _text(services, "service-code", request.service_code)

    _text(root, "origin-postal-code", request.origin_postal_code)
    destination = ET.SubElement(root, "destination")
    _append_destination(destination, request.destination)

    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _append_destination(parent: ET.Element, destination: Destination) -> None:
    if isinstance(destination, DomesticDestination):
        node = ET.SubElement(parent, "domestic")
        _text(node, "postal-code", destination.postal_code)
    elif isinstance(destination, CrossBorderDestination):
        node = ET.SubElement(parent, "united-states")
        _text(node, "zip-code", destination.zip_code)
    elif isinstance(destination, InternationalDestination):
        node = ET.SubElement(parent, "international")
        _text(node, "country-code", destination.country_code)
    else:
        raise TypeError(f"Unsupported destination variant: {type(destination).__name__}")


def parse_services(payload: bytes | str) -> list[ServiceDescriptor]:
    root = _parse(payload, "services")
    services: list[ServiceDescriptor] = []
    for node in root.findall("service"):
        link = node.find("link")
        services.append(
            ServiceDescriptor(
                code=_child_text(node, "service-code"),
                name=_child_text(node, "service-name"),
                link=link.get("href", "") if link is not None else "",
                media_type=link.get("media-type", "") if link is not None else "",
            )
        )
    return services


def parse_service_detail(payload: bytes | str) -> ServiceDetail:
    root = _parse(payload, "service")
    restrictions = root.find("restrictions")
    return ServiceDetail(
        code=_child_text(root, "service-code"),
        name=_child_text(root, "service-name"),
        restrictions=_parse_restrictions(restrictions) if restrictions is not None else RestrictionSet(),
    )


def _parse_restrictions(node: ET.Element) -> RestrictionSet:
    weight = node.find("weight-restriction")
    dims = node.find("dimensional-restrictions")

    def _max_attr(element: ET.Element | None):
        if element is None or element.get("max") in (None, ""):
            return None
        return _decimal(element.get("max"), f"{element.tag} max")

    def _dim_text(tag: str):
        if dims is None:
            return None
        text = _child_text(dims, tag)
        return _decimal(text, tag) if text else None

    return RestrictionSet(
        max_weight=_max_attr(weight),
        max_length=_max_attr(dims.find("length")) if dims is not None else None,
        max_width=_max_attr(dims.find("width")) if dims is not None else None,
        max_height=_max_attr(dims.find("height")) if dims is not None else None,
        max_girth=_dim_text("length-plus-girth-max"),
        max_dimension_sum=_dim_text("length-height-width-sum-max"),
    )


def parse_price_quotes(payload: bytes | str) -> list[QuoteResult]:
    root = _parse(payload, "price-quotes")
    quotes: list[QuoteResult] = []
    for node in root.findall("price-quote"):
        details = node.find("price-details")
        if details is None:
            raise ValueError("price-quote without price-details")
        transit = node.findtext("service-standard/expected-transit-time")
        quotes.append(
            QuoteResult(
                service_code=_child_text(node, "service-code"),
                service_name=_child_text(node, "service-name"),
                due=_required_decimal(details, "due"),
                expected_transit_time=transit.strip() if transit and transit.strip() else None,
            )
        )
    return quotes


def parse_messages(payload: bytes | str) -> list[str]:
    """解析承运商错误文档，返回 "code: description" 列表；非错误文档返回空列表。"""
    try:
        root = _strip_namespaces(ET.fromstring(payload))
    except ET.ParseError:
        return []
    if root.tag != "messages":
        return []
    messages = []
    for node in root.findall("message"):
        code = _child_text(node, "code")
        description = _child_text(node, "description")
        messages.append(f"{code}: {description}" if code else description)
    return messages


def _parse(payload: bytes | str, expected_root: str) -> ET.Element:
    root = _strip_namespaces(ET.fromstring(payload))
    if root.tag != expected_root:
        raise ValueError(f"Unexpected document root <{root.tag}>, expected <{expected_root}>")
    return root


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]
    return root


def _child_text(node: ET.Element, tag: str) -> str:
    return (node.findtext(tag) or "").strip()


def _required_decimal(node: ET.Element, tag: str) -> Decimal:
    text = _child_text(node, tag)
    if not text:
        raise ValueError(f"price-quote without {tag}")
    return _decimal(text, tag)


def _decimal(text: str, field: str) -> Decimal:
    try:
        value = to_decimal(text)
    except InvalidOperation as exc:
        raise ValueError(f"Non-numeric {field}: {text!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Non-numeric {field}: {text!r}")
    return value


def _text(parent: ET.Element, tag: str, value: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = value
    return element
