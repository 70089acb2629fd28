"""运价计算领域模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal
from enum import Enum
from typing import Any, Generic, TypeVar, Union

from parcel_rates.core.error_handler import CarrierError

T = TypeVar("T")

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        return ZERO
    return Decimal(str(value).strip())


def round_decimal(value: Decimal, places: int) -> Decimal:
    """四舍六入五成双，与承运商侧的取整方式一致。"""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_EVEN)


@dataclass(slots=True)
class Address:
    country_code: str | None = None
    zip_postal_code: str | None = None


@dataclass(slots=True)
class OrderItem:
    """订单行：单件重量与尺寸均为店铺主单位。"""

    weight: Decimal = ZERO
    length: Decimal = ZERO
    width: Decimal = ZERO
    height: Decimal = ZERO
    quantity: int = 1
    is_free_shipping: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OrderItem":
        return cls(
            weight=to_decimal(data.get("weight")),
            length=to_decimal(data.get("length")),
            width=to_decimal(data.get("width")),
            height=to_decimal(data.get("height")),
            quantity=max(1, int(data.get("quantity") or 1)),
            is_free_shipping=bool(data.get("is_free_shipping", False)),
        )


@dataclass(slots=True)
class ShippingRequest:
    """询价请求。"""

    origin_postal_code: str = ""
    shipping_address: Address | None = None
    items: list[OrderItem] | None = None


@dataclass(frozen=True, slots=True)
class NormalizedParcel:
    """承运商单位下的整单包裹：kg / cm，且 length >= width >= height。"""

    weight: Decimal
    length: Decimal
    width: Decimal
    height: Decimal

    @property
    def girth(self) -> Decimal:
        return 2 * (self.width + self.height) + self.length

    @property
    def dimension_sum(self) -> Decimal:
        return self.length + self.width + self.height


@dataclass(frozen=True, slots=True)
class ServiceDescriptor:
    code: str
    name: str = ""
    link: str = ""
    media_type: str = ""


@dataclass(frozen=True, slots=True)
class RestrictionSet:
    """服务限制。None 表示不限；承运商用 0 表示不限，统一归一为 None。"""

    max_weight: Decimal | None = None  # grams
    max_length: Decimal | None = None
    max_width: Decimal | None = None
    max_height: Decimal | None = None
    max_girth: Decimal | None = None
    max_dimension_sum: Decimal | None = None

    def __post_init__(self) -> None:
        for name in (
            "max_weight",
            "max_length",
            "max_width",
            "max_height",
            "max_girth",
            "max_dimension_sum",
        ):
            value = getattr(self, name)
            if value is None:
                continue
            value = to_decimal(value)
            object.__setattr__(self, name, value if value > 0 else None)


@dataclass(slots=True)
class ServiceDetail:
    code: str
    name: str = ""
    restrictions: RestrictionSet = field(default_factory=RestrictionSet)


@dataclass(frozen=True, slots=True)
class ParcelPlan:
    """拆分结果：包裹数与每个包裹的重量/尺寸。"""

    parcel_count: int
    weight: Decimal
    length: Decimal
    width: Decimal
    height: Decimal


@dataclass(frozen=True, slots=True)
class DomesticDestination:
    postal_code: str


@dataclass(frozen=True, slots=True)
class CrossBorderDestination:
    zip_code: str


@dataclass(frozen=True, slots=True)
class InternationalDestination:
    country_code: str


Destination = Union[DomesticDestination, CrossBorderDestination, InternationalDestination]


class QuoteType(str, Enum):
    COUNTER = "counter"
    COMMERCIAL = "commercial"


@dataclass(frozen=True, slots=True)
class RateRequest:
    quote_type: QuoteType
    service_code: str
    origin_postal_code: str
    destination: Destination
    plan: ParcelPlan
    customer_number: str | None = None
    contract_id: str | None = None


@dataclass(slots=True)
class QuoteResult:
    """承运商返回的单条运价（CAD）。"""

    service_code: str
    service_name: str
    due: Decimal
    expected_transit_time: str | None = None


@dataclass(slots=True)
class ShippingOption:
    name: str
    rate: Decimal
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "rate": str(round_decimal(self.rate, 2)),
            "description": self.description,
        }


@dataclass(slots=True)
class RateResponse:
    shipping_options: list[ShippingOption] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "shipping_options": [option.to_dict() for option in self.shipping_options],
            "errors": list(self.errors),
        }


@dataclass
class CarrierResult(Generic[T]):
    """承运商调用结果：要么有值，要么有结构化错误。"""

    value: T | None = None
    error: CarrierError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "CarrierResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: CarrierError) -> "CarrierResult[T]":
        return cls(error=error)


@dataclass(frozen=True, slots=True)
class CarrierSettings:
    """单次询价使用的只读商户配置。"""

    api_key: str = ""
    customer_number: str = ""
    contract_id: str = ""
    use_sandbox: bool = True
    selected_services: tuple[str, ...] = ()

    @property
    def is_commercial(self) -> bool:
        return bool(self.customer_number)

    @classmethod
    def from_config(cls, carrier_cfg: dict[str, Any]) -> "CarrierSettings":
        return cls(
            api_key=str(carrier_cfg.get("api_key") or "").replace(" : ", ":").strip(),
            customer_number=str(carrier_cfg.get("customer_number") or "").strip(),
            contract_id=str(carrier_cfg.get("contract_id") or "").strip(),
            use_sandbox=bool(carrier_cfg.get("use_sandbox", True)),
            selected_services=tuple(carrier_cfg.get("selected_services") or ()),
        )
