"""Canada Post 运价计算模块。"""

from .aggregator import QuoteAggregator
from .carrier import CanadaPostClient, ICarrierClient
from .measures import CurrencyService, MeasureService
from .models import (
    Address,
    CarrierResult,
    CarrierSettings,
    NormalizedParcel,
    OrderItem,
    ParcelPlan,
    QuoteResult,
    RateRequest,
    RateResponse,
    RestrictionSet,
    ServiceDescriptor,
    ServiceDetail,
    ShippingOption,
    ShippingRequest,
)
from .normalizer import UnitNormalizer
from .planner import ParcelPlanner
from .request_builder import QuoteRequestBuilder

__all__ = [
    "Address",
    "CanadaPostClient",
    "CarrierResult",
    "CarrierSettings",
    "CurrencyService",
    "ICarrierClient",
    "MeasureService",
    "NormalizedParcel",
    "OrderItem",
    "ParcelPlan",
    "ParcelPlanner",
    "QuoteAggregator",
    "QuoteRequestBuilder",
    "QuoteResult",
    "RateRequest",
    "RateResponse",
    "RestrictionSet",
    "ServiceDescriptor",
    "ServiceDetail",
    "ShippingOption",
    "ShippingRequest",
    "UnitNormalizer",
]
