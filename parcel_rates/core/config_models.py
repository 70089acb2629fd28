"""
配置模型与验证
Configuration Models and Validation

使用Pydantic进行配置验证
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_WEIGHT_UNITS: Dict[str, float] = {
    "lb": 1.0,
    "ounce": 16.0,
    "kg": 0.45359237,
    "grams": 453.59237,
}

DEFAULT_DIMENSION_UNITS: Dict[str, float] = {
    "inches": 1.0,
    "feet": 0.08333333,
    "meters": 0.0254,
    "millimetres": 25.4,
}


class AppConfig(BaseModel):
    """应用配置模型"""
    name: str = Field(default="parcel-rates", description="应用名称")
    version: str = Field(default="1.0.0", description="版本号")
    debug: bool = Field(default=False, description="调试模式")
    log_level: str = Field(default="INFO", description="日志级别")
    logs_dir: str = Field(default="logs", description="日志目录")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """验证日志级别"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {v}")
        return v


class CarrierConfig(BaseModel):
    """承运商（Canada Post）接口配置模型"""
    api_key: str = Field(default="", description="API 密钥，格式 user:password")
    customer_number: str = Field(default="", description="商户客户号，填写后按合同价询价")
    contract_id: str = Field(default="", description="合同号")
    use_sandbox: bool = Field(default=True, description="是否使用沙箱环境")
    selected_services: List[str] = Field(default_factory=list, description="开通的服务代码")
    base_url: str = Field(default="https://soa-gw.canadapost.ca", description="生产环境地址")
    sandbox_url: str = Field(default="https://ct.soa-gw.canadapost.ca", description="沙箱环境地址")
    timeout_seconds: float = Field(default=10.0, gt=0, le=120, description="单次请求超时（秒）")
    retry_times: int = Field(default=2, ge=1, le=10, description="只读请求最大尝试次数")
    retry_delay_seconds: float = Field(default=0.5, ge=0, le=30, description="重试初始间隔（秒）")
    max_concurrency: int = Field(default=1, ge=1, le=16, description="同时询价的服务数")

    @field_validator("api_key")
    @classmethod
    def clean_api_key(cls, v):
        """后台复制出的密钥带有 ' : ' 空格"""
        return (v or "").replace(" : ", ":").strip()

    @field_validator("selected_services", mode="before")
    @classmethod
    def split_selected_services(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class StoreConfig(BaseModel):
    """店铺度量与货币配置模型"""
    base_currency: str = Field(default="CAD", description="店铺基础货币")
    currency_rates: Dict[str, float] = Field(
        default_factory=lambda: {"CAD": 1.0},
        description="每 1 单位基础货币可兑换的外币数量",
    )
    origin_postal_code: str = Field(default="", description="默认发货邮编")
    primary_weight_unit: str = Field(default="lb", description="商品重量所用单位")
    primary_dimension_unit: str = Field(default="inches", description="商品尺寸所用单位")
    weight_units: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_WEIGHT_UNITS))
    dimension_units: Dict[str, float] = Field(default_factory=lambda: dict(DEFAULT_DIMENSION_UNITS))

    @field_validator("base_currency")
    @classmethod
    def upper_base_currency(cls, v):
        return (v or "").strip().upper()

    @field_validator("currency_rates")
    @classmethod
    def validate_currency_rates(cls, v):
        rates = {}
        for code, rate in (v or {}).items():
            if float(rate) <= 0:
                raise ValueError(f"currency rate for {code} must be positive")
            rates[str(code).strip().upper()] = float(rate)
        return rates

    @field_validator("weight_units", "dimension_units")
    @classmethod
    def validate_unit_ratios(cls, v):
        for keyword, ratio in (v or {}).items():
            if float(ratio) <= 0:
                raise ValueError(f"unit ratio for {keyword} must be positive")
        return v


class ConfigModel(BaseModel):
    """完整配置模型"""
    app: AppConfig = Field(default_factory=AppConfig)
    carrier: CarrierConfig = Field(default_factory=CarrierConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("store")
    @classmethod
    def validate_base_currency_rate(cls, v):
        """基础货币自身汇率固定为 1"""
        if v.base_currency and v.base_currency not in v.currency_rates:
            v.currency_rates[v.base_currency] = 1.0
        return v

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ConfigModel":
        """从字典创建配置"""
        return cls(**(data or {}))
