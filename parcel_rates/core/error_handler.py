"""
统一异常处理模块
Unified Error Handling

运价计算的异常体系与重试装饰器
"""

import asyncio
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional

from parcel_rates.core.logger import get_logger


def retry(max_attempts: int = 3, delay: float = 1.0,
          backoff_factor: float = 2.0,
          exceptions: tuple = (Exception,)):
    """
    重试装饰器

    Args:
        max_attempts: 最大尝试次数
        delay: 初始延迟时间（秒）
        backoff_factor: 退避因子
        exceptions: 需要重试的异常类型
    """
    max_attempts = max(1, int(max_attempts))

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            logger = kwargs.pop("logger", None) or get_logger()

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts - 1:
                        logger.error(f"Final attempt failed for {func.__name__}: {e}")
                        raise

                    wait_time = delay * (backoff_factor ** attempt)
                    logger.warning(
                        f"Attempt {attempt + 1} failed for {func.__name__}: {e}. "
                        f"Retrying in {wait_time:.1f}s..."
                    )
                    await asyncio.sleep(wait_time)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            logger = kwargs.pop("logger", None) or get_logger()

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts - 1:
                        logger.error(f"Final attempt failed for {func.__name__}: {e}")
                        raise

                    wait_time = delay * (backoff_factor ** attempt)
                    logger.warning(
                        f"Attempt {attempt + 1} failed for {func.__name__}: {e}. "
                        f"Retrying in {wait_time:.1f}s..."
                    )
                    time.sleep(wait_time)

        return async_wrapper if asyncio.iscoroutinefunction(func) else sync_wrapper
    return decorator


class RatesError(Exception):
    """基础异常类"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(RatesError):
    """配置错误"""
    pass


class InputValidationError(RatesError):
    """询价请求缺少必要信息，不可重试"""
    pass


class UnitUnavailableError(RatesError):
    """度量单位未注册，无法换算包裹重量或尺寸"""
    pass


class CurrencyUnavailableError(RatesError):
    """货币未注册，无法换算运费"""
    pass


class CarrierError(RatesError):
    """承运商接口错误"""
    pass


class CatalogUnavailableError(CarrierError):
    """服务目录获取失败"""
    pass


class ServiceDetailUnavailableError(CarrierError):
    """单个服务的限制信息获取失败"""
    pass


class QuoteUnavailableError(CarrierError):
    """单个服务的运价获取失败"""
    pass


class TransientCarrierError(CarrierError):
    """超时、网络中断、5xx 等可重试的传输错误"""
    pass
