"""
包裹运价计算
Parcel Rates

按承运商服务限制拆分包裹并汇总 Canada Post 运价
"""

__version__ = "1.0.0"
__author__ = "Project Team"

from .core.config import Config
from .core.logger import Logger

__all__ = [
    "Config",
    "Logger",
    "__version__",
]
