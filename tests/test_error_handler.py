"""
异常处理单元测试
Error Handler Tests
"""

from unittest.mock import Mock

import pytest

from parcel_rates.core.error_handler import (
    CarrierError,
    CatalogUnavailableError,
    InputValidationError,
    RatesError,
    TransientCarrierError,
    retry,
)


class TestRetry:
    """重试装饰器测试"""

    @pytest.mark.asyncio
    async def test_retry_async_success_after_failures(self):
        """测试失败后重试成功"""
        calls = {"n": 0}

        @retry(max_attempts=3, delay=0, exceptions=(TransientCarrierError,))
        async def flaky():
            calls["n"] += 1
            if calls["n"] < 3:
                raise TransientCarrierError("http 503")
            return "ok"

        assert await flaky(logger=Mock()) == "ok"
        assert calls["n"] == 3

    @pytest.mark.asyncio
    async def test_retry_async_exhausted(self):
        """测试重试耗尽后抛出最后的异常"""
        logger = Mock()

        @retry(max_attempts=2, delay=0, exceptions=(TransientCarrierError,))
        async def always_fails():
            raise TransientCarrierError("timeout after 10s")

        with pytest.raises(TransientCarrierError):
            await always_fails(logger=logger)
        assert logger.warning.call_count == 1
        assert logger.error.call_count == 1

    @pytest.mark.asyncio
    async def test_retry_skips_unlisted_exceptions(self):
        """测试非可重试异常直接抛出"""
        calls = {"n": 0}

        @retry(max_attempts=3, delay=0, exceptions=(TransientCarrierError,))
        async def invalid():
            calls["n"] += 1
            raise InputValidationError("No shipment items")

        with pytest.raises(InputValidationError):
            await invalid(logger=Mock())
        assert calls["n"] == 1

    def test_retry_sync(self):
        """测试同步函数重试"""
        calls = {"n": 0}

        @retry(max_attempts=2, delay=0)
        def flaky():
            calls["n"] += 1
            if calls["n"] == 1:
                raise ValueError("first")
            return calls["n"]

        assert flaky(logger=Mock()) == 2

    def test_retry_max_attempts_floor(self):
        """测试最少尝试一次"""
        calls = {"n": 0}

        @retry(max_attempts=0, delay=0)
        def once():
            calls["n"] += 1
            return "done"

        assert once(logger=Mock()) == "done"
        assert calls["n"] == 1


class TestExceptions:
    """异常类测试"""

    def test_rates_error_to_dict(self):
        """测试异常序列化"""
        error = CatalogUnavailableError("Canada Post services error: http 401", details={"status_code": 401})

        assert error.to_dict() == {
            "type": "CatalogUnavailableError",
            "message": "Canada Post services error: http 401",
            "details": {"status_code": 401},
        }
        assert str(error) == "Canada Post services error: http 401"

    def test_exception_hierarchy(self):
        """测试异常继承关系"""
        assert issubclass(TransientCarrierError, CarrierError)
        assert issubclass(CatalogUnavailableError, CarrierError)
        assert issubclass(CarrierError, RatesError)
        assert issubclass(InputValidationError, RatesError)
        assert RatesError("x").details == {}
