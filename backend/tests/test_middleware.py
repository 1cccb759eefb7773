"""
中间件单元测试
测试请求日志中间件的响应头与日志
"""

import logging

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
class TestRequestLoggingMiddleware:
    """请求日志中间件测试"""

    async def test_request_id_and_timing_headers(self, client: AsyncClient):
        response = await client.get("/api")
        assert response.status_code == 200
        assert response.headers.get("X-Request-ID")
        assert response.headers.get("X-Response-Time", "").endswith("ms")

    async def test_upstream_request_id_kept(self, client: AsyncClient):
        response = await client.get("/api", headers={"X-Request-ID": "abc123"})
        assert response.headers.get("X-Request-ID") == "abc123"

    async def test_skip_paths(self, client: AsyncClient):
        response = await client.get("/health")
        assert "X-Request-ID" not in response.headers

    async def test_error_request_logged(self, client: AsyncClient, caplog):
        with caplog.at_level(logging.WARNING, logger="core.middleware"):
            response = await client.get("/api/v1/menus")
        assert response.status_code == 401
        assert any("[请求错误]" in r.getMessage() for r in caplog.records)
