import json
import unittest

import httpx

from support import make_settings

from adapters.http_client import (
    build_url,
    normalize_base_url,
    normalize_path,
    open_admin_api,
)
from core.domain.errors import HttpError
from core.interfaces.admin_api import AdminApi


class TestUrls(unittest.TestCase):
    def test_base_url_gets_admin_api_suffix(self) -> None:
        self.assertEqual(normalize_base_url("http://h/"), "http://h/admin-api")
        self.assertEqual(normalize_base_url("http://h/admin-api/"), "http://h/admin-api")

    def test_path_normalization(self) -> None:
        self.assertEqual(normalize_path("widgets"), "/widgets")
        self.assertEqual(normalize_path("/admin-api/widgets"), "/widgets")
        self.assertEqual(normalize_path("/admin-api"), "/")

    def test_build_url_collapses_slashes(self) -> None:
        self.assertEqual(build_url("http://h/", "//widgets//1"), "http://h/admin-api/widgets/1")
        self.assertEqual(build_url("http://h", "https://other/x"), "https://other/x")


class TestAdminApiClient(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.requests = []
        self.settings = make_settings(api_token="secret")

    def transport(self, handler):
        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        return httpx.MockTransport(_handler)

    async def test_json_round_trip(self) -> None:
        transport = self.transport(lambda r: httpx.Response(200, json={"content": [], "totalElements": 0}))
        async with open_admin_api(self.settings, transport=transport) as api:
            self.assertIsInstance(api, AdminApi)
            result = await api.raw("post", "/widgets", query={"page": "0"}, body={"name": "w"})

        self.assertEqual(result, {"content": [], "totalElements": 0})
        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), "http://api.test/admin-api/widgets?page=0")
        self.assertEqual(json.loads(request.content), {"name": "w"})
        self.assertEqual(request.headers["Authorization"], "Bearer secret")
        self.assertEqual(request.headers["Content-Type"], "application/json")

    async def test_no_body_sends_empty_content(self) -> None:
        transport = self.transport(lambda r: httpx.Response(204))
        async with open_admin_api(self.settings, transport=transport) as api:
            self.assertIsNone(await api.raw("DELETE", "/widgets/1"))
        self.assertEqual(self.requests[0].content, b"")

    async def test_text_response(self) -> None:
        transport = self.transport(lambda r: httpx.Response(200, text="pong"))
        async with open_admin_api(self.settings, transport=transport) as api:
            self.assertEqual(await api.raw("GET", "/ping"), "pong")

    async def test_json_error_message(self) -> None:
        body = {"message": "Widget not found", "code": "NOT_FOUND"}
        transport = self.transport(lambda r: httpx.Response(404, json=body))
        async with open_admin_api(self.settings, transport=transport) as api:
            with self.assertRaises(HttpError) as ctx:
                await api.raw("GET", "/widgets/9")
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(ctx.exception.message, "Widget not found")
        self.assertEqual(ctx.exception.data, body)
        self.assertEqual(ctx.exception.code, "NOT_FOUND")

    async def test_json_error_without_message_uses_json_text(self) -> None:
        transport = self.transport(lambda r: httpx.Response(400, json={"field": "name"}))
        async with open_admin_api(self.settings, transport=transport) as api:
            with self.assertRaises(HttpError) as ctx:
                await api.raw("POST", "/widgets", body={})
        self.assertEqual(ctx.exception.message, '{"field": "name"}')

    async def test_plain_error(self) -> None:
        transport = self.transport(lambda r: httpx.Response(502))
        async with open_admin_api(self.settings, transport=transport) as api:
            with self.assertRaises(HttpError) as ctx:
                await api.raw("GET", "/widgets")
        self.assertEqual(ctx.exception.message, "Request failed with status 502")

    async def test_transport_failure(self) -> None:
        def _fail(request):
            raise httpx.ConnectError("refused", request=request)

        async with open_admin_api(self.settings, transport=self.transport(_fail)) as api:
            with self.assertRaises(HttpError) as ctx:
                await api.raw("GET", "/widgets")
        self.assertEqual(ctx.exception.status, 0)


if __name__ == "__main__":
    unittest.main()
