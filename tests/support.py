import copy
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if SRC not in sys.path:
    sys.path.insert(0, SRC)

from core.catalog import parse_catalog
from core.config import AppSettings


WIDGET_SAMPLE = '{\n  "name": "",\n  "enabled": false,\n  "weight": 0\n}'

CATALOG_DOC = {
    "generatedAt": "2024-05-01T10:00:00.000Z",
    "domains": [
        {
            "key": "widgets",
            "label": "Widgets",
            "tag": "AdminWidgetController",
            "operations": [
                {"key": "get-widgets", "method": "GET", "path": "/widgets", "pathParams": [], "queryParams": ["page", "size"]},
                {"key": "get-widgets-id", "method": "GET", "path": "/widgets/{id}", "pathParams": ["id"], "queryParams": []},
                {
                    "key": "post-widgets",
                    "method": "POST",
                    "path": "/widgets",
                    "pathParams": [],
                    "queryParams": [],
                    "sampleBody": WIDGET_SAMPLE,
                },
                {"key": "put-widgets-id", "method": "PUT", "path": "/widgets/{id}", "pathParams": ["id"], "queryParams": []},
                {"key": "delete-widgets-id", "method": "DELETE", "path": "/widgets/{id}", "pathParams": ["id"], "queryParams": []},
            ],
        },
        {
            "key": "reports",
            "label": "Reports",
            "tag": "Reports",
            "operations": [{"key": "get-reports", "method": "GET", "path": "/reports"}],
        },
        {"key": "empty", "label": "Empty", "tag": "Empty", "operations": []},
    ],
}


def catalog_doc():
    return copy.deepcopy(CATALOG_DOC)


def make_catalog():
    return parse_catalog(catalog_doc())


def make_settings(**overrides):
    values = {"api_base_url": "http://api.test", "default_page_size": 10}
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


class FakeApi:
    """Doble de `AdminApi`: registra llamadas y responde desde un mapa (method, path)."""

    def __init__(self, responses=None):
        self.calls = []
        self.responses = dict(responses or {})

    async def raw(self, method, path, *, query=None, body=None):
        self.calls.append((method, path, dict(query) if query else None, body))
        result = self.responses.get((method, path))
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(query=query, body=body)
        return result
