# tests/conftest.py
import io
import json
import zipfile

import pytest
from bs4 import BeautifulSoup

from pagescope.core.managers.config_manager import ConfigManager
from pagescope.core.utils.path_utils import PathUtils

# A small, predictable configuration for the tests
MOCK_SETTINGS_CONTENT = {
    "logging": {
        "level": "WARNING",
        "module_levels": {"scraper": "DEBUG"},
        "silenced": {"aiohttp": "ERROR"}
    },
    "scraper": {
        "image_timeout": 0.5,
        "max_image_bytes": 1024
    },
    "analyzer": {
        "min_sections": 5
    }
}


class FakeResponse:
    """Just enough of aiohttp.ClientResponse for the fetch service."""

    def __init__(self, body=b"", status=200, reason="OK", url="", headers=None):
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.status = status
        self.reason = reason
        self.url = url
        self.headers = headers or {}

    async def text(self):
        return self.body.decode("utf-8")

    async def read(self):
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """
    Routes GETs to canned responses. A route may also be an exception
    instance, which is raised when the URL is requested. Unknown URLs 404.
    """

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requested = []
        self.closed = False

    def get(self, url, **kwargs):
        self.requested.append(url)
        route = self.routes.get(url)
        if isinstance(route, BaseException):
            raise route
        if route is None:
            return FakeResponse(status=404, reason="Not Found", url=url)
        if not route.url:
            route.url = url
        return route

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    def _make(routes=None):
        return FakeSession(routes)
    return _make


@pytest.fixture
def make_soup():
    def _make(html):
        return BeautifulSoup(html, "html.parser")
    return _make


@pytest.fixture
def make_zip():
    def _make(entries):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            for name, content in entries.items():
                archive.writestr(name, content)
        return buffer.getvalue()
    return _make


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    An isolated environment for the ConfigManager:
    - creates a temporary package root;
    - writes a fake 'settings.json' into it;
    - points PathUtils at that location.
    The real settings are reloaded afterwards.
    """
    package_root = tmp_path / "pagescope"
    package_root.mkdir()
    settings_file = package_root / "settings.json"
    settings_file.write_text(json.dumps(MOCK_SETTINGS_CONTENT))

    monkeypatch.setattr(PathUtils, 'get_package_root', lambda: package_root)

    # The singleton may already be loaded with the real settings.
    config_manager_instance = ConfigManager()
    config_manager_instance.reset()

    yield config_manager_instance

    monkeypatch.undo()
    config_manager_instance.reset()
