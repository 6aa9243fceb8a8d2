# tests/loading/test_http_fetch.py
import asyncio

import aiohttp
import pytest

from scraper.exceptions import FetchError
from scraper.model import ScrapeSettings
from scraper.services.http_fetch_service import HttpFetchService

PAGE = "https://lp.example.com/offer"


def test_fetch_page_returns_html_and_final_url(fake_session, fake_response):
    session = fake_session({PAGE: fake_response("<html></html>", url="https://lp.example.com/v2/index.html")})
    service = HttpFetchService(session=session)

    html, final_url = asyncio.run(service.fetch_page(PAGE))

    assert html == "<html></html>"
    assert final_url == "https://lp.example.com/v2/index.html"


def test_fetch_page_non_2xx_raises_fetch_error(fake_session, fake_response):
    session = fake_session({PAGE: fake_response("gone", status=410, reason="Gone")})
    service = HttpFetchService(session=session)

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(service.fetch_page(PAGE))

    assert excinfo.value.status == 410
    assert "410 Gone" in str(excinfo.value)


def test_fetch_page_transport_error_raises_fetch_error(fake_session):
    session = fake_session({PAGE: aiohttp.ClientConnectionError("refused")})
    service = HttpFetchService(session=session)

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(service.fetch_page(PAGE))
    assert excinfo.value.status is None


def test_fetch_text_degrades_to_none(fake_session):
    """Sub-resource failures are logged and return None instead of raising."""
    session = fake_session({"https://lp.example.com/timeout.css": asyncio.TimeoutError()})
    service = HttpFetchService(session=session)

    assert asyncio.run(service.fetch_text("https://lp.example.com/missing.css")) is None
    assert asyncio.run(service.fetch_text("https://lp.example.com/timeout.css")) is None


def test_fetch_image_skips_declared_oversize(fake_session, fake_response):
    url = "https://cdn.example.com/huge.jpg"
    session = fake_session({
        url: fake_response(b"x", headers={"content-length": str(3 * 1024 * 1024), "content-type": "image/jpeg"}),
    })
    service = HttpFetchService(config=ScrapeSettings(), session=session)

    assert asyncio.run(service.fetch_image(url)) is None


def test_fetch_image_skips_actual_oversize(fake_session, fake_response):
    url = "https://cdn.example.com/big.png"
    session = fake_session({url: fake_response(b"x" * 11)})
    service = HttpFetchService(config=ScrapeSettings(max_image_bytes=10), session=session)

    assert asyncio.run(service.fetch_image(url)) is None


def test_fetch_image_returns_bytes_and_content_type(fake_session, fake_response):
    url = "https://cdn.example.com/ok.png"
    session = fake_session({url: fake_response(b"\x89PNG", headers={"content-type": "image/png"})})
    service = HttpFetchService(session=session)

    assert asyncio.run(service.fetch_image(url)) == (b"\x89PNG", "image/png")


def test_injected_session_is_not_closed(fake_session):
    session = fake_session()
    service = HttpFetchService(session=session)

    asyncio.run(service.close())

    assert session.closed is False
