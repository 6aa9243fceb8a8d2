# tests/loading/test_load_controller.py
import asyncio

import pytest

from scraper.controllers.load_controller import LoadController
from scraper.exceptions import FetchError, NoDocumentFoundError
from scraper.services.http_fetch_service import HttpFetchService

PAGE = "https://lp.example.com/offer"
FINAL = "https://lp.example.com/v2/index.html"

PAGE_HTML = """<html><head><title>Offer</title>
<meta name="description" content="Best offer">
<link rel="stylesheet" href="css/site.css">
<script src="js/app.js"></script>
</head><body>
<img src="img/hero.jpg">
<img src="https://cdn.example.com/huge.jpg">
</body></html>"""


@pytest.fixture
def site_routes(fake_response):
    return {
        PAGE: fake_response(PAGE_HTML, url=FINAL),
        "https://lp.example.com/v2/css/site.css": fake_response("body{background:url('bg.png')}"),
        "https://lp.example.com/v2/js/app.js": fake_response("console.log('ready');"),
        "https://lp.example.com/v2/img/hero.jpg": fake_response(b"JPEGDATA", headers={"content-type": "image/jpeg"}),
        "https://cdn.example.com/huge.jpg": fake_response(
            b"x", headers={"content-length": str(5 * 1024 * 1024), "content-type": "image/jpeg"}
        ),
    }


def test_load_url_inlines_assets_against_final_directory(fake_session, site_routes):
    session = fake_session(site_routes)
    controller = LoadController(fetcher=HttpFetchService(session=session))

    document = asyncio.run(controller.load_url(PAGE))

    assert document.resolved_url == FINAL
    assert document.base_url == "https://lp.example.com/v2"
    assert document.title == "Offer"
    assert document.description == "Best offer"
    assert "/* Source: https://lp.example.com/v2/css/site.css */" in document.html
    assert "url('https://lp.example.com/v2/css/bg.png')" in document.html
    assert "console.log('ready');" in document.html
    assert 'src="js/app.js"' not in document.html
    assert 'src="https://lp.example.com/v2/img/hero.jpg"' in document.html
    assert document.original_size == len(PAGE_HTML)
    assert session.closed is False


def test_load_url_failed_stylesheet_keeps_link_tag(fake_session, site_routes):
    del site_routes["https://lp.example.com/v2/css/site.css"]
    controller = LoadController(fetcher=HttpFetchService(session=fake_session(site_routes)))

    document = asyncio.run(controller.load_url(PAGE))

    assert 'href="css/site.css"' in document.html
    assert "console.log('ready');" in document.html


def test_load_url_embeds_images_but_skips_oversized(fake_session, site_routes):
    controller = LoadController(fetcher=HttpFetchService(session=fake_session(site_routes)))

    document = asyncio.run(controller.load_url(PAGE, embed_images=True))

    assert "data:image/jpeg;base64,SlBFR0RBVEE=" in document.html
    assert 'src="https://cdn.example.com/huge.jpg"' in document.html


def test_load_url_raises_fetch_error_on_404(fake_session):
    controller = LoadController(fetcher=HttpFetchService(session=fake_session({})))

    with pytest.raises(FetchError):
        asyncio.run(controller.load_url(PAGE))


def test_load_html_defaults_title():
    document = LoadController().load_html("<p>No head here</p>", source_file_name="page.html")

    assert document.title == "Untitled"
    assert document.source_file_name == "page.html"
    assert document.bundled_assets == []


def test_load_zip_uses_index_and_bundles_assets(make_zip):
    data = make_zip({
        "site/index.html": "<html><head><title>Zipped</title></head><body><img src='img/logo.png'></body></html>",
        "site/img/logo.png": b"\x89PNG-logo",
        "site/readme.txt": "ignored",
    })

    document = LoadController().load_zip(data, "site.zip")

    assert document.title == "Zipped"
    assert document.source_file_name == "site.zip"
    assert [a.original_url for a in document.bundled_assets] == ["img/logo.png"]


def test_load_zip_without_html_raises(make_zip):
    data = make_zip({"img/logo.png": b"\x89PNG"})

    with pytest.raises(NoDocumentFoundError) as excinfo:
        LoadController().load_zip(data, "assets.zip")
    assert excinfo.value.archive_name == "assets.zip"


def test_load_zip_rejects_non_archive_bytes():
    with pytest.raises(NoDocumentFoundError):
        LoadController().load_zip(b"definitely not a zip", "broken.zip")
