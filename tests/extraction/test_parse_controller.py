# tests/extraction/test_parse_controller.py
import base64

from parser.controllers.parse_controller import ParseController
from scraper.controllers.load_controller import LoadController


def test_zip_asset_replaces_url_reference(make_zip):
    """A zip-bundled img/logo.png wins over the URL-only reference to it."""
    data = make_zip({
        "index.html": '<html><body><img src="img/logo.png"><img src="img/logo.png"></body></html>',
        "img/logo.png": b"\x89PNG-logo",
    })
    document = LoadController().load_zip(data, "landing.zip")

    page = ParseController().parse(document)

    logos = [a for a in page.assets if a.file_name == "logo.png"]
    assert len(logos) == 1
    assert logos[0].base64_data == base64.b64encode(b"\x89PNG-logo").decode("ascii")
    assert logos[0].id == "zip-asset-1"
    assert page.source_file_name == "landing.zip"


def test_page_id_is_content_hash():
    first = ParseController.page_id("<p>a</p>")
    assert first == ParseController.page_id("<p>a</p>")
    assert first != ParseController.page_id("<p>b</p>")
    assert first.startswith("page-") and len(first) == len("page-") + 12


def test_parse_collects_all_extractor_outputs():
    html = """<html><head><title>Offer</title></head><body>
        <h1>Get fit in 30 days</h1>
        <a class="btn" href="https://aff.example/?ref=1">Start now</a>
        <form action="/join" method="post"><input name="email" type="email" required>
        <input type="hidden" name="t" value="1"></form>
        <script>fbq('init','42');</script>
    </body></html>"""
    document = LoadController().load_html(html, source_url="https://lp.example.com/")

    page = ParseController().parse(document)

    assert page.title == "Offer"
    assert page.text_content[0].original_text == "Get fit in 30 days"
    assert page.links[0].type == "cta"
    assert [t.type for t in page.tracking_codes] == ["facebook-pixel"]
    assert page.forms[0].method == "POST"
    assert [f.name for f in page.forms[0].fields] == ["email"]
    assert page.forms[0].fields[0].required is True
