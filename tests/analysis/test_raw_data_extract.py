# tests/analysis/test_raw_data_extract.py
from analyzer.services.raw_data_extract_service import (
    TRACKING_URL_CASCADE,
    RawDataExtractService,
    TrackingUrlSubject,
    categorize_images,
)

PAGE = """<html><head><style>.bg { background: url('img/bg-pattern.png'); }</style></head><body>
<h1>Hi</h1>
<h2>Meet singles tonight</h2>
<p>Short para</p>
<p>This is a long paragraph with more than twenty characters.</p>
<a class="btn" href="https://trk.example/click?o=1">Find matches</a>
<button>Yes</button>
<img src="https://cdn.example/model-1.jpg">
<img src="https://px.example/pixel.gif">
<img src="data:image/png;base64,AAAA">
<div style="background-image: url(https://cdn.example/hero-bg.jpg)"></div>
<form action="/go"><input name="email"><input placeholder="Zip"></form>
<ul><li>One</li><li>Two</li></ul>
<script>var currentStep = 0;</script>
</body></html>"""


def test_raw_inventory(make_soup):
    raw = RawDataExtractService(make_soup(PAGE)).extract_raw_data()

    assert raw.headlines == ["Meet singles tonight"]
    assert raw.buttons == ["Find matches", "Yes"]
    assert raw.images == ["https://cdn.example/model-1.jpg"]
    assert raw.background_images == ["https://cdn.example/hero-bg.jpg", "img/bg-pattern.png"]
    assert [(f.action, f.fields) for f in raw.forms] == [("/go", ["email", "Zip"])]
    assert raw.paragraphs == ["This is a long paragraph with more than twenty characters."]
    assert raw.lists == ["One | Two"]
    assert raw.has_multi_step is True
    assert raw.script_excerpt == "var currentStep = 0;"


def test_tracking_url_rules(make_soup):
    def trace(html):
        soup = make_soup(html)
        return TRACKING_URL_CASCADE.trace(TrackingUrlSubject(soup, str(soup)))

    assert trace('<script>var REDIRECT_URL = "https://r.example/x";</script>') == (
        "https://r.example/x", "redirect-assignment")
    assert trace('<a href="/click/1">rel</a><a href="https://t.example/track/2">abs</a>') == (
        "https://t.example/track/2", "tracking-anchor")
    assert trace('<a href="https://offer.example/start">Start now</a>') == (
        "https://offer.example/start", "cta-text-anchor")
    assert trace('<form action="https://crm.example/post"></form>') == ("https://crm.example/post", "form-action")


def test_detect_tracking_url_defaults_to_empty(make_soup):
    assert RawDataExtractService(make_soup('<a href="/join">Join</a>')).detect_tracking_url() == ""
    assert RawDataExtractService(make_soup(PAGE)).detect_tracking_url() == "https://trk.example/click?o=1"


def test_categorize_images():
    images = categorize_images(
        [
            "https://cdn.test/first.jpg",
            "https://cdn.test/star-badge.png",
            "https://cdn.test/logo.svg",
            "https://cdn.test/snowflake.png",
            "https://cdn.test/other.jpg",
        ],
        ["https://cdn.test/texture.jpg"],
    )

    assert [(i.type, i.position, i.is_required) for i in images] == [
        ("background", "background", False),
        ("hero", "hook", True),
        ("badge", "cta", False),
        ("icon", "hook", False),
        ("decorative", "background", False),
        ("decorative", "floating", False),
    ]
