# tests/loading/test_url_utils.py
from scraper.utils.url_utils import UrlUtils


def test_compute_base_url_drops_last_segment():
    """The base for relative paths is origin plus the directory of the final URL."""
    assert UrlUtils.compute_base_url("https://lp.example.com/offers/v2/index.html") == \
        "https://lp.example.com/offers/v2"
    assert UrlUtils.compute_base_url("https://lp.example.com/") == "https://lp.example.com"


def test_resolve_url_rules():
    base = "https://lp.example.com/offers"
    assert UrlUtils.resolve_url("data:image/png;base64,AAA", base) == "data:image/png;base64,AAA"
    assert UrlUtils.resolve_url("//cdn.example.com/a.png", base) == "https://cdn.example.com/a.png"
    assert UrlUtils.resolve_url("https://other.example/a.png", base) == "https://other.example/a.png"
    assert UrlUtils.resolve_url("./img/a.png", base) == "https://lp.example.com/offers/img/a.png"
    assert UrlUtils.resolve_url("img/a.png", base) == "https://lp.example.com/offers/img/a.png"
    assert UrlUtils.resolve_url("/static/a.png", base) == "https://lp.example.com/static/a.png"


def test_resolve_url_without_base_keeps_relative_reference():
    """Without a base URL a relative reference is returned unchanged."""
    assert UrlUtils.resolve_url("img/logo.png", "") == "img/logo.png"
    assert UrlUtils.resolve_url("", "https://lp.example.com") == ""


def test_fix_css_urls_rewrites_only_relative_references():
    css = "body{background:url('bg.png')} .a{background:url(https://cdn.example/x.png)}"
    fixed = UrlUtils.fix_css_urls(css, "https://lp.example.com/css/")
    assert "url('https://lp.example.com/css/bg.png')" in fixed
    assert "url(https://cdn.example/x.png)" in fixed


def test_file_name_extension_and_mime():
    assert UrlUtils.get_file_name("https://lp.example.com/img/logo.png?v=2") == "logo.png"
    assert UrlUtils.get_file_name("https://lp.example.com/") == "unknown"
    assert UrlUtils.get_extension("img/Photo.JPG") == "jpg"
    assert UrlUtils.guess_mime_type("a/b.webp") == "image/webp"
    assert UrlUtils.guess_mime_type("a/b.unknown") == "application/octet-stream"
    assert UrlUtils.guess_mime_type("a/b", default="image/png") == "image/png"
