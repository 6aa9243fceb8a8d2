# tests/extraction/test_link_detect.py
from parser.services.link_detect_service import LINK_CASCADE, LinkDetectService, LinkSubject


def test_cta_styling_outranks_affiliate_domain(make_soup):
    """A CTA-classed anchor pointing at an affiliate network is still a CTA."""
    soup = make_soup('<a class="btn" href="https://www.clickbank.net/?hop=x">Order</a>')

    links = LinkDetectService(soup).detect_links()

    assert len(links) == 1
    assert links[0].type == "cta"
    assert links[0].confidence == 0.9
    assert links[0].anchor_text == "Order"


def test_cascade_trace_names_the_winning_rule(make_soup):
    anchor = make_soup('<a class="btn" href="https://aff.example/?ref=123">Join</a>').a
    verdict, rule = LINK_CASCADE.trace(LinkSubject(anchor["href"], anchor, ""))

    assert rule == "cta-styling"
    assert verdict.type == "cta"
    assert LINK_CASCADE.names == ["cta-styling", "affiliate", "redirect", "tracking-params", "locality"]


def test_affiliate_redirect_and_tracking_confidences(make_soup):
    soup = make_soup("""
        <p><a href="https://offer.example/path?aff=12">one</a></p>
        <p><a href="https://bit.ly/abc">two</a></p>
        <p><a href="https://shop.example/?utm_source=fb&utm_campaign=x">three</a></p>
    """)

    links = {l.original_url: l for l in LinkDetectService(soup).detect_links()}

    assert links["https://offer.example/path?aff=12"].type == "affiliate"
    assert links["https://offer.example/path?aff=12"].confidence == 0.85
    assert links["https://bit.ly/abc"].type == "redirect"
    tracking = links["https://shop.example/?utm_source=fb&utm_campaign=x"]
    assert tracking.type == "tracking"
    assert abs(tracking.confidence - 0.8) < 1e-9


def test_locality_with_base_url(make_soup):
    soup = make_soup("""
        <nav><a href="/pricing">Pricing</a></nav>
        <p><a href="/about-us">About</a></p>
        <p><a href="https://elsewhere.example/page">Elsewhere</a></p>
    """)

    links = {l.original_url: l for l in LinkDetectService(soup, "https://lp.example.com").detect_links()}

    assert links["/pricing"].type == "navigation"
    assert links["/about-us"].type == "internal"
    assert links["https://elsewhere.example/page"].type == "external"


def test_other_sources_and_ignored_schemes(make_soup):
    soup = make_soup("""
        <a href="#top">Top</a><a href="mailto:a@b.c">Mail</a><a href="javascript:void(0)">JS</a>
        <div onclick="window.location='https://go.example/next'">Go</div>
        <div data-href="/signup">Sign</div>
        <form id="lead" action="https://crm.example/submit"></form>
        <iframe src="https://player.example/embed/1"></iframe>
        <script>var px = "https://track.example/pixel.gif";</script>
    """)

    links = LinkDetectService(soup).detect_links()
    urls = [l.original_url for l in links]

    assert urls == [
        "https://go.example/next",
        "/signup",
        "https://crm.example/submit",
        "https://player.example/embed/1",
        "https://track.example/pixel.gif",
    ]
    by_url = {l.original_url: l for l in links}
    assert by_url["https://go.example/next"].detection_reason == "onclick handler"
    assert by_url["https://crm.example/submit"].type == "cta"
    assert by_url["https://crm.example/submit"].selector == "#lead"
    assert by_url["https://track.example/pixel.gif"].type == "tracking"
    assert [l.id for l in links] == ["link-1", "link-2", "link-3", "link-4", "link-5"]


def test_duplicate_urls_are_reported_once(make_soup):
    soup = make_soup('<a href="https://x.example/a">One</a><a href="https://x.example/a">Two</a>')
    assert len(LinkDetectService(soup).detect_links()) == 1
