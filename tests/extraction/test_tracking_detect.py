# tests/extraction/test_tracking_detect.py
from parser.services.tracking_detect_service import TrackingDetectService


def test_facebook_pixel_detected_once(make_soup):
    """One fbq init script yields exactly one facebook-pixel code."""
    soup = make_soup("<script>fbq('init','123456789'); fbq('track','PageView');</script>")

    codes = TrackingDetectService(soup).detect_tracking_codes()

    assert len(codes) == 1
    assert codes[0].type == "facebook-pixel"
    assert codes[0].selector == 'script:contains("123456789")'
    assert codes[0].id == "tracking-1"
    assert codes[0].should_remove is False


def test_external_script_vendors(make_soup):
    soup = make_soup("""
        <script async src="https://www.googletagmanager.com/gtag/js?id=G-ABC123"></script>
        <script>gtag('config', 'G-ABC123');</script>
        <script src="https://static.hotjar.com/c/hotjar-1.js"></script>
    """)

    codes = TrackingDetectService(soup).detect_tracking_codes()

    assert [c.type for c in codes] == ["google-analytics", "google-analytics", "custom"]
    assert codes[0].selector == 'script[src*="www.googletagmanager.com"]'
    assert codes[2].code == "https://static.hotjar.com/c/hotjar-1.js"


def test_noscript_pixel_image_and_verification_meta(make_soup):
    soup = make_soup("""
        <meta name="facebook-domain-verification" content="abc123">
        <noscript><img height="1" width="1" src="https://www.facebook.com/tr?id=1&ev=PageView"></noscript>
        <img src="https://ads.example/beacon.gif" width="1" height="1">
    """)

    codes = TrackingDetectService(soup).detect_tracking_codes()
    types = [(c.type, c.selector) for c in codes]

    assert ("facebook-pixel", 'noscript:contains("facebook.com/tr")') in types
    assert ("other", 'img[src*="ads.example"]') in types
    assert ("facebook-pixel", 'meta[name="facebook-domain-verification"]') in types


FB_PIXEL_SNIPPET = """
<script>
!function(f,b,e,v,n,t,s){if(f.fbq)return;n=f.fbq=function(){n.callMethod?
n.callMethod.apply(n,arguments):n.queue.push(arguments)};t=b.createElement(e);
t.async=!0;t.src=v;s=b.getElementsByTagName(e)[0];s.parentNode.insertBefore(t,s)}
(window, document,'script','https://connect.facebook.net/en_US/fbevents.js');
fbq('init', '123456789');
fbq('track', 'PageView');
</script>
<noscript><img height="1" width="1" style="display:none"
src="https://www.facebook.com/tr?id=123456789&ev=PageView&noscript=1"/></noscript>
"""


def test_full_facebook_snippet_does_not_report_noscript_image_again(make_soup):
    """The <img> inside a recorded noscript fallback is not a second pixel."""
    codes = TrackingDetectService(make_soup(FB_PIXEL_SNIPPET)).detect_tracking_codes()

    assert [(c.type, c.selector) for c in codes] == [
        ("facebook-pixel", 'script:contains("123456789")'),
        ("facebook-pixel", 'noscript:contains("facebook.com/tr")'),
        ("other", "noscript"),
    ]
    assert not any(c.selector.startswith("img[") for c in codes)
