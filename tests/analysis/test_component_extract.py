# tests/analysis/test_component_extract.py
import pytest

from analyzer.model import PageSection
from analyzer.services.component_extract_service import ComponentExtractService, determine_button_type

PAGE = """<body>
<section class="hero">
  <h1>Meet local singles</h1>
  <p>Thousands of verified members are waiting for you</p>
  <a class="btn" href="https://go.example/join">Join now</a>
  <img src="https://cdn.example/hero.jpg" width="800" height="400">
</section>
<section id="perks">
  <h2>Why members love us</h2>
  <ul class="checklist"><li>Free signup</li><li>Private chat</li></ul>
  <button>Learn more</button>
  <button>Join now</button>
  <img src="/img/logo.png" class="brand-logo">
  <iframe src="https://www.youtube.com/embed/abc"></iframe>
</section>
</body>"""


@pytest.fixture
def components(make_soup):
    sections = [
        PageSection(id="section-1", type="hero", selector="section.hero", order=0, html=""),
        PageSection(id="section-2", type="benefits", selector="#perks", order=1, html=""),
    ]
    return ComponentExtractService(make_soup(PAGE), sections).extract_components()


def test_headlines_and_main_headline(components):
    assert [(h.text, h.level, h.is_main_headline, h.section_id) for h in components.headlines] == [
        ("Meet local singles", 1, True, "section-1"),
        ("Why members love us", 2, False, "section-2"),
    ]


def test_subheadline_and_paragraph(components):
    assert components.subheadlines[0].text == "Thousands of verified members are waiting for you"
    assert components.subheadlines[0].section_id == "section-1"
    assert components.paragraphs[0].word_count == 8


def test_buttons_deduplicated_by_text(components):
    """'Join now' appears twice but is reported once."""
    buttons = components.buttons

    assert [(b.text, b.type) for b in buttons] == [("Join now", "cta"), ("Learn more", "secondary")]
    assert buttons[0].href == "https://go.example/join"
    assert buttons[0].has_urgency is True
    assert buttons[1].section_id == "section-2"


def test_images_lists_and_videos(components):
    hero, logo = components.images

    assert hero.is_hero is True and hero.is_icon is False
    assert (hero.dimensions.width, hero.dimensions.height) == (800, 400)
    assert logo.is_icon is True and logo.is_hero is False
    assert logo.dimensions is None

    assert components.lists[0].type == "check"
    assert components.lists[0].items == ["Free signup", "Private chat"]
    assert components.videos[0].type == "youtube"
    assert components.videos[0].section_id == "section-2"


def test_button_type_rules(make_soup):
    soup = make_soup("""
        <form><input type="submit" value="Send"></form>
        <nav><a class="btn" href="/">Home</a></nav>
        <a class="btn-primary" href="#">More info</a>
    """)

    assert determine_button_type(soup.input, "Send") == "submit"
    assert determine_button_type(soup.nav.a, "Home") == "navigation"
    assert determine_button_type(soup.find("a", class_="btn-primary"), "More info") == "cta"
