# tests/extraction/test_text_extract.py
from parser.services.text_extract_service import TextExtractService


def test_identical_paragraphs_emit_one_block(make_soup):
    """N identical-text paragraphs produce exactly one TextBlock."""
    soup = make_soup("<body>" + "<p>Meet singles near you tonight</p>" * 3 + "</body>")

    blocks = TextExtractService(soup).extract_text_blocks()

    matching = [b for b in blocks if b.original_text == "Meet singles near you tonight"]
    assert len(matching) == 1
    assert matching[0].type == "paragraph"
    assert matching[0].selector == "p:nth-child(1)"


def test_pass_order_and_types(make_soup):
    soup = make_soup("""
        <h1 id="title">Find your match</h1>
        <p>Short</p>
        <button>Continue</button>
        <a class="cta-link" href="#">Go</a>
        <a href="/faq">Read the FAQ</a>
        <ul><li>Verified profiles only<ul><li>nested item text</li></ul></li></ul>
        <div>Just a plain leaf div text</div>
    """)

    blocks = TextExtractService(soup).extract_text_blocks()
    summary = [(b.type, b.original_text) for b in blocks]

    assert summary == [
        ("heading", "Find your match"),
        ("button", "Continue"),
        ("button", "Go"),
        ("link", "Read the FAQ"),
        ("list-item", "Verified profiles only"),
        ("list-item", "nested item text"),
        ("other", "Just a plain leaf div text"),
    ]
    assert blocks[0].selector == "#title"
    assert blocks[0].id == "text-1"


def test_heading_uses_direct_text_only(make_soup):
    soup = make_soup("<h2>Hot <span>deals</span> today</h2>")

    blocks = TextExtractService(soup).extract_text_blocks()

    assert blocks[0].original_text == "Hot  today"


def test_submit_input_value_is_button_text(make_soup):
    soup = make_soup('<form><input type="submit" value="Sign me up"></form>')

    blocks = TextExtractService(soup).extract_text_blocks()

    assert [(b.type, b.tag_name, b.original_text) for b in blocks] == [("button", "input", "Sign me up")]
