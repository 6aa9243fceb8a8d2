# tests/analysis/test_style_extract.py
from analyzer.services.style_extract_service import StyleExtractService, brightness, normalize_color

STYLED_PAGE = """<html><head><style>
h1, .title { font-family: "Playfair Display", serif; }
body { font-family: Arial, sans-serif; color: #333333; background: #ffffff; }
.accent { color: #cc6633; }
p { font-size: 16px; }
</style></head><body>
<header style="position: fixed; top: 0">Logo</header>
<a class="btn" style="background: #abcdef">Go</a>
</body></html>"""


def test_cta_colour_is_kept_out_of_the_palette(make_soup):
    colors = StyleExtractService(make_soup(STYLED_PAGE)).extract_colors()

    assert colors.cta == ["#abcdef"]
    assert "#abcdef" not in colors.primary
    assert "#abcdef" not in colors.secondary
    assert colors.primary == ["#cc6633"]
    assert colors.background == ["#ffffff"]
    assert colors.text == ["#333333"]


def test_heading_and_body_fonts(make_soup):
    typography = StyleExtractService(make_soup(STYLED_PAGE)).extract_typography()

    assert typography.heading_fonts == ["Playfair Display"]
    assert typography.body_fonts == ["Arial"]
    assert typography.font_sizes == ["16px"]


def test_layout_hints(make_soup):
    layout = StyleExtractService(make_soup(STYLED_PAGE)).extract_layout()
    assert layout.has_fixed_header is True
    assert layout.column_layout == "single"

    grid = make_soup('<main style="max-width: 960px"><div class="row"><div class="col-md-6"></div></div></main>')
    layout = StyleExtractService(grid).extract_layout()
    assert layout.column_layout == "two-column"
    assert layout.max_width == "960px"


def test_colour_helpers():
    assert normalize_color("rgb(255, 0, 0)") == "#ff0000"
    assert normalize_color(" Transparent ") is None
    assert normalize_color("#ABC") == "#abc"
    assert brightness("#fff") == 255
    assert brightness("hsl(0, 0%, 50%)") is None
