# tests/analysis/test_script_utils.py
from analyzer.services.flow_detect_service import STATE_VARIABLE
from analyzer.utils.script_utils import script_text, strip_markup


def test_script_bodies_are_joined_on_separate_lines(make_soup):
    soup = make_soup("<script>var mode = active</script><p>x</p><script>Index = 2;</script>")

    js = script_text(soup)

    assert js == "var mode = active\nIndex = 2;"
    assert STATE_VARIABLE.search(js) is None


def test_strip_markup():
    assert strip_markup("<b>Are you</b>\n  <i>single?</i>") == "Are you single?"
