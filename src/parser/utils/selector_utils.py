# src/parser/utils/selector_utils.py
import logging
import re
from typing import List, Optional

from bs4 import NavigableString, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

_STATE_CLASS = re.compile(r"^(js-|is-|has-)")


def class_string(el: Tag) -> str:
    """The class attribute as one string (bs4 stores it as a list)."""
    value = el.get("class")
    if not value:
        return ""
    if isinstance(value, str):
        return value
    return " ".join(value)


def class_list(el: Tag) -> List[str]:
    return class_string(el).split()


def direct_text(el: Tag) -> str:
    """Text of the element's own text nodes, children excluded."""
    return "".join(
        s for s in el.find_all(string=True, recursive=False) if type(s) is NavigableString
    ).strip()


def element_index(el: Tag) -> int:
    """Zero-based position of the element among its parent's element children."""
    parent = el.parent
    if parent is None:
        return 0
    for i, sibling in enumerate(parent.find_all(True, recursive=False)):
        if sibling is el:
            return i
    return 0


def element_selector(el: Tag) -> str:
    """`#id`, else `tag.cls1.cls2`, else `tag:nth-child(n)`."""
    el_id = el.get("id")
    if el_id:
        return f"#{el_id}"

    tag_name = (el.name or "div").lower()
    classes = class_list(el)[:2]
    if classes:
        return f"{tag_name}.{'.'.join(classes)}"
    return f"{tag_name}:nth-child({element_index(el) + 1})"


def text_block_selector(el: Tag) -> str:
    """
    Selector for a text block: `#id`, else tag plus up to two non-state
    classes, with `:nth-child(n)` appended when the parent holds several
    elements of the same tag.
    """
    el_id = el.get("id")
    if el_id:
        return f"#{el_id}"

    tag_name = (el.name or "div").lower()
    parts = [tag_name]

    classes = [c for c in class_list(el) if not _STATE_CLASS.match(c)][:2]
    if classes:
        parts.append("." + ".".join(classes))

    parent = el.parent
    if parent is not None:
        siblings = parent.find_all(tag_name, recursive=False)
        if len(siblings) > 1:
            index = next((i for i, s in enumerate(siblings) if s is el), 0)
            parts.append(f":nth-child({index + 1})")

    return "".join(parts)


def link_selector(el: Tag) -> str:
    el_id = el.get("id")
    if el_id:
        return f"#{el_id}"

    href = el.get("href")
    if href:
        escaped = href.replace('"', '\\"')
        return f'a[href="{escaped}"]'

    classes = class_list(el)[:2]
    if classes:
        return f"a.{'.'.join(classes)}"
    return "a"


def form_selector(el: Tag) -> str:
    el_id = el.get("id")
    if el_id:
        return f"#{el_id}"
    classes = class_list(el)
    if classes:
        return f"form.{classes[0]}"
    return "form"


def closest(el: Tag, selector: str) -> Optional[Tag]:
    """The element itself or its nearest ancestor matching `selector`; None on an unusable selector."""
    try:
        return el.css.closest(selector)
    except SelectorSyntaxError:
        logger.debug("Unusable selector for containment lookup: %s", selector)
        return None
