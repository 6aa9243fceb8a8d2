from __future__ import annotations

from typing import List

from bs4 import BeautifulSoup

from parser.model import FormElement, FormField
from parser.utils.selector_utils import form_selector

NON_CONTENT_INPUTS = frozenset({'hidden', 'submit', 'button', 'image', 'reset'})


class FormExtractService:
    """Recovers each form's submission target and its user-facing fields."""

    def __init__(self, soup: BeautifulSoup):
        self.soup = soup

    def extract_forms(self) -> List[FormElement]:
        forms: List[FormElement] = []

        for form in self.soup.find_all("form"):
            fields: List[FormField] = []

            for field in form.find_all("input"):
                field_type = field.get("type") or "text"
                if field_type in NON_CONTENT_INPUTS:
                    continue
                fields.append(FormField(
                    name=field.get("name") or f"input-{len(fields)}",
                    type=field_type,
                    placeholder=field.get("placeholder"),
                    required=field.has_attr("required"),
                ))

            for field in form.find_all("textarea"):
                fields.append(FormField(
                    name=field.get("name") or f"textarea-{len(fields)}",
                    type="textarea",
                    placeholder=field.get("placeholder"),
                    required=field.has_attr("required"),
                ))

            for field in form.find_all("select"):
                fields.append(FormField(
                    name=field.get("name") or f"select-{len(fields)}",
                    type="select",
                    required=field.has_attr("required"),
                ))

            forms.append(FormElement(
                id=f"form-{len(forms) + 1}",
                action=form.get("action") or "",
                method=(form.get("method") or "get").upper(),
                fields=fields,
                selector=form_selector(form),
            ))

        return forms
