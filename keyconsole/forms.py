"""Form behaviors of the console pages: confirm-on-submit, clear-field and the add-key form."""

from __future__ import annotations

import logging
from collections.abc import Callable

from bs4 import BeautifulSoup, Tag

from .page import add_class, data, has_class, remove_class, set_text

logger = logging.getLogger(__name__)

ADD_KEY_BUTTON_ID = "add_key_button"
ADD_KEY_FORM_ID = "add_key_form"
ADD_KEY_FIELD_ID = "add_public_key"
HELP_ID = "help"


def confirm_buttons(document: BeautifulSoup) -> list[Tag]:
    return document.find_all("button", attrs={"type": "submit", "data-confirm": True})


def confirm_submit(button: Tag, confirm: Callable[[str], bool]) -> bool:
    """Return whether the button's form may be submitted.

    Buttons without a data-confirm prompt always submit.
    """

    prompt = button.get("data-confirm")
    if prompt is None or button.get("type") != "submit":
        return True
    return bool(confirm(prompt))


def clear_buttons(document: BeautifulSoup) -> list[Tag]:
    return document.find_all("button", attrs={"data-clear": True})


def clear_field(button: Tag) -> Tag | None:
    """Empty the field named by data-clear in the button's form. Returns the field."""

    field_name = data(button, "clear")
    form = button.find_parent("form")
    if field_name is None or form is None:
        return None
    field = form.find(attrs={"name": field_name})
    if field is None:
        logger.debug("no field %r to clear in form", field_name)
        return None
    if field.name == "textarea":
        set_text(field, "")
    elif field.name == "select":
        for option in field.find_all("option", selected=True):
            del option["selected"]
    else:
        field["value"] = ""
    return field


class AddKeyForm:
    """The home page's collapsed "add public key" form.

    Visibility is carried by the `hidden` class on each element.
    """

    def __init__(self, document: BeautifulSoup) -> None:
        self.document = document

    def _get(self, element_id: str) -> Tag | None:
        return self.document.find(id=element_id)

    @property
    def present(self) -> bool:
        return self._get(ADD_KEY_BUTTON_ID) is not None and self._get(ADD_KEY_FORM_ID) is not None

    def reveal(self) -> str | None:
        """Show the form, hide the button and keep help collapsed.

        Returns the id of the field that should receive focus.
        """

        form = self._get(ADD_KEY_FORM_ID)
        if form is None:
            return None
        help_block = self._get(HELP_ID)
        if help_block is not None:
            add_class(help_block, "hidden")
        remove_class(form, "hidden")
        button = self._get(ADD_KEY_BUTTON_ID)
        if button is not None:
            add_class(button, "hidden")
        if self._get(ADD_KEY_FIELD_ID) is None:
            return None
        return ADD_KEY_FIELD_ID

    def toggle_help(self) -> bool:
        """Flip the help block. Returns True when it is now visible."""

        help_block = self._get(HELP_ID)
        if help_block is None:
            return False
        if has_class(help_block, "hidden"):
            remove_class(help_block, "hidden")
            return True
        add_class(help_block, "hidden")
        return False

    def cancel(self) -> None:
        form = self._get(ADD_KEY_FORM_ID)
        if form is not None:
            add_class(form, "hidden")
        button = self._get(ADD_KEY_BUTTON_ID)
        if button is not None:
            remove_class(button, "hidden")
