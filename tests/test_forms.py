from keyconsole.forms import (
    AddKeyForm,
    clear_buttons,
    clear_field,
    confirm_buttons,
    confirm_submit,
)
from keyconsole.page import has_class, parse_html

DELETE_FORM = """
<form name="delete" method="post">
  <input type="text" name="comment" value="old key">
  <textarea name="notes">rotated</textarea>
  <button type="button" data-clear="comment">x</button>
  <button type="button" data-clear="notes">x</button>
  <button type="button" data-clear="missing">x</button>
  <button type="submit" name="delete_key" data-confirm="Delete this key?">Delete</button>
  <button type="submit" name="save">Save</button>
</form>
"""

HOME_PAGE = """
<button id="add_key_button">Add key</button>
<form id="add_key_form" class="hidden">
  <textarea id="add_public_key" name="add_public_key"></textarea>
  <button type="button" class="btn btn-info">Help</button>
  <button type="button" class="btn btn-default">Cancel</button>
</form>
<div id="help" class="hidden">Paste your public key.</div>
"""


def test_only_confirming_submit_buttons_are_found() -> None:
    doc = parse_html(DELETE_FORM)
    assert [b["name"] for b in confirm_buttons(doc)] == ["delete_key"]


def test_confirm_submit_asks_with_prompt() -> None:
    doc = parse_html(DELETE_FORM)
    (button,) = confirm_buttons(doc)
    prompts: list[str] = []

    def decline(prompt: str) -> bool:
        prompts.append(prompt)
        return False

    assert confirm_submit(button, decline) is False
    assert confirm_submit(button, lambda prompt: True) is True
    assert prompts == ["Delete this key?"]


def test_submit_without_prompt_never_asks() -> None:
    doc = parse_html(DELETE_FORM)
    save = doc.find("button", attrs={"name": "save"})

    def fail(prompt: str) -> bool:
        raise AssertionError("should not ask")

    assert confirm_submit(save, fail) is True


def test_clear_field_empties_named_input_and_textarea() -> None:
    doc = parse_html(DELETE_FORM)
    comment_button, notes_button, missing_button = clear_buttons(doc)

    assert clear_field(comment_button)["name"] == "comment"
    assert doc.find("input", attrs={"name": "comment"})["value"] == ""
    assert clear_field(notes_button) is not None
    assert doc.find("textarea").get_text() == ""
    assert clear_field(missing_button) is None


def test_clear_button_outside_form_does_nothing() -> None:
    doc = parse_html('<input name="q" value="x"><button data-clear="q">x</button>')
    (button,) = clear_buttons(doc)
    assert clear_field(button) is None
    assert doc.find("input")["value"] == "x"


def test_add_key_form_reveal_toggle_and_cancel() -> None:
    doc = parse_html(HOME_PAGE)
    form = AddKeyForm(doc)
    assert form.present

    assert form.reveal() == "add_public_key"
    assert not has_class(doc.find(id="add_key_form"), "hidden")
    assert has_class(doc.find(id="add_key_button"), "hidden")
    assert has_class(doc.find(id="help"), "hidden")

    assert form.toggle_help() is True
    assert not has_class(doc.find(id="help"), "hidden")
    assert form.toggle_help() is False

    form.cancel()
    assert has_class(doc.find(id="add_key_form"), "hidden")
    assert not has_class(doc.find(id="add_key_button"), "hidden")


def test_add_key_form_absent_is_noop() -> None:
    doc = parse_html("<p>servers</p>")
    form = AddKeyForm(doc)
    assert not form.present
    assert form.reveal() is None
    assert form.toggle_help() is False
    form.cancel()
    assert str(doc) == "<p>servers</p>"
