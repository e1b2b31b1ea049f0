from keyconsole.page import add_class, classes, data, has_class, parse_html, remove_class, set_text


def test_class_helpers_are_idempotent() -> None:
    doc = parse_html('<span id="s" class="text-warning"></span>')
    span = doc.find(id="s")
    add_class(span, "text-success")
    add_class(span, "text-success")
    remove_class(span, "text-warning")
    assert classes(span) == ["text-success"]
    assert has_class(span, "text-success")
    remove_class(span, "text-success")
    assert "class" not in span.attrs
    assert str(doc) == '<span id="s"></span>'


def test_empty_data_attribute_reads_as_missing() -> None:
    doc = parse_html('<div id="a" data-class="" data-message="hi"></div>')
    div = doc.find(id="a")
    assert data(div, "class") is None
    assert data(div, "message") == "hi"
    assert data(div, "absent") is None


def test_set_text_replaces_children() -> None:
    doc = parse_html('<span id="s">Loading <b>now</b></span>')
    span = doc.find(id="s")
    set_text(span, "Synced & done")
    assert span.get_text() == "Synced & done"
    assert span.find("b") is None
    set_text(span, "")
    assert str(doc) == '<span id="s"></span>'


def test_serialization_keeps_comments_scripts_and_doctype() -> None:
    markup = (
        "<!DOCTYPE html>"
        '<div id="w"><!-- keep --><script>if (a < b && c) {}</script>'
        '<p class="a">x &amp; y<img src="i.png"/></p></div>'
    )
    html = str(parse_html(markup))

    assert html.startswith("<!DOCTYPE html>")
    assert "<!-- keep -->" in html
    assert "<script>if (a < b && c) {}</script>" in html
    assert '<p class="a">x &amp; y<img src="i.png"/></p>' in html
