# tests/unit/domain/test_markup.py
"""测试 HTML 模板/片段的拆分与还原。"""

import pytest

from jsonlingo.domain.markup import (
    HtmlMap,
    RegexMarkupClassifier,
    extract,
    is_markup,
    restore,
)
from jsonlingo_core.exceptions import FragmentCountMismatchError


@pytest.mark.parametrize(
    "html, template, fragments",
    [
        ("Hello", "[0]", ["Hello"]),
        ("  padded  ", "[0]", ["  padded  "]),
        ("   ", "   ", []),
        ("<p>Hello <b>world</b></p>", "<p>[0]</p>", ["Hello <b>world</b>"]),
        (
            "<div>\n  <p>One</p>\n  <p>Two</p>\n</div>",
            "<div>\n  <p>[0]</p>\n  <p>[1]</p>\n</div>",
            ["One", "Two"],
        ),
        ("<p>  Hi  </p>", "<p>[0]</p>", ["  Hi  "]),
        ("<!-- note --><p>Hi</p>", "<!-- note --><p>[0]</p>", ["Hi"]),
        ("<br/>Line one<br>Line two", "<br/>[0]<br>[1]", ["Line one", "Line two"]),
        ('<a href="/x">Link</a>', '[0]', ['<a href="/x">Link</a>']),
        ("<p></p>", "<p></p>", []),
        ("", "", []),
    ],
)
def test_extract(html, template, fragments):
    html_map = extract(html)
    assert html_map.template == template
    assert html_map.fragments == fragments


@pytest.mark.parametrize(
    "html",
    [
        "plain text",
        "<p>Hello <em>there</em>, friend.</p>",
        "<ul>\n<li>a</li>\n<li>b</li>\n</ul>",
        "<!DOCTYPE html><h1>Title</h1>",
        '<img alt="[0]"><p>Hi</p>',
        "<!-- [1] --><div title=\"a\\\\b [x]\">Text [0] here</div>",
    ],
)
def test_restore_with_original_fragments_is_identity(html):
    html_map = extract(html)
    assert html_map.restore_with(html_map.fragments) == html


def test_restore_is_single_pass():
    assert restore("[0][1]", ["[1]", "x"]) == "[1]x"


def test_restore_keeps_out_of_range_placeholders():
    assert restore("[0] and [5]", ["a"]) == "a and [5]"


def test_restore_with_wrong_fragment_count_raises():
    html_map = HtmlMap(template="<p>[0]</p><p>[1]</p>", fragments=["a", "b"])
    with pytest.raises(FragmentCountMismatchError):
        html_map.restore_with(["only one"])


def test_custom_inline_tags():
    classifier = RegexMarkupClassifier(inline_tags=frozenset({"p"}))
    html_map = extract("<p>Hi</p><div>There</div>", classifier)
    assert html_map.template == "[0]<div>[1]</div>"
    assert html_map.fragments == ["<p>Hi</p>", "There"]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("<b>bold</b>", True),
        ("x <P>y", True),
        ("a < b", False),
        ("1 <2", False),
        ("no tags", False),
    ],
)
def test_is_markup(text, expected):
    assert is_markup(text) is expected


def test_restore_translated_fragments():
    html_map = extract("<p>Hello <b>World</b></p>")
    assert html_map.template == "<p>[0]</p>"
    assert html_map.restore_with(["Bonjour <b>Monde</b>"]) == "<p>Bonjour <b>Monde</b></p>"


def test_brackets_in_block_tags_are_escaped_in_template():
    html_map = extract('<img alt="[0]"><p>Hi</p>')
    assert html_map.template == '<img alt="\\[0]"><p>[0]</p>'
    assert html_map.fragments == ["Hi"]
    assert html_map.restore_with(["Salut"]) == '<img alt="[0]"><p>Salut</p>'


def test_restore_unescapes_backslashes():
    assert restore("\\\\[0]\\[1]", ["x"]) == "\\x[1]"
