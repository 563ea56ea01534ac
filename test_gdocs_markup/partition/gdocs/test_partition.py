"""Test suite for `gdocs_markup.partition.gdocs.partition` module."""

from __future__ import annotations

import io

import pytest

from gdocs_markup.documents.elements import (
    Heading,
    List,
    ListItem,
    PageBreak,
    Paragraph,
    Rule,
    Run,
)
from gdocs_markup.errors import MalformedLinkError
from gdocs_markup.partition.gdocs.partition import (
    GdocsPartitionerOptions,
    parse,
    partition_gdocs_html,
)
from test_gdocs_markup.unit_utils import (
    FixtureRequest,
    Mock,
    MonkeyPatch,
    assert_round_trips_through_JSON,
    example_doc_path,
    example_doc_text,
    function_mock,
)

EXAMPLE_DOC = "gdocs-export.html"


# -- parse() -------------------------------------------------------------------------------------


class DescribeParse:
    """Integration-test suite for `gdocs_markup.partition.gdocs.partition.parse()`."""

    @pytest.fixture(scope="class")
    def document(self):
        return parse(example_doc_text(EXAMPLE_DOC))

    def it_parses_a_title_paragraph(self, document):
        assert document[0] == Paragraph([Run("Sample Story", bold=True)])

    def it_parses_a_paragraph(self, document):
        assert document[1] == Paragraph(
            [
                Run(
                    "This is a Google Docs document. A program will put this into a web page. That"
                    " web page will look different from this document! Here are the rules:"
                )
            ]
        )

    def it_skips_an_empty_paragraph(self, document):
        assert not isinstance(document[2], Paragraph)

    def it_parses_an_unordered_list(self, document):
        ul = document[2]

        assert isinstance(ul, List)
        assert ul.ordered is False
        assert len(ul.items) == 7
        assert ul.items[0].text == "We ignore empty paragraphs, like the previous one."

    def it_parses_bold_and_italic(self, document):
        assert document[2].items[2].runs == (
            Run("If you mark text "),
            Run("bold", bold=True),
            Run(" or "),
            Run("italic", italic=True),
            Run(", we will publish it as "),
            Run("bold", bold=True),
            Run(" or "),
            Run("italic", italic=True),
            Run("."),
        )

    def it_parses_underline_but_ignores_other_formatting(self, document):
        assert document[2].items[3].runs == (
            Run("(We ignore "),
            Run("underline", underline=True),
            Run(", foreground and background colors, font families and font sizes.)"),
        )

    def it_parses_a_link(self, document):
        assert document[2].items[4].runs == (
            Run("Use "),
            Run("absolute links", href="http://whatis.techtarget.com/definition/absolute-link"),
            Run(" as in any Google Docs, to link to other stories on other websites."),
        )

    def it_skips_comment_markers(self, document):
        assert document[2].items[5] == ListItem([Run("Comments are not published.")])

    def it_turns_non_breaking_spaces_into_spaces(self, document):
        assert document[2].items[6] == ListItem([Run("Two  spaces stay two spaces.")])

    def it_parses_h1_h2_h3_h4(self, document):
        assert [b.category for b in document[3:7]] == ["h1", "h2", "h3", "h4"]
        assert document[3] == Heading(1, [Run("Heading 1")])

    def it_parses_an_ordered_list(self, document):
        assert document[7] == Paragraph([Run("Numbered lists work too:")])
        assert document[8] == List(
            True, [ListItem([Run("Write the story.")]), ListItem([Run("Publish the story.")])]
        )

    def it_parses_a_horizontal_line(self, document):
        assert document[9] == Rule()

    def it_skips_tables(self, document):
        assert document[10] == Paragraph(
            [Run("Everything after this page break will be published:")]
        )

    def it_parses_a_page_break(self, document):
        assert document[11] == PageBreak()

    def it_skips_comment_bodies(self, document):
        assert document[12:] == [Paragraph([Run("The end.")])]

    def it_is_deterministic(self):
        html = example_doc_text(EXAMPLE_DOC)

        assert parse(html) == parse(html)

    def it_produces_a_document_that_round_trips_through_JSON(self, document):
        assert_round_trips_through_JSON(document)

    @pytest.mark.parametrize("html", ["", "   \n  ", b"", b"\n"])
    def it_returns_an_empty_document_for_empty_html(self, html: str | bytes):
        assert parse(html) == []

    def it_parses_html_with_no_blocks_to_an_empty_document(self):
        assert parse("<html><body><table><tr><td>x</td></tr></table></body></html>") == []

    def it_parses_a_str_with_an_encoding_declaration(self):
        html = (
            '<?xml version="1.0" encoding="utf-8"?>\n'
            "<html><body><p><span>Declared</span></p></body></html>"
        )

        assert parse(html) == [Paragraph([Run("Declared")])]

    def it_parses_bytes(self):
        html = (
            '<html><head><meta content="text/html; charset=UTF-8" http-equiv="content-type">'
            "</head><body><p><span>Café</span></p></body></html>"
        ).encode("utf-8")

        assert parse(html) == [Paragraph([Run("Café")])]

    def it_parses_utf_8_bytes_that_do_not_declare_a_charset(self):
        html = "<p><span>café, naïve, “quoted”</span></p>".encode("utf-8")

        assert parse(html) == [Paragraph([Run("café, naïve, “quoted”")])]

    def it_parses_utf_8_bytes_as_utf_8_whatever_the_encoding_declaration_says(self):
        html = (
            '<?xml version="1.0" encoding="iso-8859-1"?>\n'
            "<html><body><p><span>Café</span></p></body></html>"
        ).encode("utf-8")

        assert parse(html) == [Paragraph([Run("Café")])]

    def it_detects_the_encoding_of_bytes_that_are_not_utf_8(self, request: FixtureRequest):
        detect_file_encoding_ = function_mock(
            request,
            "gdocs_markup.partition.gdocs.partition.detect_file_encoding",
            return_value=("windows-1252", "<p><span>Café</span></p>"),
        )
        html = "<p><span>Café</span></p>".encode("windows-1252")

        document = parse(html)

        detect_file_encoding_.assert_called_once_with(file=html)
        assert document == [Paragraph([Run("Café")])]

    def it_fails_the_whole_parse_on_a_malformed_link(self):
        html = (
            "<html><body><p><span>Fine</span></p>"
            '<p><span><a href="https://www.google.com/url?sa=D">broken</a></span></p></body></html>'
        )

        with pytest.raises(MalformedLinkError):
            parse(html)

    def it_uses_the_style_resolution_it_is_given(self):
        html = (
            "<html><head><style>.c1{font-weight:700}</style></head><body>"
            '<p><span class="c1">class</span><span style="font-style:italic">inline</span></p>'
            "</body></html>"
        )

        assert parse(html, style_resolution="inline") == [
            Paragraph([Run("class"), Run("inline", italic=True)])
        ]

    def it_gets_the_default_style_resolution_from_the_environment(self, monkeypatch: MonkeyPatch):
        monkeypatch.setenv("GDOCS_MARKUP_STYLE_RESOLUTION", "class")
        html = '<html><body><p><span style="font-weight:700">inline</span></p></body></html>'

        assert parse(html) == [Paragraph([Run("inline")])]


# -- partition_gdocs_html() ----------------------------------------------------------------------


def test_partition_gdocs_html_from_filename():
    document = partition_gdocs_html(example_doc_path(EXAMPLE_DOC))

    assert document == parse(example_doc_text(EXAMPLE_DOC))


def test_partition_gdocs_html_from_filename_with_encoding():
    document = partition_gdocs_html(example_doc_path(EXAMPLE_DOC), encoding="utf-8")

    assert len(document) == 13


def test_partition_gdocs_html_from_file():
    with open(example_doc_path(EXAMPLE_DOC), "rb") as f:
        document = partition_gdocs_html(file=f)

    assert document == parse(example_doc_text(EXAMPLE_DOC))


def test_partition_gdocs_html_from_file_with_encoding():
    html = "<html><body><p><span>Naïve</span></p></body></html>"

    document = partition_gdocs_html(file=io.BytesIO(html.encode("latin-1")), encoding="latin-1")

    assert document == [Paragraph([Run("Naïve")])]


def test_partition_gdocs_html_from_text():
    document = partition_gdocs_html(text=example_doc_text(EXAMPLE_DOC))

    assert document[3] == Heading(1, [Run("Heading 1")])


def test_partition_gdocs_html_passes_style_resolution_through(parse_: Mock):
    parse_.return_value = []

    partition_gdocs_html(text="<p>x</p>", style_resolution="class")

    parse_.assert_called_once_with("<p>x</p>", style_resolution="class")


@pytest.mark.parametrize(
    "kwargs",
    [
        {},
        {"filename": "foo.html", "text": "<p>x</p>"},
        {"file": io.BytesIO(b"<p>x</p>"), "text": "<p>x</p>"},
    ],
)
def test_partition_gdocs_html_raises_unless_exactly_one_source_is_specified(kwargs):
    with pytest.raises(ValueError, match="Exactly one of filename, file and text must be"):
        partition_gdocs_html(**kwargs)


@pytest.fixture()
def parse_(request: FixtureRequest) -> Mock:
    return function_mock(request, "gdocs_markup.partition.gdocs.partition.parse")


# -- GdocsPartitionerOptions ---------------------------------------------------------------------


class DescribeGdocsPartitionerOptions:
    """Unit-test suite for `gdocs_markup.partition.gdocs.partition.GdocsPartitionerOptions`."""

    def it_loads_html_text_from_a_file_path(self):
        opts = GdocsPartitionerOptions(
            file_path=example_doc_path(EXAMPLE_DOC),
            file=None,
            text=None,
            encoding=None,
            style_resolution=None,
        )

        assert opts.html_text == example_doc_text(EXAMPLE_DOC)

    def it_uses_text_as_is(self):
        opts = GdocsPartitionerOptions(
            file_path=None, file=None, text="<p>Hi</p>", encoding=None, style_resolution=None
        )

        assert opts.html_text == "<p>Hi</p>"

    def it_uses_the_style_resolution_specified_by_the_caller(self, monkeypatch: MonkeyPatch):
        monkeypatch.setenv("GDOCS_MARKUP_STYLE_RESOLUTION", "class")
        opts = GdocsPartitionerOptions(
            file_path=None, file=None, text="<p/>", encoding=None, style_resolution="inline"
        )

        assert opts.style_resolution == "inline"

    def it_falls_back_to_the_environment_for_style_resolution(self, monkeypatch: MonkeyPatch):
        monkeypatch.setenv("GDOCS_MARKUP_STYLE_RESOLUTION", "class")
        opts = GdocsPartitionerOptions(
            file_path=None, file=None, text="<p/>", encoding=None, style_resolution=None
        )

        assert opts.style_resolution == "class"

    def it_defaults_style_resolution_to_both(self, monkeypatch: MonkeyPatch):
        monkeypatch.delenv("GDOCS_MARKUP_STYLE_RESOLUTION", raising=False)
        opts = GdocsPartitionerOptions(
            file_path=None, file=None, text="<p/>", encoding=None, style_resolution=None
        )

        assert opts.style_resolution == "both"
