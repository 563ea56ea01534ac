"""Provides `partition_gdocs_html()` and `parse()`."""

from __future__ import annotations

from typing import IO, Optional, Union

from lxml import etree

from gdocs_markup.documents.elements import Document
from gdocs_markup.file_utils.encoding import detect_file_encoding, read_txt_file
from gdocs_markup.logger import logger
from gdocs_markup.partition.gdocs.parser import DocumentBuilder, html_parser_for
from gdocs_markup.partition.utils.config import env_config
from gdocs_markup.utils import exactly_one, lazyproperty


def parse(html: Union[str, bytes], style_resolution: Optional[str] = None) -> Document:
    """Parse editor-exported `html` into a document.

    Raises `MalformedLinkError` when a link is not in the redirect-wrapped form the editor emits
    and `InternalInconsistencyError` when the parsing state becomes unsound. No partial document is
    returned in either case.
    """
    # -- parser rejects an empty document, nip that edge-case in the bud here --
    if not html.strip():
        return []

    style_resolution = style_resolution or env_config.GDOCS_MARKUP_STYLE_RESOLUTION

    # -- without a `<meta charset>` libxml2 reads bytes as Latin-1, so decode them here --
    if isinstance(html, bytes):
        html = _decode(html)

    # NOTE - `lxml` will not parse a `str` that includes an XML encoding declaration and will raise
    # the following error:
    #     ValueError: Unicode strings with encoding declaration are not supported. ...
    # This is not valid HTML (would be in XHTML), but browsers accept it so we work around it by
    # UTF-8 encoding the str and parsing the bytes as UTF-8, whatever the declaration says. A fresh
    # builder is used for the second attempt.
    try:
        document = _build(html, style_resolution)
    except ValueError:
        document = _build(html.encode("utf-8"), style_resolution, encoding="utf-8")

    logger.debug(f"Parsed {len(document)} blocks from {len(html)} characters of HTML")
    return document


def _build(
    html: Union[str, bytes], style_resolution: str, encoding: Optional[str] = None
) -> Document:
    builder = DocumentBuilder(style_resolution=style_resolution)
    return etree.fromstring(html, html_parser_for(builder, encoding=encoding))


def _decode(html: bytes) -> str:
    """Exports are UTF-8; any other encoding is detected."""
    try:
        return html.decode("utf-8")
    except UnicodeDecodeError:
        encoding, html_text = detect_file_encoding(file=html)
        logger.debug(f"HTML is not UTF-8, decoded it as {encoding}")
        return html_text


def partition_gdocs_html(
    filename: Optional[str] = None,
    *,
    file: Optional[IO[bytes]] = None,
    text: Optional[str] = None,
    encoding: Optional[str] = None,
    style_resolution: Optional[str] = None,
) -> Document:
    """Partitions an HTML export of a Google Docs document into headings, paragraphs and lists.

    HTML source parameters
    ----------------------
    The HTML to be partitioned can be specified three different ways:

    filename
        A string defining the target filename path.
    file
        A file-like object using "rb" mode --> open(filename, "rb").
    text
        The string representation of the HTML document.
    encoding
        The encoding method used to decode a file. When not specified it is detected.

    style_resolution (Literal["class", "inline", "both"]):
        Where bold, italic and underline are read from: the `.cNN` rules of the document
        stylesheet ("class"), `style` attributes ("inline") or either ("both"). Defaults to the
        GDOCS_MARKUP_STYLE_RESOLUTION environment variable, "both" when that is not set.
    """
    opts = GdocsPartitionerOptions(
        file_path=filename,
        file=file,
        text=text,
        encoding=encoding,
        style_resolution=style_resolution,
    )

    return parse(opts.html_text, style_resolution=opts.style_resolution)


class GdocsPartitionerOptions:
    """Encapsulates partitioning option validation, computation, and application of defaults."""

    def __init__(
        self,
        *,
        file_path: Optional[str],
        file: Optional[IO[bytes]],
        text: Optional[str],
        encoding: Optional[str],
        style_resolution: Optional[str],
    ):
        exactly_one(filename=file_path, file=file, text=text)
        self._file_path = file_path
        self._file = file
        self._text = text
        self._encoding = encoding
        self._style_resolution = style_resolution

    @lazyproperty
    def html_text(self) -> str:
        """The HTML document as a string, loaded from wherever the caller specified."""
        if self._file_path:
            return read_txt_file(filename=self._file_path, encoding=self._encoding)[1]

        if self._file:
            return read_txt_file(file=self._file, encoding=self._encoding)[1]

        return str(self._text)

    @lazyproperty
    def style_resolution(self) -> str:
        """Style resolution mode, from the caller when specified, otherwise from the environment."""
        return self._style_resolution or env_config.GDOCS_MARKUP_STYLE_RESOLUTION
