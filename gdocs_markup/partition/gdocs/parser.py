# pyright: reportPrivateUsage=false

"""Provides the streaming document builder used by `partition_gdocs_html()`.

PRINCIPLES

- _Authors format, the editor decorates._ The editor wraps every formatting change in a `<span>`,
  including changes we don't care about (font, size, color). The only formatting we recover is
  bold, italic, underline and links. Adjacent runs that agree on those are merged back together.

- _Runs live in spans._ All visible text the editor emits for a paragraph is inside a `<span>`,
  possibly inside an `<a>` inside that span. Text outside a span is editor scaffolding and is not
  collected.

- _An empty paragraph is not a block._ A heading, paragraph or list-item that collects no runs is
  skipped. Authors use empty paragraphs for vertical spacing.

- _Tables are layout._ Authors use tables to lay out content that is not meant to be published, so
  a table and everything inside it, at any depth, produces nothing.

- _Comments are not content._ The in-text comment markers (`[a]`) and the comment bodies the
  editor appends at the end of the document produce nothing.

Other background

- The builder is a _parser target_ in the `lxml` sense. The `lxml` HTML parser tokenizes the
  markup, decodes entities and calls `.start()`, `.data()` and `.end()` on the target in document
  order, then calls `.close()`, whose return value is the parse result. No tree is built.

- Open elements the builder recognizes are tracked on an explicit stack of contexts. Any element
  not recognized is ignored entirely; its children are processed as though it was not there.

- A context can _suppress_ everything inside it (tables, comment regions, comment markers). Because
  suppression is a property of a context on the stack, suppressing regions can nest inside each
  other to any depth and each ends exactly at its own closing tag.
"""

from __future__ import annotations

import enum
from itertools import groupby
from typing import Callable, Mapping, Optional, Sequence

from lxml import etree
from typing_extensions import TypeAlias

from gdocs_markup.cleaners.core import replace_non_breaking_spaces
from gdocs_markup.documents.elements import (
    Block,
    Document,
    Heading,
    List,
    ListItem,
    PageBreak,
    Paragraph,
    Rule,
    Run,
    StyleFlags,
)
from gdocs_markup.errors import InternalInconsistencyError
from gdocs_markup.logger import logger, trace_logger
from gdocs_markup.partition.gdocs.links import (
    is_comment_marker,
    is_comment_reference,
    resolve_href,
)
from gdocs_markup.partition.gdocs.styles import (
    CssClassStyles,
    InlineStyleResolver,
    class_names_from_attr,
    is_page_break,
)
from gdocs_markup.partition.utils.config import STYLE_RESOLUTION_MODES
from gdocs_markup.utils import lazyproperty

# ------------------------------------------------------------------------------------------------
# RUN NORMALIZER
# ------------------------------------------------------------------------------------------------


def normalize_runs(runs: Sequence[Run]) -> list[Run]:
    """Merge each group of adjacent runs with the same style signature into a single run.

    Colors, fonts and sizes each start a new `<span>` in the editor's HTML. Once those are
    disregarded, many neighboring spans carry identical formatting and would otherwise needlessly
    fragment the published text.
    """
    if not runs:
        raise ValueError("Expected at least 1 run to normalize, got none.")

    return [
        Run("".join(run.text for run in group), bold, italic, underline, href)
        for (bold, italic, underline, href), group in groupby(runs, key=lambda run: run.signature)
    ]


# ------------------------------------------------------------------------------------------------
# ELEMENT KINDS
# ------------------------------------------------------------------------------------------------


class ElementKind(enum.Enum):
    """The HTML elements the builder distinguishes. All others are `OTHER` and are ignored."""

    TABLE = "table"
    STYLE = "style"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST_ITEM = "list-item"
    ORDERED_LIST = "ordered-list"
    UNORDERED_LIST = "unordered-list"
    SPAN = "span"
    ANCHOR = "anchor"
    COMMENT_MARKER = "comment-marker"
    DIVISION = "division"
    RULE = "rule"
    OTHER = "other"

    @classmethod
    def of(cls, tag: str, attrib: Mapping[str, str]) -> ElementKind:
        """The kind of the element opened by `tag` having attributes `attrib`."""
        kind = TAG_KINDS.get(tag, cls.OTHER)
        if kind is cls.ANCHOR and is_comment_marker(attrib.get("href")):
            return cls.COMMENT_MARKER
        return kind


TAG_KINDS: dict[str, ElementKind] = {
    "a": ElementKind.ANCHOR,
    "div": ElementKind.DIVISION,
    "h1": ElementKind.HEADING,
    "h2": ElementKind.HEADING,
    "h3": ElementKind.HEADING,
    "h4": ElementKind.HEADING,
    "hr": ElementKind.RULE,
    "li": ElementKind.LIST_ITEM,
    "ol": ElementKind.ORDERED_LIST,
    "p": ElementKind.PARAGRAPH,
    "span": ElementKind.SPAN,
    "style": ElementKind.STYLE,
    "table": ElementKind.TABLE,
    "ul": ElementKind.UNORDERED_LIST,
}

BLOCK_KINDS = frozenset((ElementKind.HEADING, ElementKind.PARAGRAPH, ElementKind.LIST_ITEM))
LIST_KINDS = frozenset((ElementKind.ORDERED_LIST, ElementKind.UNORDERED_LIST))
# -- a `<hr>` is void, it has no contents to track so it never gets a context --
FRAMED_TAGS = frozenset(tag for tag, kind in TAG_KINDS.items() if kind is not ElementKind.RULE)

_OpenHandler: TypeAlias = "Callable[[ElementKind, str, Mapping[str, str]], None]"


# ------------------------------------------------------------------------------------------------
# PARSING CONTEXT
# ------------------------------------------------------------------------------------------------


class _Context:
    """An open element the builder is tracking, along with whatever it is accumulating.

    Which accumulators are used depends on the kind:

    - `<style>` and `<span>` collect text fragments in `.texts`. The HTML parser may deliver the
      text of one element in several fragments.
    - Headings, paragraphs and list-items collect runs in `.runs`.
    - Lists collect list-items in `.items`.
    - Spans and anchors carry the href that applies to the text they enclose in `.href`.
    - A `<div>` records in `.holds_content` that a block was produced while it was open.
    """

    def __init__(
        self,
        kind: ElementKind,
        tag: str,
        flags: StyleFlags = StyleFlags(),
        href: Optional[str] = None,
        suppressing: bool = False,
    ):
        self.kind = kind
        self.tag = tag
        self.flags = flags
        self.href = href
        self.suppressing = suppressing
        self.texts: list[str] = []
        self.runs: list[Run] = []
        self.items: list[ListItem] = []
        # -- an anchor inside a span lends its href to that span until the anchor closes --
        self.lent_to: Optional[_Context] = None
        self.outer_href: Optional[str] = None
        self.holds_content = False

    def __repr__(self) -> str:
        return f"_Context({self.kind.name}, <{self.tag}>)"


# ------------------------------------------------------------------------------------------------
# DOCUMENT BUILDER
# ------------------------------------------------------------------------------------------------


class DocumentBuilder:
    """`lxml` parser target that builds a `Document` from a stream of HTML parsing events.

    One instance is used for exactly one parse. `.close()` returns the document.
    """

    def __init__(self, style_resolution: str = "both"):
        if style_resolution not in STYLE_RESOLUTION_MODES:
            raise ValueError(
                f"style_resolution must be one of {', '.join(STYLE_RESOLUTION_MODES)},"
                f" got {style_resolution!r}."
            )
        self._style_resolution = style_resolution
        self._css_styles = CssClassStyles()
        self._contexts: list[_Context] = []
        self._document: list[Block] = []

    # -- parser-target interface ------------------------------------------------------------------

    def start(self, tag: str, attrib: Mapping[str, str]) -> None:
        """Called by the parser for each opening tag."""
        kind = ElementKind.of(tag, attrib)

        if kind is ElementKind.OTHER:
            return

        # -- inside a suppressed region only keep track of nesting so we know where it ends --
        if self._is_suppressed:
            if tag in FRAMED_TAGS:
                self._contexts.append(_Context(kind, tag))
            return

        self._open_handlers[kind](kind, tag, attrib)

    def data(self, text: str) -> None:
        """Called by the parser for each text fragment, with entities already decoded."""
        if self._is_suppressed:
            return

        collector = self._innermost(ElementKind.SPAN, ElementKind.STYLE)
        if collector is None:
            if text.strip():
                trace_logger.detail(f"Skipping text outside of a span: {text!r}")  # type: ignore
            return

        collector.texts.append(text)

    def end(self, tag: str) -> None:
        """Called by the parser for each closing tag, including implied ones."""
        if tag not in FRAMED_TAGS:
            return

        if not self._contexts or self._contexts[-1].tag != tag:
            open_tags = ", ".join(f"<{c.tag}>" for c in self._contexts) or "none"
            raise InternalInconsistencyError(tag, f"open elements are {open_tags}")

        context = self._contexts.pop()

        if context.suppressing:
            trace_logger.detail(f"Leaving suppressed {context.kind.value} <{tag}>")  # type: ignore
            return
        if self._is_suppressed:
            return

        self._close_handlers[context.kind](context)

    def close(self) -> Document:
        """Called by the parser after the last event; returns the document."""
        # -- the HTML parser closes any unclosed elements itself, this is only for direct use --
        while self._contexts:
            self.end(self._contexts[-1].tag)

        logger.debug(f"Built document of {len(self._document)} blocks")
        return list(self._document)

    # -- opening handlers -------------------------------------------------------------------------

    @lazyproperty
    def _open_handlers(self) -> dict[ElementKind, _OpenHandler]:
        return {
            ElementKind.TABLE: self._open_suppressing,
            ElementKind.COMMENT_MARKER: self._open_suppressing,
            ElementKind.STYLE: self._open_container,
            ElementKind.DIVISION: self._open_container,
            ElementKind.HEADING: self._open_block,
            ElementKind.PARAGRAPH: self._open_block,
            ElementKind.LIST_ITEM: self._open_block,
            ElementKind.ORDERED_LIST: self._open_list,
            ElementKind.UNORDERED_LIST: self._open_list,
            ElementKind.SPAN: self._open_span,
            ElementKind.ANCHOR: self._open_anchor,
            ElementKind.RULE: self._add_rule,
        }

    def _open_suppressing(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        trace_logger.detail(f"Entering suppressed <{tag}>")  # type: ignore
        self._contexts.append(_Context(kind, tag, suppressing=True))

    def _open_container(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        self._contexts.append(_Context(kind, tag))

    def _open_block(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        self._flush_enclosing_block()
        flags = self._resolve_flags(kind, attrib, self._enclosing_flags)
        self._contexts.append(_Context(kind, tag, flags=flags))

    def _open_list(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        self._flush_enclosing_block()
        self._contexts.append(_Context(kind, tag))

    def _open_span(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        # -- text of an enclosing span that precedes this one becomes a run of its own --
        if (outer_span := self._innermost(ElementKind.SPAN)) is not None:
            self._flush_span(outer_span)

        flags = self._resolve_flags(kind, attrib, self._enclosing_flags)
        self._contexts.append(_Context(kind, tag, flags=flags, href=self._enclosing_href))

    def _open_anchor(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        href = attrib.get("href")

        # -- the back-link at the start of a comment body marks its wrapper as a comments region --
        if is_comment_reference(href):
            self._enter_comments_region()
            self._contexts.append(_Context(kind, tag))
            return

        anchor = _Context(kind, tag, href=resolve_href(href))

        span = self._innermost(ElementKind.SPAN)
        if span is not None and anchor.href is not None:
            self._flush_span(span)
            anchor.lent_to, anchor.outer_href = span, span.href
            span.href = anchor.href

        self._contexts.append(anchor)

    def _add_rule(self, kind: ElementKind, tag: str, attrib: Mapping[str, str]) -> None:
        # -- rules and page-breaks are always top-level, never part of a list --
        self._document.append(PageBreak() if is_page_break(attrib.get("style")) else Rule())
        self._note_content()

    # -- closing handlers -------------------------------------------------------------------------

    @lazyproperty
    def _close_handlers(self) -> dict[ElementKind, Callable[[_Context], None]]:
        return {
            ElementKind.STYLE: self._close_style,
            ElementKind.DIVISION: self._close_container,
            ElementKind.HEADING: self._flush_block,
            ElementKind.PARAGRAPH: self._flush_block,
            ElementKind.LIST_ITEM: self._flush_block,
            ElementKind.ORDERED_LIST: self._close_list,
            ElementKind.UNORDERED_LIST: self._close_list,
            ElementKind.SPAN: self._flush_span,
            ElementKind.ANCHOR: self._close_anchor,
        }

    def _close_style(self, context: _Context) -> None:
        css_text = "".join(context.texts)
        self._css_styles = CssClassStyles(css_text)

    def _close_container(self, context: _Context) -> None:
        pass

    def _close_list(self, context: _Context) -> None:
        enclosing_list = self._innermost(*LIST_KINDS)

        # -- a nested list contributes its items to the list it is nested in --
        if enclosing_list is not None:
            enclosing_list.items.extend(context.items)
            return

        self._document.append(List(context.kind is ElementKind.ORDERED_LIST, context.items))
        self._note_content()

    def _close_anchor(self, context: _Context) -> None:
        span = context.lent_to
        if span is None:
            return
        self._flush_span(span)
        span.href = context.outer_href

    # -- accumulation -----------------------------------------------------------------------------

    def _flush_block(self, context: _Context) -> None:
        """Add a block formed from the runs accumulated by `context`, if there are any."""
        if not context.runs:
            trace_logger.detail(f"Skipping empty <{context.tag}>")  # type: ignore
            return

        runs = normalize_runs(context.runs)
        context.runs.clear()

        if (enclosing_list := self._innermost(*LIST_KINDS)) is not None:
            enclosing_list.items.append(ListItem(runs))
        elif context.kind is ElementKind.HEADING:
            self._document.append(Heading(int(context.tag[1]), runs))
        else:
            self._document.append(Paragraph(runs))
        self._note_content()

    def _flush_enclosing_block(self) -> None:
        """Emit runs already collected by an open block before a nested block or list starts.

        This keeps blocks in document order when, for example, a list is nested inside a
        list-item that already has text.
        """
        if (span := self._innermost(ElementKind.SPAN)) is not None:
            self._flush_span(span)
        if (block := self._innermost(*BLOCK_KINDS)) is not None and block.runs:
            self._flush_block(block)

    def _flush_span(self, context: _Context) -> None:
        """Add a run formed from the text accumulated by span `context`, if there is any."""
        text = replace_non_breaking_spaces("".join(context.texts))
        context.texts.clear()

        if not text:
            return

        block = self._innermost(*BLOCK_KINDS)
        if block is None:
            trace_logger.detail(f"Skipping span outside of a block: {text!r}")  # type: ignore
            return

        block.runs.append(Run.from_flags(text, context.flags, context.href))

    def _note_content(self) -> None:
        for context in self._contexts:
            if context.kind is ElementKind.DIVISION:
                context.holds_content = True

    def _enter_comments_region(self) -> None:
        """Suppress the element that wraps the comment body now being opened.

        That is the nearest enclosing `<div>` when no block was produced inside it yet, otherwise
        the nearest enclosing block. Anything it already collected is discarded when it closes. A
        `<div>` that already holds content wraps the whole body, as `<div id="contents">` does in a
        published document.
        """
        wrapper = self._innermost(ElementKind.DIVISION)
        if wrapper is None or wrapper.holds_content:
            wrapper = self._innermost(*BLOCK_KINDS)
        if wrapper is None:
            return
        trace_logger.detail(f"Entering comments region <{wrapper.tag}>")  # type: ignore
        wrapper.suppressing = True

    # -- state queries ----------------------------------------------------------------------------

    @property
    def _enclosing_flags(self) -> StyleFlags:
        """Style-flags established by the innermost open span or block, all-false when none."""
        context = self._innermost(ElementKind.SPAN, *BLOCK_KINDS)
        return StyleFlags() if context is None else context.flags

    @property
    def _enclosing_href(self) -> Optional[str]:
        """The href of the link currently open, if any."""
        for context in reversed(self._contexts):
            if context.kind is ElementKind.ANCHOR and context.href is not None:
                return context.href
            if context.kind is ElementKind.SPAN:
                return context.href
        return None

    def _innermost(self, *kinds: ElementKind) -> Optional[_Context]:
        """The most recently opened context that is one of `kinds`, None if there isn't one."""
        for context in reversed(self._contexts):
            if context.kind in kinds:
                return context
        return None

    @property
    def _is_suppressed(self) -> bool:
        return any(context.suppressing for context in self._contexts)

    def _resolve_flags(
        self, kind: ElementKind, attrib: Mapping[str, str], parent_flags: StyleFlags
    ) -> StyleFlags:
        """Style-flags for a `kind` element with `attrib` inside an element with `parent_flags`.

        Only a `<span>` gets formatting from its classes; block classes carry paragraph and
        list-marker formatting. In "class" mode each span is resolved on its own, nothing is
        inherited.
        """
        flags = StyleFlags() if self._style_resolution == "class" else parent_flags
        if kind is ElementKind.SPAN and self._style_resolution in ("class", "both"):
            flags = flags | self._css_styles.resolve(class_names_from_attr(attrib.get("class")))
        if self._style_resolution in ("inline", "both"):
            flags = InlineStyleResolver.resolve(attrib.get("style"), flags)
        return flags


# ------------------------------------------------------------------------------------------------
# HTML PARSER
# ------------------------------------------------------------------------------------------------


def html_parser_for(
    builder: DocumentBuilder, encoding: Optional[str] = None
) -> etree.HTMLParser:
    """An `lxml` HTML parser that feeds its events to `builder`.

    `encoding`, when specified, overrides any encoding the document declares.
    """
    return etree.HTMLParser(
        target=builder, remove_comments=True, remove_pis=True, encoding=encoding
    )

