"""Document model produced by the Google Docs HTML partitioner.

A document is a flat sequence of blocks. Text blocks (headings, paragraphs, list-items) hold a
sequence of runs, each run being a contiguous string of text with a single style signature. Lists
hold list-items. Rules and page-breaks have no content.

All model objects are immutable once constructed and compare by value, so two parses of the same
HTML produce equal documents.
"""

from __future__ import annotations

import abc
import dataclasses as dc
from typing import Any, ClassVar, Iterable, Optional, Sequence

from typing_extensions import TypeAlias


@dc.dataclass(frozen=True)
class StyleFlags:
    """The three formatting properties we recognize on a run of text.

    Flags are only ever promoted, never cleared. Combining two flag sets with `|` gives a flag set
    where each property is set when it is set in either operand.
    """

    bold: bool = False
    italic: bool = False
    underline: bool = False

    def __or__(self, other: StyleFlags) -> StyleFlags:
        return StyleFlags(
            bold=self.bold or other.bold,
            italic=self.italic or other.italic,
            underline=self.underline or other.underline,
        )


@dc.dataclass(frozen=True)
class Run:
    """A contiguous span of text sharing one style signature."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    href: Optional[str] = None

    @classmethod
    def from_flags(cls, text: str, flags: StyleFlags, href: Optional[str] = None) -> Run:
        """Create a run from resolved style-flags.

        A link is never underlined, even when the span containing it is.
        """
        return cls(
            text,
            bold=flags.bold,
            italic=flags.italic,
            underline=flags.underline and href is None,
            href=href,
        )

    @property
    def signature(self) -> tuple[bool, bool, bool, Optional[str]]:
        """Adjacent runs with equal signatures are merged into one."""
        return (self.bold, self.italic, self.underline, self.href)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict, omitting unset attributes."""
        out: dict[str, Any] = {"text": self.text}
        if self.bold:
            out["bold"] = True
        if self.italic:
            out["italic"] = True
        if self.underline:
            out["underline"] = True
        if self.href is not None:
            out["href"] = self.href
        return out

    @classmethod
    def from_dict(cls, run_dict: dict[str, Any]) -> Run:
        return cls(
            run_dict["text"],
            bold=bool(run_dict.get("bold", False)),
            italic=bool(run_dict.get("italic", False)),
            underline=bool(run_dict.get("underline", False)),
            href=run_dict.get("href"),
        )


class ElementType:
    HEADING_1 = "h1"
    HEADING_2 = "h2"
    HEADING_3 = "h3"
    HEADING_4 = "h4"
    PARAGRAPH = "p"
    LIST_ITEM = "li"
    ORDERED_LIST = "ol"
    UNORDERED_LIST = "ul"
    RULE = "hr"
    PAGE_BREAK = "page-break"

    @classmethod
    def to_dict(cls):
        """
        Convert class attributes to a dictionary.

        Returns:
            dict: A dictionary where keys are attribute names and values are attribute values.
        """
        return {
            attr: getattr(cls, attr)
            for attr in dir(cls)
            if not callable(getattr(cls, attr)) and not attr.startswith("__")
        }


class Block(abc.ABC):
    """A structural unit of the document: heading, paragraph, list, rule or page-break."""

    category: ClassVar[str]

    @abc.abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible (str keys) dict."""


@dc.dataclass(frozen=True, init=False)
class TextBlock(Block):
    """Base for blocks whose content is a sequence of runs."""

    runs: tuple[Run, ...]

    def __init__(self, runs: Iterable[Run]):
        object.__setattr__(self, "runs", tuple(runs))

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.category, "texts": [run.to_dict() for run in self.runs]}


@dc.dataclass(frozen=True, init=False)
class Heading(TextBlock):
    """A heading of level 1 through 4."""

    level: int

    def __init__(self, level: int, runs: Iterable[Run]):
        if level not in (1, 2, 3, 4):
            raise ValueError(f"Heading level must be 1, 2, 3 or 4, got {level}.")
        super().__init__(runs)
        object.__setattr__(self, "level", level)

    @property
    def category(self) -> str:  # type: ignore[override]
        return f"h{self.level}"


@dc.dataclass(frozen=True, init=False)
class Paragraph(TextBlock):
    category = ElementType.PARAGRAPH


@dc.dataclass(frozen=True, init=False)
class ListItem(TextBlock):
    """A paragraph that is an item of a `List`."""

    category = ElementType.LIST_ITEM


@dc.dataclass(frozen=True, init=False)
class List(Block):
    """An ordered or unordered list of list-items."""

    ordered: bool
    items: tuple[ListItem, ...]

    def __init__(self, ordered: bool, items: Iterable[Block]):
        items = tuple(items)
        for item in items:
            if not isinstance(item, ListItem):
                raise ValueError(
                    f"List can only contain ListItem blocks, got {type(item).__name__}."
                )
        object.__setattr__(self, "ordered", ordered)
        object.__setattr__(self, "items", items)

    @property
    def category(self) -> str:  # type: ignore[override]
        return ElementType.ORDERED_LIST if self.ordered else ElementType.UNORDERED_LIST

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.category, "blocks": [item.to_dict() for item in self.items]}


@dc.dataclass(frozen=True)
class Rule(Block):
    """A horizontal divider."""

    category = ElementType.RULE

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.category}


@dc.dataclass(frozen=True)
class PageBreak(Block):
    """An explicit pagination marker."""

    category = ElementType.PAGE_BREAK

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.category}


Document: TypeAlias = "list[Block]"
"""The top-level output of a parse, blocks in document order."""


def block_from_dict(block_dict: dict[str, Any]) -> Block:
    """Rehydrate a single block from its `.to_dict()` form."""
    block_type = block_dict.get("type")

    if block_type in HEADING_TYPES:
        return Heading(HEADING_TYPES[block_type], _runs_from_dicts(block_dict["texts"]))
    if block_type == ElementType.PARAGRAPH:
        return Paragraph(_runs_from_dicts(block_dict["texts"]))
    if block_type == ElementType.LIST_ITEM:
        return ListItem(_runs_from_dicts(block_dict["texts"]))
    if block_type in (ElementType.ORDERED_LIST, ElementType.UNORDERED_LIST):
        return List(
            block_type == ElementType.ORDERED_LIST,
            (block_from_dict(d) for d in block_dict.get("blocks", [])),
        )
    if block_type == ElementType.RULE:
        return Rule()
    if block_type == ElementType.PAGE_BREAK:
        return PageBreak()

    raise ValueError(f"Unrecognized block type: {block_type!r}")


def _runs_from_dicts(run_dicts: Sequence[dict[str, Any]]) -> tuple[Run, ...]:
    return tuple(Run.from_dict(d) for d in run_dicts)


HEADING_TYPES: dict[str, int] = {
    ElementType.HEADING_1: 1,
    ElementType.HEADING_2: 2,
    ElementType.HEADING_3: 3,
    ElementType.HEADING_4: 4,
}
