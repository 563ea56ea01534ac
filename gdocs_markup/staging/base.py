from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from gdocs_markup.cleaners.core import clean_extra_whitespace
from gdocs_markup.documents.elements import Block, Document, List, TextBlock, block_from_dict
from gdocs_markup.utils import exactly_one

# ================================================================================================
# SERIALIZATION/DESERIALIZATION (SERDE) RELATED FUNCTIONS
# ================================================================================================

# == DESERIALIZERS ===============================


def elements_from_dicts(element_dicts: Iterable[dict[str, Any]]) -> Document:
    """Convert a list of block-dicts to a document.

    Raises `ValueError` on a dict with an unrecognized `"type"`.
    """
    return [block_from_dict(item) for item in element_dicts]


def elements_from_json(
    filename: Optional[str] = None, text: Optional[str] = None, encoding: str = "utf-8"
) -> Document:
    """Loads a document from a JSON file or a string."""
    exactly_one(filename=filename, text=text)

    if filename:
        with open(filename, encoding=encoding) as f:
            element_dicts = json.load(f)
    else:
        element_dicts = json.loads(str(text))

    return elements_from_dicts(element_dicts)


# == SERIALIZERS =================================


def elements_to_dicts(elements: Iterable[Block]) -> list[dict[str, Any]]:
    """Convert document blocks to block-dicts."""
    return [e.to_dict() for e in elements]


def elements_to_json(
    elements: Iterable[Block],
    filename: Optional[str] = None,
    indent: int = 4,
    encoding: str = "utf-8",
) -> Optional[str]:
    """Saves a document to a JSON file if filename is specified.

    Otherwise, return the document as a JSON string.
    """
    # -- `ensure_ascii=False` keeps curly quotes and the like readable in the output --
    json_str = json.dumps(elements_to_dicts(elements), indent=indent, ensure_ascii=False)

    if filename is not None:
        with open(filename, "w", encoding=encoding) as f:
            f.write(json_str)
        return None

    return json_str


# ================================================================================================


def convert_to_text(elements: Iterable[Block]) -> str:
    """Convert a document into clean text, one line per text block or list-item.

    List-items are prefixed with "- " in an unordered list and with their 1-based position, like
    "1. ", in an ordered list. Rules and page-breaks have no text and produce no line.
    """
    lines: list[str] = []
    for element in elements:
        if isinstance(element, List):
            for idx, item in enumerate(element.items, start=1):
                prefix = f"{idx}. " if element.ordered else "- "
                lines.append(prefix + clean_extra_whitespace(item.text))
        elif isinstance(element, TextBlock) and (text := clean_extra_whitespace(element.text)):
            lines.append(text)
    return "\n".join(lines)


def elements_to_text(
    elements: Iterable[Block], filename: Optional[str] = None, encoding: str = "utf-8"
) -> Optional[str]:
    """Convert a document into clean text.

    Saves to a txt file if filename is specified. Otherwise, return the text as a string.
    """
    element_cct = convert_to_text(elements)
    if filename is not None:
        with open(filename, "w", encoding=encoding) as f:
            f.write(element_cct)
            return None
    else:
        return element_cct
