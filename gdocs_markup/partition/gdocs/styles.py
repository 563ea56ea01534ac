"""Resolves the bold, italic and underline formatting of a run of text.

The editor expresses formatting in one of two ways depending on how the HTML was produced:

- A "Download as web page" export puts a `<style>` element in the `<head>` with one generated rule
  per distinct combination of properties (`.c12{font-weight:700;color:#000000}`) and refers to
  those rules from `class` attributes (`<span class="c3 c12">`).
- Clipboard and "publish to the web" HTML carries the same properties inline
  (`<span style="font-weight:700;color:#000000">`).

Neither form is interpreted as full CSS. We look only for the three property signatures below and
never for declarations that would switch a property back off; formatting is applied, not revoked.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from gdocs_markup.documents.elements import StyleFlags

# -- ".c12{...}", we only care about the generated ".cNN" classes --
RULE_SET_RE = re.compile(r"\.(c\d+)\s*\{([^}]*)\}")
CLASS_NAME_RE = re.compile(r"c\d+")

BOLD_RE = re.compile(r"\bfont-weight\s*:\s*(?:bold|bolder|[6-9]00)\b", re.IGNORECASE)
ITALIC_RE = re.compile(r"\bfont-style\s*:\s*italic\b", re.IGNORECASE)
UNDERLINE_RE = re.compile(r"\btext-decoration(?:-line)?\s*:[^;]*\bunderline\b", re.IGNORECASE)
PAGE_BREAK_RE = re.compile(
    r"\bpage-break-before\s*:\s*always\b|(?<![-\w])break-before\s*:\s*page\b", re.IGNORECASE
)


def flags_from_declarations(declarations: str) -> StyleFlags:
    """The style-flags set by a CSS declaration block like "font-weight:700;color:#000000"."""
    return StyleFlags(
        bold=bool(BOLD_RE.search(declarations)),
        italic=bool(ITALIC_RE.search(declarations)),
        underline=bool(UNDERLINE_RE.search(declarations)),
    )


def class_names_from_attr(class_attr: Optional[str]) -> frozenset[str]:
    """The generated `cNN` class names in a `class` attribute value, ignoring all others."""
    if not class_attr:
        return frozenset()
    return frozenset(name for name in class_attr.split() if CLASS_NAME_RE.fullmatch(name))


def is_page_break(style_text: Optional[str]) -> bool:
    """True when the `style` attribute of an `<hr>` forces a page break before it."""
    return bool(style_text) and bool(PAGE_BREAK_RE.search(style_text or ""))


class CssClassStyles:
    """Answers "is class `cNN` bold? italic? underlined?" for one stylesheet.

    Each query is independent; there is no inheritance between classes.
    """

    def __init__(self, css_text: str = ""):
        self._bold: set[str] = set()
        self._italic: set[str] = set()
        self._underline: set[str] = set()

        for match in RULE_SET_RE.finditer(css_text):
            selector, declarations = match.group(1), match.group(2)
            flags = flags_from_declarations(declarations)
            if flags.bold:
                self._bold.add(selector)
            if flags.italic:
                self._italic.add(selector)
            if flags.underline:
                self._underline.add(selector)

    def resolve(self, class_names: Iterable[str]) -> StyleFlags:
        """A flag is set when ANY of `class_names` names a rule carrying that property."""
        class_names = set(class_names)
        return StyleFlags(
            bold=not class_names.isdisjoint(self._bold),
            italic=not class_names.isdisjoint(self._italic),
            underline=not class_names.isdisjoint(self._underline),
        )


class InlineStyleResolver:
    """Computes effective style-flags from a `style` attribute and those of the enclosing element.

    A child can only add formatting to what its ancestors established, never remove it.
    """

    @staticmethod
    def resolve(style_text: Optional[str], parent_flags: StyleFlags) -> StyleFlags:
        if not style_text:
            return parent_flags
        return parent_flags | flags_from_declarations(style_text)
