import re

# -- no-break space, figure space and narrow no-break space --
NON_BREAKING_SPACES_RE = re.compile("[\xa0\u2007\u202f]")


def replace_non_breaking_spaces(text: str) -> str:
    """Replaces non-breaking space characters with ordinary spaces.

    The editor emits `&nbsp;` wherever the author typed more than one consecutive space and at the
    boundaries of many formatting changes. The entity is decoded by the HTML parser, so here we are
    working with the decoded characters, not the entity.

    Example
    -------
    Here\xa0is a\xa0 -> Here is a
    """
    return NON_BREAKING_SPACES_RE.sub(" ", text)


def clean_extra_whitespace(text: str) -> str:
    """Cleans extra whitespace characters that appear between words.

    Example
    -------
    ITEM 1.     BUSINESS -> ITEM 1. BUSINESS
    """
    cleaned_text = replace_non_breaking_spaces(text).replace("\n", " ")
    cleaned_text = re.sub(r"([ ]{2,})", " ", cleaned_text)
    return cleaned_text.strip()
