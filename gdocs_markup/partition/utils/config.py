"""
This module contains variables that can permitted to be tweaked by the system environment. For
example, the default style resolution used when a caller does not specify one. Constants do NOT
belong in this module. Constants are values that are names for recognized patterns or options and
should not be altered without making a code change; those live beside the code that uses them.
"""

import os
from dataclasses import dataclass

STYLE_RESOLUTION_MODES = ("class", "inline", "both")


@dataclass
class ENVConfig:
    """class for configuring enviorment parameters"""

    def _get_string(self, var: str, default_value: str = "") -> str:
        """attempt to get the value of var from the os environment; if not present return the
        default_value"""
        return os.environ.get(var, default_value)

    def _get_float(self, var: str, default_value: float) -> float:
        if value := self._get_string(var):
            return float(value)
        return default_value

    @property
    def GDOCS_MARKUP_STYLE_RESOLUTION(self) -> str:
        """where run formatting is read from when the caller doesn't say

        - "class": the `.cNN` rules of the document stylesheet, referenced by `class` attributes
        - "inline": the `style` attribute of each paragraph and span
        - "both": either source can set a flag
        """
        value = (self._get_string("GDOCS_MARKUP_STYLE_RESOLUTION") or "both").lower()
        if value not in STYLE_RESOLUTION_MODES:
            raise ValueError(
                f"GDOCS_MARKUP_STYLE_RESOLUTION must be one of {', '.join(STYLE_RESOLUTION_MODES)},"
                f" got {value!r}."
            )
        return value

    @property
    def GDOCS_MARKUP_ENCODING_CONFIDENCE_THRESHOLD(self) -> float:
        """minimum `chardet` confidence for a detected encoding to be used as-is

        Below this value the common encodings are tried in turn instead.
        """
        return self._get_float("GDOCS_MARKUP_ENCODING_CONFIDENCE_THRESHOLD", 0.8)


env_config = ENVConfig()
