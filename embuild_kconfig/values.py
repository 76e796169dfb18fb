# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Tristate(Enum):
    TRUE = "y"
    FALSE = "n"
    MODULE = "m"
    # Never produced by parsing; callers use it for keys missing from the file
    NOT_SET = "not set"

    @classmethod
    def from_str(cls, literal: str) -> Optional["Tristate"]:
        """Return the tristate for one of the "y", "n", "m" literals, None otherwise."""
        for tristate in (cls.TRUE, cls.FALSE, cls.MODULE):
            if tristate.value == literal:
                return tristate
        return None

    def __str__(self) -> str:
        return self.value


class Value:
    """
    Value of a single option from a kconfig output file (sdkconfig, .config).

    Either a TristateValue or a StringValue. Use Value.parse() to create one from the text
    to the right of '=' in an assignment.
    """

    @property
    def is_enabled(self) -> bool:
        return False

    @staticmethod
    def parse(raw: str) -> Optional["Value"]:
        """
        Parse the right-hand side of a KEY=VALUE line.

        Quoted strings are kept verbatim, quotes included. Escape sequences are not
        processed and consumers get the text exactly as it was in the file.
        Returns None if the text is neither a string nor one of "y", "n", "m".
        """
        if raw.startswith('"'):
            return StringValue(raw)

        tristate = Tristate.from_str(raw)
        if tristate is None:
            return None
        return TristateValue(tristate)


@dataclass(frozen=True)
class TristateValue(Value):
    tristate: Tristate

    @property
    def is_enabled(self) -> bool:
        return self.tristate is Tristate.TRUE

    def __str__(self) -> str:
        return str(self.tristate)


@dataclass(frozen=True)
class StringValue(Value):
    text: str

    @property
    def unquoted(self) -> str:
        # strips one pair of surrounding quotes, the content is left as is
        if len(self.text) >= 2 and self.text.endswith('"'):
            return self.text[1:-1]
        return self.text[1:]

    def __str__(self) -> str:
        return self.text


NOT_SET = TristateValue(Tristate.NOT_SET)
