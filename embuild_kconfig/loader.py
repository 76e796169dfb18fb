# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Lenient reader for the configuration files written by kconfig tools (sdkconfig, .config).

Only the assignments matter here. Comments (including "# CONFIG_FOO is not set"), blank lines
and anything that cannot be parsed are skipped, as a broken line must never break the build.
"""
import os
from typing import BinaryIO
from typing import Callable
from typing import Iterator
from typing import Optional
from typing import Tuple
from typing import Union

from .values import Value

# warn(msg, filename, linenr)
WarnCallback = Callable[[str, str, int], None]

ConfigPair = Tuple[str, Value]


def standard_config_filename() -> str:
    """
    Returns the path to the configuration file to load by default: the value of the
    KCONFIG_CONFIG environment variable if set, ".config" otherwise. Same convention
    as the C tools and kconfiglib.
    """
    return os.getenv("KCONFIG_CONFIG", ".config")


def parse_line(line: str) -> Tuple[Optional[ConfigPair], Optional[str]]:
    """
    Parse a single (already decoded) line.

    Returns (pair, None) for an assignment, (None, None) for a blank line or a comment
    and (None, reason) for a line that was dropped because it is malformed.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None, None

    key, sep, raw = line.partition("=")
    if not sep:
        return None, f"ignoring malformed line '{line}'"

    key = key.strip()
    if not key:
        return None, f"ignoring assignment without a name '{line}'"

    raw = raw.strip()
    value = Value.parse(raw)
    if value is None:
        return None, f"ignoring unsupported value '{raw}' of {key}"

    return (key, value), None


def _iter_pairs(f: BinaryIO, filename: str, warn: Optional[WarnCallback]) -> Iterator[ConfigPair]:
    with f:
        for linenr, raw_line in enumerate(f, 1):
            try:
                line = raw_line.decode("utf-8")
            except UnicodeDecodeError:
                if warn:
                    warn("ignoring line which is not valid UTF-8", filename, linenr)
                continue

            pair, reason = parse_line(line)
            if pair is not None:
                yield pair
            elif reason and warn:
                warn(reason, filename, linenr)


def load(path: Union[str, os.PathLike], warn: Optional[WarnCallback] = None) -> Iterator[ConfigPair]:
    """
    Load (key, value) pairs from a kconfig output file.

    The file is opened right away, so a missing or unreadable file raises OSError from this call.
    The pairs themselves are produced lazily, in file order, and can be consumed only once.
    Duplicate keys are yielded as many times as they appear.

    warn (default: None):
      Optional callable warn(msg, filename, linenr) called for every line that was dropped
      because it could not be parsed. Loading never stops because of such a line.
    """
    filename = os.fspath(path)
    f = open(filename, "rb")
    return _iter_pairs(f, filename, warn)
