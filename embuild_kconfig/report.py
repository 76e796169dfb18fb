# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Report of a single embuild-kconfig run.

Messages are collected while the configuration is loaded and the flags are emitted and printed
to stderr at the end as one report. Standard output belongs to the build orchestrator.
"""
import sys
from typing import List
from typing import Optional
from typing import Tuple

from rich.box import HORIZONTALS
from rich.console import Console
from rich.table import Table

VERBOSITY_QUIET = "quiet"  # Report only warnings
VERBOSITY_DEFAULT = "default"  # Report a summary
VERBOSITY_VERBOSE = "verbose"  # Report everything, including the names of the flags
VERBOSITIES = (VERBOSITY_QUIET, VERBOSITY_DEFAULT, VERBOSITY_VERBOSE)

TITLE_STYLE = "bold blue"
SUBTITLE_STYLE = "bold"
WARNING_STYLE = "yellow"


class CfgReport:
    def __init__(self, warn_to_stderr: bool = False) -> None:
        self.warn_to_stderr = warn_to_stderr
        self.warnings: List[str] = []
        self.loaded: List[Tuple[str, int]] = []
        # (where the flags went, names)
        self.emitted: List[Tuple[str, List[str]]] = []

    def warn(self, msg: str, filename: Optional[str] = None, linenr: Optional[int] = None) -> None:
        msg = "warning: " + msg
        if filename is not None:
            msg = f"{filename}:{linenr}: {msg}"

        self.warnings.append(msg)
        if self.warn_to_stderr:
            sys.stderr.write(msg + "\n")

    def add_loaded(self, filename: str, pair_count: int) -> None:
        self.loaded.append((filename, pair_count))

    def add_emitted(self, target: str, names: List[str]) -> None:
        self.emitted.append((target, list(names)))

    def _nothing_to_report(self, verbosity: str) -> bool:
        if verbosity == VERBOSITY_QUIET:
            return not self.warnings
        return not (self.warnings or self.loaded or self.emitted)

    def table(self, verbosity: str = VERBOSITY_DEFAULT) -> Optional[Table]:
        if self._nothing_to_report(verbosity):
            return None

        table = Table(title="embuild-kconfig", title_justify="left", show_header=False, title_style=TITLE_STYLE)
        table.box = HORIZONTALS
        table.add_column("", justify="left", overflow="fold")

        if verbosity != VERBOSITY_QUIET:
            for filename, pair_count in self.loaded:
                table.add_row(f"Loaded {pair_count} option{'s' if pair_count != 1 else ''} from {filename}")
            for target, names in self.emitted:
                table.add_row(f"{target}: {len(names)} flag{'s' if len(names) != 1 else ''}", style=SUBTITLE_STYLE)
                if verbosity == VERBOSITY_VERBOSE:
                    for name in names:
                        table.add_row(f"    {name}")

        if self.warnings:
            table.add_row(f"Skipped lines ({len(self.warnings)})", style=SUBTITLE_STYLE)
            for msg in self.warnings:
                table.add_row(msg, style=WARNING_STYLE)

        return table

    def print(self, verbosity: str = VERBOSITY_DEFAULT) -> None:
        table = self.table(verbosity)
        if table is not None:
            Console(stderr=True).print(table)
