#!/usr/bin/env python
#
# Turns the options enabled in a kconfig output file (sdkconfig, .config) into
# `#[cfg()]` flags of a Rust crate, and hands them over to the crates which
# depend on it.
#
# Meant to be called from build scripts. Everything meant for Cargo is written
# to stdout, everything meant for humans goes to stderr.
#
# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
import argparse
import json
import os
import sys
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from embuild_kconfig import __version__

from .cargo import VAR_CFG_ARGS_KEY
from .cargo import BuildSink
from .cargo import CargoSink
from .cargo import decode_cfg_args
from .cargo import dep_env_var
from .cargo import encode_cfg_args
from .loader import ConfigPair
from .loader import WarnCallback
from .loader import load
from .loader import standard_config_filename
from .report import VERBOSITIES
from .report import VERBOSITY_DEFAULT
from .report import CfgReport
from .values import NOT_SET
from .values import Tristate
from .values import TristateValue
from .values import Value


class FatalError(RuntimeError):
    """
    Class for runtime errors (not caused by bugs but by user input).
    """

    pass


class ConfigLoadError(FatalError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot load configuration {path}: {reason}")
        self.path = path


class PropagationNotFoundError(FatalError):
    """
    The dependency did not propagate its options (it never called CfgArgs.propagate()), or
    the crate does not depend on it directly.
    """

    def __init__(self, lib_name: str, var_name: str):
        super().__init__(
            f"No configuration options propagated from '{lib_name}' ({var_name} is not set). "
            "Make sure the dependency calls propagate() and that its `links` value is correct."
        )
        self.lib_name = lib_name
        self.var_name = var_name


def cfg_name(prefix: str, key: str) -> str:
    return f"{prefix.lower()}_{key.lower()}"


class CfgArgs:
    """
    Options loaded from a kconfig output file, in the order they appear in the file.

    Only options set to "y" become flags. A flag is named `<prefix>_<option name>`, both parts
    lowercased, and can be used in conditional compilation with the `#[cfg()]` attribute or the
    `cfg!()` macro. Option names are used as they appear in the file, so CONFIG_FREERTOS_UNICORE=y
    with prefix "esp_idf" gives `cfg!(esp_idf_config_freertos_unicore)`.
    """

    def __init__(self, pairs: Iterable[ConfigPair] = ()) -> None:
        self._pairs: Tuple[ConfigPair, ...] = tuple(pairs)

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike], warn: Optional[WarnCallback] = None) -> "CfgArgs":
        try:
            return cls(load(path, warn))
        except OSError as e:
            raise ConfigLoadError(os.fspath(path), e.strerror or str(e)) from e

    def __len__(self) -> int:
        return len(self._pairs)

    def __iter__(self) -> Iterator[ConfigPair]:
        return iter(self._pairs)

    def __repr__(self) -> str:
        return f"CfgArgs({list(self._pairs)!r})"

    def keys(self) -> List[str]:
        return [key for key, _ in self._pairs]

    def get(self, key: str) -> Value:
        """
        Value of `key`. When the key is assigned more than once, the last assignment wins,
        as with the kconfig tools. Keys missing from the file are NOT_SET.
        """
        for pair_key, value in reversed(self._pairs):
            if pair_key == key:
                return value
        return NOT_SET

    def tristate(self, key: str) -> Optional[Tristate]:
        """Tristate of `key`, or None if `key` holds a string."""
        value = self.get(key)
        if isinstance(value, TristateValue):
            return value.tristate
        return None

    def gather(self, prefix: str) -> List[str]:
        """
        Names of the flags for all options set to "y", in file order. Duplicate keys give duplicate names.
        """
        return [cfg_name(prefix, key) for key, value in self._pairs if value.is_enabled]

    def output(self, prefix: str, sink: Optional[BuildSink] = None) -> List[str]:
        """
        Enable the flags of this configuration for the crate being built.
        """
        sink = sink or CargoSink()
        names = self.gather(prefix)
        for name in names:
            sink.set_cfg(name)
        return names

    def propagate(self, prefix: str, sink: Optional[BuildSink] = None) -> List[str]:
        """
        Propagate the flags of this configuration to all direct dependents of the crate being built.

        This does not enable anything by itself. Every dependent that wants these flags must call
        CfgArgs.output_propagated() in its build script, with the `links` value of this crate
        (specified in its Cargo.toml).
        """
        sink = sink or CargoSink()
        names = self.gather(prefix)
        sink.set_metadata(VAR_CFG_ARGS_KEY, encode_cfg_args(names))
        return names

    @staticmethod
    def output_propagated(
        lib_name: str,
        sink: Optional[BuildSink] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> List[str]:
        """
        Enable the flags propagated with propagate() by the dependency whose `links` value is `lib_name`.

        `lib_name` is not a crate, library or package name. It is the `links` property of the
        dependency, as specified in its package manifest.

        Raises PropagationNotFoundError if nothing was propagated. Nothing is emitted in that case.
        """
        environ = os.environ if environ is None else environ
        var_name = dep_env_var(lib_name)
        try:
            value = environ[var_name]
        except KeyError:
            raise PropagationNotFoundError(lib_name, var_name) from None

        sink = sink or CargoSink()
        names = decode_cfg_args(value)
        for name in names:
            sink.set_cfg(name)
        return names


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="embuild-kconfig v%s - Conditional compilation flags from kconfig output files" % __version__,
        prog=os.path.basename(sys.argv[0]),
    )

    parser.add_argument(
        "--config",
        help="Configuration file (sdkconfig, .config) to load. "
        "Defaults to $KCONFIG_CONFIG, or .config if it is not set.",
        default=None,
    )

    parser.add_argument(
        "--prefix",
        help="Prefix of the flag names, lowercased together with option names. "
        "Defaults to $EMBUILD_KCONFIG_PREFIX.",
        default=None,
    )

    parser.add_argument(
        "--output",
        action="store_true",
        help="Enable the flags for the crate being built",
    )

    parser.add_argument(
        "--propagate",
        action="store_true",
        help="Propagate the flags to the direct dependents of the crate being built",
    )

    parser.add_argument(
        "--output-propagated",
        action="append",
        default=[],
        help="Enable the flags propagated by the dependency with this `links` value. Can be repeated.",
        metavar="LINKS",
    )

    parser.add_argument(
        "--env",
        action="append",
        default=[],
        help="Environment to set before doing anything else",
        metavar="NAME=VAL",
    )

    parser.add_argument(
        "--env-file",
        type=argparse.FileType("r"),
        help="Optional file to load environment variables from. Contents "
        "should be a JSON object where each key/value pair is a variable.",
    )

    parser.add_argument(
        "--verbosity",
        choices=VERBOSITIES,
        default=VERBOSITY_DEFAULT,
        help="How much to report on stderr",
    )

    parser.add_argument("--version", action="version", version=__version__)

    args = parser.parse_args(argv)

    if not (args.output or args.propagate or args.output_propagated):
        parser.error("nothing to do, use --output, --propagate or --output-propagated")

    try:
        args.env = [(name, value) for (name, value) in (e.split("=", 1) for e in args.env)]
    except ValueError:
        print("--env arguments must each contain =. To unset an environment variable, use 'ENV='", file=sys.stderr)
        return 1

    for name, value in args.env:
        os.environ[name] = value

    if args.env_file is not None:
        env = json.load(args.env_file)
        os.environ.update(env)

    report = CfgReport()
    sink = CargoSink()
    try:
        if args.output or args.propagate:
            prefix = args.prefix if args.prefix is not None else os.environ.get("EMBUILD_KCONFIG_PREFIX")
            if not prefix:
                parser.error("--prefix (or EMBUILD_KCONFIG_PREFIX) is required for --output and --propagate")

            config_path = args.config or standard_config_filename()
            cfg_args = CfgArgs.from_path(config_path, warn=report.warn)
            report.add_loaded(config_path, len(cfg_args))

            if args.output:
                report.add_emitted("Enabled", cfg_args.output(prefix, sink))
            if args.propagate:
                report.add_emitted("Propagated", cfg_args.propagate(prefix, sink))

        for lib_name in args.output_propagated:
            report.add_emitted(f"Enabled from {lib_name}", CfgArgs.output_propagated(lib_name, sink))
    finally:
        report.print(args.verbosity)

    return 0
