# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
"""
Communication with the build orchestrator (Cargo).

A build script talks to Cargo by printing "cargo:" directives on its standard output:

    cargo:rustc-cfg=<name>      enables `#[cfg(<name>)]` for the crate being built
    cargo:<KEY>=<VALUE>         metadata, visible to the direct dependents of the crate as
                                the DEP_<LINKS>_<KEY> environment variable, where <LINKS> is
                                the value of the `links` manifest key of the crate

Flag names are passed to the dependents in a single metadata value, joined with ':'.
Flag names are identifiers, so ':' never appears in them.
"""
import sys
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Protocol
from typing import TextIO
from typing import Tuple

VAR_CFG_ARGS_KEY = "EMBUILD_CFG_ARGS"
CFG_ARGS_SEPARATOR = ":"


def encode_cfg_args(names: Iterable[str]) -> str:
    return CFG_ARGS_SEPARATOR.join(names)


def decode_cfg_args(value: str) -> List[str]:
    # An empty list is published as an empty string
    return [name for name in value.split(CFG_ARGS_SEPARATOR) if name]


def dep_env_var(lib_name: str, key: str = VAR_CFG_ARGS_KEY) -> str:
    """
    Name of the environment variable through which Cargo hands over metadata `key`
    of the dependency whose `links` value is `lib_name`. `lib_name` is used verbatim.
    """
    return f"DEP_{lib_name}_{key}"


class BuildSink(Protocol):
    def set_cfg(self, name: str, value: str = "") -> None:
        ...

    def set_metadata(self, key: str, value: str) -> None:
        ...


class CargoSink:
    """
    Writes the directives for Cargo. `stream` defaults to the standard output at the time of writing.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream

    def _write(self, directive: str) -> None:
        stream = self.stream if self.stream is not None else sys.stdout
        stream.write(f"cargo:{directive}\n")

    def set_cfg(self, name: str, value: str = "") -> None:
        if value:
            self._write(f'rustc-cfg={name}="{value}"')
        else:
            self._write(f"rustc-cfg={name}")

    def set_metadata(self, key: str, value: str) -> None:
        self._write(f"{key}={value}")


class RecordingSink:
    """
    Keeps everything in memory instead of talking to a build orchestrator.
    """

    def __init__(self) -> None:
        self.cfgs: List[Tuple[str, str]] = []
        self.metadata: Dict[str, str] = {}

    def set_cfg(self, name: str, value: str = "") -> None:
        self.cfgs.append((name, value))

    def set_metadata(self, key: str, value: str) -> None:
        self.metadata[key] = value

    @property
    def cfg_names(self) -> List[str]:
        return [name for name, _ in self.cfgs]

    def as_environ(self, lib_name: str) -> Dict[str, str]:
        """
        The environment a direct dependent would see, given this sink was used by the dependency with `links = lib_name`.
        """
        return {dep_env_var(lib_name, key): value for key, value in self.metadata.items()}
