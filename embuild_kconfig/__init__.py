# SPDX-FileCopyrightText: 2025 Espressif Systems (Shanghai) CO LTD
# SPDX-License-Identifier: Apache-2.0
__version__ = "0.1.0"

from .cargo import VAR_CFG_ARGS_KEY  # noqa: E402
from .cargo import CargoSink  # noqa: E402
from .cargo import RecordingSink  # noqa: E402
from .core import CfgArgs  # noqa: E402
from .core import ConfigLoadError  # noqa: E402
from .core import FatalError  # noqa: E402
from .core import PropagationNotFoundError  # noqa: E402
from .loader import load  # noqa: E402
from .values import StringValue  # noqa: E402
from .values import Tristate  # noqa: E402
from .values import TristateValue  # noqa: E402
from .values import Value  # noqa: E402

__all__ = [
    "VAR_CFG_ARGS_KEY",
    "CargoSink",
    "CfgArgs",
    "ConfigLoadError",
    "FatalError",
    "PropagationNotFoundError",
    "RecordingSink",
    "StringValue",
    "Tristate",
    "TristateValue",
    "Value",
    "load",
]
