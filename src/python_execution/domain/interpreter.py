"""Interpreter metadata types and the helper-script wire contract."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Sequence

from pydantic import BaseModel, ConfigDict, Field

RELEASE_LEVELS = ("alpha", "beta", "candidate", "final")
UNKNOWN_RELEASE_LEVEL = "unknown"


class Architecture(str, Enum):
    x64 = "x64"
    x86 = "x86"


class PythonVersionInfo(NamedTuple):
    major: int
    minor: int
    micro: int
    releaselevel: str


@dataclass(frozen=True)
class InterpreterInformation:
    architecture: Architecture
    path: str
    version: str
    version_info: PythonVersionInfo
    sys_version: str
    sys_prefix: str

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["architecture"] = self.architecture.value
        data["version_info"] = list(self.version_info)
        return data


class InterpreterInfoPayload(BaseModel):
    """JSON printed by ``pythonFiles/interpreterInfo.py``.

    The field names and the 4-item ``versionInfo`` list are a wire contract
    with the bundled helper script.
    """

    model_config = ConfigDict(populate_by_name=True)

    version_info: List[Any] = Field(alias="versionInfo")
    sys_prefix: str = Field(alias="sysPrefix")
    sys_version: str = Field(alias="sysVersion")
    is_64_bit: bool = Field(alias="is64Bit")


def sanitize_version_info(raw: Sequence[Any]) -> PythonVersionInfo:
    """Coerce helper output into a version tuple safe to report.

    Positions 0-2 must be numbers, anything else becomes 0. Position 3 must be
    a known release level, anything else becomes ``"unknown"``.
    """
    items = list(raw or [])
    numbers: List[int] = []
    for index in range(3):
        value = items[index] if index < len(items) else None
        numbers.append(_as_version_number(value))
    level = items[3] if len(items) > 3 else None
    if not isinstance(level, str) or level not in RELEASE_LEVELS:
        level = UNKNOWN_RELEASE_LEVEL
    return PythonVersionInfo(numbers[0], numbers[1], numbers[2], level)


def architecture_from_flag(is_64_bit: bool) -> Architecture:
    return Architecture.x64 if is_64_bit else Architecture.x86


def _as_version_number(value: Any) -> int:
    # bool is an int subclass but not a version number.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return int(value)
