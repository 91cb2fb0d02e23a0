from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, Optional, Protocol, Sequence

if TYPE_CHECKING:
    from python_execution.execution.observable import ObservableExecution


@dataclass(frozen=True)
class ExecutionResult:
    returncode: int
    stdout: str
    stderr: str


@dataclass(frozen=True)
class Output:
    source: str
    out: str


@dataclass
class SpawnOptions:
    merge_stdout_stderr: bool = False
    throw_on_stderr: bool = False
    cwd: Optional[str] = None
    env: Optional[Dict[str, str]] = None
    timeout_sec: Optional[float] = None
    encoding: str = "utf-8"
    extra: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "SpawnOptions":
        """Return a copy that shares no mutable mappings with this instance."""
        return replace(
            self,
            env=dict(self.env) if self.env is not None else None,
            extra=dict(self.extra),
        )


class ProcessService(Protocol):
    async def exec(
        self,
        file: str,
        args: Sequence[str],
        options: Optional[SpawnOptions] = None,
    ) -> ExecutionResult:
        ...

    def exec_observable(
        self,
        file: str,
        args: Sequence[str],
        options: Optional[SpawnOptions] = None,
    ) -> "ObservableExecution":
        ...


class FileSystem(Protocol):
    def file_exists(self, path: str) -> bool:
        ...
