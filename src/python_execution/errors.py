import re
from typing import Optional, Sequence


class PythonExecutionError(Exception):
    """Base class for errors raised by this package."""


class ProcessExecutionError(PythonExecutionError):
    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = list(command or [])
        self.returncode = returncode
        self.stderr = stderr


class StdErrError(ProcessExecutionError):
    def __init__(self, stderr: str, command: Optional[Sequence[str]] = None):
        super().__init__(stderr, command=command, stderr=stderr)


class ModuleNotInstalledError(PythonExecutionError):
    def __init__(self, module_name: str):
        super().__init__(f"Module '{module_name}' not installed.")
        self.module_name = module_name


def output_has_module_not_installed_error(module_name: str, content: Optional[str]) -> bool:
    """True when ``content`` holds Python's "No module named" message for ``module_name``."""
    if not module_name or not content:
        return False
    name = re.escape(module_name)
    pattern = rf"No module named (?:'{name}'|\"{name}\"|{name}(?![\w.]))"
    return re.search(pattern, content) is not None
