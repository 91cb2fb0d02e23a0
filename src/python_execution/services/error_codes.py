from dataclasses import dataclass
from typing import List

from python_execution.errors import ModuleNotInstalledError, StdErrError


@dataclass(frozen=True)
class RecoveryAction:
    action_id: str
    label: str
    description: str


@dataclass(frozen=True)
class ErrorCatalogEntry:
    code: str
    title: str
    user_message: str
    triggers: List[str]
    actions: List[RecoveryAction]


ERROR_CATALOG: List[ErrorCatalogEntry] = [
    ErrorCatalogEntry(
        code="ERR_MODULE_NOT_INSTALLED",
        title="Module not installed",
        user_message="The requested module is not installed in the selected interpreter.",
        triggers=["not installed.", "No module named"],
        actions=[
            RecoveryAction("install_module", "Install module", "Run '<python> -m pip install <module>'."),
            RecoveryAction("select_interpreter", "Select interpreter", "Point to an environment that has the module."),
        ],
    ),
    ErrorCatalogEntry(
        code="ERR_INTERPRETER_NOT_FOUND",
        title="Interpreter not available",
        user_message="The configured interpreter could not be started.",
        triggers=["No such file or directory", "Permission denied", "cannot find the file"],
        actions=[
            RecoveryAction("select_interpreter", "Select interpreter", "Set PYTHON_EXECUTION_INTERPRETER or --python."),
        ],
    ),
    ErrorCatalogEntry(
        code="ERR_EXEC_TIMEOUT",
        title="Execution timeout",
        user_message="The interpreter exceeded the allowed execution time.",
        triggers=["Execution timeout."],
        actions=[
            RecoveryAction("raise_timeout", "Raise timeout", "Increase PYTHON_EXECUTION_TIMEOUT_SEC or --timeout."),
        ],
    ),
    ErrorCatalogEntry(
        code="ERR_SYNTAX",
        title="Syntax error",
        user_message="The interpreter rejected the code as invalid syntax.",
        triggers=["SyntaxError:"],
        actions=[
            RecoveryAction("check_version", "Check version", "The code may need a newer interpreter."),
        ],
    ),
    ErrorCatalogEntry(
        code="ERR_PYTHON_EXCEPTION",
        title="Unhandled exception",
        user_message="The interpreter exited with an unhandled exception.",
        triggers=["Traceback (most recent call last):"],
        actions=[
            RecoveryAction("inspect_stderr", "Inspect stderr", "Read the traceback printed by the interpreter."),
        ],
    ),
    ErrorCatalogEntry(
        code="ERR_STDERR_OUTPUT",
        title="Unexpected stderr output",
        user_message="The interpreter wrote to stderr where no output was expected.",
        triggers=[],
        actions=[
            RecoveryAction("inspect_stderr", "Inspect stderr", "Warnings from site-packages can trigger this."),
        ],
    ),
    ErrorCatalogEntry(
        code="ERR_UNKNOWN",
        title="Unknown execution error",
        user_message="An unknown error occurred.",
        triggers=[],
        actions=[
            RecoveryAction("retry", "Retry", "Retry once to confirm reproducibility."),
        ],
    ),
]


def detect_error_code(text: str) -> str:
    value = text or ""
    for entry in ERROR_CATALOG:
        if any(trigger in value for trigger in entry.triggers):
            return entry.code
    return "ERR_UNKNOWN"


def error_code_for_exception(exc: BaseException) -> str:
    if isinstance(exc, ModuleNotInstalledError):
        return "ERR_MODULE_NOT_INSTALLED"
    if isinstance(exc, OSError):
        return "ERR_INTERPRETER_NOT_FOUND"
    code = detect_error_code(str(exc))
    if code == "ERR_UNKNOWN" and isinstance(exc, StdErrError):
        return "ERR_STDERR_OUTPUT"
    return code


def get_catalog_entry(code: str) -> ErrorCatalogEntry:
    for entry in ERROR_CATALOG:
        if entry.code == code:
            return entry
    return next(entry for entry in ERROR_CATALOG if entry.code == "ERR_UNKNOWN")
