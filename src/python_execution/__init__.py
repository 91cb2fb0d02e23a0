from python_execution.app_container import build_python_execution_service
from python_execution.domain.contracts import ExecutionResult, Output, SpawnOptions
from python_execution.domain.interpreter import Architecture, InterpreterInformation, PythonVersionInfo
from python_execution.errors import (
    ModuleNotInstalledError,
    ProcessExecutionError,
    PythonExecutionError,
    StdErrError,
)
from python_execution.execution.observable import ObservableExecution
from python_execution.execution.process_service import LocalProcessService
from python_execution.execution.python_process import PythonExecutionService

__all__ = [
    "Architecture",
    "ExecutionResult",
    "InterpreterInformation",
    "LocalProcessService",
    "ModuleNotInstalledError",
    "ObservableExecution",
    "Output",
    "ProcessExecutionError",
    "PythonExecutionError",
    "PythonVersionInfo",
    "PythonExecutionService",
    "SpawnOptions",
    "StdErrError",
    "build_python_execution_service",
]
