import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from python_execution.config import EXTENSION_ROOT_DIR, INTERPRETER_INFO_SCRIPT
from python_execution.domain.contracts import ExecutionResult, FileSystem, ProcessService, SpawnOptions
from python_execution.domain.interpreter import (
    InterpreterInfoPayload,
    InterpreterInformation,
    architecture_from_flag,
    sanitize_version_info,
)
from python_execution.errors import (
    ModuleNotInstalledError,
    ProcessExecutionError,
    output_has_module_not_installed_error,
)
from python_execution.execution.observable import ObservableExecution
from python_execution.observability.structured_log import log_json

logger = logging.getLogger(__name__)


class PythonExecutionService:
    """Runs commands and modules with one specific Python interpreter."""

    def __init__(
        self,
        process_service: ProcessService,
        file_system: FileSystem,
        python_path: str,
        extension_root: Optional[Path] = None,
    ):
        self._proc_service = process_service
        self._file_system = file_system
        self._python_path = python_path
        self._extension_root = extension_root or EXTENSION_ROOT_DIR

    @property
    def python_path(self) -> str:
        return self._python_path

    async def get_interpreter_information(self) -> Optional[InterpreterInformation]:
        """Ask the interpreter to describe itself.

        Returns None when either probe fails or the helper output cannot be
        parsed; the failure is logged, never raised.
        """
        file = str(self._extension_root / INTERPRETER_INFO_SCRIPT)
        log_json(logger, "interpreter.info.start", level=logging.DEBUG, python_path=self._python_path)
        outcomes = await asyncio.gather(
            self._exec_checked(["--version"], SpawnOptions(merge_stdout_stderr=True)),
            self._exec_checked([file], SpawnOptions(merge_stdout_stderr=True)),
            return_exceptions=True,
        )
        for outcome in outcomes:
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                self._log_info_failure(
                    f"Failed to get interpreter information for '{self._python_path}'",
                    reason="exec_failed",
                    cause=outcome,
                )
                return None
        version = outcomes[0].stdout.strip()
        json_value = outcomes[1].stdout.strip()

        try:
            data = json.loads(json_value)
        except ValueError as exc:
            self._log_info_failure(
                f"Failed to parse interpreter information for '{self._python_path}' with JSON {json_value}",
                reason="invalid_json",
                cause=exc,
            )
            return None
        try:
            payload = InterpreterInfoPayload.model_validate(data)
        except ValidationError as exc:
            self._log_info_failure(
                f"Unexpected interpreter information for '{self._python_path}' with JSON {json_value}",
                reason="invalid_payload",
                cause=exc,
            )
            return None

        info = InterpreterInformation(
            architecture=architecture_from_flag(payload.is_64_bit),
            path=self._python_path,
            version=version,
            version_info=sanitize_version_info(payload.version_info),
            sys_version=payload.sys_version,
            sys_prefix=payload.sys_prefix,
        )
        log_json(
            logger,
            "interpreter.info.finish",
            python_path=self._python_path,
            architecture=info.architecture.value,
            version_info=list(info.version_info),
        )
        return info

    async def get_executable_path(self) -> str:
        # A configured path that is already a file wins; asking the interpreter
        # can return a different path (macOS framework builds, version shims).
        if self._file_system.file_exists(self._python_path):
            return self._python_path
        result = await self._exec_checked(
            ["-c", "import sys;print(sys.executable)"],
            SpawnOptions(throw_on_stderr=True),
        )
        return result.stdout.strip()

    async def is_module_installed(self, module_name: str) -> bool:
        try:
            await self._exec_checked(["-c", f"import {module_name}"], SpawnOptions(throw_on_stderr=True))
        except Exception as exc:
            logger.debug("Module %r not importable with %s: %s", module_name, self._python_path, exc)
            return False
        return True

    def exec_observable(self, args: Sequence[str], options: Optional[SpawnOptions] = None) -> ObservableExecution:
        return self._proc_service.exec_observable(self._python_path, list(args), _copy_options(options))

    def exec_module_observable(
        self,
        module_name: str,
        args: Sequence[str],
        options: Optional[SpawnOptions] = None,
    ) -> ObservableExecution:
        return self._proc_service.exec_observable(
            self._python_path,
            ["-m", module_name, *args],
            _copy_options(options),
        )

    async def exec(self, args: Sequence[str], options: Optional[SpawnOptions] = None) -> ExecutionResult:
        return await self._proc_service.exec(self._python_path, list(args), _copy_options(options))

    async def exec_module(
        self,
        module_name: str,
        args: Sequence[str],
        options: Optional[SpawnOptions] = None,
    ) -> ExecutionResult:
        result = await self._proc_service.exec(
            self._python_path,
            ["-m", module_name, *args],
            _copy_options(options),
        )

        # A missing module shows up in stderr; confirm before blaming it.
        if module_name and output_has_module_not_installed_error(module_name, result.stderr):
            if not await self.is_module_installed(module_name):
                log_json(
                    logger,
                    "interpreter.module.missing",
                    level=logging.WARNING,
                    python_path=self._python_path,
                    module=module_name,
                )
                raise ModuleNotInstalledError(module_name)

        return result

    async def _exec_checked(self, args: Sequence[str], options: SpawnOptions) -> ExecutionResult:
        argv = [self._python_path, *args]
        result = await self._proc_service.exec(self._python_path, list(args), options)
        if result.returncode != 0:
            raise ProcessExecutionError(
                f"Command {argv!r} exited with code {result.returncode}.",
                command=argv,
                returncode=result.returncode,
                stderr=result.stderr,
            )
        return result

    def _log_info_failure(self, message: str, reason: str, cause: BaseException) -> None:
        logger.error(message, exc_info=cause)
        log_json(
            logger,
            "interpreter.info.error",
            level=logging.ERROR,
            python_path=self._python_path,
            reason=reason,
            error=type(cause).__name__,
        )


def _copy_options(options: Optional[SpawnOptions]) -> SpawnOptions:
    return options.copy() if options is not None else SpawnOptions()
