import asyncio
import logging
from typing import List, Optional, Sequence

from python_execution.domain.contracts import ExecutionResult, ProcessService, SpawnOptions
from python_execution.errors import StdErrError
from python_execution.execution.observable import ObservableExecution
from python_execution.execution.streams import kill_quietly, read_stream, spawn
from python_execution.observability.structured_log import log_json

logger = logging.getLogger(__name__)

TIMEOUT_RETURNCODE = 124
TIMEOUT_MESSAGE = "Execution timeout."


class LocalProcessService(ProcessService):
    def __init__(self, default_timeout_sec: Optional[float] = None):
        self._default_timeout_sec = default_timeout_sec

    async def exec(
        self,
        file: str,
        args: Sequence[str],
        options: Optional[SpawnOptions] = None,
    ) -> ExecutionResult:
        opts = options.copy() if options is not None else SpawnOptions()
        argv = [file, *args]
        timeout_sec = self._effective_timeout(opts)
        log_json(logger, "process.exec.start", level=logging.DEBUG, argv=argv, timeout_sec=timeout_sec)

        proc = await spawn(argv, opts)
        stdout: List[str] = []
        stderr: List[str] = []

        def _on_stderr(text: str) -> None:
            stderr.append(text)
            if opts.merge_stdout_stderr:
                stdout.append(text)

        async def _communicate() -> None:
            await asyncio.gather(
                read_stream(proc.stdout, opts.encoding, stdout.append),
                read_stream(proc.stderr, opts.encoding, _on_stderr),
            )
            await proc.wait()

        try:
            await asyncio.wait_for(_communicate(), timeout=timeout_sec)
        except asyncio.TimeoutError:
            kill_quietly(proc)
            await proc.wait()
            log_json(logger, "process.exec.timeout", level=logging.WARNING, argv=argv, timeout_sec=timeout_sec)
            result = ExecutionResult(returncode=TIMEOUT_RETURNCODE, stdout="", stderr=TIMEOUT_MESSAGE)
        except BaseException:
            kill_quietly(proc)
            await proc.wait()
            raise
        else:
            result = ExecutionResult(
                returncode=proc.returncode or 0,
                stdout="".join(stdout),
                stderr="".join(stderr),
            )

        log_json(logger, "process.exec.finish", level=logging.DEBUG, argv=argv, returncode=result.returncode)
        if opts.throw_on_stderr and result.stderr:
            raise StdErrError(result.stderr, command=argv)
        return result

    def exec_observable(
        self,
        file: str,
        args: Sequence[str],
        options: Optional[SpawnOptions] = None,
    ) -> ObservableExecution:
        opts = options.copy() if options is not None else SpawnOptions()
        return ObservableExecution(
            file,
            args,
            opts,
            timeout_sec=self._effective_timeout(opts),
        )

    def _effective_timeout(self, options: SpawnOptions) -> Optional[float]:
        # A timeout of 0 or less means no timeout; an explicit one overrides the default.
        timeout_sec = options.timeout_sec if options.timeout_sec is not None else self._default_timeout_sec
        return timeout_sec if timeout_sec is not None and timeout_sec > 0 else None
