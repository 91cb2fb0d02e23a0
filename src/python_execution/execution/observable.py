from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Optional, Sequence

from python_execution.domain.contracts import Output, SpawnOptions
from python_execution.errors import StdErrError
from python_execution.execution.streams import kill_quietly, read_stream, spawn
from python_execution.observability.structured_log import log_json

logger = logging.getLogger(__name__)


class ObservableExecution:
    """Lazy streaming handle over a child process.

    The process is spawned when iteration starts and output chunks are yielded
    in arrival order from both pipes. A handle can be iterated once.
    """

    def __init__(
        self,
        file: str,
        args: Sequence[str],
        options: SpawnOptions,
        timeout_sec: Optional[float] = None,
    ) -> None:
        self._argv: List[str] = [file, *args]
        self._options = options
        self._timeout_sec = timeout_sec
        self._started = False
        self._disposed = False
        self.proc: Optional[asyncio.subprocess.Process] = None

    @property
    def returncode(self) -> Optional[int]:
        return self.proc.returncode if self.proc is not None else None

    def dispose(self) -> None:
        self._disposed = True
        kill_quietly(self.proc)

    def __aiter__(self) -> AsyncIterator[Output]:
        if self._started:
            raise RuntimeError("ObservableExecution can only be iterated once.")
        self._started = True
        return self._stream()

    async def _stream(self) -> AsyncIterator[Output]:
        if self._disposed:
            return
        options = self._options
        self.proc = proc = await spawn(self._argv, options)
        log_json(logger, "process.observable.start", level=logging.DEBUG, argv=self._argv, pid=proc.pid)

        queue: "asyncio.Queue[Optional[Output]]" = asyncio.Queue()

        async def _pump(stream: Optional[asyncio.StreamReader], source: str) -> None:
            try:
                await read_stream(stream, options.encoding, lambda text: queue.put_nowait(Output(source, text)))
            finally:
                queue.put_nowait(None)

        readers = [
            asyncio.ensure_future(_pump(proc.stdout, "stdout")),
            asyncio.ensure_future(_pump(proc.stderr, "stderr")),
        ]
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout_sec if self._timeout_sec else None
        open_streams = len(readers)
        try:
            while open_streams:
                remaining = None if deadline is None else max(0.0, deadline - loop.time())
                try:
                    item = await asyncio.wait_for(queue.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    log_json(logger, "process.observable.timeout", level=logging.WARNING, argv=self._argv)
                    break
                if item is None:
                    open_streams -= 1
                    continue
                if item.source == "stderr":
                    if options.throw_on_stderr:
                        raise StdErrError(item.out, command=self._argv)
                    if options.merge_stdout_stderr:
                        item = Output("stdout", item.out)
                yield item
            if open_streams == 0:
                await proc.wait()
        finally:
            for task in readers:
                task.cancel()
            if proc.returncode is None:
                kill_quietly(proc)
                await proc.wait()
            log_json(
                logger,
                "process.observable.finish",
                level=logging.DEBUG,
                argv=self._argv,
                returncode=proc.returncode,
            )
