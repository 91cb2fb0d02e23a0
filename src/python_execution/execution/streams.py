import asyncio
import codecs
import os
from typing import Callable, Dict, Mapping, Optional, Sequence

from python_execution.domain.contracts import SpawnOptions

READ_CHUNK_BYTES = 4096


def build_process_env(env: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Child environment: ``env`` (or the current one) with unbuffered utf-8 IO."""
    merged = dict(env) if env is not None else dict(os.environ)
    merged["PYTHONUNBUFFERED"] = "1"
    if not merged.get("PYTHONIOENCODING"):
        merged["PYTHONIOENCODING"] = "utf-8"
    return merged


async def spawn(argv: Sequence[str], options: SpawnOptions) -> asyncio.subprocess.Process:
    return await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=options.cwd,
        env=build_process_env(options.env),
        **options.extra,
    )


async def read_stream(
    stream: Optional[asyncio.StreamReader],
    encoding: str,
    on_text: Callable[[str], None],
) -> None:
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
    while True:
        data = await stream.read(READ_CHUNK_BYTES)
        if not data:
            break
        text = decoder.decode(data)
        if text:
            on_text(text)
    tail = decoder.decode(b"", final=True)
    if tail:
        on_text(tail)


def kill_quietly(proc: Optional[asyncio.subprocess.Process]) -> None:
    if proc is None or proc.returncode is not None:
        return
    try:
        proc.kill()
    except ProcessLookupError:
        pass
