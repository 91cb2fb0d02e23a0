import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

from python_execution.app_container import build_python_execution_service
from python_execution.config import DEFAULT_CONFIG_DIR, load_settings
from python_execution.domain.contracts import ExecutionResult, SpawnOptions
from python_execution.errors import PythonExecutionError
from python_execution.execution.python_process import PythonExecutionService
from python_execution.services.error_codes import error_code_for_exception, get_catalog_entry

EXIT_UNAVAILABLE = 1
EXIT_FAILURE = 2


def _configure_logging(level: str) -> None:
    level = (level or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python-execution-service",
        description="Inspect and run a Python interpreter",
    )
    parser.add_argument("--python", default=None, help="Interpreter to drive (default: PYTHON_EXECUTION_INTERPRETER)")
    parser.add_argument(
        "--config-dir",
        default=str(DEFAULT_CONFIG_DIR),
        help="Directory holding an optional .env file (default: ~/.config/python-execution-service)",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Process timeout in seconds")
    parser.add_argument("--log-level", default=None)

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("info", help="Print interpreter information as JSON")
    sub.add_parser("executable", help="Print the interpreter's executable path")
    has_module = sub.add_parser("has-module", help="Check whether a module can be imported")
    has_module.add_argument("name")
    run = sub.add_parser("exec", help="Run the interpreter with arguments")
    run.add_argument("args", nargs=argparse.REMAINDER)
    module = sub.add_parser("module", help="Run a module with -m")
    module.add_argument("--stream", action="store_true", help="Stream output as it arrives")
    module.add_argument("name")
    module.add_argument("args", nargs=argparse.REMAINDER)
    return parser


async def _run(args: argparse.Namespace, service: PythonExecutionService) -> int:
    if args.command == "info":
        info = await service.get_interpreter_information()
        if info is None:
            print(f"No interpreter information available for '{service.python_path}'.", file=sys.stderr)
            return EXIT_UNAVAILABLE
        print(json.dumps(info.to_dict(), indent=2, sort_keys=True))
        return 0

    if args.command == "executable":
        print(await service.get_executable_path())
        return 0

    if args.command == "has-module":
        installed = await service.is_module_installed(args.name)
        print("yes" if installed else "no")
        return 0 if installed else EXIT_UNAVAILABLE

    options = SpawnOptions()
    if args.command == "exec":
        return _print_result(await service.exec(_strip_separator(args.args), options))

    if args.stream:
        handle = service.exec_module_observable(args.name, _strip_separator(args.args), options)
        async for chunk in handle:
            target = sys.stderr if chunk.source == "stderr" else sys.stdout
            target.write(chunk.out)
            target.flush()
        return handle.returncode or 0
    return _print_result(await service.exec_module(args.name, _strip_separator(args.args), options))


def _print_result(result: ExecutionResult) -> int:
    if result.stdout:
        sys.stdout.write(result.stdout)
    if result.stderr:
        sys.stderr.write(result.stderr)
    return result.returncode


def _report_failure(exc: BaseException) -> None:
    entry = get_catalog_entry(error_code_for_exception(exc))
    print(f"[{entry.code}] {entry.user_message} {exc}".rstrip(), file=sys.stderr)
    for action in entry.actions:
        print(f"  - {action.label}: {action.description}", file=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    settings = load_settings(Path(args.config_dir).expanduser())
    _configure_logging(args.log_level or settings.log_level)
    if args.timeout is not None:
        settings = replace(settings, timeout_sec=args.timeout)

    service = build_python_execution_service(settings=settings, python_path=args.python)
    try:
        return asyncio.run(_run(args, service))
    except (PythonExecutionError, OSError) as exc:
        _report_failure(exc)
        return EXIT_FAILURE


def _strip_separator(args: List[str]) -> List[str]:
    return args[1:] if args[:1] == ["--"] else args


if __name__ == "__main__":
    sys.exit(main())
