import logging
from typing import Optional

from python_execution.config import Settings, load_settings
from python_execution.domain.contracts import FileSystem, ProcessService
from python_execution.execution.filesystem import LocalFileSystem
from python_execution.execution.process_service import LocalProcessService
from python_execution.execution.python_process import PythonExecutionService

logger = logging.getLogger(__name__)


def build_python_execution_service(
    settings: Optional[Settings] = None,
    python_path: Optional[str] = None,
    process_service: Optional[ProcessService] = None,
    file_system: Optional[FileSystem] = None,
) -> PythonExecutionService:
    settings = settings or load_settings()
    resolved_path = python_path or settings.python_path
    logger.debug("Building execution service for %s (root=%s)", resolved_path, settings.extension_root)
    return PythonExecutionService(
        process_service=process_service or LocalProcessService(default_timeout_sec=settings.timeout_sec),
        file_system=file_system or LocalFileSystem(),
        python_path=resolved_path,
        extension_root=settings.extension_root,
    )
