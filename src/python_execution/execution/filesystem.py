from pathlib import Path

from python_execution.domain.contracts import FileSystem


class LocalFileSystem(FileSystem):
    def file_exists(self, path: str) -> bool:
        if not path:
            return False
        try:
            return Path(path).expanduser().is_file()
        except OSError:
            return False
