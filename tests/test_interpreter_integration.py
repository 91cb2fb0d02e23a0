import sys
import tempfile
import unittest
from pathlib import Path

from python_execution.app_container import build_python_execution_service
from python_execution.config import EXTENSION_ROOT_DIR, INTERPRETER_INFO_SCRIPT, load_settings
from python_execution.domain.contracts import SpawnOptions
from python_execution.domain.interpreter import RELEASE_LEVELS, Architecture
from python_execution.errors import ModuleNotInstalledError


class TestAgainstCurrentInterpreter(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        settings = load_settings(
            Path(tempfile.gettempdir()) / "python-execution-no-config",
            env={"PYTHON_EXECUTION_INTERPRETER": sys.executable},
        )
        self.service = build_python_execution_service(settings=settings)

    def test_helper_script_is_bundled(self):
        self.assertTrue((EXTENSION_ROOT_DIR / INTERPRETER_INFO_SCRIPT).is_file())

    async def test_interpreter_information(self):
        info = await self.service.get_interpreter_information()

        self.assertIsNotNone(info)
        self.assertEqual(tuple(info.version_info[:3]), tuple(sys.version_info[:3]))
        self.assertIn(info.version_info.releaselevel, RELEASE_LEVELS)
        expected = Architecture.x64 if sys.maxsize > 2**32 else Architecture.x86
        self.assertEqual(info.architecture, expected)
        self.assertEqual(info.sys_prefix, sys.prefix)
        self.assertTrue(info.version.startswith("Python "))

    async def test_executable_path_for_existing_file(self):
        self.assertEqual(await self.service.get_executable_path(), sys.executable)

    async def test_module_checks(self):
        self.assertTrue(await self.service.is_module_installed("json"))
        self.assertFalse(await self.service.is_module_installed("nonexistent_module_xyz"))

    async def test_exec_module_missing(self):
        with self.assertRaises(ModuleNotInstalledError) as ctx:
            await self.service.exec_module("nonexistent_module_xyz", [])

        self.assertEqual(ctx.exception.module_name, "nonexistent_module_xyz")

    async def test_exec_module_failure_is_returned(self):
        result = await self.service.exec_module("json.tool", ["/definitely/missing.json"])

        self.assertNotEqual(result.returncode, 0)
        self.assertTrue(result.stderr)

    async def test_exec_module_observable(self):
        options = SpawnOptions(merge_stdout_stderr=True)
        handle = self.service.exec_module_observable("platform", [], options)

        text = "".join([chunk.out async for chunk in handle])

        self.assertTrue(text.strip())
        self.assertEqual(handle.returncode, 0)
        self.assertEqual(options, SpawnOptions(merge_stdout_stderr=True))
