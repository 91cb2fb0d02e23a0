import unittest

from python_execution.errors import (
    ModuleNotInstalledError,
    ProcessExecutionError,
    StdErrError,
    output_has_module_not_installed_error,
)
from python_execution.services.error_codes import (
    detect_error_code,
    error_code_for_exception,
    get_catalog_entry,
)


class TestModuleNotInstalledHeuristic(unittest.TestCase):
    def test_matches_quoted_import_error(self):
        stderr = "Traceback (most recent call last):\nModuleNotFoundError: No module named 'requests'\n"
        self.assertTrue(output_has_module_not_installed_error("requests", stderr))

    def test_matches_unquoted_dash_m_error(self):
        self.assertTrue(output_has_module_not_installed_error("black", "/usr/bin/python3: No module named black\n"))

    def test_matches_dotted_module(self):
        self.assertTrue(output_has_module_not_installed_error("json.toolz", "python3: No module named json.toolz"))

    def test_does_not_match_longer_name(self):
        self.assertFalse(output_has_module_not_installed_error("py", "No module named pytest"))
        self.assertFalse(output_has_module_not_installed_error("py", "No module named 'pytest'"))

    def test_does_not_match_other_module(self):
        self.assertFalse(output_has_module_not_installed_error("black", "No module named 'click'"))

    def test_empty_inputs(self):
        self.assertFalse(output_has_module_not_installed_error("black", ""))
        self.assertFalse(output_has_module_not_installed_error("black", None))
        self.assertFalse(output_has_module_not_installed_error("", "No module named black"))


class TestErrorTypes(unittest.TestCase):
    def test_module_not_installed_names_module(self):
        exc = ModuleNotInstalledError("numpy")
        self.assertEqual(str(exc), "Module 'numpy' not installed.")
        self.assertNotIsInstance(exc, ProcessExecutionError)

    def test_stderr_error_carries_text_and_command(self):
        exc = StdErrError("boom\n", command=["python", "-c", "x"])
        self.assertIsInstance(exc, ProcessExecutionError)
        self.assertEqual(exc.stderr, "boom\n")
        self.assertEqual(exc.command, ["python", "-c", "x"])


class TestErrorCatalog(unittest.TestCase):
    def test_detects_known_codes(self):
        self.assertEqual(detect_error_code("Execution timeout."), "ERR_EXEC_TIMEOUT")
        self.assertEqual(detect_error_code("  File \"x\", line 1\nSyntaxError: invalid syntax"), "ERR_SYNTAX")
        self.assertEqual(detect_error_code("something else"), "ERR_UNKNOWN")

    def test_module_missing_wins_over_traceback(self):
        text = "Traceback (most recent call last):\nModuleNotFoundError: No module named 'x'"
        self.assertEqual(detect_error_code(text), "ERR_MODULE_NOT_INSTALLED")

    def test_code_for_exception(self):
        self.assertEqual(error_code_for_exception(ModuleNotInstalledError("x")), "ERR_MODULE_NOT_INSTALLED")
        self.assertEqual(error_code_for_exception(FileNotFoundError(2, "No such file")), "ERR_INTERPRETER_NOT_FOUND")
        self.assertEqual(error_code_for_exception(StdErrError("DeprecationWarning: x")), "ERR_STDERR_OUTPUT")
        self.assertEqual(error_code_for_exception(ProcessExecutionError("exit 3")), "ERR_UNKNOWN")

    def test_unknown_code_falls_back(self):
        self.assertEqual(get_catalog_entry("ERR_NOPE").code, "ERR_UNKNOWN")
        self.assertTrue(get_catalog_entry("ERR_EXEC_TIMEOUT").actions)
