"""Tests for the console module."""

import unittest

from tech_detector.console import console, print_scan_summary
from tech_detector.result import DetectionResult


class TestConsole(unittest.TestCase):
    """Tests for the shared console instance."""

    def test_console_writes_to_stderr(self):
        self.assertTrue(console.stderr)


class TestScanSummary(unittest.TestCase):
    """Tests for print_scan_summary."""

    def _result(self) -> DetectionResult:
        result = DetectionResult(project_path="/work/orders")
        result.add_language("Java")
        result.add_framework("Spring Boot", "pom.xml parent:3.2.0")
        result.add_runtime("JDK:17", "pom.xml -> 17")
        result.finalize()
        return result

    def test_summary_rows(self):
        with console.capture() as capture:
            print_scan_summary({"orders": self._result()})
        output = capture.get()

        self.assertIn("orders", output)
        self.assertIn("Java", output)
        self.assertIn("Spring Boot", output)
        self.assertIn("JDK 17", output)

    def test_empty_results(self):
        with console.capture() as capture:
            print_scan_summary({})
        self.assertIn("No projects were scanned", capture.get())


if __name__ == "__main__":
    unittest.main()
