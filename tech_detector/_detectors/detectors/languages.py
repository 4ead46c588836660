"""Language marker detectors based on file names and extensions."""

from pathlib import Path

from ...result import DetectionResult
from ..utils import relative_path


class JavaLanguageDetector:
    """Java sources and build descriptors."""

    name = "java-language"
    infrastructure = False

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        name = file.name.lower()
        if name.endswith((".java", ".gradle", ".gradle.kts")) or name == "pom.xml":
            result.add_language("Java")


class PythonLanguageDetector:
    """Python sources and packaging files."""

    name = "python-language"
    infrastructure = False

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        name = file.name.lower()
        if (
            name.endswith(".py")
            or (name.startswith("requirements") and name.endswith(".txt"))
            or name in ("pyproject.toml", "pipfile", "setup.py", "setup.cfg")
        ):
            result.add_language("Python")


class JavaScriptLanguageDetector:
    """JavaScript and TypeScript sources."""

    name = "javascript-language"
    infrastructure = False

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        name = file.name.lower()
        if name.endswith((".ts", ".tsx")):
            result.add_language("TypeScript")
        elif name.endswith((".js", ".mjs", ".cjs", ".jsx")):
            result.add_language("JavaScript")


class TerraformDetector:
    """Terraform configuration is both a language and infrastructure as code."""

    name = "terraform"
    infrastructure = True

    def inspect(self, file: Path, project_root: Path, result: DetectionResult) -> None:
        if file.name.lower().endswith((".tf", ".tfvars")):
            result.add_language("Terraform")
            result.add_infrastructure("Terraform", relative_path(file, project_root))
