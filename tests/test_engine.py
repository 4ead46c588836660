"""Integration tests for the SBOM-first engine."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from tech_detector._detectors import PluginRegistry, create_default_registry
from tech_detector.engine import SbomFirstEngine
from tech_detector.exceptions import ScanError
from tech_detector.registry import load_registry
from tech_detector.result import FinalEntry
from tech_detector.sbom import SbomProcessor

REACT_COMPONENT = {"type": "library", "name": "react", "version": "18.2.0", "purl": "pkg:npm/react@18.2.0"}
GIN_COMPONENT = {
    "type": "library",
    "name": "gin",
    "version": "v1.9.1",
    "purl": "pkg:golang/github.com/gin-gonic/gin@v1.9.1",
}


class SpyPlugin:
    """Wraps a plugin and records the files it was given."""

    def __init__(self, plugin) -> None:
        self._plugin = plugin
        self.name = plugin.name
        self.infrastructure = plugin.infrastructure
        self.seen = []

    def inspect(self, file: Path, project_root: Path, result) -> None:
        self.seen.append(file.name)
        self._plugin.inspect(file, project_root, result)


def _spied_plugins(registry):
    plugins = PluginRegistry()
    spies = {}
    for plugin in create_default_registry(registry).plugins:
        spy = SpyPlugin(plugin)
        spies[plugin.name] = spy
        plugins.register(spy)
    return plugins, spies


class TestScanProject:
    """Tests for SbomFirstEngine.scan_project."""

    def test_dockerfile_without_sbom(self, registry, make_project):
        root = make_project({"Dockerfile": "FROM python:3.11-slim\n"})

        result = SbomFirstEngine(registry).scan_project(root)

        assert list(result.runtimes) == ["Python"]
        assert result.runtimes["Python"] == ["Docker base: python:3.11-slim"]
        assert result.infrastructure == {"Docker": ["Dockerfile"]}
        assert result.final_result == [FinalEntry("Python"), FinalEntry("Docker")]

    def test_complete_sbom_runs_infrastructure_plugins_only(self, registry, make_project, cyclonedx):
        root = make_project(
            {
                "sbom.json": cyclonedx(REACT_COMPONENT),
                "package.json": {"dependencies": {"react": "^18.2.0", "express": "^4.18.2"}},
                "Dockerfile": "FROM node:20-alpine\n",
            }
        )
        plugins, spies = _spied_plugins(registry)

        result = SbomFirstEngine(registry, plugins=plugins).scan_project(root)

        assert result.languages == {"JavaScript"}
        assert list(result.frameworks) == ["React"]
        assert len(result.frameworks["React"]) == 1
        assert "package.json detected" not in result.runtimes["Node.js"]
        assert result.infrastructure == {"Docker": ["Dockerfile"]}
        assert spies["package-json"].seen == []
        assert "Dockerfile" in spies["dockerfile"].seen

    def test_incomplete_sbom_runs_all_plugins(self, registry, make_project, cyclonedx):
        root = make_project(
            {
                "sbom.json": cyclonedx(GIN_COMPONENT),
                "web/package.json": {"dependencies": {"express": "4.18.2"}},
            }
        )

        result = SbomFirstEngine(registry).scan_project(root)

        assert result.languages == {"Go", "JavaScript"}
        assert result.frameworks == {"Express": ["package.json: express@4.18.2"]}
        assert result.runtimes == {"Node.js": ["package.json detected"]}

    def test_malformed_sbom_falls_back(self, registry, make_project):
        root = make_project({"sbom.json": "{not json", "requirements.txt": "Django==4.2.7\n"})

        result = SbomFirstEngine(registry).scan_project(root)

        assert result.languages == {"Python"}
        assert result.frameworks == {"Django": ["requirements.txt: Django==4.2.7"]}

    def test_empty_sbom_is_not_an_error(self, registry, make_project, cyclonedx):
        root = make_project({"sbom.json": cyclonedx()})

        result = SbomFirstEngine(registry).scan_project(root)

        assert result.languages == set()
        assert result.frameworks == {}
        assert result.final_result == []

    def test_nested_sbom_contributes(self, registry, make_project, cyclonedx):
        root = make_project({"services/api/cyclonedx.json": cyclonedx(REACT_COMPONENT)})

        result = SbomFirstEngine(registry).scan_project(root)

        assert "React" in result.frameworks
        assert "JavaScript" in result.languages

    def test_spring_boot_maven_project(self, make_project):
        pom = """<project xmlns="http://maven.apache.org/POM/4.0.0">
  <parent>
    <groupId>org.springframework.boot</groupId>
    <artifactId>spring-boot-starter-parent</artifactId>
    <version>3.2.0</version>
  </parent>
  <properties><java.version>21</java.version></properties>
  <dependencies>
    <dependency>
      <groupId>org.postgresql</groupId>
      <artifactId>postgresql</artifactId>
    </dependency>
  </dependencies>
</project>
"""
        root = make_project(
            {
                "pom.xml": pom,
                "src/main/java/app/Application.java": "import org.springframework.boot.SpringApplication;\n",
                "Dockerfile": "FROM eclipse-temurin:21-jre\n",
                "k8s/deployment.yaml": "apiVersion: apps/v1\nkind: Deployment\n",
            }
        )

        result = SbomFirstEngine(load_registry()).scan_project(root)

        assert result.languages == {"Java"}
        assert "Spring Boot" in result.frameworks
        assert "Spring Framework" in result.frameworks
        assert "PostgreSQL" in result.databases
        assert "JDK:21" in result.runtimes
        assert "JDK" in result.runtimes
        assert list(result.infrastructure) == ["Docker", "Kubernetes"]
        assert FinalEntry("JDK", "21") in result.final_result

    def test_result_records_absolute_project_path(self, registry, make_project):
        root = make_project({"main.py": ""})

        result = SbomFirstEngine(registry).scan_project(root)

        assert result.project_path == str(root.resolve())

    def test_max_files(self, registry, make_project):
        root = make_project({"a.py": "", "b.js": ""})

        result = SbomFirstEngine(registry, max_files=1).scan_project(root)

        assert result.languages == {"Python"}

    def test_missing_root(self, registry, tmp_path):
        with pytest.raises(ScanError):
            SbomFirstEngine(registry).scan_project(tmp_path / "missing")

    def test_file_root(self, registry, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("")
        with pytest.raises(ScanError):
            SbomFirstEngine(registry).scan_project(path)

    def test_unreadable_root(self, registry, make_project):
        root = make_project({"main.py": ""})

        with patch("os.scandir", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(ScanError, match="not readable"):
                SbomFirstEngine(registry).scan_project(root)

    def test_sbom_processing_failure_falls_back(self, registry, make_project, cyclonedx):
        root = make_project(
            {
                "sbom.json": cyclonedx(REACT_COMPONENT),
                "package.json": {"dependencies": {"express": "4.18.2"}},
            }
        )

        with patch.object(SbomProcessor, "process", side_effect=RuntimeError("broken component")):
            result = SbomFirstEngine(registry).scan_project(root)

        assert result.frameworks == {"Express": ["package.json: express@4.18.2"]}
        assert result.runtimes == {"Node.js": ["package.json detected"]}

    def test_sbom_with_byte_order_mark(self, registry, make_project, cyclonedx):
        root = make_project({})
        (root / "sbom.json").write_bytes(b"\xef\xbb\xbf" + json.dumps(cyclonedx(REACT_COMPONENT)).encode("utf-8"))

        result = SbomFirstEngine(registry).scan_project(root)

        assert "React" in result.frameworks

    def test_scans_are_independent(self, registry, make_project):
        engine = SbomFirstEngine(registry)
        python_root = make_project({"main.py": ""}, name="py")
        java_root = make_project({"App.java": ""}, name="java")

        assert engine.scan_project(python_root).languages == {"Python"}
        assert engine.scan_project(java_root).languages == {"Java"}


class TestScanMany:
    """Tests for scan_many and scan_aggregate."""

    @pytest.mark.parametrize("workers", [1, 3])
    def test_scan_many_skips_missing(self, registry, make_project, tmp_path, workers):
        first = make_project({"main.py": ""}, name="first")
        second = make_project({"index.ts": ""}, name="second")
        missing = tmp_path / "missing"

        results = SbomFirstEngine(registry).scan_many([str(second), str(missing), str(first)], max_workers=workers)

        assert list(results) == [str(second), str(first)]
        assert results[str(first)].languages == {"Python"}
        assert results[str(second)].languages == {"TypeScript"}

    def test_scan_aggregate(self, registry, make_project, tmp_path):
        make_project({"main.py": ""}, name="workspace/backend")
        make_project({"Dockerfile": "FROM node:20\n"}, name="workspace/frontend")
        (tmp_path / "workspace" / "notes.txt").write_text("not a project")

        results = SbomFirstEngine(registry).scan_aggregate(tmp_path / "workspace", max_workers=2)

        assert list(results) == ["backend", "frontend"]
        assert results["backend"].languages == {"Python"}
        assert "Docker" in results["frontend"].infrastructure

    def test_scan_aggregate_requires_directory(self, registry, tmp_path):
        with pytest.raises(ScanError):
            SbomFirstEngine(registry).scan_aggregate(tmp_path / "missing")
