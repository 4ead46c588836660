"""File-based technology detection plugins.

This module provides the plugin protocol, the plugin registry, the bounded
file walker that dispatches every file to every plugin, and the built-in
detectors.

Example usage:
    from tech_detector._detectors import FileWalker, create_default_registry

    plugins = create_default_registry(registry)
    walker = FileWalker(plugins.plugins)
    walker.walk(project_root, result)
"""

from ..registry import Registry
from .detectors import (
    DockerComposeDetector,
    DockerfileDetector,
    JavaLanguageDetector,
    JavaScriptLanguageDetector,
    JdkVersionDetector,
    KubernetesDetector,
    MavenPomDetector,
    NestedSbomDetector,
    PackageJsonDetector,
    PythonLanguageDetector,
    PythonRequirementsDetector,
    SpringFrameworkDetector,
    TerraformDetector,
)
from .protocol import DetectorPlugin
from .registry import PluginRegistry
from .walker import DEFAULT_MAX_FILES, EXCLUDED_DIRS, FileWalker, iter_project_files


def create_default_registry(registry: Registry) -> PluginRegistry:
    """Create a plugin registry with all built-in detectors, in invocation order."""
    plugins = PluginRegistry()

    # Language markers
    plugins.register(JavaLanguageDetector())
    plugins.register(PythonLanguageDetector())
    plugins.register(JavaScriptLanguageDetector())

    # Infrastructure as code
    plugins.register(TerraformDetector())

    # Manifest dependencies
    plugins.register(PackageJsonDetector(registry))
    plugins.register(PythonRequirementsDetector(registry))
    plugins.register(MavenPomDetector(registry))
    plugins.register(SpringFrameworkDetector())

    # Runtimes and containers
    plugins.register(JdkVersionDetector())
    plugins.register(DockerfileDetector())
    plugins.register(DockerComposeDetector(registry))
    plugins.register(KubernetesDetector())

    # SBOMs in subdirectories
    plugins.register(NestedSbomDetector(registry))

    return plugins


__all__ = [
    # Main API
    "FileWalker",
    "iter_project_files",
    "create_default_registry",
    # Plugin system
    "DetectorPlugin",
    "PluginRegistry",
    # Constants
    "DEFAULT_MAX_FILES",
    "EXCLUDED_DIRS",
]
