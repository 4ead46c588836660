"""Built-in detector plugins."""

from .docker_compose import DockerComposeDetector
from .dockerfile import DockerfileDetector
from .jdk_version import JdkVersionDetector
from .kubernetes import KubernetesDetector
from .languages import JavaLanguageDetector, JavaScriptLanguageDetector, PythonLanguageDetector, TerraformDetector
from .maven_pom import MavenPomDetector
from .nested_sbom import NestedSbomDetector
from .package_json import PackageJsonDetector
from .python_requirements import PythonRequirementsDetector
from .spring import SpringFrameworkDetector

__all__ = [
    "DockerComposeDetector",
    "DockerfileDetector",
    "JavaLanguageDetector",
    "JavaScriptLanguageDetector",
    "JdkVersionDetector",
    "KubernetesDetector",
    "MavenPomDetector",
    "NestedSbomDetector",
    "PackageJsonDetector",
    "PythonLanguageDetector",
    "PythonRequirementsDetector",
    "SpringFrameworkDetector",
    "TerraformDetector",
]
