"""
Protocols and Interfaces

Defines protocols (interfaces) for dependency injection and type hints.
"""

from typing import Any, Dict, List, Optional, Protocol

from .constants import ClusterType
from .data_models import ClusterContext, KubeSawAdmins, SubjectRef


class ConfigProvider(Protocol):
    """Protocol for configuration providers"""

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """Load tool configuration from YAML file"""
        ...

    def load_admins(self, admins_path: str) -> KubeSawAdmins:
        """Load and validate the kubesaw-admins file"""
        ...

    def generate_config_template(self, output_dir: str = None) -> str:
        """Generate kubesaw-admins template file"""
        ...

    def get_config_template_content(self) -> str:
        """Generate kubesaw-admins template content as string without file I/O"""
        ...

    def get_value(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key"""
        ...


class RoleTemplateProvider(Protocol):
    """Protocol for Role Template Libraries"""

    def get_roles(self, cluster_type: ClusterType) -> List[Dict[str, Any]]:
        """Get all Role templates defined for the cluster type"""
        ...

    def resolve_role(self, cluster_type: ClusterType, role_name: str) -> Optional[Dict[str, Any]]:
        """Get a copy of the named Role template, None when not defined"""
        ...


class SubjectFactory(Protocol):
    """Protocol for binding subject factories"""

    def create_subject(self, store: Any, ctx: ClusterContext, base_name: str,
                       target_namespace: str, labels: Dict[str, str]) -> SubjectRef:
        """Store the identity object(s) of a principal and return the subject reference"""
        ...


class FileWriter(Protocol):
    """Protocol for persisting the rendered manifest tree"""

    def wipe(self) -> None:
        """Remove any previous output"""
        ...

    def write(self, relative_path: str, content: str) -> None:
        """Write content to a path relative to the output directory"""
        ...


class HelpProvider(Protocol):
    """Protocol for help providers"""

    def show_help(self, topic: str = None) -> None:
        """Show help for a specific topic"""
        ...

    def list_available_commands(self) -> list:
        """List commands that have help available"""
        ...
