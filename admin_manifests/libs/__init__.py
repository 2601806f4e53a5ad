"""
Admin Manifests Library

Compiles a kubesaw-admins file into user-management manifests and Kustomize indexes.
"""

__version__ = "1.0.0"
__author__ = "KubeSaw Project"

# Core libraries
from .core import (
    ConfigManager,
    AdminManifestsError, ConfigurationError, ValidationError, RoleNotFoundError,
    ManifestIdentityError, ManifestWriteError,
    ClusterType, KubernetesConstants, FileConstants, ErrorMessages,
    KubeSawAdmins, OutputLayout
)

# Generate libraries
from .generate import (
    ObjectStore, ClusterDriver, PermissionsManager, RoleResolver, RoleTemplateLibrary,
    ManifestTemplates, ManifestTreeWriter, LocalFileWriter, InMemoryFileWriter, FlowStyleList
)

# Main application and help
from .help_manager import HelpManager
from .main_app import AdminManifestsManager, main

__all__ = [
    # Core
    'ConfigManager',
    'AdminManifestsError',
    'ConfigurationError',
    'ValidationError',
    'RoleNotFoundError',
    'ManifestIdentityError',
    'ManifestWriteError',
    'ClusterType',
    'KubernetesConstants',
    'FileConstants',
    'ErrorMessages',
    'KubeSawAdmins',
    'OutputLayout',
    # Generate
    'ObjectStore',
    'ClusterDriver',
    'PermissionsManager',
    'RoleResolver',
    'RoleTemplateLibrary',
    'ManifestTemplates',
    'ManifestTreeWriter',
    'LocalFileWriter',
    'InMemoryFileWriter',
    'FlowStyleList',
    # Main
    'HelpManager',
    'AdminManifestsManager',
    'main'
]
