"""
Admin Manifests

An offline tool that reads a kubesaw-admins file and generates the
ServiceAccounts, Users, Identities, Groups, Roles and bindings for the
host and member clusters, together with the kustomization.yaml indexes
that make the output tree deployable with Kustomize.
"""

__version__ = "1.0.0"
__author__ = "KubeSaw Project"

from .libs import (
    # Core
    ConfigManager, AdminManifestsError, ConfigurationError, ValidationError, RoleNotFoundError,
    ManifestIdentityError, ManifestWriteError,
    ClusterType, KubernetesConstants, FileConstants, ErrorMessages, KubeSawAdmins, OutputLayout,
    # Generate
    ObjectStore, ClusterDriver, PermissionsManager, RoleResolver, RoleTemplateLibrary,
    ManifestTemplates, ManifestTreeWriter, LocalFileWriter, InMemoryFileWriter, FlowStyleList,
    # Main
    HelpManager, AdminManifestsManager, main
)

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
