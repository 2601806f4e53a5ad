"""
Core Libraries

Shared functionality and utilities for the admin-manifests tool.
"""

from .config import ConfigManager
from .constants import (
    ClusterType, KubernetesConstants, FileConstants, ErrorMessages, KIND_REGISTRY
)
from .data_models import (
    Selector, RoleBindings, ClusterRoleBindings, PermissionBindings, SubjectRef,
    ServiceAccountPrincipal, UserPrincipal, MemberCluster, Clusters,
    DefaultServiceAccountsNamespace, KubeSawAdmins, OutputLayout, ClusterContext
)
from .exceptions import (
    AdminManifestsError, ConfigurationError, ValidationError, RoleNotFoundError,
    ManifestIdentityError, ManifestWriteError
)
from .protocols import ConfigProvider, RoleTemplateProvider, SubjectFactory, FileWriter, HelpProvider
from .utils import setup_logging, validate_user_name, sanitize_filename, normalize_identity_user_name

__all__ = [
    # Main classes
    'ConfigManager',
    # Constants
    'ClusterType',
    'KubernetesConstants',
    'FileConstants',
    'ErrorMessages',
    'KIND_REGISTRY',
    # Data models
    'Selector',
    'RoleBindings',
    'ClusterRoleBindings',
    'PermissionBindings',
    'SubjectRef',
    'ServiceAccountPrincipal',
    'UserPrincipal',
    'MemberCluster',
    'Clusters',
    'DefaultServiceAccountsNamespace',
    'KubeSawAdmins',
    'OutputLayout',
    'ClusterContext',
    # Exceptions
    'AdminManifestsError',
    'ConfigurationError',
    'ValidationError',
    'RoleNotFoundError',
    'ManifestIdentityError',
    'ManifestWriteError',
    # Protocols
    'ConfigProvider',
    'RoleTemplateProvider',
    'SubjectFactory',
    'FileWriter',
    'HelpProvider',
    # Utilities
    'setup_logging',
    'validate_user_name',
    'sanitize_filename',
    'normalize_identity_user_name'
]
