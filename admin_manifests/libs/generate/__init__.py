"""
Generate Libraries

Compilation engine turning a kubesaw-admins file into a manifest tree.
"""

from .cluster_driver import ClusterDriver
from .object_store import ObjectStore, resolve_kind
from .permissions import PermissionsManager, cluster_role_binding_name, role_binding_name
from .roles import RoleResolver, RoleTemplateLibrary
from .subjects import ServiceAccountSubjectFactory, UserSubjectFactory, ensure_groups_for_user, identity_name
from .templates import ManifestTemplates
from .writer import (
    FlowStyleList, InMemoryFileWriter, KustomizationTree, LocalFileWriter, ManifestTreeWriter, render_manifest
)

__all__ = [
    'ClusterDriver',
    'ObjectStore',
    'resolve_kind',
    'PermissionsManager',
    'role_binding_name',
    'cluster_role_binding_name',
    'RoleResolver',
    'RoleTemplateLibrary',
    'ServiceAccountSubjectFactory',
    'UserSubjectFactory',
    'ensure_groups_for_user',
    'identity_name',
    'ManifestTemplates',
    'FlowStyleList',
    'InMemoryFileWriter',
    'KustomizationTree',
    'LocalFileWriter',
    'ManifestTreeWriter',
    'render_manifest'
]
