#!/usr/bin/env python3
"""
Shared Test Constants

Common constants and builders used across all test modules.
"""

from typing import Any, Dict, List

from admin_manifests.libs.core.constants import ClusterType
from admin_manifests.libs.generate import RoleTemplateLibrary


class CommonTestConstants:
    """Constants shared across all test modules"""

    HOST_OPERATOR_NAMESPACE = "toolchain-host-operator"
    MEMBER_OPERATOR_NAMESPACE = "toolchain-member-operator"

    HOST_SA_NAMESPACE = "sandbox-sre-host"
    MEMBER_SA_NAMESPACE = "sandbox-sre-member"

    EXAMPLE_HOST_API = "https://api.host.example.com:6443"

    # Roles defined by the test Role Template Library
    INSTALL_OPERATOR = "install-operator"
    RESTART_DEPLOYMENT = "restart-deployment"

    MANIFEST_HEADER_LINE = "# Generated by admin-manifests - DO NOT EDIT"
    FLOW_STYLE_PATTERNS = ["apiGroups: [", "resources: [", "verbs: ["]


def role_template(name: str, verbs: List[str] = None) -> Dict[str, Any]:
    """Role template as defined in a host.yaml / member.yaml file"""
    return {
        'apiVersion': 'rbac.authorization.k8s.io/v1',
        'kind': 'Role',
        'metadata': {'name': name},
        'rules': [{
            'apiGroups': ['apps'],
            'resources': ['deployments'],
            'verbs': verbs or ['get', 'list']
        }]
    }


def role_library() -> RoleTemplateLibrary:
    """Role Template Library with install-operator and restart-deployment for both cluster types"""
    roles = [
        role_template(CommonTestConstants.INSTALL_OPERATOR, ['create', 'get']),
        role_template(CommonTestConstants.RESTART_DEPLOYMENT, ['patch']),
    ]
    return RoleTemplateLibrary(templates={ClusterType.HOST: roles, ClusterType.MEMBER: roles})


def role_bindings(namespace: str, roles: List[str] = None, cluster_roles: List[str] = None) -> Dict[str, Any]:
    entry: Dict[str, Any] = {'namespace': namespace}
    if roles:
        entry['roles'] = roles
    if cluster_roles:
        entry['clusterRoles'] = cluster_roles
    return entry


def permissions(role_binding_entries: List[Dict[str, Any]] = None,
                cluster_roles: List[str] = None) -> Dict[str, Any]:
    """Permissions of one cluster type as written in the kubesaw-admins file"""
    perms: Dict[str, Any] = {}
    if role_binding_entries:
        perms['roleBindings'] = role_binding_entries
    if cluster_roles:
        perms['clusterRoleBindings'] = {'clusterRoles': cluster_roles}
    return perms


def service_account(name: str, namespace: str = None, host: Dict[str, Any] = None,
                    member: Dict[str, Any] = None, selector: Dict[str, Any] = None) -> Dict[str, Any]:
    sa: Dict[str, Any] = {'name': name}
    if namespace:
        sa['namespace'] = namespace
    if selector:
        sa['selector'] = selector
    if host is not None:
        sa['host'] = host
    if member is not None:
        sa['member'] = member
    return sa


def user(name: str, ids: List[Any] = None, groups: List[str] = None, all_clusters: bool = False,
         host: Dict[str, Any] = None, member: Dict[str, Any] = None,
         selector: Dict[str, Any] = None) -> Dict[str, Any]:
    usr: Dict[str, Any] = {'name': name, 'id': ids if ids is not None else [f"{name}-id"]}
    if groups:
        usr['groups'] = groups
    if all_clusters:
        usr['allClusters'] = True
    if selector:
        usr['selector'] = selector
    if host is not None:
        usr['host'] = host
    if member is not None:
        usr['member'] = member
    return usr


def kubesaw_admins(service_accounts: List[Dict[str, Any]] = None, users: List[Dict[str, Any]] = None,
                   members: List[Dict[str, Any]] = None,
                   default_namespaces: Dict[str, str] = None) -> Dict[str, Any]:
    """kubesaw-admins content with a host and the given (or a single default) member"""
    data: Dict[str, Any] = {
        'clusters': {
            'host': {'api': CommonTestConstants.EXAMPLE_HOST_API},
            'members': members if members is not None else [
                {'name': 'member-1', 'api': 'https://api.member-1.example.com:6443'}
            ]
        },
        'serviceAccounts': service_accounts or [],
        'users': users or []
    }
    if default_namespaces:
        data['defaultServiceAccountsNamespace'] = default_namespaces
    return data
