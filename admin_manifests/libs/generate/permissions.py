"""
Permissions Manager

Turns the permissions declared for a principal into Roles, RoleBindings and
ClusterRoleBindings bound to the principal's subject.
"""

import logging
from typing import Dict, Optional

from ..core.constants import ClusterType, ErrorMessages, KubernetesConstants
from ..core.data_models import ClusterContext, PermissionBindings, SubjectRef
from ..core.exceptions import ValidationError
from ..core.protocols import SubjectFactory
from .object_store import ObjectStore
from .roles import RoleResolver
from .templates import ManifestTemplates, provider_labels, provider_labels_with_username

logger = logging.getLogger(__name__)


def role_binding_name(role_name: str, subject_base_name: str, cluster_type: ClusterType) -> str:
    """Name of a RoleBinding granting a Role, e.g. install-operator-john-host"""
    return f"{role_name}-{subject_base_name}-{cluster_type}"


def cluster_role_binding_name(cluster_role: str, subject_base_name: str, cluster_type: ClusterType) -> str:
    """Name of a (Cluster)RoleBinding granting a ClusterRole, e.g. clusterrole-admin-john-host"""
    return f"clusterrole-{cluster_role}-{subject_base_name}-{cluster_type}"


class PermissionsManager:
    """Ensures the subject and the bindings of one principal"""

    def __init__(self, store: ObjectStore, role_resolver: RoleResolver, subject_factory: SubjectFactory,
                 subject_base_name: str, subject_namespace: str):
        """
        Args:
            store: Object store of the run
            role_resolver: Resolves and stores Roles
            subject_factory: Creates the principal's identity objects
            subject_base_name: Name of the principal
            subject_namespace: Default namespace for the subject (used by ServiceAccounts)
        """
        self.store = store
        self.role_resolver = role_resolver
        self.subject_factory = subject_factory
        self.subject_base_name = subject_base_name
        self.subject_namespace = subject_namespace
        self._subject: Optional[SubjectRef] = None

    def ensure_subject(self, ctx: ClusterContext) -> SubjectRef:
        """Create the subject on first use and reuse it for every following binding"""
        if self._subject is None:
            self._subject = self.subject_factory.create_subject(
                self.store, ctx, self.subject_base_name, self.subject_namespace,
                provider_labels_with_username(self.subject_base_name)
            )
        return self._subject

    def ensure_permissions(self, ctx: ClusterContext,
                           permissions_per_cluster_type: Dict[ClusterType, PermissionBindings]) -> None:
        """
        Ensure the subject, Roles and bindings declared for the cluster type of the pass

        Args:
            ctx: Pass being compiled
            permissions_per_cluster_type: Declared permissions keyed by cluster type

        Raises:
            ValidationError: If a RoleBindings entry has no namespace
            RoleNotFoundError: If a referenced Role is not defined in the library
        """
        bindings = permissions_per_cluster_type.get(ctx.cluster_type)
        if bindings is None:
            return

        for role_bindings in bindings.role_bindings:
            if not role_bindings.namespace:
                raise ValidationError(ErrorMessages.ValidationError.MISSING_ROLE_BINDING_NAMESPACE.format(
                    cluster_type=ctx.cluster_type
                ))

            for role in role_bindings.roles:
                self._ensure_permission(ctx, role, role_bindings.namespace, KubernetesConstants.Kind.ROLE)

            for cluster_role in role_bindings.cluster_roles:
                self._ensure_permission(ctx, cluster_role, role_bindings.namespace,
                                        KubernetesConstants.Kind.CLUSTER_ROLE)

        for cluster_role in bindings.cluster_role_bindings.cluster_roles:
            self._ensure_permission(ctx, cluster_role, '', KubernetesConstants.Kind.CLUSTER_ROLE)

    def _ensure_permission(self, ctx: ClusterContext, role_name: str, target_namespace: str,
                           role_kind: KubernetesConstants.Kind) -> None:
        """Ensure one binding; an empty target namespace means a ClusterRoleBinding"""
        if role_kind == KubernetesConstants.Kind.ROLE:
            granted_role_name = self.role_resolver.ensure_role(self.store, ctx, role_name, target_namespace)
            binding_name = role_binding_name(role_name, self.subject_base_name, ctx.cluster_type)
        else:
            # ClusterRoles are expected to exist in the cluster already
            granted_role_name = role_name
            binding_name = cluster_role_binding_name(role_name, self.subject_base_name, ctx.cluster_type)

        subject = self.ensure_subject(ctx)

        if target_namespace:
            binding = ManifestTemplates.role_binding_template(
                binding_name, target_namespace, subject, granted_role_name, role_kind.value, provider_labels()
            )
        else:
            binding = ManifestTemplates.cluster_role_binding_template(
                binding_name, subject, granted_role_name, role_kind.value, provider_labels()
            )
        self.store.store_object(ctx, binding)
        logger.debug(f"Ensured {binding['kind']} {binding_name} -> {role_kind} {granted_role_name}")
