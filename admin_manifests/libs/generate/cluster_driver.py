"""
Cluster Driver

Walks the principals of the kubesaw-admins file for one cluster type and
fills the object store.
"""

import logging

from ..core.constants import ClusterType, KubernetesConstants
from ..core.data_models import ClusterContext, KubeSawAdmins
from ..core.utils import validate_user_name
from .object_store import ObjectStore
from .permissions import PermissionsManager
from .roles import RoleResolver
from .subjects import ServiceAccountSubjectFactory, UserSubjectFactory

logger = logging.getLogger(__name__)


class ClusterDriver:
    """Compiles the principals of a kubesaw-admins file pass by pass"""

    def __init__(self, admins: KubeSawAdmins, store: ObjectStore, role_resolver: RoleResolver,
                 idp_name: str = KubernetesConstants.DEFAULT_IDP_NAME):
        self.admins = admins
        self.store = store
        self.role_resolver = role_resolver
        self.idp_name = idp_name

    def default_sa_namespace(self, cluster_type: ClusterType) -> str:
        return self.admins.default_service_accounts_namespace.for_cluster_type(cluster_type)

    def ensure_cluster(self, cluster_type: ClusterType, member_name: str = '') -> None:
        """
        Compile one pass.

        Args:
            cluster_type: Cluster type of the pass
            member_name: Name of the member cluster for a separate Kustomize component pass
        """
        if member_name:
            logger.info(
                f"Generating manifests for {cluster_type} cluster type "
                f"in the separate Kustomize component: {member_name}"
            )
        else:
            logger.info(f"Generating manifests for {cluster_type} cluster type")

        ctx = ClusterContext(cluster_type=cluster_type, member_name=member_name)
        self.ensure_service_accounts(ctx)
        self.ensure_users(ctx)

    def ensure_service_accounts(self, ctx: ClusterContext) -> None:
        """Generate ServiceAccounts and their bindings"""
        logger.info("-> Ensuring ServiceAccounts and its RoleBindings...")
        for sa in self.admins.service_accounts:
            if sa.selector.should_skip(ctx.member_name):
                logger.debug(f"Skipping ServiceAccount {sa.name} for {ctx.member_name or ctx.cluster_type}")
                continue

            manager = PermissionsManager(
                store=self.store,
                role_resolver=self.role_resolver,
                subject_factory=ServiceAccountSubjectFactory(sa.namespace),
                subject_base_name=sa.name,
                subject_namespace=self.default_sa_namespace(ctx.cluster_type)
            )
            manager.ensure_permissions(ctx, sa.permissions)

    def ensure_users(self, ctx: ClusterContext) -> None:
        """
        Generate Users, Identities, Groups and their bindings.

        A user marked with allClusters gets its User manifests even without
        permissions for the cluster type.

        Raises:
            ValidationError: If a user name is not a valid DNS-1123 subdomain and label value
        """
        logger.info("-> Ensuring Users and its RoleBindings...")
        for user in self.admins.users:
            if user.selector.should_skip(ctx.member_name):
                logger.debug(f"Skipping User {user.name} for {ctx.member_name or ctx.cluster_type}")
                continue
            validate_user_name(user.name)

            manager = PermissionsManager(
                store=self.store,
                role_resolver=self.role_resolver,
                subject_factory=UserSubjectFactory(user.ids, user.groups, self.idp_name),
                subject_base_name=user.name,
                subject_namespace=self.default_sa_namespace(ctx.cluster_type)
            )
            if user.all_clusters:
                manager.ensure_subject(ctx)
            manager.ensure_permissions(ctx, user.permissions)
