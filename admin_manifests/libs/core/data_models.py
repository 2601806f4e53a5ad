"""
Data Models

Typed representation of the kubesaw-admins file and of the values passed
between the compilation stages.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, NamedTuple, Tuple

from .constants import ClusterType, FileConstants, KubernetesConstants


class Selector(NamedTuple):
    """Selects the member clusters a principal is (not) applied to"""
    skip_members: FrozenSet[str] = frozenset()
    member_clusters: FrozenSet[str] = frozenset()

    def should_skip(self, member_name: str) -> bool:
        """
        Decide whether the principal is skipped for the given member cluster.

        An empty member name stands for the regular (non-component) passes.

        Args:
            member_name: Name of the member cluster of a separate Kustomize component, or ''

        Returns:
            bool: True when the principal must not be generated
        """
        if member_name and member_name in self.skip_members:
            return True
        return bool(self.member_clusters) and (not member_name or member_name not in self.member_clusters)


class RoleBindings(NamedTuple):
    """Roles and ClusterRoles bound in a single namespace"""
    namespace: str
    roles: Tuple[str, ...] = ()
    cluster_roles: Tuple[str, ...] = ()


class ClusterRoleBindings(NamedTuple):
    """ClusterRoles bound cluster-wide"""
    cluster_roles: Tuple[str, ...] = ()


class PermissionBindings(NamedTuple):
    """All bindings declared for one cluster type"""
    role_bindings: Tuple[RoleBindings, ...] = ()
    cluster_role_bindings: ClusterRoleBindings = ClusterRoleBindings()


class SubjectRef(NamedTuple):
    """Reference to a binding subject"""
    kind: str
    name: str
    namespace: str = ''


@dataclass(frozen=True)
class ServiceAccountPrincipal:
    """A ServiceAccount that receives permissions"""
    name: str
    namespace: str = ''
    selector: Selector = Selector()
    permissions: Dict[ClusterType, PermissionBindings] = field(default_factory=dict)


@dataclass(frozen=True)
class UserPrincipal:
    """A User (with Identities and Group memberships) that receives permissions"""
    name: str
    ids: Tuple[str, ...] = ()
    groups: Tuple[str, ...] = ()
    all_clusters: bool = False
    selector: Selector = Selector()
    permissions: Dict[ClusterType, PermissionBindings] = field(default_factory=dict)


@dataclass(frozen=True)
class MemberCluster:
    name: str
    api: str = ''
    separate_kustomize_component: bool = False


@dataclass(frozen=True)
class Clusters:
    host_api: str = ''
    members: Tuple[MemberCluster, ...] = ()


@dataclass(frozen=True)
class DefaultServiceAccountsNamespace:
    """Optional overrides of the namespaces where ServiceAccounts are created"""
    host: str = ''
    member: str = ''

    def for_cluster_type(self, cluster_type: ClusterType) -> str:
        """Return the configured namespace, falling back to sandbox-sre-<clusterType>"""
        configured = self.host if cluster_type == ClusterType.HOST else self.member
        return configured or f"{KubernetesConstants.DEFAULT_SA_NAMESPACE_PREFIX}-{cluster_type}"


@dataclass(frozen=True)
class KubeSawAdmins:
    """The whole kubesaw-admins file"""
    clusters: Clusters = Clusters()
    service_accounts: Tuple[ServiceAccountPrincipal, ...] = ()
    users: Tuple[UserPrincipal, ...] = ()
    default_service_accounts_namespace: DefaultServiceAccountsNamespace = DefaultServiceAccountsNamespace()

    def separate_components(self) -> Tuple[MemberCluster, ...]:
        """Member clusters generated into their own Kustomize component"""
        return tuple(member for member in self.clusters.members if member.separate_kustomize_component)


@dataclass(frozen=True)
class OutputLayout:
    """Names of the root directories directly under the output directory"""
    host_root_dir: str = FileConstants.DEFAULT_HOST_ROOT_DIR
    member_root_dir: str = FileConstants.DEFAULT_MEMBER_ROOT_DIR
    base_dir: str = FileConstants.BASE_DIR

    def root_dir(self, cluster_type: ClusterType, member_name: str = '') -> str:
        """
        Root directory of a cluster type.

        A separate Kustomize component of a member cluster is rooted in a
        directory named after the member.
        """
        if cluster_type == ClusterType.HOST:
            return self.host_root_dir
        return member_name or self.member_root_dir


class ClusterContext(NamedTuple):
    """Identifies the pass currently being compiled"""
    cluster_type: ClusterType
    member_name: str = ''
