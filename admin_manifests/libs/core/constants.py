"""
Constants Module

Centralized constants for the admin-manifests tool to eliminate magic strings
and improve maintainability.
"""

from enum import Enum
from typing import Dict, NamedTuple


class BaseStrEnum(str, Enum):
    """Base enum class that inherits from str"""

    def __str__(self) -> str:
        """Return the enum value as string"""
        return self.value

    def __repr__(self) -> str:
        """Return a detailed representation of the enum"""
        return f"{self.__class__.__name__}.{self.name}"


class ClusterType(BaseStrEnum):
    """The two deployment roles a cluster can play"""
    HOST = "host"
    MEMBER = "member"

    def other_type(self) -> 'ClusterType':
        """Return the opposite cluster type"""
        return ClusterType.MEMBER if self is ClusterType.HOST else ClusterType.HOST

    def as_suffix(self, name: str) -> str:
        """Append the cluster type to the given name, e.g. install-operator-host"""
        return f"{name}-{self.value}"

    @classmethod
    def ordered(cls) -> list:
        """Cluster types in processing order (host first)"""
        return [cls.HOST, cls.MEMBER]


class KindInfo(NamedTuple):
    """Registry entry describing how a resource kind is stored"""
    api_version: str
    plural: str
    namespaced: bool


class KubernetesConstants:
    """Kubernetes-related constants"""

    # API group and version constants
    RBAC_API_GROUP = "rbac.authorization.k8s.io"
    RBAC_API_VERSION = f"{RBAC_API_GROUP}/v1"
    CORE_API_VERSION = "v1"
    USER_API_VERSION = "user.openshift.io/v1"

    # Labels put on every generated object
    PROVIDER_LABEL = "provider"
    PROVIDER_VALUE = "sandbox-sre"
    USERNAME_LABEL = "username"

    # Argo CD annotation put on subject objects
    COMPARE_OPTIONS_ANNOTATION = "argocd.argoproj.io/compare-options"
    IGNORE_EXTRANEOUS = "IgnoreExtraneous"

    # ServiceAccounts land in sandbox-sre-host / sandbox-sre-member unless configured
    DEFAULT_SA_NAMESPACE_PREFIX = "sandbox-sre"

    DEFAULT_IDP_NAME = "KubeSaw"

    class Kind(BaseStrEnum):
        """Resource kinds the compiler knows how to store"""
        SERVICE_ACCOUNT = "ServiceAccount"
        ROLE = "Role"
        ROLE_BINDING = "RoleBinding"
        CLUSTER_ROLE = "ClusterRole"
        CLUSTER_ROLE_BINDING = "ClusterRoleBinding"
        USER = "User"
        IDENTITY = "Identity"
        GROUP = "Group"

    class ResourceName(BaseStrEnum):
        """Plural resource names used as directory names in the output tree"""
        SERVICE_ACCOUNTS = "serviceaccounts"
        ROLES = "roles"
        ROLE_BINDINGS = "rolebindings"
        CLUSTER_ROLES = "clusterroles"
        CLUSTER_ROLE_BINDINGS = "clusterrolebindings"
        USERS = "users"
        IDENTITIES = "identities"
        GROUPS = "groups"


# Explicit kind registry: kind -> (apiVersion, plural, namespaced?)
KIND_REGISTRY: Dict[str, KindInfo] = {
    KubernetesConstants.Kind.SERVICE_ACCOUNT: KindInfo(
        KubernetesConstants.CORE_API_VERSION, KubernetesConstants.ResourceName.SERVICE_ACCOUNTS, True
    ),
    KubernetesConstants.Kind.ROLE: KindInfo(
        KubernetesConstants.RBAC_API_VERSION, KubernetesConstants.ResourceName.ROLES, True
    ),
    KubernetesConstants.Kind.ROLE_BINDING: KindInfo(
        KubernetesConstants.RBAC_API_VERSION, KubernetesConstants.ResourceName.ROLE_BINDINGS, True
    ),
    KubernetesConstants.Kind.CLUSTER_ROLE: KindInfo(
        KubernetesConstants.RBAC_API_VERSION, KubernetesConstants.ResourceName.CLUSTER_ROLES, False
    ),
    KubernetesConstants.Kind.CLUSTER_ROLE_BINDING: KindInfo(
        KubernetesConstants.RBAC_API_VERSION, KubernetesConstants.ResourceName.CLUSTER_ROLE_BINDINGS, False
    ),
    KubernetesConstants.Kind.USER: KindInfo(
        KubernetesConstants.USER_API_VERSION, KubernetesConstants.ResourceName.USERS, False
    ),
    KubernetesConstants.Kind.IDENTITY: KindInfo(
        KubernetesConstants.USER_API_VERSION, KubernetesConstants.ResourceName.IDENTITIES, False
    ),
    KubernetesConstants.Kind.GROUP: KindInfo(
        KubernetesConstants.USER_API_VERSION, KubernetesConstants.ResourceName.GROUPS, False
    ),
}


class FileConstants:
    """File and directory related constants"""

    DEFAULT_ADMINS_TEMPLATE_FILE = "kubesaw-admins.yaml"
    KUSTOMIZATION_FILE = "kustomization.yaml"

    # Root directories directly under the output directory
    DEFAULT_HOST_ROOT_DIR = "host"
    DEFAULT_MEMBER_ROOT_DIR = "member"
    BASE_DIR = "base"

    NAMESPACE_SCOPED_DIR = "namespace-scoped"
    CLUSTER_SCOPED_DIR = "cluster-scoped"

    KUSTOMIZE_API_VERSION = "kustomize.config.k8s.io/v1beta1"
    KUSTOMIZATION_KIND = "Kustomization"

    MANIFEST_HEADER = (
        "# ----------------------------------------------------------------\n"
        "# Generated by admin-manifests - DO NOT EDIT\n"
        "# ----------------------------------------------------------------\n"
        "\n"
    )

    class FileExtension(BaseStrEnum):
        """File extensions used by the tool"""
        YAML = ".yaml"


class ErrorMessages:
    """Centralized error message templates"""

    class ValidationError(BaseStrEnum):
        """Input validation error message templates"""
        MISSING_ROLE_BINDING_NAMESPACE = (
            "the namespace name is not defined for one of the role bindings in the cluster type '{cluster_type}'"
        )
        SA_WITHOUT_NAMESPACE = (
            "the SA {name} doesn't have any namespace set but requires a ClusterRoleBinding - "
            "you need to specify the target namespace of the SA"
        )
        SINGLE_CLUSTER_WITH_SEPARATE_COMPONENT = (
            "--single-cluster flag cannot be used with separateKustomizeComponent set in one of the members ({member})"
        )
        SAME_DEFAULT_SA_NAMESPACE = (
            "the default ServiceAccounts namespace has the same name for host cluster as for the member clusters "
            "({namespace}), they have to be different"
        )
        INVALID_USER_NAME = "invalid user name '{name}': {details}"

    class RoleError(BaseStrEnum):
        """Role Template Library error message templates"""
        ROLE_NOT_FOUND = "there is no such role with the name '{role}' defined"
        TEMPLATE_NOT_FOUND = "role templates for cluster type '{cluster_type}' not found: {path}"
        INVALID_TEMPLATE = "invalid role template file {path}: {error}"

    class ManifestError(BaseStrEnum):
        """Manifest identity/shape error message templates"""
        MISSING_KIND = "missing kind in the manifest {name}"
        UNKNOWN_KIND = "unsupported kind '{kind}' in the manifest {name}"
        AMBIGUOUS_KIND = (
            "manifest {name} of the kind '{kind}' has apiVersion '{api_version}' "
            "but '{expected}' is the only supported one"
        )
        MISSING_NAME = "missing name in the manifest of the kind {kind}"
        MISSING_NAMESPACE = "missing namespace in the manifest {name} of the namespaced kind {kind}"
        NOT_A_GROUP = "object {name} is not of the type of Group"
        PATH_COLLISION = (
            "{kind} {name} maps to {path} which already holds {existing_kind} {existing_name}"
        )
        WRITE_FAILED = "failed to write {path}: {error}"

    class ConfigError(BaseStrEnum):
        """Configuration-related error message templates"""
        CONFIG_FILE_NOT_FOUND = "Configuration file not found: {config_path}"
        ADMINS_FILE_NOT_FOUND = "kubesaw-admins file not found: {path}"
        ADMINS_FILE_INVALID = "unable to get kubesaw-admins file from {path}: {error}"
