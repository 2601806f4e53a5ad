"""
Manifest Templates

Builds the manifests produced by the compiler. Core Kubernetes kinds are
built from the typed models of the kubernetes client and serialized to plain
dictionaries; OpenShift user API kinds are built as dictionaries directly.
"""

from typing import Any, Dict, List

try:
    from kubernetes import client
except ImportError:
    raise ImportError("kubernetes library is required. Install with: pip install kubernetes")

from ..core.constants import KubernetesConstants
from ..core.data_models import SubjectRef

_api_client = None


def to_manifest(model: Any) -> Dict[str, Any]:
    """Serialize a kubernetes client model into a plain manifest dictionary"""
    global _api_client
    if _api_client is None:
        _api_client = client.ApiClient()
    return _api_client.sanitize_for_serialization(model)


def provider_labels() -> Dict[str, str]:
    """Labels put on every generated object"""
    return {KubernetesConstants.PROVIDER_LABEL: KubernetesConstants.PROVIDER_VALUE}


def provider_labels_with_username(username: str) -> Dict[str, str]:
    """Labels put on subject objects"""
    labels = provider_labels()
    labels[KubernetesConstants.USERNAME_LABEL] = username
    return labels


def ignore_extraneous_annotations() -> Dict[str, str]:
    return {KubernetesConstants.COMPARE_OPTIONS_ANNOTATION: KubernetesConstants.IGNORE_EXTRANEOUS}


class ManifestTemplates:
    """Templates for Kubernetes manifests"""

    @staticmethod
    def subject(subject: SubjectRef) -> client.RbacV1Subject:
        """Binding subject model"""
        return client.RbacV1Subject(
            kind=subject.kind,
            name=subject.name,
            namespace=subject.namespace or None
        )

    @staticmethod
    def role_ref(role_name: str, role_kind: str) -> client.V1RoleRef:
        """RoleRef model pointing to a Role or ClusterRole"""
        return client.V1RoleRef(
            api_group=KubernetesConstants.RBAC_API_GROUP,
            kind=role_kind,
            name=role_name
        )

    @staticmethod
    def service_account_template(name: str, namespace: str, labels: Dict[str, str]) -> Dict[str, Any]:
        """ServiceAccount manifest template"""
        return to_manifest(client.V1ServiceAccount(
            api_version=KubernetesConstants.CORE_API_VERSION,
            kind=KubernetesConstants.Kind.SERVICE_ACCOUNT.value,
            metadata=client.V1ObjectMeta(
                name=name,
                namespace=namespace,
                labels=labels,
                annotations=ignore_extraneous_annotations()
            )
        ))

    @staticmethod
    def role_binding_template(name: str, namespace: str, subject: SubjectRef, role_name: str,
                              role_kind: str, labels: Dict[str, str]) -> Dict[str, Any]:
        """RoleBinding manifest template"""
        return to_manifest(client.V1RoleBinding(
            api_version=KubernetesConstants.RBAC_API_VERSION,
            kind=KubernetesConstants.Kind.ROLE_BINDING.value,
            metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=labels),
            role_ref=ManifestTemplates.role_ref(role_name, role_kind),
            subjects=[ManifestTemplates.subject(subject)]
        ))

    @staticmethod
    def cluster_role_binding_template(name: str, subject: SubjectRef, role_name: str,
                                      role_kind: str, labels: Dict[str, str]) -> Dict[str, Any]:
        """ClusterRoleBinding manifest template"""
        return to_manifest(client.V1ClusterRoleBinding(
            api_version=KubernetesConstants.RBAC_API_VERSION,
            kind=KubernetesConstants.Kind.CLUSTER_ROLE_BINDING.value,
            metadata=client.V1ObjectMeta(name=name, labels=labels),
            role_ref=ManifestTemplates.role_ref(role_name, role_kind),
            subjects=[ManifestTemplates.subject(subject)]
        ))

    @staticmethod
    def user_template(name: str, labels: Dict[str, str]) -> Dict[str, Any]:
        """User manifest template"""
        return {
            'apiVersion': KubernetesConstants.USER_API_VERSION,
            'kind': KubernetesConstants.Kind.USER.value,
            'metadata': {
                'name': name,
                'labels': labels,
                'annotations': ignore_extraneous_annotations()
            }
        }

    @staticmethod
    def identity_template(name: str, provider_name: str, provider_user_name: str,
                          labels: Dict[str, str]) -> Dict[str, Any]:
        """Identity manifest template"""
        return {
            'apiVersion': KubernetesConstants.USER_API_VERSION,
            'kind': KubernetesConstants.Kind.IDENTITY.value,
            'metadata': {
                'name': name,
                'labels': labels,
                'annotations': ignore_extraneous_annotations()
            },
            'providerName': provider_name,
            'providerUserName': provider_user_name
        }

    @staticmethod
    def group_template(name: str, users: List[str], labels: Dict[str, str]) -> Dict[str, Any]:
        """Group manifest template"""
        return {
            'apiVersion': KubernetesConstants.USER_API_VERSION,
            'kind': KubernetesConstants.Kind.GROUP.value,
            'metadata': {
                'name': name,
                'labels': labels
            },
            'users': list(users)
        }
