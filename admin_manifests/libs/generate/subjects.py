"""
Subject Factories

Synthesize the identity objects of a principal and return the subject used
by its bindings.
"""

import logging
from typing import Any, Dict, Iterable

from ..core.constants import ErrorMessages, KubernetesConstants
from ..core.data_models import ClusterContext, SubjectRef
from ..core.exceptions import ManifestIdentityError, ValidationError
from ..core.utils import normalize_identity_user_name
from .object_store import ObjectStore
from .templates import ManifestTemplates, provider_labels

logger = logging.getLogger(__name__)


class ServiceAccountSubjectFactory:
    """Creates a ServiceAccount subject"""

    def __init__(self, sa_namespace: str = ''):
        """
        Args:
            sa_namespace: Explicit namespace of the ServiceAccount, '' for the cluster type default
        """
        self.sa_namespace = sa_namespace

    def create_subject(self, store: ObjectStore, ctx: ClusterContext, base_name: str,
                       target_namespace: str, labels: Dict[str, str]) -> SubjectRef:
        namespace = self.sa_namespace or target_namespace
        if not namespace:
            raise ValidationError(ErrorMessages.ValidationError.SA_WITHOUT_NAMESPACE.format(name=base_name))

        store.store_object(ctx, ManifestTemplates.service_account_template(base_name, namespace, labels))
        return SubjectRef(kind=KubernetesConstants.Kind.SERVICE_ACCOUNT.value, name=base_name, namespace=namespace)


def identity_name(idp_name: str, user_id: str) -> str:
    """Name of the Identity of the given user ID, e.g. KubeSaw:12345"""
    return f"{idp_name}:{normalize_identity_user_name(user_id)}"


class UserSubjectFactory:
    """Creates a User subject along with its Identities and Group memberships"""

    def __init__(self, ids: Iterable[str] = (), groups: Iterable[str] = (),
                 idp_name: str = KubernetesConstants.DEFAULT_IDP_NAME):
        self.ids = tuple(ids)
        self.groups = tuple(groups)
        self.idp_name = idp_name

    def create_subject(self, store: ObjectStore, ctx: ClusterContext, base_name: str,
                       target_namespace: str, labels: Dict[str, str]) -> SubjectRef:
        """
        Store the User, its Identities and Group memberships.

        The target namespace is not used since Users are cluster-scoped.
        """
        store.store_object(ctx, ManifestTemplates.user_template(base_name, labels))
        ensure_groups_for_user(store, ctx, base_name, self.groups)

        for user_id in self.ids:
            store.store_object(ctx, ManifestTemplates.identity_template(
                name=identity_name(self.idp_name, user_id),
                provider_name=self.idp_name,
                provider_user_name=normalize_identity_user_name(user_id),
                labels=labels
            ))

        return SubjectRef(kind=KubernetesConstants.Kind.USER.value, name=base_name)


def ensure_groups_for_user(store: ObjectStore, ctx: ClusterContext, user: str, groups: Iterable[str]) -> None:
    """
    Ensure that every given Group exists and lists the user.

    Membership is only ever added: the user is never removed from a Group
    that is not in ``groups`` and other users' memberships are not touched.

    Args:
        store: Object store of the run
        ctx: Pass being compiled
        user: Name of the user
        groups: Names of the groups the user belongs to
    """
    def add_user(existing: Dict[str, Any]) -> bool:
        if existing.get('kind') != KubernetesConstants.Kind.GROUP:
            raise ManifestIdentityError(ErrorMessages.ManifestError.NOT_A_GROUP.format(
                name=(existing.get('metadata') or {}).get('name')
            ))
        users = existing.get('users') or []
        if user in users:
            return False
        existing['users'] = sorted(users + [user])
        return True

    for group_name in groups:
        group = ManifestTemplates.group_template(group_name, [user], provider_labels())
        path = store.ensure(ctx, group, add_user)
        logger.debug(f"Ensured user {user} in group {group_name} ({path})")
