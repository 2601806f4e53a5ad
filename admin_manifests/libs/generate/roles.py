"""
Role Template Library and Role Resolver

Named Role rule-sets are kept per cluster type in ``<roles_dir>/<clusterType>.yaml``.
A file may be an OpenShift Template (roles listed under ``objects``), a
``List`` (roles under ``items``) or a multi-document stream of Roles.
"""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML is required. Install with: pip install PyYAML")

from ..core.constants import ClusterType, ErrorMessages, FileConstants, KubernetesConstants
from ..core.data_models import ClusterContext
from ..core.exceptions import ConfigurationError, RoleNotFoundError
from ..core.protocols import RoleTemplateProvider
from .object_store import ObjectStore
from .templates import provider_labels

logger = logging.getLogger(__name__)

DEFAULT_ROLES_DIR = Path(__file__).parent.parent.parent / "resources" / "roles"


class RoleTemplateLibrary:
    """Loads and caches Role templates per cluster type"""

    def __init__(self, roles_dir: Optional[str] = None,
                 templates: Optional[Dict[ClusterType, List[Dict[str, Any]]]] = None):
        """
        Initialize the library

        Args:
            roles_dir: Directory with host.yaml and member.yaml (defaults to the bundled roles)
            templates: Pre-parsed Role templates per cluster type, takes precedence over roles_dir
        """
        self.roles_dir = Path(roles_dir) if roles_dir else DEFAULT_ROLES_DIR
        self._roles: Dict[ClusterType, List[Dict[str, Any]]] = {}
        if templates is not None:
            for cluster_type in ClusterType.ordered():
                self._roles[cluster_type] = [copy.deepcopy(role) for role in templates.get(cluster_type, [])]

    def get_roles(self, cluster_type: ClusterType) -> List[Dict[str, Any]]:
        """
        Get all Role templates defined for the cluster type

        Raises:
            ConfigurationError: If the template file is missing or malformed
        """
        if cluster_type not in self._roles:
            self._roles[cluster_type] = self._load_roles(cluster_type)
        return self._roles[cluster_type]

    def resolve_role(self, cluster_type: ClusterType, role_name: str) -> Optional[Dict[str, Any]]:
        """Get a copy of the named Role template, None when it is not defined"""
        for role in self.get_roles(cluster_type):
            if (role.get('metadata') or {}).get('name') == role_name:
                return copy.deepcopy(role)
        return None

    def _load_roles(self, cluster_type: ClusterType) -> List[Dict[str, Any]]:
        template_file = self.roles_dir / f"{cluster_type}{FileConstants.FileExtension.YAML}"
        if not template_file.is_file():
            raise ConfigurationError(ErrorMessages.RoleError.TEMPLATE_NOT_FOUND.format(
                cluster_type=cluster_type, path=template_file
            ))

        try:
            with open(template_file, 'r', encoding='utf-8') as f:
                documents = [doc for doc in yaml.safe_load_all(f) if doc]
        except (yaml.YAMLError, OSError) as e:
            raise ConfigurationError(ErrorMessages.RoleError.INVALID_TEMPLATE.format(path=template_file, error=e))

        objects = []
        for document in documents:
            if not isinstance(document, dict):
                raise ConfigurationError(ErrorMessages.RoleError.INVALID_TEMPLATE.format(
                    path=template_file, error="every document has to be a mapping"
                ))
            if document.get('kind') == 'Template':
                objects.extend(document.get('objects') or [])
            elif document.get('kind') == 'List':
                objects.extend(document.get('items') or [])
            else:
                objects.append(document)

        roles = [obj for obj in objects if obj.get('kind') == KubernetesConstants.Kind.ROLE]
        logger.debug(f"Loaded {len(roles)} Role template(s) for {cluster_type} from {template_file}")
        return roles


class RoleResolver:
    """Stores Roles from the library renamed per cluster type"""

    def __init__(self, library: Optional[RoleTemplateProvider] = None):
        self.library = library or RoleTemplateLibrary()

    def ensure_role(self, store: ObjectStore, ctx: ClusterContext, role_name: str, namespace: str) -> str:
        """
        Store the named Role in the namespace as ``{role}-{clusterType}``

        Args:
            store: Object store of the run
            ctx: Pass being compiled
            role_name: Name of the Role template
            namespace: Target namespace of the Role

        Returns:
            str: Name of the stored Role

        Raises:
            RoleNotFoundError: If the library does not define the role for the cluster type
        """
        role = self.library.resolve_role(ctx.cluster_type, role_name)
        if role is None:
            raise RoleNotFoundError(ErrorMessages.RoleError.ROLE_NOT_FOUND.format(role=role_name))

        created_name = ctx.cluster_type.as_suffix(role_name)
        metadata = role.setdefault('metadata', {})
        metadata['name'] = created_name
        metadata['namespace'] = namespace
        metadata['labels'] = provider_labels()
        store.store_object(ctx, role)
        return created_name
