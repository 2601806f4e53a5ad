"""
Object Store

Deduplicating accumulator of generated manifests keyed by their storage path
in the output tree (relative to the output directory, POSIX separators).
"""

import copy
import logging
import posixpath
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from ..core.constants import KIND_REGISTRY, ErrorMessages, FileConstants, KindInfo
from ..core.data_models import ClusterContext, OutputLayout
from ..core.exceptions import ManifestIdentityError
from ..core.utils import sanitize_filename

logger = logging.getLogger(__name__)

# Receives a copy of the stored manifest; returns True when it modified it
UpdateFunc = Callable[[Dict[str, Any]], bool]


def resolve_kind(manifest: Dict[str, Any]) -> KindInfo:
    """
    Resolve the registry entry of a manifest's kind

    Args:
        manifest: Manifest dictionary

    Returns:
        KindInfo: Registry entry for the kind

    Raises:
        ManifestIdentityError: If the kind is missing, unsupported or ambiguous
    """
    metadata = manifest.get('metadata') or {}
    name = metadata.get('name') or '<unnamed>'
    kind = manifest.get('kind')
    if not kind:
        raise ManifestIdentityError(ErrorMessages.ManifestError.MISSING_KIND.format(name=name))

    info = KIND_REGISTRY.get(kind)
    if info is None:
        raise ManifestIdentityError(ErrorMessages.ManifestError.UNKNOWN_KIND.format(kind=kind, name=name))

    api_version = manifest.get('apiVersion')
    if api_version and api_version != info.api_version:
        raise ManifestIdentityError(ErrorMessages.ManifestError.AMBIGUOUS_KIND.format(
            name=name, kind=kind, api_version=api_version, expected=info.api_version
        ))
    return info


def _identity(manifest: Dict[str, Any]) -> Tuple[str, str, str]:
    metadata = manifest.get('metadata') or {}
    return manifest.get('kind'), metadata.get('namespace') or '', metadata.get('name')


class ObjectStore:
    """
    Canonical store of the manifests generated in one run.

    Every manifest is materialized under exactly one root (host, member or
    base). In single-cluster mode a manifest produced for both cluster types
    is promoted to the base root.
    """

    def __init__(self, layout: Optional[OutputLayout] = None, single_cluster: bool = False):
        self.layout = layout or OutputLayout()
        self.single_cluster = single_cluster
        self._objects: Dict[str, Dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, path: str) -> bool:
        return path in self._objects

    def get(self, path: str) -> Optional[Dict[str, Any]]:
        """Get a copy of the manifest stored under the given path"""
        stored = self._objects.get(path)
        return copy.deepcopy(stored) if stored is not None else None

    def paths(self) -> list:
        """Sorted storage paths"""
        return sorted(self._objects)

    def items(self) -> Iterator[Tuple[str, Dict[str, Any]]]:
        """Iterate over (path, manifest) pairs in path order"""
        for path in self.paths():
            yield path, self._objects[path]

    def store_object(self, ctx: ClusterContext, manifest: Dict[str, Any]) -> str:
        """Store a manifest unless the same object is already stored (create-only)"""
        return self.ensure(ctx, manifest)

    def ensure(self, ctx: ClusterContext, manifest: Dict[str, Any],
               update_func: Optional[UpdateFunc] = None) -> str:
        """
        Ensure that the manifest is stored for the cluster type of the given context.

        When an object with the same identity is already stored under the target
        path, it is kept as is unless ``update_func`` is given. The update
        function receives a copy of the stored manifest and returns whether it
        modified it; the stored manifest is replaced only when it did. Errors
        raised by the update function propagate and leave the store unchanged.

        Args:
            ctx: Cluster type (and separate component) being compiled
            manifest: Manifest to store; the store keeps its own copy
            update_func: Optional reconciliation of an already stored manifest

        Returns:
            str: Storage path the manifest ended up under

        Raises:
            ManifestIdentityError: If the manifest has no resolvable kind, name or namespace,
                or its storage path already holds a different object
        """
        obj = copy.deepcopy(manifest)
        info = resolve_kind(obj)
        obj['apiVersion'] = info.api_version

        path, other_type_path, base_path = self._file_paths(ctx, obj, info)

        if self.single_cluster:
            if base_path in self:
                path = base_path
            elif other_type_path in self:
                logger.debug(f"Promoting {other_type_path} to {base_path}")
                self._objects[base_path] = self._objects.pop(other_type_path)
                path = base_path

        existing = self._objects.get(path)
        if existing is not None:
            self._check_identity(path, existing, obj)
            if update_func is None:
                logger.debug(f"{path} already exists and is not supposed to be updated")
                return path
            to_update = copy.deepcopy(existing)
            if update_func(to_update):
                self._objects[path] = to_update
                logger.debug(f"Updated {path}")
            return path

        self._objects[path] = obj
        return path

    @staticmethod
    def _check_identity(path: str, existing: Dict[str, Any], obj: Dict[str, Any]) -> None:
        """Reject a distinct object whose sanitized file name matches a stored one"""
        if _identity(existing) != _identity(obj):
            raise ManifestIdentityError(ErrorMessages.ManifestError.PATH_COLLISION.format(
                kind=obj['kind'], name=obj['metadata']['name'], path=path,
                existing_kind=existing.get('kind'), existing_name=existing['metadata'].get('name')
            ))

    def _file_paths(self, ctx: ClusterContext, obj: Dict[str, Any], info: KindInfo) -> Tuple[str, str, str]:
        """Compute the default, the other cluster type and the base storage paths"""
        metadata = obj.setdefault('metadata', {})
        name = metadata.get('name')
        if not name:
            raise ManifestIdentityError(ErrorMessages.ManifestError.MISSING_NAME.format(kind=obj['kind']))

        namespace = metadata.get('namespace') or ''
        if info.namespaced and not namespace:
            raise ManifestIdentityError(
                ErrorMessages.ManifestError.MISSING_NAMESPACE.format(name=name, kind=obj['kind'])
            )
        if not info.namespaced:
            metadata.pop('namespace', None)
            namespace = ''

        default_path = self._file_path(self.layout.root_dir(ctx.cluster_type, ctx.member_name),
                                       namespace, str(info.plural), name)
        other_type_path = self._file_path(self.layout.root_dir(ctx.cluster_type.other_type()),
                                          namespace, str(info.plural), name)
        base_path = self._file_path(self.layout.base_dir, namespace, str(info.plural), name)
        return default_path, other_type_path, base_path

    @staticmethod
    def _file_path(root_dir: str, namespace: str, plural: str, name: str) -> str:
        if namespace:
            dir_path = posixpath.join(root_dir, FileConstants.NAMESPACE_SCOPED_DIR, namespace, plural.lower())
        else:
            dir_path = posixpath.join(root_dir, FileConstants.CLUSTER_SCOPED_DIR, plural.lower())
        return posixpath.join(dir_path, sanitize_filename(f"{name}.yaml"))
