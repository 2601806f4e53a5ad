"""
Manifest Tree Writer

Renders the object store into YAML files and maintains the kustomization
index of every directory in the output tree.
"""

import logging
import posixpath
import shutil
from pathlib import Path
from typing import Any, Dict, List, Set

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML is required. Install with: pip install PyYAML")

from ..core.constants import ErrorMessages, FileConstants
from ..core.data_models import OutputLayout
from ..core.exceptions import ManifestWriteError
from ..core.protocols import FileWriter
from .object_store import ObjectStore

logger = logging.getLogger(__name__)

# Rule fields rendered in flow style, e.g. verbs: [get, list]
_FLOW_STYLE_RULE_FIELDS = ('apiGroups', 'resources', 'resourceNames', 'verbs', 'nonResourceURLs')


class FlowStyleList(list):
    """Custom list type to indicate that this list should be formatted in YAML flow style"""
    pass


def dump_yaml_with_flowstyle_lists(data: Dict[str, Any]) -> str:
    """
    Dump YAML with sorted keys and flow style for FlowStyleList instances

    Args:
        data: Data to format as YAML

    Returns:
        YAML string with flow style for FlowStyleList instances
    """
    class FlowArrayDumper(yaml.SafeDumper):
        pass

    def represent_list(dumper, data):
        if isinstance(data, FlowStyleList):
            return dumper.represent_sequence('tag:yaml.org,2002:seq', data, flow_style=True)
        return dumper.represent_sequence('tag:yaml.org,2002:seq', data, flow_style=False)

    FlowArrayDumper.add_representer(list, represent_list)
    FlowArrayDumper.add_representer(FlowStyleList, represent_list)

    # No anchors/aliases, every manifest is self-contained
    FlowArrayDumper.ignore_aliases = lambda self, data: True

    return yaml.dump(data, Dumper=FlowArrayDumper, default_flow_style=False, sort_keys=True)


def strip_zero_values(manifest: Dict[str, Any]) -> Dict[str, Any]:
    """Drop the null creationTimestamp and the empty user reference"""
    cleaned = dict(manifest)
    metadata = cleaned.get('metadata')
    if isinstance(metadata, dict) and 'creationTimestamp' in metadata and metadata['creationTimestamp'] is None:
        cleaned['metadata'] = {k: v for k, v in metadata.items() if k != 'creationTimestamp'}
    if cleaned.get('user') == {}:
        del cleaned['user']
    return cleaned


def _format_rules_for_flow_style(manifest: Dict[str, Any]) -> Dict[str, Any]:
    rules = manifest.get('rules')
    if not isinstance(rules, list):
        return manifest
    formatted = dict(manifest)
    formatted['rules'] = [
        {key: FlowStyleList(value) if key in _FLOW_STYLE_RULE_FIELDS and isinstance(value, list) else value
         for key, value in rule.items()}
        for rule in rules
    ]
    return formatted


def render_manifest(manifest: Dict[str, Any]) -> str:
    """Render a manifest file: banner followed by stable YAML"""
    content = dump_yaml_with_flowstyle_lists(_format_rules_for_flow_style(strip_zero_values(manifest)))
    return f"{FileConstants.MANIFEST_HEADER}{content}"


class KustomizationTree:
    """
    Directory ancestry of the output tree.

    Each directory lists its files and subdirectories. The index of the base
    root is referenced from the member root only, never from the host root.
    """

    def __init__(self, layout: OutputLayout):
        self.layout = layout
        self._resources: Dict[str, Set[str]] = {}

    def add_file(self, path: str) -> None:
        """Register a manifest file and propagate it up to the root directory"""
        self._add(posixpath.dirname(path), posixpath.basename(path))

    def _add(self, dir_path: str, item: str) -> None:
        resources = self._resources.setdefault(dir_path, set())
        if item in resources:
            return
        resources.add(item)

        parent = posixpath.dirname(dir_path)
        if parent == '':
            # dir_path is a root directory, the output directory itself has no index
            if dir_path == self.layout.base_dir:
                self._add(self.layout.member_root_dir, f"../{self.layout.base_dir}")
            return
        self._add(parent, posixpath.basename(dir_path))

    def directories(self) -> List[str]:
        return sorted(self._resources)

    def resources(self, dir_path: str) -> List[str]:
        return sorted(self._resources.get(dir_path, ()))

    def kustomization(self, dir_path: str) -> Dict[str, Any]:
        """Kustomization manifest of a directory"""
        return {
            'apiVersion': FileConstants.KUSTOMIZE_API_VERSION,
            'kind': FileConstants.KUSTOMIZATION_KIND,
            'resources': self.resources(dir_path)
        }


class ManifestTreeWriter:
    """Writes the object store through a FileWriter"""

    def __init__(self, file_writer: FileWriter, layout: OutputLayout):
        self.file_writer = file_writer
        self.layout = layout

    def write_manifests(self, store: ObjectStore) -> int:
        """
        Write every stored manifest and the kustomization.yaml of every directory

        Args:
            store: Finalized object store

        Returns:
            int: Number of files written
        """
        tree = KustomizationTree(self.layout)
        written = 0

        for path, manifest in store.items():
            self.file_writer.write(path, render_manifest(manifest))
            tree.add_file(path)
            written += 1

        for dir_path in tree.directories():
            kustomization_path = posixpath.join(dir_path, FileConstants.KUSTOMIZATION_FILE)
            self.file_writer.write(kustomization_path, render_manifest(tree.kustomization(dir_path)))
            written += 1

        logger.info(f"Wrote {written} file(s) ({len(store)} manifest(s), {written - len(store)} kustomization(s))")
        return written


class LocalFileWriter:
    """Persists files under an output directory on the local filesystem"""

    def __init__(self, out_dir: str):
        self.out_dir = Path(out_dir).resolve()

    def wipe(self) -> None:
        """Remove the output directory with all of its content"""
        try:
            if self.out_dir.is_dir():
                shutil.rmtree(self.out_dir)
            elif self.out_dir.exists():
                self.out_dir.unlink()
        except OSError as e:
            raise ManifestWriteError(ErrorMessages.ManifestError.WRITE_FAILED.format(path=self.out_dir, error=e))
        logger.debug(f"Removed previous output {self.out_dir}")

    def write(self, relative_path: str, content: str) -> None:
        target = self.out_dir / relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding='utf-8')
        except OSError as e:
            raise ManifestWriteError(ErrorMessages.ManifestError.WRITE_FAILED.format(path=target, error=e))


class InMemoryFileWriter:
    """Keeps written files in a dictionary, used as a virtual filesystem"""

    def __init__(self):
        self.files: Dict[str, str] = {}

    def wipe(self) -> None:
        self.files.clear()

    def write(self, relative_path: str, content: str) -> None:
        self.files[relative_path] = content
