"""
Manifest Tree Writer tests
"""

import pytest
import yaml

from admin_manifests.libs.core.constants import ClusterType
from admin_manifests.libs.core.data_models import ClusterContext, OutputLayout
from admin_manifests.libs.core.exceptions import ManifestWriteError
from admin_manifests.libs.generate import (
    InMemoryFileWriter, KustomizationTree, LocalFileWriter, ManifestTreeWriter, ObjectStore, render_manifest
)
from admin_manifests.libs.generate.templates import ManifestTemplates, provider_labels

from test_constants import CommonTestConstants, role_template


def load_manifest(content):
    return yaml.safe_load(content)


class TestRenderManifest:

    def test_header_and_sorted_keys(self):
        content = render_manifest(ManifestTemplates.group_template("crtadmins", ["john"], provider_labels()))
        assert content.startswith("# ---")
        assert CommonTestConstants.MANIFEST_HEADER_LINE in content
        body = content.split("\n\n", 1)[1]
        assert body.splitlines()[0] == "apiVersion: user.openshift.io/v1"
        assert load_manifest(content)['users'] == ["john"]

    def test_rules_in_flow_style(self):
        role = role_template("install-operator", ["get", "list"])
        role['metadata']['namespace'] = "ns"
        content = render_manifest(role)
        for pattern in CommonTestConstants.FLOW_STYLE_PATTERNS:
            assert pattern in content
        assert "verbs: [get, list]" in content

    def test_zero_values_are_dropped(self):
        manifest = {
            'apiVersion': 'v1',
            'kind': 'ServiceAccount',
            'metadata': {'name': 'john', 'namespace': 'ns', 'creationTimestamp': None}
        }
        assert "creationTimestamp" not in render_manifest(manifest)

    def test_no_aliases(self):
        labels = provider_labels()
        manifest = {'kind': 'Group', 'metadata': {'name': 'g', 'labels': labels, 'annotations': labels}}
        assert "&" not in render_manifest(manifest)


class TestKustomizationTree:

    def test_ancestors_are_indexed(self):
        tree = KustomizationTree(OutputLayout())
        tree.add_file("host/namespace-scoped/ns/roles/install-operator-host.yaml")
        tree.add_file("host/cluster-scoped/users/john.yaml")

        assert tree.directories() == [
            "host",
            "host/cluster-scoped",
            "host/cluster-scoped/users",
            "host/namespace-scoped",
            "host/namespace-scoped/ns",
            "host/namespace-scoped/ns/roles",
        ]
        assert tree.resources("host") == ["cluster-scoped", "namespace-scoped"]
        assert tree.resources("host/namespace-scoped/ns/roles") == ["install-operator-host.yaml"]

    def test_base_is_referenced_from_member_only(self):
        tree = KustomizationTree(OutputLayout())
        tree.add_file("base/cluster-scoped/groups/crtadmins.yaml")
        tree.add_file("host/cluster-scoped/users/john.yaml")

        assert tree.resources("member") == ["../base"]
        assert "../base" not in tree.resources("host")
        assert tree.resources("base") == ["cluster-scoped"]

    def test_base_is_referenced_from_custom_member_root(self):
        tree = KustomizationTree(OutputLayout(member_root_dir="members"))
        tree.add_file("base/cluster-scoped/groups/crtadmins.yaml")
        assert tree.resources("members") == ["../base"]

    def test_kustomization_manifest(self):
        tree = KustomizationTree(OutputLayout())
        tree.add_file("member/cluster-scoped/users/john.yaml")
        assert tree.kustomization("member/cluster-scoped") == {
            'apiVersion': 'kustomize.config.k8s.io/v1beta1',
            'kind': 'Kustomization',
            'resources': ['users']
        }


class TestManifestTreeWriter:

    @pytest.fixture
    def populated_store(self):
        store = ObjectStore()
        store.store_object(ClusterContext(ClusterType.HOST),
                           ManifestTemplates.user_template("john", provider_labels()))
        store.store_object(ClusterContext(ClusterType.MEMBER),
                           ManifestTemplates.group_template("crtadmins", ["john"], provider_labels()))
        return store

    def test_write_manifests(self, populated_store):
        writer = InMemoryFileWriter()
        written = ManifestTreeWriter(writer, OutputLayout()).write_manifests(populated_store)

        assert sorted(writer.files) == [
            "host/cluster-scoped/kustomization.yaml",
            "host/cluster-scoped/users/john.yaml",
            "host/cluster-scoped/users/kustomization.yaml",
            "host/kustomization.yaml",
            "member/cluster-scoped/groups/crtadmins.yaml",
            "member/cluster-scoped/groups/kustomization.yaml",
            "member/cluster-scoped/kustomization.yaml",
            "member/kustomization.yaml",
        ]
        assert written == len(writer.files)
        assert load_manifest(writer.files["host/kustomization.yaml"])['resources'] == ["cluster-scoped"]

    def test_local_file_writer(self, populated_store, tmp_path):
        out_dir = tmp_path / "out"
        writer = LocalFileWriter(str(out_dir))
        writer.wipe()
        ManifestTreeWriter(writer, OutputLayout()).write_manifests(populated_store)

        user_file = out_dir / "host" / "cluster-scoped" / "users" / "john.yaml"
        assert load_manifest(user_file.read_text())['metadata']['name'] == "john"

    def test_wipe_removes_previous_output(self, tmp_path):
        out_dir = tmp_path / "out"
        stale = out_dir / "host" / "stale.yaml"
        stale.parent.mkdir(parents=True)
        stale.write_text("stale")

        LocalFileWriter(str(out_dir)).wipe()
        assert not out_dir.exists()

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(ManifestWriteError, match="failed to write"):
            LocalFileWriter(str(blocker)).write("host/kustomization.yaml", "content")

    def test_files_are_utf8(self, tmp_path):
        content = "# Jürgen Müller\nkind: Group\n"
        LocalFileWriter(str(tmp_path)).write("host/cluster-scoped/groups/jmuller.yaml", content)
        written = tmp_path / "host" / "cluster-scoped" / "groups" / "jmuller.yaml"
        assert written.read_bytes() == content.encode('utf-8')
