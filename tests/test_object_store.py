"""
Object Store tests
"""

import pytest

from admin_manifests.libs.core.constants import ClusterType
from admin_manifests.libs.core.data_models import ClusterContext, OutputLayout
from admin_manifests.libs.core.exceptions import ManifestIdentityError
from admin_manifests.libs.generate import ObjectStore, resolve_kind
from admin_manifests.libs.generate.templates import ManifestTemplates, provider_labels

HOST = ClusterContext(ClusterType.HOST)
MEMBER = ClusterContext(ClusterType.MEMBER)


def service_account(name="john", namespace="sandbox-sre"):
    return ManifestTemplates.service_account_template(name, namespace, provider_labels())


def group(name="crtadmins", users=("john",)):
    return ManifestTemplates.group_template(name, list(users), provider_labels())


class TestResolveKind:

    def test_known_kind(self):
        info = resolve_kind({'kind': 'Role', 'metadata': {'name': 'a'}})
        assert info.plural == "roles"
        assert info.namespaced

    def test_missing_kind(self):
        with pytest.raises(ManifestIdentityError, match="missing kind"):
            resolve_kind({'metadata': {'name': 'a'}})

    def test_unknown_kind(self):
        with pytest.raises(ManifestIdentityError, match="unsupported kind"):
            resolve_kind({'kind': 'ConfigMap', 'metadata': {'name': 'a'}})

    def test_mismatching_api_version(self):
        with pytest.raises(ManifestIdentityError):
            resolve_kind({'apiVersion': 'v1', 'kind': 'Group', 'metadata': {'name': 'a'}})


class TestStorePaths:

    def test_namespaced_path(self, store):
        path = store.store_object(HOST, service_account())
        assert path == "host/namespace-scoped/sandbox-sre/serviceaccounts/john.yaml"

    def test_cluster_scoped_path(self, store):
        path = store.store_object(MEMBER, group())
        assert path == "member/cluster-scoped/groups/crtadmins.yaml"

    def test_separate_component_path(self, store):
        path = store.store_object(ClusterContext(ClusterType.MEMBER, "member-2"), group())
        assert path == "member-2/cluster-scoped/groups/crtadmins.yaml"

    def test_custom_root_dirs(self):
        store = ObjectStore(layout=OutputLayout(host_root_dir="host-cluster", member_root_dir="members"))
        assert store.store_object(HOST, group()).startswith("host-cluster/")
        assert store.store_object(MEMBER, group()).startswith("members/")

    def test_identity_file_name_is_sanitized(self, store):
        identity = ManifestTemplates.identity_template("KubeSaw:12345", "KubeSaw", "12345", provider_labels())
        path = store.store_object(HOST, identity)
        assert path == "host/cluster-scoped/identities/KubeSaw-12345.yaml"
        assert store.get(path)['metadata']['name'] == "KubeSaw:12345"

    def test_cluster_scoped_kind_drops_namespace(self, store):
        manifest = group()
        manifest['metadata']['namespace'] = "ignored"
        path = store.store_object(HOST, manifest)
        assert 'namespace' not in store.get(path)['metadata']

    def test_api_version_is_set(self, store):
        manifest = group()
        del manifest['apiVersion']
        path = store.store_object(HOST, manifest)
        assert store.get(path)['apiVersion'] == "user.openshift.io/v1"

    def test_missing_name(self, store):
        with pytest.raises(ManifestIdentityError, match="missing name"):
            store.store_object(HOST, {'kind': 'Group', 'metadata': {}})

    def test_missing_namespace(self, store):
        with pytest.raises(ManifestIdentityError, match="missing namespace"):
            store.store_object(HOST, {'kind': 'ServiceAccount', 'metadata': {'name': 'john'}})
        assert len(store) == 0


class TestCreateOnly:

    def test_first_write_wins(self, store):
        path = store.store_object(HOST, group(users=["john"]))
        store.store_object(HOST, group(users=["bob"]))
        assert store.get(path)['users'] == ["john"]
        assert len(store) == 1

    def test_store_keeps_own_copy(self, store):
        manifest = group()
        path = store.store_object(HOST, manifest)
        manifest['users'].append("mutated")
        assert store.get(path)['users'] == ["john"]

    def test_host_and_member_are_separate(self, store):
        store.store_object(HOST, group())
        store.store_object(MEMBER, group())
        assert store.paths() == [
            "host/cluster-scoped/groups/crtadmins.yaml",
            "member/cluster-scoped/groups/crtadmins.yaml",
        ]

    def test_sanitized_name_collision(self, store):
        first = ManifestTemplates.identity_template("KubeSaw:a+b", "KubeSaw", "a+b", provider_labels())
        second = ManifestTemplates.identity_template("KubeSaw:a-b", "KubeSaw", "a-b", provider_labels())
        path = store.store_object(HOST, first)
        assert path == "host/cluster-scoped/identities/KubeSaw-a-b.yaml"

        with pytest.raises(ManifestIdentityError, match="already holds Identity KubeSaw:a\\+b"):
            store.store_object(HOST, second)
        with pytest.raises(ManifestIdentityError, match="already holds"):
            store.ensure(HOST, second, lambda existing: True)
        assert store.get(path)['metadata']['name'] == "KubeSaw:a+b"

        store.store_object(HOST, first)
        assert len(store) == 1


class TestUpdateFunc:

    def test_update_applied_when_modified(self, store):
        path = store.store_object(HOST, group(users=["john"]))

        def add_bob(existing):
            existing['users'].append("bob")
            return True

        store.ensure(HOST, group(users=["bob"]), add_bob)
        assert store.get(path)['users'] == ["john", "bob"]

    def test_update_discarded_when_not_reported(self, store):
        path = store.store_object(HOST, group(users=["john"]))

        def silent_change(existing):
            existing['users'].append("bob")
            return False

        store.ensure(HOST, group(), silent_change)
        assert store.get(path)['users'] == ["john"]

    def test_update_error_leaves_store_unchanged(self, store):
        path = store.store_object(HOST, group(users=["john"]))

        def failing(existing):
            existing['users'].append("bob")
            raise ValueError("boom")

        with pytest.raises(ValueError):
            store.ensure(HOST, group(), failing)
        assert store.get(path)['users'] == ["john"]

    def test_update_not_called_for_new_object(self, store):
        calls = []
        store.ensure(HOST, group(), lambda existing: calls.append(existing) or True)
        assert calls == []


class TestSingleClusterPromotion:

    def test_host_then_member_promotes_to_base(self, single_cluster_store):
        single_cluster_store.store_object(HOST, service_account())
        path = single_cluster_store.store_object(MEMBER, service_account())
        assert path == "base/namespace-scoped/sandbox-sre/serviceaccounts/john.yaml"
        assert single_cluster_store.paths() == [path]

    def test_member_then_host_promotes_to_base(self, single_cluster_store):
        single_cluster_store.store_object(MEMBER, group())
        path = single_cluster_store.store_object(HOST, group())
        assert single_cluster_store.paths() == [path] == ["base/cluster-scoped/groups/crtadmins.yaml"]

    def test_no_promotion_for_one_cluster_type(self, single_cluster_store):
        single_cluster_store.store_object(HOST, group())
        single_cluster_store.store_object(HOST, group())
        assert single_cluster_store.paths() == ["host/cluster-scoped/groups/crtadmins.yaml"]

    def test_promoted_object_keeps_first_content(self, single_cluster_store):
        single_cluster_store.store_object(HOST, group(users=["john"]))
        path = single_cluster_store.store_object(MEMBER, group(users=["bob"]))
        assert single_cluster_store.get(path)['users'] == ["john"]

    def test_base_object_is_reused(self, single_cluster_store):
        single_cluster_store.store_object(HOST, group())
        single_cluster_store.store_object(MEMBER, group())
        assert single_cluster_store.store_object(HOST, group()) == "base/cluster-scoped/groups/crtadmins.yaml"
        assert len(single_cluster_store) == 1

    def test_update_applies_after_promotion(self, single_cluster_store):
        single_cluster_store.store_object(HOST, group(users=["john"]))

        def add_bob(existing):
            existing['users'] = sorted(existing['users'] + ["bob"])
            return True

        path = single_cluster_store.ensure(MEMBER, group(users=["bob"]), add_bob)
        assert path == "base/cluster-scoped/groups/crtadmins.yaml"
        assert single_cluster_store.get(path)['users'] == ["bob", "john"]
