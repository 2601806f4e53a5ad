"""
Configuration Management tests
"""

import pytest
import yaml

from admin_manifests.libs.core import ConfigManager
from admin_manifests.libs.core.constants import ClusterType
from admin_manifests.libs.core.data_models import RoleBindings
from admin_manifests.libs.core.exceptions import ConfigurationError

from test_constants import kubesaw_admins, permissions, role_bindings, service_account, user


def write_yaml(path, data):
    path.write_text(yaml.safe_dump(data))
    return str(path)


class TestLoadAdmins:

    def test_full_file(self, tmp_path):
        data = kubesaw_admins(
            service_accounts=[service_account(
                "john", namespace="custom",
                host=permissions([role_bindings("toolchain-host-operator", ["install-operator"], ["admin"])]),
                selector={'skipMembers': ["member-2"]}
            )],
            users=[user("bob", ids=[12345, "abc"], groups=["crtadmins"], all_clusters=True,
                        member=permissions(cluster_roles=["view"]))],
            members=[
                {'name': 'member-1'},
                {'name': 'member-2', 'separateKustomizeComponent': True}
            ],
            default_namespaces={'host': 'sre-host'}
        )

        admins = ConfigManager().load_admins(write_yaml(tmp_path / "kubesaw-admins.yaml", data))

        sa = admins.service_accounts[0]
        assert sa.namespace == "custom"
        assert sa.selector.skip_members == frozenset({"member-2"})
        assert sa.permissions[ClusterType.HOST].role_bindings == (
            RoleBindings("toolchain-host-operator", ("install-operator",), ("admin",)),
        )
        assert ClusterType.MEMBER not in sa.permissions

        bob = admins.users[0]
        assert bob.ids == ("12345", "abc")
        assert bob.all_clusters
        assert bob.permissions[ClusterType.MEMBER].cluster_role_bindings.cluster_roles == ("view",)

        assert [member.name for member in admins.separate_components()] == ["member-2"]
        assert admins.default_service_accounts_namespace.for_cluster_type(ClusterType.HOST) == "sre-host"
        assert admins.default_service_accounts_namespace.for_cluster_type(ClusterType.MEMBER) == "sandbox-sre-member"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "kubesaw-admins.yaml"
        path.write_text("")
        admins = ConfigManager().load_admins(str(path))
        assert admins.service_accounts == ()
        assert admins.users == ()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="kubesaw-admins file not found"):
            ConfigManager().load_admins(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "kubesaw-admins.yaml"
        path.write_text("users: [unterminated\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigManager().load_admins(str(path))

    @pytest.mark.parametrize("data,message", [
        ({'users': [{'id': ["1"]}]}, "users\\[0\\].name is missing"),
        ({'serviceAccounts': {'name': 'john'}}, "serviceAccounts must be a list"),
        ({'users': [{'name': 'bob', 'groups': "crtadmins"}]}, "users\\[0\\].groups must be a list"),
        ({'serviceAccounts': [{'name': 'john', 'host': {'roleBindings': [{'roles': [1]}]}}]},
         "serviceAccounts\\[0\\].host.roleBindings\\[0\\].roles\\[0\\] must be a str"),
        ({'clusters': {'members': [None]}}, "clusters.members\\[0\\] must not be empty"),
        ({'users': [{'name': 'bob', 'id': [True]}]}, "users\\[0\\].id\\[0\\] must be a str or int"),
    ])
    def test_schema_violations(self, tmp_path, data, message):
        path = write_yaml(tmp_path / "kubesaw-admins.yaml", data)
        with pytest.raises(ConfigurationError, match=message):
            ConfigManager().load_admins(path)


class TestLoadConfig:

    def test_load_config(self, tmp_path):
        path = write_yaml(tmp_path / "config.yaml", {
            'generate': {'out_dir': 'out', 'single_cluster': True},
            'global': {'debug': False}
        })
        manager = ConfigManager()
        manager.load_config(path)

        assert manager.get_value('generate.out_dir') == "out"
        assert manager.get_value('generate.missing', 'default') == "default"
        assert manager.get_section('global') == {'debug': False}
        assert manager.get_section('unknown') == {}

    def test_wrong_type(self, tmp_path):
        path = write_yaml(tmp_path / "config.yaml", {'generate': {'single_cluster': "yes"}})
        with pytest.raises(ConfigurationError, match="config.generate.single_cluster must be a bool"):
            ConfigManager().load_config(path)

    def test_missing_config(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Configuration file not found"):
            ConfigManager().load_config(str(tmp_path / "missing.yaml"))


class TestConfigTemplate:

    def test_template_is_valid_kubesaw_admins(self):
        content = ConfigManager().get_config_template_content()
        assert content.startswith("# kubesaw-admins configuration file")

        data = yaml.safe_load(content)
        admins = ConfigManager().build_admins(data)
        assert [sa.name for sa in admins.service_accounts] == ["first-admin"]
        assert [usr.name for usr in admins.users] == ["first-user"]
        assert [member.name for member in admins.separate_components()] == ["member-2"]

    def test_generate_config_template(self, tmp_path):
        path = ConfigManager().generate_config_template(str(tmp_path / "config"))
        assert path.endswith("kubesaw-admins.yaml")
        admins = ConfigManager().load_admins(path)
        assert admins.users[0].groups == ("crtadmins",)
