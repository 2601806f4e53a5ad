"""
Configuration Management

Handles loading and validating the kubesaw-admins file and the optional
tool configuration file for the admin-manifests tool.
"""

import logging
from io import StringIO
from pathlib import Path
from typing import Any, Dict

try:
    import yaml
except ImportError:
    raise ImportError("PyYAML is required. Install with: pip install PyYAML")

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from .constants import ClusterType, ErrorMessages, FileConstants, KubernetesConstants
from .data_models import (
    ClusterRoleBindings, Clusters, DefaultServiceAccountsNamespace, KubeSawAdmins, MemberCluster,
    PermissionBindings, RoleBindings, Selector, ServiceAccountPrincipal, UserPrincipal
)
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


_NAME_LIST = {'type': list, 'required': False, 'items': {'type': str}}

_SELECTOR_SCHEMA = {
    'type': dict,
    'required': False,
    'fields': {
        'skipMembers': _NAME_LIST,
        'memberClusters': _NAME_LIST
    }
}

_PERMISSIONS_SCHEMA = {
    'type': dict,
    'required': False,
    'fields': {
        'roleBindings': {
            'type': list,
            'required': False,
            'items': {
                'type': dict,
                'fields': {
                    'namespace': {'type': str, 'required': False},
                    'roles': _NAME_LIST,
                    'clusterRoles': _NAME_LIST
                }
            }
        },
        'clusterRoleBindings': {
            'type': dict,
            'required': False,
            'fields': {
                'clusterRoles': _NAME_LIST
            }
        }
    }
}


class ConfigManager:
    """Manages configuration loading and validation"""

    # Tool configuration schema - command-line flags that can be preset in a file
    CONFIG_SCHEMA = {
        'generate': {
            'type': dict,
            'required': False,
            'fields': {
                'kubesaw_admins': {'type': str, 'required': False},
                'out_dir': {'type': str, 'required': False},
                'single_cluster': {'type': bool, 'required': False},
                'host_root_dir': {'type': str, 'required': False},
                'member_root_dir': {'type': str, 'required': False},
                'idp_name': {'type': str, 'required': False},
                'roles_dir': {'type': str, 'required': False}
            }
        },
        'global': {
            'type': dict,
            'required': False,
            'fields': {
                'debug': {'type': bool, 'required': False}
            }
        },
    }

    # kubesaw-admins schema - per cluster type permissions are inlined under 'host' and 'member'
    ADMINS_SCHEMA = {
        'clusters': {
            'type': dict,
            'required': False,
            'fields': {
                'host': {
                    'type': dict,
                    'required': False,
                    'fields': {'api': {'type': str, 'required': False}}
                },
                'members': {
                    'type': list,
                    'required': False,
                    'items': {
                        'type': dict,
                        'fields': {
                            'name': {'type': str, 'required': True},
                            'api': {'type': str, 'required': False},
                            'separateKustomizeComponent': {'type': bool, 'required': False}
                        }
                    }
                }
            }
        },
        'serviceAccounts': {
            'type': list,
            'required': False,
            'items': {
                'type': dict,
                'fields': {
                    'name': {'type': str, 'required': True},
                    'namespace': {'type': str, 'required': False},
                    'selector': _SELECTOR_SCHEMA,
                    ClusterType.HOST.value: _PERMISSIONS_SCHEMA,
                    ClusterType.MEMBER.value: _PERMISSIONS_SCHEMA
                }
            }
        },
        'users': {
            'type': list,
            'required': False,
            'items': {
                'type': dict,
                'fields': {
                    'name': {'type': str, 'required': True},
                    # numeric IDs are commonly left unquoted
                    'id': {'type': list, 'required': False, 'items': {'type': (str, int)}},
                    'groups': _NAME_LIST,
                    'allClusters': {'type': bool, 'required': False},
                    'selector': _SELECTOR_SCHEMA,
                    ClusterType.HOST.value: _PERMISSIONS_SCHEMA,
                    ClusterType.MEMBER.value: _PERMISSIONS_SCHEMA
                }
            }
        },
        'defaultServiceAccountsNamespace': {
            'type': dict,
            'required': False,
            'fields': {
                'host': {'type': str, 'required': False},
                'member': {'type': str, 'required': False}
            }
        },
    }

    def __init__(self):
        """Initialize configuration manager"""
        self.config_data = {}
        self.config_file_path = None

    def _read_yaml_file(self, file_path: str, not_found_template: str) -> Dict[str, Any]:
        """
        Read a YAML mapping from disk

        Args:
            file_path: Path to the YAML file
            not_found_template: Error template used when the file is missing

        Returns:
            Dict with the file content, empty dict for an empty file

        Raises:
            ConfigurationError: If the file cannot be read or is not a YAML mapping
        """
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(not_found_template.format(config_path=file_path, path=file_path))
        if not path.is_file():
            raise ConfigurationError(f"Configuration path is not a file: {file_path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {file_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read {file_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"{file_path} must contain a YAML mapping")
        return data

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load tool configuration from YAML file

        Args:
            config_path: Path to configuration file

        Returns:
            Dict containing configuration data

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid
        """
        self.config_data = self._read_yaml_file(config_path, ErrorMessages.ConfigError.CONFIG_FILE_NOT_FOUND)
        self._validate_against_schema(self.config_data, self.CONFIG_SCHEMA, "config")
        self.config_file_path = config_path
        logger.info(f"Successfully loaded configuration from {config_path}")
        return self.config_data

    def load_admins(self, admins_path: str) -> KubeSawAdmins:
        """
        Load the kubesaw-admins file into typed records

        Args:
            admins_path: Path to the kubesaw-admins file

        Returns:
            KubeSawAdmins: Parsed and validated content

        Raises:
            ConfigurationError: If the file cannot be loaded or does not match the schema
        """
        data = self._read_yaml_file(admins_path, ErrorMessages.ConfigError.ADMINS_FILE_NOT_FOUND)
        try:
            self._validate_against_schema(data, self.ADMINS_SCHEMA)
        except ConfigurationError as e:
            raise ConfigurationError(
                ErrorMessages.ConfigError.ADMINS_FILE_INVALID.format(path=admins_path, error=e)
            ) from e

        admins = self.build_admins(data)
        logger.info(
            f"Loaded {len(admins.service_accounts)} ServiceAccount(s) and "
            f"{len(admins.users)} User(s) from {admins_path}"
        )
        return admins

    def _validate_against_schema(self, data: Dict[str, Any], schema: Dict[str, Any], path: str = "") -> None:
        """
        Validate data against schema definition

        Args:
            data: Data to validate
            schema: Schema definition
            path: Current path for error reporting

        Raises:
            ConfigurationError: If data doesn't match schema
        """
        for key, field_schema in schema.items():
            current_path = f"{path}.{key}" if path else key

            if key in data:
                self._validate_value(data[key], field_schema, current_path)
            elif field_schema.get('required', False):
                raise ConfigurationError(f"Required field {current_path} is missing")

    def _validate_value(self, value: Any, field_schema: Dict[str, Any], path: str) -> None:
        """Validate a single value, descending into nested mappings and list items"""
        # Skip None values for optional fields
        if value is None and not field_schema.get('required', False):
            return

        expected_type = field_schema['type']
        types = expected_type if isinstance(expected_type, tuple) else (expected_type,)
        # bool is a subclass of int
        rejected_bool = isinstance(value, bool) and bool not in types
        if rejected_bool or not isinstance(value, expected_type):
            type_name = ' or '.join(t.__name__ for t in types)
            raise ConfigurationError(f"{path} must be a {type_name}")

        if 'choices' in field_schema and value not in field_schema['choices']:
            choices_str = ', '.join(f"'{c}'" for c in field_schema['choices'])
            raise ConfigurationError(f"{path} must be one of: {choices_str}")

        if expected_type == dict and 'fields' in field_schema:
            self._validate_against_schema(value, field_schema['fields'], path)

        if expected_type == list and 'items' in field_schema:
            for index, item in enumerate(value):
                if item is None:
                    raise ConfigurationError(f"{path}[{index}] must not be empty")
                self._validate_value(item, field_schema['items'], f"{path}[{index}]")

    def build_admins(self, data: Dict[str, Any]) -> KubeSawAdmins:
        """
        Convert a validated kubesaw-admins mapping into typed records

        Args:
            data: kubesaw-admins content as loaded from YAML

        Returns:
            KubeSawAdmins: Typed representation
        """
        clusters = data.get('clusters') or {}
        host = clusters.get('host') or {}
        members = tuple(
            MemberCluster(
                name=member['name'],
                api=member.get('api') or '',
                separate_kustomize_component=bool(member.get('separateKustomizeComponent'))
            )
            for member in clusters.get('members') or ()
        )

        service_accounts = tuple(
            ServiceAccountPrincipal(
                name=sa['name'],
                namespace=sa.get('namespace') or '',
                selector=self._build_selector(sa.get('selector')),
                permissions=self._build_permissions(sa)
            )
            for sa in data.get('serviceAccounts') or ()
        )

        users = tuple(
            UserPrincipal(
                name=user['name'],
                ids=tuple(str(user_id) for user_id in user.get('id') or ()),
                groups=tuple(user.get('groups') or ()),
                all_clusters=bool(user.get('allClusters')),
                selector=self._build_selector(user.get('selector')),
                permissions=self._build_permissions(user)
            )
            for user in data.get('users') or ()
        )

        default_namespaces = data.get('defaultServiceAccountsNamespace') or {}
        return KubeSawAdmins(
            clusters=Clusters(host_api=host.get('api') or '', members=members),
            service_accounts=service_accounts,
            users=users,
            default_service_accounts_namespace=DefaultServiceAccountsNamespace(
                host=default_namespaces.get('host') or '',
                member=default_namespaces.get('member') or ''
            )
        )

    @staticmethod
    def _build_selector(data: Dict[str, Any]) -> Selector:
        data = data or {}
        return Selector(
            skip_members=frozenset(data.get('skipMembers') or ()),
            member_clusters=frozenset(data.get('memberClusters') or ())
        )

    @staticmethod
    def _build_permissions(principal: Dict[str, Any]) -> Dict[ClusterType, PermissionBindings]:
        """Collect the permissions inlined under the cluster type keys of a principal"""
        permissions = {}
        for cluster_type in ClusterType.ordered():
            if cluster_type.value not in principal:
                continue
            bindings = principal[cluster_type.value] or {}
            role_bindings = tuple(
                RoleBindings(
                    namespace=entry.get('namespace') or '',
                    roles=tuple(entry.get('roles') or ()),
                    cluster_roles=tuple(entry.get('clusterRoles') or ())
                )
                for entry in bindings.get('roleBindings') or ()
            )
            cluster_role_bindings = bindings.get('clusterRoleBindings') or {}
            permissions[cluster_type] = PermissionBindings(
                role_bindings=role_bindings,
                cluster_role_bindings=ClusterRoleBindings(
                    cluster_roles=tuple(cluster_role_bindings.get('clusterRoles') or ())
                )
            )
        return permissions

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get specific configuration section

        Args:
            section: Section name (e.g., 'generate', 'global')

        Returns:
            Dict containing section data, empty dict if section doesn't exist
        """
        return self.config_data.get(section) or {}

    def get_value(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key

        Args:
            key: Configuration key (supports dot notation like 'generate.out_dir')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config_data

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def _write_config_file(self, content: str, output_dir: str = None) -> str:
        """
        Helper method to write configuration content to file

        Args:
            content: YAML content to write
            output_dir: Directory to save file (optional)

        Returns:
            str: Path to written file

        Raises:
            ConfigurationError: If file writing fails
        """
        try:
            output_path = Path(output_dir) if output_dir else Path('.')
            output_path.mkdir(parents=True, exist_ok=True)
            config_file = output_path / FileConstants.DEFAULT_ADMINS_TEMPLATE_FILE

            with open(config_file, 'w', encoding='utf-8') as f:
                f.write(content)

            logger.info(f"Configuration file written: {config_file}")
            return str(config_file)

        except OSError as e:
            raise ConfigurationError(f"Failed to write configuration file: {e}")

    def generate_config_template(self, output_dir: str = None) -> str:
        """
        Generate kubesaw-admins template file

        Args:
            output_dir: Directory to save template (optional)

        Returns:
            str: Path to generated template file
        """
        return self._write_config_file(self.get_config_template_content(), output_dir)

    @staticmethod
    def _flow_seq(items: list) -> CommentedSeq:
        seq = CommentedSeq(items)
        seq.fa.set_flow_style()
        return seq

    def _create_config_template_structure(self) -> CommentedMap:
        """
        Create the commented kubesaw-admins starter structure

        Returns:
            CommentedMap: Template ready to be dumped by ruamel.yaml
        """
        host_permissions = CommentedMap([
            ('roleBindings', [CommentedMap([
                ('namespace', 'toolchain-host-operator'),
                ('roles', self._flow_seq(['install-operator'])),
                ('clusterRoles', self._flow_seq(['view']))
            ])])
        ])
        member_permissions = CommentedMap([
            ('roleBindings', [CommentedMap([
                ('namespace', 'toolchain-member-operator'),
                ('roles', self._flow_seq(['restart-deployment'])),
                ('clusterRoles', self._flow_seq(['view']))
            ])]),
            ('clusterRoleBindings', CommentedMap([('clusterRoles', self._flow_seq(['view']))]))
        ])

        service_account = CommentedMap([
            ('name', 'first-admin'),
            ('host', host_permissions),
            ('member', member_permissions)
        ])
        user = CommentedMap([
            ('name', 'first-user'),
            ('id', self._flow_seq(['12345'])),
            ('groups', self._flow_seq(['crtadmins'])),
            ('selector', CommentedMap([('skipMembers', self._flow_seq(['member-2']))])),
            ('host', CommentedMap([
                ('roleBindings', [CommentedMap([
                    ('namespace', 'toolchain-host-operator'),
                    ('clusterRoles', self._flow_seq(['edit']))
                ])])
            ]))
        ])

        template = CommentedMap([
            ('clusters', CommentedMap([
                ('host', CommentedMap([('api', 'https://api.host.example.com:6443')])),
                ('members', [
                    CommentedMap([('name', 'member-1'), ('api', 'https://api.member-1.example.com:6443')]),
                    CommentedMap([
                        ('name', 'member-2'),
                        ('api', 'https://api.member-2.example.com:6443'),
                        ('separateKustomizeComponent', True)
                    ])
                ])
            ])),
            ('defaultServiceAccountsNamespace', CommentedMap([
                ('host', f"{KubernetesConstants.DEFAULT_SA_NAMESPACE_PREFIX}-{ClusterType.HOST}"),
                ('member', f"{KubernetesConstants.DEFAULT_SA_NAMESPACE_PREFIX}-{ClusterType.MEMBER}")
            ])),
            ('serviceAccounts', [service_account]),
            ('users', [user])
        ])

        template.yaml_set_start_comment(
            "kubesaw-admins configuration file\n"
            "Declares who may act as what, on which clusters, with which permissions"
        )
        template.yaml_set_comment_before_after_key(
            'defaultServiceAccountsNamespace',
            before="Namespaces of ServiceAccounts without an explicit namespace (must differ)"
        )
        template.yaml_set_comment_before_after_key(
            'serviceAccounts',
            before="Permissions are declared per cluster type under the 'host' and 'member' keys"
        )
        template.yaml_set_comment_before_after_key(
            'users',
            before="Users get User, Identity (one per id) and Group manifests"
        )
        return template

    def get_config_template_content(self) -> str:
        """
        Generate kubesaw-admins template content as string without file I/O

        Returns:
            str: YAML template content
        """
        yaml_processor = YAML()
        yaml_processor.width = 4096  # Prevent line wrapping
        yaml_processor.indent(mapping=2, sequence=4, offset=2)

        stream = StringIO()
        yaml_processor.dump(self._create_config_template_structure(), stream)
        return stream.getvalue()

