"""
Main Application

Orchestrates the core and generate libraries behind the admin-manifests
command line.
"""

import argparse
import logging
import sys
from typing import Any, Dict, Optional

# Core libraries
from .core import ConfigManager, setup_logging
from .core.constants import ClusterType, ErrorMessages, FileConstants, KubernetesConstants
from .core.data_models import KubeSawAdmins, OutputLayout
from .core.exceptions import AdminManifestsError, ValidationError
from .core.protocols import ConfigProvider, FileWriter, HelpProvider, RoleTemplateProvider

# Generate libraries
from .generate import (
    ClusterDriver, LocalFileWriter, ManifestTreeWriter, ObjectStore, RoleResolver, RoleTemplateLibrary
)

from .help_manager import HelpManager

logger = logging.getLogger(__name__)


class AdminManifestsManager:
    """Main application orchestrator for the admin-manifests tool"""

    def __init__(
        self,
        config_provider: Optional[ConfigProvider] = None,
        role_provider: Optional[RoleTemplateProvider] = None,
        help_provider: Optional[HelpProvider] = None,
        debug: bool = False
    ):
        """
        Initialize the manager with dependency injection

        Args:
            config_provider: Configuration provider (defaults to ConfigManager)
            role_provider: Role Template Library (defaults to the bundled roles)
            help_provider: Help manager (defaults to HelpManager)
            debug: Enable debug logging
        """
        self.debug = debug

        self.config_manager = config_provider or ConfigManager()
        self.role_library = role_provider or RoleTemplateLibrary()
        self.help_manager = help_provider or HelpManager()

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Load tool configuration from file

        Args:
            config_path: Path to configuration file

        Returns:
            Dict containing configuration data
        """
        return self.config_manager.load_config(config_path)

    def generate_config(self, output_dir: str = None) -> str:
        """
        Generate kubesaw-admins template

        Args:
            output_dir: Directory to save template (optional)

        Returns:
            str: Path to generated template file
        """
        return self.config_manager.generate_config_template(output_dir)

    @staticmethod
    def validate_admins(admins: KubeSawAdmins, single_cluster: bool) -> None:
        """
        Check the run-level constraints before any output is touched

        Raises:
            ValidationError: If single-cluster mode is combined with a separate component,
                or host and member ServiceAccounts would share the default namespace
        """
        if single_cluster:
            for member in admins.clusters.members:
                if member.separate_kustomize_component:
                    raise ValidationError(
                        ErrorMessages.ValidationError.SINGLE_CLUSTER_WITH_SEPARATE_COMPONENT.format(member=member.name)
                    )

        default_namespaces = admins.default_service_accounts_namespace
        host_namespace = default_namespaces.for_cluster_type(ClusterType.HOST)
        if host_namespace == default_namespaces.for_cluster_type(ClusterType.MEMBER):
            raise ValidationError(
                ErrorMessages.ValidationError.SAME_DEFAULT_SA_NAMESPACE.format(namespace=host_namespace)
            )

    def compile_manifests(
        self,
        admins: KubeSawAdmins,
        single_cluster: bool = False,
        layout: Optional[OutputLayout] = None,
        idp_name: str = KubernetesConstants.DEFAULT_IDP_NAME
    ) -> ObjectStore:
        """
        Compile the kubesaw-admins content into a fresh object store

        Host is compiled before Member so that single-cluster promotion sees
        the host objects; separate Kustomize components follow last.

        Args:
            admins: Parsed kubesaw-admins content
            single_cluster: Merge objects shared by host and member into the base root
            layout: Root directory names
            idp_name: Identity provider name used in Identity manifests

        Returns:
            ObjectStore: Finalized store
        """
        store = ObjectStore(layout=layout or OutputLayout(), single_cluster=single_cluster)
        driver = ClusterDriver(admins, store, RoleResolver(self.role_library), idp_name=idp_name)

        driver.ensure_cluster(ClusterType.HOST)
        driver.ensure_cluster(ClusterType.MEMBER)

        for member in admins.separate_components():
            driver.ensure_cluster(ClusterType.MEMBER, member.name)

        logger.debug(f"Compiled {len(store)} manifest(s)")
        return store

    def generate_admin_manifests(
        self,
        kubesaw_admins_file: str,
        out_dir: str,
        single_cluster: bool = False,
        host_root_dir: str = FileConstants.DEFAULT_HOST_ROOT_DIR,
        member_root_dir: str = FileConstants.DEFAULT_MEMBER_ROOT_DIR,
        idp_name: str = KubernetesConstants.DEFAULT_IDP_NAME,
        file_writer: Optional[FileWriter] = None
    ) -> int:
        """
        Generate the user-management manifests from a kubesaw-admins file

        The output directory is wiped before compiling, so a failed run never
        leaves a mix of old and new manifests behind.

        Args:
            kubesaw_admins_file: Path to the kubesaw-admins file
            out_dir: Output directory
            single_cluster: Host and member are deployed to the same cluster
            host_root_dir: Root directory name for host manifests
            member_root_dir: Root directory name for member manifests
            idp_name: Identity provider name used in Identity manifests
            file_writer: Destination of the files (defaults to the local filesystem)

        Returns:
            int: Number of files written
        """
        admins = self.config_manager.load_admins(kubesaw_admins_file)
        self.validate_admins(admins, single_cluster)

        writer = file_writer or LocalFileWriter(out_dir)
        writer.wipe()

        layout = OutputLayout(host_root_dir=host_root_dir, member_root_dir=member_root_dir)
        store = self.compile_manifests(admins, single_cluster=single_cluster, layout=layout, idp_name=idp_name)
        return ManifestTreeWriter(writer, layout).write_manifests(store)


def create_admin_manifests_manager(debug: bool = False, roles_dir: Optional[str] = None) -> AdminManifestsManager:
    """
    Factory function to create AdminManifestsManager with default dependencies

    Args:
        debug: Enable debug logging
        roles_dir: Directory with the Role templates (optional)

    Returns:
        AdminManifestsManager: Configured instance
    """
    return AdminManifestsManager(role_provider=RoleTemplateLibrary(roles_dir), debug=debug)


def create_argument_parser():
    """
    Create and configure argument parser with subcommands.

    Uses parent parsers to eliminate redundancy across commands.
    """

    # Common parser: arguments shared by ALL commands
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument(
        '--debug', action='store_true', help='Enable debug logging'
    )
    common_parser.add_argument(
        '--examples', action='store_true',
        help='Show usage examples for this command'
    )

    # Main parser with custom help override
    parser = argparse.ArgumentParser(
        prog='admin-manifests',
        description='admin-manifests - Generate user-management manifests from a kubesaw-admins file',
        add_help=False  # Disable default help to override behavior
    )
    parser.add_argument(
        '-h', '--help',
        action='store_true',
        help='Show this help message and exit'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # generate subcommand; defaults are applied after merging the config file
    generate_parser = subparsers.add_parser(
        'generate',
        parents=[common_parser],
        help='Generate user-management manifests',
        description=(
            'Reads the kubesaw-admins file and based on the content it generates '
            'user-management RBAC and manifests'
        )
    )
    generate_parser.add_argument('-c', '--kubesaw-admins', help='Use the given kubesaw-admins file')
    generate_parser.add_argument(
        '-o', '--out-dir', help='Directory where generated manifests should be stored'
    )
    generate_parser.add_argument(
        '-s', '--single-cluster', action='store_true',
        help=(
            'If host and member are deployed to the same cluster. '
            'Cannot be used with separateKustomizeComponent set in one of the members.'
        )
    )
    generate_parser.add_argument(
        '--host-root-dir', help=f'The root directory name for host manifests (default: {FileConstants.DEFAULT_HOST_ROOT_DIR})'
    )
    generate_parser.add_argument(
        '--member-root-dir',
        help=f'The root directory name for member manifests (default: {FileConstants.DEFAULT_MEMBER_ROOT_DIR})'
    )
    generate_parser.add_argument(
        '--idp-name',
        help=f'Identity provider name to be used in Identity CRs (default: {KubernetesConstants.DEFAULT_IDP_NAME})'
    )
    generate_parser.add_argument('--roles-dir', help='Directory with host.yaml and member.yaml Role templates')
    generate_parser.add_argument('--config', help='Configuration file path')

    # generate-config subcommand: kubesaw-admins template generator
    generate_config_parser = subparsers.add_parser(
        'generate-config',
        parents=[common_parser],
        help='Generate kubesaw-admins template',
        description='Generate a commented kubesaw-admins template file'
    )
    generate_config_parser.add_argument('--output', help='Output directory for the generated template')

    return parser


def handle_examples(command_name: str) -> bool:
    """Handle examples flag for any command. Returns True if examples were shown."""
    help_manager = HelpManager()
    help_manager.show_help(f"{command_name.replace('-', '_')}_examples")
    return True


# Values applied when neither the command line nor the config file set them
GENERATE_DEFAULTS = {
    'host_root_dir': FileConstants.DEFAULT_HOST_ROOT_DIR,
    'member_root_dir': FileConstants.DEFAULT_MEMBER_ROOT_DIR,
    'idp_name': KubernetesConstants.DEFAULT_IDP_NAME,
}


def merge_config_with_args(args, config, command_name: str):
    """
    Merge configuration file values with command-line arguments.

    Only attributes that are None, empty or False (not provided via command
    line) are updated, so command-line arguments take precedence.

    Args:
        args: Parsed command-line arguments object
        config: Loaded configuration dictionary
        command_name: Name of the command (used as config section key)
    """
    if not config:
        return

    if 'global' in config:
        global_config = config['global'] or {}
        if hasattr(args, 'debug') and not args.debug and global_config.get('debug'):
            args.debug = global_config['debug']

    if command_name in config:
        command_config = config[command_name] or {}

        for config_key, config_value in command_config.items():
            if config_value is not None and hasattr(args, config_key):
                current_value = getattr(args, config_key)
                if current_value is None or current_value == '' or current_value is False:
                    setattr(args, config_key, config_value)


def apply_generate_defaults(args):
    """Fill in defaults for generate options left unset"""
    for key, default in GENERATE_DEFAULTS.items():
        if not getattr(args, key, None):
            setattr(args, key, default)


def handle_generate_command(args, manager, config):
    """Handle generate command execution."""
    if hasattr(args, 'examples') and args.examples:
        return handle_examples('generate')

    merge_config_with_args(args, config, 'generate')
    apply_generate_defaults(args)

    if not args.kubesaw_admins:
        print(
            "Error: --kubesaw-admins is required. "
            "Use 'admin-manifests generate --examples' to see usage examples.",
            file=sys.stderr
        )
        sys.exit(1)
    if not args.out_dir:
        print(
            "Error: --out-dir is required. "
            "Use 'admin-manifests generate --examples' to see usage examples.",
            file=sys.stderr
        )
        sys.exit(1)

    written = manager.generate_admin_manifests(
        kubesaw_admins_file=args.kubesaw_admins,
        out_dir=args.out_dir,
        single_cluster=args.single_cluster,
        host_root_dir=args.host_root_dir,
        member_root_dir=args.member_root_dir,
        idp_name=args.idp_name
    )
    print(f"✓ Generated {written} file(s) in {args.out_dir}")


def handle_generate_config_command(args, manager, config):
    """
    Handle generate-config command - prints the kubesaw-admins template to stdout
    or writes it to the --output directory.
    """
    if hasattr(args, 'examples') and args.examples:
        return handle_examples('generate-config')

    if args.output:
        config_file = manager.generate_config(args.output)
        print(f"✓ Configuration template generated: {config_file}")
    else:
        print(manager.config_manager.get_config_template_content())


# Command dispatcher mapping
COMMAND_HANDLERS = {
    'generate': handle_generate_command,
    'generate-config': handle_generate_config_command,
}


def handle_early_exit_flags(args, argv=None):
    """Handle early-exit flags like --help and --examples"""
    argv = sys.argv[1:] if argv is None else argv

    # No arguments at all
    if not argv:
        HelpManager().show_help()
        return True

    # --help without subcommand shows main_help.txt
    if hasattr(args, 'help') and args.help and not args.command:
        HelpManager().show_help()
        return True

    if hasattr(args, 'examples') and args.examples and args.command:
        return handle_examples(args.command)

    return False


def load_configuration(args) -> Optional[ConfigManager]:
    """Load the configuration file given via --config, if any"""
    if hasattr(args, 'config') and args.config:
        config_manager = ConfigManager()
        config_manager.load_config(args.config)
        return config_manager
    return None


def configure_manager(args, config_manager: Optional[ConfigManager]):
    """Configure the manager with settings from args and config"""
    debug = getattr(args, 'debug', False)
    roles_dir = getattr(args, 'roles_dir', None)

    if config_manager:
        debug = debug or config_manager.get_value('global.debug', False)
        roles_dir = roles_dir or config_manager.get_value('generate.roles_dir')

    return create_admin_manifests_manager(debug=debug, roles_dir=roles_dir)


def dispatch_command(args, manager, config):
    """Dispatch to the appropriate command handler"""
    handler = COMMAND_HANDLERS.get(args.command)
    if handler:
        handler(args, manager, config)
    else:
        available = ', '.join(manager.help_manager.list_available_commands())
        print(f"Unknown command: {args.command}. Available commands: {available}", file=sys.stderr)
        sys.exit(1)


def main(argv=None):
    """Main entry point with unified execution flow"""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if handle_early_exit_flags(args, argv):
        return

    if not args.command:
        print("Error: No command specified. Use --help for usage information.", file=sys.stderr)
        sys.exit(1)

    setup_logging(getattr(args, 'debug', False))

    try:
        config_manager = load_configuration(args)
        if config_manager and config_manager.get_section('global').get('debug') and not args.debug:
            setup_logging(True)

        manager = configure_manager(args, config_manager)
        dispatch_command(args, manager, config_manager.config_data if config_manager else None)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(1)
    except AdminManifestsError as e:
        logger.error(f"{e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
