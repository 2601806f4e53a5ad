"""
Help Manager

Manages granular help text for different commands and operations.
"""

from pathlib import Path
from typing import Optional


class HelpManager:
    """Manages help text and documentation"""

    def __init__(self, help_dir: Optional[Path] = None):
        self.help_dir = Path(help_dir) if help_dir else Path(__file__).parent.parent / "help"

    def get_help(self, command: str) -> str:
        """Get help text for a specific command"""
        # Convert dashes to underscores for file names
        command_file = command.replace('-', '_')
        help_file = self.help_dir / f"{command_file}_help.txt"

        if help_file.exists():
            with open(help_file, 'r', encoding='utf-8') as f:
                return f.read()
        else:
            return f"No help available for command: {command}"

    def get_main_help(self) -> str:
        """Get main help text"""
        return self.get_help("main")

    def list_available_commands(self) -> list:
        """List all commands with a help file, examples excluded"""
        commands = []

        for help_file in self.help_dir.glob("*_help.txt"):
            command = help_file.stem[:-len("_help")]
            if command != "main" and not command.endswith("_examples"):
                commands.append(command.replace('_', '-'))

        return sorted(commands)

    def show_help(self, command: Optional[str] = None) -> None:
        """Show help for command or main help if no command specified"""
        if command is None:
            print(self.get_main_help())
        else:
            print(self.get_help(command))
