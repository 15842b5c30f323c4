# src/cmdlang_shell/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_shell_package_root() -> Path:
        """Returns the directory of the cmdlang_shell package (holds settings.json)."""
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_handlers_root() -> Path:
        return PathUtils.get_shell_package_root() / "core" / "handlers"

    # --- User specific paths ---

    @staticmethod
    def get_alias_file() -> Path:
        """
        Returns the path to the alias store in the user's home directory.
        (e.g., ~/.cmdlang_aliases.json)
        """
        return Path.home() / ".cmdlang_aliases.json"

    @staticmethod
    def get_shell_history_file() -> Path:
        """
        Returns the path to the shell history file in the user's home directory.
        (e.g., ~/.cmdlang_shell_history)
        """
        return Path.home() / ".cmdlang_shell_history"
