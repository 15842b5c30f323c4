# src/cmdlang_shell/core/managers/alias_manager.py
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from cmdlang_shell.core.managers.config_manager import config_manager
from cmdlang_shell.core.utils.path_utils import PathUtils
from cmdlang_shell.model import Alias

logger = logging.getLogger(__name__)


class AliasManager:
    """
    Persists the user aliases in a JSON file.

    Implements the alias lookup the engine needs (`get(name) -> template`).
    """

    def __init__(self, alias_file: Optional[Union[str, Path]] = None):
        configured = alias_file or config_manager.get_nested("aliases.file")
        self._alias_file = Path(configured).expanduser() if configured else PathUtils.get_alias_file()
        self._alias_list_adapter = TypeAdapter(List[Alias])

    @property
    def path(self) -> Path:
        return self._alias_file

    def load_all(self) -> List[Alias]:
        """Loads all aliases from the JSON file."""
        if not self._alias_file.exists():
            return []
        try:
            return self._alias_list_adapter.validate_json(self._alias_file.read_bytes())
        except (OSError, ValidationError) as e:
            logger.error("Failed to load or parse aliases from %s: %s", self._alias_file, e)
            return []

    def _save_all(self, aliases: List[Alias]) -> None:
        """Atomically saves the entire list of aliases to the file."""
        sorted_aliases = sorted(aliases, key=lambda a: a.name)
        json_bytes = self._alias_list_adapter.dump_json(sorted_aliases, indent=2)

        self._alias_file.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._alias_file.with_suffix(".tmp")
        temp_path.write_bytes(json_bytes)
        os.replace(temp_path, self._alias_file)

    def as_dict(self) -> Dict[str, str]:
        return {alias.name: alias.command for alias in self.load_all()}

    def get(self, name: str) -> Optional[str]:
        """Returns the template of the alias `name`, or None."""
        return next((a.command for a in self.load_all() if a.name == name), None)

    def save(self, name: str, command: str) -> Alias:
        """Creates the alias or overwrites the existing one with the same name."""
        alias = Alias(name=name, command=command)
        aliases = [a for a in self.load_all() if a.name != name]
        aliases.append(alias)
        self._save_all(aliases)
        logger.info("Alias '%s' saved.", name)
        return alias

    def delete(self, name: str) -> bool:
        """Deletes the alias `name`. Returns True if it existed."""
        aliases = self.load_all()
        to_keep = [a for a in aliases if a.name != name]
        if len(to_keep) < len(aliases):
            self._save_all(to_keep)
            logger.info("Alias '%s' deleted.", name)
            return True
        return False
