# src/cmdlang_shell/core/context/shell_context.py
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

if TYPE_CHECKING:
    from cmdlang_shell.core.xngine import ExecuteEngine

logger = logging.getLogger(__name__)


class ShellContext:
    """
    Session state of the shell.

    `_vars` is the named value table: the engine merges the top level
    assignments of every evaluation into it, so variables persist between
    submissions until reset() is called.

    Handlers write their output through ShellContext.print(), so a silent
    evaluation can mute its own commands without touching the output of other
    evaluations running at the same time.
    """

    silent = False

    def __init__(self, engine: Optional["ExecuteEngine"] = None):
        self._vars: Dict[str, Any] = {}
        self.engine = engine
        self.should_exit = False
        self.prompt_session: Optional[Any] = None

    def set(self, key: str, value: Any) -> None:
        """Sets a context variable."""
        self._vars[key] = value

    def get(self, key: str) -> Optional[Any]:
        """Retrieves a context variable. Returns None if key does not exist."""
        return self._vars.get(key)

    def has(self, key: str) -> bool:
        return key in self._vars

    def update(self, values: Mapping[str, Any]) -> None:
        """Sets several variables at once (the assignments of one evaluation)."""
        self._vars.update(values)

    def delete(self, key: str) -> bool:
        if key not in self._vars:
            return False
        del self._vars[key]
        return True

    def names(self) -> List[str]:
        return list(self._vars)

    def variables(self) -> Dict[str, Any]:
        return dict(self._vars)

    def reset(self) -> None:
        self._vars.clear()
        logger.debug("Context variables cleared.")

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Command output; dropped when the context is silenced."""
        if not self.silent:
            print(*args, **kwargs)

    def silenced(self) -> "ShellContext":
        """A view of this session whose print() output is discarded."""
        if self.silent:
            return self
        return SilentShellContext(self)

    def __repr__(self) -> str:
        return f"<ShellContext vars_count={len(self._vars)} should_exit={self.should_exit}>"


class SilentShellContext(ShellContext):
    """Shares variables, engine and exit flag with its parent; only the output differs."""

    silent = True

    def __init__(self, parent: ShellContext):
        self._parent = parent
        self._vars = parent._vars
        self.engine = parent.engine
        self.prompt_session = parent.prompt_session

    @property
    def should_exit(self) -> bool:
        return self._parent.should_exit

    @should_exit.setter
    def should_exit(self, value: bool) -> None:
        self._parent.should_exit = value
