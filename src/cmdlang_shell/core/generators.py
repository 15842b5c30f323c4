# src/cmdlang_shell/core/generators.py
from __future__ import annotations

import logging
import random
import re
import string
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from cmdlang_shell.core.errors import UnexpectedTokenError

logger = logging.getLogger(__name__)

# $NAME or $NAME[arg1,arg2]
GENERATOR_PATTERN = re.compile(r"\$([A-Z]+)(?:\[([^\]]*)\])?")

_DEFAULT_MIN = 1
_DEFAULT_MAX = 10000


class ParameterGenerator:
    """
    Expands generator placeholders inside string values before the values
    are bound to a command's arguments.

    `$INTITER[start,step]` keeps a counter per placeholder text; counters live
    until reset_stores() is called (the engine does it on reset_state).
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._stores: Dict[str, int] = {}
        self._generators: Dict[str, Callable[[List[str], str], Any]] = {
            "STR": self._gen_str,
            "INT": self._gen_int,
            "FLOAT": self._gen_float,
            "INTSEQ": self._gen_int_seq,
            "INTITER": self._gen_int_iter,
            "EMAIL": self._gen_email,
            "URL": self._gen_url,
            "UUID": lambda _args, _key: str(uuid.uuid4()),
            "NOW": lambda _args, _key: datetime.now().isoformat(sep=" ", timespec="seconds"),
            "DATE": lambda _args, _key: datetime.now().date().isoformat(),
            "TIME": lambda _args, _key: datetime.now().time().isoformat(timespec="seconds"),
        }

    def reset_stores(self) -> None:
        self._stores.clear()

    def names(self) -> List[str]:
        return sorted(self._generators)

    def eval(self, values: List[Any]) -> List[Any]:
        return [self.eval_value(value) for value in values]

    def eval_value(self, value: Any) -> Any:
        if not isinstance(value, str) or "$" not in value:
            return value
        match = GENERATOR_PATTERN.fullmatch(value.strip())
        if match and match.group(1) in self._generators:
            # A lone generator keeps the generated type (int, float...)
            return self._run(match)
        return GENERATOR_PATTERN.sub(lambda m: str(self._run(m)), value)

    def _run(self, match: re.Match) -> Any:
        name, raw_args = match.group(1), match.group(2)
        generator = self._generators.get(name)
        if generator is None:
            return match.group(0)
        args = [item.strip() for item in raw_args.split(",")] if raw_args else []
        try:
            return generator(args, match.group(0))
        except ValueError as err:
            raise UnexpectedTokenError(f"Invalid generator '{match.group(0)}': {err}") from err

    # --- generators ---

    @staticmethod
    def _bounds(args: List[str], default_min: int, default_max: int) -> tuple[int, int]:
        if not args:
            return default_min, default_max
        if len(args) == 1:
            return int(args[0]), int(args[0])
        return int(args[0]), int(args[1])

    def _gen_str(self, args: List[str], _key: str) -> str:
        min_len, max_len = self._bounds(args, 8, 8)
        length = self._rng.randint(min_len, max_len)
        return "".join(self._rng.choice(string.ascii_letters + string.digits) for _ in range(length))

    def _gen_int(self, args: List[str], _key: str) -> int:
        return self._rng.randint(*self._bounds(args, _DEFAULT_MIN, _DEFAULT_MAX))

    def _gen_float(self, args: List[str], _key: str) -> float:
        low, high = (float(args[0]), float(args[1])) if len(args) >= 2 else (_DEFAULT_MIN, _DEFAULT_MAX)
        return round(self._rng.uniform(low, high), 2)

    def _gen_int_seq(self, args: List[str], _key: str) -> str:
        low, high = self._bounds(args, _DEFAULT_MIN, 10)
        return ",".join(str(num) for num in range(low, high + 1))

    def _gen_int_iter(self, args: List[str], key: str) -> int:
        start = int(args[0]) if args else 1
        step = int(args[1]) if len(args) > 1 else 1
        if key in self._stores:
            self._stores[key] += step
        else:
            self._stores[key] = start
        return self._stores[key]

    def _gen_email(self, _args: List[str], key: str) -> str:
        return f"{self._gen_str(['6', '10'], key).lower()}@{self._gen_str(['4', '8'], key).lower()}.com"

    def _gen_url(self, _args: List[str], key: str) -> str:
        return f"https://www.{self._gen_str(['4', '10'], key).lower()}.com"
