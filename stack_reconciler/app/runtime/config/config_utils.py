"""``${VAR}`` placeholder expansion for config.yaml."""

import os
import re

PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:[-?])(?P<arg>[^}]*))?\}")


def _expand(match: re.Match[str]) -> str:
    name, op, arg = match.group("name", "op", "arg")
    value = os.getenv(name)
    if value is not None:
        return value
    if op == ":-":
        return arg
    if op == ":?":
        raise ValueError(f"Required environment variable {name}: {arg}")
    raise ValueError(f"Required environment variable {name} not set")


def substitute_env_vars(text: str) -> str:
    """Expand environment placeholders in ``text``.

    ``${NAME}`` requires NAME to be set, ``${NAME:-fallback}`` falls back when
    it is unset and ``${NAME:?message}`` fails with ``message``.

    Raises:
        ValueError: If a required variable is unset
    """
    return PLACEHOLDER.sub(_expand, text)
