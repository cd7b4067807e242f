"""Expand environment variables inside of a path template.

Supported forms:
    ~/rest          home directory (only as the first component)
    ${VAR}          value of VAR; error if VAR is unset
    ${VAR:-default} value of VAR if set and non-empty, else default
    ${VAR:-$OTHER}  default taken from another variable
    $VAR            value of VAR; left untouched if unset
    $$              a literal dollar sign
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from hoard_engine.errors import ExpandEnvError

logger = logging.getLogger("hoard")


def _is_name_char(c: str) -> bool:
    return c.isalnum() or c == "_"


def _expand_default(default: str, env: Mapping[str, str], template: str) -> str:
    if default.startswith("$"):
        return expand_env_in_str(default, env, template=template)
    return default


def expand_env_in_str(
    text: str,
    environ: Mapping[str, str] | None = None,
    template: str | None = None,
) -> str:
    """Expand variable references in *text* without touching ``~``.

    Raises:
        ExpandEnvError: A ``${VAR}`` reference is unset and has no default.
    """
    env = os.environ if environ is None else environ
    source = template if template is not None else text
    out: list[str] = []
    i = 0
    n = len(text)

    while i < n:
        dollar = text.find("$", i)
        if dollar == -1:
            out.append(text[i:])
            break
        out.append(text[i:dollar])
        nxt = text[dollar + 1] if dollar + 1 < n else ""

        if nxt == "{":
            close = text.find("}", dollar + 2)
            if close == -1:
                out.append("${")
                i = dollar + 2
                continue
            body = text[dollar + 2:close]
            name, sep, default = body.partition(":-")
            value = env.get(name)
            if sep:
                if value:
                    out.append(value)
                else:
                    out.append(_expand_default(default, env, source))
            elif value is not None:
                out.append(value)
            else:
                raise ExpandEnvError(name, source)
            i = close + 1
        elif nxt and _is_name_char(nxt):
            end = dollar + 1
            while end < n and _is_name_char(text[end]):
                end += 1
            name = text[dollar + 1:end]
            value = env.get(name)
            out.append(value if value is not None else text[dollar:end])
            i = end
        elif nxt == "$":
            out.append("$")
            i = dollar + 2
        else:
            out.append("$")
            i = dollar + 1

    return "".join(out)


def expand_env_in_path(
    template: str | Path,
    environ: Mapping[str, str] | None = None,
    home: Path | str | None = None,
) -> Path:
    """Expand ``~`` and environment variables in a path template.

    Args:
        template: Path template from the configuration file.
        environ: Variables to expand from. Defaults to the process environment.
        home: Home directory for ``~``. Defaults to ``Path.home()``.

    Returns:
        The expanded path.

    Raises:
        ExpandEnvError: A ``${VAR}`` reference is unset and has no default.
    """
    text = str(template)
    logger.debug("expanding path template %r", text)

    if text.startswith("~"):
        rest = text[1:]
        if rest == "" or rest.startswith(("/", "\\")):
            home_dir = str(home) if home is not None else str(Path.home())
            text = home_dir + rest

    return Path(expand_env_in_str(text, environ, template=str(template)))
