"""Load KEY=VALUE pairs from a .env file into the process environment.

Blank lines and lines starting with ``#`` are skipped. Variables that are
already set in the environment are never overwritten.
"""

from __future__ import annotations

import os
from typing import Iterable, Optional, Tuple, Union

PathLike = Union[str, "os.PathLike[str]"]


class EnvFileError(ValueError):
    """A .env file holds a malformed line or a value that cannot be set."""


def load(path: PathLike) -> None:
    """Read the .env file at *path* and export its pairs.

    Values already present in the environment take precedence over the
    file. A missing file raises ``FileNotFoundError``; malformed content
    raises :class:`EnvFileError`.
    """
    with open(path, encoding="utf-8") as stream:
        try:
            pairs = parse(stream)
        except EnvFileError as err:
            raise EnvFileError(f"parse {path}: {err}") from err

    for key, value in pairs.items():
        if key in os.environ:
            continue
        try:
            os.environ[key] = value
        except ValueError as err:
            raise EnvFileError(f"setenv {path}: {err}") from err


def parse(stream: Iterable[str]) -> dict[str, str]:
    """Parse .env-formatted lines into a dict.

    Later occurrences of a key replace earlier ones. A malformed line
    raises :class:`EnvFileError` naming its line number.
    """
    result: dict[str, str] = {}
    for number, line in enumerate(stream, start=1):
        try:
            entry = _parse_line(line)
        except ValueError as err:
            raise EnvFileError(f"line {number}: {err}") from err
        if entry is not None:
            key, value = entry
            result[key] = value
    return result


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    """Split one line into key and value; None for blanks and comments."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    key, sep, value = line.partition("=")
    if not sep:
        raise ValueError(f"missing '=' in line: {line!r}")

    key = key.strip()
    if not key:
        raise ValueError(f"empty key in line: {line!r}")
    return key, value.strip()