from __future__ import annotations

import os
from pathlib import Path


def load_env(path: Path | None = None) -> None:
    """
    Populate os.environ from dotenv files.

    `.env` is read first, then `.env.local` (only when no explicit path is
    given). `.env.local` may override `.env`, while variables exported in the
    shell before startup always win over both files.
    """
    shell_keys = set(os.environ.keys())

    env_path = path or _default_env_path()
    if env_path.exists():
        _apply_env_file(env_path, allow_override=False)

    if path is None:
        local_env_path = env_path.parent / ".env.local"
        if local_env_path.exists():
            _apply_env_file(local_env_path, allow_override=True, protected_keys=shell_keys)


def parse_env_lines(lines: list[str]) -> dict[str, str]:
    """Parse KEY=VALUE lines, skipping blanks, comments and malformed entries."""
    values: dict[str, str] = {}
    for raw_line in lines:
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        values[key] = _strip_quotes(value.strip())
    return values


def _apply_env_file(env_path: Path, allow_override: bool = False, protected_keys: set[str] | None = None) -> None:
    protected = protected_keys or set()
    parsed = parse_env_lines(env_path.read_text(encoding="utf-8").splitlines())
    for key, value in parsed.items():
        if key in protected:
            continue
        if not allow_override and key in os.environ:
            continue
        os.environ[key] = value


def _default_env_path() -> Path:
    return Path(__file__).resolve().parents[2] / ".env"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in {'"', "'"}:
        return value[1:-1]
    return value


__all__ = ["load_env", "parse_env_lines"]
