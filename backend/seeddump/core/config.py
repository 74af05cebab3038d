"""Environment-derived dump options.

Every option is read from a plain mapping (normally `os.environ`) so the job
runner, tests and embedding applications share one parser:

- MODEL / MODELS, MODELS_EXCLUDE: comma separated model names.
- LIMIT, BATCH_SIZE: integers.
- APPEND, IMPORT, STDOUT: booleans, true only for the string "true" (any case).
- EXCLUDE: comma separated column names.
- FILE: output path, `db/seeds.jsonl` by default.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from seeddump.core.errors import ConfigError


DEFAULT_FILE = "db/seeds.jsonl"


@dataclass(frozen=True, slots=True)
class DumpOptions:
    limit: Optional[int]
    batch_size: Optional[int]
    append: bool
    import_: bool
    stdout: bool
    exclude: Optional[tuple[str, ...]]
    file: str

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "DumpOptions":
        return cls(
            limit=retrieve_limit_value(env),
            batch_size=retrieve_batch_size_value(env),
            append=retrieve_append_value(env),
            import_=retrieve_import_value(env),
            stdout=retrieve_stdout_value(env),
            exclude=retrieve_exclude_value(env),
            file=retrieve_file_value(env),
        )


def _split_list(value: Optional[str]) -> list[str]:
    return [x.strip() for x in (value or "").split(",") if x.strip()]


def parse_boolean_value(value: object) -> bool:
    return str(value if value is not None else "").lower() == "true"


def retrieve_integer_value(key: str, env: Mapping[str, str]) -> Optional[int]:
    raw = env.get(key)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer (got {raw!r}).") from e


def retrieve_model_names(env: Mapping[str, str]) -> Optional[list[str]]:
    """Model names from MODEL (takes precedence) or MODELS; None means all models."""
    raw = env.get("MODEL") or env.get("MODELS")
    if not raw:
        return None
    return _split_list(raw)


def retrieve_models_exclude(env: Mapping[str, str]) -> list[str]:
    return _split_list(env.get("MODELS_EXCLUDE"))


def retrieve_limit_value(env: Mapping[str, str]) -> Optional[int]:
    return retrieve_integer_value("LIMIT", env)


def retrieve_batch_size_value(env: Mapping[str, str]) -> Optional[int]:
    return retrieve_integer_value("BATCH_SIZE", env)


def retrieve_append_value(env: Mapping[str, str]) -> bool:
    return parse_boolean_value(env.get("APPEND"))


def retrieve_import_value(env: Mapping[str, str]) -> bool:
    return parse_boolean_value(env.get("IMPORT"))


def retrieve_stdout_value(env: Mapping[str, str]) -> bool:
    return parse_boolean_value(env.get("STDOUT"))


def retrieve_exclude_value(env: Mapping[str, str]) -> Optional[tuple[str, ...]]:
    if not env.get("EXCLUDE"):
        return None
    return tuple(_split_list(env["EXCLUDE"]))


def retrieve_file_value(env: Mapping[str, str]) -> str:
    return env.get("FILE") or DEFAULT_FILE
