"""JSON-lines seed writer.

One line per batch of rows:

    {"model": "User", "table": "users", "rows": [{"name": "ada"}, ...]}

or, with `import_`, the column-array form suited to bulk inserts:

    {"model": "User", "table": "users", "columns": ["name"], "values": [["ada"]]}
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from seeddump.core.config import DEFAULT_FILE
from seeddump.core.errors import ConfigError, MetadataUnavailable
from seeddump.metadata.registry import ModelDescriptor


DEFAULT_BATCH_SIZE = 1000
DEFAULT_EXCLUDE: tuple[str, ...] = ("id", "created_at", "updated_at")

logger = logging.getLogger("seeddump.export")


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (uuid.UUID, Decimal)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    raise TypeError(f"Cannot serialize {type(value).__name__} value for seed output.")


def render_batch(model: ModelDescriptor, columns: Sequence[str], rows: Iterable[Sequence[Any]], *, import_: bool = False) -> str:
    payload: dict[str, Any] = {"model": model.name, "table": model.table_name}
    if import_:
        payload["columns"] = list(columns)
        payload["values"] = [list(r) for r in rows]
    else:
        payload["rows"] = [dict(zip(columns, r)) for r in rows]
    return json.dumps(payload, ensure_ascii=False, default=_json_default)


def dump(
    session: Session,
    model: ModelDescriptor,
    *,
    limit: Optional[int] = None,
    batch_size: Optional[int] = None,
    append: bool = False,
    exclude: Optional[Sequence[str]] = None,
    file: str = DEFAULT_FILE,
    stdout: bool = False,
    import_: bool = False,
) -> int:
    """Write the rows of `model` to `file`; returns the number of rows written.

    Rows are read in primary key order. The file is truncated unless
    `append` is set, even when the table turns out to be empty.
    """
    table = model.source
    if table is None:
        raise MetadataUnavailable(f"Model {model.name!r} has no table to read rows from.")

    excluded = set(DEFAULT_EXCLUDE if exclude is None else exclude)
    columns = [c for c in table.columns if c.name not in excluded]
    if not columns:
        raise ConfigError(f"EXCLUDE leaves no columns to dump for {model.name}.")
    names = [c.name for c in columns]

    stmt = select(*columns).select_from(table).order_by(*table.primary_key.columns)
    if limit is not None:
        stmt = stmt.limit(limit)
    size = batch_size or DEFAULT_BATCH_SIZE

    path = Path(file)
    path.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    with path.open("a" if append else "w", encoding="utf-8") as fh:
        result = session.execute(stmt.execution_options(yield_per=size))
        for batch in result.partitions(size):
            line = render_batch(model, names, batch, import_=import_) + "\n"
            fh.write(line)
            if stdout:
                sys.stdout.write(line)
            written += len(batch)

    logger.debug("dumped %d rows of %s into %s", written, model.name, path)
    return written
