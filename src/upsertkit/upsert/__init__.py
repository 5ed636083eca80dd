"""
upsertkit.upsert: Upsert context construction for table partitions.

## Responsibilities
- Build immutable UpsertContext instances through a validating UpsertContextBuilder.
- Seed builders from process settings (UpsertSettings) or table config models (new_builder).
- Cross-check a built context against its record schema (validate).

## Public API
- UpsertContext: frozen per-partition upsert configuration.
- UpsertContextBuilder: staged setters plus build().
- UpsertSettings: builder defaults loaded from env/TOML.
- Schema, UpsertConfig, TableConfig, new_builder: pydantic table inputs.

## Import DAG discipline
- Depends on stdlib, pydantic, polars and upsertkit.core.*.

## Examples
```python
from upsertkit.upsert import UpsertContext

ctx = (
    UpsertContext.builder()
    .set_table_config(table_config)
    .set_schema(schema)
    .set_primary_key_columns(["id"])
    .set_comparison_columns(["updated_at"])
    .set_table_index_dir("/data/t1")
    .build()
)
```
"""

from __future__ import annotations

from .config import UpsertSettings
from .context import UpsertContext, UpsertContextBuilder
from .table_config import Schema, TableConfig, UpsertConfig, new_builder

__all__ = [
    "UpsertContext",
    "UpsertContextBuilder",
    "UpsertSettings",
    "Schema",
    "TableConfig",
    "UpsertConfig",
    "new_builder",
]
