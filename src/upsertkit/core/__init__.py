"""
Core package aggregator for upsert contracts (grammar, errors, constants, typing).

## Contracts (single source of truth)
- Grammar: HashFunction, ConsistencyMode, UpsertMode enums and parsers.
- Errors: UpsertError, ConfigurationError, SchemaMismatchError.
- Constants: defaults for optional upsert context fields.
- Typing: column and path aliases.

## Notes
- Zero‑IO policy: stdlib only.
- Naming policy: enum `.value` is lower_snake.

## Downstream usage
- upsertkit.upsert: builds UpsertContext instances and table config models on top of these contracts.

## Examples
```python
from upsertkit.core.grammar import HashFunction, hash_function_from_value
hash_function_from_value("murmur3") == HashFunction.MURMUR3  # True
```
"""
