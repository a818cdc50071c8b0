"""
Validation state module.

Holds the transient, process-local state of validation conversations:
- SessionValidationStore: one ValidationState per session key
- ValidationCache: short-lived cache of per-attempt validation results
- session key derivation and timestamp parsing
"""

from .validation_store import (
    SessionValidationStore,
    current_millis,
    generate_session_key,
    generate_multi_offense_session_key,
    parse_key_timestamp
)
from .validation_cache import (
    ValidationCache,
    get_validation_cache_key
)

__all__ = [
    'SessionValidationStore',
    'ValidationCache',
    'current_millis',
    'generate_session_key',
    'generate_multi_offense_session_key',
    'get_validation_cache_key',
    'parse_key_timestamp'
]
