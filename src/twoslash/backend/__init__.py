from twoslash.backend.cache import BackendCache, compute_options_hash
from twoslash.backend.memory import DiagnosticRule, InMemoryBackend

__all__ = [
    "BackendCache",
    "DiagnosticRule",
    "InMemoryBackend",
    "compute_options_hash",
]
