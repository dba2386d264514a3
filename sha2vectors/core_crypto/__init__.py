# Core Crypto Module
"""
Hash engines including:
- From-scratch SHA-2 family (SHA-224/256/384/512, SHA-512/256)
- The streaming engine contract over caller-owned state buffers
- cryptography-backed reference digests
"""

# The engine layer is imported on first attribute access
def __getattr__(name):
    """Lazy import of the public engine API."""
    from . import engine
    return getattr(engine, name)

__all__ = [
    'HashEngine',
    'Sha2Engine',
    'EngineError',
    'StateError',
    'DeserializationError',
    'UnknownAlgorithm',
    'ENGINES',
    'get_engine',
]
