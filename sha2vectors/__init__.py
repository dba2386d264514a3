# sha2vectors
"""
Conformance verification for streaming SHA-2 engines against NIST CAVS
`.rsp` test vectors.

Modules:
- core_crypto: SHA-2 engines and the streaming engine contract
- vectors: `.rsp` parser and writer
- conformance: generic runner and the vector group registry
"""

from .logs import configure_default_logging

__version__ = "0.1.0"

configure_default_logging()
