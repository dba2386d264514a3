# Vectors Module
"""
NIST CAVS `.rsp` test vector handling including:
- Parser with header, multi-field records and empty-message records
- Writer and generator for synthesized vector files
"""

from .rsp_parser import (
    TestVector,
    VectorFile,
    VectorFileError,
    VectorFileNotFound,
    MalformedVectorFile,
    RspParser,
    decode_hex,
    parse_vector_file,
    parse_vector_text,
)

__all__ = [
    'TestVector',
    'VectorFile',
    'VectorFileError',
    'VectorFileNotFound',
    'MalformedVectorFile',
    'RspParser',
    'decode_hex',
    'parse_vector_file',
    'parse_vector_text',
]
