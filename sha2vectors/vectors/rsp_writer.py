"""
CAVS Response File Writer

Renders VectorFile objects back into `.rsp` text and synthesizes new
vector files whose expected digests come from the cryptography backend.
"""

import secrets
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

import structlog

from ..core_crypto.reference import reference_digest
from ..core_crypto.sha2 import VARIANTS
from .rsp_parser import TestVector, VectorFile


log = structlog.get_logger(__name__)

GENERATOR_LABEL = "Generated by sha2vectors generate, not official NIST CAVS vectors"
EMPTY_MESSAGE_HEX = "00"  # CAVS writes a placeholder byte for Len = 0


def format_vector_file(vector_file: VectorFile, comments: Optional[Sequence[str]] = None) -> str:
    """
    Render a VectorFile as `.rsp` text.

    Args:
        vector_file: File to render
        comments: Header comment lines, without the leading '#'

    Returns:
        The file content, newline-terminated
    """
    lines: List[str] = [f"#  {comment}".rstrip() for comment in comments or ()]
    if lines:
        lines.append("")
    lines.append(f"[L = {vector_file.digest_length_bytes}]")
    lines.append("")

    for vector in vector_file.vectors:
        message_hex = vector.message.hex() if vector.length_bits else EMPTY_MESSAGE_HEX
        lines.append(f"Len = {vector.length_bits}")
        lines.append(f"Msg = {message_hex}")
        lines.append(f"MD = {vector.digest.hex()}")
        lines.append("")

    return "\n".join(lines) + "\n"


def write_vector_file(vector_file: VectorFile, path: Union[str, Path],
                      comments: Optional[Sequence[str]] = None) -> Path:
    """Write a VectorFile to disk and return the path written."""
    path = Path(path)
    path.write_text(format_vector_file(vector_file, comments), encoding='ascii')
    log.info("wrote vector file", path=str(path), vectors=len(vector_file))
    return path


def short_msg_lengths(algorithm: str) -> List[int]:
    """ShortMsg schedule: every byte length from 0 to one block, in bits."""
    block_size = VARIANTS[algorithm].family.block_size
    return [8 * n for n in range(block_size + 1)]


def long_msg_lengths(algorithm: str, count: int = 8) -> List[int]:
    """LongMsg schedule: `count` multi-block lengths, in bits."""
    block_size = VARIANTS[algorithm].family.block_size
    start, step = (163, 823) if block_size == 64 else (260, 1799)
    return [8 * (start + step * i) for i in range(count)]


def generate_vector_file(algorithm: str, lengths_bits: Iterable[int]) -> VectorFile:
    """
    Build a VectorFile of random messages with reference digests.

    Args:
        algorithm: Engine name, e.g. 'sha384'
        lengths_bits: Message lengths in bits; each must be a multiple of 8

    Returns:
        A VectorFile in the given length order
    """
    variant = VARIANTS[algorithm]
    vectors = []
    for length_bits in lengths_bits:
        if length_bits < 0 or length_bits % 8:
            raise ValueError(f"Only byte-oriented lengths are supported, got {length_bits}")
        message = secrets.token_bytes(length_bits // 8)
        vectors.append(TestVector(length_bits, message, reference_digest(algorithm, message)))
    return VectorFile(variant.digest_size, vectors, source=f"<generated {algorithm}>")


def generated_comments(algorithm: str, label: str) -> List[str]:
    """Header comment block for synthesized files, laid out like a CAVS header."""
    title = algorithm.upper().replace('SHA', 'SHA-', 1).replace('_', '/')
    return [
        GENERATOR_LABEL,
        f'"{title} {label}" information',
        f"{title} tests are configured for BYTE oriented implementations",
        "Random messages; digests from the cryptography backend",
    ]
