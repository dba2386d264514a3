"""
Reference digests from the `cryptography` package.

Used as an independent oracle when synthesizing vector files and for
cross-checking the from-scratch engines.
"""

from typing import Dict, Type

from cryptography.hazmat.primitives import hashes


REFERENCE_ALGORITHMS: Dict[str, Type[hashes.HashAlgorithm]] = {
    'sha224': hashes.SHA224,
    'sha256': hashes.SHA256,
    'sha384': hashes.SHA384,
    'sha512': hashes.SHA512,
    'sha512_256': hashes.SHA512_256,
}


def reference_digest(name: str, data: bytes) -> bytes:
    """
    Compute a digest with the cryptography backend.

    Args:
        name: Engine name, e.g. 'sha512_256'
        data: Message bytes

    Returns:
        Digest bytes
    """
    try:
        algorithm = REFERENCE_ALGORITHMS[name]()
    except KeyError:
        raise ValueError(f"No reference algorithm for {name!r}") from None
    h = hashes.Hash(algorithm)
    h.update(data)
    return h.finalize()
