"""
SHA-2 Hash Family Implementation (From Scratch)

Implements the SHA-2 hash functions defined in FIPS 180-4 without hashlib.
Both word families share one compression routine, parameterized by word
size, round count and rotation amounts.

Variants:
- SHA-224, SHA-256: 32-bit words, 64-byte blocks, 64 rounds
- SHA-384, SHA-512, SHA-512/256: 64-bit words, 128-byte blocks, 80 rounds

Components:
- Streaming hasher: buffers partial blocks, compresses full ones
- Padding: 0x80, zeros, big-endian bit length trailer
- Message Schedule: expands 16 words to one word per round
- Output: chaining value truncated to the variant's digest size
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple


# ============================================================================
# Constants
# ============================================================================

# Round constants: first 32 bits of fractional parts of cube roots of first 64 primes
K_32 = [
    0x428a2f98, 0x71374491, 0xb5c0fbcf, 0xe9b5dba5,
    0x3956c25b, 0x59f111f1, 0x923f82a4, 0xab1c5ed5,
    0xd807aa98, 0x12835b01, 0x243185be, 0x550c7dc3,
    0x72be5d74, 0x80deb1fe, 0x9bdc06a7, 0xc19bf174,
    0xe49b69c1, 0xefbe4786, 0x0fc19dc6, 0x240ca1cc,
    0x2de92c6f, 0x4a7484aa, 0x5cb0a9dc, 0x76f988da,
    0x983e5152, 0xa831c66d, 0xb00327c8, 0xbf597fc7,
    0xc6e00bf3, 0xd5a79147, 0x06ca6351, 0x14292967,
    0x27b70a85, 0x2e1b2138, 0x4d2c6dfc, 0x53380d13,
    0x650a7354, 0x766a0abb, 0x81c2c92e, 0x92722c85,
    0xa2bfe8a1, 0xa81a664b, 0xc24b8b70, 0xc76c51a3,
    0xd192e819, 0xd6990624, 0xf40e3585, 0x106aa070,
    0x19a4c116, 0x1e376c08, 0x2748774c, 0x34b0bcb5,
    0x391c0cb3, 0x4ed8aa4a, 0x5b9cca4f, 0x682e6ff3,
    0x748f82ee, 0x78a5636f, 0x84c87814, 0x8cc70208,
    0x90befffa, 0xa4506ceb, 0xbef9a3f7, 0xc67178f2
]

# Round constants: first 64 bits of fractional parts of cube roots of first 80 primes
K_64 = [
    0x428a2f98d728ae22, 0x7137449123ef65cd, 0xb5c0fbcfec4d3b2f, 0xe9b5dba58189dbbc,
    0x3956c25bf348b538, 0x59f111f1b605d019, 0x923f82a4af194f9b, 0xab1c5ed5da6d8118,
    0xd807aa98a3030242, 0x12835b0145706fbe, 0x243185be4ee4b28c, 0x550c7dc3d5ffb4e2,
    0x72be5d74f27b896f, 0x80deb1fe3b1696b1, 0x9bdc06a725c71235, 0xc19bf174cf692694,
    0xe49b69c19ef14ad2, 0xefbe4786384f25e3, 0x0fc19dc68b8cd5b5, 0x240ca1cc77ac9c65,
    0x2de92c6f592b0275, 0x4a7484aa6ea6e483, 0x5cb0a9dcbd41fbd4, 0x76f988da831153b5,
    0x983e5152ee66dfab, 0xa831c66d2db43210, 0xb00327c898fb213f, 0xbf597fc7beef0ee4,
    0xc6e00bf33da88fc2, 0xd5a79147930aa725, 0x06ca6351e003826f, 0x142929670a0e6e70,
    0x27b70a8546d22ffc, 0x2e1b21385c26c926, 0x4d2c6dfc5ac42aed, 0x53380d139d95b3df,
    0x650a73548baf63de, 0x766a0abb3c77b2a8, 0x81c2c92e47edaee6, 0x92722c851482353b,
    0xa2bfe8a14cf10364, 0xa81a664bbc423001, 0xc24b8b70d0f89791, 0xc76c51a30654be30,
    0xd192e819d6ef5218, 0xd69906245565a910, 0xf40e35855771202a, 0x106aa07032bbd1b8,
    0x19a4c116b8d2d0c8, 0x1e376c085141ab53, 0x2748774cdf8eeb99, 0x34b0bcb5e19b48a8,
    0x391c0cb3c5c95a63, 0x4ed8aa4ae3418acb, 0x5b9cca4f7763e373, 0x682e6ff3d6b2b8a3,
    0x748f82ee5defb2fc, 0x78a5636f43172f60, 0x84c87814a1f0ab72, 0x8cc702081a6439ec,
    0x90befffa23631e28, 0xa4506cebde82bde9, 0xbef9a3f7b2c67915, 0xc67178f2e372532b,
    0xca273eceea26619c, 0xd186b8c721c0c207, 0xeada7dd6cde0eb1e, 0xf57d4f7fee6ed178,
    0x06f067aa72176fba, 0x0a637dc5a2c898a6, 0x113f9804bef90dae, 0x1b710b35131c471b,
    0x28db77f523047d84, 0x32caab7b40c72493, 0x3c9ebe0a15c9bebc, 0x431d67c49c100d4c,
    0x4cc5d4becb3e42b6, 0x597f299cfc657e2a, 0x5fcb6fab3ad6faec, 0x6c44198c4a475817
]


# ============================================================================
# Word Families
# ============================================================================

@dataclass(frozen=True)
class Sha2Family:
    """
    Parameters shared by every variant built on the same word size.

    Rotation tuples are (rotr, rotr, rotr) for the uppercase sigmas and
    (rotr, rotr, shr) for the lowercase sigmas.
    """
    name: str
    word_bits: int
    block_size: int
    rounds: int
    length_bytes: int
    k: Tuple[int, ...]
    big_sigma0: Tuple[int, int, int]
    big_sigma1: Tuple[int, int, int]
    small_sigma0: Tuple[int, int, int]
    small_sigma1: Tuple[int, int, int]

    @property
    def word_bytes(self) -> int:
        return self.word_bits // 8

    @property
    def mask(self) -> int:
        return (1 << self.word_bits) - 1

    @property
    def state_bytes(self) -> int:
        """Size of the eight chaining words in bytes."""
        return 8 * self.word_bytes


SHA2_32 = Sha2Family(
    name="sha2-32",
    word_bits=32,
    block_size=64,
    rounds=64,
    length_bytes=8,
    k=tuple(K_32),
    big_sigma0=(2, 13, 22),
    big_sigma1=(6, 11, 25),
    small_sigma0=(7, 18, 3),
    small_sigma1=(17, 19, 10),
)

SHA2_64 = Sha2Family(
    name="sha2-64",
    word_bits=64,
    block_size=128,
    rounds=80,
    length_bytes=16,
    k=tuple(K_64),
    big_sigma0=(28, 34, 39),
    big_sigma1=(14, 18, 41),
    small_sigma0=(1, 8, 7),
    small_sigma1=(19, 61, 6),
)


# ============================================================================
# Variants
# ============================================================================

@dataclass(frozen=True)
class Sha2Variant:
    """A concrete SHA-2 function: a family, an initial value and a digest size."""
    name: str
    family: Sha2Family
    iv: Tuple[int, ...]
    digest_size: int


SHA224 = Sha2Variant(
    name="sha224",
    family=SHA2_32,
    iv=(
        0xc1059ed8, 0x367cd507, 0x3070dd17, 0xf70e5939,
        0xffc00b31, 0x68581511, 0x64f98fa7, 0xbefa4fa4,
    ),
    digest_size=28,
)

# Initial hash values: first 32 bits of fractional parts of square roots of first 8 primes
SHA256 = Sha2Variant(
    name="sha256",
    family=SHA2_32,
    iv=(
        0x6a09e667, 0xbb67ae85, 0x3c6ef372, 0xa54ff53a,
        0x510e527f, 0x9b05688c, 0x1f83d9ab, 0x5be0cd19,
    ),
    digest_size=32,
)

SHA384 = Sha2Variant(
    name="sha384",
    family=SHA2_64,
    iv=(
        0xcbbb9d5dc1059ed8, 0x629a292a367cd507, 0x9159015a3070dd17, 0x152fecd8f70e5939,
        0x67332667ffc00b31, 0x8eb44a8768581511, 0xdb0c2e0d64f98fa7, 0x47b5481dbefa4fa4,
    ),
    digest_size=48,
)

SHA512 = Sha2Variant(
    name="sha512",
    family=SHA2_64,
    iv=(
        0x6a09e667f3bcc908, 0xbb67ae8584caa73b, 0x3c6ef372fe94f82b, 0xa54ff53a5f1d36f1,
        0x510e527fade682d1, 0x9b05688c2b3e6c1f, 0x1f83d9abfb41bd6b, 0x5be0cd19137e2179,
    ),
    digest_size=64,
)

SHA512_256 = Sha2Variant(
    name="sha512_256",
    family=SHA2_64,
    iv=(
        0x22312194fc2bf72c, 0x9f555fa3c84c64c2, 0x2393b86b6f53b151, 0x963877195940eabd,
        0x96283ee2a88effe3, 0xbe5e1e2553863992, 0x2b0199fc2c85b8aa, 0x0eb72ddc81c52ca2,
    ),
    digest_size=32,
)

VARIANTS: Dict[str, Sha2Variant] = {
    v.name: v for v in (SHA224, SHA256, SHA384, SHA512, SHA512_256)
}


# ============================================================================
# Compression
# ============================================================================

def _right_rotate(value: int, amount: int, bits: int, mask: int) -> int:
    """Right rotate a word of the given width."""
    return ((value >> amount) | (value << (bits - amount))) & mask


def _bytes_to_words(block: bytes, word_bytes: int) -> List[int]:
    """Convert one block into 16 big-endian words."""
    return [
        int.from_bytes(block[i:i + word_bytes], byteorder='big')
        for i in range(0, 16 * word_bytes, word_bytes)
    ]


def _create_message_schedule(family: Sha2Family, words: List[int]) -> List[int]:
    """
    Expand 16 words into one word per round.

    For i from 16 to rounds - 1:
        W[i] = σ1(W[i-2]) + W[i-7] + σ0(W[i-15]) + W[i-16]
    """
    bits, mask = family.word_bits, family.mask
    r0a, r0b, s0 = family.small_sigma0
    r1a, r1b, s1 = family.small_sigma1
    w = list(words)
    for i in range(16, family.rounds):
        x = w[i - 15]
        sigma0 = (_right_rotate(x, r0a, bits, mask)
                  ^ _right_rotate(x, r0b, bits, mask) ^ (x >> s0))
        y = w[i - 2]
        sigma1 = (_right_rotate(y, r1a, bits, mask)
                  ^ _right_rotate(y, r1b, bits, mask) ^ (y >> s1))
        w.append((w[i - 16] + sigma0 + w[i - 7] + sigma1) & mask)
    return w


def compress(family: Sha2Family, state: List[int], block: bytes) -> List[int]:
    """
    Run the compression function over one block.

    Args:
        family: Word family parameters
        state: Current chaining value (8 words)
        block: Exactly one block of message bytes

    Returns:
        Updated chaining value
    """
    bits, mask = family.word_bits, family.mask
    b0a, b0b, b0c = family.big_sigma0
    b1a, b1b, b1c = family.big_sigma1
    k = family.k
    w = _create_message_schedule(family, _bytes_to_words(block, family.word_bytes))

    a, b, c, d, e, f, g, h = state

    for i in range(family.rounds):
        big1 = (_right_rotate(e, b1a, bits, mask) ^ _right_rotate(e, b1b, bits, mask)
                ^ _right_rotate(e, b1c, bits, mask))
        ch = (e & f) ^ (~e & mask & g)
        t1 = (h + big1 + ch + k[i] + w[i]) & mask
        big0 = (_right_rotate(a, b0a, bits, mask) ^ _right_rotate(a, b0b, bits, mask)
                ^ _right_rotate(a, b0c, bits, mask))
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = (big0 + maj) & mask

        h = g
        g = f
        f = e
        e = (d + t1) & mask
        d = c
        c = b
        b = a
        a = (t1 + t2) & mask

    return [
        (state[0] + a) & mask,
        (state[1] + b) & mask,
        (state[2] + c) & mask,
        (state[3] + d) & mask,
        (state[4] + e) & mask,
        (state[5] + f) & mask,
        (state[6] + g) & mask,
        (state[7] + h) & mask,
    ]


# ============================================================================
# Streaming Hasher
# ============================================================================

class Sha2Hasher:
    """
    Incremental SHA-2 computation.

    Holds the chaining words, the partial block not yet compressed and the
    total number of bytes absorbed so far.
    """

    def __init__(self, variant: Sha2Variant):
        self.variant = variant
        self.family = variant.family
        self.reset()

    @property
    def digest_size(self) -> int:
        return self.variant.digest_size

    @property
    def block_size(self) -> int:
        return self.family.block_size

    def reset(self) -> None:
        """Return to the variant's initial state."""
        self.words: List[int] = list(self.variant.iv)
        self.buffer = bytearray()
        self.total_length = 0

    def update(self, data: bytes) -> None:
        """Absorb more message bytes."""
        block_size = self.family.block_size
        data = memoryview(data).cast('B')
        self.total_length += len(data)
        offset = 0

        if self.buffer:
            needed = block_size - len(self.buffer)
            if len(data) < needed:
                self.buffer += data
                return
            self.buffer += data[:needed]
            self.words = compress(self.family, self.words, bytes(self.buffer))
            self.buffer = bytearray()
            offset = needed

        while offset + block_size <= len(data):
            self.words = compress(self.family, self.words, bytes(data[offset:offset + block_size]))
            offset += block_size

        if offset < len(data):
            self.buffer = bytearray(data[offset:])

    def finalize(self) -> bytes:
        """
        Pad, compress the final block(s) and return the digest.

        The hasher must be reset before it is reused.
        """
        family = self.family
        block_size = family.block_size
        pad_threshold = block_size - family.length_bytes
        bit_length = (self.total_length << 3) & ((1 << (8 * family.length_bytes)) - 1)

        tail = bytearray(self.buffer)
        tail.append(0x80)
        if len(tail) > pad_threshold:
            tail += b'\x00' * (block_size - len(tail))
            self.words = compress(family, self.words, bytes(tail))
            tail = bytearray()
        tail += b'\x00' * (pad_threshold - len(tail))
        tail += bit_length.to_bytes(family.length_bytes, byteorder='big')
        self.words = compress(family, self.words, bytes(tail))
        self.buffer = bytearray()

        full = b''.join(w.to_bytes(family.word_bytes, byteorder='big') for w in self.words)
        return full[:self.variant.digest_size]

    def copy(self) -> 'Sha2Hasher':
        """Return an independent hasher with the same in-progress state."""
        other = Sha2Hasher(self.variant)
        other.words = list(self.words)
        other.buffer = bytearray(self.buffer)
        other.total_length = self.total_length
        return other


# ============================================================================
# One-shot Helpers
# ============================================================================

def sha2_digest(name: str, data: bytes) -> bytes:
    """
    Compute a SHA-2 digest by variant name.

    Args:
        name: One of 'sha224', 'sha256', 'sha384', 'sha512', 'sha512_256'
        data: Input bytes to hash

    Returns:
        Digest bytes of the variant's size
    """
    hasher = Sha2Hasher(VARIANTS[name])
    hasher.update(data)
    return hasher.finalize()


def sha2_hex(name: str, data: bytes) -> str:
    """Compute a SHA-2 digest by variant name and return it as hex."""
    return sha2_digest(name, data).hex()


def sha224(data: bytes) -> bytes:
    return sha2_digest("sha224", data)


def sha256(data: bytes) -> bytes:
    """
    Compute the SHA-256 hash of the input data.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return sha2_digest("sha256", data)


def sha384(data: bytes) -> bytes:
    return sha2_digest("sha384", data)


def sha512(data: bytes) -> bytes:
    return sha2_digest("sha512", data)


def sha512_256(data: bytes) -> bytes:
    return sha2_digest("sha512_256", data)
