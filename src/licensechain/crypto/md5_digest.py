"""MD5 (RFC 1321) on top of the block engine.

Used for non-security identifiers only; never for signatures.
"""

import math

from licensechain.crypto.engine import (
    BlockHasher,
    DigestAlgorithm,
    Schedule,
    State,
    WORD_MASK,
    read_words,
    rotl,
    to_bytes,
)

INITIAL_STATE: State = (0x67452301, 0xEFCDAB89, 0x98BADCFE, 0x10325476)

# floor(abs(sin(i + 1)) * 2**32)
ROUND_CONSTANTS: tuple[int, ...] = tuple(
    int(abs(math.sin(i + 1)) * 2**32) & WORD_MASK for i in range(64)
)

SHIFTS: tuple[int, ...] = (
    (7, 12, 17, 22) * 4
    + (5, 9, 14, 20) * 4
    + (4, 11, 16, 23) * 4
    + (6, 10, 15, 21) * 4
)

# Block word consumed by each round
WORD_INDEX: tuple[int, ...] = tuple(
    i if i < 16
    else (5 * i + 1) % 16 if i < 32
    else (3 * i + 5) % 16 if i < 48
    else (7 * i) % 16
    for i in range(64)
)


def _schedule(block: bytes) -> Schedule:
    words = read_words(block, "little")
    return [words[g] for g in WORD_INDEX]


def _rounds(state: State, schedule: Schedule) -> State:
    a, b, c, d = state
    for i in range(64):
        if i < 16:
            f = (b & c) | (~b & d)
        elif i < 32:
            f = (d & b) | (~d & c)
        elif i < 48:
            f = b ^ c ^ d
        else:
            f = c ^ (b | ~d)
        f = (f + a + ROUND_CONSTANTS[i] + schedule[i]) & WORD_MASK
        a, d, c = d, c, b
        b = (b + rotl(f, SHIFTS[i])) & WORD_MASK
    return (a, b, c, d)


MD5 = DigestAlgorithm(
    name="md5",
    initial_state=INITIAL_STATE,
    byteorder="little",
    schedule=_schedule,
    rounds=_rounds,
)

_hasher = BlockHasher(MD5)


def md5(data: str | bytes) -> bytes:
    """Raw 16-byte MD5 digest of a string (UTF-8) or bytes."""
    return _hasher.digest(to_bytes(data))


def md5_hex(data: str | bytes) -> str:
    """Lowercase hex MD5 digest (32 characters)."""
    return md5(data).hex()
