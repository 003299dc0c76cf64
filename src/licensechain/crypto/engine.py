"""
Merkle-Damgard block hashing engine.

Everything that differs between MD5 and SHA-256 lives in a DigestAlgorithm:
initial state words, byte order, message-schedule expansion and the round
function. BlockHasher owns the shared parts:

- padding: 0x80, zero fill, then the 64-bit message length in bits
- iteration over 64-byte blocks
- folding each block's round output into the running state (mod 2**32)

Hashing is one-shot: the whole message must be in memory.
"""

from dataclasses import dataclass
from typing import Any, Callable

from licensechain.common.exceptions import InvalidInputError

BLOCK_SIZE = 64
LENGTH_FIELD_SIZE = 8
WORD_SIZE = 4
WORD_MASK = 0xFFFFFFFF
LENGTH_MASK = (1 << 64) - 1

State = tuple[int, ...]
Schedule = list[int]


@dataclass(frozen=True)
class DigestAlgorithm:
    """Immutable description of a 32-bit-word Merkle-Damgard hash."""

    name: str
    initial_state: State
    byteorder: str
    schedule: Callable[[bytes], Schedule]
    rounds: Callable[[State, Schedule], State]
    block_size: int = BLOCK_SIZE

    @property
    def digest_size(self) -> int:
        return len(self.initial_state) * WORD_SIZE


def to_bytes(value: Any) -> bytes:
    """UTF-8 encode strings, pass byte-like values through, reject the rest."""
    if isinstance(value, str):
        try:
            return value.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise InvalidInputError("String is not encodable as UTF-8") from exc
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise InvalidInputError(
        f"Expected str or bytes, got {type(value).__name__}"
    )


def rotl(value: int, amount: int) -> int:
    return ((value << amount) | (value >> (32 - amount))) & WORD_MASK


def rotr(value: int, amount: int) -> int:
    return ((value >> amount) | (value << (32 - amount))) & WORD_MASK


def read_words(block: bytes, byteorder: str) -> Schedule:
    """Split a block into 32-bit words."""
    return [
        int.from_bytes(block[i:i + WORD_SIZE], byteorder)
        for i in range(0, len(block), WORD_SIZE)
    ]


def pad(message: bytes, byteorder: str, block_size: int = BLOCK_SIZE) -> bytes:
    """Pad a message to a whole number of blocks.

    The bit length occupies the last 8 bytes of the final block, encoded in
    the algorithm's byte order.
    """
    bit_length = (len(message) * 8) & LENGTH_MASK
    zeros = (block_size - (len(message) + 1 + LENGTH_FIELD_SIZE) % block_size) % block_size
    return (
        message
        + b"\x80"
        + b"\x00" * zeros
        + bit_length.to_bytes(LENGTH_FIELD_SIZE, byteorder)
    )


class BlockHasher:
    """One-shot digest computation for a given DigestAlgorithm.

    Holds no per-call state, so one instance can be shared across threads.
    """

    __slots__ = ("algorithm",)

    def __init__(self, algorithm: DigestAlgorithm):
        self.algorithm = algorithm

    def digest(self, data: bytes) -> bytes:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInputError(
                f"{self.algorithm.name} input must be bytes, got {type(data).__name__}"
            )
        algo = self.algorithm
        padded = pad(bytes(data), algo.byteorder, algo.block_size)

        state = algo.initial_state
        for offset in range(0, len(padded), algo.block_size):
            block = padded[offset:offset + algo.block_size]
            worked = algo.rounds(state, algo.schedule(block))
            state = tuple((s + w) & WORD_MASK for s, w in zip(state, worked))

        return b"".join(word.to_bytes(WORD_SIZE, algo.byteorder) for word in state)

    def hexdigest(self, data: bytes) -> str:
        return self.digest(data).hex()

    def __repr__(self) -> str:
        return f"BlockHasher({self.algorithm.name})"
