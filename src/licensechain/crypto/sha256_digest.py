"""SHA-256 (FIPS 180-4) on top of the block engine."""

from licensechain.crypto.engine import (
    BlockHasher,
    DigestAlgorithm,
    Schedule,
    State,
    WORD_MASK,
    read_words,
    rotr,
    to_bytes,
)


def _first_primes(count: int) -> list[int]:
    primes: list[int] = []
    candidate = 2
    while len(primes) < count:
        if all(candidate % p for p in primes if p * p <= candidate):
            primes.append(candidate)
        candidate += 1
    return primes


def _icbrt(n: int) -> int:
    """Integer cube root (floor)."""
    x = 1 << ((n.bit_length() + 2) // 3)
    while True:
        y = (2 * x + n // (x * x)) // 3
        if y >= x:
            return x
        x = y


INITIAL_STATE: State = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

# First 32 bits of the fractional parts of the cube roots of the first 64 primes
ROUND_CONSTANTS: tuple[int, ...] = tuple(
    _icbrt(p << 96) & WORD_MASK for p in _first_primes(64)
)


def _schedule(block: bytes) -> Schedule:
    w = read_words(block, "big")
    for i in range(16, 64):
        s0 = rotr(w[i - 15], 7) ^ rotr(w[i - 15], 18) ^ (w[i - 15] >> 3)
        s1 = rotr(w[i - 2], 17) ^ rotr(w[i - 2], 19) ^ (w[i - 2] >> 10)
        w.append((w[i - 16] + s0 + w[i - 7] + s1) & WORD_MASK)
    return w


def _rounds(state: State, schedule: Schedule) -> State:
    a, b, c, d, e, f, g, h = state
    for i in range(64):
        big_s1 = rotr(e, 6) ^ rotr(e, 11) ^ rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        temp1 = (h + big_s1 + ch + ROUND_CONSTANTS[i] + schedule[i]) & WORD_MASK
        big_s0 = rotr(a, 2) ^ rotr(a, 13) ^ rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        temp2 = (big_s0 + maj) & WORD_MASK

        h, g, f = g, f, e
        e = (d + temp1) & WORD_MASK
        d, c, b = c, b, a
        a = (temp1 + temp2) & WORD_MASK
    return (a, b, c, d, e, f, g, h)


SHA256 = DigestAlgorithm(
    name="sha256",
    initial_state=INITIAL_STATE,
    byteorder="big",
    schedule=_schedule,
    rounds=_rounds,
)

_hasher = BlockHasher(SHA256)


def sha256(data: str | bytes) -> bytes:
    """Raw 32-byte SHA-256 digest of a string (UTF-8) or bytes."""
    return _hasher.digest(to_bytes(data))


def sha256_hex(data: str | bytes) -> str:
    """Lowercase hex SHA-256 digest (64 characters)."""
    return sha256(data).hex()
