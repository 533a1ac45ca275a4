"""
Fiat-Shamir transcript over Blake2b.

Every value written to the proof is also absorbed into a running Blake2b
state; challenges are 64-byte squeezes reduced into the field. The writer
and reader absorb identically, so a verifier reading a proof byte for byte
re-derives exactly the challenges the prover saw. The writer closes the
proof with one squeezed tag, which binds the bytes to the common values
(parameters, key, instances) absorbed on both sides.
"""

import hashlib

from .field import SCALAR_BYTES, from_bytes, from_uniform_bytes, to_bytes

# Domain separators for absorbed items
PREFIX_CHALLENGE = b"\x00"
PREFIX_DIGEST = b"\x01"
PREFIX_SCALAR = b"\x02"

PERSONALIZATION = b"poseidon-bench"

DIGEST_BYTES = 32


class Transcript:
    """Running Blake2b state shared by the writer and the reader."""

    def __init__(self):
        self._state = hashlib.blake2b(digest_size=64, person=PERSONALIZATION)

    def common_scalar(self, value: int) -> None:
        """Absorb a field element that is not part of the proof bytes."""
        self._state.update(PREFIX_SCALAR + to_bytes(value))

    def common_digest(self, digest: bytes) -> None:
        """Absorb a 32-byte commitment that is not part of the proof bytes."""
        if len(digest) != DIGEST_BYTES:
            raise ValueError(f"digest must have {DIGEST_BYTES} bytes, got {len(digest)}")
        self._state.update(PREFIX_DIGEST + digest)

    def squeeze_challenge(self) -> int:
        """Squeeze one field element."""
        self._state.update(PREFIX_CHALLENGE)
        return from_uniform_bytes(self._state.copy().digest())


class TranscriptWriter(Transcript):
    """Prover side: absorbs values and appends them to the proof bytes."""

    def __init__(self):
        super().__init__()
        self._buffer = bytearray()

    def write_scalar(self, value: int) -> None:
        self.common_scalar(value)
        self._buffer += to_bytes(value)

    def write_digest(self, digest: bytes) -> None:
        self.common_digest(digest)
        self._buffer += digest

    def finalize(self) -> bytes:
        """Append the closing tag and return the proof bytes."""
        self._buffer += to_bytes(self.squeeze_challenge())
        return bytes(self._buffer)


class TranscriptReader(Transcript):
    """Verifier side: a single-use read cursor over proof bytes.

    Raises ValueError on truncated input, non-canonical scalars, or (from
    ``finalize``) a closing tag that does not match and trailing bytes.
    """

    def __init__(self, data: bytes):
        super().__init__()
        self._data = bytes(data)
        self._cursor = 0

    def _take(self, n: int) -> bytes:
        if self._cursor + n > len(self._data):
            raise ValueError(
                f"transcript truncated: need {n} bytes at offset {self._cursor}, "
                f"have {len(self._data) - self._cursor}"
            )
        chunk = self._data[self._cursor:self._cursor + n]
        self._cursor += n
        return chunk

    def read_scalar(self) -> int:
        value = from_bytes(self._take(SCALAR_BYTES))
        self.common_scalar(value)
        return value

    def read_digest(self) -> bytes:
        digest = self._take(DIGEST_BYTES)
        self.common_digest(digest)
        return digest

    def finalize(self) -> None:
        """Check the closing tag and that nothing follows it."""
        tag = self._take(SCALAR_BYTES)
        if tag != to_bytes(self.squeeze_challenge()):
            raise ValueError("closing tag does not match the transcript")
        remaining = len(self._data) - self._cursor
        if remaining:
            raise ValueError(f"{remaining} trailing bytes after proof")
