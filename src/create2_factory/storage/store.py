"""In-memory storage for sequential deployment counters."""

from typing import Iterator, Optional

from create2_factory.core.errors import CounterOverflow, StaleNonce


def check_increment(code_hash: bytes, current: int, expected: Optional[int], max_nonce: int) -> None:
    if expected is not None and expected != current:
        raise StaleNonce(
            f"stale commit for {code_hash.hex()}: expected nonce {expected}, table has {current}"
        )
    if current >= max_nonce:
        raise CounterOverflow(f"counter for {code_hash.hex()} would exceed {max_nonce}")


class InMemoryNonceStore:
    def __init__(self):
        self._nonces: dict[bytes, int] = {}

    def get_nonce(self, code_hash: bytes) -> int:
        return self._nonces.get(code_hash, 0)

    def set_nonce(self, code_hash: bytes, nonce: int) -> None:
        self._nonces[code_hash] = nonce

    def increment_nonce(self, code_hash: bytes, expected: Optional[int], max_nonce: int) -> int:
        """Advance the counter by one and return the value consumed.

        Callers serialize per code hash; the store is private to one process.
        """
        current = self._nonces.get(code_hash, 0)
        check_increment(code_hash, current, expected, max_nonce)
        self._nonces[code_hash] = current + 1
        return current

    def has_nonce(self, code_hash: bytes) -> bool:
        return code_hash in self._nonces

    def iter_nonces(self) -> Iterator[tuple[bytes, int]]:
        return iter(list(self._nonces.items()))

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._nonces)
