"""Sequential deployment prediction.

The sequential factory salts each deployment of a given init code with a
counter that starts at zero. Prediction only reads the counter; it is
advanced by ``commit`` once the caller has confirmation that the
deployment it predicted actually happened, so a failed deployment can be
retried at the same address.
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from create2_factory.core.config import FactoryConfig
from create2_factory.core.constants import ADDRESS_SIZE, HASH_SIZE, SALT_SIZE
from create2_factory.core.create2 import derive, nonce_to_salt, validate_width
from create2_factory.core.errors import StaleNonce
from create2_factory.storage.sqlite_store import SQLiteNonceStore
from create2_factory.storage.store import InMemoryNonceStore

logger = logging.getLogger(__name__)


@dataclass
class Reservation:
    """A predicted sequential deployment held under its code hash's lock."""

    code_hash: bytes
    nonce: int
    salt: bytes
    address: bytes
    committed: bool = False
    _commit: Optional[Callable[[bytes, Optional[int]], int]] = field(default=None, repr=False)

    def commit(self) -> int:
        if self.committed:
            raise StaleNonce(f"nonce {self.nonce} already committed")
        self._commit(self.code_hash, self.nonce)
        self.committed = True
        return self.nonce


class NonceTable:
    """Per-code-hash deployment counters over a pluggable store.

    Each code hash gets its own re-entrant lock, so cycles on different
    init codes never wait on each other.
    """

    def __init__(
        self,
        store=None,
        address_size: int = ADDRESS_SIZE,
        hash_size: int = HASH_SIZE,
        salt_size: int = SALT_SIZE,
    ):
        self.store = store if store is not None else InMemoryNonceStore()
        self.address_size = address_size
        self.hash_size = hash_size
        self.salt_size = salt_size
        self.max_nonce = 2 ** (8 * salt_size) - 1
        # A code hash keeps its lock only while some caller holds a reference.
        self._locks: weakref.WeakValueDictionary = weakref.WeakValueDictionary()
        self._locks_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: FactoryConfig) -> "NonceTable":
        if config.store_type == "sqlite":
            store = SQLiteNonceStore(config.store_path)
        else:
            store = InMemoryNonceStore()
        return cls(
            store,
            address_size=config.address_size,
            hash_size=config.hash_size,
            salt_size=config.salt_size,
        )

    def _lock_for(self, code_hash: bytes) -> threading.RLock:
        validate_width("code_hash", code_hash, self.hash_size)
        key = bytes(code_hash)
        with self._locks_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    def _derive(self, deployer: bytes, code_hash: bytes, nonce: int) -> tuple[bytes, bytes]:
        salt = nonce_to_salt(nonce, self.salt_size)
        address = derive(
            deployer,
            code_hash,
            salt,
            address_size=self.address_size,
            hash_size=self.hash_size,
            salt_size=self.salt_size,
        )
        return salt, address

    def peek_nonce(self, code_hash: bytes) -> int:
        """Current counter for ``code_hash``; zero if it was never committed."""
        with self._lock_for(code_hash):
            return self.store.get_nonce(bytes(code_hash))

    def predict_sequential(self, deployer: bytes, code_hash: bytes) -> bytes:
        """Address of the next sequential deployment. Does not advance the counter."""
        with self._lock_for(code_hash):
            nonce = self.store.get_nonce(bytes(code_hash))
            _, address = self._derive(deployer, code_hash, nonce)
            return address

    def commit(self, code_hash: bytes, expected: Optional[int] = None) -> int:
        """
        Advance the counter for ``code_hash`` by one.

        Args:
            code_hash: init code hash whose deployment was confirmed
            expected: counter value the confirmed deployment was predicted
                with; if given and the table has moved on, nothing changes

        Returns:
            The counter value that was consumed

        Raises:
            StaleNonce: If ``expected`` does not match the current counter
            CounterOverflow: If the next counter does not fit in a salt
        """
        with self._lock_for(code_hash):
            key = bytes(code_hash)
            current = self.store.increment_nonce(key, expected, self.max_nonce)
            logger.debug("Committed nonce %d for %s", current, key.hex())
            return current

    @contextmanager
    def reserve(self, deployer: bytes, code_hash: bytes) -> Iterator[Reservation]:
        """
        Hold ``code_hash``'s counter while a deployment is attempted.

        Usage:
            with table.reserve(factory, code_hash) as slot:
                send_deployment(slot.salt)
                slot.commit()

        Leaving the block without ``commit`` leaves the counter untouched.
        """
        with self._lock_for(code_hash):
            nonce = self.store.get_nonce(bytes(code_hash))
            salt, address = self._derive(deployer, code_hash, nonce)
            yield Reservation(
                code_hash=bytes(code_hash),
                nonce=nonce,
                salt=salt,
                address=address,
                _commit=self.commit,
            )

    def items(self) -> list[tuple[bytes, int]]:
        return list(self.store.iter_nonces())

    def close(self) -> None:
        self.store.close()

    def __len__(self) -> int:
        return len(self.store)
