"""Hashing and signature recovery using pycryptodome and eth-keys."""

from Crypto.Hash import keccak
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError

from .errors import RecoveryFailure


def keccak256(data: bytes) -> bytes:
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def init_code_hash(init_code: bytes) -> bytes:
    """Content hash of a code container, as consumed by CREATE2."""
    return keccak256(init_code)


def sign(private_key: bytes, message_hash: bytes) -> tuple[int, int, int]:
    pk = keys.PrivateKey(private_key)
    signature = pk.sign_msg_hash(message_hash)
    return signature.v, signature.r, signature.s


def recover_address(message_hash: bytes, v: int, r: int, s: int) -> bytes:
    """Recover the 20-byte signer address.

    ``v`` is the recovery id (0 or 1), not the transaction-encoded value.
    """
    if v not in (0, 1):
        raise RecoveryFailure(f"recovery id must be 0 or 1, got {v}")
    try:
        signature = keys.Signature(vrs=(v, r, s))
        public_key = signature.recover_public_key_from_msg_hash(message_hash)
    except (BadSignature, ValidationError, ValueError) as e:
        raise RecoveryFailure(f"signature does not recover to a public key: {e}") from e
    return public_key.to_canonical_address()


def private_key_to_address(private_key: bytes) -> bytes:
    return keys.PrivateKey(private_key).public_key.to_canonical_address()
