"""Keyless deployment transactions.

A factory is deployed from an account nobody controls by publishing a
contract-creation transaction whose signature components are fixed
constants rather than the output of a signing key. Whatever public key
those components recover to becomes the sender, and since it was never
generated from a private key, no one can send any other transaction from
it. The factory therefore lands at CREATE(sender, 0) on every chain that
accepts the transaction.
"""

import logging

import rlp
from rlp.exceptions import DecodingError

from .constants import (
    KEYLESS_GAS_LIMIT,
    KEYLESS_GAS_PRICE,
    KEYLESS_R,
    KEYLESS_S,
    KEYLESS_V,
    SECPK1_N,
)
from .create2 import compute_create_address
from .crypto import keccak256, recover_address
from .errors import RecoveryFailure

logger = logging.getLogger(__name__)


def _as_int(field: str, value) -> int:
    if not isinstance(value, bytes):
        raise RecoveryFailure(f"{field} must be a byte string")
    if value[:1] == b"\x00":
        raise RecoveryFailure(f"{field} has leading zero bytes")
    return int.from_bytes(value, "big")


def decode_transaction(payload: bytes) -> dict:
    """Decode an RLP legacy transaction into its nine fields."""
    try:
        fields = rlp.decode(payload)
    except DecodingError as e:
        raise RecoveryFailure(f"payload is not valid RLP: {e}") from e

    if not isinstance(fields, list) or len(fields) != 9:
        raise RecoveryFailure("payload is not a legacy transaction")

    nonce, gas_price, gas, to, value, data, v, r, s = fields
    if not isinstance(to, bytes) or len(to) not in (0, 20):
        raise RecoveryFailure("transaction recipient must be empty or 20 bytes")
    if not isinstance(data, bytes):
        raise RecoveryFailure("data must be a byte string")

    return {
        "nonce": _as_int("nonce", nonce),
        "gas_price": _as_int("gas_price", gas_price),
        "gas": _as_int("gas", gas),
        "to": to,
        "value": _as_int("value", value),
        "data": data,
        "v": _as_int("v", v),
        "r": _as_int("r", r),
        "s": _as_int("s", s),
    }


def signing_hash(tx: dict) -> tuple[bytes, int]:
    """Return the message hash and recovery id for a decoded transaction.

    ``v`` of 27/28 is an unprotected (pre-EIP-155) signature; ``v`` of 35 or
    more binds the chain id into the hash.
    """
    v = tx["v"]
    unsigned = [tx["nonce"], tx["gas_price"], tx["gas"], tx["to"], tx["value"], tx["data"]]

    if v in (27, 28):
        return keccak256(rlp.encode(unsigned)), v - 27
    if v >= 35:
        chain_id = (v - 35) // 2
        return keccak256(rlp.encode(unsigned + [chain_id, 0, 0])), (v - 35) % 2
    raise RecoveryFailure(f"invalid signature v value: {v}")


def recover_sender(payload: bytes) -> bytes:
    """
    Recover the sender of a raw legacy transaction.

    Args:
        payload: RLP-encoded signed transaction

    Returns:
        20-byte sender address

    Raises:
        RecoveryFailure: If the payload cannot be decoded or the signature
            does not recover to a valid public key
    """
    tx = decode_transaction(payload)
    if not 0 < tx["r"] < SECPK1_N or not 0 < tx["s"] < SECPK1_N:
        raise RecoveryFailure("signature r and s must be in [1, secp256k1n)")

    msg_hash, recovery_id = signing_hash(tx)
    sender = recover_address(msg_hash, recovery_id, tx["r"], tx["s"])
    logger.debug("Recovered sender %s", sender.hex())
    return sender


def keyless_factory_address(payload: bytes) -> bytes:
    """Address of the contract created by a keyless deployment transaction."""
    tx = decode_transaction(payload)
    if tx["to"]:
        raise RecoveryFailure("transaction is not a contract creation")
    return compute_create_address(recover_sender(payload), tx["nonce"])


def build_keyless_transaction(
    init_code: bytes,
    gas_price: int = KEYLESS_GAS_PRICE,
    gas_limit: int = KEYLESS_GAS_LIMIT,
    v: int = KEYLESS_V,
    r: int = KEYLESS_R,
    s: int = KEYLESS_S,
) -> bytes:
    """
    Build the raw contract-creation transaction for a keyless deployment.

    The transaction has nonce 0, no recipient, zero value and the given fixed
    signature. It carries no chain id, so it is valid on any chain where the
    recovered sender is funded with ``gas_price * gas_limit``.
    """
    return rlp.encode([0, gas_price, gas_limit, b"", 0, init_code, v, r, s])
