"""CREATE2 address derivation (EIP-1014).

CREATE2 makes a contract's address a pure function of the factory that
deploys it, a salt, and the hash of the init code:
    address = keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]

The salted, counterfactual and sequential predictors all reduce to
``derive``; only the way they choose the salt differs.

Reference: https://eips.ethereum.org/EIPS/eip-1014
"""

import logging

import rlp
from eth_utils import keccak

from .constants import ADDRESS_SIZE, CREATE2_PREFIX, HASH_SIZE, SALT_SIZE
from .errors import CounterOverflow, MalformedInput

logger = logging.getLogger(__name__)


def validate_width(field: str, value: bytes, size: int) -> None:
    if not isinstance(value, (bytes, bytearray)):
        raise MalformedInput(field, size, type(value).__name__)
    if len(value) != size:
        raise MalformedInput(field, size, len(value))


def derive(
    deployer: bytes,
    code_hash: bytes,
    salt: bytes,
    *,
    address_size: int = ADDRESS_SIZE,
    hash_size: int = HASH_SIZE,
    salt_size: int = SALT_SIZE,
) -> bytes:
    """
    Derive the address a factory deploys ``code_hash`` to under ``salt``.

    Args:
        deployer: factory address (``address_size`` bytes)
        code_hash: keccak256 of the init code (``hash_size`` bytes)
        salt: salt value (``salt_size`` bytes, any value is legal)

    Returns:
        The last ``address_size`` bytes of the CREATE2 preimage hash

    Raises:
        MalformedInput: If any argument has the wrong width

    Example:
        >>> derive(bytes(20), keccak(b"\\x00"), bytes(32)).hex()
        '4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38'
    """
    validate_width("deployer", deployer, address_size)
    validate_width("code_hash", code_hash, hash_size)
    validate_width("salt", salt, salt_size)

    preimage = CREATE2_PREFIX + bytes(deployer) + bytes(salt) + bytes(code_hash)
    address = keccak(preimage)[-address_size:]
    logger.debug(
        "derive deployer=%s salt=%s code_hash=%s -> %s",
        deployer.hex(), salt.hex(), code_hash.hex(), address.hex(),
    )
    return address


def predict_salted(deployer: bytes, code_hash: bytes, salt: bytes, **widths) -> bytes:
    """Address of a deployment with a caller-chosen salt.

    The all-zero salt is the conventional choice for a single intended
    deployment of a given init code.
    """
    return derive(deployer, code_hash, salt, **widths)


def predict_counterfactual(deployer: bytes, code_hash: bytes, **widths) -> bytes:
    """Address of a deployment that uses the code hash as its own salt.

    Only one such deployment can exist per factory and init code, so the
    address is known before anyone deploys it.
    """
    return derive(deployer, code_hash, code_hash, **widths)


def nonce_to_salt(nonce: int, salt_size: int = SALT_SIZE) -> bytes:
    """Big-endian encoding of a sequential counter as a salt."""
    if nonce < 0:
        raise ValueError(f"Nonce must be non-negative, got {nonce}")
    if nonce >= 2 ** (8 * salt_size):
        raise CounterOverflow(f"nonce {nonce} does not fit in {salt_size} bytes")
    return nonce.to_bytes(salt_size, "big")


def compute_create2_address(
    sender: bytes,
    salt: bytes,
    init_code: bytes,
) -> bytes:
    """
    Compute a CREATE2 address from the raw init code.

    Args:
        sender: 20-byte deployer address
        salt: 32-byte salt value
        init_code: Contract initialization code (constructor bytecode)

    Returns:
        20-byte predicted contract address

    Raises:
        MalformedInput: If sender is not 20 bytes or salt is not 32 bytes

    Note:
        The init code includes the constructor arguments, so different
        arguments produce different addresses.
    """
    return derive(sender, keccak(init_code), salt)


def compute_create_address(sender: bytes, nonce: int) -> bytes:
    """
    Compute a CREATE (nonce-based) contract address.

    The contract address is the last 20 bytes of:
        keccak256(rlp([sender, nonce]))

    A keyless account deploys its factory with CREATE at nonce 0, so this
    is how the factory's own address is located.

    Raises:
        MalformedInput: If sender is not 20 bytes
    """
    validate_width("sender", sender, ADDRESS_SIZE)
    if nonce < 0:
        raise ValueError(f"Nonce must be non-negative, got {nonce}")

    encoded = rlp.encode([bytes(sender), nonce])
    return keccak(encoded)[12:]
