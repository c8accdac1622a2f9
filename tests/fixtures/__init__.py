"""Shared test data for the address predictor tests."""

from .addresses import (
    CODE_HASH_11,
    CODE_HASH_22,
    DEPLOYER_AA,
    DEPLOYER_DEADBEEF,
    PROXY_FACTORY_ADDRESS,
    PROXY_KEYLESS_SIGNER,
    SALT_ONE,
    SALT_ZERO,
)
from .contracts import PROXY_DEPLOYMENT_TX, SIMPLE_INIT_CODE, SIMPLE_STORAGE_BYTECODE
from .keys import ALICE_ADDRESS, ALICE_PRIVATE_KEY, BOB_ADDRESS, BOB_PRIVATE_KEY

__all__ = [
    # Addresses
    "CODE_HASH_11",
    "CODE_HASH_22",
    "DEPLOYER_AA",
    "DEPLOYER_DEADBEEF",
    "PROXY_FACTORY_ADDRESS",
    "PROXY_KEYLESS_SIGNER",
    "SALT_ONE",
    "SALT_ZERO",
    # Contracts
    "PROXY_DEPLOYMENT_TX",
    "SIMPLE_INIT_CODE",
    "SIMPLE_STORAGE_BYTECODE",
    # Keys
    "ALICE_ADDRESS",
    "ALICE_PRIVATE_KEY",
    "BOB_ADDRESS",
    "BOB_PRIVATE_KEY",
]
