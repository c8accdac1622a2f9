"""
Factory configuration.

A deployment target is described by the factory (deployer) address and the
widths of the fields the CREATE2 preimage is built from. Well-known
factories are provided as presets.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from eth_utils import (
    decode_hex,
    encode_hex,
    is_hex_address,
    to_canonical_address,
    to_checksum_address,
)

from .constants import ADDRESS_SIZE, HASH_SIZE, SALT_SIZE, ZERO_ADDRESS


@dataclass
class FactoryConfig:
    name: str = "custom"
    deployer: bytes = ZERO_ADDRESS

    address_size: int = ADDRESS_SIZE
    hash_size: int = HASH_SIZE
    salt_size: int = SALT_SIZE

    # Nonce table backend for the sequential predictor
    store_type: str = "memory"
    store_path: str = "nonces.db"

    def __post_init__(self):
        if self.store_type not in ("memory", "sqlite"):
            raise ValueError(f"Unknown store type: {self.store_type}")
        if len(self.deployer) != self.address_size:
            raise ValueError(
                f"Deployer must be {self.address_size} bytes, got {len(self.deployer)}"
            )

    @property
    def max_nonce(self) -> int:
        return 2 ** (8 * self.salt_size) - 1

    @classmethod
    def from_json(cls, data: dict) -> FactoryConfig:
        address_size = int(data.get("addressSize", ADDRESS_SIZE))
        deployer = data.get("deployer")
        if deployer is None:
            deployer_bytes = b"\x00" * address_size
        elif address_size == ADDRESS_SIZE:
            deployer_bytes = parse_address(deployer)
        else:
            deployer_bytes = decode_hex(deployer)
        return cls(
            name=data.get("name", "custom"),
            deployer=deployer_bytes,
            address_size=address_size,
            hash_size=int(data.get("hashSize", HASH_SIZE)),
            salt_size=int(data.get("saltSize", SALT_SIZE)),
            store_type=data.get("storeType", "memory"),
            store_path=data.get("storePath", "nonces.db"),
        )

    def to_json(self) -> dict:
        return {
            "name": self.name,
            "deployer": (
                to_checksum_address(self.deployer)
                if self.address_size == ADDRESS_SIZE
                else encode_hex(self.deployer)
            ),
            "addressSize": self.address_size,
            "hashSize": self.hash_size,
            "saltSize": self.salt_size,
            "storeType": self.store_type,
            "storePath": self.store_path,
        }


def parse_address(value: str) -> bytes:
    if not is_hex_address(value):
        raise ValueError(f"Not a hex address: {value}")
    return to_canonical_address(value)


def load_config(path: str | Path) -> FactoryConfig:
    with open(path) as f:
        return FactoryConfig.from_json(json.load(f))


# ---------------------------------------------------------------------------
# Well-known factories
# ---------------------------------------------------------------------------

# EIP-2470 singleton factory, deploy(bytes initCode, bytes32 salt)
SINGLETON_FACTORY_CONFIG = FactoryConfig(
    name="singleton",
    deployer=bytes.fromhex("ce0042b868300000d44a59004da54a005ffdcf9f"),
)

# Arachnid's deterministic deployment proxy, calldata = salt ++ initCode
DETERMINISTIC_PROXY_CONFIG = FactoryConfig(
    name="proxy",
    deployer=bytes.fromhex("4e59b44847b379578588920ca78fbf26c0b4956c"),
)

# Deployer of the proxy above; its private key is unknown.
DETERMINISTIC_PROXY_SIGNER = bytes.fromhex("3fab184622dc19b6109349b94811493bf2a45362")

# The three factory roles have no fixed address yet. Their deployer is the
# zero address until overridden with --deployer or a config file.
SALTED_FACTORY_CONFIG = FactoryConfig(name="salted")
SEQUENTIAL_FACTORY_CONFIG = FactoryConfig(name="sequential")
COUNTERFACTUAL_FACTORY_CONFIG = FactoryConfig(name="counterfactual")

FACTORY_PRESETS: dict[str, FactoryConfig] = {
    SINGLETON_FACTORY_CONFIG.name: SINGLETON_FACTORY_CONFIG,
    DETERMINISTIC_PROXY_CONFIG.name: DETERMINISTIC_PROXY_CONFIG,
    SALTED_FACTORY_CONFIG.name: SALTED_FACTORY_CONFIG,
    SEQUENTIAL_FACTORY_CONFIG.name: SEQUENTIAL_FACTORY_CONFIG,
    COUNTERFACTUAL_FACTORY_CONFIG.name: COUNTERFACTUAL_FACTORY_CONFIG,
}


def get_preset(name: str) -> Optional[FactoryConfig]:
    return FACTORY_PRESETS.get(name)


def is_placeholder(config: FactoryConfig) -> bool:
    """True while a factory role still points at the zero address."""
    return config.deployer == b"\x00" * config.address_size
