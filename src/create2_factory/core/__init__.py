"""Core derivation, hashing and configuration."""

from .constants import ADDRESS_SIZE, HASH_SIZE, SALT_SIZE, ZERO_ADDRESS
from .create2 import (
    compute_create2_address,
    compute_create_address,
    derive,
    predict_counterfactual,
    predict_salted,
)
from .crypto import init_code_hash, keccak256, recover_address
from .errors import (
    CounterOverflow,
    MalformedInput,
    PredictorError,
    RecoveryFailure,
    StaleNonce,
)
from .keyless import recover_sender

__all__ = [
    "ADDRESS_SIZE",
    "HASH_SIZE",
    "SALT_SIZE",
    "ZERO_ADDRESS",
    "compute_create2_address",
    "compute_create_address",
    "derive",
    "predict_counterfactual",
    "predict_salted",
    "init_code_hash",
    "keccak256",
    "recover_address",
    "recover_sender",
    "CounterOverflow",
    "MalformedInput",
    "PredictorError",
    "RecoveryFailure",
    "StaleNonce",
]
