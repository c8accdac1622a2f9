"""Field widths and well-known values."""

ADDRESS_SIZE = 20
HASH_SIZE = 32
SALT_SIZE = 32

CREATE2_PREFIX = b"\xff"

ZERO_ADDRESS = b"\x00" * ADDRESS_SIZE

# Signature components of the uncontrolled deployment transaction.
KEYLESS_V = 27
KEYLESS_R = int("22" * 32, 16)
KEYLESS_S = int("22" * 32, 16)

KEYLESS_GAS_PRICE = 100_000_000_000  # 100 Gwei
KEYLESS_GAS_LIMIT = 100_000

# secp256k1 group order
SECPK1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
