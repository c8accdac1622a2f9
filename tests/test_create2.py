"""Tests for CREATE2 address derivation and the stateless predictors."""

import pytest
from eth_utils import keccak

from create2_factory.core.create2 import (
    compute_create2_address,
    compute_create_address,
    derive,
    nonce_to_salt,
    predict_counterfactual,
    predict_salted,
)
from create2_factory.core.errors import CounterOverflow, MalformedInput
from tests.fixtures.addresses import (
    CODE_HASH_11,
    CODE_HASH_22,
    DEPLOYER_AA,
    DEPLOYER_DEADBEEF,
    PROXY_FACTORY_ADDRESS,
    PROXY_KEYLESS_SIGNER,
    SALT_ONE,
    SALT_ZERO,
)
from tests.fixtures.contracts import SIMPLE_INIT_CODE


# Examples published with EIP-1014: (deployer, salt, init_code, address)
EIP1014_VECTORS = [
    (
        "0000000000000000000000000000000000000000",
        "00" * 32,
        "00",
        "4d1a2e2bb4f88f0250f26ffff098b0b30b26bf38",
    ),
    (
        "deadbeef00000000000000000000000000000000",
        "00" * 32,
        "00",
        "b928f69bb1d91cd65274e3c79d8986362984fda3",
    ),
    (
        "deadbeef00000000000000000000000000000000",
        "000000000000000000000000feed000000000000000000000000000000000000",
        "00",
        "d04116cdd17bebe565eb2422f2497e06cc1c9833",
    ),
    (
        "0000000000000000000000000000000000000000",
        "00" * 32,
        "deadbeef",
        "70f2b2914a2a4b783faefb75f459a580616fcb5e",
    ),
    (
        "00000000000000000000000000000000deadbeef",
        "00000000000000000000000000000000000000000000000000000000cafebabe",
        "deadbeef",
        "60f3f640a8508fc6a86d45df051962668e1e8ac7",
    ),
    (
        "0000000000000000000000000000000000000000",
        "00" * 32,
        "",
        "e33c0c7f7df4809055c3eba6c09cfe4baf1bd9e0",
    ),
]


class TestDerive:
    """Test the shared derivation primitive."""

    @pytest.mark.parametrize("deployer,salt,init_code,expected", EIP1014_VECTORS)
    def test_eip1014_vectors(self, deployer, salt, init_code, expected):
        address = derive(
            bytes.fromhex(deployer),
            keccak(bytes.fromhex(init_code)),
            bytes.fromhex(salt),
        )
        assert address.hex() == expected

    def test_deterministic(self):
        """Same inputs always give the same address."""
        address1 = derive(DEPLOYER_AA, CODE_HASH_11, SALT_ZERO)
        address2 = derive(DEPLOYER_AA, CODE_HASH_11, SALT_ZERO)

        assert address1 == address2
        assert len(address1) == 20

    def test_salt_sensitivity(self):
        """0xaa.. / 0x11.. with salts 0 and 1 land on different addresses."""
        p1 = derive(DEPLOYER_AA, CODE_HASH_11, SALT_ZERO)
        p2 = derive(DEPLOYER_AA, CODE_HASH_11, SALT_ONE)

        assert p1 != p2

    def test_different_deployers(self):
        assert derive(DEPLOYER_AA, CODE_HASH_11, SALT_ZERO) != derive(
            DEPLOYER_DEADBEEF, CODE_HASH_11, SALT_ZERO
        )

    def test_different_code_hashes(self):
        assert derive(DEPLOYER_AA, CODE_HASH_11, SALT_ZERO) != derive(
            DEPLOYER_AA, CODE_HASH_22, SALT_ZERO
        )

    def test_many_salts_distinct(self):
        """Distinct salts give distinct addresses (probabilistically)."""
        addresses = {derive(DEPLOYER_AA, CODE_HASH_11, nonce_to_salt(i)) for i in range(256)}
        assert len(addresses) == 256

    def test_accepts_bytearray(self):
        assert derive(bytearray(DEPLOYER_AA), CODE_HASH_11, SALT_ZERO) == derive(
            DEPLOYER_AA, CODE_HASH_11, SALT_ZERO
        )

    @pytest.mark.parametrize(
        "deployer,code_hash,salt,field",
        [
            (bytes(19), CODE_HASH_11, SALT_ZERO, "deployer"),
            (bytes(21), CODE_HASH_11, SALT_ZERO, "deployer"),
            (DEPLOYER_AA, bytes(31), SALT_ZERO, "code_hash"),
            (DEPLOYER_AA, CODE_HASH_11, bytes(31), "salt"),
            (DEPLOYER_AA, CODE_HASH_11, bytes(33), "salt"),
        ],
    )
    def test_malformed_input(self, deployer, code_hash, salt, field):
        with pytest.raises(MalformedInput, match=f"{field} must be"):
            derive(deployer, code_hash, salt)

    def test_malformed_input_is_value_error(self):
        with pytest.raises(ValueError):
            derive(bytes(19), CODE_HASH_11, SALT_ZERO)

    def test_non_bytes_rejected(self):
        with pytest.raises(MalformedInput, match="deployer must be 20 bytes, got str"):
            derive("aa" * 20, CODE_HASH_11, SALT_ZERO)

    def test_custom_widths(self):
        """Widths are configuration, not hard-coded."""
        address = derive(
            bytes(32),
            bytes(32),
            bytes(16),
            address_size=32,
            salt_size=16,
        )
        assert len(address) == 32

        with pytest.raises(MalformedInput):
            derive(bytes(32), bytes(32), bytes(32), address_size=32, salt_size=16)


class TestPredictors:
    """Test the salted and counterfactual predictors."""

    def test_salted_matches_derive(self):
        assert predict_salted(DEPLOYER_AA, CODE_HASH_11, SALT_ONE) == derive(
            DEPLOYER_AA, CODE_HASH_11, SALT_ONE
        )

    def test_salted_zero_salt(self):
        """The all-zero salt is legal."""
        address = predict_salted(DEPLOYER_AA, CODE_HASH_11, SALT_ZERO)
        assert len(address) == 20

    @pytest.mark.parametrize("deployer", [DEPLOYER_AA, DEPLOYER_DEADBEEF, bytes(20)])
    @pytest.mark.parametrize("code_hash", [CODE_HASH_11, CODE_HASH_22, keccak(SIMPLE_INIT_CODE)])
    def test_counterfactual_is_self_salted(self, deployer, code_hash):
        assert predict_counterfactual(deployer, code_hash) == predict_salted(
            deployer, code_hash, code_hash
        )

    def test_counterfactual_differs_from_zero_salt(self):
        assert predict_counterfactual(DEPLOYER_AA, CODE_HASH_11) != predict_salted(
            DEPLOYER_AA, CODE_HASH_11, SALT_ZERO
        )

    def test_counterfactual_malformed_hash(self):
        with pytest.raises(MalformedInput):
            predict_counterfactual(DEPLOYER_AA, bytes(20))


class TestNonceToSalt:
    def test_zero(self):
        assert nonce_to_salt(0) == SALT_ZERO

    def test_one(self):
        assert nonce_to_salt(1) == SALT_ONE

    def test_big_endian(self):
        assert nonce_to_salt(0x0102) == bytes(30) + b"\x01\x02"

    def test_max_value(self):
        assert nonce_to_salt(2**256 - 1) == b"\xff" * 32

    def test_overflow(self):
        with pytest.raises(CounterOverflow):
            nonce_to_salt(2**256)

    def test_small_width_overflow(self):
        assert nonce_to_salt(255, salt_size=1) == b"\xff"
        with pytest.raises(CounterOverflow):
            nonce_to_salt(256, salt_size=1)

    def test_negative(self):
        with pytest.raises(ValueError):
            nonce_to_salt(-1)


class TestInitCodeHelpers:
    """Test the raw-init-code and CREATE helpers."""

    def test_create2_from_init_code(self):
        salt = SALT_ZERO
        address1 = compute_create2_address(DEPLOYER_DEADBEEF, salt, SIMPLE_INIT_CODE)
        address2 = derive(DEPLOYER_DEADBEEF, keccak(SIMPLE_INIT_CODE), salt)

        assert address1 == address2

    def test_create2_init_code_affects_address(self):
        address1 = compute_create2_address(DEPLOYER_DEADBEEF, SALT_ZERO, SIMPLE_INIT_CODE)
        address2 = compute_create2_address(DEPLOYER_DEADBEEF, SALT_ZERO, SIMPLE_INIT_CODE + b"\x00")

        assert address1 != address2

    def test_create2_invalid_sender_length(self):
        with pytest.raises(MalformedInput, match="deployer must be 20 bytes"):
            compute_create2_address(bytes(19), SALT_ZERO, b"\x00")

    def test_create_address_known_vectors(self):
        sender = bytes.fromhex("6ac7ea33f8831ea9dcc53393aaa88b25a785dbf0")

        assert compute_create_address(sender, 0).hex() == "cd234a471b72ba2f1ccf0a70fcaba648a5eecd8d"
        assert compute_create_address(sender, 1).hex() == "343c43a37d37dff08ae8c4a11544c718abb4fcf8"

    def test_create_address_of_keyless_proxy(self):
        """The deterministic deployment proxy sits at its keyless signer's nonce 0."""
        assert compute_create_address(PROXY_KEYLESS_SIGNER, 0) == PROXY_FACTORY_ADDRESS

    def test_create_and_create2_differ(self):
        assert compute_create_address(DEPLOYER_DEADBEEF, 0) != compute_create2_address(
            DEPLOYER_DEADBEEF, SALT_ZERO, SIMPLE_INIT_CODE
        )

    def test_create_address_invalid_sender(self):
        with pytest.raises(MalformedInput, match="sender must be 20 bytes"):
            compute_create_address(bytes(19), 0)

    def test_create_address_negative_nonce(self):
        with pytest.raises(ValueError):
            compute_create_address(DEPLOYER_DEADBEEF, -1)
