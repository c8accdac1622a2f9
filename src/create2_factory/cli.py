"""Command-line interface for offline address prediction."""

import argparse
import json
import logging
import sqlite3
import sys
from dataclasses import replace

from eth_utils import decode_hex, encode_hex, to_checksum_address

from create2_factory.core.config import (
    FACTORY_PRESETS,
    FactoryConfig,
    get_preset,
    is_placeholder,
    load_config,
    parse_address,
)
from create2_factory.core.constants import KEYLESS_GAS_LIMIT, KEYLESS_GAS_PRICE
from create2_factory.core.create2 import (
    nonce_to_salt,
    predict_counterfactual,
    predict_salted,
)
from create2_factory.core.crypto import init_code_hash
from create2_factory.core.errors import PredictorError
from create2_factory.core.keyless import (
    build_keyless_transaction,
    keyless_factory_address,
    recover_sender,
)
from create2_factory.predictor.sequential import NonceTable


logger = logging.getLogger("create2_factory")


def _format_address(address: bytes) -> str:
    if len(address) == 20:
        return to_checksum_address(address)
    return encode_hex(address)


def _resolve_config(args) -> FactoryConfig:
    if args.config:
        config = load_config(args.config)
    elif args.factory:
        config = get_preset(args.factory)
        if config is None:
            raise PredictorError(f"Unknown factory preset: {args.factory}")
    else:
        config = FactoryConfig()

    overrides = {}
    if getattr(args, "deployer", None):
        overrides["deployer"] = parse_address(args.deployer)
    if getattr(args, "store", None):
        overrides["store_type"] = args.store
    if getattr(args, "db", None):
        overrides["store_path"] = args.db
    if overrides:
        config = replace(config, **overrides)
    if is_placeholder(config):
        logger.warning("Factory %s has no deployer address; using the zero address", config.name)
    return config


def _resolve_code_hash(args) -> bytes:
    if args.code_hash and args.init_code:
        raise PredictorError("Pass either --code-hash or --init-code, not both")
    if args.init_code:
        return init_code_hash(decode_hex(args.init_code))
    if args.code_hash:
        return decode_hex(args.code_hash)
    raise PredictorError("One of --code-hash or --init-code is required")


def _widths(config: FactoryConfig) -> dict:
    return {
        "address_size": config.address_size,
        "hash_size": config.hash_size,
        "salt_size": config.salt_size,
    }


def cmd_salted(args) -> dict:
    config = _resolve_config(args)
    code_hash = _resolve_code_hash(args)
    if args.salt_int is not None:
        salt = nonce_to_salt(args.salt_int, config.salt_size)
    else:
        salt = decode_hex(args.salt)
    address = predict_salted(config.deployer, code_hash, salt, **_widths(config))
    return {"address": _format_address(address), "salt": encode_hex(salt)}


def cmd_counterfactual(args) -> dict:
    config = _resolve_config(args)
    code_hash = _resolve_code_hash(args)
    address = predict_counterfactual(config.deployer, code_hash, **_widths(config))
    return {"address": _format_address(address), "salt": encode_hex(code_hash)}


def cmd_sequential(args) -> dict:
    config = _resolve_config(args)
    code_hash = _resolve_code_hash(args)
    table = NonceTable.from_config(config)
    try:
        with table.reserve(config.deployer, code_hash) as slot:
            if args.commit:
                slot.commit()
                logger.info("Committed nonce %d", slot.nonce)
        return {
            "address": _format_address(slot.address),
            "nonce": slot.nonce,
            "committed": slot.committed,
        }
    finally:
        table.close()


def cmd_peek(args) -> dict:
    config = _resolve_config(args)
    code_hash = _resolve_code_hash(args)
    table = NonceTable.from_config(config)
    try:
        return {"nonce": table.peek_nonce(code_hash)}
    finally:
        table.close()


def cmd_commit(args) -> dict:
    config = _resolve_config(args)
    code_hash = _resolve_code_hash(args)
    table = NonceTable.from_config(config)
    try:
        committed = table.commit(code_hash, expected=args.expected)
        logger.info("Committed nonce %d", committed)
        return {"committed": committed, "nonce": table.peek_nonce(code_hash)}
    finally:
        table.close()


def cmd_recover(args) -> dict:
    payload = decode_hex(args.tx)
    result = {"sender": _format_address(recover_sender(payload))}
    if args.factory_address:
        result["factory"] = _format_address(keyless_factory_address(payload))
    return result


def cmd_keyless(args) -> dict:
    payload = build_keyless_transaction(
        decode_hex(args.init_code),
        gas_price=args.gas_price,
        gas_limit=args.gas_limit,
    )
    return {
        "transaction": encode_hex(payload),
        "sender": _format_address(recover_sender(payload)),
        "factory": _format_address(keyless_factory_address(payload)),
        "funding": args.gas_price * args.gas_limit,
    }


def cmd_presets(args) -> dict:
    return {name: config.to_json() for name, config in FACTORY_PRESETS.items()}


def _add_target_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--factory", choices=sorted(FACTORY_PRESETS), help="Well-known factory preset")
    parser.add_argument("--deployer", help="Factory address (overrides preset/config)")
    parser.add_argument("--code-hash", help="keccak256 of the init code")
    parser.add_argument("--init-code", help="Init code; hashed locally")


def _add_store_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--store", choices=["memory", "sqlite"], help="Nonce table backend")
    parser.add_argument("--db", help="SQLite nonce database path")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create2-factory",
        description="Predict addresses of salted, sequential and counterfactual deployments",
    )
    parser.add_argument("--config", help="JSON factory configuration file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("salted", help="Address for a caller-chosen salt")
    _add_target_args(p)
    group = p.add_mutually_exclusive_group()
    group.add_argument("--salt", default="0x" + "00" * 32, help="Salt as hex (default: zero)")
    group.add_argument("--salt-int", type=int, help="Salt as an integer")
    p.set_defaults(func=cmd_salted)

    p = sub.add_parser("counterfactual", help="Address using the code hash as salt")
    _add_target_args(p)
    p.set_defaults(func=cmd_counterfactual)

    p = sub.add_parser("sequential", help="Address of the next sequential deployment")
    _add_target_args(p)
    _add_store_args(p)
    p.add_argument("--commit", action="store_true", help="Advance the counter after predicting")
    p.set_defaults(func=cmd_sequential)

    p = sub.add_parser("peek", help="Current sequential counter")
    _add_target_args(p)
    _add_store_args(p)
    p.set_defaults(func=cmd_peek)

    p = sub.add_parser("commit", help="Advance the sequential counter")
    _add_target_args(p)
    _add_store_args(p)
    p.add_argument("--expected", type=int, help="Counter value the deployment used")
    p.set_defaults(func=cmd_commit)

    p = sub.add_parser("recover", help="Recover the sender of a raw transaction")
    p.add_argument("tx", help="RLP-encoded transaction as hex")
    p.add_argument(
        "--factory-address",
        action="store_true",
        help="Also print the address the transaction creates",
    )
    p.set_defaults(func=cmd_recover)

    p = sub.add_parser("keyless", help="Build a keyless deployment transaction")
    p.add_argument("init_code", help="Factory init code as hex")
    p.add_argument("--gas-price", type=int, default=KEYLESS_GAS_PRICE)
    p.add_argument("--gas-limit", type=int, default=KEYLESS_GAS_LIMIT)
    p.set_defaults(func=cmd_keyless)

    p = sub.add_parser("presets", help="List well-known factories")
    p.set_defaults(func=cmd_presets)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        result = args.func(args)
    except (PredictorError, ValueError, OSError, sqlite3.Error) as e:
        logger.error("%s", e)
        return 1

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
