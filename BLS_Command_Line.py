#!/usr/bin/env python3
"""
BN128 BLS Command Line
BN128 BLS簽名的命令列工具，所有座標與私鑰都以十六進位字串輸入輸出 (JSON)
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from BLS_Exceptions import BLSError
from BN128_BLS_Signature import (
    DEFAULT_PRIVATE_KEY_SIZE,
    BN128BLSSignature,
    KeyPair,
    hash_to_g1,
    initialize,
    parse_hex,
    run_demo,
)

logger = logging.getLogger(__name__)


def to_hex(values):
    if isinstance(values, (list, tuple)):
        return [to_hex(v) for v in values]
    return format(values, "x")


def key_pair_to_json(bls: BN128BLSSignature, key_pair: KeyPair) -> dict:
    return {
        "private_key": to_hex(key_pair.private_key),
        "public_key": to_hex(bls.to_affine(key_pair.public_key_g2)),
        "public_key_g1": to_hex(bls.to_affine_g1(key_pair.public_key_g1)),
        "public_key_g2": to_hex(bls.to_affine_g2(key_pair.public_key_g2)),
    }


def read_g1(bls: BN128BLSSignature, values: List[str], name: str):
    x, y = (parse_hex(v, name) for v in values)
    return bls.import_g1(x, y)


def read_g2(bls: BN128BLSSignature, values: List[str], name: str):
    return bls.import_g2(*(parse_hex(v, name) for v in values))


def cmd_generate(bls: BN128BLSSignature, args) -> dict:
    # --key-size 只作用於這次產生，不改變共用的實例設定
    previous = bls.private_key_size
    bls.set_private_key_size(args.key_size)
    try:
        return key_pair_to_json(bls, bls.generate_random_key_pair())
    finally:
        bls.private_key_size = previous


def cmd_import(bls: BN128BLSSignature, args) -> dict:
    return key_pair_to_json(bls, bls.import_key_pair(args.private_key))


def cmd_hash_message(bls: BN128BLSSignature, args) -> dict:
    message_x, message_y = hash_to_g1(bls.engine, args.message.encode("utf-8"))
    return {"message_x": message_x, "message_y": message_y}


def cmd_sign(bls: BN128BLSSignature, args) -> dict:
    key_pair = bls.import_key_pair(args.private_key)
    signature = bls.sign(key_pair, args.message_x, args.message_y)
    return {"signature": to_hex(bls.to_affine_signature(signature))}


def cmd_verify(bls: BN128BLSSignature, args) -> dict:
    signature = read_g1(bls, args.signature, "signature")
    public_key = read_g2(bls, args.public_key, "public_key")
    return {"valid": bls.verify(signature, public_key, args.message_x, args.message_y)}


def cmd_aggregate_keys(bls: BN128BLSSignature, args) -> dict:
    keys_g1 = [read_g1(bls, values, "public_key_g1") for values in args.g1 or []]
    keys_g2 = [read_g2(bls, values, "public_key_g2") for values in args.g2 or []]
    aggregated_g1, aggregated_g2 = bls.aggregate_public_keys(keys_g1, keys_g2)
    return {
        "public_key": to_hex(bls.to_affine(aggregated_g2)),
        "public_key_g1": to_hex(bls.to_affine_g1(aggregated_g1)),
        "public_key_g2": to_hex(bls.to_affine_g2(aggregated_g2)),
    }


def cmd_aggregate_signatures(bls: BN128BLSSignature, args) -> dict:
    signatures = [read_g1(bls, values, "signature") for values in args.signature or []]
    aggregated = bls.aggregate_signatures(signatures)
    return {"signature": to_hex(bls.to_affine_signature(aggregated))}


def cmd_demo(bls: BN128BLSSignature, args) -> dict:
    return {"valid": run_demo(bls, args.message.encode("utf-8"))}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bn128-bls",
        description="BLS signatures over BN128, verifiable by Ethereum smart contracts.")
    parser.add_argument("--debug", action="store_true", default=False,
                        help="Enable verbose debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="Generate a random key pair")
    p.add_argument("--key-size", type=int, default=DEFAULT_PRIVATE_KEY_SIZE,
                   help="Private key bit length (default: %(default)s)")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("import", help="Derive a key pair from a hex private key")
    p.add_argument("private_key", help="Private key (hex)")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("hash-message",
                       help="Map a message to G1 as sha256(m)*G1 (demonstration only, not a secure hash-to-curve)")
    p.add_argument("message")
    p.set_defaults(func=cmd_hash_message)

    p = sub.add_parser("sign", help="Sign pre-hashed message coordinates")
    p.add_argument("private_key", help="Private key (hex)")
    p.add_argument("message_x", help="Message point x (hex)")
    p.add_argument("message_y", help="Message point y (hex)")
    p.set_defaults(func=cmd_sign)

    p = sub.add_parser("verify", help="Verify a signature against a G2 public key")
    p.add_argument("--signature", nargs=2, required=True, metavar=("X", "Y"))
    p.add_argument("--public-key", nargs=4, required=True, metavar=("X0", "X1", "Y0", "Y1"))
    p.add_argument("message_x", help="Message point x (hex)")
    p.add_argument("message_y", help="Message point y (hex)")
    p.set_defaults(func=cmd_verify)

    p = sub.add_parser("aggregate-keys", help="Aggregate G1 and G2 public keys")
    p.add_argument("--g1", nargs=2, action="append", metavar=("X", "Y"))
    p.add_argument("--g2", nargs=4, action="append", metavar=("X0", "X1", "Y0", "Y1"))
    p.set_defaults(func=cmd_aggregate_keys)

    p = sub.add_parser("aggregate-signatures", help="Aggregate G1 signatures")
    p.add_argument("--signature", nargs=2, action="append", metavar=("X", "Y"))
    p.set_defaults(func=cmd_aggregate_signatures)

    p = sub.add_parser("demo", help="Run a two-signer sign/verify/aggregate walkthrough")
    p.add_argument("--message", default="Hello, BN128 BLS Signature!")
    p.set_defaults(func=cmd_demo)
    return parser


def main(argv: Optional[List[str]] = None, bls: Optional[BN128BLSSignature] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        if bls is None:
            bls = initialize()
        result = args.func(bls, args)
    except (BLSError, ValueError) as e:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2, ensure_ascii=False))
    if "valid" in result and not result["valid"]:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
