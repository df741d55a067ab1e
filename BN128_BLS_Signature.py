#!/usr/bin/env python3
"""
BN128 BLS Signature Implementation
在BN128曲線上實現BLS簽名，產生的簽名與聚合公鑰可由以太坊智能合約驗證
- 私鑰為隨機質數，公鑰同時提供G2與G1兩種形式
- 消息需由呼叫端先做 hash-to-curve，以兩個十六進位座標傳入
- 簽名與公鑰的聚合直接使用群加法
"""

import hashlib
import logging
import re
import secrets
from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, List, Optional, Sequence, Tuple

from sympy import isprime

from BLS_Exceptions import (
    AggregationInputError,
    EmptyInputError,
    InvalidEncodingError,
    InvalidPointError,
    RandomGenerationError,
)
from BN128_Curve_Engine import BN128CurveEngine, CurveEngine

logger = logging.getLogger(__name__)

DEFAULT_PRIVATE_KEY_SIZE = 256
MAX_PRIME_CANDIDATES = 10000

_HEX_PATTERN = re.compile(r"\+?[0-9a-fA-F]+")


def parse_hex(value: str, name: str) -> int:
    """將十六進位字串解析為非負整數，不接受 0x 前綴或空白"""
    if not isinstance(value, str) or not _HEX_PATTERN.fullmatch(value):
        raise InvalidEncodingError(name, value)
    return int(value, 16)


@dataclass(frozen=True)
class KeyPair:
    """BLS金鑰對，兩種公鑰皆由同一私鑰推導"""
    private_key: int = field(repr=False)
    public_key_g2: Tuple  # G2上的點
    public_key_g1: Tuple  # G1上的點

    @classmethod
    def derive(cls, engine: CurveEngine, private_key: int) -> "KeyPair":
        return cls(
            private_key=private_key,
            public_key_g2=engine.g2_multiply(engine.g2_generator, private_key),
            public_key_g1=engine.g1_multiply(engine.g1_generator, private_key),
        )


class BN128BLSSignature:
    """BN128 BLS簽名系統實作"""

    def __init__(self, engine: Optional[CurveEngine] = None,
                 private_key_size: int = DEFAULT_PRIVATE_KEY_SIZE,
                 randbits: Optional[Callable[[int], int]] = None):
        self.engine = engine if engine is not None else BN128CurveEngine()
        self.private_key_size = DEFAULT_PRIVATE_KEY_SIZE
        self.set_private_key_size(private_key_size)
        self._randbits = randbits if randbits is not None else secrets.randbits

    def set_private_key_size(self, private_key_size: int):
        """設定之後隨機產生私鑰的位元長度，不影響已產生或匯入的金鑰"""
        if private_key_size < 2:
            raise ValueError(f"private key size must be at least 2 bits, got {private_key_size}")
        self.private_key_size = private_key_size

    # --- 金鑰產生 ---

    def _random_prime(self, bits: int) -> int:
        mask = (1 << bits) - 1
        # 設定最高兩位元確保長度固定，並設為奇數
        top = 3 << (bits - 2)
        for attempt in range(1, MAX_PRIME_CANDIDATES + 1):
            try:
                candidate = self._randbits(bits)
            except (OSError, NotImplementedError) as e:
                raise RandomGenerationError(f"failed to generate private key: {e}") from e
            candidate = (candidate & mask) | top | 1
            if isprime(candidate):
                logger.debug("found %d-bit prime after %d candidates", bits, attempt)
                return candidate
        raise RandomGenerationError(
            f"failed to generate private key: no {bits}-bit prime in {MAX_PRIME_CANDIDATES} candidates")

    def generate_random_key_pair(self) -> KeyPair:
        """產生隨機質數私鑰，並推導G2與G1公鑰"""
        private_key = self._random_prime(self.private_key_size)
        return KeyPair.derive(self.engine, private_key)

    def import_key_pair(self, private_key_hex: str) -> KeyPair:
        """由十六進位私鑰建立金鑰對，不檢查質數性與範圍"""
        private_key = parse_hex(private_key_hex, "private_key")
        if private_key % self.engine.curve_order == 0:
            logger.warning("imported private key is a multiple of the curve order, "
                           "public keys are the point at infinity")
        return KeyPair.derive(self.engine, private_key)

    # --- 仿射座標輸出 ---

    def to_affine(self, public_key_g2) -> List[int]:
        """G2公鑰攤平成四個整數 [x0, x1, y0, y1]，供合約逐欄位傳入"""
        (x0, x1), (y0, y1) = self.engine.g2_affine(public_key_g2)
        return [x0, x1, y0, y1]

    def to_affine_g1(self, public_key_g1) -> List[int]:
        """G1公鑰的仿射座標 [x, y]"""
        return list(self.engine.g1_affine(public_key_g1))

    def to_affine_g2(self, public_key_g2) -> List[List[int]]:
        """G2公鑰的仿射座標 [[x0, x1], [y0, y1]]"""
        x, y = self.engine.g2_affine(public_key_g2)
        return [list(x), list(y)]

    def to_affine_signature(self, signature) -> List[int]:
        """簽名的仿射座標 [x, y]"""
        return list(self.engine.g1_affine(signature))

    # --- 簽名與驗證 ---

    def _message_point(self, message_x_hex: str, message_y_hex: str):
        message_x = parse_hex(message_x_hex, "message_x")
        message_y = parse_hex(message_y_hex, "message_y")
        point = self.engine.new_g1(message_x, message_y)
        if self.engine.g1_is_identity(point):
            raise InvalidPointError("message point must not be the point at infinity")
        return point

    def sign(self, key_pair: KeyPair, message_x_hex: str, message_y_hex: str):
        """
        計算BLS簽名：σ = sk * H(m)
        H(m) 由呼叫端先行計算，以兩個十六進位座標傳入
        """
        message_point = self._message_point(message_x_hex, message_y_hex)
        return self.engine.g1_multiply(message_point, key_pair.private_key)

    def verify(self, signature, signer_public_key_g2,
               message_x_hex: str, message_y_hex: str) -> bool:
        """驗證：e(H(m), pk) = e(σ, G2)"""
        message_point = self._message_point(message_x_hex, message_y_hex)
        # e(·, O) = 1，無窮遠點公鑰會讓無窮遠點簽名對任何消息都通過
        if self.engine.g2_is_identity(signer_public_key_g2):
            raise InvalidPointError("signer public key must not be the point at infinity")
        pair1 = self.engine.pairing(message_point, signer_public_key_g2)
        pair2 = self.engine.pairing(signature, self.engine.g2_generator)
        return self.engine.gt_equal(pair1, pair2)

    # --- 聚合 ---

    def aggregate_public_keys(self, public_keys_g1: Sequence,
                              public_keys_g2: Sequence) -> Tuple:
        """依輸入順序將G1與G2公鑰分別相加"""
        public_keys_g1 = list(public_keys_g1)
        public_keys_g2 = list(public_keys_g2)
        if len(public_keys_g1) != len(public_keys_g2):
            raise AggregationInputError(
                f"public_keys_g1 and public_keys_g2 must have the same length "
                f"({len(public_keys_g1)} != {len(public_keys_g2)})")
        if not public_keys_g1:
            raise EmptyInputError("no public keys to aggregate")
        if len(public_keys_g1) == 1:
            return public_keys_g1[0], public_keys_g2[0]

        logger.debug("aggregating %d public keys", len(public_keys_g1))
        return (reduce(self.engine.g1_add, public_keys_g1),
                reduce(self.engine.g2_add, public_keys_g2))

    def aggregate_signatures(self, signatures: Sequence):
        """依輸入順序將簽名相加"""
        signatures = list(signatures)
        if not signatures:
            raise EmptyInputError("no signatures to aggregate")
        if len(signatures) == 1:
            return signatures[0]

        logger.debug("aggregating %d signatures", len(signatures))
        return reduce(self.engine.g1_add, signatures)

    # --- 外部座標匯入 ---

    def import_g1(self, x: int, y: int):
        """由外部座標還原G1點 (簽名或G1公鑰)"""
        return self.engine.new_g1(x, y)

    def import_g2(self, x00: int, x01: int, x10: int, x11: int):
        """由外部座標還原G2公鑰"""
        return self.engine.new_g2(((x00, x01), (x10, x11)))


def initialize(private_key_size: int = DEFAULT_PRIVATE_KEY_SIZE) -> BN128BLSSignature:
    """建立使用BN128曲線引擎的簽名系統，引擎初始化失敗時拋出 EngineInitializationError"""
    return BN128BLSSignature(private_key_size=private_key_size)


def hash_to_g1(engine: CurveEngine, message: bytes) -> Tuple[str, str]:
    """將消息映射到G1上的點，回傳十六進位座標"""
    # 簡化的映射：H(m) = sha256(m) * G1，離散對數已知，只能用於示範
    # 在生產環境中應該使用標準的hash-to-curve算法
    hash_bytes = hashlib.sha256(message).digest()
    scalar = int.from_bytes(hash_bytes, "big") % engine.curve_order
    x, y = engine.g1_affine(engine.g1_multiply(engine.g1_generator, scalar))
    return format(x, "x"), format(y, "x")


def format_point(coordinates: Sequence) -> str:
    """格式化仿射座標的顯示"""
    parts = []
    for value in coordinates:
        if isinstance(value, (list, tuple)):
            parts.append(format_point(value))
        else:
            parts.append(f"{hex(value)[:10]}...")
    return "(" + ", ".join(parts) + ")"


def run_demo(bls: BN128BLSSignature, message: bytes) -> bool:
    """模擬兩位簽名者的簽名、驗證與聚合流程"""
    print(f"消息: {message.decode('utf-8', errors='ignore')}")
    message_x, message_y = hash_to_g1(bls.engine, message)
    print(f"H(m): ({message_x[:8]}..., {message_y[:8]}...)")

    print("\n步驟1: 產生金鑰對")
    key_pairs = [bls.generate_random_key_pair() for _ in range(2)]
    for i, key_pair in enumerate(key_pairs, 1):
        print(f"  簽名者 {i} 公鑰(G1): {format_point(bls.to_affine_g1(key_pair.public_key_g1))}")

    print("\n步驟2: 個別簽名與驗證")
    signatures = []
    for i, key_pair in enumerate(key_pairs, 1):
        signature = bls.sign(key_pair, message_x, message_y)
        signatures.append(signature)
        is_valid = bls.verify(signature, key_pair.public_key_g2, message_x, message_y)
        print(f"  簽名者 {i}: {format_point(bls.to_affine_signature(signature))} "
              f"{'✅' if is_valid else '❌'}")
        if not is_valid:
            return False

    wrong_key_valid = bls.verify(signatures[0], key_pairs[1].public_key_g2, message_x, message_y)
    print(f"  以錯誤公鑰驗證: {'❌ 不應通過' if wrong_key_valid else '✅ 拒絕'}")

    print("\n步驟3: 聚合公鑰與簽名")
    aggregated_g1, aggregated_g2 = bls.aggregate_public_keys(
        [kp.public_key_g1 for kp in key_pairs],
        [kp.public_key_g2 for kp in key_pairs])
    aggregated_signature = bls.aggregate_signatures(signatures)
    print(f"  聚合公鑰(G2): {format_point(bls.to_affine_g2(aggregated_g2))}")
    print(f"  聚合公鑰(G1): {format_point(bls.to_affine_g1(aggregated_g1))}")
    print(f"  聚合簽名: {format_point(bls.to_affine_signature(aggregated_signature))}")

    is_valid = bls.verify(aggregated_signature, aggregated_g2, message_x, message_y)
    print(f"\n聚合簽名驗證: {'✅ 成功' if is_valid else '❌ 失敗'}")
    return is_valid and not wrong_key_valid


def main():
    print("=== BN128 BLS簽名演示 ===\n")
    bls = initialize()
    run_demo(bls, b"Hello, BN128 BLS Signature!")


if __name__ == "__main__":
    main()
