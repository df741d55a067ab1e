import random

import pytest

from BN128_BLS_Signature import BN128BLSSignature
from BN128_Curve_Engine import CurveEngine


class ToyCurveEngine(CurveEngine):
    """
    測試用的曲線引擎替身
    G1、G2、GT 都以 Z_r 的加法群表示，配對為 e(a, b) = a * b mod r
    仿射座標只是可還原的編碼，不檢查點是否在曲線上
    """

    ORDER = 1000003

    def __init__(self):
        self.curve_order = self.ORDER
        self.field_modulus = self.ORDER
        self.g1_generator = 1
        self.g2_generator = 1

    def g1_multiply(self, point, scalar):
        return point * scalar % self.ORDER

    g2_multiply = g1_multiply

    def g1_add(self, p, q):
        return (p + q) % self.ORDER

    g2_add = g1_add

    def g1_equal(self, p, q):
        return p % self.ORDER == q % self.ORDER

    g2_equal = g1_equal

    def g1_is_identity(self, point):
        return point % self.ORDER == 0

    g2_is_identity = g1_is_identity

    def g1_affine(self, point):
        return (0, point)

    def g2_affine(self, point):
        return ((0, 0), (0, point))

    def new_g1(self, x, y):
        return (x * 31 + y) % self.ORDER

    def new_g2(self, coordinates):
        (x0, x1), (y0, y1) = coordinates
        return (((x0 * 31 + x1) * 31 + y0) * 31 + y1) % self.ORDER

    def pairing(self, point_g1, point_g2):
        return point_g1 * point_g2 % self.ORDER

    def gt_equal(self, lhs, rhs):
        return lhs == rhs


@pytest.fixture
def toy_engine():
    return ToyCurveEngine()


@pytest.fixture
def toy_bls(toy_engine):
    """使用固定種子的簽名系統，金鑰產生可重現"""
    return BN128BLSSignature(engine=toy_engine, randbits=random.Random(2024).getrandbits)
