"""
BN128 Curve Engine
BLS簽名所需的曲線運算介面，以及基於py_ecc的BN128實作

點在引擎內部使用射影座標 (x, y, z)，仿射座標則以整數表示：
- G1: (x, y)
- G2: ((x0, x1), (y0, y1))，每一對代表 c0 + c1*i
無窮遠點的仿射座標為全零，與以太坊預編譯合約的慣例相同。
"""

import logging
from typing import Tuple

from py_ecc.optimized_bn128 import (
    FQ, FQ2, G1, G2, Z1, Z2,
    add, b, b2, curve_order, eq, field_modulus,
    is_inf, is_on_curve, multiply, normalize, pairing,
)

from BLS_Exceptions import EngineInitializationError, InvalidPointError

logger = logging.getLogger(__name__)

AffineG1 = Tuple[int, int]
AffineG2 = Tuple[Tuple[int, int], Tuple[int, int]]


class CurveEngine:
    """配對曲線運算的最小介面，BLS簽名只透過這些方法操作點"""

    curve_order: int
    field_modulus: int
    g1_generator = None
    g2_generator = None

    def g1_multiply(self, point, scalar: int):
        raise NotImplementedError

    def g2_multiply(self, point, scalar: int):
        raise NotImplementedError

    def g1_add(self, p, q):
        raise NotImplementedError

    def g2_add(self, p, q):
        raise NotImplementedError

    def g1_equal(self, p, q) -> bool:
        raise NotImplementedError

    def g2_equal(self, p, q) -> bool:
        raise NotImplementedError

    def g1_is_identity(self, point) -> bool:
        raise NotImplementedError

    def g2_is_identity(self, point) -> bool:
        raise NotImplementedError

    def g1_affine(self, point) -> AffineG1:
        raise NotImplementedError

    def g2_affine(self, point) -> AffineG2:
        raise NotImplementedError

    def new_g1(self, x: int, y: int):
        """由仿射座標建立G1點，必須檢查點在曲線上"""
        raise NotImplementedError

    def new_g2(self, coordinates: AffineG2):
        """由仿射座標建立G2點，必須檢查點在曲線上及子群中"""
        raise NotImplementedError

    def pairing(self, point_g1, point_g2):
        raise NotImplementedError

    def gt_equal(self, lhs, rhs) -> bool:
        raise NotImplementedError


class BN128CurveEngine(CurveEngine):
    """使用 py_ecc.optimized_bn128 的曲線引擎"""

    def __init__(self):
        self.curve_order = curve_order
        self.field_modulus = field_modulus
        self.g1_generator = G1
        self.g2_generator = G2

        # 生成元必須在曲線上且階為 curve_order
        if not is_on_curve(G1, b) or not is_on_curve(G2, b2):
            raise EngineInitializationError("BN128 generators are not on the curve")
        if not is_inf(multiply(G1, curve_order)) or not is_inf(multiply(G2, curve_order)):
            raise EngineInitializationError("BN128 generators do not have prime order")
        logger.debug("BN128 curve engine ready, curve order %d bits", curve_order.bit_length())

    def g1_multiply(self, point, scalar: int):
        """G1純量乘法"""
        return multiply(point, scalar)

    def g2_multiply(self, point, scalar: int):
        """G2純量乘法"""
        return multiply(point, scalar)

    def g1_add(self, p, q):
        """G1點相加"""
        return add(p, q)

    def g2_add(self, p, q):
        """G2點相加"""
        return add(p, q)

    def g1_equal(self, p, q) -> bool:
        """比較兩個G1點 (射影座標下比較)"""
        return eq(p, q)

    def g2_equal(self, p, q) -> bool:
        """比較兩個G2點 (射影座標下比較)"""
        return eq(p, q)

    def g1_is_identity(self, point) -> bool:
        """G1點是否為無窮遠點"""
        return is_inf(point)

    def g2_is_identity(self, point) -> bool:
        """G2點是否為無窮遠點"""
        return is_inf(point)

    def g1_affine(self, point) -> AffineG1:
        """轉換為G1仿射座標，無窮遠點為 (0, 0)"""
        if is_inf(point):
            return (0, 0)
        x, y = normalize(point)
        return (int(x), int(y))

    def g2_affine(self, point) -> AffineG2:
        """轉換為G2仿射座標，無窮遠點為全零"""
        if is_inf(point):
            return ((0, 0), (0, 0))
        x, y = normalize(point)
        return (
            (int(x.coeffs[0]), int(x.coeffs[1])),
            (int(y.coeffs[0]), int(y.coeffs[1])),
        )

    def _check_range(self, *values: int):
        """座標必須在基礎體 [0, p) 範圍內"""
        for value in values:
            if not 0 <= value < field_modulus:
                raise InvalidPointError(f"coordinate {value:#x} is outside the base field")

    def new_g1(self, x: int, y: int):
        """建立G1點，檢查範圍及是否在曲線上"""
        self._check_range(x, y)
        if x == 0 and y == 0:
            return Z1
        point = (FQ(x), FQ(y), FQ.one())
        # BN128的G1餘因子為1，在曲線上即在子群中
        if not is_on_curve(point, b):
            raise InvalidPointError(f"({x:#x}, {y:#x}) is not on the G1 curve")
        return point

    def new_g2(self, coordinates: AffineG2):
        """建立G2點，檢查範圍、是否在扭曲線上及子群成員"""
        (x0, x1), (y0, y1) = coordinates
        self._check_range(x0, x1, y0, y1)
        if x0 == x1 == y0 == y1 == 0:
            return Z2
        point = (FQ2([x0, x1]), FQ2([y0, y1]), FQ2.one())
        if not is_on_curve(point, b2):
            raise InvalidPointError("coordinates are not on the G2 twist curve")
        if not is_inf(multiply(point, curve_order)):
            raise InvalidPointError("point is not in the G2 subgroup")
        return point

    def pairing(self, point_g1, point_g2):
        """計算雙線性配對 e(P, Q)"""
        # py_ecc 的參數順序為 (G2, G1)
        return pairing(point_g2, point_g1)

    def gt_equal(self, lhs, rhs) -> bool:
        """比較兩個GT (FQ12) 元素"""
        return lhs == rhs
