"""
ECDH 키 교환 가젯
=================

SNARK 친화 몽고메리 곡선 y² = x³ + A·x² + x 위에서 두 번의 스칼라 곱을
제약으로 표현하여 Diffie–Hellman 키 교환이 올바르게 계산되었음을 증명한다.

  output_public_value = (secret · Base).x   → 상대방에게 보낼 공개 값
  shared_secret       = (secret · H).x      → 유도된 공유 비밀

H는 상대방의 공개 값 (H = 상대방 비밀 · Base)이다.

**구성 흐름**:
  1. 비밀 비트 검증: 길이 253, bit[0..2] = 0, bit[252] = 1, 나머지는 불리언
  2. y좌표 복원: x가 상수이면 바로 계산, 아니면 witness + 곡선 방정식 제약
  3. 점마다 배가 테이블 table[j] = 2^j · P 구성
  4. 테이블을 이용한 분기 없는 double-and-add 스칼라 곱 (점마다 1회)

**비용 모델**:
  아핀 좌표를 쓰고 배가를 미리 계산해 두면, 비트당 곱셈 게이트가 하나 줄어든다.
  대신 덧셈 단계마다 나눗셈 가젯이 하나씩 필요하다. 상수곱은 싸다고 본다.

  | 단계          | 나눗셈 가젯 수 (점당) |
  |---------------|-----------------------|
  | 배가 테이블   | N - 1                 |
  | 스칼라 곱     | N - 1                 |

**입력 검증**:
  기본 모드에서는 증명자가 넣는 비밀 값(비밀 키, 보조 witness)만 검증한다.
  공개 입력(Base, H)의 위수는 회로 밖에서 확인할 수 있으므로 검사하지 않으며,
  필요하면 validate_inputs()를 명시적으로 호출한다.

사용 예시:
    >>> gen = CircuitGenerator("ecdh")
    >>> base_x = gen.create_constant_wire(G[0])
    >>> h_x = gen.create_input_wire("h_x")
    >>> bits = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
    >>> gadget = ECDHKeyExchangeGadget(gen, base_x, h_x, bits)
    >>> public_value, shared_secret = gadget.get_output_wires()
"""

import logging

from zkecdh.curve import (
    COEFF_A,
    CURVE_ORDER,
    SECRET_BITWIDTH,
    SUBGROUP_ORDER,
    compute_y_coordinate,
)
from zkecdh.errors import MalformedInputError
from zkecdh.gadgets.field_division import FieldDivisionGadget
from zkecdh.gadgets.gadget import Gadget

logger = logging.getLogger(__name__)


class AffinePoint:
    """아핀 좌표 (x, y) 배선 쌍."""

    def __init__(self, x, y=None):
        self.x = x
        self.y = y

    def copy(self):
        return AffinePoint(self.x, self.y)

    def __repr__(self):
        return f"AffinePoint({self.x!r}, {self.y!r})"


class ECDHKeyExchangeGadget(Gadget):
    """분기 없는 double-and-add로 secret·Base, secret·H 를 계산하는 가젯.

    비밀 키 비트는 리틀 엔디언이며 길이가 SECRET_BITWIDTH여야 한다.
    최상위 비트는 1, 하위 세 비트는 0이어야 한다 (clamping).

    공개 키가 고정되어 있으면 base_x, h_x를 상수 배선으로 넘긴다.
    이 경우 y좌표와 배가 테이블이 모두 구성 시점에 상수로 계산된다.

    Args:
        generator: CircuitGenerator
        base_x: 두 당사자가 합의한 기준점의 x좌표
        h_x: 상대방 공개 값의 x좌표
        secret_bits: 비밀 키 비트 배선 리스트 (길이 253)
        base_y, h_y: 생략하면 x로부터 복원한다
        desc: 설명

    Raises:
        MalformedInputError: secret_bits 길이가 253이 아닐 때
    """

    SECRET_BITWIDTH = SECRET_BITWIDTH
    COEFF_A = COEFF_A
    CURVE_ORDER = CURVE_ORDER
    SUBGROUP_ORDER = SUBGROUP_ORDER

    def __init__(self, generator, base_x, h_x, secret_bits,
                 base_y=None, h_y=None, desc=""):
        super().__init__(generator, desc)
        self.secret_bits = list(secret_bits)
        self.check_secret_bits()

        self.base_point = self._make_point(base_x, base_y)
        self.h_point = self._make_point(h_x, h_y)
        self.compute_y_coordinates()
        self.build_circuit()

        logger.debug("ECDH 가젯 '%s' 구성 완료: 배선 %d개, 제약 %d개",
                     desc, generator.num_wires, generator.num_constraints)

    def _make_point(self, x, y):
        x = self.generator.to_wire(x)
        if y is not None:
            y = self.generator.to_wire(y)
        return AffinePoint(x, y)

    def build_circuit(self):
        self.base_table = self.preprocess(self.base_point)
        self.h_table = self.preprocess(self.h_point)
        self.output_public_value = self.mul(
            self.base_point, self.secret_bits, self.base_table).x
        self.shared_secret = self.mul(
            self.h_point, self.secret_bits, self.h_table).x

    def get_output_wires(self):
        return [self.output_public_value, self.shared_secret]

    # ─────────────────────────────────────────────────────────────────
    # 비밀 비트 검증
    # ─────────────────────────────────────────────────────────────────

    def check_secret_bits(self):
        if len(self.secret_bits) != SECRET_BITWIDTH:
            raise MalformedInputError(
                f"비밀 키 비트 수는 {SECRET_BITWIDTH}이어야 합니다: {len(self.secret_bits)}")
        gen = self.generator
        self.secret_bits = [gen.to_wire(b) for b in self.secret_bits]

        for i in range(3):
            gen.add_zero_assertion(self.secret_bits[i], "secret bit conditions")
        gen.add_one_assertion(self.secret_bits[SECRET_BITWIDTH - 1],
                              "secret bit conditions")
        # 나머지 비트는 증명자가 넣는 witness이므로 불리언 여부를 확인한다
        for i in range(3, SECRET_BITWIDTH - 1):
            gen.add_binary_assertion(self.secret_bits[i], "secret bit")

    # ─────────────────────────────────────────────────────────────────
    # y좌표 복원
    # ─────────────────────────────────────────────────────────────────

    def compute_y_coordinates(self):
        for point in (self.base_point, self.h_point):
            if point.y is None:
                point.y = self._recover_y(point.x)
            else:
                # 상수 점이면 구성 시점에 바로 확인된다
                self.assert_valid_point_on_ec(point.x, point.y)

    def _recover_y(self, x):
        gen = self.generator
        if x.is_constant:
            return gen.create_constant_wire(compute_y_coordinate(x.value))

        y = gen.create_prover_witness_wire("y")
        gen.specify_prover_witness_computation(
            y,
            lambda evaluator: compute_y_coordinate(evaluator.get_wire_value(x)),
            "compute_y_coordinate",
        )
        self.assert_valid_point_on_ec(x, y)
        return y

    def assert_valid_point_on_ec(self, x, y):
        """y² = x³ + A·x² + x."""
        y_sqr = y.mul(y)
        x_sqr = x.mul(x)
        x_cube = x_sqr.mul(x)
        self.generator.add_equality_assertion(
            y_sqr, x_cube.add(x_sqr.mul(COEFF_A)).add(x), "point on curve")

    # ─────────────────────────────────────────────────────────────────
    # 배가 테이블 / 스칼라 곱
    # ─────────────────────────────────────────────────────────────────

    def preprocess(self, p):
        table = [p]
        for _ in range(1, len(self.secret_bits)):
            table.append(self.double_affine_point(table[-1]))
        return table

    def mul(self, p, secret_bits, table):
        """secret · P (비트 조건을 만족하는 secret_bits)."""
        return self._double_and_add(secret_bits, table, len(secret_bits) - 1, 0)

    def _double_and_add(self, bits, table, top, lowest):
        result = table[top].copy()
        for j in range(top - 1, lowest - 1, -1):
            tmp = self.add_affine_points(result, table[j])
            is_one = bits[j]
            # 분기 대신 산술 선택: result += bit · (tmp - result)
            result.x = result.x.add(is_one.mul(tmp.x.sub(result.x)))
            result.y = result.y.add(is_one.mul(tmp.y.sub(result.y)))
        return result

    def double_affine_point(self, p):
        x_2 = p.x.mul(p.x)
        l1 = FieldDivisionGadget(
            self.generator,
            x_2.mul(3).add(p.x.mul(COEFF_A).mul(2)).add(1),
            p.y.mul(2),
            "double",
        ).get_output_wires()[0]
        l2 = l1.mul(l1)
        new_x = l2.sub(COEFF_A).sub(p.x).sub(p.x)
        new_y = p.x.mul(3).add(COEFF_A).sub(l2).mul(l1).sub(p.y)
        return AffinePoint(new_x, new_y)

    def add_affine_points(self, p1, p2):
        diff_y = p1.y.sub(p2.y)
        diff_x = p1.x.sub(p2.x)
        q = FieldDivisionGadget(self.generator, diff_y, diff_x, "add").get_output_wires()[0]
        q2 = q.mul(q)
        q3 = q2.mul(q)
        new_x = q2.sub(COEFF_A).sub(p1.x).sub(p2.x)
        new_y = p1.x.mul(2).add(p2.x).add(COEFF_A).mul(q).sub(q3).sub(p1.y)
        return AffinePoint(new_x, new_y)

    # ─────────────────────────────────────────────────────────────────
    # 공개 입력 검증 (선택)
    # ─────────────────────────────────────────────────────────────────

    def validate_inputs(self):
        """Base와 H의 x ≠ 0, 곡선 위에 있음, 소수 위수 부분군 소속을 확인한다.

        공개 입력은 보통 회로 밖에서 검증되므로 기본으로 호출되지 않는다.
        """
        gen = self.generator
        for point, table in ((self.base_point, self.base_table),
                             (self.h_point, self.h_table)):
            gen.add_one_assertion(point.x.check_non_zero(), "x non-zero")
            self.assert_valid_point_on_ec(point.x, point.y)
            self.assert_point_order(point, table)

    def assert_point_order(self, p, table):
        """(SUBGROUP_ORDER - 1)·P = -P 를 확인한다.

        SUBGROUP_ORDER는 홀수이므로 bit 0은 1이다. 마지막 덧셈은
        (-P) + P 가 되어 분모가 0이므로 수행하지 않고, 대신 결과가 -P 인지 확인한다.
        """
        order = self.generator.create_constant_wire(SUBGROUP_ORDER)
        bits = order.get_bit_wires(SUBGROUP_ORDER.bit_length())
        result = self._double_and_add(bits, table, len(bits) - 1, 1)
        self.generator.add_equality_assertion(result.x, p.x, "point order")
        self.generator.add_equality_assertion(result.y, p.y.neg(), "point order")
