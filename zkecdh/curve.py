"""
오프-서킷(off-circuit) 곡선 연산
================================

SNARK 친화 몽고메리 곡선 위의 정수 기반 참조 구현.

    E: y² = x³ + A·x² + x   (mod p),   A = 126932

p는 bn128 스칼라 필드의 위수이다. 이 곡선은 Curve25519의 설계 지침을 따르되
QAP 기반 SNARK의 비용 모델에 맞춰 고른 것이다 (https://eprint.iacr.org/2015/1093.pdf, 6절).

**위수**:
  CURVE_ORDER = 8 × SUBGROUP_ORDER  (cofactor 8, SUBGROUP_ORDER는 소수)

**비밀 스칼라 클램핑 (clamping)**:
  253비트, 최상위 비트(252) = 1, 하위 3비트 = 0.
  → 비트 길이가 고정되고 cofactor 성분이 제거된다.

이 모듈은 회로의 결과를 검증하기 위한 기준(reference)이며,
키 생성과 데모에도 쓰인다. 점은 (x, y) 정수 튜플이고 무한원점은 None이다.

사용 예시:
    >>> G = clear_cofactor(lift_x(5))
    >>> k = random_secret()
    >>> ladder_x(k, G[0]) == scalar_mul(k, G)[0]   # True
"""

import secrets

from zkecdh.config import FIELD_PRIME
from zkecdh.errors import NoSquareRootError
from zkecdh.field import mod_sqrt


# ─────────────────────────────────────────────────────────────────────
# 곡선 상수
# ─────────────────────────────────────────────────────────────────────

# 비밀 지수의 비트 수
SECRET_BITWIDTH = 253

# https://eprint.iacr.org/2015/1093.pdf 의 매개변수
COEFF_A = 126932

CURVE_ORDER = 21888242871839275222246405745257275088597270486034011716802747351550446453784

# Curve25519와 같이 CURVE_ORDER = SUBGROUP_ORDER · 2^3
SUBGROUP_ORDER = 2736030358979909402780800718157159386074658810754251464600343418943805806723

COFACTOR = 8

P = FIELD_PRIME


def _inv(a):
    return pow(a, P - 2, P)


# ─────────────────────────────────────────────────────────────────────
# y좌표 복원
# ─────────────────────────────────────────────────────────────────────

def compute_y_coordinate(x):
    """x좌표로부터 곡선 위 점의 y좌표를 계산한다.

    y² = x³ + A·x² + x 의 제곱근을 Tonelli–Shanks로 구한다.
    두 근 중 어느 쪽이 선택되는지는 mod_sqrt의 분기를 그대로 따른다.

    Args:
        x: 정수 또는 FR

    Returns:
        int: y

    Raises:
        NoSquareRootError: x가 곡선 위 점의 x좌표가 아닐 때
    """
    x = int(x) % P
    x_sqr = x * x % P
    x_cube = x_sqr * x % P
    y_sqr = (x_cube + COEFF_A * x_sqr + x) % P
    y = mod_sqrt(y_sqr, P)
    if y is None:
        raise NoSquareRootError(f"x = {x} 는 곡선 위 점의 x좌표가 아닙니다")
    return y


def is_on_curve(point):
    if point is None:
        return True
    x, y = point
    return (y * y - (x * x * x + COEFF_A * x * x + x)) % P == 0


def lift_x(x):
    """x좌표로 곡선 위 점 (x, y)를 만든다."""
    x = int(x) % P
    return (x, compute_y_coordinate(x))


# ─────────────────────────────────────────────────────────────────────
# 아핀 좌표 점 연산
# ─────────────────────────────────────────────────────────────────────

def point_neg(point):
    if point is None:
        return None
    x, y = point
    return (x, -y % P)


def point_double(point):
    """2·P (아핀 좌표)."""
    if point is None:
        return None
    x, y = point
    if y == 0:
        return None
    lam = (3 * x * x + 2 * COEFF_A * x + 1) * _inv(2 * y) % P
    x3 = (lam * lam - COEFF_A - 2 * x) % P
    y3 = (lam * (x - x3) - y) % P
    return (x3, y3)


def point_add(p1, p2):
    """P1 + P2 (아핀 좌표, 무한원점 포함)."""
    if p1 is None:
        return p2
    if p2 is None:
        return p1
    x1, y1 = p1
    x2, y2 = p2
    if x1 == x2:
        if (y1 + y2) % P == 0:
            return None
        return point_double(p1)
    lam = (y2 - y1) * _inv(x2 - x1) % P
    x3 = (lam * lam - COEFF_A - x1 - x2) % P
    y3 = (lam * (x1 - x3) - y1) % P
    return (x3, y3)


def scalar_mul(k, point):
    """k·P (왼쪽→오른쪽 double-and-add)."""
    result = None
    if k <= 0:
        return result
    for bit in bin(k)[2:]:
        result = point_double(result)
        if bit == "1":
            result = point_add(result, point)
    return result


def ladder_x(k, x):
    """x좌표만 쓰는 몽고메리 사다리(ladder)로 (k·P).x 를 계산한다.

    사영 좌표 (X : Z)를 쓰며, 결과가 무한원점이면 None을 돌려준다.
    a24 = (A - 2) / 4 (RFC 7748과 같은 공식).
    """
    x1 = int(x) % P
    a24 = (COEFF_A - 2) * _inv(4) % P
    x2, z2 = 1, 0
    x3, z3 = x1, 1
    swap = 0
    for t in reversed(range(max(k.bit_length(), 1))):
        k_t = (k >> t) & 1
        swap ^= k_t
        if swap:
            x2, x3 = x3, x2
            z2, z3 = z3, z2
        swap = k_t

        a = (x2 + z2) % P
        aa = a * a % P
        b = (x2 - z2) % P
        bb = b * b % P
        e = (aa - bb) % P
        c = (x3 + z3) % P
        d = (x3 - z3) % P
        da = d * a % P
        cb = c * b % P
        x3 = (da + cb) * (da + cb) % P
        z3 = x1 * (da - cb) * (da - cb) % P
        x2 = aa * bb % P
        z2 = e * (aa + a24 * e) % P
    if swap:
        x2, x3 = x3, x2
        z2, z3 = z3, z2
    if z2 == 0:
        return None
    return x2 * _inv(z2) % P


def clear_cofactor(point):
    """8·P: 소수 위수 부분군으로 보낸다."""
    return scalar_mul(COFACTOR, point)


def find_base_point(start=1, limit=1000):
    """x = start, start+1, ... 중 처음으로 위수 SUBGROUP_ORDER인 점을 만든다.

    Raises:
        ValueError: limit 개의 후보 안에서 찾지 못했을 때
    """
    for x in range(start, start + limit):
        try:
            point = clear_cofactor(lift_x(x))
        except NoSquareRootError:
            continue
        if point is not None and scalar_mul(SUBGROUP_ORDER, point) is None:
            return point
    raise ValueError(f"x ∈ [{start}, {start + limit}) 에서 기준점을 찾지 못했습니다")


# ─────────────────────────────────────────────────────────────────────
# 비밀 스칼라
# ─────────────────────────────────────────────────────────────────────

def clamp_scalar(k):
    """253비트로 자르고 최상위 비트를 1, 하위 3비트를 0으로 만든다."""
    k &= (1 << SECRET_BITWIDTH) - 1
    k &= ~7
    k |= 1 << (SECRET_BITWIDTH - 1)
    return k


def random_secret():
    return clamp_scalar(secrets.randbits(SECRET_BITWIDTH))


def scalar_to_bits(k, bitwidth=SECRET_BITWIDTH):
    """리틀 엔디언 비트 리스트."""
    return [(k >> i) & 1 for i in range(bitwidth)]
