"""
유한체(Finite Field) 및 모듈러 제곱근
======================================

회로의 모든 배선 값이 속하는 소수체와, 곡선 점의 y좌표 복원에 쓰이는
오프-서킷(off-circuit) 정수론 함수를 정의한다.

**유한체 FR**:
  bn128 타원곡선의 스칼라 필드 (scalar field).
  - 위수 p ≈ 2^254, p ≡ 1 (mod 4)
  - p - 1 = 2^28 × q (q는 홀수) → Tonelli–Shanks의 s = 28

**르장드르 기호 (Legendre symbol)**:
  (a/p) = a^((p-1)/2) mod p ∈ {0, 1, p-1}

**모듈러 제곱근 (Tonelli–Shanks)**:
  두 제곱근 (r, p-r) 중 어느 쪽을 돌려주는지는 알고리즘의 분기에 따라
  정해지며 부호를 정규화하지 않는다. 같은 witness를 재현하려면
  같은 분기를 그대로 따라야 한다.

사용 예시:
    >>> from zkecdh.field import FR, mod_sqrt, FIELD_PRIME
    >>> r = mod_sqrt(4, FIELD_PRIME)
    >>> r * r % FIELD_PRIME  # 4
"""

from py_ecc.fields import bn128_FQ as FQ

from zkecdh.config import FIELD_PRIME


# ─────────────────────────────────────────────────────────────────────
# 유한체(Finite Field) FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 등의 필드 연산을 제공한다.
    주의: FQ의 나눗셈은 0으로 나누면 예외 없이 0을 돌려주므로,
    호출하는 쪽에서 분모를 먼저 확인해야 한다.
    """
    field_modulus = FIELD_PRIME


def to_fr(value):
    """정수 또는 FR을 FR로 변환한다."""
    return value if isinstance(value, FR) else FR(value)


# ─────────────────────────────────────────────────────────────────────
# 르장드르 기호 / 모듈러 제곱근
# ─────────────────────────────────────────────────────────────────────

def legendre_symbol(a, p=FIELD_PRIME):
    """르장드르 기호 (a/p)를 계산한다.

    Returns:
        int: a ≡ 0 이면 0, 이차 잉여이면 1, 비잉여이면 p-1
    """
    a = int(a) % p
    if a == 0:
        return 0
    return pow(a, (p - 1) // 2, p)


def mod_sqrt(a, p=FIELD_PRIME):
    """Tonelli–Shanks 알고리즘으로 a의 모듈러 제곱근을 구한다.

    Args:
        a: 정수 또는 FR
        p: 홀수 소수

    Returns:
        int 또는 None: r² ≡ a (mod p)인 r, 해가 없으면 None
    """
    a = int(a) % p
    if a == 0:
        return 0
    if legendre_symbol(a, p) != 1:
        return None

    if p % 4 == 3:
        return pow(a, (p + 1) // 4, p)

    # p - 1 = q · 2^s (q는 홀수)
    q = p - 1
    s = 0
    while q & 1 == 0:
        q >>= 1
        s += 1

    if s == 1:
        return pow(a, (p + 1) // 4, p)

    # 가장 작은 이차 비잉여 z
    z = 2
    while legendre_symbol(z, p) == 1:
        z += 1

    c = pow(z, q, p)
    r = pow(a, (q + 1) // 2, p)
    t = pow(a, q, p)
    m = s

    while t != 1:
        # t^(2^i) = 1 인 가장 작은 i (0 < i < m)
        i = 0
        temp = t
        while temp != 1:
            temp = temp * temp % p
            i += 1
            if i == m:
                return None

        b = pow(c, 1 << (m - i - 1), p)
        r = r * b % p
        c = b * b % p
        t = t * c % p
        m = i

    return r
