import hashlib
import os
import sys

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkecdh.curve import (
    SUBGROUP_ORDER,
    clamp_scalar,
    find_base_point,
    ladder_x,
    lift_x,
    scalar_mul,
)
from zkecdh.errors import NoSquareRootError


def derive_secret(seed):
    """시드 문자열에서 결정적으로 클램핑된 비밀 스칼라를 만든다."""
    return clamp_scalar(int.from_bytes(hashlib.sha256(seed).digest(), "big"))


# ── 테스트 상수 ──
ALICE_SECRET = derive_secret(b"alice")
BOB_SECRET = derive_secret(b"bob")


@pytest.fixture(scope="session")
def base_point():
    """소수 위수 부분군의 기준점 G."""
    return find_base_point()


@pytest.fixture(scope="session")
def exchange(base_point):
    """두 당사자의 오프-서킷 키 교환 값."""
    gx = base_point[0]
    return {
        "alice_secret": ALICE_SECRET,
        "bob_secret": BOB_SECRET,
        "alice_public": ladder_x(ALICE_SECRET, gx),
        "bob_public": ladder_x(BOB_SECRET, gx),
        "shared": ladder_x(ALICE_SECRET * BOB_SECRET, gx),
    }


@pytest.fixture(scope="session")
def non_subgroup_point():
    """곡선 위에 있지만 소수 위수 부분군에 속하지 않는 점."""
    for x in range(2, 1000):
        try:
            point = lift_x(x)
        except NoSquareRootError:
            continue
        if scalar_mul(SUBGROUP_ORDER, point) is not None:
            return point
    pytest.fail("부분군 밖의 점을 찾지 못했습니다")


@pytest.fixture(scope="session")
def non_curve_x():
    """x³ + A·x² + x 가 비잉여인 x (곡선 위 점의 x좌표가 아님)."""
    for x in range(2, 1000):
        try:
            lift_x(x)
        except NoSquareRootError:
            return x
    pytest.fail("비잉여 x를 찾지 못했습니다")
