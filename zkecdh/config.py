"""
전역 설정 (Configuration)
=========================

회로 빌더 전체에서 공유하는 상수와 로깅 설정.

**필드 소수 FIELD_PRIME**:
  bn128 타원곡선의 스칼라 필드 위수 (≈ 2^254).
  모든 배선(wire) 값과 제약(constraint)은 이 소수체 위에서 계산된다.
  FIELD_PRIME ≡ 1 (mod 4) 이므로 제곱근은 Tonelli–Shanks로 구한다.

**로깅**:
  환경 변수 ZKECDH_LOG_LEVEL 로 레벨을 지정한다 (기본값 WARNING).
  라이브러리 모듈은 핸들러를 직접 설치하지 않는다.
  데모나 테스트에서 configure_logging()을 호출한다.
"""

import logging
import os

from py_ecc import bn128


FIELD_PRIME = bn128.curve_order

LOG_LEVEL = os.environ.get("ZKECDH_LOG_LEVEL", "WARNING").upper()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level=None):
    """루트 로거에 기본 핸들러를 설치한다.

    Args:
        level: 로그 레벨 이름 또는 정수. None이면 LOG_LEVEL을 사용한다.
    """
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
