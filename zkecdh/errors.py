"""
회로 빌더 예외 계층
===================

  CircuitError
  ├── MalformedInputError        회로 구성 시점의 잘못된 인자 (ValueError 호환)
  ├── ConstraintViolationError   제약(assertion) 불만족
  └── WitnessGenerationError     witness 계산 실패
      └── NoSquareRootError      x 가 곡선 위 점의 x좌표가 아님

제약 불만족과 witness 계산 실패는 구분된다: 전자는 거짓 명제에 대한
증명 시도이고, 후자는 공개 입력 자체가 잘못되었음을 뜻한다.
"""


class CircuitError(Exception):
    """회로 구성 또는 평가 중 발생하는 모든 오류의 기반 클래스."""


class MalformedInputError(CircuitError, ValueError):
    """가젯 생성자에 잘못된 형태의 입력이 주어졌을 때."""


class ConstraintViolationError(CircuitError):
    """등록된 제약이 평가된 값에서 성립하지 않을 때.

    속성:
        constraint: 실패한 제약 객체 (상수 제약이면 None일 수 있음)
    """

    def __init__(self, message, constraint=None):
        super().__init__(message)
        self.constraint = constraint


class WitnessGenerationError(CircuitError):
    """지연된 witness 계산 명령이 값을 만들어 내지 못할 때."""


class NoSquareRootError(WitnessGenerationError):
    """x³ + A·x² + x 가 이차 비잉여(non-residue)일 때."""
