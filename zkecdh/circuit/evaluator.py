"""
회로 평가기 (Witness Evaluation)
================================

회로 구성이 끝난 뒤 별도의 단계에서 구체적인 배선 값을 계산한다.

**평가 흐름**:
  1. 호출자가 입력 배선과 (계산 명령이 없는) 증명자 witness 배선에 값을 넣는다.
  2. evaluate()가 생성기의 명령 리스트를 등록 순서대로 재생한다.
     각 명령은 이미 값이 있는 배선만 읽고 자신의 출력 배선에만 값을 쓴다.
  3. 모든 제약 A·B = C 를 확인한다. 하나라도 거짓이면 전체가 실패한다.

실패는 결정적이며 재시도하지 않는다:
  - witness 계산 실패 → WitnessGenerationError (NoSquareRootError 포함)
  - 제약 불만족       → ConstraintViolationError
"""

import logging

from zkecdh.errors import (
    ConstraintViolationError,
    MalformedInputError,
    WitnessGenerationError,
)
from zkecdh.field import to_fr

logger = logging.getLogger(__name__)


class CircuitEvaluator:
    """한 증명 인스턴스의 배선 값 할당.

    속성:
        generator: 평가할 CircuitGenerator
        values: wire_id → FR 딕셔너리
    """

    def __init__(self, generator):
        self.generator = generator
        self.values = {}

    def set_wire_value(self, wire, value):
        """입력 배선 또는 증명자 witness 배선에 값을 넣는다."""
        if wire.is_constant:
            raise MalformedInputError(f"상수 배선에는 값을 넣을 수 없습니다: {wire!r}")
        self.assign(wire, value)

    def set_wire_values(self, wires, values):
        if len(wires) != len(values):
            raise MalformedInputError(
                f"배선 수({len(wires)})와 값의 수({len(values)})가 다릅니다")
        for wire, value in zip(wires, values):
            self.set_wire_value(wire, value)

    def assign(self, wire, value):
        if wire.wire_id in self.values:
            raise WitnessGenerationError(f"배선에 값이 두 번 할당되었습니다: {wire!r}")
        self.values[wire.wire_id] = to_fr(value)

    def get_wire_value(self, wire):
        if wire.is_constant:
            return wire.value
        try:
            return self.values[wire.wire_id]
        except KeyError:
            raise WitnessGenerationError(
                f"값이 할당되지 않은 배선을 읽었습니다: {wire!r}") from None

    def get_wire_values(self, wires):
        return [self.get_wire_value(w) for w in wires]

    def evaluate(self):
        """모든 명령을 재생하고 모든 제약을 확인한다.

        Raises:
            WitnessGenerationError: 명령이 값을 계산하지 못할 때
            ConstraintViolationError: 제약이 성립하지 않을 때
        """
        for instruction in self.generator.instructions:
            instruction.evaluate(self)
        self.check_constraints()
        logger.info("회로 '%s' 평가 완료: 명령 %d개, 제약 %d개",
                    self.generator.name, len(self.generator.instructions),
                    self.generator.num_constraints)

    def check_constraints(self):
        for index, constraint in enumerate(self.generator.constraints):
            if not constraint.is_satisfied(self):
                raise ConstraintViolationError(
                    f"제약 #{index} 불만족: {constraint!r}", constraint)

    def output_values(self):
        """출력 배선들의 값."""
        return self.get_wire_values(self.generator.outputs)
