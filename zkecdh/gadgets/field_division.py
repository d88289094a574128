"""
필드 나눗셈 가젯
================

c = a / b 를 제약 하나로 표현한다:

    b · c = a

몫 c는 증명자 witness이며 평가 단계에서 a · b⁻¹ 로 계산된다.
b = 0 이면 몫이 정의되지 않으므로 witness 계산이 실패한다.

**상수 처리**:
  | a      | b      | 결과                          |
  |--------|--------|-------------------------------|
  | 상수   | 상수   | 상수 a/b (제약 없음)          |
  | 변수   | 상수   | a · b⁻¹ (선형 게이트)         |
  | 임의   | 변수   | witness c + 제약 b·c = a      |
"""

from zkecdh.errors import WitnessGenerationError
from zkecdh.field import FR
from zkecdh.gadgets.gadget import Gadget


class FieldDivisionGadget(Gadget):
    """a / b 의 몫 배선을 출력하는 가젯."""

    def __init__(self, generator, a, b, desc=""):
        super().__init__(generator, desc)
        self.a = generator.to_wire(a)
        self.b = generator.to_wire(b)
        self.build_circuit()

    def build_circuit(self):
        a, b = self.a, self.b
        if b.is_constant:
            if b.value == FR(0):
                raise WitnessGenerationError(f"상수 0으로 나눌 수 없습니다 ({self.desc})")
            self.c = a.mul(FR(1) / b.value)
            return

        self.c = self.generator.create_prover_witness_wire("quotient")

        def compute(evaluator):
            denominator = evaluator.get_wire_value(b)
            if denominator == FR(0):
                raise WitnessGenerationError(
                    f"0으로 나누는 witness 계산: {a!r} / {b!r} ({self.desc})")
            return evaluator.get_wire_value(a) / denominator

        self.generator.specify_prover_witness_computation(self.c, compute, "division")
        self.generator.add_assertion(b, self.c, a, self.desc or "division")

    def get_output_wires(self):
        return [self.c]
