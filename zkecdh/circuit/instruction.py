"""
지연 명령 (Deferred Instructions)
=================================

회로 구성 단계에서는 값을 계산하지 않는다. 대신 각 게이트와 witness 계산을
명령 객체로 만들어 생성기의 명령 리스트에 등록 순서대로 쌓는다.
평가 단계(CircuitEvaluator.evaluate)에서 이 리스트를 순서대로 재생한다.

각 명령은 자신이 만들어 내는 배선(outputs)을 알고 있으며,
이미 값이 할당된 배선만 읽고 정확히 자신의 출력 배선에만 값을 쓴다.
"""

from zkecdh.errors import WitnessGenerationError


class Instruction:
    """평가 단계에서 실행되는 명령의 기반 클래스."""

    outputs = ()

    def evaluate(self, evaluator):
        raise NotImplementedError("서브클래스에서 구현해야 합니다")


class LinearGate(Instruction):
    """out = Σ cᵢ·wᵢ + k (덧셈, 뺄셈, 상수곱)."""

    def __init__(self, out, lc):
        self.out = out
        self.lc = lc
        self.outputs = (out,)

    def evaluate(self, evaluator):
        evaluator.assign(self.out, self.lc.evaluate(evaluator))


class MulGate(Instruction):
    """out = a · b (두 변수 배선의 곱)."""

    def __init__(self, out, a, b):
        self.out = out
        self.a = a
        self.b = b
        self.outputs = (out,)

    def evaluate(self, evaluator):
        evaluator.assign(
            self.out,
            evaluator.get_wire_value(self.a) * evaluator.get_wire_value(self.b),
        )


class WitnessInstruction(Instruction):
    """증명자 witness 계산 명령.

    compute(evaluator)는 출력 배선 수만큼의 값을 돌려준다
    (출력이 하나이면 값 하나).
    """

    def __init__(self, outputs, compute, desc=""):
        self.outputs = tuple(outputs)
        self.compute = compute
        self.desc = desc

    def evaluate(self, evaluator):
        values = self.compute(evaluator)
        if len(self.outputs) == 1:
            values = [values]
        values = list(values)
        if len(values) != len(self.outputs):
            raise WitnessGenerationError(
                f"witness 명령 '{self.desc}'이(가) {len(values)}개의 값을 반환했습니다 "
                f"(예상: {len(self.outputs)}개)"
            )
        for wire, value in zip(self.outputs, values):
            evaluator.assign(wire, value)
