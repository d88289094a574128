"""
배선 (Wire): 회로 안의 기호 값 (symbolic value)
================================================

배선은 회로 안의 하나의 필드 원소를 가리키는 참조이다. 세 가지 변형이 있다:

  | 변형          | 값이 정해지는 시점              | 변수 슬롯 |
  |---------------|---------------------------------|-----------|
  | ConstantWire  | 회로 구성 시점 (고정 상수)      | 없음      |
  | InputWire     | 평가 단계, 호출자가 공급        | 있음      |
  | WitnessWire   | 평가 단계, 게이트/명령이 계산   | 있음      |

WitnessWire의 producer는 값을 계산하는 명령(instruction)이다.
producer가 None인 witness(예: 비밀 키 비트)는 증명자가 직접 값을 넣는다.

산술 연산은 태그를 전파한다: 상수 ⊕ 상수 → 상수.
상수가 아닌 결과는 생성기(generator)에 게이트 하나와 제약 하나를 등록한다.

사용 예시:
    >>> gen = CircuitGenerator("demo")
    >>> x = gen.create_input_wire("x")
    >>> y = x * x + 5      # 곱셈 게이트 + 덧셈 게이트
    >>> k = gen.create_constant_wire(3) * 4   # ConstantWire(12), 게이트 없음
"""


class Wire:
    """모든 배선의 기반 클래스.

    속성:
        generator: 배선이 속한 CircuitGenerator
        wire_id: 변수 슬롯 번호 (상수 배선은 None)
        label: 디버깅용 이름
    """

    is_constant = False
    kind = "wire"

    def __init__(self, generator, wire_id, label=""):
        self.generator = generator
        self.wire_id = wire_id
        self.label = label

    # ── 산술 연산 ──
    def add(self, other):
        return self.generator.add(self, other)

    def sub(self, other):
        return self.generator.sub(self, other)

    def mul(self, other):
        return self.generator.mul(self, other)

    def neg(self):
        return self.generator.mul(self, -1)

    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return self.generator.add(other, self)

    def __sub__(self, other):
        return self.sub(other)

    def __rsub__(self, other):
        return self.generator.sub(other, self)

    def __mul__(self, other):
        return self.mul(other)

    def __rmul__(self, other):
        return self.generator.mul(other, self)

    def __neg__(self):
        return self.neg()

    # ── 보조 가젯 ──
    def check_non_zero(self):
        """값이 0이 아니면 1, 0이면 0이 되는 배선을 반환한다."""
        return self.generator.check_non_zero(self)

    def get_bit_wires(self, bitwidth):
        """리틀 엔디언 비트 배선 리스트로 분해한다."""
        return self.generator.get_bit_wires(self, bitwidth)

    def __repr__(self):
        name = f" {self.label}" if self.label else ""
        return f"{type(self).__name__}#{self.wire_id}{name}"


class ConstantWire(Wire):
    """회로 구성 시점에 값이 고정된 배선."""

    is_constant = True
    kind = "constant"

    def __init__(self, generator, value):
        super().__init__(generator, None)
        self.value = value

    def __repr__(self):
        return f"ConstantWire({int(self.value)})"


class VariableWire(Wire):
    """변수 슬롯을 차지하는 배선 (입력 또는 witness)."""


class InputWire(VariableWire):
    """평가 단계에서 호출자가 값을 공급하는 입력 배선."""

    kind = "input"


class WitnessWire(VariableWire):
    """평가 단계에서 값이 계산되거나 증명자가 공급하는 배선.

    속성:
        producer: 값을 계산하는 Instruction (없으면 None)
    """

    kind = "witness"

    def __init__(self, generator, wire_id, label="", producer=None):
        super().__init__(generator, wire_id, label)
        self.producer = producer
