"""
회로 생성기 (Constraint-System Context)
=======================================

CircuitGenerator는 회로 구성 단계의 공유 상태를 소유한다:

  - wires:        변수 슬롯을 차지하는 배선 (생성 순서)
  - instructions: 평가 단계에서 재생할 지연 명령 (등록 순서)
  - constraints:  rank-1 제약 (게이트 제약 + assertion)

가젯은 전역 상태 대신 생성기 객체를 명시적으로 전달받아 모든 배선 생성,
제약 등록, witness 계산 예약을 이 인터페이스를 통해 수행한다.

**상수 접기 (constant folding)**:
  상수끼리의 연산은 게이트 없이 상수 배선을 만든다.
  상수 0을 곱하면 상수 0, 상수 1을 곱하거나 상수 0을 더하면 원래 배선이 된다.
  상수 배선만으로 이루어진 assertion은 구성 시점에 바로 확인한다.

사용 예시:
    >>> gen = CircuitGenerator("square")
    >>> x = gen.create_input_wire("x")
    >>> y = gen.make_output(x * x)
    >>> evaluator = CircuitEvaluator(gen)
    >>> evaluator.set_wire_value(x, 7)
    >>> evaluator.evaluate()
    >>> evaluator.get_wire_value(y)   # FR(49)
"""

from zkecdh.circuit.constraint import Constraint, LinearCombination
from zkecdh.circuit.instruction import LinearGate, MulGate, WitnessInstruction
from zkecdh.circuit.wire import ConstantWire, InputWire, Wire, WitnessWire
from zkecdh.errors import (
    ConstraintViolationError,
    MalformedInputError,
    WitnessGenerationError,
)
from zkecdh.field import FR, to_fr


def _lc(value):
    if isinstance(value, LinearCombination):
        return value
    return LinearCombination.of(value)


class CircuitGenerator:
    """제약 시스템 컨텍스트.

    속성:
        name: 회로 이름
        wires: VariableWire 리스트
        inputs: InputWire 리스트
        outputs: 출력으로 지정된 배선 리스트
        instructions: Instruction 리스트
        constraints: Constraint 리스트
    """

    def __init__(self, name="circuit"):
        self.name = name
        self.wires = []
        self.inputs = []
        self.outputs = []
        self.instructions = []
        self.constraints = []
        self._constants = {}
        self._next_wire_id = 1

    @property
    def num_wires(self):
        return len(self.wires)

    @property
    def num_constraints(self):
        return len(self.constraints)

    def summary(self):
        """회로 크기 통계."""
        return {
            "name": self.name,
            "wires": self.num_wires,
            "inputs": len(self.inputs),
            "outputs": len(self.outputs),
            "instructions": len(self.instructions),
            "constraints": self.num_constraints,
        }

    # ─────────────────────────────────────────────────────────────────
    # 배선 생성
    # ─────────────────────────────────────────────────────────────────

    def _allocate(self, cls, label, **kwargs):
        wire = cls(self, self._next_wire_id, label, **kwargs)
        self._next_wire_id += 1
        self.wires.append(wire)
        return wire

    def create_constant_wire(self, value):
        """상수 배선 (같은 값이면 같은 객체를 재사용)."""
        value = to_fr(value)
        key = int(value)
        wire = self._constants.get(key)
        if wire is None:
            wire = ConstantWire(self, value)
            self._constants[key] = wire
        return wire

    def create_input_wire(self, label=""):
        wire = self._allocate(InputWire, label)
        self.inputs.append(wire)
        return wire

    def create_input_wire_array(self, n, label=""):
        return [self.create_input_wire(f"{label}[{i}]") for i in range(n)]

    def create_prover_witness_wire(self, label=""):
        return self._allocate(WitnessWire, label)

    def create_prover_witness_wire_array(self, n, label=""):
        return [self.create_prover_witness_wire(f"{label}[{i}]") for i in range(n)]

    def specify_prover_witness_computation(self, outputs, compute, desc=""):
        """출력 배선의 값을 계산하는 지연 명령을 예약한다.

        Args:
            outputs: WitnessWire 하나 또는 리스트
            compute: evaluator를 받아 출력 값(들)을 돌려주는 함수
            desc: 오류 메시지용 설명

        Returns:
            WitnessInstruction: 등록된 명령
        """
        if isinstance(outputs, Wire):
            outputs = [outputs]
        outputs = list(outputs)
        for wire in outputs:
            if not isinstance(wire, WitnessWire):
                raise MalformedInputError(f"witness 배선이 아닙니다: {wire!r}")
            if wire.producer is not None:
                raise MalformedInputError(f"이미 계산 명령이 지정된 배선입니다: {wire!r}")
        instruction = WitnessInstruction(outputs, compute, desc)
        for wire in outputs:
            wire.producer = instruction
        self.instructions.append(instruction)
        return instruction

    def make_output(self, wire, label=""):
        """배선을 출력으로 지정한다.

        label은 이름이 없는 배선에만 붙인다. 입력 배선이나 이름 있는 witness의
        이름은 R1CS 변수 배치에서 그대로 유지된다.
        """
        wire = self.to_wire(wire)
        if label and not wire.is_constant and not wire.label:
            wire.label = label
        self.outputs.append(wire)
        return wire

    def to_wire(self, value):
        if isinstance(value, Wire):
            return value
        return self.create_constant_wire(value)

    # ─────────────────────────────────────────────────────────────────
    # 산술 게이트
    # ─────────────────────────────────────────────────────────────────

    def add(self, a, b):
        return self._linear(_lc(a) + _lc(b))

    def sub(self, a, b):
        return self._linear(_lc(a) - _lc(b))

    def mul(self, a, b):
        a = self.to_wire(a)
        b = self.to_wire(b)
        if a.is_constant:
            return self._linear(LinearCombination.of(b, a.value))
        if b.is_constant:
            return self._linear(LinearCombination.of(a, b.value))
        out = self.create_prover_witness_wire()
        self._register_gate(
            MulGate(out, a, b),
            Constraint(_lc(a), _lc(b), _lc(out), kind="gate", desc="mul"),
        )
        return out

    def _linear(self, lc):
        # 같은 배선의 항을 합치고 계수가 0인 항을 버린다
        merged = {}
        for wire, coeff in lc.terms:
            merged[wire] = merged.get(wire, FR(0)) + coeff
        terms = [(w, c) for w, c in merged.items() if c != FR(0)]
        lc = LinearCombination(terms, lc.constant)

        if lc.is_constant:
            return self.create_constant_wire(lc.constant)
        if len(terms) == 1 and terms[0][1] == FR(1) and lc.constant == FR(0):
            return terms[0][0]

        out = self.create_prover_witness_wire()
        self._register_gate(
            LinearGate(out, lc),
            Constraint(lc, LinearCombination(constant=1), _lc(out),
                       kind="gate", desc="linear"),
        )
        return out

    def _register_gate(self, gate, constraint):
        gate.out.producer = gate
        self.instructions.append(gate)
        self.constraints.append(constraint)

    # ─────────────────────────────────────────────────────────────────
    # Assertion
    # ─────────────────────────────────────────────────────────────────

    def add_assertion(self, a, b, c, desc="", kind="generic"):
        """a · b = c 제약을 등록한다.

        인자는 배선, 정수/FR, 또는 LinearCombination일 수 있다.
        모든 항이 상수이면 구성 시점에 바로 확인하고 등록하지 않는다.

        Raises:
            ConstraintViolationError: 상수 assertion이 거짓일 때
        """
        constraint = Constraint(_lc(a), _lc(b), _lc(c), kind=kind, desc=desc)
        if constraint.is_constant:
            if not constraint.is_satisfied():
                raise ConstraintViolationError(
                    f"상수 배선에 대한 assertion 실패: {constraint!r}", constraint)
            return None
        self.constraints.append(constraint)
        return constraint

    def add_equality_assertion(self, w1, w2, desc=""):
        return self.add_assertion(w1, 1, w2, desc, kind="equal")

    def add_zero_assertion(self, w, desc=""):
        return self.add_assertion(w, 1, 0, desc, kind="zero")

    def add_one_assertion(self, w, desc=""):
        return self.add_assertion(w, 1, 1, desc, kind="one")

    def add_binary_assertion(self, w, desc=""):
        """w · (1 - w) = 0 → w ∈ {0, 1}."""
        one_minus_w = LinearCombination(constant=1) - _lc(w)
        return self.add_assertion(w, one_minus_w, 0, desc, kind="binary")

    # ─────────────────────────────────────────────────────────────────
    # 보조 가젯
    # ─────────────────────────────────────────────────────────────────

    def check_non_zero(self, w):
        """w ≠ 0 이면 1, w = 0 이면 0이 되는 배선을 반환한다.

        제약:
            w · inv = out
            w · (1 - out) = 0
        """
        w = self.to_wire(w)
        if w.is_constant:
            return self.create_constant_wire(0 if w.value == FR(0) else 1)

        out = self.create_prover_witness_wire("nonzero")
        inv = self.create_prover_witness_wire("inverse")

        def compute(evaluator):
            value = evaluator.get_wire_value(w)
            if value == FR(0):
                return FR(0), FR(0)
            return FR(1), FR(1) / value

        self.specify_prover_witness_computation([out, inv], compute, "check_non_zero")
        self.add_assertion(w, inv, out, "check_non_zero")
        self.add_assertion(w, LinearCombination(constant=1) - _lc(out), 0,
                           "check_non_zero")
        return out

    def get_bit_wires(self, w, bitwidth):
        """w를 bitwidth개의 리틀 엔디언 비트 배선으로 분해한다.

        상수 배선은 상수 비트로 분해한다. 변수 배선은 witness 비트를 만들고
        각 비트의 불리언 제약과 Σ 2ⁱ·bᵢ = w 제약을 등록한다.

        Raises:
            MalformedInputError: bitwidth가 양수가 아니거나 상수가 범위를 넘을 때
        """
        if bitwidth <= 0:
            raise MalformedInputError(f"비트 폭은 양수여야 합니다: {bitwidth}")
        w = self.to_wire(w)
        if w.is_constant:
            value = int(w.value)
            if value.bit_length() > bitwidth:
                raise MalformedInputError(
                    f"상수 {value}는 {bitwidth}비트로 표현할 수 없습니다")
            return [self.create_constant_wire((value >> i) & 1)
                    for i in range(bitwidth)]

        bits = self.create_prover_witness_wire_array(bitwidth, "bit")

        def compute(evaluator):
            value = int(evaluator.get_wire_value(w))
            if value.bit_length() > bitwidth:
                raise WitnessGenerationError(
                    f"값 {value}는 {bitwidth}비트로 표현할 수 없습니다")
            return [(value >> i) & 1 for i in range(bitwidth)]

        self.specify_prover_witness_computation(bits, compute, "split")
        for bit in bits:
            self.add_binary_assertion(bit, "split")
        packed = LinearCombination([(bit, FR(1 << i)) for i, bit in enumerate(bits)])
        self.add_assertion(packed, 1, w, "split", kind="equal")
        return bits

    def __repr__(self):
        return (f"CircuitGenerator({self.name!r}, wires={self.num_wires}, "
                f"constraints={self.num_constraints})")
