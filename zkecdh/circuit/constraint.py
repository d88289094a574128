"""
선형 결합과 rank-1 제약
=======================

회로의 모든 제약은 다음 형태를 가진다:

    ⟨A, r⟩ · ⟨B, r⟩ = ⟨C, r⟩

A, B, C는 배선들의 선형 결합(linear combination)이며 r은 전체 배선 값 벡터이다.
상수 배선은 변수 슬롯을 차지하지 않고 선형 결합의 상수항으로 들어간다.

**제약 종류 (kind)**:
  | kind     | 형태               | 의미                 |
  |----------|--------------------|----------------------|
  | gate     | (a + b)·1 = out    | 덧셈/상수곱 게이트   |
  | gate     | a·b = out          | 곱셈 게이트          |
  | equal    | w1·1 = w2          | 동등 assertion       |
  | zero     | w·1 = 0            | 0 assertion          |
  | one      | w·1 = 1            | 1 assertion          |
  | binary   | w·(1 - w) = 0      | 불리언 assertion     |
  | generic  | a·b = c            | 일반 assertion       |
"""

from zkecdh.circuit.wire import Wire
from zkecdh.field import FR, to_fr


class LinearCombination:
    """배선들의 선형 결합 Σ cᵢ·wᵢ + k.

    속성:
        terms: (VariableWire, FR) 튜플 리스트
        constant: 상수항 (FR)
    """

    def __init__(self, terms=None, constant=0):
        self.terms = list(terms or [])
        self.constant = to_fr(constant)

    @classmethod
    def of(cls, wire, coeff=1):
        """단일 배선(또는 정수)의 선형 결합을 만든다."""
        coeff = to_fr(coeff)
        if not isinstance(wire, Wire):
            return cls(constant=to_fr(wire) * coeff)
        if wire.is_constant:
            return cls(constant=wire.value * coeff)
        return cls([(wire, coeff)])

    @property
    def is_constant(self):
        return len(self.terms) == 0

    def __add__(self, other):
        return LinearCombination(self.terms + other.terms,
                                 self.constant + other.constant)

    def __neg__(self):
        return self.scaled(-1)

    def __sub__(self, other):
        return self + (-other)

    def scaled(self, k):
        k = to_fr(k)
        return LinearCombination([(w, c * k) for w, c in self.terms],
                                 self.constant * k)

    def evaluate(self, evaluator):
        """평가 단계에서 결합의 값을 계산한다."""
        total = self.constant
        for wire, coeff in self.terms:
            total = total + coeff * evaluator.get_wire_value(wire)
        return total

    def __repr__(self):
        parts = [f"{int(c)}·{w!r}" for w, c in self.terms]
        if self.constant != FR(0) or not parts:
            parts.append(str(int(self.constant)))
        return " + ".join(parts)


class Constraint:
    """rank-1 제약 A·B = C."""

    def __init__(self, a, b, c, kind="generic", desc=""):
        self.a = a
        self.b = b
        self.c = c
        self.kind = kind
        self.desc = desc

    @property
    def is_constant(self):
        return self.a.is_constant and self.b.is_constant and self.c.is_constant

    def is_satisfied(self, evaluator=None):
        """제약이 만족되는지 확인한다.

        상수 제약은 evaluator 없이 확인할 수 있다.
        """
        return (self.a.evaluate(evaluator) * self.b.evaluate(evaluator)
                == self.c.evaluate(evaluator))

    def __repr__(self):
        label = f" [{self.desc}]" if self.desc else ""
        return f"<{self.kind}: ({self.a!r}) * ({self.b!r}) = ({self.c!r}){label}>"
