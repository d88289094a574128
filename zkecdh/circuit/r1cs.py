"""
R1CS 내보내기
=============

생성기의 제약 리스트를 R1CS 행렬 (A, B, C)과 witness 벡터 r로 변환한다.

    각 행 i 에 대해: ⟨Aᵢ, r⟩ · ⟨Bᵢ, r⟩ = ⟨Cᵢ, r⟩

**변수 배치 (variable placement)**:
  r = [~one, 입력들..., 출력들..., 나머지 배선들...]
  인덱스 0은 상수 1이며, 상수 배선은 이 변수의 계수로 표현된다.

ECDH 회로는 제약이 수만 개이므로 행렬은 희소(sparse) 형태,
즉 행마다 {변수 인덱스: 계수} 딕셔너리로 표현한다.
작은 회로는 to_dense()로 리스트 행렬을 얻을 수 있다.

사용 예시:
    >>> variables = get_var_placement(gen)
    >>> A, B, C = circuit_to_r1cs(gen)
    >>> r = assign_variables(gen, evaluator)
    >>> check_r1cs(A, B, C, r)   # True
"""

from zkecdh.config import FIELD_PRIME


def _placement(generator):
    ordered = []
    seen = set()
    for wire in list(generator.inputs) + list(generator.outputs) + list(generator.wires):
        if wire.is_constant or wire.wire_id in seen:
            continue
        seen.add(wire.wire_id)
        ordered.append(wire)
    return ordered


def get_var_placement(generator):
    """변수 이름 리스트 (인덱스 0 = '~one')."""
    names = ['~one']
    for wire in _placement(generator):
        names.append(wire.label or f"w{wire.wire_id}")
    return names


def _row(lc, index):
    row = {}
    if int(lc.constant) != 0:
        row[0] = int(lc.constant)
    for wire, coeff in lc.terms:
        i = index[wire.wire_id]
        row[i] = (row.get(i, 0) + int(coeff)) % FIELD_PRIME
        if row[i] == 0:
            del row[i]
    return row


def circuit_to_r1cs(generator):
    """제약 리스트를 희소 R1CS 행렬로 변환한다.

    Returns:
        tuple: (A, B, C), 각각 {변수 인덱스: 계수} 딕셔너리의 리스트
    """
    index = {w.wire_id: i + 1 for i, w in enumerate(_placement(generator))}
    A, B, C = [], [], []
    for constraint in generator.constraints:
        A.append(_row(constraint.a, index))
        B.append(_row(constraint.b, index))
        C.append(_row(constraint.c, index))
    return A, B, C


def assign_variables(generator, evaluator):
    """평가된 값으로 witness 벡터 r을 만든다."""
    r = [1]
    for wire in _placement(generator):
        r.append(int(evaluator.get_wire_value(wire)))
    return r


def _dot(row, r):
    return sum(coeff * r[i] for i, coeff in row.items()) % FIELD_PRIME


def check_r1cs(A, B, C, r):
    """모든 행에서 ⟨A,r⟩·⟨B,r⟩ = ⟨C,r⟩ 인지 확인한다."""
    for a, b, c in zip(A, B, C):
        if _dot(a, r) * _dot(b, r) % FIELD_PRIME != _dot(c, r):
            return False
    return True


def to_dense(rows, num_vars):
    """희소 행을 리스트 행렬로 변환한다."""
    dense = []
    for row in rows:
        vec = [0] * num_vars
        for i, coeff in row.items():
            vec[i] = coeff
        dense.append(vec)
    return dense
