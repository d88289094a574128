"""
ECDH 키 교환 E2E 데모
=====================

두 당사자(Alice, Bob)가 각자의 회로로 키 교환을 수행하고,
회로의 출력이 오프-서킷 몽고메리 사다리 결과와 일치하는지 확인한다.

실행:
    python -m zkecdh.example

흐름:
    1. 기준점 G 선택 (소수 위수 부분군)
    2. 비밀 스칼라 생성 (clamping)
    3. Alice 회로 구성: Base = G (상수), H = Bob 공개 값 (입력)
    4. witness 평가 및 제약 확인
    5. R1CS 내보내기 및 만족 여부 확인
    6. Bob 쪽도 같은 과정 → 공유 비밀 비교
"""

import logging

from zkecdh.circuit.evaluator import CircuitEvaluator
from zkecdh.circuit.generator import CircuitGenerator
from zkecdh.circuit.r1cs import assign_variables, check_r1cs, circuit_to_r1cs
from zkecdh.config import configure_logging
from zkecdh.curve import (
    SECRET_BITWIDTH,
    find_base_point,
    ladder_x,
    random_secret,
    scalar_to_bits,
)
from zkecdh.gadgets.ecdh import ECDHKeyExchangeGadget

logger = logging.getLogger(__name__)


def build_party_circuit(name, base):
    """한 당사자의 키 교환 회로를 구성한다.

    Returns:
        tuple: (generator, h_x 입력 배선, 비밀 비트 witness 배선들, gadget)
    """
    gen = CircuitGenerator(name)
    base_x = gen.create_constant_wire(base[0])
    h_x = gen.create_input_wire("h_x")
    secret_bits = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
    gadget = ECDHKeyExchangeGadget(gen, base_x, h_x, secret_bits, desc=name)
    gen.make_output(gadget.output_public_value, "public_value")
    gen.make_output(gadget.shared_secret, "shared_secret")
    return gen, h_x, secret_bits, gadget


def run_party(name, base, secret, other_public_x):
    """회로를 구성하고 평가하여 (공개 값, 공유 비밀, R1CS 만족 여부)를 돌려준다."""
    gen, h_x, secret_bits, _ = build_party_circuit(name, base)
    evaluator = CircuitEvaluator(gen)
    evaluator.set_wire_value(h_x, other_public_x)
    evaluator.set_wire_values(secret_bits, scalar_to_bits(secret))
    evaluator.evaluate()

    A, B, C = circuit_to_r1cs(gen)
    r = assign_variables(gen, evaluator)
    public_value, shared_secret = evaluator.output_values()
    logger.info("%s: %s", name, gen.summary())
    return int(public_value), int(shared_secret), check_r1cs(A, B, C, r), gen


def main():
    configure_logging()
    print("=" * 60)
    print("  SNARK-friendly ECDH Key Exchange Demo")
    print("  곡선: y² = x³ + 126932·x² + x  (bn128 스칼라 필드)")
    print("=" * 60)

    # ── 1. 기준점 ──
    print("\n[1] 기준점 선택...")
    base = find_base_point()
    print(f"    G.x = {base[0]}")

    # ── 2. 비밀 스칼라 ──
    print("\n[2] 비밀 스칼라 생성 (clamping)...")
    alice_secret = random_secret()
    bob_secret = random_secret()
    alice_public = ladder_x(alice_secret, base[0])
    bob_public = ladder_x(bob_secret, base[0])
    print(f"    Alice 공개 값 (off-circuit): {alice_public}")
    print(f"    Bob 공개 값 (off-circuit):   {bob_public}")

    # ── 3~5. Alice 회로 ──
    print("\n[3] Alice 회로 구성 및 평가...")
    a_pub, a_shared, a_r1cs_ok, gen = run_party("alice", base, alice_secret, bob_public)
    print(f"    배선 수: {gen.num_wires}, 제약 수: {gen.num_constraints}")
    print(f"    공개 값 일치: {'✓' if a_pub == alice_public else '✗'}")
    print(f"    R1CS 만족: {'✓' if a_r1cs_ok else '✗'}")

    # ── 6. Bob 회로 ──
    print("\n[4] Bob 회로 구성 및 평가...")
    b_pub, b_shared, b_r1cs_ok, _ = run_party("bob", base, bob_secret, alice_public)
    print(f"    공개 값 일치: {'✓' if b_pub == bob_public else '✗'}")
    print(f"    R1CS 만족: {'✓' if b_r1cs_ok else '✗'}")

    expected = ladder_x(alice_secret * bob_secret, base[0])
    agreed = a_shared == b_shared == expected
    print("\n[5] 공유 비밀 비교...")
    print(f"    Alice: {a_shared}")
    print(f"    Bob:   {b_shared}")
    print(f"    결과: {'일치 ✓' if agreed else '불일치 ✗'}")

    ok = (agreed and a_pub == alice_public and b_pub == bob_public
          and a_r1cs_ok and b_r1cs_ok)
    print("\n" + "=" * 60)
    print("  데모 완료: " + ("모든 확인 통과!" if ok else "일부 확인 실패"))
    print("=" * 60)
    return ok


if __name__ == "__main__":
    main()
