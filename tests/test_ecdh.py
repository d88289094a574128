"""
ECDHKeyExchangeGadget 테스트

회로의 출력은 오프-서킷 몽고메리 사다리(ladder_x) 결과와 비교한다.
기준점 G는 conftest의 base_point 픽스처가 찾는다.
"""
import pytest

from zkecdh.circuit.evaluator import CircuitEvaluator
from zkecdh.circuit.generator import CircuitGenerator
from zkecdh.curve import SECRET_BITWIDTH, lift_x, scalar_to_bits
from zkecdh.errors import (
    ConstraintViolationError,
    MalformedInputError,
    NoSquareRootError,
    WitnessGenerationError,
)
from zkecdh.gadgets.ecdh import AffinePoint, ECDHKeyExchangeGadget


def build(name, base_x, base_y=None, h_y=None, variable_base=False):
    """h_x는 입력, 비밀 비트는 witness인 키 교환 회로를 만든다.

    Returns:
        tuple: (generator, gadget, 입력 배선 딕셔너리)
    """
    gen = CircuitGenerator(name)
    wires = {}
    if variable_base:
        wires["base_x"] = base_x = gen.create_input_wire("base_x")
    wires["h_x"] = gen.create_input_wire("h_x")
    if h_y == "input":
        wires["h_y"] = h_y = gen.create_input_wire("h_y")
    wires["secret"] = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
    gadget = ECDHKeyExchangeGadget(gen, base_x, wires["h_x"], wires["secret"],
                                   base_y=base_y, h_y=h_y, desc=name)
    return gen, gadget, wires


def evaluate(gen, wires, values):
    evaluator = CircuitEvaluator(gen)
    for key, value in values.items():
        if key == "secret":
            evaluator.set_wire_values(wires[key], value)
        else:
            evaluator.set_wire_value(wires[key], value)
    evaluator.evaluate()
    return evaluator


@pytest.fixture(scope="module")
def alice(base_point, exchange):
    """Alice 회로: Base = G (상수), H = Bob의 공개 값."""
    gen, gadget, wires = build("alice", base_point[0])
    evaluator = evaluate(gen, wires, {
        "h_x": exchange["bob_public"],
        "secret": scalar_to_bits(exchange["alice_secret"]),
    })
    return gen, gadget, evaluator


@pytest.fixture(scope="module")
def bits_circuit(base_point):
    """평가하지 않은 회로 (비트 조건 위반 값을 넣어 본다)."""
    return build("bits", base_point[0])


# =====================================================================
# 비밀 비트 길이
# =====================================================================

class TestSecretBitLength:
    @pytest.mark.parametrize("n", [0, 1, 252, 254, 1000])
    def test_wrong_length_rejected(self, base_point, n):
        gen = CircuitGenerator("malformed")
        h_x = gen.create_input_wire("h_x")
        bits = gen.create_prover_witness_wire_array(n, "secret")
        with pytest.raises(MalformedInputError):
            ECDHKeyExchangeGadget(gen, base_point[0], h_x, bits)

    def test_nothing_registered_on_failure(self, base_point):
        gen = CircuitGenerator("malformed")
        h_x = gen.create_input_wire("h_x")
        bits = gen.create_prover_witness_wire_array(252, "secret")
        with pytest.raises(MalformedInputError):
            ECDHKeyExchangeGadget(gen, base_point[0], h_x, bits)
        assert gen.num_constraints == 0
        assert gen.instructions == []

    def test_malformed_is_value_error(self, base_point):
        gen = CircuitGenerator("malformed")
        with pytest.raises(ValueError):
            ECDHKeyExchangeGadget(gen, base_point[0], 1, [])


# =====================================================================
# 올바른 키 교환
# =====================================================================

class TestKeyExchange:
    def test_public_value(self, alice, exchange):
        _, gadget, evaluator = alice
        value = evaluator.get_wire_value(gadget.output_public_value)
        assert int(value) == exchange["alice_public"]

    def test_shared_secret(self, alice, exchange):
        _, gadget, evaluator = alice
        value = evaluator.get_wire_value(gadget.shared_secret)
        assert int(value) == exchange["shared"]

    def test_output_wires(self, alice):
        _, gadget, _ = alice
        assert gadget.get_output_wires() == [gadget.output_public_value,
                                             gadget.shared_secret]

    def test_both_parties_agree(self, base_point, exchange, alice):
        _, alice_gadget, alice_eval = alice
        gen, gadget, wires = build("bob", base_point[0])
        bob_eval = evaluate(gen, wires, {
            "h_x": exchange["alice_public"],
            "secret": scalar_to_bits(exchange["bob_secret"]),
        })
        assert (bob_eval.get_wire_value(gadget.shared_secret)
                == alice_eval.get_wire_value(alice_gadget.shared_secret))
        assert int(bob_eval.get_wire_value(gadget.output_public_value)) == exchange["bob_public"]

    def test_variable_base(self, base_point, exchange):
        gen, gadget, wires = build("variable", None, variable_base=True)
        evaluator = evaluate(gen, wires, {
            "base_x": base_point[0],
            "h_x": exchange["bob_public"],
            "secret": scalar_to_bits(exchange["alice_secret"]),
        })
        assert int(evaluator.get_wire_value(gadget.output_public_value)) == exchange["alice_public"]
        assert int(evaluator.get_wire_value(gadget.shared_secret)) == exchange["shared"]

    def test_constant_base_table_is_folded(self, alice):
        _, gadget, _ = alice
        assert all(p.x.is_constant and p.y.is_constant for p in gadget.base_table)
        assert len(gadget.base_table) == SECRET_BITWIDTH
        assert not any(p.x.is_constant for p in gadget.h_table)

    def test_deterministic(self, base_point, exchange, alice):
        """새 생성기에서 같은 입력으로 두 번 구성하면 같은 회로와 같은 출력이 나온다."""
        inputs = {
            "base_x": base_point[0],
            "h_x": exchange["bob_public"],
            "secret": scalar_to_bits(exchange["alice_secret"]),
        }
        outputs = []
        structures = []
        for name in ("first", "second"):
            gen, gadget, wires = build(name, None, variable_base=True)
            evaluator = evaluate(gen, wires, inputs)
            outputs.append(evaluator.get_wire_values(gadget.get_output_wires()))
            structures.append((gen.num_wires, [c.kind for c in gen.constraints]))
        assert outputs[0] == outputs[1]
        assert structures[0] == structures[1]

        # 상수 기준점으로 구성한 회로와도 같은 값을 낸다
        _, alice_gadget, alice_eval = alice
        assert outputs[0] == alice_eval.get_wire_values(alice_gadget.get_output_wires())
        assert [int(v) for v in outputs[0]] == [exchange["alice_public"], exchange["shared"]]


# =====================================================================
# 공급된 y좌표
# =====================================================================

class TestSuppliedY:
    def test_constant_base_y(self, base_point, exchange):
        gen, gadget, wires = build("base_y", base_point[0], base_y=base_point[1])
        assert gadget.base_point.y.value == base_point[1]
        evaluator = evaluate(gen, wires, {
            "h_x": exchange["bob_public"],
            "secret": scalar_to_bits(exchange["alice_secret"]),
        })
        assert int(evaluator.get_wire_value(gadget.shared_secret)) == exchange["shared"]

    def test_wrong_constant_y_rejected_at_build(self, base_point):
        gen = CircuitGenerator("bad_y")
        h_x = gen.create_input_wire("h_x")
        bits = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
        with pytest.raises(ConstraintViolationError):
            ECDHKeyExchangeGadget(gen, base_point[0], h_x, bits,
                                  base_y=base_point[1] + 1)

    def test_input_base_y_is_asserted(self, base_point):
        """공급된 변수 y에도 곡선 방정식 제약이 붙는다."""
        gen = CircuitGenerator("base_y_input")
        h_x = gen.create_input_wire("h_x")
        bits = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
        base_y = gen.create_input_wire("base_y")
        gadget = ECDHKeyExchangeGadget(gen, base_point[0], h_x, bits, base_y=base_y)
        on_curve = [c for c in gen.constraints if c.desc == "point on curve"]
        # h 복원 1개 + 공급된 base_y 1개
        assert len(on_curve) == 2
        assert gadget.base_point.y is base_y

    def test_input_h_y(self, base_point, exchange):
        gen, gadget, wires = build("h_y", base_point[0], h_y="input")
        h_y = lift_x(exchange["bob_public"])[1]
        evaluator = evaluate(gen, wires, {
            "h_x": exchange["bob_public"],
            "h_y": h_y,
            "secret": scalar_to_bits(exchange["alice_secret"]),
        })
        assert int(evaluator.get_wire_value(gadget.shared_secret)) == exchange["shared"]

    def test_input_h_y_off_curve(self, base_point, exchange):
        gen, _, wires = build("h_y", base_point[0], h_y="input")
        h_y = lift_x(exchange["bob_public"])[1] + 1
        with pytest.raises(ConstraintViolationError):
            evaluate(gen, wires, {
                "h_x": exchange["bob_public"],
                "h_y": h_y,
                "secret": scalar_to_bits(exchange["alice_secret"]),
            })


# =====================================================================
# 곡선 위에 없는 x
# =====================================================================

class TestNonCurveX:
    def test_constant_x_fails_at_build(self, non_curve_x):
        gen = CircuitGenerator("non_curve")
        h_x = gen.create_input_wire("h_x")
        bits = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
        with pytest.raises(NoSquareRootError):
            ECDHKeyExchangeGadget(gen, non_curve_x, h_x, bits)

    def test_input_x_fails_at_evaluation(self, base_point, exchange, non_curve_x):
        gen, _, wires = build("non_curve", base_point[0])
        with pytest.raises(NoSquareRootError):
            evaluate(gen, wires, {
                "h_x": non_curve_x,
                "secret": scalar_to_bits(exchange["alice_secret"]),
            })

    def test_zero_x_fails_at_evaluation(self, base_point, exchange):
        """x = 0 이면 y = 0 이고 배가의 분모 2y가 0이 된다."""
        gen, _, wires = build("zero", base_point[0])
        with pytest.raises(WitnessGenerationError):
            evaluate(gen, wires, {
                "h_x": 0,
                "secret": scalar_to_bits(exchange["alice_secret"]),
            })


# =====================================================================
# 비밀 비트 조건
# =====================================================================

class TestSecretBitConditions:
    @pytest.mark.parametrize("index, value", [(0, 1), (1, 1), (2, 1), (252, 0), (100, 2)])
    def test_invalid_bits(self, bits_circuit, exchange, index, value):
        gen, _, wires = bits_circuit
        bits = scalar_to_bits(exchange["alice_secret"])
        bits[index] = value
        with pytest.raises(ConstraintViolationError):
            evaluate(gen, wires, {"h_x": exchange["bob_public"], "secret": bits})

    def test_assertion_counts(self, bits_circuit):
        gen, _, _ = bits_circuit
        kinds = [c.kind for c in gen.constraints]
        assert kinds.count("binary") == SECRET_BITWIDTH - 4
        assert kinds.count("zero") == 3
        assert kinds.count("one") == 1

    def test_constant_bits_checked_at_build(self, base_point):
        gen = CircuitGenerator("constant_bits")
        h_x = gen.create_input_wire("h_x")
        bits = [1] * SECRET_BITWIDTH
        with pytest.raises(ConstraintViolationError):
            ECDHKeyExchangeGadget(gen, base_point[0], h_x, bits)


# =====================================================================
# 점 덧셈 전제 조건
# =====================================================================

class TestPointAddition:
    def test_equal_constant_points(self, alice):
        gen, gadget, _ = alice
        p = gadget.base_point
        with pytest.raises(WitnessGenerationError):
            gadget.add_affine_points(p, p.copy())

    def test_equal_variable_points(self, alice):
        """x - x 는 상수 0으로 접히므로 구성 시점에 실패한다."""
        _, gadget, _ = alice
        p = gadget.h_point
        with pytest.raises(WitnessGenerationError):
            gadget.add_affine_points(p, AffinePoint(p.x, p.y))


# =====================================================================
# 공개 입력 검증 (선택)
# =====================================================================

class TestValidateInputs:
    def test_not_called_by_default(self, alice):
        gen, _, _ = alice
        assert not any(c.desc == "point order" for c in gen.constraints)

    def test_subgroup_points_pass(self, base_point, exchange):
        gen, gadget, wires = build("validated", base_point[0])
        gadget.validate_inputs()
        assert any(c.desc == "point order" for c in gen.constraints)
        evaluator = evaluate(gen, wires, {
            "h_x": exchange["bob_public"],
            "secret": scalar_to_bits(exchange["alice_secret"]),
        })
        assert int(evaluator.get_wire_value(gadget.shared_secret)) == exchange["shared"]

    def test_variable_base_passes(self, base_point, exchange):
        gen, gadget, wires = build("validated", None, variable_base=True)
        gadget.validate_inputs()
        evaluate(gen, wires, {
            "base_x": base_point[0],
            "h_x": exchange["bob_public"],
            "secret": scalar_to_bits(exchange["alice_secret"]),
        })

    def test_non_subgroup_base_rejected(self, exchange, non_subgroup_point):
        gen, gadget, wires = build("validated", None, variable_base=True)
        gadget.validate_inputs()
        with pytest.raises(ConstraintViolationError):
            evaluate(gen, wires, {
                "base_x": non_subgroup_point[0],
                "h_x": exchange["bob_public"],
                "secret": scalar_to_bits(exchange["alice_secret"]),
            })

    def test_non_subgroup_constant_rejected_at_build(self, non_subgroup_point):
        gen = CircuitGenerator("validated")
        h_x = gen.create_input_wire("h_x")
        bits = gen.create_prover_witness_wire_array(SECRET_BITWIDTH, "secret")
        gadget = ECDHKeyExchangeGadget(gen, non_subgroup_point[0], h_x, bits)
        with pytest.raises(ConstraintViolationError):
            gadget.validate_inputs()
