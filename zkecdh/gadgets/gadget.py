"""
가젯 (Gadget) 기반 클래스
=========================

가젯은 생성기에 제약 부분 그래프를 구성하고 지정된 출력 배선을 노출하는 단위이다.
생성자에서 회로를 모두 구성하며, 구성 이후에는 상태를 바꾸지 않는다.
"""


class Gadget:
    """모든 가젯의 기반 클래스.

    속성:
        generator: 제약을 등록할 CircuitGenerator
        desc: 디버깅용 설명
    """

    def __init__(self, generator, desc=""):
        self.generator = generator
        self.desc = desc

    def get_output_wires(self):
        """가젯의 출력 배선 리스트."""
        raise NotImplementedError("서브클래스에서 구현해야 합니다")
