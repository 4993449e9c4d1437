import pytest

from pintograph.core.driver import HostInputs


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, dt: float) -> None:
        self.now += dt


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def inputs():
    return HostInputs(
        distance=10.0,
        radii=[3.0, 2.0],
        speeds=[1.0, -1.5],
        directions=[True, True],
        rod_lengths=[10.0, 10.0, 10.0, 10.0, 10.0, 10.0, 0.0],
        start=True,
        reset=False,
        runtime=5.0,
    )
