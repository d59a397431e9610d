"""Tests for the cooperative scheduler."""

import asyncio

import pytest

from simulation.clock import SimulationClock


@pytest.fixture
def clock() -> SimulationClock:
    return SimulationClock()


class TestSimulationClock:
    def test_fires_on_interval(self, clock: SimulationClock):
        fired: list[float] = []
        clock.schedule("tick", 2.0, fired.append)
        clock.advance(7.0)
        assert fired == [2.0, 4.0, 6.0]
        assert clock.now == 7.0

    def test_chronological_and_registration_order(self, clock: SimulationClock):
        log: list[tuple[str, float]] = []
        clock.schedule("price", 2.0, lambda t: log.append(("price", t)))
        clock.schedule("bots", 4.0, lambda t: log.append(("bots", t)))
        clock.schedule("countdown", 1.0, lambda t: log.append(("countdown", t)))
        clock.advance(4.0)
        assert log == [
            ("countdown", 1.0),
            ("price", 2.0),
            ("countdown", 2.0),
            ("countdown", 3.0),
            ("price", 4.0),
            ("bots", 4.0),
            ("countdown", 4.0),
        ]

    def test_cancel_all_inside_callback_stops_everything(self, clock: SimulationClock):
        log: list[str] = []

        def stop(now: float) -> None:
            log.append("stop")
            clock.cancel_all()

        clock.schedule("stopper", 1.0, stop)
        clock.schedule("later", 1.0, lambda t: log.append("later"))
        clock.advance(10.0)
        assert log == ["stop"]
        assert not clock.running
        assert clock.next_due() is None

    def test_cancel_single_timer(self, clock: SimulationClock):
        fired: list[float] = []
        clock.schedule("a", 1.0, fired.append)
        clock.cancel("a")
        clock.advance(5.0)
        assert fired == []

    def test_no_drift_with_fractional_interval(self, clock: SimulationClock):
        fired: list[float] = []
        clock.schedule("fast", 0.1, fired.append)
        clock.advance_to(100.05)
        assert len(fired) == 1000
        assert fired[-1] == pytest.approx(100.0)
        assert fired[500] == pytest.approx(50.1)

    def test_rejects_bad_interval_and_duplicates(self, clock: SimulationClock):
        with pytest.raises(ValueError):
            clock.schedule("zero", 0.0, lambda t: None)
        clock.schedule("dup", 1.0, lambda t: None)
        with pytest.raises(ValueError):
            clock.schedule("dup", 1.0, lambda t: None)

    def test_async_run_fast_forward(self, clock: SimulationClock):
        fired: list[float] = []

        def tick(now: float) -> None:
            fired.append(now)
            if len(fired) == 5:
                clock.cancel_all()

        clock.schedule("tick", 1.0, tick)
        asyncio.run(clock.run(realtime=False))
        assert fired == [1.0, 2.0, 3.0, 4.0, 5.0]

    def test_async_run_until(self, clock: SimulationClock):
        fired: list[float] = []
        clock.schedule("tick", 1.0, fired.append)
        asyncio.run(clock.run(realtime=False, until=3.5))
        assert fired == [1.0, 2.0, 3.0]
        assert clock.now == 3.5

    def test_async_run_realtime_paces(self, clock: SimulationClock):
        fired: list[float] = []

        def tick(now: float) -> None:
            fired.append(now)
            if len(fired) == 3:
                clock.cancel_all()

        clock.schedule("tick", 0.01, tick)
        asyncio.run(clock.run(realtime=True))
        assert fired == pytest.approx([0.01, 0.02, 0.03])
