"""Tests for the session time tracker."""

from onyxflow.timer import TimeTracker, format_duration


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


class TestTimeTracker:
    def test_seeded_and_stopped(self):
        tracker = TimeTracker(seed_seconds=3725, clock=FakeClock())
        assert tracker.running is False
        assert tracker.elapsed == 3725
        assert tracker.format() == "1h 2m 5s"

    def test_counts_while_running(self):
        clock = FakeClock()
        tracker = TimeTracker(seed_seconds=10, clock=clock)

        assert tracker.toggle() is True
        clock.now += 4.7
        assert tracker.elapsed == 14

    def test_pause_and_resume(self):
        clock = FakeClock()
        tracker = TimeTracker(clock=clock)

        tracker.start()
        clock.now += 30
        tracker.stop()
        clock.now += 600
        assert tracker.elapsed == 30

        tracker.start()
        clock.now += 15
        assert tracker.elapsed == 45

    def test_start_twice_does_not_reset(self):
        clock = FakeClock()
        tracker = TimeTracker(clock=clock)
        tracker.start()
        clock.now += 5
        tracker.start()
        clock.now += 5
        assert tracker.elapsed == 10


def test_format_duration():
    assert format_duration(0) == "0h 0m 0s"
    assert format_duration(59) == "0h 0m 59s"
    assert format_duration(36000 + 61) == "10h 1m 1s"
