"""Tests for the staged progress sequence."""
import pytest

from memesense.stages import DEFAULT_STAGES, Stage, StageSequencer


class RecordingSleep:
    """Fake sleep that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class TestDefaultStages:
    def test_names_and_durations(self):
        assert [(s.name, s.duration_ms) for s in DEFAULT_STAGES] == [
            ("Visual Analysis", 2000),
            ("Text Processing", 1500),
            ("Classification", 1000),
        ]

    def test_immutable(self):
        assert isinstance(DEFAULT_STAGES, tuple)
        with pytest.raises(AttributeError):
            DEFAULT_STAGES[0].duration_ms = 0


class TestStageSequencer:
    async def test_plays_stages_in_order(self):
        """Each stage is yielded once, in order."""
        sequencer = StageSequencer(sleep=RecordingSleep())

        seen = [(i, stage.name) async for i, stage in sequencer.play()]

        assert seen == [(0, "Visual Analysis"), (1, "Text Processing"), (2, "Classification")]

    async def test_holds_each_stage_for_its_duration(self):
        """Sleeps for every stage, including the last."""
        sleep = RecordingSleep()
        sequencer = StageSequencer(sleep=sleep)

        async for _ in sequencer.play():
            pass

        assert sleep.calls == [2.0, 1.5, 1.0]

    async def test_delay_happens_after_stage_is_shown(self):
        """The consumer sees a stage before its delay starts."""
        events = []

        async def sleep(seconds):
            events.append(("sleep", seconds))

        sequencer = StageSequencer(stages=(Stage("a", 100), Stage("b", 200)), sleep=sleep)
        async for index, _ in sequencer.play():
            events.append(("stage", index))

        assert events == [("stage", 0), ("sleep", 0.1), ("stage", 1), ("sleep", 0.2)]

    async def test_stopping_early_skips_remaining_delays(self):
        sleep = RecordingSleep()
        sequencer = StageSequencer(sleep=sleep)

        async for index, _ in sequencer.play():
            if index == 1:
                break

        assert sleep.calls == [2.0]

    def test_total_duration(self):
        assert StageSequencer().total_duration_ms == 4500
        assert len(StageSequencer()) == 3

    def test_empty_sequence_rejected(self):
        with pytest.raises(ValueError, match="At least one stage"):
            StageSequencer(stages=())
