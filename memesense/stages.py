"""Simulated progress stages shown before the real classification call.

The stages carry no work of their own. They only pace the UI so the user
sees the analysis advance; the remote call starts after the last one.
"""
import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class Stage:
    """One named, timed phase of the progress display."""
    name: str
    duration_ms: int

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage("Visual Analysis", 2000),
    Stage("Text Processing", 1500),
    Stage("Classification", 1000),
)

SleepFunc = Callable[[float], Awaitable[None]]


class StageSequencer:
    """Walk a fixed stage sequence with a timed pause per stage."""

    def __init__(
        self,
        stages: tuple[Stage, ...] = DEFAULT_STAGES,
        sleep: SleepFunc = asyncio.sleep,
    ):
        if not stages:
            raise ValueError("At least one stage is required")
        self.stages = tuple(stages)
        self._sleep = sleep

    def __len__(self) -> int:
        return len(self.stages)

    @property
    def total_duration_ms(self) -> int:
        return sum(stage.duration_ms for stage in self.stages)

    async def play(self) -> AsyncIterator[tuple[int, Stage]]:
        """Yield each stage as it becomes visible, then hold it.

        The consumer sees ``(index, stage)`` on entry; the generator resumes
        only after that stage's duration has elapsed. Exhausting the
        generator means every stage has been shown in full.
        """
        for index, stage in enumerate(self.stages):
            logger.debug("stage_entered", index=index, stage=stage.name)
            yield index, stage
            await self._sleep(stage.duration_seconds)
