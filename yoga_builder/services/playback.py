"""Sequence playback timer.

The position is never accumulated tick by tick. It is recomputed from a
monotonic clock on every read (``offset + (now - anchor) * speed``), so a
tick racing with pause/seek/speed changes cannot drift. Those controls only
rebase ``offset`` and ``anchor``.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from yoga_builder.services.timeline import TimelineItem, find_active_item, timeline_total


logger = logging.getLogger(__name__)


class Announcer(Protocol):
    def __call__(self, text: str) -> None: ...


class LoggingAnnouncer:
    """Default speech sink: logs what would be spoken."""

    def __init__(self) -> None:
        self.spoken: list[str] = []

    def __call__(self, text: str) -> None:
        self.spoken.append(text)
        logger.info("Announce: %s", text)


@dataclass(frozen=True)
class PlaybackState:
    position: float
    total: int
    progress: float
    active_item_id: Optional[str]
    item_remaining: float
    is_playing: bool
    finished: bool


class SequencePlayer:
    def __init__(
        self,
        timeline: list[TimelineItem],
        *,
        clock: Callable[[], float] = time.monotonic,
        announcer: Optional[Announcer] = None,
        describe: Optional[Callable[[TimelineItem], Optional[str]]] = None,
        speed: float = 1.0,
    ) -> None:
        if speed <= 0:
            raise ValueError("Playback speed must be positive")
        self.timeline = timeline
        self.total = timeline_total(timeline)
        self._clock = clock
        self._announcer = announcer
        self._describe = describe
        self._speed = speed
        self._offset = 0.0
        self._anchor: Optional[float] = None  # clock reading when play started
        self._last_spoken_id: Optional[str] = None

    # --- state ---

    @property
    def is_playing(self) -> bool:
        return self._anchor is not None

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def position(self) -> float:
        if self._anchor is None:
            return self._offset
        pos = self._offset + (self._clock() - self._anchor) * self._speed
        return min(pos, float(self.total))

    def _rebase(self) -> None:
        # fold elapsed time into the offset so later reads start from "now"
        if self._anchor is not None:
            self._offset = self.position
            self._anchor = self._clock()

    # --- controls ---

    def play(self) -> None:
        if self.is_playing:
            return
        if self._offset >= self.total:
            # finished: start over
            self._offset = 0.0
            self._last_spoken_id = None
        self._anchor = self._clock()
        logger.debug("Playback started at %.1fs", self._offset)
        self._announce_current()

    def pause(self) -> None:
        if not self.is_playing:
            return
        self._offset = self.position
        self._anchor = None
        logger.debug("Playback paused at %.1fs", self._offset)

    def toggle(self) -> None:
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def reset(self) -> None:
        self._offset = 0.0
        self._anchor = None
        self._last_spoken_id = None

    def seek(self, position: float) -> None:
        self._offset = max(0.0, min(float(position), float(self.total)))
        if self._anchor is not None:
            self._anchor = self._clock()
        # the item under the new position gets announced again
        self._last_spoken_id = None
        if self.is_playing:
            self._announce_current()

    def set_speed(self, speed: float) -> None:
        if speed <= 0:
            raise ValueError("Playback speed must be positive")
        self._rebase()
        self._speed = speed

    # --- ticking ---

    def _announce_current(self) -> None:
        item = find_active_item(self.timeline, self.position)
        if item is None or item.id == self._last_spoken_id:
            return
        self._last_spoken_id = item.id
        if self._announcer is None or self._describe is None:
            return
        text = self._describe(item)
        if text:
            self._announcer(text)

    def tick(self) -> PlaybackState:
        position = self.position
        if self.is_playing and position >= self.total:
            self._offset = float(self.total)
            self._anchor = None
            logger.debug("Playback finished")
        elif self.is_playing:
            self._announce_current()

        position = self.position
        item = find_active_item(self.timeline, position)
        return PlaybackState(
            position=position,
            total=self.total,
            progress=(position / self.total) if self.total else 0.0,
            active_item_id=item.id if item else None,
            item_remaining=max(0.0, item.end_time - position) if item else 0.0,
            is_playing=self.is_playing,
            finished=self.total > 0 and position >= self.total,
        )

    async def run(
        self,
        interval: float = 0.1,
        on_tick: Optional[Callable[[PlaybackState], None]] = None,
    ) -> PlaybackState:
        """Tick until playback stops. Cancel the task to stop the timer."""
        if not self.is_playing:
            self.play()
        state = self.tick()
        while state.is_playing:
            if on_tick is not None:
                on_tick(state)
            await asyncio.sleep(interval)
            state = self.tick()
        if on_tick is not None:
            on_tick(state)
        return state
