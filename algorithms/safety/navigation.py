# -*- coding: utf-8 -*-
"""
Navigation session: feeds a position stream into an ``AlertMonitor`` and
speaks alerts through a cancellable speech sink.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import AsyncIterable, Iterable, List, Protocol, Sequence, Set

from .alerts import AlertConfig, AlertEvent, AlertMonitor, PositionUpdate
from .geo import Coordinate, distance_km
from .hotspots import AccidentHotspot

logger = logging.getLogger(__name__)


class SpeechSink(Protocol):
    async def speak(self, text: str, rate: float) -> None:
        ...

    def cancel(self) -> None:
        ...


class LoggingSpeechSink:
    """Server-side sink; clients receive ``speech_text`` and speak it themselves."""

    def __init__(self) -> None:
        self.spoken: List[str] = []

    async def speak(self, text: str, rate: float) -> None:
        self.spoken.append(text)
        logger.info("Speech (rate=%.1f): %s", rate, text)

    def cancel(self) -> None:
        logger.debug("Speech queue cancelled")


class NavigationSession:
    """
    One trip: position updates, mute changes and teardown are serialized on a
    lock so each update is evaluated to completion before the next one.
    """

    def __init__(
        self,
        hotspots: Iterable[AccidentHotspot],
        destination: Coordinate | None = None,
        config: AlertConfig | None = None,
        speech: SpeechSink | None = None,
        monitor: AlertMonitor | None = None,
    ) -> None:
        hotspots = tuple(hotspots)
        self.monitor = monitor or AlertMonitor(hotspots, config=config)
        self.hotspots: Sequence[AccidentHotspot] = hotspots
        self.destination = destination
        self.speech = speech or LoggingSpeechSink()
        self._speech_tasks: Set[asyncio.Task] = set()
        self.closed = False
        self._lock = threading.Lock()
        self.monitor.start()

    @property
    def muted(self) -> bool:
        return self.monitor.muted

    def handle_position(self, position: PositionUpdate) -> AlertEvent | None:
        with self._lock:
            if self.closed:
                return None
            event = self.monitor.update(position)
            if event is not None:
                self._announce(event)
            return event

    def set_muted(self, muted: bool) -> AlertEvent | None:
        with self._lock:
            if muted:
                self.monitor.mute()
                return None
            event = self.monitor.unmute()
            if event is not None and not self.closed:
                self._announce(event)
            return event

    def dismiss(self) -> None:
        with self._lock:
            self.monitor.dismiss()

    def replace_hotspots(self, hotspots: Sequence[AccidentHotspot]) -> bool:
        """Swap in a refreshed snapshot; fired ids carry over. Returns False when unchanged."""
        with self._lock:
            if hotspots is self.hotspots or self.closed:
                return False
            self.hotspots = hotspots
            self.monitor.replace_hotspots(hotspots)
            return True

    def _announce(self, event: AlertEvent) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop (sync caller): the client speaks event.speech_text
            return
        task = loop.create_task(self.speech.speak(event.speech_text, self.monitor.config.speech_rate))
        self._speech_tasks.add(task)
        task.add_done_callback(self._speech_tasks.discard)

    async def run(self, positions: AsyncIterable[PositionUpdate]) -> List[AlertEvent]:
        """Consume the stream one update at a time until it ends or the session closes."""
        fired: List[AlertEvent] = []
        try:
            async for position in positions:
                if self.closed:
                    break
                event = self.handle_position(position)
                if event is not None:
                    fired.append(event)
        except PermissionError as exc:
            logger.warning("Position stream unavailable: %s", exc)
        return fired

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self.monitor.stop()
            for task in list(self._speech_tasks):
                task.cancel()
            self._speech_tasks.clear()
            self.speech.cancel()

    def remaining_km(self) -> float | None:
        position = self.monitor.last_position
        if position is None or self.destination is None:
            return None
        return distance_km(position.coordinate, self.destination)

    def eta_minutes(self) -> float | None:
        position = self.monitor.last_position
        remaining = self.remaining_km()
        if remaining is None or position is None or not position.speed_kmh:
            return None
        return remaining / position.speed_kmh * 60
