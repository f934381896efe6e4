# -*- coding: utf-8 -*-
"""
Live proximity alerts while navigating.

``AlertMonitor`` is the per-session state machine: every position update is
checked against the hotspots that have not fired yet, and the first
qualifying one becomes the displayed alert. Fired ids are kept for the whole
session, so dismissal, the display timeout and muting never make a hotspot
alert twice.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Iterable, Set, Tuple

from .geo import Coordinate
from .hotspots import RISK_HIGH, AccidentHotspot, reason_label
from .proximity import ALERT_RADIUS_KM, is_near

logger = logging.getLogger(__name__)

DISPLAY_DURATION_S = 8.0
SPEECH_RATE = 1.1


@dataclass(frozen=True)
class AlertConfig:
    radius_km: float = ALERT_RADIUS_KM
    display_duration_s: float = DISPLAY_DURATION_S
    risk_levels: FrozenSet[str] = frozenset({RISK_HIGH})
    speech_rate: float = SPEECH_RATE

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None, radius_km: float | None = None) -> "AlertConfig":
        data = data or {}
        return cls(
            radius_km=float(radius_km if radius_km is not None else data.get("radius_km", ALERT_RADIUS_KM)),
            display_duration_s=float(data.get("display_duration_s", DISPLAY_DURATION_S)),
            risk_levels=frozenset(str(level).lower() for level in data.get("risk_levels", [RISK_HIGH])),
            speech_rate=float(data.get("speech_rate", SPEECH_RATE)),
        )


@dataclass(frozen=True)
class PositionUpdate:
    lat: float
    lng: float
    heading_degrees: float | None = None
    speed_kmh: float | None = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


@dataclass(frozen=True)
class AlertEvent:
    hotspot_id: str
    reason_label: str
    message: str
    speech_text: str
    display_duration_ms: int


def build_alert(hotspot: AccidentHotspot, display_duration_s: float) -> AlertEvent:
    label = reason_label(hotspot.primary_reason)
    return AlertEvent(
        hotspot_id=hotspot.id,
        reason_label=label,
        message=f"{label} detected ahead.",
        speech_text=f"Caution. Approaching high risk zone. {label}.",
        display_duration_ms=int(display_duration_s * 1000),
    )


class AlertMonitor:
    def __init__(
        self,
        hotspots: Iterable[AccidentHotspot],
        config: AlertConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or AlertConfig()
        self._hotspots: Tuple[AccidentHotspot, ...] = tuple(hotspots)
        self._clock = clock
        self._fired: Set[str] = set()
        self._current: AlertEvent | None = None
        self._expires_at = 0.0
        self._last_position: PositionUpdate | None = None
        self.muted = False
        self.active = False
        self._pending_while_muted = False

    @property
    def fired_ids(self) -> FrozenSet[str]:
        return frozenset(self._fired)

    @property
    def last_position(self) -> PositionUpdate | None:
        return self._last_position

    @property
    def current_alert(self) -> AlertEvent | None:
        if self._current is not None and self._clock() >= self._expires_at:
            self._current = None
        return self._current

    def start(self) -> None:
        self._fired.clear()
        self._current = None
        self._last_position = None
        self._pending_while_muted = False
        self.active = True

    def stop(self) -> None:
        self.active = False
        self._current = None
        self._fired.clear()
        self._pending_while_muted = False

    def replace_hotspots(self, hotspots: Iterable[AccidentHotspot]) -> None:
        self._hotspots = tuple(hotspots)

    def dismiss(self) -> None:
        self._current = None

    def mute(self) -> None:
        self.muted = True

    def unmute(self) -> AlertEvent | None:
        """Unmute; a position that arrived while muted is evaluated now."""
        pending = self.muted and self._pending_while_muted
        self.muted = False
        self._pending_while_muted = False
        if not pending or self._last_position is None:
            return None
        return self._evaluate(self._last_position)

    def update(self, position: PositionUpdate) -> AlertEvent | None:
        if not self.active:
            return None
        self._last_position = position
        if self.muted:
            self._pending_while_muted = True
            return None
        return self._evaluate(position)

    def _qualifies(self, hotspot: AccidentHotspot, point: Coordinate) -> bool:
        if hotspot.id in self._fired:
            return False
        if (hotspot.risk_level or "").lower() not in self.config.risk_levels:
            return False
        return is_near(point, hotspot, self.config.radius_km)

    def _evaluate(self, position: PositionUpdate) -> AlertEvent | None:
        if not self.active:
            return None
        point = position.coordinate
        for hotspot in self._hotspots:
            if not self._qualifies(hotspot, point):
                continue
            self._fired.add(hotspot.id)
            event = build_alert(hotspot, self.config.display_duration_s)
            self._current = event
            self._expires_at = self._clock() + self.config.display_duration_s
            logger.info("Alert fired for hotspot %s (%s)", hotspot.id, event.reason_label)
            return event
        return None

