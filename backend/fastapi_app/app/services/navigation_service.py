# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import time
import uuid
from functools import lru_cache
from threading import Lock
from typing import Callable, Dict, Iterable, List

from algorithms.safety.alerts import AlertConfig, AlertEvent, PositionUpdate
from algorithms.safety.geo import Coordinate
from algorithms.safety.hotspots import AccidentHotspot
from algorithms.safety.navigation import NavigationSession
from algorithms.safety.proximity import ProximityConfig

from ..core.config import Config, get_config
from ..core.exceptions import SessionNotFoundException
from ..schemas.navigation import AlertEventResponse, NavigationState, PositionPayload
from .routing_service import get_routing_service

logger = logging.getLogger(__name__)

SESSION_TTL_S = 30 * 60


def _alert_response(event: AlertEvent | None) -> AlertEventResponse | None:
    if event is None:
        return None
    return AlertEventResponse(
        hotspot_id=event.hotspot_id,
        reason_label=event.reason_label,
        message=event.message,
        speech_text=event.speech_text,
        display_duration_ms=event.display_duration_ms,
    )


class NavigationService:
    """
    Registry of active navigation sessions, one alert monitor per session.

    Sessions idle for longer than ``session_ttl_s`` are closed and dropped the
    next time the registry is touched.
    """

    def __init__(
        self,
        hotspot_source: Callable[[], Iterable[AccidentHotspot]],
        config: Config | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = config or get_config()
        radius = ProximityConfig.from_dict(config.proximity).alert_radius_km
        self.alert_config = AlertConfig.from_dict(config.alerts, radius_km=radius)
        self.session_ttl_s = float(config.navigation.get("session_ttl_s", SESSION_TTL_S))
        self._hotspot_source = hotspot_source
        self._clock = clock
        self._sessions: Dict[str, NavigationSession] = {}
        self._last_seen: Dict[str, float] = {}
        self._lock = Lock()
        logger.info(
            "Initializing NavigationService (alert radius=%.1f km, session ttl=%.0f s)",
            self.alert_config.radius_km,
            self.session_ttl_s,
        )

    def _evict_idle(self) -> List[NavigationSession]:
        now = self._clock()
        expired = [sid for sid, seen in self._last_seen.items() if now - seen >= self.session_ttl_s]
        evicted = []
        for session_id in expired:
            self._last_seen.pop(session_id, None)
            session = self._sessions.pop(session_id, None)
            if session is not None:
                evicted.append(session)
                logger.info("Navigation session %s expired after %.0f s idle", session_id, self.session_ttl_s)
        return evicted

    def start(self, destination: Coordinate | None = None) -> str:
        session_id = uuid.uuid4().hex
        session = NavigationSession(
            hotspots=self._hotspot_source(),
            destination=destination,
            config=self.alert_config,
        )
        with self._lock:
            evicted = self._evict_idle()
            self._sessions[session_id] = session
            self._last_seen[session_id] = self._clock()
        for stale in evicted:
            stale.close()
        logger.info("Navigation session %s started", session_id)
        return session_id

    def get(self, session_id: str) -> NavigationSession:
        with self._lock:
            evicted = self._evict_idle()
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = self._clock()
        for stale in evicted:
            stale.close()
        if session is None:
            raise SessionNotFoundException(session_id)
        return session

    def state(self, session_id: str, alert: AlertEvent | None = None) -> NavigationState:
        session = self.get(session_id)
        remaining = session.remaining_km()
        eta = session.eta_minutes()
        return NavigationState(
            session_id=session_id,
            muted=session.muted,
            alerted_hotspots=len(session.monitor.fired_ids),
            alert=_alert_response(alert),
            current_alert=_alert_response(session.monitor.current_alert),
            remaining_km=round(remaining, 1) if remaining is not None else None,
            eta_minutes=round(eta) if eta is not None else None,
        )

    def update_position(self, session_id: str, payload: PositionPayload) -> NavigationState:
        session = self.get(session_id)
        if session.replace_hotspots(self._hotspot_source()):
            logger.info("Session %s picked up refreshed hotspots (%d)", session_id, len(session.hotspots))
        event = session.handle_position(
            PositionUpdate(
                lat=payload.lat,
                lng=payload.lng,
                heading_degrees=payload.heading_degrees,
                speed_kmh=payload.speed_kmh,
            )
        )
        return self.state(session_id, alert=event)

    def set_muted(self, session_id: str, muted: bool) -> NavigationState:
        session = self.get(session_id)
        event = session.set_muted(muted)
        return self.state(session_id, alert=event)

    def dismiss(self, session_id: str) -> NavigationState:
        session = self.get(session_id)
        session.dismiss()
        return self.state(session_id)

    def end(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_seen.pop(session_id, None)
        if session is None:
            raise SessionNotFoundException(session_id)
        session.close()
        logger.info("Navigation session %s ended", session_id)

    @property
    def active_sessions(self) -> int:
        with self._lock:
            return len(self._sessions)


@lru_cache(maxsize=1)
def get_navigation_service() -> NavigationService:
    return NavigationService(hotspot_source=get_routing_service().hotspot_snapshot)
