# -*- coding: utf-8 -*-
from __future__ import annotations

import threading
import time

import pytest

from algorithms.safety import alerts
from algorithms.safety.geo import Coordinate
from algorithms.safety.hotspots import AccidentHotspot
from backend.fastapi_app.app.core.config import get_config
from backend.fastapi_app.app.core.exceptions import SessionNotFoundException
from backend.fastapi_app.app.schemas.navigation import PositionPayload
from backend.fastapi_app.app.services.navigation_service import NavigationService

HOTSPOTS = (
    AccidentHotspot(id="hs-high", location=Coordinate(0.0, 0.0), risk_level="high", primary_reason="fog"),
    AccidentHotspot(id="hs-low", location=Coordinate(0.0, 0.001), risk_level="low", primary_reason="poor_road"),
)


@pytest.fixture
def service():
    return NavigationService(hotspot_source=lambda: HOTSPOTS, config=get_config())


def test_start_returns_fresh_state(service):
    session_id = service.start(Coordinate(0.1, 0.0))

    state = service.state(session_id)

    assert state.session_id == session_id
    assert state.muted is False
    assert state.alerted_hotspots == 0
    assert state.alert is None
    assert service.active_sessions == 1


def test_position_inside_radius_raises_single_alert(service):
    session_id = service.start(Coordinate(0.1, 0.0))

    first = service.update_position(session_id, PositionPayload(lat=0.0135, lng=0.0, speed_kmh=60))
    second = service.update_position(session_id, PositionPayload(lat=0.012, lng=0.0, speed_kmh=60))

    assert first.alert.hotspot_id == "hs-high"
    assert first.alert.message == "Fog Prone Zone detected ahead."
    assert first.alert.display_duration_ms == 8000
    assert first.current_alert.hotspot_id == "hs-high"
    assert second.alert is None
    assert second.alerted_hotspots == 1
    assert first.remaining_km == pytest.approx(9.6, abs=0.1)
    assert first.eta_minutes == 10


def test_muted_session_defers_alert_until_unmuted(service):
    session_id = service.start()
    service.set_muted(session_id, True)

    silent = service.update_position(session_id, PositionPayload(lat=0.0135, lng=0.0))
    resumed = service.set_muted(session_id, False)

    assert silent.alert is None
    assert silent.muted is True
    assert resumed.alert.hotspot_id == "hs-high"
    assert resumed.muted is False


def test_dismiss_clears_current_alert(service):
    session_id = service.start()
    service.update_position(session_id, PositionPayload(lat=0.0135, lng=0.0))

    state = service.dismiss(session_id)

    assert state.current_alert is None
    assert state.alerted_hotspots == 1


def test_end_removes_session(service):
    session_id = service.start()

    service.end(session_id)

    assert service.active_sessions == 0
    with pytest.raises(SessionNotFoundException):
        service.state(session_id)
    with pytest.raises(SessionNotFoundException):
        service.end(session_id)


def test_unknown_session_is_not_found(service):
    with pytest.raises(SessionNotFoundException) as excinfo:
        service.update_position("missing", PositionPayload(lat=0.0, lng=0.0))
    assert excinfo.value.status_code == 404


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_concurrent_updates_fire_each_hotspot_once(service, monkeypatch):
    real_is_near = alerts.is_near

    def slow_is_near(point, hotspot, radius_km):
        time.sleep(0.05)
        return real_is_near(point, hotspot, radius_km)

    monkeypatch.setattr(alerts, "is_near", slow_is_near)
    session_id = service.start()
    states = []

    def post_position():
        states.append(service.update_position(session_id, PositionPayload(lat=0.01, lng=0.0)))

    workers = [threading.Thread(target=post_position) for _ in range(2)]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join()

    fired = [state.alert for state in states if state.alert is not None]
    assert len(fired) == 1
    assert service.state(session_id).alerted_hotspots == 1


def test_idle_sessions_expire_after_ttl():
    clock = FakeClock()
    service = NavigationService(hotspot_source=lambda: HOTSPOTS, config=get_config(), clock=clock)
    stale_id = service.start()
    stale_session = service.get(stale_id)

    clock.now = 1000.0
    active_id = service.start()
    clock.now = 1500.0
    service.update_position(active_id, PositionPayload(lat=1.0, lng=1.0))

    clock.now = service.session_ttl_s + 1.0
    service.get(active_id)

    assert service.active_sessions == 1
    assert stale_session.closed is True
    with pytest.raises(SessionNotFoundException):
        service.get(stale_id)


def test_sessions_pick_up_refreshed_hotspots():
    far_away = (
        AccidentHotspot(id="hs-far", location=Coordinate(10.0, 10.0), risk_level="high", primary_reason="fog"),
    )
    snapshot = {"current": far_away}
    service = NavigationService(hotspot_source=lambda: snapshot["current"], config=get_config())
    session_id = service.start()

    assert service.update_position(session_id, PositionPayload(lat=0.0, lng=0.0)).alert is None

    snapshot["current"] = far_away + HOTSPOTS
    state = service.update_position(session_id, PositionPayload(lat=0.0, lng=0.0))

    assert state.alert.hotspot_id == "hs-high"
