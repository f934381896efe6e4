# -*- coding: utf-8 -*-
from __future__ import annotations

from datetime import datetime

import pytest

from algorithms.safety import scoring
from algorithms.safety.geo import Coordinate
from algorithms.safety.hotspots import AccidentHotspot
from algorithms.safety.scoring import ScoringConfig, WeatherCondition


def _hotspot(
    hotspot_id: str = "h1",
    risk_level: str = "high",
    reason: str = "heavy_traffic",
    weather_sensitive: bool = False,
    time_sensitive: bool = False,
    city: str | None = "Vijayawada",
    description: str | None = "Benz Circle junction",
    lat: float = 16.5,
    lng: float = 80.6,
) -> AccidentHotspot:
    return AccidentHotspot(
        id=hotspot_id,
        location=Coordinate(lat, lng),
        risk_level=risk_level,
        primary_reason=reason,
        description=description,
        city=city,
        weather_sensitive=weather_sensitive,
        time_sensitive=time_sensitive,
    )


def test_no_hotspots_scores_perfect():
    result = scoring.score_hotspots([], weather=WeatherCondition("Rain"), night=True)

    assert result.score == 100
    assert result.explanations == ()
    assert result.risk_factors == ()


@pytest.mark.parametrize("level,expected", [("high", 70), ("medium", 85), ("low", 95)])
def test_base_penalty_by_risk_level(level, expected):
    result = scoring.score_hotspots([_hotspot(risk_level=level)])
    assert result.score == pytest.approx(expected)


def test_configured_weather_multiplier_applies_without_sensitivity_flag():
    result = scoring.score_hotspots([_hotspot(reason="sharp_curves")], weather=WeatherCondition("Rain", "light rain"))

    assert result.score == pytest.approx(100 - 30 * 1.2)
    assert result.explanations == ("Rain increases risk near Vijayawada: Benz Circle junction",)
    assert result.risk_factors[0].reason == "sharp_curves"
    assert result.risk_factors[0].impact == pytest.approx(36.0)


def test_weather_sensitive_hotspot_uses_default_multiplier():
    result = scoring.score_hotspots(
        [_hotspot(weather_sensitive=True, city=None, description=None)],
        weather=WeatherCondition("Rain"),
    )

    assert result.score == pytest.approx(100 - 30 * 1.5)
    assert result.explanations == ("Rain increases risk near this location",)


def test_weather_ignored_for_unrelated_hotspot():
    result = scoring.score_hotspots([_hotspot(reason="heavy_traffic")], weather=WeatherCondition("Clear"))

    assert result.score == pytest.approx(70)
    assert result.explanations == ()


def test_night_multiplier_for_night_reasons_and_time_sensitive():
    by_reason = scoring.score_hotspots([_hotspot(reason="night_patterns")], night=True)
    by_flag = scoring.score_hotspots([_hotspot(time_sensitive=True)], night=True)
    daytime = scoring.score_hotspots([_hotspot(reason="night_patterns")], night=False)

    assert by_reason.score == pytest.approx(100 - 30 * 1.3)
    assert by_flag.score == pytest.approx(100 - 30 * 1.3)
    assert by_reason.explanations == ("Night conditions increase risk near Vijayawada",)
    assert daytime.score == pytest.approx(70)


def test_multipliers_compound_sequentially():
    hotspot = _hotspot(reason="fog", weather_sensitive=True, time_sensitive=True)
    result = scoring.score_hotspots([hotspot], weather=WeatherCondition("Fog"), night=True)

    assert result.risk_factors[0].impact == pytest.approx(30 * 1.5 * 1.3)
    assert result.score == pytest.approx(41.5)
    assert len(result.explanations) == 2


def test_night_and_weather_strictly_lower_than_neither():
    hotspot = _hotspot(reason="sharp_curves", weather_sensitive=True, time_sensitive=True)
    plain = scoring.score_hotspots([hotspot])
    adjusted = scoring.score_hotspots([hotspot], weather=WeatherCondition("Thunderstorm"), night=True)

    assert adjusted.score < plain.score


def test_adding_high_risk_hotspot_never_raises_score():
    base = [_hotspot("a", risk_level="low"), _hotspot("b", risk_level="medium", reason="fog")]
    extra = _hotspot("c", risk_level="high")
    for weather in (None, WeatherCondition("Fog")):
        for night in (False, True):
            without = scoring.score_hotspots(base, weather=weather, night=night)
            with_extra = scoring.score_hotspots(base + [extra], weather=weather, night=night)
            assert with_extra.score <= without.score


def test_score_floor_is_configurable():
    hotspots = [_hotspot(f"h{idx}") for idx in range(5)]

    assert scoring.score_hotspots(hotspots).score == 10
    assert scoring.score_hotspots(hotspots, config=ScoringConfig(score_floor=0)).score == 0


def test_unknown_values_fall_back_without_error():
    odd = _hotspot(risk_level="extreme", reason="wildlife_crossing")
    result = scoring.score_hotspots([odd], weather=WeatherCondition("Snow"), night=True)

    assert result.score == pytest.approx(95)
    assert result.explanations == ()


@pytest.mark.parametrize(
    "hour,expected",
    [(20, True), (23, True), (0, True), (5, True), (6, False), (12, False), (19, False)],
)
def test_is_night_wraps_past_midnight(hour, expected):
    assert scoring.is_night(hour, 20, 6) is expected


def test_is_night_non_wrapping_window():
    assert scoring.is_night(2, 1, 5)
    assert not scoring.is_night(5, 1, 5)


def test_is_night_time_uses_clock_and_config():
    config = ScoringConfig(night_start_hour=22, night_end_hour=5)
    assert scoring.is_night_time(datetime(2024, 1, 1, 21, 30), config) is False
    assert scoring.is_night_time(datetime(2024, 1, 1, 22, 0), config) is True


def test_scoring_config_from_dict():
    config = ScoringConfig.from_dict(
        {
            "score_floor": 0,
            "risk_penalties": {"HIGH": 40, "medium": 20, "low": 10},
            "weather_multipliers": {"Rain": {"poor_road": 2.0}},
            "night": {"start_hour": 19, "end_hour": 7, "multiplier": 1.5, "reasons": ["fog"]},
        }
    )

    assert config.score_floor == 0
    assert config.penalty_for("high") == 40
    assert config.weather_multiplier_for("Rain", "poor_road") == 2.0
    assert config.weather_multiplier_for("Fog", "fog") is None
    assert config.night_reasons == frozenset({"fog"})
    assert config.night_start_hour == 19


@pytest.mark.parametrize("score,level", [(100, "safe"), (75, "safe"), (74.9, "caution"), (50, "caution"), (10, "danger")])
def test_safety_level_bands(score, level):
    assert scoring.safety_level(score) == level


def test_analyze_route_matches_hotspots_along_path():
    path = [Coordinate(16.5, 80.60 + idx * 0.005) for idx in range(20)]
    hotspots = [
        _hotspot("on-route", lat=16.501, lng=80.64),
        _hotspot("off-route", lat=16.6, lng=80.65),
    ]

    analysis = scoring.analyze_route(path, hotspots, radius_km=0.5)

    assert [h.id for h in analysis.hotspots_crossed] == ["on-route"]
    assert analysis.score == pytest.approx(70)


def test_analyze_route_with_empty_path_is_maximum_score():
    analysis = scoring.analyze_route([], [_hotspot()])

    assert analysis.score == 100
    assert analysis.hotspots_crossed == ()


@pytest.mark.parametrize("raw,shown", [(41.5, 42), (70.4, 70), (99.5, 100), (10.0, 10)])
def test_display_score_rounds_half_up(raw, shown):
    assert scoring.SafetyScore(score=raw).display_score == shown
