# -*- coding: utf-8 -*-
"""
Contextual risk scoring for routes.

Each hotspot near a route contributes a base penalty by risk level. Weather and
night conditions scale that penalty sequentially (weather first, then night),
so a location sensitive to both compounds on the same base penalty. The final
score is ``100 - total_penalty`` clamped to ``[score_floor, 100]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Sequence, Tuple

from .geo import Coordinate, SamplingConfig, sample_points
from .hotspots import AccidentHotspot
from .proximity import ROUTE_RADIUS_KM, find_nearby

MAX_SCORE = 100.0

DEFAULT_RISK_PENALTIES: Dict[str, float] = {"high": 30.0, "medium": 15.0, "low": 5.0}

DEFAULT_WEATHER_MULTIPLIERS: Dict[str, Dict[str, float]] = {
    "Rain": {"heavy_rain": 1.5, "poor_road": 1.3, "sharp_curves": 1.2},
    "Thunderstorm": {"heavy_rain": 1.6, "poor_road": 1.4, "sharp_curves": 1.3},
    "Fog": {"fog": 1.5, "night_patterns": 1.4, "sharp_curves": 1.3},
    "Mist": {"fog": 1.3, "night_patterns": 1.2},
}

DEFAULT_NIGHT_REASONS = frozenset({"night_patterns", "fog", "sharp_curves"})

SAFETY_THRESHOLDS = {"safe": 75, "caution": 50}


@dataclass(frozen=True)
class WeatherCondition:
    main: str
    description: str = ""


@dataclass(frozen=True)
class ScoringConfig:
    risk_penalties: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_RISK_PENALTIES))
    default_penalty: float = 5.0
    weather_multipliers: Dict[str, Dict[str, float]] = field(
        default_factory=lambda: {k: dict(v) for k, v in DEFAULT_WEATHER_MULTIPLIERS.items()}
    )
    default_weather_multiplier: float = 1.5
    night_multiplier: float = 1.3
    night_reasons: FrozenSet[str] = DEFAULT_NIGHT_REASONS
    night_start_hour: int = 20
    night_end_hour: int = 6
    score_floor: float = 10.0

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ScoringConfig":
        data = data or {}
        defaults = cls()
        penalties = {
            str(k).lower(): float(v) for k, v in (data.get("risk_penalties") or defaults.risk_penalties).items()
        }
        multipliers = {
            str(condition): {str(reason): float(value) for reason, value in (table or {}).items()}
            for condition, table in (data.get("weather_multipliers") or defaults.weather_multipliers).items()
        }
        night = data.get("night") or {}
        return cls(
            risk_penalties=penalties,
            default_penalty=float(data.get("default_penalty", defaults.default_penalty)),
            weather_multipliers=multipliers,
            default_weather_multiplier=float(
                data.get("default_weather_multiplier", defaults.default_weather_multiplier)
            ),
            night_multiplier=float(night.get("multiplier", defaults.night_multiplier)),
            night_reasons=frozenset(night.get("reasons", defaults.night_reasons)),
            night_start_hour=int(night.get("start_hour", defaults.night_start_hour)),
            night_end_hour=int(night.get("end_hour", defaults.night_end_hour)),
            score_floor=float(data.get("score_floor", defaults.score_floor)),
        )

    def penalty_for(self, risk_level: str | None) -> float:
        key = (risk_level or "").lower()
        return float(self.risk_penalties.get(key, self.default_penalty))

    def weather_multiplier_for(self, condition: str, reason: str | None) -> float | None:
        table = self.weather_multipliers.get(condition) or {}
        value = table.get(reason or "")
        return float(value) if value else None


@dataclass(frozen=True)
class RiskFactor:
    reason: str
    impact: float


@dataclass(frozen=True)
class SafetyScore:
    score: float
    explanations: Tuple[str, ...] = ()
    risk_factors: Tuple[RiskFactor, ...] = ()

    @property
    def display_score(self) -> int:
        return round_half_up(self.score)

    @property
    def level(self) -> str:
        return safety_level(self.score)


@dataclass(frozen=True)
class RouteAnalysis:
    safety: SafetyScore
    hotspots_crossed: Tuple[AccidentHotspot, ...] = ()

    @property
    def score(self) -> float:
        return self.safety.score


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_night(hour: float, start_hour: int = 20, end_hour: int = 6) -> bool:
    """Night window check; handles windows that wrap past midnight."""
    if start_hour > end_hour:
        return hour >= start_hour or hour < end_hour
    return start_hour <= hour < end_hour


def is_night_time(now: datetime | None = None, config: ScoringConfig | None = None) -> bool:
    config = config or ScoringConfig()
    now = now or datetime.now()
    return is_night(now.hour, config.night_start_hour, config.night_end_hour)


def safety_level(score: float) -> str:
    if score >= SAFETY_THRESHOLDS["safe"]:
        return "safe"
    if score >= SAFETY_THRESHOLDS["caution"]:
        return "caution"
    return "danger"


def _weather_clause(hotspot: AccidentHotspot) -> str:
    if hotspot.description:
        return f": {hotspot.description}"
    return ""


def score_hotspots(
    nearby: Iterable[AccidentHotspot],
    weather: WeatherCondition | None = None,
    night: bool = False,
    config: ScoringConfig | None = None,
) -> SafetyScore:
    config = config or ScoringConfig()
    total_penalty = 0.0
    explanations: List[str] = []
    risk_factors: List[RiskFactor] = []

    for hotspot in nearby:
        penalty = config.penalty_for(hotspot.risk_level)

        if weather is not None and weather.main:
            specific = config.weather_multiplier_for(weather.main, hotspot.primary_reason)
            if hotspot.weather_sensitive or specific is not None:
                penalty *= specific if specific is not None else config.default_weather_multiplier
                explanations.append(
                    f"{weather.main} increases risk near {hotspot.place_name}{_weather_clause(hotspot)}"
                )

        if night and (hotspot.time_sensitive or hotspot.primary_reason in config.night_reasons):
            penalty *= config.night_multiplier
            explanations.append(f"Night conditions increase risk near {hotspot.place_name}")

        total_penalty += penalty
        risk_factors.append(RiskFactor(reason=hotspot.primary_reason, impact=penalty))

    score = max(config.score_floor, min(MAX_SCORE, MAX_SCORE - total_penalty))
    return SafetyScore(score=score, explanations=tuple(explanations), risk_factors=tuple(risk_factors))


def analyze_route(
    path: Sequence[Coordinate],
    hotspots: Iterable[AccidentHotspot],
    weather: WeatherCondition | None = None,
    night: bool = False,
    config: ScoringConfig | None = None,
    sampling: SamplingConfig | None = None,
    radius_km: float = ROUTE_RADIUS_KM,
) -> RouteAnalysis:
    """Sample a route, match hotspots within ``radius_km`` and score them."""
    samples = sample_points(path, sampling)
    nearby = find_nearby(samples, hotspots, radius_km)
    safety = score_hotspots(nearby, weather=weather, night=night, config=config)
    return RouteAnalysis(safety=safety, hotspots_crossed=tuple(nearby))
