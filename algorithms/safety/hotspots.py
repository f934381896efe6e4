# -*- coding: utf-8 -*-
"""
Accident hotspot records and their display labels.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .geo import Coordinate

RISK_HIGH = "high"
RISK_MEDIUM = "medium"
RISK_LOW = "low"
RISK_LEVELS = (RISK_HIGH, RISK_MEDIUM, RISK_LOW)

RISK_REASON_LABELS: Dict[str, str] = {
    "sharp_curves": "Sharp Curves",
    "heavy_traffic": "Heavy Traffic",
    "high_speed": "High Speed Zone",
    "poor_road": "Poor Road Conditions",
    "heavy_rain": "Heavy Rain Area",
    "fog": "Fog Prone Zone",
    "night_patterns": "Night Risk Area",
}


@dataclass(frozen=True)
class AccidentHotspot:
    id: str
    location: Coordinate
    risk_level: str
    primary_reason: str
    description: str | None = None
    city: str | None = None
    state: str | None = None
    weather_sensitive: bool = False
    time_sensitive: bool = False

    @property
    def lat(self) -> float:
        return self.location.lat

    @property
    def lng(self) -> float:
        return self.location.lng

    @property
    def place_name(self) -> str:
        return self.city or "this location"


def reason_label(reason: str | None) -> str:
    if not reason:
        return "Accident Zone"
    return RISK_REASON_LABELS.get(reason, reason.replace("_", " ").title())
