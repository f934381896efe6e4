# -*- coding: utf-8 -*-
"""
Labels candidate routes as safest, balanced and fastest.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .geo import Coordinate
from .scoring import RouteAnalysis, round_half_up, safety_level

SAFEST = "safest"
BALANCED = "balanced"
FASTEST = "fastest"

_ID_SUFFIX = {SAFEST: "safe", BALANCED: "balanced", FASTEST: "fast"}


@dataclass(frozen=True)
class CandidateRoute:
    id: str
    geometry: Tuple[Coordinate, ...]
    distance_m: float
    duration_s: float


@dataclass(frozen=True)
class ScoredRoute:
    route: CandidateRoute
    analysis: RouteAnalysis

    @property
    def id(self) -> str:
        return self.route.id

    @property
    def score(self) -> float:
        return self.analysis.score

    @property
    def duration_s(self) -> float:
        return self.route.duration_s


@dataclass(frozen=True)
class Classification:
    safest: ScoredRoute
    balanced: ScoredRoute
    fastest: ScoredRoute


@dataclass(frozen=True)
class RouteOption:
    id: str
    classification: str
    duration_display: str
    distance_display: str
    safety_score: int
    safety_level: str
    hotspots_crossed: int
    explanations: Tuple[str, ...]
    geometry: Tuple[Coordinate, ...]


def classify(routes: Sequence[ScoredRoute]) -> Classification | None:
    """
    Pick the safest, fastest and balanced routes.

    Safest is the highest score (ties: shortest duration); fastest is the
    shortest duration (ties: highest score). Balanced is the first route that
    is neither; when no such route exists it falls back to the safest one.
    Returns ``None`` when there are no candidates.
    """
    if not routes:
        return None
    safest = max(routes, key=lambda r: (r.score, -r.duration_s))
    fastest = min(routes, key=lambda r: (r.duration_s, -r.score))
    balanced = next(
        (r for r in routes if r.id != safest.id and r.id != fastest.id),
        safest,
    )
    return Classification(safest=safest, balanced=balanced, fastest=fastest)


def format_duration(seconds: float) -> str:
    return f"{round_half_up(seconds / 60)} min"


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def _label_explanation(label: str, scored: ScoredRoute, total_hotspots: int) -> str:
    if label == SAFEST:
        crossed = len(scored.analysis.hotspots_crossed)
        if crossed == 0:
            return "Maximum safety rating"
        return f"Avoids {total_hotspots - crossed} of {total_hotspots} known hotspots"
    if label == BALANCED:
        return "Optimal mix of safety & speed"
    return "Shortest travel time"


def to_route_option(label: str, scored: ScoredRoute, total_hotspots: int) -> RouteOption:
    explanations: List[str] = [_label_explanation(label, scored, total_hotspots)]
    for text in scored.analysis.safety.explanations:
        if text not in explanations:
            explanations.append(text)
    return RouteOption(
        id=f"{scored.id}-{_ID_SUFFIX[label]}",
        classification=label,
        duration_display=format_duration(scored.route.duration_s),
        distance_display=format_distance(scored.route.distance_m),
        safety_score=scored.analysis.safety.display_score,
        safety_level=safety_level(scored.score),
        hotspots_crossed=len(scored.analysis.hotspots_crossed),
        explanations=tuple(explanations),
        geometry=scored.route.geometry,
    )


def build_route_options(routes: Sequence[ScoredRoute], total_hotspots: int) -> List[RouteOption]:
    classification = classify(routes)
    if classification is None:
        return []
    return [
        to_route_option(SAFEST, classification.safest, total_hotspots),
        to_route_option(BALANCED, classification.balanced, total_hotspots),
        to_route_option(FASTEST, classification.fastest, total_hotspots),
    ]
