#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Shows how weather and night conditions change the score of each known hotspot.
"""

import argparse
import sys
from pathlib import Path

# Add the project root to the path
root_dir = Path(__file__).parent.parent.parent
sys.path.insert(0, str(root_dir))

from algorithms.safety import hotspot_store, scoring

CONDITIONS = [None, "Clear", "Rain", "Thunderstorm", "Fog", "Mist"]


def run(path: Path) -> None:
    print("=" * 80)
    print("Weather and night impact per hotspot")
    print("=" * 80)

    print(f"\n1. Loading hotspots from {path}...")
    hotspots = hotspot_store.load_hotspots(path)
    print(f"   ✓ {len(hotspots)} hotspots loaded")

    config = scoring.ScoringConfig()
    header = "".join(f"{(condition or 'none'):>14}" for condition in CONDITIONS)
    print(f"\n2. Score with a single hotspot on the route (day / night)")
    print(f"{'hotspot':<12}{'level':<8}{header}")
    print("─" * (20 + 14 * len(CONDITIONS)))

    for hotspot in hotspots:
        cells = []
        for condition in CONDITIONS:
            weather = scoring.WeatherCondition(condition) if condition else None
            day = scoring.score_hotspots([hotspot], weather=weather, night=False, config=config)
            night = scoring.score_hotspots([hotspot], weather=weather, night=True, config=config)
            cells.append(f"{day.display_score:>7}/{night.display_score:<6}")
        print(f"{hotspot.id:<12}{hotspot.risk_level:<8}{''.join(cells)}")

    print("\n✅ Lower numbers mean the condition makes that spot more dangerous.")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--path", type=Path, default=hotspot_store.HOTSPOTS_PATH, help="Hotspot CSV file")
    args = parser.parse_args()
    run(args.path)


if __name__ == "__main__":
    main()
