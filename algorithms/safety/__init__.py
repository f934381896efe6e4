# -*- coding: utf-8 -*-
"""
Route risk analysis, route classification and live alerts for ShieldNav.
"""

from . import alerts, classifier, geo, hotspot_store, hotspots, navigation, proximity, scoring

__all__ = [
    "alerts",
    "classifier",
    "geo",
    "hotspot_store",
    "hotspots",
    "navigation",
    "proximity",
    "scoring",
]
