# -*- coding: utf-8 -*-
from __future__ import annotations

import pandas as pd
import pytest

from algorithms.safety import hotspot_store


def _raw_df():
    return pd.DataFrame(
        {
            "id": ["a", "b", "c", "a"],
            "lat": [16.51, "16.52", None, 16.53],
            "lng": [80.63, 80.64, 80.65, 80.66],
            "risk_level": ["HIGH", " medium ", "low", "low"],
            "primary_reason": ["Sharp_Curves", "fog", "poor_road", "fog"],
            "description": ["Flyover curve", None, "x", "dup"],
            "city": ["Vijayawada", "nan", "Guntur", "Guntur"],
            "weather_sensitive": ["true", "0", "yes", "no"],
        }
    )


def _write_csv(path, df=None):
    (df if df is not None else _raw_df()).to_csv(path, index=False)
    return path


def test_prepare_dataframe_normalizes_rows():
    prepared = hotspot_store._prepare_dataframe(_raw_df())

    assert prepared["id"].tolist() == ["a", "b"]
    assert prepared["risk_level"].tolist() == ["high", "medium"]
    assert prepared["primary_reason"].tolist() == ["sharp_curves", "fog"]
    assert prepared["weather_sensitive"].tolist() == [True, False]
    assert prepared["time_sensitive"].tolist() == [False, False]
    assert "state" in prepared.columns


def test_prepare_dataframe_requires_core_columns():
    with pytest.raises(ValueError):
        hotspot_store._prepare_dataframe(pd.DataFrame({"id": ["a"], "lat": [1.0]}))


def test_load_hotspots_builds_records(tmp_path):
    csv_path = _write_csv(tmp_path / "hotspots.csv")
    hotspot_store._load_hotspots.cache_clear()

    hotspots = hotspot_store.load_hotspots(csv_path)

    assert [h.id for h in hotspots] == ["a", "b"]
    first, second = hotspots
    assert first.location.lat == pytest.approx(16.51)
    assert first.description == "Flyover curve"
    assert first.city == "Vijayawada"
    assert first.weather_sensitive is True
    assert second.city is None
    assert second.description is None


def test_store_with_missing_file_is_empty(tmp_path):
    store = hotspot_store.HotspotStore(path=tmp_path / "missing.csv")

    assert store.snapshot() == ()
    assert store.last_error is not None


def test_store_keeps_previous_snapshot_when_refresh_fails(tmp_path, monkeypatch):
    csv_path = _write_csv(tmp_path / "hotspots.csv")
    store = hotspot_store.HotspotStore(path=csv_path)
    loaded = store.snapshot()
    assert len(loaded) == 2

    def broken(_path=None):
        raise ValueError("bad file")

    monkeypatch.setattr(hotspot_store, "load_hotspots", broken)

    assert store.refresh() == loaded
    assert store.last_error == "bad file"


def test_store_refreshes_after_interval(tmp_path, monkeypatch):
    csv_path = _write_csv(tmp_path / "hotspots.csv")
    now = {"value": 0.0}
    calls = []

    def fake_load(path=None):
        calls.append(path)
        return ()

    monkeypatch.setattr(hotspot_store, "load_hotspots", fake_load)
    store = hotspot_store.HotspotStore(path=csv_path, refresh_interval_s=60, clock=lambda: now["value"])

    store.snapshot()
    now["value"] = 30
    store.snapshot()
    now["value"] = 61
    store.snapshot()

    assert len(calls) == 2
