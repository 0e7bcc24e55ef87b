"""Tests for age-based cache eviction."""

import logging
from datetime import timedelta

import pytest

from bom_radar.cache.cache_janitor import CacheJanitor
from bom_radar.models import StoredObject

from conftest import utc

RADAR_KEY = "radar_cache/IDR703.T.202504140000.png"


@pytest.fixture
def janitor(context):
    return CacheJanitor(context)


class TestRadarScenario:
    def test_deletes_after_25_hours(self, janitor, storage, clock):
        storage.objects[RADAR_KEY] = b"png"
        clock.now = utc(2025, 4, 15, 1, 0)

        report = janitor.sweep()

        assert RADAR_KEY not in storage.objects
        assert report.deleted == 1

    def test_keeps_after_23_hours(self, janitor, storage, clock):
        storage.objects[RADAR_KEY] = b"png"
        clock.now = utc(2025, 4, 14, 23, 0)

        report = janitor.sweep()

        assert RADAR_KEY in storage.objects
        assert report.deleted == 0

    @pytest.mark.parametrize("age,deleted", [
        (timedelta(hours=24), False),
        (timedelta(hours=24, minutes=1), True),
        (timedelta(hours=24, minutes=59), True),
        (timedelta(hours=1), False),
        (timedelta(days=30), True),
    ])
    def test_deletes_iff_older_than_retention(self, janitor, storage, clock, age, deleted):
        storage.objects[RADAR_KEY] = b"png"
        clock.now = utc(2025, 4, 14, 0, 0) + age

        janitor.sweep()

        assert (RADAR_KEY not in storage.objects) is deleted


class TestNonMatchingNames:
    @pytest.mark.parametrize("key", [
        "radar_cache/IDR703.background.png",
        "radar_cache/IDR.legend.0.png",
        "radar_cache/IDR703.T.2025041400.png",
        "radar_cache/IDR7031.T.202504140000.png",
        "radar_cache/IDR703.T.202504140000.png.bak",
        "radar_cache/notes.txt",
        "radar_cache/IDR703.T.202513140000.png",
    ])
    def test_never_deleted(self, janitor, storage, clock, key):
        storage.objects[key] = b"x"
        clock.now = utc(2030, 1, 1)

        report = janitor.sweep()

        assert key in storage.objects
        assert report.skipped == 1

    def test_objects_outside_prefixes_are_not_listed(self, janitor, storage, clock):
        storage.objects["IDR703.base.png"] = b"x"
        storage.objects["external/IDR703.202504140000.radar.gif"] = b"x"
        clock.now = utc(2030, 1, 1)

        report = janitor.sweep()

        assert report.scanned == 0
        assert len(storage.objects) == 2


def test_satellite_prefix_is_swept(janitor, storage, clock):
    old = "satellite_cache/IDE00416.202504120000.jpg"
    fresh = "satellite_cache/IDE00416.202504140600.jpg"
    storage.objects[old] = b"jpg"
    storage.objects[fresh] = b"jpg"
    clock.now = utc(2025, 4, 14, 7, 0)

    janitor.sweep()

    assert old not in storage.objects
    assert fresh in storage.objects


def test_delete_failure_does_not_halt_sweep(janitor, storage, clock):
    keys = [f"radar_cache/IDR703.T.2025041400{minute:02d}.png" for minute in (0, 6, 12)]
    for key in keys:
        storage.objects[key] = b"png"
    storage.fail_delete.add(keys[0])
    clock.now = utc(2025, 4, 20)

    report = janitor.sweep()

    assert report.failed == 1
    assert report.deleted == 2
    assert keys[0] in storage.objects
    assert keys[1] not in storage.objects and keys[2] not in storage.objects


def test_repeated_sweeps_are_harmless(janitor, storage, clock):
    storage.objects[RADAR_KEY] = b"png"
    clock.now = utc(2025, 4, 20)

    janitor.sweep()
    report = janitor.sweep()

    assert report.deleted == 0
    assert report.failed == 0



class TestExpiryRule:
    def test_boundary(self, janitor):
        stamp = utc(2025, 4, 14, 0, 0)
        assert not janitor.is_expired(stamp, stamp + timedelta(hours=24))
        assert janitor.is_expired(stamp, stamp + timedelta(hours=24, seconds=1))

    def test_sweep_follows_configured_retention(self, context, storage, clock):
        storage.objects[RADAR_KEY] = b"png"
        clock.now = utc(2025, 4, 14, 2, 0)

        report = CacheJanitor(context, retention=timedelta(hours=1)).sweep()

        assert report.deleted == 1
        assert RADAR_KEY not in storage.objects

    def test_sweep_decides_through_is_expired(self, janitor, storage, clock, monkeypatch):
        storage.objects[RADAR_KEY] = b"png"
        clock.now = utc(2025, 4, 14, 1, 0)
        seen = []

        def always_expired(timestamp, now):
            seen.append((timestamp, now))
            return True

        monkeypatch.setattr(janitor, "is_expired", always_expired)

        janitor.sweep()

        assert seen == [(utc(2025, 4, 14, 0, 0), utc(2025, 4, 14, 1, 0))]
        assert RADAR_KEY not in storage.objects


def test_listing_metadata_is_logged(janitor, storage, clock, caplog, monkeypatch):
    modified = utc(2025, 4, 14, 0, 5)
    monkeypatch.setattr(storage, "list", lambda prefix, delimiter="/": [
        StoredObject(key=RADAR_KEY, size=1234, last_modified=modified)
    ] if prefix == "radar_cache/" else [])

    with caplog.at_level(logging.DEBUG, logger="bom_radar.cache.cache_janitor"):
        janitor.sweep()

    assert f"{RADAR_KEY} (1234 bytes, modified {modified})" in caplog.text
