"""Shared fixtures: in-memory object storage, a fake FTP source and image helpers."""

import io
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pytest
import pytz
from PIL import Image

from bom_radar.catalog import StaticSubjectCatalog
from bom_radar.config import RadarConfig
from bom_radar.context import AppContext
from bom_radar.exceptions import SourceUnavailable, StorageError, TransferError
from bom_radar.models import StoredObject, Subject
from bom_radar.uploaders.s3_uploader import ObjectStorage


def make_png(size: Tuple[int, int] = (8, 8), color=(0, 0, 0, 0), pixels=None) -> bytes:
    """RGBA PNG of a single colour, with optional {(x, y): colour} overrides."""
    image = Image.new("RGBA", size, color)
    for xy, pixel in (pixels or {}).items():
        image.putpixel(xy, pixel)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def make_jpg(size: Tuple[int, int] = (64, 48), color=(10, 20, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


class MemoryStorage(ObjectStorage):
    """Dict-backed ObjectStorage that records every call."""

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.puts: List[str] = []
        self.deletes: List[str] = []
        self.fail_delete: set = set()
        self.fail_put: set = set()

    def head(self, key):
        return key in self.objects

    def get(self, key):
        if key not in self.objects:
            raise StorageError(f"Failed to read {key}: NoSuchKey")
        return self.objects[key]

    def put(self, key, data, content_type):
        if key in self.fail_put:
            raise StorageError(f"Failed to upload {key}")
        self.puts.append(key)
        self.objects[key] = bytes(data)
        self.content_types[key] = content_type

    def delete(self, key):
        if key in self.fail_delete:
            raise StorageError(f"Failed to delete {key}")
        self.deletes.append(key)
        self.objects.pop(key, None)

    def list(self, prefix, delimiter="/"):
        result = []
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            if delimiter and delimiter in key[len(prefix):]:
                continue
            result.append(StoredObject(key=key, size=len(self.objects[key])))
        return result


class FakeSession:
    def __init__(self, source):
        self.source = source
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False


class FakeSource:
    """Stands in for BOMFtpSource with files held in a dict."""

    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files: Dict[str, bytes] = dict(files or {})
        self.fetches: Counter = Counter()
        self.list_calls: List[Tuple[str, str, str]] = []
        self.sessions: List[FakeSession] = []
        self.unavailable = False

    def open_session(self):
        if self.unavailable:
            raise SourceUnavailable("Failed to open FTP session to ftp.test: refused")
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    def list_frames(self, session, directory, id_prefix, extension):
        self.list_calls.append((directory, id_prefix, extension))
        paths = []
        for path in self.files:
            parent, _, name = path.rpartition("/")
            if parent == directory and name.startswith(id_prefix) and name.endswith(extension):
                paths.append(path)
        # Server order is not guaranteed
        return list(reversed(paths))

    def fetch_bytes(self, session, path):
        if path not in self.files:
            raise TransferError(f"Failed to download {path}: 550")
        self.fetches[path] += 1
        return self.files[path]


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self):
        return self.now


def utc(*args) -> datetime:
    return pytz.utc.localize(datetime(*args))


@pytest.fixture
def config():
    return RadarConfig(
        aws_access_key="key",
        aws_secret_key="secret",
        bucket_name="bucket",
        image_host="https://images.test",
        radar_subjects="IDR703:Perth",
        satellite_subjects="IDE00416:Australia",
        refresh_interval_seconds=900,
    )


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def source():
    return FakeSource()


@pytest.fixture
def clock():
    return FrozenClock(utc(2025, 4, 14, 7, 0, 30))


@pytest.fixture
def context(config, storage, source, clock):
    catalog = StaticSubjectCatalog(
        radar=[Subject("IDR703", "Perth")],
        satellite=[Subject("IDE00416", "Australia")],
    )
    return AppContext(config=config, storage=storage, source=source,
                      catalog=catalog, clock=clock)
