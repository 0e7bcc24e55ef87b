# utils.py
import re
import logging
import posixpath
from datetime import datetime
from typing import Iterable, List, Optional
import pytz

from .models import RemoteFrame

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M"

# Frame timestamps are fixed-width and zero padded, so for frames of a single
# subject lexicographic order of the path is chronological order.
RADAR_FRAME_PATTERN = re.compile(r"^IDR\d{3}\.T\.(?P<timestamp>\d{12})\.png$")
SATELLITE_FRAME_PATTERN = re.compile(r"^IDE\d{5}\.(?P<timestamp>\d{12})\.jpg$")

def get_current_utc_time() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(pytz.utc)

def generation_key(now: datetime) -> str:
    """Minute-granularity key used to deduplicate generated gifs"""
    return now.astimezone(pytz.utc).strftime(TIMESTAMP_FORMAT)

def basename(path: str) -> str:
    return posixpath.basename(path)

def extract_timestamp(name: str, pattern: re.Pattern) -> Optional[datetime]:
    """Extract the UTC timestamp embedded in a frame basename"""
    match = pattern.match(name)
    if match is None:
        return None
    try:
        naive = datetime.strptime(match.group("timestamp"), TIMESTAMP_FORMAT)
    except ValueError:
        logger.warning(f"Unparseable timestamp in {name}")
        return None
    return pytz.utc.localize(naive)

def select_recent_frames(paths: Iterable[str], pattern: re.Pattern, count: int) -> List[RemoteFrame]:
    """Validate listed paths and return the newest `count` frames, oldest first"""
    frames = []
    for path in sorted(paths):
        name = basename(path)
        timestamp = extract_timestamp(name, pattern)
        if timestamp is None:
            logger.warning(f"Ignoring non-conforming frame name: {path}")
            continue
        frames.append(RemoteFrame(path=path, basename=name, timestamp=timestamp))
    if count <= 0:
        return []
    return frames[-count:]

def base_composite_path(subject_id: str) -> str:
    return f"{subject_id}.base.png"

def artifact_path(prefix: str, subject_id: str, key: str, kind: str) -> str:
    return f"{prefix}/{subject_id}.{key}.{kind}.gif"
