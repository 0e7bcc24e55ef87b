# processors/timelapse_assembler.py
import ftplib
import re
import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from PIL import Image
from ..cache.cache_gateway import CacheGateway, radar_policy, satellite_policy
from ..context import AppContext
from ..exceptions import NoFramesError
from ..models import CachePolicy, RemoteFrame, TimelapseArtifact
from ..utils import (RADAR_FRAME_PATTERN, SATELLITE_FRAME_PATTERN, artifact_path,
                     base_composite_path, generation_key, select_recent_frames)
from .image_processor import GifPreset, decode_image, encode_gif, overlay

class TimelapseAssembler(ABC):
    """Turns the newest frames for a subject into an uploaded gif.

    Gifs are keyed by subject and the current UTC minute. If a gif for this
    minute already exists it is returned as is, without listing the source.
    """

    kind: str = ""
    extension: str = ""
    frame_pattern: Optional[re.Pattern] = None
    preset: GifPreset = GifPreset.QUALITY

    def __init__(self, context: AppContext, gateway: CacheGateway):
        self.context = context
        self.config = context.config
        self.storage = context.storage
        self.source = context.source
        self.gateway = gateway
        self.logger = logging.getLogger(__name__)

    @property
    @abstractmethod
    def source_directory(self) -> str:
        pass

    @property
    @abstractmethod
    def frame_count(self) -> int:
        pass

    @property
    @abstractmethod
    def frame_duration_ms(self) -> int:
        pass

    @property
    @abstractmethod
    def policy(self) -> CachePolicy:
        pass

    @abstractmethod
    def render_frames(self, session: ftplib.FTP, subject_id: str,
                      frames: List[RemoteFrame]) -> List[Image.Image]:
        pass

    def list_frames(self, session: ftplib.FTP, subject_id: str) -> List[str]:
        return self.source.list_frames(session, self.source_directory, subject_id, self.extension)

    def refresh_frames(self, subject_id: str) -> int:
        """Make sure every listed frame for the subject is cached; returns the number downloaded"""
        downloaded = 0
        with self.source.open_session() as session:
            for path in sorted(self.list_frames(session, subject_id)):
                if self.gateway.ensure_cached(session, path, self.policy):
                    downloaded += 1
        self.logger.info(f"Refreshed {self.kind} frames for {subject_id}: {downloaded} new")
        return downloaded

    def generate(self, subject_id: str) -> TimelapseArtifact:
        key = generation_key(self.context.clock())
        path = artifact_path(self.config.artifact_prefix, subject_id, key, self.kind)
        url = self.config.public_url(path)

        if self.storage.head(path):
            self.logger.info(f"Reusing {path}")
            return TimelapseArtifact(subject_id=subject_id, generation_key=key, path=path,
                                     url=url, data=self.storage.get(path), reused=True)

        with self.source.open_session() as session:
            frames = select_recent_frames(self.list_frames(session, subject_id),
                                          self.frame_pattern, self.frame_count)
            if not frames:
                raise NoFramesError(f"No {self.kind} frames available for {subject_id}")

            self.logger.info(f"Generating {self.kind} gif for {subject_id} from {len(frames)} frames")
            images = self.render_frames(session, subject_id, frames)

        data = encode_gif(images, self.frame_duration_ms, self.preset)
        self.logger.info(f"Final {self.kind} gif size: {len(data)}")

        self.storage.put(path, data, "image/gif")
        return TimelapseArtifact(subject_id=subject_id, generation_key=key, path=path,
                                 url=url, data=data)

class RadarTimelapseAssembler(TimelapseAssembler):
    """Radar frames drawn over the subject's base composite"""

    kind = "radar"
    extension = ".png"
    frame_pattern = RADAR_FRAME_PATTERN
    # Runs on demand, so spend time on palette quality
    preset = GifPreset.QUALITY

    @property
    def source_directory(self) -> str:
        return self.config.radar_data_path

    @property
    def frame_count(self) -> int:
        return self.config.radar_frame_count

    @property
    def frame_duration_ms(self) -> int:
        return self.config.radar_frame_duration_ms

    @property
    def policy(self) -> CachePolicy:
        return radar_policy(self.config)

    def render_frames(self, session, subject_id, frames):
        base = decode_image(self.storage.get(base_composite_path(subject_id))).convert("RGBA")

        images = []
        for frame in frames:
            image = self.gateway.get_or_fetch_image(session, frame.path, self.policy)
            composite = base.copy()
            overlay(composite, image)
            images.append(composite)
        return images

class SatelliteTimelapseAssembler(TimelapseAssembler):
    """Pre-shrunk satellite frames, no background"""

    kind = "satellite"
    extension = ".jpg"
    frame_pattern = SATELLITE_FRAME_PATTERN
    # May run unattended every cycle
    preset = GifPreset.SPEED

    @property
    def source_directory(self) -> str:
        return self.config.satellite_data_path

    @property
    def frame_count(self) -> int:
        return self.config.satellite_frame_count

    @property
    def frame_duration_ms(self) -> int:
        return self.config.satellite_frame_duration_ms

    @property
    def policy(self) -> CachePolicy:
        return satellite_policy(self.config)

    def render_frames(self, session, subject_id, frames):
        return [self.gateway.get_or_fetch_image(session, frame.path, self.policy)
                for frame in frames]
