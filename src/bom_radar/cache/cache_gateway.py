# cache/cache_gateway.py
import ftplib
import logging
from PIL import Image
from ..context import AppContext
from ..models import CacheMode, CachePolicy
from ..processors.image_processor import compress_jpg, decode_image
from ..utils import basename

def radar_policy(config) -> CachePolicy:
    return CachePolicy(prefix=config.radar_cache_prefix, content_type="image/png")

def satellite_policy(config) -> CachePolicy:
    return CachePolicy(prefix=config.satellite_cache_prefix, content_type="image/jpeg",
                       mode=CacheMode.TRANSFORM)

class CacheGateway:
    """Cache-aside access to BOM frames backed by object storage.

    Every remote file is cached under ``{policy.prefix}/{basename}``. Remote
    files never change once published, so a cached entry is never refreshed.
    The head check before a fetch is advisory: two callers missing at once
    both download and the last upload wins with identical bytes.

    In ``CacheMode.TRANSFORM`` only the resized JPEG is stored; the original
    download is discarded.
    """

    def __init__(self, context: AppContext):
        self.context = context
        self.config = context.config
        self.storage = context.storage
        self.source = context.source
        self.logger = logging.getLogger(__name__)

    def cache_key(self, policy: CachePolicy, remote_path: str) -> str:
        return f"{policy.prefix}/{basename(remote_path)}"

    def _transform(self, raw: bytes) -> bytes:
        size = (self.config.satellite_size, self.config.satellite_size)
        return compress_jpg(decode_image(raw), size,
                            quality=self.config.jpeg_quality,
                            subsampling=self.config.jpeg_subsampling)

    def _download(self, session: ftplib.FTP, remote_path: str, policy: CachePolicy) -> bytes:
        raw = self.source.fetch_bytes(session, remote_path)
        if policy.mode is CacheMode.TRANSFORM:
            return self._transform(raw)
        return raw

    def get_or_fetch_image(self, session: ftplib.FTP, remote_path: str,
                           policy: CachePolicy) -> Image.Image:
        """Return the decoded (and for TRANSFORM, resized) frame, downloading it on a miss"""
        key = self.cache_key(policy, remote_path)

        if self.storage.head(key):
            self.logger.info(f"Already exists in cache: {key}")
            return decode_image(self.storage.get(key))

        data = self._download(session, remote_path, policy)
        # Decode before storing so undecodable bytes never enter the cache
        image = decode_image(data)
        self.storage.put(key, data, policy.content_type)
        return image

    def ensure_cached(self, session: ftplib.FTP, remote_path: str, policy: CachePolicy) -> bool:
        """Warm the cache for one file; returns True if it had to be downloaded"""
        key = self.cache_key(policy, remote_path)
        if self.storage.head(key):
            return False

        data = self._download(session, remote_path, policy)
        self.storage.put(key, data, policy.content_type)
        return True
