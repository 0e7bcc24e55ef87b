# processors/background_composer.py
import logging
from ..cache.cache_gateway import CacheGateway, radar_policy
from ..context import AppContext
from ..utils import base_composite_path
from .image_processor import encode_png, overlay

class BackgroundComposer:
    """Builds the static per-radar base image that radar frames are drawn over"""

    # Drawn in this order, later layers on top
    LAYER_TYPES = ("background", "topography", "locations", "range")
    LEGEND_FILE = "IDR.legend.0.png"

    def __init__(self, context: AppContext, gateway: CacheGateway):
        self.context = context
        self.config = context.config
        self.gateway = gateway
        self.logger = logging.getLogger(__name__)

    def layer_paths(self, subject_id: str):
        return [f"{self.config.radar_background_path}/{subject_id}.{layer}.png"
                for layer in self.LAYER_TYPES]

    def legend_path(self) -> str:
        return f"{self.config.radar_background_path}/{self.LEGEND_FILE}"

    def generate_for(self, subject_id: str) -> bytes:
        """Regenerate and upload ``{subject_id}.base.png``; returns the PNG bytes"""
        self.logger.info(f"Generating background for {subject_id}")
        policy = radar_policy(self.config)

        with self.context.source.open_session() as session:
            layers = [self.gateway.get_or_fetch_image(session, path, policy)
                      for path in self.layer_paths(subject_id)]
            # The rain legend is the base image
            legend = self.gateway.get_or_fetch_image(session, self.legend_path(), policy)

        base = legend.convert("RGBA")
        for layer in layers:
            overlay(base, layer)

        data = encode_png(base)
        self.context.storage.put(base_composite_path(subject_id), data, "image/png")
        return data
