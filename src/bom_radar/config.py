# config.py
from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
import os
from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()

@dataclass
class RadarConfig:
    """Configuration for the radar and satellite imagery system"""
    # BOM FTP source
    ftp_host: str = os.getenv('FTP_HOST', 'ftp.bom.gov.au')
    ftp_port: int = int(os.getenv('FTP_PORT', '21'))
    radar_background_path: str = "/anon/gen/radar_transparencies"
    radar_data_path: str = "/anon/gen/radar"
    satellite_data_path: str = "/anon/gen/gms"

    # Cache prefixes
    radar_cache_prefix: str = "radar_cache"
    satellite_cache_prefix: str = "satellite_cache"
    artifact_prefix: str = "external"

    # Processing
    radar_frame_count: int = 7
    radar_frame_duration_ms: int = 350
    satellite_frame_count: int = 30
    satellite_frame_duration_ms: int = 215
    satellite_size: int = 300
    jpeg_quality: int = 75
    jpeg_subsampling: str = "4:2:2"
    retention_hours: int = 24

    # Scheduling
    refresh_interval_seconds: int = int(os.getenv('REFRESH_INTERVAL_SECONDS', '900'))

    # Subjects ("ID:Name,ID:Name")
    radar_subjects: str = os.getenv('RADAR_SUBJECTS', 'IDR703:Perth')
    satellite_subjects: str = os.getenv('SATELLITE_SUBJECTS', 'IDE00416:Australia')

    # AWS S3
    aws_access_key: str = os.getenv('AWS_ACCESS_KEY', '')
    aws_secret_key: str = os.getenv('AWS_SECRET_KEY', '')
    bucket_name: str = os.getenv('AWS_BUCKET_NAME', '')
    region_name: str = os.getenv('AWS_REGION', 'auto')
    endpoint_url: Optional[str] = os.getenv('AWS_ENDPOINT_URL') or None
    image_host: str = os.getenv('IMAGE_HOST', '')

    # WillyWeather forecast API
    willyweather_api_key: str = os.getenv('WILLYWEATHER_API_KEY', '')

    log_file: str = os.getenv('LOG_FILE', 'bom_radar.log')

    @property
    def retention(self) -> timedelta:
        return timedelta(hours=self.retention_hours)

    def missing_fields(self) -> List[str]:
        """Names of required settings that are empty"""
        required_fields = ['aws_access_key', 'aws_secret_key', 'bucket_name', 'image_host']
        return [field for field in required_fields if not getattr(self, field)]

    def validate(self) -> None:
        """Validate configuration before starting"""
        missing = self.missing_fields()
        if missing:
            raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    def public_url(self, path: str) -> str:
        return f"{self.image_host.rstrip('/')}/{path}"
