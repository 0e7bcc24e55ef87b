# context.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable
from .catalog import StaticSubjectCatalog, SubjectCatalog
from .config import RadarConfig
from .downloaders.ftp_downloader import BOMFtpSource
from .uploaders.s3_uploader import ObjectStorage, S3Storage
from .utils import get_current_utc_time

@dataclass
class AppContext:
    """Handles shared by every component; passed in explicitly"""
    config: RadarConfig
    storage: ObjectStorage
    source: BOMFtpSource
    catalog: SubjectCatalog
    clock: Callable[[], datetime] = field(default=get_current_utc_time)

def build_context(config: RadarConfig) -> AppContext:
    """Wire up the production S3 storage, FTP source and static catalog"""
    config.validate()
    return AppContext(
        config=config,
        storage=S3Storage(config),
        source=BOMFtpSource(config),
        catalog=StaticSubjectCatalog.from_config(config),
    )
