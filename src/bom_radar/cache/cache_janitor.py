# cache/cache_janitor.py
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional
from ..context import AppContext
from ..exceptions import StorageError
from ..models import JanitorReport
from ..utils import RADAR_FRAME_PATTERN, SATELLITE_FRAME_PATTERN, basename, extract_timestamp

@dataclass(frozen=True)
class RetentionRule:
    """A cache prefix and the naming pattern its generated entries follow"""
    prefix: str
    pattern: re.Pattern

class CacheJanitor:
    """Deletes cached frames whose embedded timestamp is older than the retention window.

    Only names matching a rule's pattern are considered. Anything else under the
    prefix (background layers, the legend, stray uploads) is never touched.
    """

    def __init__(self, context: AppContext, rules: Optional[List[RetentionRule]] = None,
                 retention: Optional[timedelta] = None):
        self.context = context
        self.storage = context.storage
        self.rules = rules if rules is not None else self.default_rules(context.config)
        self.retention = retention if retention is not None else context.config.retention
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def default_rules(config) -> List[RetentionRule]:
        return [
            RetentionRule(config.radar_cache_prefix, RADAR_FRAME_PATTERN),
            RetentionRule(config.satellite_cache_prefix, SATELLITE_FRAME_PATTERN),
        ]

    def is_expired(self, timestamp: datetime, now: datetime) -> bool:
        """Strictly older than the retention window; exactly at the boundary is kept"""
        return now - timestamp > self.retention

    def sweep_prefix(self, rule: RetentionRule) -> JanitorReport:
        """Sweep one prefix; listing failures raise, delete failures are counted"""
        report = JanitorReport()
        now = self.context.clock()

        for obj in self.storage.list(f"{rule.prefix}/", "/"):
            report.scanned += 1
            name = basename(obj.key)
            self.logger.debug(f"Checking item: {obj.key} ({obj.size} bytes, modified {obj.last_modified})")

            timestamp = extract_timestamp(name, rule.pattern)
            if timestamp is None:
                report.skipped += 1
                continue
            if not self.is_expired(timestamp, now):
                continue

            try:
                self.storage.delete(obj.key)
                report.deleted += 1
            except StorageError as e:
                self.logger.error(f"Error deleting {obj.key}: {e}")
                report.failed += 1

        self.logger.info(f"{rule.prefix}: {report}")
        return report

    def sweep(self) -> JanitorReport:
        report = JanitorReport()
        for rule in self.rules:
            report = report.merge(self.sweep_prefix(rule))
        return report
