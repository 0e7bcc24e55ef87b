# service.py
import logging
import time
from typing import Callable
from .cache.cache_gateway import CacheGateway
from .cache.cache_janitor import CacheJanitor
from .context import AppContext
from .models import CycleReport, JanitorReport, TimelapseArtifact
from .processors.background_composer import BackgroundComposer
from .processors.timelapse_assembler import RadarTimelapseAssembler, SatelliteTimelapseAssembler

class BOMService:
    """Operations exposed to the scheduler and the command layer"""

    def __init__(self, context: AppContext):
        self.context = context
        self.logger = logging.getLogger(__name__)

        self.gateway = CacheGateway(context)
        self.composer = BackgroundComposer(context, self.gateway)
        self.radar = RadarTimelapseAssembler(context, self.gateway)
        self.satellite = SatelliteTimelapseAssembler(context, self.gateway)
        self.janitor = CacheJanitor(context)

    def generate_background(self, subject_id: str) -> bytes:
        return self.composer.generate_for(subject_id)

    def generate_radar_timelapse(self, subject_id: str) -> TimelapseArtifact:
        return self.radar.generate(subject_id)

    def generate_satellite_timelapse(self, subject_id: str) -> TimelapseArtifact:
        return self.satellite.generate(subject_id)

    def cleanup(self) -> JanitorReport:
        return self.janitor.sweep()

    def _run_unit(self, report: CycleReport, phase: str, subject: str, action: Callable) -> None:
        """Run one unit of work; any failure is logged and recorded, never raised"""
        try:
            action()
            report.succeeded += 1
        except Exception as e:
            self.logger.error(f"{phase} failed for {subject}: {e}", exc_info=True)
            report.failures.append(f"{phase} {subject}: {e}")

    def refresh_all(self) -> CycleReport:
        """Run one full cycle: backgrounds, frames, gifs, then cleanup.

        Each subject/phase pair and each janitor prefix is isolated from the
        others. Nothing is retried within a cycle.
        """
        start_time = time.time()
        report = CycleReport()
        catalog = self.context.catalog

        try:
            radar_subjects = catalog.list_radar_subjects()
        except Exception as e:
            self.logger.error(f"Could not list radar subjects: {e}")
            report.failures.append(f"catalog radar: {e}")
            radar_subjects = []

        try:
            satellite_subjects = catalog.list_satellite_subjects()
        except Exception as e:
            self.logger.error(f"Could not list satellite subjects: {e}")
            report.failures.append(f"catalog satellite: {e}")
            satellite_subjects = []

        for subject in radar_subjects:
            self.logger.info(f"Background refresh for {subject.name} ({subject.id})")
            self._run_unit(report, "background", subject.id,
                           lambda: self.composer.generate_for(subject.id))
            self._run_unit(report, "radar frames", subject.id,
                           lambda: self.radar.refresh_frames(subject.id))
            self._run_unit(report, "radar gif", subject.id,
                           lambda: self.radar.generate(subject.id))

        for subject in satellite_subjects:
            self.logger.info(f"Background refresh for {subject.name} ({subject.id})")
            self._run_unit(report, "satellite frames", subject.id,
                           lambda: self.satellite.refresh_frames(subject.id))
            self._run_unit(report, "satellite gif", subject.id,
                           lambda: self.satellite.generate(subject.id))

        for rule in self.janitor.rules:
            self._run_unit(report, "cleanup", rule.prefix,
                           lambda: self.janitor.sweep_prefix(rule))

        report.duration_ms = int((time.time() - start_time) * 1000)
        self.logger.info(str(report))
        return report
