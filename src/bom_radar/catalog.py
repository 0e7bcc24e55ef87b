# catalog.py
from abc import ABC, abstractmethod
from typing import List, Optional
from .models import Subject

class SubjectCatalog(ABC):
    """Lookup of the radar and satellite products to maintain"""

    @abstractmethod
    def list_radar_subjects(self) -> List[Subject]:
        pass

    @abstractmethod
    def list_satellite_subjects(self) -> List[Subject]:
        pass

    def name_for(self, subject_id: str) -> Optional[str]:
        for subject in self.list_radar_subjects() + self.list_satellite_subjects():
            if subject.id == subject_id:
                return subject.name
        return None

def parse_subjects(value: str) -> List[Subject]:
    """Parse ``"IDR703:Perth,IDR702:Wollongong"`` into subjects.

    An entry without a name uses its id as the name. Blank entries are ignored.
    """
    subjects = []
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        subject_id, _, name = entry.partition(":")
        subject_id = subject_id.strip()
        subjects.append(Subject(id=subject_id, name=name.strip() or subject_id))
    return subjects

class StaticSubjectCatalog(SubjectCatalog):
    """Catalog backed by fixed lists, usually from configuration"""

    def __init__(self, radar: List[Subject], satellite: List[Subject]):
        self._radar = list(radar)
        self._satellite = list(satellite)

    @classmethod
    def from_config(cls, config) -> "StaticSubjectCatalog":
        return cls(parse_subjects(config.radar_subjects),
                   parse_subjects(config.satellite_subjects))

    def list_radar_subjects(self) -> List[Subject]:
        return list(self._radar)

    def list_satellite_subjects(self) -> List[Subject]:
        return list(self._satellite)
