# seatview/scene/venue.py

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
import numpy as np
from seatview.core.errors import InvalidCommandTarget
from seatview.core.logging import get_logger

logger = get_logger()


@dataclass(eq=False)
class VenueObject:
    """
    A touchable scene target: a seat, or a piece of a section.
    The engine only needs a position and a section label.
    """
    name: str
    position: np.ndarray
    section: Optional[str] = None
    is_seat: bool = False
    available: bool = True
    price: float = 0.0

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float32)


@dataclass(eq=False)
class SectionView:
    """Camera target used when zooming into a section."""
    section_id: str
    position: np.ndarray
    size: float
    rotation: float  # degrees about the view axis

    def __post_init__(self):
        self.position = np.array(self.position, dtype=np.float32)
        self.size = float(self.size)
        self.rotation = float(self.rotation)


@dataclass(eq=False)
class Venue:
    """
    Seats and sections of a venue plus the point seat views face.
    """
    center: np.ndarray
    sections: Dict[str, SectionView] = field(default_factory=dict)
    objects: List[VenueObject] = field(default_factory=list)
    seat_refs: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.center = np.array(self.center, dtype=np.float32)
        self._by_section: Dict[str, List[VenueObject]] = {}
        self._by_name: Dict[str, VenueObject] = {}
        self.categorize()

    @classmethod
    def from_config(cls, navigation: dict, commands: dict, center, objects: Iterable[VenueObject] = ()) -> 'Venue':
        """Build a venue from the 'navigation' and 'commands' config sections."""
        sections = {
            section_id: SectionView(section_id, entry['position'], entry['size'], entry['rotation'])
            for section_id, entry in navigation.get('sections', {}).items()
        }
        return cls(
            center=center,
            sections=sections,
            objects=list(objects),
            seat_refs=dict(commands.get('seat_refs', {})),
        )

    def categorize(self):
        """Group objects by their section label."""
        self._by_section = {section_id: [] for section_id in self.sections}
        self._by_name = {}

        for obj in self.objects:
            self._by_name[obj.name] = obj
            if obj.section is None:
                continue
            if obj.section not in self._by_section:
                logger.warning(f"Object '{obj.name}' is labelled with unknown section '{obj.section}'")
                continue
            self._by_section[obj.section].append(obj)

        counts = ", ".join(f"{section_id}: {len(objs)}" for section_id, objs in self._by_section.items())
        logger.debug(f"Categorized objects - {counts}")

    def add_object(self, obj: VenueObject):
        self.objects.append(obj)
        self.categorize()

    def objects_in(self, section_id: str) -> List[VenueObject]:
        return list(self._by_section.get(section_id, []))

    def get_object_section(self, obj: VenueObject) -> Optional[str]:
        """Section a touched object belongs to, or None."""
        for section_id, objs in self._by_section.items():
            if obj in objs:
                return section_id
        return None

    def get_section(self, section_id: str) -> SectionView:
        try:
            return self.sections[section_id]
        except KeyError:
            raise InvalidCommandTarget("Unknown section", key=section_id, kind="section") from None

    def get_object(self, name: str) -> VenueObject:
        try:
            return self._by_name[name]
        except KeyError:
            raise InvalidCommandTarget("Unknown venue object", key=name, kind="object") from None

    def resolve_seat_ref(self, ref: str) -> VenueObject:
        """Resolve a deep-link seat key (premium, standard, back) to a seat."""
        if ref not in self.seat_refs:
            raise InvalidCommandTarget("Unknown seat reference", key=ref, kind="seat")

        seat = self._by_name.get(self.seat_refs[ref])
        if seat is None or not seat.is_seat:
            raise InvalidCommandTarget("Seat reference does not resolve to a seat", key=ref, kind="seat")
        return seat

    def set_section_zoom_position(self, section_id: str, position):
        """Adjust where the camera goes for a section at runtime."""
        self.get_section(section_id).position = np.array(position, dtype=np.float32)

    def set_section_rotation(self, section_id: str, rotation: float):
        """Adjust a section's view rotation at runtime."""
        self.get_section(section_id).rotation = float(rotation)
