"""Power and heart rate training zone tables."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..utils import round_half_away


# Upper bound for the open-ended neuromuscular zone
MAX_ZONE_WATTS = 65535

POWER_ZONE_NAMES: Dict[int, str] = {
    1: "Active Recovery",
    2: "Endurance",
    3: "Tempo",
    4: "Threshold",
    5: "VO2max",
    6: "Anaerobic",
    7: "Neuromuscular",
}

HR_ZONE_NAMES: Dict[int, str] = {
    1: "Recovery",
    2: "Aerobic",
    3: "Tempo",
    4: "Threshold",
    5: "Maximum",
}


@dataclass
class ZoneRange:
    """One power zone with its %FTP and watt boundaries."""

    zone: int
    min_percent: int
    max_percent: int
    min_watts: int
    max_watts: int
    name: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "zone": self.zone,
            "name": self.name,
            "min_percent": self.min_percent,
            "max_percent": self.max_percent,
            "min_watts": self.min_watts,
            "max_watts": self.max_watts,
        }


@dataclass
class HRZoneRange:
    """One heart rate zone in bpm."""

    zone: int
    min_bpm: int
    max_bpm: int
    name: str

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "zone": self.zone,
            "name": self.name,
            "min_bpm": self.min_bpm,
            "max_bpm": self.max_bpm,
        }


@dataclass
class PowerZones:
    """
    Power training zones based on FTP (Functional Threshold Power).

    Uses the classic 7-zone Coggan model:
    - Zone 1: Active Recovery (<=55% FTP)
    - Zone 2: Endurance (56-75% FTP)
    - Zone 3: Tempo (76-90% FTP)
    - Zone 4: Threshold (91-105% FTP)
    - Zone 5: VO2max (106-120% FTP)
    - Zone 6: Anaerobic (121-150% FTP)
    - Zone 7: Neuromuscular (>150% FTP)
    """

    ftp: int
    zones: List[ZoneRange] = field(default_factory=list)
    custom: bool = False

    def __post_init__(self):
        """Calculate zones from FTP if not provided."""
        if not self.zones:
            self.zones = _coggan_zones(self.ftp)

    @classmethod
    def from_ftp(cls, ftp: int) -> "PowerZones":
        return cls(ftp=ftp)

    def get_zone(self, power: int) -> int:
        """Return zone number (1-7) for a given power value."""
        for zone in self.zones[:-1]:
            if power <= zone.max_watts:
                return zone.zone
        return 7

    def get_zone_range(self, zone: int) -> Optional[ZoneRange]:
        """Get zone range by number (1-7), or None if out of range."""
        if 1 <= zone <= len(self.zones):
            return self.zones[zone - 1]
        return None

    def all_zones(self) -> List[ZoneRange]:
        return list(self.zones)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "ftp": self.ftp,
            "custom": self.custom,
            "zones": [z.to_dict() for z in self.zones],
        }


def _coggan_zones(ftp: int) -> List[ZoneRange]:
    def watts(percent: int) -> int:
        return round_half_away(ftp * percent / 100)

    # (min %, max %) per zone; zone 7 is open-ended
    bounds = [(0, 55), (56, 75), (76, 90), (91, 105), (106, 120), (121, 150)]
    zones = [
        ZoneRange(
            zone=i,
            min_percent=lo,
            max_percent=hi,
            min_watts=watts(lo),
            max_watts=watts(hi),
            name=POWER_ZONE_NAMES[i],
        )
        for i, (lo, hi) in enumerate(bounds, 1)
    ]
    zones.append(
        ZoneRange(
            zone=7,
            min_percent=151,
            max_percent=255,
            min_watts=watts(151),
            max_watts=MAX_ZONE_WATTS,
            name=POWER_ZONE_NAMES[7],
        )
    )
    return zones


@dataclass
class HRZones:
    """
    Heart rate zones using the Karvonen (Heart Rate Reserve) method.

    Zone boundaries (% of HRR above resting):
    - Zone 1: 50-60% - Recovery
    - Zone 2: 60-70% - Aerobic
    - Zone 3: 70-80% - Tempo
    - Zone 4: 80-90% - Threshold
    - Zone 5: 90-100% - Maximum
    """

    max_hr: int
    resting_hr: int
    zones: List[HRZoneRange] = field(default_factory=list)

    def __post_init__(self):
        if not self.zones:
            self.zones = _karvonen_zones(self.max_hr, self.resting_hr)

    @classmethod
    def from_hr(cls, max_hr: int, resting_hr: int) -> "HRZones":
        return cls(max_hr=max_hr, resting_hr=resting_hr)

    def get_zone(self, hr: int) -> int:
        """
        Return zone number (1-5) for a given heart rate.

        Returns:
            Zone number (1-5), or 0 if below zone 1
        """
        if hr < self.zones[0].min_bpm:
            return 0
        for zone in self.zones[:-1]:
            if hr <= zone.max_bpm:
                return zone.zone
        return 5

    def get_zone_range(self, zone: int) -> Optional[HRZoneRange]:
        if 1 <= zone <= len(self.zones):
            return self.zones[zone - 1]
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "max_hr": self.max_hr,
            "resting_hr": self.resting_hr,
            "zones": [z.to_dict() for z in self.zones],
        }


def _karvonen_zones(max_hr: int, resting_hr: int) -> List[HRZoneRange]:
    hr_reserve = max(max_hr - resting_hr, 0)

    def zone_hr(pct: float) -> int:
        return round_half_away(resting_hr + hr_reserve * pct)

    return [
        HRZoneRange(1, zone_hr(0.50), zone_hr(0.60), HR_ZONE_NAMES[1]),
        HRZoneRange(2, zone_hr(0.60), zone_hr(0.70), HR_ZONE_NAMES[2]),
        HRZoneRange(3, zone_hr(0.70), zone_hr(0.80), HR_ZONE_NAMES[3]),
        HRZoneRange(4, zone_hr(0.80), zone_hr(0.90), HR_ZONE_NAMES[4]),
        HRZoneRange(5, zone_hr(0.90), max_hr, HR_ZONE_NAMES[5]),
    ]
