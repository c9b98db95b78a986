from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple, Union

LngLat = Tuple[float, float]  # (lon, lat), the order Mapbox expects


@dataclass(frozen=True)
class Bearing:
    """
    Restricts the compass direction a route may leave/enter a waypoint from.
    heading: degrees clockwise from true north (0..360)
    tolerance: accepted deviation either side of heading, in degrees
    """
    heading: float
    tolerance: float

    def __str__(self) -> str:
        return f"{self.heading:.15g},{self.tolerance:.15g}"


class Approach(str, Enum):
    UNRESTRICTED = "unrestricted"
    CURB = "curb"


BearingLike = Union[Bearing, Tuple[float, float]]
BearingsArg = Union[str, Sequence[Optional[BearingLike]], None]
ApproachesArg = Union[str, Sequence[Optional[Approach]], None]


def format_lnglat(coord: LngLat) -> str:
    lon, lat = coord
    return f"{lon},{lat}"


def format_waypoints(coords: Sequence[LngLat]) -> str:
    return ";".join(format_lnglat(c) for c in coords)


def _check_slot_count(count: int, waypoint_count: int, name: str) -> None:
    if count != waypoint_count:
        raise ValueError(f"{name} needs one entry per waypoint: got {count}, expected {waypoint_count}")


def _join_slots(slots: Sequence[Optional[str]], waypoint_count: int, name: str) -> str:
    _check_slot_count(len(slots), waypoint_count, name)
    # an empty slot still keeps its ';' so indices line up
    return ";".join("" if s is None else s for s in slots)


def to_bearing(value: Optional[BearingLike]) -> Optional[Bearing]:
    if value is None or isinstance(value, Bearing):
        return value
    if isinstance(value, (tuple, list)) and len(value) == 2:
        return Bearing(*value)
    raise TypeError(f"bearing must be a Bearing or a (heading, tolerance) pair, got {value!r}")


def format_bearings(bearings: Sequence[Optional[BearingLike]], waypoint_count: int = 2) -> str:
    slots = [to_bearing(b) for b in bearings]
    return _join_slots([None if b is None else str(b) for b in slots], waypoint_count, "bearings")


def format_approaches(approaches: Sequence[Optional[Approach]], waypoint_count: int = 2) -> str:
    return _join_slots(
        [None if a is None else Approach(a).value for a in approaches],
        waypoint_count,
        "approaches",
    )


def _normalize(value: Union[str, Sequence, None],
               waypoint_count: int,
               name: str,
               formatter: Callable[[Sequence, int], str]) -> Optional[str]:
    if not value:
        return None

    if isinstance(value, str):
        _check_slot_count(len(value.split(";")), waypoint_count, name)
        return value

    _check_slot_count(len(value), waypoint_count, name)
    if all(v is None for v in value):
        return None
    return formatter(value, waypoint_count)


def normalize_bearings(value: BearingsArg, waypoint_count: int = 2) -> Optional[str]:
    """
    Returns the ';'-delimited bearings value, or None when the parameter
    must be left out of the request entirely.
    """
    return _normalize(value, waypoint_count, "bearings", format_bearings)


def normalize_approaches(value: ApproachesArg, waypoint_count: int = 2) -> Optional[str]:
    return _normalize(value, waypoint_count, "approaches", format_approaches)
