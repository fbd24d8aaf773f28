from enum import IntEnum, Enum
from typing import Tuple


class Lane(IntEnum):
    NORTH = 0
    SOUTH = 1
    EAST = 2
    WEST = 3


class SignalAspect(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


ALL_LANES: Tuple[Lane, ...] = tuple(Lane)


def parse_lane(value) -> Lane:
    """
    Accepts a Lane, its name (any case) or its integer value.

    :raises ValueError: for anything else
    """
    if isinstance(value, Lane):
        return value
    if isinstance(value, str):
        try:
            return Lane[value.strip().upper()]
        except KeyError:
            pass
    elif isinstance(value, int) and not isinstance(value, bool):
        try:
            return Lane(value)
        except ValueError:
            pass
    names = ", ".join(l.name.lower() for l in Lane)
    raise ValueError(f"Invalid lane: {value!r}. Must be one of {names}.")
