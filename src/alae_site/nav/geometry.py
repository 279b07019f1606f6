from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    """Element bounding box in viewport pixels."""

    left: float
    width: float
    top: float = 0.0
    height: float = 0.0


@dataclass(frozen=True, slots=True)
class Geometry:
    """Indicator placement relative to its containing row."""

    left: float
    width: float

    @property
    def is_valid(self) -> bool:
        return (
            math.isfinite(self.left)
            and math.isfinite(self.width)
            and self.width >= 0.0
        )


def relative_geometry(item: Rect | None, container: Rect | None) -> Geometry | None:
    """Geometry of ``item`` measured from the container's origin.

    Returns None when either box is missing or the result is unusable
    (detached or hidden elements report NaN or negative widths).
    """
    if item is None or container is None:
        return None
    geom = Geometry(left=item.left - container.left, width=item.width)
    if not geom.is_valid:
        return None
    return geom
