from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from collections.abc import Iterable

XYZ = tuple[int, int, int]


class Vec3i(NamedTuple):
    x: int = 0
    y: int = 0
    z: int = 0

    def __add__(self, other: XYZ) -> Vec3i:  # type: ignore[override]
        return Vec3i(self.x + other[0], self.y + other[1], self.z + other[2])

    def __sub__(self, other: XYZ) -> Vec3i:
        return Vec3i(self.x - other[0], self.y - other[1], self.z - other[2])

    def __abs__(self) -> Vec3i:
        return Vec3i(abs(self.x), abs(self.y), abs(self.z))

    def min(self, other: XYZ) -> Vec3i:
        return Vec3i(min(self.x, other[0]), min(self.y, other[1]), min(self.z, other[2]))

    def max(self, other: XYZ) -> Vec3i:
        return Vec3i(max(self.x, other[0]), max(self.y, other[1]), max(self.z, other[2]))

    @property
    def volume(self) -> int:
        return abs(self.x * self.y * self.z)


def normalize(position: Vec3i, size: Vec3i) -> Vec3i:
    """Minimum corner of a region whose size may be negative along any axis."""
    return Vec3i(*(p + (s + 1 if s < 0 else 0) for p, s in zip(position, size)))


class Bounds(NamedTuple):
    """Axis-aligned box. Indexing helpers take coordinates relative to ``min_corner``."""

    min_corner: Vec3i
    size: Vec3i

    @property
    def max_corner(self) -> Vec3i:
        """Exclusive upper corner."""
        return self.min_corner + self.size

    @property
    def volume(self) -> int:
        return self.size.volume

    def contains(self, coords: XYZ) -> bool:
        return all(0 <= c < s for c, s in zip(coords, self.size))

    def contains_point(self, point: tuple[float, float, float]) -> bool:
        return all(0 <= c < s for c, s in zip(point, self.size))

    def linear_index(self, coords: XYZ) -> int:
        x, y, z = coords
        return (y * self.size.z + z) * self.size.x + x

    def local_coords(self, index: int) -> Vec3i:
        x = index % self.size.x
        z = (index // self.size.x) % self.size.z
        y = index // (self.size.x * self.size.z)
        return Vec3i(x, y, z)


def union(boxes: Iterable[Bounds]) -> Bounds:
    boxes = iter(boxes)
    try:
        first = next(boxes)
    except StopIteration:
        raise ValueError("Cannot compute the union of zero boxes.")

    start, end = first.min_corner, first.max_corner
    for box in boxes:
        start = start.min(box.min_corner)
        end = end.max(box.max_corner)
    return Bounds(start, end - start)
