"""
Rectangle in document space.
"""

from typing import Optional

from attrs import define, field


@define(frozen=True)
class Rect:
    """
    Integer rectangle given by its top-left corner and size.

    Empty rectangles (zero or negative extent) are ignored by
    :py:meth:`united`, so that folding a sequence of rectangles starting from
    :py:meth:`Rect.empty` gives the union of the non-empty ones.
    """

    x: int = field(default=0, converter=int)
    y: int = field(default=0, converter=int)
    width: int = field(default=0, converter=int)
    height: int = field(default=0, converter=int)

    @classmethod
    def empty(cls) -> "Rect":
        return cls(0, 0, 0, 0)

    @classmethod
    def from_bbox(cls, bbox: tuple[int, int, int, int]) -> "Rect":
        """Create from (left, top, right, bottom) tuple."""
        left, top, right, bottom = bbox
        return cls(left, top, right - left, bottom - top)

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def bbox(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple."""
        return self.left, self.top, self.right, self.bottom

    @property
    def size(self) -> tuple[int, int]:
        """(width, height) tuple."""
        return self.width, self.height

    @property
    def top_left(self) -> tuple[int, int]:
        return self.x, self.y

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def united(self, other: Optional["Rect"]) -> "Rect":
        """Smallest rectangle containing both rectangles."""
        if other is None or other.is_empty():
            return self
        if self.is_empty():
            return other
        return Rect.from_bbox(
            (
                min(self.left, other.left),
                min(self.top, other.top),
                max(self.right, other.right),
                max(self.bottom, other.bottom),
            )
        )

    def intersected(self, other: "Rect") -> "Rect":
        """Overlapping area, or the empty rectangle."""
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if left >= right or top >= bottom:
            return Rect.empty()
        return Rect.from_bbox((left, top, right, bottom))

    def translated(self, dx: int, dy: int) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }
