"""View modes of the page view."""

from enum import Enum


class ViewMode(Enum):
    SCROLL = "scroll"  # One flowing surface, no page frames
    CONTINUOUS = "continuous"  # Stacked sheets, one editable page
    PAGE = "page"  # Grid of page frames, optionally several per row

    def next(self) -> "ViewMode":
        """Cycle scroll -> continuous -> page -> scroll."""
        order = list(ViewMode)
        return order[(order.index(self) + 1) % len(order)]

    @property
    def paginated(self) -> bool:
        return self is not ViewMode.SCROLL
