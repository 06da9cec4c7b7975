"""
Movie Categories
The fixed set of dashboard listings and the trending time periods
"""
from enum import Enum
from typing import Optional

from ..core.errors import ConfigurationError


class TimePeriod(Enum):
    DAY = "day"
    WEEK = "week"

    @classmethod
    def parse(cls, value) -> "TimePeriod":
        """Accept a TimePeriod or its string value; anything else is a configuration error"""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for period in cls:
            if period.value == text:
                return period
        raise ConfigurationError(
            f"Invalid trending time period {value!r}; expected 'day' or 'week'."
        )


class Category(Enum):
    """Dashboard listing buckets, in display order"""
    NOW_PLAYING = "now_playing"
    TOP_RATED = "top_rated"
    UPCOMING = "upcoming"
    TRENDING_DAY = "trending_day"
    TRENDING_WEEK = "trending_week"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_trending(self) -> bool:
        return self in (Category.TRENDING_DAY, Category.TRENDING_WEEK)

    @property
    def default_period(self) -> Optional[TimePeriod]:
        if self is Category.TRENDING_DAY:
            return TimePeriod.DAY
        if self is Category.TRENDING_WEEK:
            return TimePeriod.WEEK
        return None

    @classmethod
    def from_key(cls, key: str) -> "Category":
        """Resolve a category from its value or name, e.g. 'top_rated' or 'top-rated'"""
        text = str(key or "").strip().lower().replace("-", "_")
        for category in cls:
            if category.value == text:
                return category
        raise KeyError(key)


_LABELS = {
    Category.NOW_PLAYING: "Now in Cinemas",
    Category.TOP_RATED: "Top rated",
    Category.UPCOMING: "Upcoming",
    Category.TRENDING_DAY: "Trending by day",
    Category.TRENDING_WEEK: "Trending by week",
}
