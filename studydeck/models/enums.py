"""
Model enums.
"""
from enum import Enum


class SortOption(str, Enum):
    """Sort orders offered by the card list."""
    NEWEST = "newest"
    OLDEST = "oldest"
    CATEGORY = "category"
    MASTERY = "mastery"


class ViewMode(str, Enum):
    """Top-level view of the study UI."""
    ALL = "all"
    STUDY = "study"


class MasteryStatus(str, Enum):
    """Display status derived from a mastery level."""
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    MASTERED = "Mastered"
