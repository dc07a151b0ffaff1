"""Terminal presentation of duplicate groups."""

from media_sorter.ui.review import ReviewUI

__all__ = ["ReviewUI"]
