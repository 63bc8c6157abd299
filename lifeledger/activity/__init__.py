"""Activity logging package."""

from lifeledger.activity.logger import ActivityLogger

__all__ = ["ActivityLogger"]
