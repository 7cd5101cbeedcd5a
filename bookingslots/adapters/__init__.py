"""
Adapters layer - External data sources for the availability service.
"""

from .json_store import JsonScheduleStore, ScheduleDocument

__all__ = ["JsonScheduleStore", "ScheduleDocument"]
