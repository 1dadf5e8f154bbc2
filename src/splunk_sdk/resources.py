"""Concrete Splunk resources.

Each resource class fixes its collection and exposes the fields it
cares about as typed properties. Property reads go through
:meth:`Entity.get_value`, so they require a fetched record.
"""

from enum import Enum
from typing import Optional

from .converters import EnumConverter, boolean, floating, integer, string
from .entity import Entity, Record
from .models.namespace import Namespace, ResourceName


class DispatchState(str, Enum):
    """Lifecycle states of a search job."""

    QUEUED = "QUEUED"
    PARSING = "PARSING"
    RUNNING = "RUNNING"
    PAUSED = "PAUSED"
    FINALIZING = "FINALIZING"
    FAILED = "FAILED"
    DONE = "DONE"


class Job(Entity):
    """A search job under ``search/jobs``.

    Jobs are named by their search id (``sid``), not by their title.
    """

    COLLECTION = ResourceName.of("search", "jobs")

    _dispatch_state = EnumConverter(DispatchState)

    def __init__(self, context, namespace: Namespace, sid: str):
        super().__init__(context, namespace, self.COLLECTION, sid)

    def resolve_title(self, record: Record) -> Optional[str]:
        return record.get("sid")

    @property
    def sid(self) -> str:
        return self.title

    @property
    def dispatch_state(self) -> Optional[DispatchState]:
        return self.get_value("dispatchState", self._dispatch_state)

    @property
    def is_done(self) -> bool:
        return self.get_value("isDone", boolean)

    @property
    def is_failed(self) -> bool:
        return self.get_value("isFailed", boolean)

    @property
    def event_count(self) -> int:
        return self.get_value("eventCount", integer)

    @property
    def result_count(self) -> int:
        return self.get_value("resultCount", integer)

    @property
    def run_duration(self) -> float:
        """Seconds the job has run."""
        return self.get_value("runDuration", floating)


class SavedSearch(Entity):
    """A saved search under ``saved/searches``."""

    COLLECTION = ResourceName.of("saved", "searches")

    def __init__(self, context, namespace: Namespace, name: str):
        super().__init__(context, namespace, self.COLLECTION, name)

    @property
    def search(self) -> Optional[str]:
        return self.get_value("search", string)

    @property
    def is_scheduled(self) -> bool:
        return self.get_value("is_scheduled", boolean)

    @property
    def is_disabled(self) -> bool:
        return self.get_value("disabled", boolean)

    @property
    def cron_schedule(self) -> Optional[str]:
        return self.get_value("cron_schedule", string)
