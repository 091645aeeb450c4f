"""Domain models shared by adapters, the coordinator, and the API."""

from searchbattle.models.outcome import LookupFailure, LookupOutcome, SearchEvent, Source
from searchbattle.models.query import SearchRequest
from searchbattle.models.record import Record

__all__ = ["LookupFailure", "LookupOutcome", "Record", "SearchEvent", "SearchRequest", "Source"]
