"""Data models for MISP search results."""

from misp_search.data.models import Attribute, Event, Org, RelatedEvent, parse_timestamp

__all__ = [
    "Attribute",
    "Event",
    "Org",
    "RelatedEvent",
    "parse_timestamp",
]
