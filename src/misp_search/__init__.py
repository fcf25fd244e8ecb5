"""misp-search: async client for the MISP threat-intelligence search API."""

from misp_search.config import MispConfig, create_from_config, load_config
from misp_search.data import Attribute, Event, Org, RelatedEvent, parse_timestamp
from misp_search.errors import (
    MispDecodeError,
    MispError,
    MispRemoteError,
    UnknownProtocolError,
    UnknownQueryError,
)
from misp_search.query import AttributeQuery, EventQuery, MispQuery, MispRequest
from misp_search.search import (
    AttributeResponse,
    EmptyResponse,
    EventResponse,
    MispConnection,
    MispResponse,
    Searcher,
    new_connection,
    new_insecure_connection,
    search,
    text_export,
)

__all__ = [
    # Models
    "Attribute",
    "Event",
    "Org",
    "RelatedEvent",
    "parse_timestamp",
    # Queries
    "AttributeQuery",
    "EventQuery",
    "MispQuery",
    "MispRequest",
    # Responses
    "AttributeResponse",
    "EmptyResponse",
    "EventResponse",
    "MispResponse",
    # Connection
    "MispConnection",
    "Searcher",
    "new_connection",
    "new_insecure_connection",
    "search",
    "text_export",
    # Errors
    "MispDecodeError",
    "MispError",
    "MispRemoteError",
    "UnknownProtocolError",
    "UnknownQueryError",
    # Config
    "MispConfig",
    "create_from_config",
    "load_config",
]
