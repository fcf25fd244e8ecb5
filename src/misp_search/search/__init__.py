from misp_search.search.base import Searcher
from misp_search.search.connection import (
    MispConnection,
    new_connection,
    new_insecure_connection,
    search,
    text_export,
)
from misp_search.search.response import (
    AttributeResponse,
    EmptyResponse,
    EventResponse,
    MispResponse,
)

__all__ = [
    "AttributeResponse",
    "EmptyResponse",
    "EventResponse",
    "MispConnection",
    "MispResponse",
    "Searcher",
    "new_connection",
    "new_insecure_connection",
    "search",
    "text_export",
]
