from misp_search.query.models import AttributeQuery, EventQuery, MispQuery, MispRequest

__all__ = [
    "AttributeQuery",
    "EventQuery",
    "MispQuery",
    "MispRequest",
]
