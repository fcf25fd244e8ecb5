"""Search response envelopes and their iteration contract.

MISP wraps results differently per resource kind::

    events:      {"response": [{"Event": {...}}, ...]}
    attributes:  {"response": {"Attribute": [{...}, ...]}}

Both decode to a response object that yields domain records lazily, once,
in the order the server returned them.
"""

import json
from collections.abc import Iterator
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from misp_search.data import Attribute, Event
from misp_search.errors import MispDecodeError

T = TypeVar("T", bound=BaseModel)


class MispResponse(Generic[T]):
    """Base response holding a decoded collection of one record kind.

    Iteration is single-pass: ``iter()`` always returns the same generator,
    so a second loop over the same response yields nothing.
    """

    def __init__(self, items: list[T] | None = None) -> None:
        self._items: list[T] = list(items or [])
        self._iterator: Iterator[T] | None = None

    def iter(self) -> Iterator[T]:
        if self._iterator is None:
            self._iterator = self._produce()
        return self._iterator

    def __iter__(self) -> Iterator[T]:
        return self.iter()

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self._items)} items)"

    def _produce(self) -> Iterator[T]:
        yield from self._items


class EmptyResponse(MispResponse[Any]):
    """Result of a failed or unroutable search. Iterates to nothing."""

    def __init__(self) -> None:
        super().__init__()


class EventResponse(MispResponse[Event]):
    """Events returned by ``events/restSearch``."""

    @classmethod
    def from_json(cls, body: bytes | str) -> tuple["EventResponse", MispDecodeError | None]:
        """Decode an events envelope.

        Returns:
            Tuple of (response, error). On error the response holds the
            events decoded before the malformed entry.
        """
        payload, err = _load_envelope(body)
        if err is not None:
            return (cls(), err)
        events, err = _decode_records(payload.get("response"), Event, unwrap="Event")
        return (cls(events), err)


class AttributeResponse(MispResponse[Attribute]):
    """Attributes returned by ``attributes/restSearch``."""

    @classmethod
    def from_json(cls, body: bytes | str) -> tuple["AttributeResponse", MispDecodeError | None]:
        """Decode an attributes envelope.

        Returns:
            Tuple of (response, error). On error the response holds the
            attributes decoded before the malformed entry.
        """
        payload, err = _load_envelope(body)
        if err is not None:
            return (cls(), err)
        inner = payload.get("response")
        if inner is None:
            return (cls(), None)
        if not isinstance(inner, dict):
            return (cls(), MispDecodeError(f"expected a JSON object, got {type(inner).__name__}"))
        attributes, err = _decode_records(inner.get("Attribute"), Attribute)
        return (cls(attributes), err)


def _load_envelope(body: bytes | str) -> tuple[dict[str, Any], MispDecodeError | None]:
    """Parse the outer JSON object of a response body."""
    try:
        payload = json.loads(body)
    except ValueError as e:
        err = MispDecodeError(f"invalid JSON: {e}")
        err.__cause__ = e
        return ({}, err)
    if not isinstance(payload, dict):
        return ({}, MispDecodeError(f"expected a JSON object, got {type(payload).__name__}"))
    return (payload, None)


def _decode_records(
    entries: Any,
    record_type: type[T],
    *,
    unwrap: str | None = None,
) -> tuple[list[T], MispDecodeError | None]:
    """Validate ``entries`` one by one, stopping at the first bad one.

    Args:
        entries: Decoded JSON expected to be an array.
        record_type: Model each entry is validated against.
        unwrap: Key of the single-field wrapper around each entry, if any.

    Returns:
        Tuple of (records decoded so far, error or None).
    """
    if entries is None:
        return ([], None)
    if not isinstance(entries, list):
        return ([], MispDecodeError(f"expected a JSON array, got {type(entries).__name__}"))

    records: list[T] = []
    for index, entry in enumerate(entries):
        if unwrap is not None:
            if not isinstance(entry, dict):
                return (records, MispDecodeError(f"entry {index}: expected an object"))
            entry = entry.get(unwrap)
        if entry is None:
            entry = {}
        try:
            records.append(record_type.model_validate(entry))
        except ValidationError as e:
            err = MispDecodeError(f"entry {index}: {e}")
            err.__cause__ = e
            return (records, err)
    return (records, None)
