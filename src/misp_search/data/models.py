"""Domain records decoded from MISP search responses.

MISP transmits numeric values (ids, timestamps, counts) as strings. They are
kept as strings here and only converted by the explicit accessors below.
"""

import re
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, model_validator

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def parse_timestamp(raw: str) -> datetime:
    """Convert a decimal seconds-since-epoch string to a UTC datetime.

    Raises:
        ValueError: If ``raw`` is empty, not a base-10 integer, or is outside
            the signed 64-bit range or the range of ``datetime``.
    """
    if not _DECIMAL_RE.fullmatch(raw):
        raise ValueError(f"invalid timestamp: {raw!r}")
    seconds = int(raw, 10)
    if not _INT64_MIN <= seconds <= _INT64_MAX:
        raise ValueError(f"timestamp out of range: {raw!r}")
    try:
        return _EPOCH + timedelta(seconds=seconds)
    except OverflowError:
        raise ValueError(f"timestamp out of range: {raw!r}") from None


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        # MISP sends null for absent nested objects and lists
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Org(_Record):
    """Organisation owning or creating an event."""

    id: StrictStr = ""
    name: StrictStr = ""
    uuid: StrictStr = ""


class Attribute(_Record):
    """A single indicator attached to an event."""

    id: StrictStr = ""
    event_id: StrictStr = ""
    uuid: StrictStr = ""
    sharing_group_id: StrictStr = ""
    raw_timestamp: StrictStr = Field(default="", alias="timestamp")
    distribution: StrictStr = ""
    category: StrictStr = ""
    type: StrictStr = ""
    value: StrictStr = ""
    to_ids: StrictBool = False
    deleted: StrictBool = False
    comment: StrictStr = ""

    def timestamp(self) -> datetime:
        return parse_timestamp(self.raw_timestamp)


class RelatedEvent(_Record):
    """Summary of an event correlated with another one."""

    id: StrictStr = ""
    date: StrictStr = ""
    threat_level_id: StrictStr = ""
    info: StrictStr = ""
    published: StrictBool = False
    uuid: StrictStr = ""
    analysis: StrictStr = ""
    raw_timestamp: StrictStr = Field(default="", alias="timestamp")
    distribution: StrictStr = ""
    org_id: StrictStr = ""
    orgc_id: StrictStr = ""
    org: Org = Field(default_factory=Org, alias="Org")
    orgc: Org = Field(default_factory=Org, alias="Orgc")

    def timestamp(self) -> datetime:
        return parse_timestamp(self.raw_timestamp)


class Event(_Record):
    """A MISP event with its embedded attributes and correlations."""

    id: StrictStr = ""
    orgc_id: StrictStr = ""
    org_id: StrictStr = ""
    date: StrictStr = ""
    threat_level_id: StrictStr = ""
    info: StrictStr = ""
    published: StrictBool = False
    uuid: StrictStr = ""
    attribute_count: StrictStr = ""
    analysis: StrictStr = ""
    raw_timestamp: StrictStr = Field(default="", alias="timestamp")
    distribution: StrictStr = ""
    proposal_email_lock: StrictBool = False
    locked: StrictBool = False
    raw_publish_timestamp: StrictStr = Field(default="", alias="publish_timestamp")
    sharing_group_id: StrictStr = ""
    org: Org = Field(default_factory=Org, alias="Org")
    orgc: Org = Field(default_factory=Org, alias="Orgc")
    attributes: tuple[Attribute, ...] = Field(default=(), alias="Attribute")
    shadow_attributes: tuple[Attribute, ...] = Field(default=(), alias="ShadowAttribute")
    related_events: tuple[RelatedEvent, ...] = Field(default=(), alias="RelatedEvent")
    # MISP galaxies are decoded with the related-event shape
    galaxies: tuple[RelatedEvent, ...] = Field(default=(), alias="Galaxy")

    def timestamp(self) -> datetime:
        return parse_timestamp(self.raw_timestamp)

    def published_timestamp(self) -> datetime:
        return parse_timestamp(self.raw_publish_timestamp)
