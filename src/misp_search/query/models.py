"""Search filters for the MISP ``restSearch`` endpoints.

Each query serializes to the ``{"request": {...}}`` envelope expected by MISP.
Filters left at their default are omitted so the server applies its own
defaults.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# ============================================================
# Query variants
# ============================================================


class _BaseQuery(BaseModel):
    """Filters shared by event and attribute searches."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: str = ""
    type: str = ""
    category: str = ""
    org: str = ""
    tags: str = ""
    from_: str = Field(default="", alias="from")
    to: str = ""
    last: str = ""
    event_id: str = Field(default="", alias="eventid")
    uuid: str = ""

    def prepare(self) -> bytes:
        """Return the JSON request envelope wrapping this query."""
        return MispRequest(request=self).model_dump_json(  # type: ignore[arg-type]
            by_alias=True, exclude_defaults=True
        ).encode()


class EventQuery(_BaseQuery):
    """Filters for ``events/restSearch``."""

    kind: Literal["event"] = Field(default="event", exclude=True)
    quick_filter: str = Field(default="", alias="quickfilter")
    with_attachments: str = Field(default="", alias="withAttachments")
    metadata: str = ""
    search_all: int = Field(default=0, alias="searchall")


class AttributeQuery(_BaseQuery):
    """Filters for ``attributes/restSearch``."""

    kind: Literal["attribute"] = Field(default="attribute", exclude=True)


MispQuery = Annotated[
    EventQuery | AttributeQuery,
    Field(discriminator="kind"),
]


# ============================================================
# Envelope
# ============================================================


class MispRequest(BaseModel):
    """Envelope around a query, as posted to MISP."""

    request: MispQuery

    model_config = {"frozen": True}
