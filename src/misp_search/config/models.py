"""Pydantic configuration models for the MISP client."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from misp_search.search.connection import DEFAULT_SEARCH_SUFFIX


class MispConfig(BaseModel):
    """Connection settings for a MISP instance.

    Keys follow the MISP config file convention (``api-key``, ``api-url``).
    """

    protocol: Literal["http", "https"]
    host: str
    api_key: str = Field(alias="api-key")
    api_url: str = Field(default=DEFAULT_SEARCH_SUFFIX, alias="api-url")
    insecure: bool = False

    model_config = ConfigDict(frozen=True, populate_by_name=True)
