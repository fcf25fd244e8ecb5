"""Factory functions to create connections from configuration."""

import logging
from typing import Any

from misp_search.config.models import MispConfig
from misp_search.search.connection import MispConnection, new_connection, new_insecure_connection


def create_from_config(
    config: MispConfig,
    *,
    insecure_override: bool | None = None,
    logger: logging.Logger | None = None,
) -> MispConnection:
    """Create a connection from root config.

    Args:
        config: Loaded MISP settings.
        insecure_override: Override the config's ``insecure`` setting.
        logger: Logger handed to the connection. The connection module's
            logger is used when omitted.

    Returns:
        A connection using the configured search suffix.
    """
    insecure = insecure_override if insecure_override is not None else config.insecure
    factory = new_insecure_connection if insecure else new_connection
    kwargs: dict[str, Any] = {"search_suffix": config.api_url}
    if logger is not None:
        kwargs["logger"] = logger
    return factory(config.protocol, config.host, config.api_key, **kwargs)
