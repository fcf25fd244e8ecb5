from typing import Protocol

from misp_search.query import AttributeQuery, EventQuery
from misp_search.search.response import MispResponse


class Searcher(Protocol):
    """Interface for issuing MISP searches."""

    async def search(
        self,
        query: EventQuery | AttributeQuery,
    ) -> tuple[MispResponse, Exception | None]:
        """Run a search for the resource kind matching ``query``.

        Args:
            query: Event or attribute filters.

        Returns:
            Tuple of (response, error). The response is empty whenever the
            request failed or the server rejected it.
        """
        ...
