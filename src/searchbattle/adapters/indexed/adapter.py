"""Indexed adapter — wildcard free-text lookup against Elasticsearch (v8+).

To stay comparable with the relational substring match, each query token
is lowercased and wrapped as ``*token*`` in a ``query_string`` query; tokens
are OR'd together. Lucene reserved characters in user input are escaped so
they are matched literally instead of being parsed as query syntax.

Install the driver with::

    pip install "elasticsearch[async]"
"""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from searchbattle.adapters.base.adapter import DEFAULT_PAGE_SIZE, AdapterHealth, LookupAdapter, RawResults
from searchbattle.adapters.base.exceptions import BackendError, ConfigurationError
from searchbattle.models.outcome import Source

if TYPE_CHECKING:
    from searchbattle.config.settings import ElasticsearchSettings

logger = logging.getLogger(__name__)

TEXT_FIELD = "review"

_RESERVED_CHARS = frozenset('\\+-=&|!(){}[]^"~*?:/')
# '<' and '>' cannot be escaped in query_string syntax.
_DROPPED_CHARS = frozenset("<>")


def escape_query_string(token: str) -> str:
    """Escape Lucene ``query_string`` syntax in a single token."""
    return "".join(
        f"\\{ch}" if ch in _RESERVED_CHARS else ch
        for ch in token
        if ch not in _DROPPED_CHARS
    )


def build_query_string(query: str) -> str:
    """Turn free text into ``*tok1* *tok2*`` with every token escaped.

    Returns an empty string when nothing searchable is left.
    """
    parts = [escape_query_string(token) for token in query.lower().split()]
    return " ".join(f"*{part}*" for part in parts if part)


def create_search_client(settings: ElasticsearchSettings) -> Any:
    """Create the process-wide ``AsyncElasticsearch`` client (and its pool)."""
    try:
        from elasticsearch import AsyncElasticsearch
    except ImportError as e:
        raise ConfigurationError(
            "elasticsearch package is required.  Install with: pip install 'elasticsearch[async]'"
        ) from e

    client_kwargs: dict[str, Any] = {
        "hosts": settings.hosts,
        "verify_certs": settings.verify_certs,
        "request_timeout": settings.request_timeout,
    }
    if settings.api_key:
        client_kwargs["api_key"] = settings.api_key
    return AsyncElasticsearch(**client_kwargs)


class IndexedAdapter(LookupAdapter):
    """Lookup adapter for an Elasticsearch index of reviews.

    Args:
        client: Shared ``AsyncElasticsearch`` client; owns the connection pool.
        index: Name of the reviews index.
        page_size: Maximum number of records per lookup.
    """

    def __init__(
        self,
        client: Any,
        index: str = "reviews",
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        super().__init__(page_size=page_size)
        self._client = client
        self._index = index

    @property
    def source(self) -> Source:
        return Source.INDEXED

    async def initialize(self) -> None:
        """Fetch cluster info to verify the index cluster is reachable."""
        try:
            info = _body(await self._client.info())
        except Exception as e:
            raise BackendError(self.source, f"Failed to connect to Elasticsearch: {e}", cause=e) from e
        version = info.get("version", {}).get("number", "unknown")
        cluster = info.get("cluster_name", "unknown")
        logger.info("Connected to Elasticsearch cluster: %s (v%s), index '%s'", cluster, version, self._index)

    async def shutdown(self) -> None:
        """Close the Elasticsearch client."""
        await self._client.close()

    # ── Lookup ───────────────────────────────────────────────────────────

    def build_query(self, query: str) -> dict[str, Any]:
        return {
            "query_string": {
                "query": build_query_string(query),
                "fields": [TEXT_FIELD],
                "default_operator": "OR",
                "analyze_wildcard": True,
            }
        }

    async def execute(self, query: str) -> RawResults:
        es_query = self.build_query(query)
        if not es_query["query_string"]["query"]:
            logger.debug("Indexed lookup '%s': nothing searchable after escaping", query)
            return RawResults()

        start = time.monotonic()
        response = await self._client.search(index=self._index, query=es_query, size=self.page_size)
        took_ms = int((time.monotonic() - start) * 1000)

        hits = _body(response).get("hits", {})
        total = hits.get("total", 0)
        # ES 7+ reports {"value": n, "relation": "eq"|"gte"}; older clusters send an int.
        if isinstance(total, dict):
            total = total.get("value", 0)
        documents = [hit.get("_source", {}) for hit in hits.get("hits", [])]

        logger.debug("Indexed lookup '%s': %d/%d hits in %d ms", query, len(documents), total, took_ms)
        return RawResults(total_hits=int(total), documents=documents, took_ms=took_ms)

    # ── Health ───────────────────────────────────────────────────────────

    async def health_check(self) -> AdapterHealth:
        try:
            start = time.monotonic()
            health = _body(await self._client.cluster.health())
            latency_ms = int((time.monotonic() - start) * 1000)

            status_map = {"green": "healthy", "yellow": "degraded", "red": "unhealthy"}

            return AdapterHealth(
                status=status_map.get(health.get("status", "red"), "unhealthy"),
                latency_ms=latency_ms,
                last_check=datetime.now(UTC).isoformat(),
                message=f"Cluster: {health.get('cluster_name')}, Nodes: {health.get('number_of_nodes')}",
            )
        except Exception as e:
            return AdapterHealth(status="unhealthy", message=str(e))


def _body(response: Any) -> dict[str, Any]:
    """Unwrap an ``ObjectApiResponse`` (or pass a plain dict through)."""
    return dict(getattr(response, "body", response))
