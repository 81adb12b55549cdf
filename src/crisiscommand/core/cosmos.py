"""Async Cosmos DB access shared by every document store.

Each collection gets a small subclass of :class:`DocumentStore` naming
its container and document model. Stores add their own finder methods
on top of the generic ``query``.

When ``COSMOS_ENDPOINT`` is not set, falls back to an in-memory store
for local development and testing.
"""

import logging
import os
from collections.abc import Iterable
from typing import Any, ClassVar, Generic, Self, TypeVar

from azure.cosmos.exceptions import CosmosResourceNotFoundError
from dotenv import load_dotenv

from crisiscommand.core.config import get_cosmos_database
from crisiscommand.core.models import Document, utcnow

logger = logging.getLogger(__name__)

DocT = TypeVar("DocT", bound=Document)


class DocumentStore(Generic[DocT]):
    """Async CRUD operations for one Cosmos DB container.

    Containers are partitioned on ``/id``. Falls back to in-memory
    storage when Cosmos DB is not configured, so the server works out
    of the box without Azure infrastructure.

    Usage::

        async with IncidentStore() as store:
            incident = await store.create(doc)
            active = await store.list_active()
    """

    container_name: ClassVar[str]
    model: ClassVar[type[Document]]
    # Bump ``updated_at`` on every update (only for models that have it)
    touch_on_update: ClassVar[bool] = False

    # Shared in-memory store across instances (persists for server lifetime).
    # Every subclass gets its own dict.
    _memory: ClassVar[dict[str, dict]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._memory = {}

    def __init__(self) -> None:
        """Initialize store. Call ``__aenter__`` to connect."""
        self._client = None
        self._container = None
        self._credential = None
        self._in_memory = False

    async def __aenter__(self) -> Self:
        """Connect to Cosmos DB, or fall back to in-memory mode."""
        load_dotenv()

        endpoint = os.getenv("COSMOS_ENDPOINT")
        key = os.getenv("COSMOS_KEY")

        if endpoint and key:
            from azure.cosmos.aio import CosmosClient

            self._client = CosmosClient(endpoint, credential=key)
        elif endpoint:
            from azure.cosmos.aio import CosmosClient
            from azure.identity.aio import DefaultAzureCredential

            self._credential = DefaultAzureCredential()
            self._client = CosmosClient(endpoint, credential=self._credential)
        else:
            logger.warning(
                "No COSMOS_ENDPOINT set, using in-memory %s store (dev only)",
                self.container_name,
            )
            self._in_memory = True
            return self

        database = self._client.get_database_client(get_cosmos_database())
        self._container = database.get_container_client(self.container_name)
        logger.debug("Connected to Cosmos DB: %s/%s", get_cosmos_database(), self.container_name)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close connections."""
        if self._client:
            await self._client.close()
            self._client = None
        if self._credential:
            await self._credential.close()
            self._credential = None
        self._container = None

    # ------------------------------------------------------------------
    # Core CRUD
    # ------------------------------------------------------------------

    async def create(self, doc: DocT) -> DocT:
        """Create a new document.

        Args:
            doc: Document to create

        Returns:
            The created document (with any server-side fields populated)
        """
        if self._in_memory:
            self._memory[doc.id] = doc.to_cosmos()
            logger.info("Created %s %s (in-memory)", self.container_name, doc.id)
            return doc

        result = await self._container.create_item(body=doc.to_cosmos())
        logger.info("Created %s %s", self.container_name, doc.id)
        return self.model.from_cosmos(result)

    async def get(self, doc_id: str) -> DocT | None:
        """Point-read a document by ID.

        Returns:
            The document if found, None otherwise
        """
        if self._in_memory:
            data = self._memory.get(doc_id)
            return self.model.from_cosmos(data) if data else None

        try:
            result = await self._container.read_item(item=doc_id, partition_key=doc_id)
        except CosmosResourceNotFoundError:
            logger.debug("%s not found: %s", self.container_name, doc_id)
            return None
        return self.model.from_cosmos(result)

    async def update(self, doc: DocT, changes: dict | None = None) -> DocT:
        """Replace a document, optionally merging ``changes`` first.

        Changes use snake_case field names and are validated against the
        document model, so an unknown status raises ``ValidationError``.

        Args:
            doc: Current document (must have a valid id)
            changes: Field values to overwrite before saving

        Returns:
            The updated document
        """
        data = doc.model_dump()
        if changes:
            data.update(changes)
        if self.touch_on_update:
            data["updated_at"] = utcnow()
        doc = self.model.model_validate(data)

        if self._in_memory:
            self._memory[doc.id] = doc.to_cosmos()
            logger.info("Updated %s %s (in-memory)", self.container_name, doc.id)
            return doc

        result = await self._container.replace_item(item=doc.id, body=doc.to_cosmos())
        logger.info("Updated %s %s", self.container_name, doc.id)
        return self.model.from_cosmos(result)

    async def patch(self, doc_id: str, changes: dict) -> DocT | None:
        """Merge ``changes`` into an existing document.

        Returns:
            The updated document, or None if it does not exist
        """
        doc = await self.get(doc_id)
        if doc is None:
            return None
        return await self.update(doc, changes)

    async def delete(self, doc_id: str) -> bool:
        """Delete a document. Returns True if it existed."""
        if self._in_memory:
            existed = self._memory.pop(doc_id, None) is not None
            if existed:
                logger.info("Deleted %s %s (in-memory)", self.container_name, doc_id)
            return existed

        try:
            await self._container.delete_item(item=doc_id, partition_key=doc_id)
        except CosmosResourceNotFoundError:
            return False
        logger.info("Deleted %s %s", self.container_name, doc_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def query(
        self,
        filters: dict[str, Any] | None = None,
        *,
        order_by: str | None = None,
        descending: bool = False,
        max_items: int | None = None,
    ) -> list[DocT]:
        """List documents matching simple equality filters.

        A filter value that is a list, tuple or set matches any of its
        members. Only equality and membership are supported.

        Args:
            filters: Mapping of snake_case field name to required value
            order_by: Field to sort by
            descending: Sort newest/largest first
            max_items: Maximum number of results

        Returns:
            Matching documents
        """
        filters = filters or {}

        if self._in_memory:
            return self._filter_memory(
                filters, order_by=order_by, descending=descending, max_items=max_items
            )

        conditions = []
        parameters: list[dict] = []
        for i, (field_name, value) in enumerate(filters.items()):
            param = f"@p{i}"
            if isinstance(value, (list, tuple, set, frozenset)):
                conditions.append(f"ARRAY_CONTAINS({param}, c.{field_name})")
                parameters.append({"name": param, "value": list(value)})
            else:
                conditions.append(f"c.{field_name} = {param}")
                parameters.append({"name": param, "value": value})

        where_clause = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        order_clause = f" ORDER BY c.{order_by} {'DESC' if descending else 'ASC'}" if order_by else ""
        query = f"SELECT * FROM c{where_clause}{order_clause}"

        items: list[DocT] = []
        async for item in self._container.query_items(
            query=query,
            parameters=parameters or None,
        ):
            items.append(self.model.from_cosmos(item))
            if max_items is not None and len(items) >= max_items:
                break

        return items

    def _filter_memory(
        self,
        filters: dict[str, Any],
        *,
        order_by: str | None,
        descending: bool,
        max_items: int | None,
    ) -> list[DocT]:
        """Filter in-memory documents (dev mode only)."""
        results = [
            data
            for data in self._memory.values()
            if all(_matches(data.get(name), value) for name, value in filters.items())
        ]
        if order_by:
            # Documents missing the sort field go last in either direction
            present = [data for data in results if data.get(order_by) is not None]
            missing = [data for data in results if data.get(order_by) is None]
            present.sort(key=lambda data: data[order_by], reverse=descending)
            results = present + missing
        if max_items is not None:
            results = results[:max_items]
        return [self.model.from_cosmos(data) for data in results]


def _matches(actual: Any, expected: Any) -> bool:
    if isinstance(expected, Iterable) and not isinstance(expected, (str, bytes, dict)):
        return actual in expected
    return actual == expected
