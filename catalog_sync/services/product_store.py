# catalog_sync/services/product_store.py

"""Session-wide product store kept in step with the REST backend.

The store owns the in-memory product list. Every action is queued and
executed by a single worker task in submission order, so mutations
never interleave at network suspension points: when two updates
target the same product, the one submitted last wins regardless of
which response arrives first.

Actions return an :class:`asyncio.Future` resolving to an
:class:`ActionResult`. Failures never propagate as exceptions; they
move the store into the ``error`` status and resolve the future with
``ok=False``.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from types import TracebackType
from typing import Any

from catalog_sync.clients.resource_client import ResourceClient
from catalog_sync.models.comment import Comment, CommentDraft
from catalog_sync.models.errors import CatalogError, NotFoundError
from catalog_sync.models.product import Product
from catalog_sync.services.saga import (
    add_comment_saga,
    remove_comment_saga,
)

logger = logging.getLogger("catalog_sync.store")


class StatusKind(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"


@dataclass(frozen=True)
class StoreStatus:
    """Store-wide status; ``message`` is only set for ``ERROR``."""

    kind: StatusKind = StatusKind.IDLE
    message: str | None = None

    @classmethod
    def idle(cls) -> "StoreStatus":
        return cls(StatusKind.IDLE)

    @classmethod
    def loading(cls) -> "StoreStatus":
        return cls(StatusKind.LOADING)

    @classmethod
    def error(cls, message: str) -> "StoreStatus":
        return cls(StatusKind.ERROR, message)

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR

    def __str__(self) -> str:
        if self.message:
            return f"{self.kind.value}: {self.message}"
        return self.kind.value


@dataclass(frozen=True)
class StoreSnapshot:
    """Read-only view of the store handed to the view layer."""

    items: tuple[Product, ...]
    status: StoreStatus


@dataclass
class ActionResult:
    """Settled outcome of a queued store action."""

    ok: bool
    value: Any = None
    error: str | None = None


Listener = Callable[[StoreSnapshot], None]


@dataclass
class _Action:
    name: str
    failure_label: str
    run: Callable[[], Awaitable[Any]]
    future: "asyncio.Future[ActionResult]"


class ProductStore:
    """Single source of truth for the product list within a session."""

    def __init__(self, client: ResourceClient) -> None:
        self.client = client
        self._items: list[Product] = []
        self._status = StoreStatus.idle()
        self._listeners: list[Listener] = []
        self._queue: asyncio.Queue[_Action] | None = None
        self._worker: asyncio.Task[None] | None = None

    # ── Read API ─────────────────────────────────────────

    @property
    def items(self) -> list[Product]:
        """Copies of the current products, in list order."""
        return [p.copy() for p in self._items]

    @property
    def status(self) -> StoreStatus:
        return self._status

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            items=tuple(p.copy() for p in self._items),
            status=self._status,
        )

    def find(self, product_id: str) -> Product | None:
        """Return a copy of the product with ``product_id``, if any."""
        for product in self._items:
            if product.id == product_id:
                return product.copy()
        return None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.error(
                    "Store listener %r raised", listener, exc_info=True
                )

    def _set_status(self, status: StoreStatus) -> None:
        self._status = status
        self._notify()

    # ── Worker lifecycle ─────────────────────────────────

    def start(self) -> None:
        """Start the worker task on the running loop (idempotent)."""
        if self._worker is not None and not self._worker.done():
            return
        self._queue = asyncio.Queue()
        self._worker = asyncio.get_running_loop().create_task(
            self._run(), name="product-store-worker"
        )
        logger.debug("Store worker started")

    async def close(self) -> None:
        """Stop the worker and cancel every action still queued."""
        worker, queue = self._worker, self._queue
        self._worker = None
        if worker is not None:
            worker.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await worker
        if queue is not None:
            cancelled = 0
            while not queue.empty():
                queue.get_nowait().future.cancel()
                cancelled += 1
            if cancelled:
                logger.info(
                    "Store closed with %d pending actions cancelled",
                    cancelled,
                )

    async def __aenter__(self) -> "ProductStore":
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _run(self) -> None:
        assert self._queue is not None
        queue = self._queue
        while True:
            action = await queue.get()
            try:
                if action.future.cancelled():
                    continue
                result = await self._execute(action)
                if not action.future.done():
                    action.future.set_result(result)
            except asyncio.CancelledError:
                action.future.cancel()
                raise
            finally:
                queue.task_done()

    async def _execute(self, action: _Action) -> ActionResult:
        logger.debug("Running %s", action.name)
        try:
            value = await action.run()
        except CatalogError as exc:
            message = f"{action.failure_label}: {exc}"
            logger.error("%s failed: %s", action.name, exc)
            self._set_status(StoreStatus.error(message))
            return ActionResult(ok=False, error=message)
        except Exception as exc:
            message = f"{action.failure_label}: {exc}"
            logger.error(
                "%s failed unexpectedly", action.name, exc_info=True
            )
            self._set_status(StoreStatus.error(message))
            return ActionResult(ok=False, error=message)
        self._set_status(StoreStatus.idle())
        return ActionResult(ok=True, value=value)

    def _submit(
        self,
        name: str,
        failure_label: str,
        run: Callable[[], Awaitable[Any]],
    ) -> "asyncio.Future[ActionResult]":
        self.start()
        assert self._queue is not None
        future: asyncio.Future[ActionResult] = (
            asyncio.get_running_loop().create_future()
        )
        self._queue.put_nowait(_Action(name, failure_label, run, future))
        logger.debug(
            "Queued %s (%d pending)", name, self._queue.qsize()
        )
        return future

    # ── Local reconciliation helpers ─────────────────────

    def _index_of(self, product_id: str) -> int:
        for idx, product in enumerate(self._items):
            if product.id == product_id:
                return idx
        return -1

    def _sync_comments(
        self, product_id: str, comment_ids: list[str],
    ) -> None:
        idx = self._index_of(product_id)
        if idx == -1:
            logger.info(
                "Product %s not held locally; comments not synced",
                product_id,
            )
            return
        self._items[idx].comments = list(comment_ids)

    # ── Actions ──────────────────────────────────────────

    def load(self) -> "asyncio.Future[ActionResult]":
        """Replace the local list with the backend's collection."""

        async def run() -> list[Product]:
            self._set_status(StoreStatus.loading())
            products = await self.client.list_products()
            self._items = products
            logger.info("Loaded %d products", len(products))
            return [p.copy() for p in products]

        return self._submit("load", "Failed to load products", run)

    def create(self, product: Product) -> "asyncio.Future[ActionResult]":
        """Create remotely, then append the echoed product."""
        draft = product.copy()

        async def run() -> Product:
            stored = await self.client.create_product(draft)
            self._items.append(stored)
            logger.info("Created product %s", stored.id)
            return stored.copy()

        return self._submit(
            f"create[{draft.id}]", "Failed to create product", run
        )

    def update(self, product: Product) -> "asyncio.Future[ActionResult]":
        """Replace remotely, then replace the local entry in place."""
        draft = product.copy()

        async def run() -> Product:
            stored = await self.client.replace_product(draft)
            idx = self._index_of(stored.id)
            if idx == -1:
                raise CatalogError(
                    f"product {stored.id} is no longer in the local list"
                )
            self._items[idx] = stored
            logger.info("Updated product %s", stored.id)
            return stored.copy()

        return self._submit(
            f"update[{draft.id}]", "Failed to update product", run
        )

    def delete(self, product_id: str) -> "asyncio.Future[ActionResult]":
        """Delete remotely, then drop the entry from the local list."""

        async def run() -> str:
            try:
                await self.client.delete_product(product_id)
            except NotFoundError:
                logger.info(
                    "Product %s already deleted remotely", product_id
                )
            before = len(self._items)
            self._items = [
                p for p in self._items if p.id != product_id
            ]
            if len(self._items) == before:
                logger.debug(
                    "Product %s was not held locally", product_id
                )
            return product_id

        return self._submit(
            f"delete[{product_id}]", "Failed to delete product", run
        )

    def add_comment(
        self, product_id: str, draft: CommentDraft,
    ) -> "asyncio.Future[ActionResult]":
        """Create a comment and link it to ``product_id``."""
        comment = Comment.new(product_id, draft.description)

        async def run() -> Comment:
            stored, product = await add_comment_saga(
                self.client, comment
            )
            self._sync_comments(product_id, product.comments)
            logger.info(
                "Added comment %s to product %s", stored.id, product_id
            )
            return stored

        return self._submit(
            f"add_comment[{comment.id}]", "Failed to add comment", run
        )

    def delete_comment(
        self, product_id: str, comment_id: str,
    ) -> "asyncio.Future[ActionResult]":
        """Delete a comment and unlink it from ``product_id``."""

        async def run() -> str:
            product = await remove_comment_saga(
                self.client, product_id, comment_id
            )
            self._sync_comments(product_id, product.comments)
            logger.info(
                "Removed comment %s from product %s",
                comment_id,
                product_id,
            )
            return comment_id

        return self._submit(
            f"delete_comment[{comment_id}]",
            "Failed to delete comment",
            run,
        )

    def fetch_comments(
        self, product_id: str,
    ) -> "asyncio.Future[ActionResult]":
        """Fetch a product's comments, oldest first."""

        async def run() -> list[Comment]:
            comments = await self.client.list_comments(product_id)
            return sorted(comments, key=lambda c: c.date)

        return self._submit(
            f"fetch_comments[{product_id}]",
            "Failed to load comments",
            run,
        )
