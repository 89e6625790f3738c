# catalog_sync/services/saga.py

"""Compensating step sequences for multi-request remote operations.

Linking a comment to a product takes two independent writes (the
comment resource, then the product's ``comments`` array). The backend
offers no transaction, so each step carries a rollback that is run in
reverse order when a later step fails.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from catalog_sync.clients.resource_client import ResourceClient
from catalog_sync.models.comment import Comment
from catalog_sync.models.errors import NotFoundError, SagaError
from catalog_sync.models.product import Product

logger = logging.getLogger("catalog_sync.saga")

StepAction = Callable[[], Awaitable[Any]]


@dataclass
class SagaStep:
    """One remote write plus the action that undoes it."""

    name: str
    action: StepAction
    compensate: StepAction | None = None


@dataclass
class Saga:
    """Run steps in order; on failure roll back completed steps."""

    name: str
    steps: list[SagaStep] = field(
        default_factory=lambda: list[SagaStep]()
    )

    def add_step(
        self,
        name: str,
        action: StepAction,
        compensate: StepAction | None = None,
    ) -> "Saga":
        self.steps.append(SagaStep(name, action, compensate))
        return self

    async def run(self) -> list[Any]:
        """Execute every step and return their results in order.

        Raises ``SagaError`` after compensating when a step fails.
        """
        completed: list[SagaStep] = []
        results: list[Any] = []
        for step in self.steps:
            try:
                results.append(await step.action())
            except Exception as exc:
                logger.warning(
                    "Saga '%s' failed at step '%s': %s",
                    self.name,
                    step.name,
                    exc,
                )
                failures = await self._compensate(completed)
                raise SagaError(
                    self.name, step.name, exc, failures
                ) from exc
            completed.append(step)
        logger.debug(
            "Saga '%s' completed %d steps",
            self.name,
            len(completed),
        )
        return results

    async def _compensate(
        self, completed: list[SagaStep],
    ) -> list[str]:
        """Undo completed steps newest-first; return failed rollbacks."""
        failures: list[str] = []
        for step in reversed(completed):
            if step.compensate is None:
                continue
            try:
                await step.compensate()
                logger.info(
                    "Saga '%s' rolled back step '%s'",
                    self.name,
                    step.name,
                )
            except Exception as exc:
                logger.error(
                    "Saga '%s' rollback of '%s' failed: %s",
                    self.name,
                    step.name,
                    exc,
                    exc_info=True,
                )
                failures.append(step.name)
        return failures


# ── Comment sagas ────────────────────────────────────────


async def _tolerate_missing(action: Awaitable[None]) -> None:
    """Await a delete, treating an already-missing resource as done."""
    try:
        await action
    except NotFoundError:
        pass


async def add_comment_saga(
    client: ResourceClient, comment: Comment,
) -> tuple[Comment, Product]:
    """Create ``comment`` and append its id to the owning product.

    Returns the stored comment and the product as written back.
    """
    state: dict[str, Any] = {}

    async def create() -> None:
        state["comment"] = await client.create_comment(comment)

    async def uncreate() -> None:
        stored: Comment = state["comment"]
        await _tolerate_missing(client.delete_comment(stored.id))

    async def link() -> None:
        stored: Comment = state["comment"]
        product = await client.get_product(comment.product_id)
        if stored.id not in product.comments:
            product.comments.append(stored.id)
        state["product"] = await client.replace_product(product)

    saga = (
        Saga(f"add_comment[{comment.id}]")
        .add_step("create_comment", create, uncreate)
        .add_step("link_comment", link)
    )
    await saga.run()
    return state["comment"], state["product"]


async def remove_comment_saga(
    client: ResourceClient, product_id: str, comment_id: str,
) -> Product:
    """Delete a comment and drop its id from the owning product.

    Returns the product as written back.
    """
    state: dict[str, Any] = {"snapshot": None}

    async def snapshot() -> None:
        try:
            state["snapshot"] = await client.get_comment(comment_id)
        except NotFoundError:
            logger.info(
                "Comment %s already absent remotely", comment_id
            )

    async def delete() -> None:
        if state["snapshot"] is not None:
            await _tolerate_missing(client.delete_comment(comment_id))

    async def restore() -> None:
        if state["snapshot"] is not None:
            await client.create_comment(state["snapshot"])

    async def unlink() -> None:
        product = await client.get_product(product_id)
        product.comments = [
            cid for cid in product.comments if cid != comment_id
        ]
        state["product"] = await client.replace_product(product)

    saga = (
        Saga(f"remove_comment[{comment_id}]")
        .add_step("snapshot_comment", snapshot)
        .add_step("delete_comment", delete, restore)
        .add_step("unlink_comment", unlink)
    )
    await saga.run()
    product: Product = state["product"]
    return product
