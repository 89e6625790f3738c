# tests/test_product_store.py

"""Tests for ProductStore actions, ordering and notifications."""

import asyncio
import unittest

from fake_client import FakeResourceClient, make_product

from catalog_sync.models.comment import Comment, CommentDraft
from catalog_sync.models.errors import NotFoundError
from catalog_sync.models.product import Size
from catalog_sync.services.product_store import (
    ProductStore,
    StatusKind,
    StoreSnapshot,
    StoreStatus,
)


class StoreTestCase(unittest.IsolatedAsyncioTestCase):
    """Shared fixture: a store over a fake backend with three products."""

    async def asyncSetUp(self) -> None:
        self.alpha = make_product("Alpha", 3, product_id="a")
        self.beta = make_product("Beta", 1, product_id="b")
        self.gamma = make_product("Gamma", 2, product_id="g")
        self.client = FakeResourceClient(
            [self.alpha, self.beta, self.gamma]
        )
        self.store = ProductStore(self.client)  # type: ignore[arg-type]
        self.store.start()

    async def asyncTearDown(self) -> None:
        await self.store.close()

    async def loaded(self) -> None:
        result = await self.store.load()
        self.assertTrue(result.ok)

    def ids(self) -> list[str]:
        return [p.id for p in self.store.items]


class TestLoad(StoreTestCase):
    """Loading the collection."""

    async def test_load_replaces_list_in_server_order(self) -> None:
        """Items mirror the backend's order and status goes idle."""
        await self.loaded()
        self.assertEqual(self.ids(), ["a", "b", "g"])
        self.assertEqual(self.store.status, StoreStatus.idle())

    async def test_load_failure_keeps_prior_list(self) -> None:
        """A failed reload leaves the old list and records the error."""
        await self.loaded()
        self.client.fail_next("list_products")

        result = await self.store.load()

        self.assertFalse(result.ok)
        self.assertEqual(self.ids(), ["a", "b", "g"])
        self.assertTrue(self.store.status.is_error)
        self.assertIn("Failed to load products", result.error or "")
        self.assertEqual(self.store.status.message, result.error)

    async def test_load_passes_through_loading(self) -> None:
        """Subscribers see loading before idle."""
        kinds: list[StatusKind] = []
        self.store.subscribe(lambda snap: kinds.append(snap.status.kind))
        await self.loaded()
        self.assertEqual(kinds, [StatusKind.LOADING, StatusKind.IDLE])

    async def test_empty_backend(self) -> None:
        """An empty collection loads to an empty list."""
        store = ProductStore(FakeResourceClient())  # type: ignore[arg-type]
        async with store:
            result = await store.load()
        self.assertTrue(result.ok)
        self.assertEqual(store.items, [])


class TestCreate(StoreTestCase):
    """Creating products."""

    async def test_create_appends_echoed_product(self) -> None:
        """The new product lands at the end, locally and remotely."""
        await self.loaded()
        new = make_product("Delta", 7, product_id="d")

        result = await self.store.create(new)

        self.assertTrue(result.ok)
        self.assertEqual(result.value, new)
        self.assertEqual(self.ids(), ["a", "b", "g", "d"])
        self.assertIn("d", self.client.products)

    async def test_create_failure_changes_nothing(self) -> None:
        """A failed create adds nothing locally."""
        await self.loaded()
        self.client.fail_next("create_product")

        result = await self.store.create(make_product("Delta"))

        self.assertFalse(result.ok)
        self.assertEqual(self.ids(), ["a", "b", "g"])
        self.assertTrue(self.store.status.is_error)

    async def test_caller_mutation_does_not_leak(self) -> None:
        """The store keeps its own copy of the submitted product."""
        await self.loaded()
        new = make_product("Delta", product_id="d")
        pending = self.store.create(new)
        new.name = "Mutated"
        await pending
        self.assertEqual(self.store.find("d").name, "Delta")


class TestUpdate(StoreTestCase):
    """Replacing products."""

    async def test_update_replaces_in_place(self) -> None:
        """Only the target changes and it keeps its position."""
        await self.loaded()
        before = {p.id: p for p in self.store.items}
        edited = self.store.find("b").copy(count=42)

        result = await self.store.update(edited)

        self.assertTrue(result.ok)
        self.assertEqual(self.ids(), ["a", "b", "g"])
        after = {p.id: p for p in self.store.items}
        self.assertEqual(after["b"].count, 42)
        self.assertEqual(after["a"], before["a"])
        self.assertEqual(after["g"], before["g"])

    async def test_update_failure_keeps_old_value(self) -> None:
        """A failed PUT leaves the local entry untouched."""
        await self.loaded()
        self.client.fail_next("replace_product")

        result = await self.store.update(
            self.store.find("a").copy(count=99)
        )

        self.assertFalse(result.ok)
        self.assertEqual(self.store.find("a").count, 3)
        self.assertIn("Failed to update product", str(self.store.status))

    async def test_update_of_remotely_missing_product(self) -> None:
        """A 404 on PUT is an error, not a silent insert."""
        await self.loaded()
        ghost = make_product("Ghost", product_id="zz")

        result = await self.store.update(ghost)

        self.assertFalse(result.ok)
        self.assertIsNone(self.store.find("zz"))

    async def test_update_of_locally_missing_product(self) -> None:
        """A product dropped locally before its PUT settles is an error."""
        await self.loaded()
        edited = self.store.find("a").copy(count=8)
        self.store._items = [p for p in self.store._items if p.id != "a"]

        result = await self.store.update(edited)

        self.assertFalse(result.ok)
        self.assertIn("no longer in the local list", result.error or "")
        self.assertIsNone(self.store.find("a"))

    async def test_last_submitted_update_wins(self) -> None:
        """A slow first update cannot overwrite a later fast one."""
        await self.loaded()
        self.client.delay_next("replace_product", 0.05)
        base = self.store.find("a")

        first = self.store.update(base.copy(count=10))
        second = self.store.update(base.copy(count=20))
        results = await asyncio.gather(first, second)

        self.assertTrue(all(r.ok for r in results))
        self.assertEqual(self.store.find("a").count, 20)
        self.assertEqual(self.client.remote_product("a").count, 20)


class TestDelete(StoreTestCase):
    """Deleting products."""

    async def test_delete_removes_exactly_one(self) -> None:
        """The target disappears; the rest keep their order."""
        await self.loaded()
        result = await self.store.delete("b")
        self.assertTrue(result.ok)
        self.assertEqual(self.ids(), ["a", "g"])
        self.assertNotIn("b", self.client.products)

    async def test_delete_unknown_id_is_noop(self) -> None:
        """Deleting an id nobody holds succeeds and changes nothing."""
        await self.loaded()
        result = await self.store.delete("nope")
        self.assertTrue(result.ok)
        self.assertEqual(self.ids(), ["a", "b", "g"])
        self.assertFalse(self.store.status.is_error)

    async def test_delete_already_gone_remotely(self) -> None:
        """A remote 404 still removes the local entry."""
        await self.loaded()
        self.client.fail_next(
            "delete_product", NotFoundError("/products/a")
        )
        result = await self.store.delete("a")
        self.assertTrue(result.ok)
        self.assertEqual(self.ids(), ["b", "g"])

    async def test_delete_network_failure_keeps_item(self) -> None:
        """Transport errors leave the list alone."""
        await self.loaded()
        self.client.fail_next("delete_product")
        result = await self.store.delete("a")
        self.assertFalse(result.ok)
        self.assertEqual(self.ids(), ["a", "b", "g"])
        self.assertIn("Failed to delete product", result.error or "")


class TestComments(StoreTestCase):
    """Adding, removing and fetching comments."""

    async def test_add_then_delete_leaves_comments_unchanged(self) -> None:
        """Linking then unlinking a comment restores the original list."""
        await self.loaded()
        before = self.store.find("a").comments

        added = await self.store.add_comment("a", CommentDraft("Nice"))
        self.assertTrue(added.ok)
        comment_id = added.value.id
        self.assertEqual(
            self.store.find("a").comments, before + [comment_id]
        )

        removed = await self.store.delete_comment("a", comment_id)
        self.assertTrue(removed.ok)
        self.assertEqual(self.store.find("a").comments, before)
        self.assertEqual(self.client.remote_product("a").comments, before)
        self.assertEqual(self.client.comments, {})

    async def test_add_comment_failure_rolls_back(self) -> None:
        """A failed link leaves neither local nor remote changes."""
        await self.loaded()
        self.client.fail_next("replace_product")

        result = await self.store.add_comment("a", CommentDraft("Nice"))

        self.assertFalse(result.ok)
        self.assertIn("Failed to add comment", result.error or "")
        self.assertEqual(self.store.find("a").comments, [])
        self.assertEqual(self.client.comments, {})

    async def test_fetch_comments_sorted_by_date(self) -> None:
        """Comments come back oldest first."""
        newer = Comment("c2", "a", "second", "2026-10-17T12:00:00.000Z")
        older = Comment("c1", "a", "first", "2026-10-17T09:00:00.000Z")
        other = Comment("c3", "b", "elsewhere", "2026-10-17T08:00:00.000Z")
        self.client.comments = {
            c.id: c.to_dict() for c in (newer, older, other)
        }

        result = await self.store.fetch_comments("a")

        self.assertTrue(result.ok)
        self.assertEqual([c.id for c in result.value], ["c1", "c2"])


class TestBoxScenario(unittest.IsolatedAsyncioTestCase):
    """Create, edit and comment on a single product end to end."""

    async def test_box_lifecycle(self) -> None:
        client = FakeResourceClient()
        async with ProductStore(client) as store:  # type: ignore[arg-type]
            box = make_product("Box", 5)
            self.assertTrue((await store.create(box)).ok)

            edited = store.find(box.id).copy(count=10)
            self.assertTrue((await store.update(edited)).ok)

            added = await store.add_comment(box.id, CommentDraft("Nice"))
            self.assertTrue(added.ok)

            (local,) = store.items
            self.assertEqual(local.count, 10)
            self.assertEqual(local.size, Size(10, 20))
            self.assertEqual(local.comments, [added.value.id])
            self.assertEqual(client.remote_product(box.id), local)
            self.assertEqual(store.status.kind, StatusKind.IDLE)

            removed = await store.delete_comment(box.id, added.value.id)
            self.assertTrue(removed.ok)
            self.assertEqual(store.find(box.id).comments, [])
            self.assertEqual(client.remote_product(box.id).comments, [])
            self.assertEqual(client.comments, {})

            self.assertTrue((await store.delete(box.id)).ok)
            self.assertEqual(store.items, [])
            self.assertEqual(client.products, {})
            self.assertEqual(store.status.kind, StatusKind.IDLE)


class TestSubscriptions(StoreTestCase):
    """Snapshots, listeners and lifecycle."""

    async def test_snapshot_is_detached(self) -> None:
        """Mutating snapshot items does not touch the store."""
        await self.loaded()
        snap = self.store.snapshot()
        self.assertIsInstance(snap, StoreSnapshot)
        snap.items[0].name = "Hacked"
        self.store.items[1].count = 999
        self.assertEqual(self.store.find("a").name, "Alpha")
        self.assertEqual(self.store.find("b").count, 1)

    async def test_unsubscribe_stops_notifications(self) -> None:
        """An unsubscribed listener is not called again."""
        seen: list[StoreSnapshot] = []
        unsubscribe = self.store.subscribe(seen.append)
        await self.loaded()
        count = len(seen)
        unsubscribe()
        await self.loaded()
        self.assertEqual(len(seen), count)
        unsubscribe()

    async def test_failing_listener_does_not_break_store(self) -> None:
        """A listener that raises is logged and others still run."""
        seen: list[StoreSnapshot] = []

        def broken(_: StoreSnapshot) -> None:
            raise RuntimeError("listener bug")

        self.store.subscribe(broken)
        self.store.subscribe(seen.append)
        with self.assertLogs("catalog_sync.store", level="ERROR"):
            result = await self.store.load()
        self.assertTrue(result.ok)
        self.assertTrue(seen)

    async def test_success_clears_previous_error(self) -> None:
        """Any successful action returns the status to idle."""
        self.client.fail_next("list_products")
        await self.store.load()
        self.assertTrue(self.store.status.is_error)
        await self.store.delete("nope")
        self.assertEqual(self.store.status, StoreStatus.idle())

    async def test_close_cancels_pending_actions(self) -> None:
        """Queued actions are cancelled when the store closes."""
        self.client.delay_next("list_products", 0.2)
        running = self.store.load()
        queued = self.store.delete("a")
        await asyncio.sleep(0.01)

        await self.store.close()

        self.assertTrue(running.cancelled())
        self.assertTrue(queued.cancelled())
        self.assertIn("b", self.client.products)
        self.assertIn("a", self.client.products)

    async def test_actions_restart_worker_after_close(self) -> None:
        """Submitting after close starts a fresh worker."""
        await self.store.close()
        result = await self.store.load()
        self.assertTrue(result.ok)

    def test_status_str(self) -> None:
        """String form includes the message for errors only."""
        self.assertEqual(str(StoreStatus.idle()), "idle")
        self.assertEqual(
            str(StoreStatus.error("boom")), "error: boom"
        )


if __name__ == "__main__":
    unittest.main()
