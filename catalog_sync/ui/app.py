# catalog_sync/ui/app.py

"""Terminal UI for browsing and editing the product catalog."""

import asyncio
import logging
from typing import Any, cast

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.css.query import NoMatches
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Static

from catalog_sync.clients.resource_client import ResourceClient
from catalog_sync.config.settings import Settings
from catalog_sync.filters.product_sort import SortKey, sort_products
from catalog_sync.forms.product_form import (
    apply_product_edit,
    build_product,
    product_form_values,
)
from catalog_sync.models.product import Product
from catalog_sync.services.product_store import (
    ActionResult,
    ProductStore,
    StatusKind,
    StoreSnapshot,
)
from catalog_sync.ui.screens import (
    CommentsScreen,
    ConfirmScreen,
    ProductFormScreen,
)

logger = logging.getLogger("catalog_sync.ui")


class CatalogApp(App[object]):
    """Product list with add/edit/delete and per-product comments."""

    CSS_PATH = "styles.tcss"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "reload", "Reload"),
        Binding("a", "add", "Add"),
        Binding("e", "edit", "Edit"),
        Binding("d", "delete", "Delete"),
        Binding("n", "sort_name", "Sort by Name"),
        Binding("c", "sort_count", "Sort by Count"),
    ]

    def __init__(self, store: ProductStore | None = None) -> None:
        super().__init__()
        self.settings = Settings()
        self._owns_store = store is None
        self.store = store or ProductStore(ResourceClient())
        self.sort_key = SortKey(self.settings.DEFAULT_SORT)
        self.products: list[Product] = []
        self._unsubscribe = self.store.subscribe(self.on_store_change)

    def compose(self) -> ComposeResult:
        yield Header()
        yield Container(
            Static("📦 List of Products", id="title"),
            Static("Ready", id="status"),
            cast(
                DataTable[str],
                DataTable(
                    id="products_table",
                    zebra_stripes=True,
                    cursor_type="row",
                ),
            ),
            id="main_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self._table()
        table.add_columns(
            "Name", "Count", "Weight", "Size", "Comments"
        )
        self.store.start()
        self.action_reload()

    async def on_unmount(self) -> None:
        self._unsubscribe()
        if self._owns_store:
            await self.store.close()
            await self.store.client.close()

    def _base_screen(self) -> Screen[Any]:
        """The list screen, even while a form or detail screen is on top."""
        return self.screen_stack[0]

    def _table(self) -> DataTable[str]:
        return cast(
            DataTable[str],
            self._base_screen().query_one("#products_table", DataTable),
        )

    # ── Store → view ─────────────────────────────────────

    def on_store_change(self, snapshot: StoreSnapshot) -> None:
        """Re-render from the latest store snapshot."""
        self.products = sort_products(snapshot.items, self.sort_key)
        try:
            status = self._base_screen().query_one("#status", Static)
        except (NoMatches, IndexError, KeyError):
            # Widgets already torn down (shutdown in progress)
            return
        if snapshot.status.kind is StatusKind.LOADING:
            status.update("⏳ Loading...")
        elif snapshot.status.kind is StatusKind.ERROR:
            status.update(f"❌ Error: {snapshot.status.message}")
        else:
            status.update(f"✅ {len(self.products)} products")
        self.populate_table()

    def populate_table(self) -> None:
        table = self._table()
        table.clear()
        for p in self.products:
            table.add_row(
                p.name[:60],
                str(p.count),
                p.weight,
                f"{p.size.width:g} x {p.size.height:g}",
                str(len(p.comments)),
                key=p.id,
            )

    def selected_product(self) -> Product | None:
        table = self._table()
        if 0 <= table.cursor_row < len(self.products):
            return self.products[table.cursor_row]
        return None

    # ── Actions ──────────────────────────────────────────

    def action_reload(self) -> None:
        self.store.load()

    def action_sort_name(self) -> None:
        self.sort_key = SortKey.NAME
        self.on_store_change(self.store.snapshot())

    def action_sort_count(self) -> None:
        self.sort_key = SortKey.COUNT
        self.on_store_change(self.store.snapshot())

    def action_add(self) -> None:
        def on_close(fields: dict[str, str] | None) -> None:
            if fields is None:
                return
            self.run_worker(self._await_action(
                self.store.create(build_product(fields)), "Product added"
            ))

        self.push_screen(ProductFormScreen("New Product"), on_close)

    def action_edit(self) -> None:
        product = self.selected_product()
        if product is None:
            self.notify("Select a product first", severity="warning")
            return

        def on_close(fields: dict[str, str] | None) -> None:
            if fields is None:
                return
            edited = apply_product_edit(product, fields)
            self.run_worker(self._await_action(
                self.store.update(edited), "Product saved"
            ))

        self.push_screen(
            ProductFormScreen(
                "Edit Product", product_form_values(product)
            ),
            on_close,
        )

    def action_delete(self) -> None:
        product = self.selected_product()
        if product is None:
            self.notify("Select a product first", severity="warning")
            return

        def on_close(confirmed: bool | None) -> None:
            if confirmed:
                self.run_worker(self._await_action(
                    self.store.delete(product.id), "Product deleted"
                ))

        self.push_screen(
            ConfirmScreen(
                f"Are you sure you want to delete '{product.name}'?"
            ),
            on_close,
        )

    async def _await_action(
        self,
        pending: "asyncio.Future[ActionResult]",
        success: str,
    ) -> None:
        """Wait for a store action and report how it settled."""
        result = await pending
        if result.ok:
            self.notify(success)
        else:
            logger.warning("Action failed: %s", result.error)
            self.notify(result.error or "Failed", severity="error")

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected,
    ) -> None:
        """Open the comment screen for the chosen product."""
        if event.data_table.id != "products_table":
            return
        product = self.store.find(str(event.row_key.value))
        if product is not None:
            self.push_screen(CommentsScreen(self.store, product))
