# catalog_sync/ui/screens.py

"""Modal forms and the comment screen used by the catalog TUI."""

import logging
from typing import cast

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Input,
    Label,
    Static,
)

from catalog_sync.forms.product_form import (
    PRODUCT_FIELDS,
    parse_comment_text,
    parse_product_form,
)
from catalog_sync.models.comment import Comment, CommentDraft
from catalog_sync.models.errors import ValidationError
from catalog_sync.models.product import Product
from catalog_sync.services.product_store import ProductStore

logger = logging.getLogger("catalog_sync.ui")


class ProductFormScreen(ModalScreen[dict[str, str] | None]):
    """Add/edit form; dismisses with the raw values once they validate."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(
        self, title: str, values: dict[str, str] | None = None,
    ) -> None:
        super().__init__()
        self.form_title = title
        self.values = values or {}

    def compose(self) -> ComposeResult:
        inputs = [
            Input(
                value=self.values.get(name, ""),
                placeholder=label,
                id=f"field_{name}",
            )
            for name, label in PRODUCT_FIELDS.items()
        ]
        yield Vertical(
            Label(self.form_title, id="form_title"),
            *inputs,
            Static("", id="form_errors"),
            Horizontal(
                Button("Cancel", id="cancel_btn"),
                Button("Save", variant="success", id="save_btn"),
                id="form_buttons",
            ),
            id="form_dialog",
        )

    def collect(self) -> dict[str, str]:
        """Read the current raw input values."""
        return {
            name: self.query_one(f"#field_{name}", Input).value
            for name in PRODUCT_FIELDS
        }

    def submit(self) -> None:
        fields = self.collect()
        try:
            parse_product_form(fields)
        except ValidationError as exc:
            self.query_one("#form_errors", Static).update(
                "\n".join(exc.errors.values())
            )
            return
        self.dismiss(fields)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "save_btn":
            self.submit()
        elif event.button.id == "cancel_btn":
            self.dismiss(None)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.submit()

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmScreen(ModalScreen[bool]):
    """Yes/no confirmation dialog."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(self.message, id="confirm_message"),
            Horizontal(
                Button("Cancel", id="cancel_btn"),
                Button("Delete", variant="error", id="confirm_btn"),
                id="form_buttons",
            ),
            id="confirm_dialog",
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm_btn")

    def action_cancel(self) -> None:
        self.dismiss(False)


class CommentsScreen(Screen[None]):
    """Product detail: its comments, with add and delete."""

    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("d", "delete_comment", "Delete comment"),
    ]

    def __init__(self, store: ProductStore, product: Product) -> None:
        super().__init__()
        self.store = store
        self.product = product
        self.comments: list[Comment] = []

    def compose(self) -> ComposeResult:
        p = self.product
        yield Vertical(
            Label(p.name, id="detail_title"),
            Static(
                f"Amount: {p.count}   Weight: {p.weight}   "
                f"Width x Height: {p.size.width:g} x {p.size.height:g}\n"
                f"Image: {p.image_url}",
                id="detail_info",
            ),
            cast(
                DataTable[str],
                DataTable(id="comments_table", cursor_type="row"),
            ),
            Horizontal(
                Input(placeholder="New comment", id="comment_input"),
                Button("Add", variant="success", id="add_comment_btn"),
                id="comment_bar",
            ),
            id="detail_container",
        )
        yield Footer()

    def on_mount(self) -> None:
        table = self._table()
        table.add_columns("Date", "Comment")
        self.run_worker(self.load_comments(), exclusive=True)

    def _table(self) -> DataTable[str]:
        return cast(
            DataTable[str], self.query_one("#comments_table", DataTable)
        )

    def populate_table(self) -> None:
        table = self._table()
        table.clear()
        for c in self.comments:
            table.add_row(c.date, c.description, key=c.id)

    async def load_comments(self) -> None:
        result = await self.store.fetch_comments(self.product.id)
        if not result.ok:
            self.notify(result.error or "Failed", severity="error")
            return
        self.comments = list(result.value)
        self.populate_table()

    async def add_comment(self) -> None:
        comment_input = self.query_one("#comment_input", Input)
        try:
            description = parse_comment_text(comment_input.value)
        except ValidationError:
            self.notify("Comment is required", severity="warning")
            return
        result = await self.store.add_comment(
            self.product.id, CommentDraft(description)
        )
        if not result.ok:
            self.notify(result.error or "Failed", severity="error")
            return
        self.comments.append(result.value)
        comment_input.value = ""
        self.populate_table()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "add_comment_btn":
            await self.add_comment()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "comment_input":
            await self.add_comment()

    def on_data_table_row_selected(
        self, event: DataTable.RowSelected,
    ) -> None:
        # Keep comment selection from opening product screens
        event.stop()

    async def action_delete_comment(self) -> None:
        table = self._table()
        if not self.comments or table.cursor_row >= len(self.comments):
            return
        comment = self.comments[table.cursor_row]
        result = await self.store.delete_comment(
            self.product.id, comment.id
        )
        if not result.ok:
            self.notify(result.error or "Failed", severity="error")
            return
        self.comments = [c for c in self.comments if c.id != comment.id]
        self.populate_table()

    def action_back(self) -> None:
        self.app.pop_screen()
