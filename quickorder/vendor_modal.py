"""Vendor picker and management modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from quickorder.rendering import format_vendor_label
from quickorder.store import OrderStore, VendorNotFoundError, WriteError
from quickorder.validation import ValidationError


class VendorModal(ModalScreen[str | None]):
    """Pick the vendor to order from; also add, edit and delete vendors."""

    CSS = """
    VendorModal {
        align: center middle;
        background: $background 60%;
    }

    #vendor-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #vendor-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #vendor-body {
        color: white;
        margin-bottom: 1;
    }

    #vendor-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #vendor-help {
        color: #dddddd;
    }
    """

    def __init__(self, store: OrderStore) -> None:
        super().__init__()
        self.store = store
        self.cursor_index = 0
        # None, "add" or "edit"
        self.typing: str | None = None
        self.value = ""
        self.error = ""
        self.busy = False
        self.confirm_delete_id: str | None = None

    def compose(self) -> ComposeResult:
        with Container(id="vendor-dialog"):
            yield Static("Vendors", id="vendor-title")
            yield Static(id="vendor-body")
            yield Static(id="vendor-error")
            yield Static(id="vendor-help")

    def on_mount(self) -> None:
        current = self.store.current_vendor_id
        for idx, vendor in enumerate(self.store.vendors):
            if vendor.id == current:
                self.cursor_index = idx
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if self.typing is not None:
            self._on_typing_key(event)
            event.stop()
            return

        if event.key != "x" and self.confirm_delete_id is not None:
            self.confirm_delete_id = None
            self.error = ""
            self._refresh_content()

        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
        elif event.key in {"j", "down"}:
            self._move(1)
        elif event.key in {"k", "up"}:
            self._move(-1)
        elif event.key == "enter":
            self._choose()
        elif event.key == "a":
            self._start_typing("add", "")
        elif event.key == "e":
            vendor = self._current_vendor()
            if vendor is not None:
                self._start_typing("edit", f"{vendor.name} {vendor.phone}")
        elif event.key == "x":
            vendor = self._current_vendor()
            if vendor is not None and not self.busy:
                self._request_delete(vendor)
        else:
            return
        event.stop()

    def _on_typing_key(self, event: Key) -> None:
        if event.key == "escape":
            self.typing = None
            self.value = ""
            self.error = ""
        elif event.key == "enter":
            self._submit_typed()
            return
        elif event.key == "backspace":
            self.value = self.value[:-1]
        elif event.is_printable and event.character:
            self.value += event.character
        self._refresh_content()

    def _request_delete(self, vendor) -> None:
        if self.confirm_delete_id != vendor.id:
            self.confirm_delete_id = vendor.id
            self.error = f"Press X again to delete \"{vendor.name}\" with its items and orders."
            self._refresh_content()
            return
        self.confirm_delete_id = None
        self.run_worker(self._delete(vendor.id), group="vendor-write")

    def _start_typing(self, mode: str, initial: str) -> None:
        self.typing = mode
        self.value = initial
        self.error = ""
        self._refresh_content()

    def _move(self, delta: int) -> None:
        if not self.store.vendors:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.store.vendors)
        self._refresh_content()

    def _current_vendor(self):
        if not (0 <= self.cursor_index < len(self.store.vendors)):
            return None
        return self.store.vendors[self.cursor_index]

    def _choose(self) -> None:
        vendor = self._current_vendor()
        if vendor is None:
            self.error = "Please choose a vendor to send your order to."
            self._refresh_content()
            return
        self.dismiss(vendor.id)

    def _submit_typed(self) -> None:
        if self.busy:
            return
        name, _, phone = self.value.strip().rpartition(" ")
        if self.typing == "edit":
            vendor = self._current_vendor()
            if vendor is None:
                self.typing = None
                self._refresh_content()
                return
            self.run_worker(self._edit(vendor.id, name, phone), group="vendor-write")
        else:
            self.run_worker(self._add(name, phone), group="vendor-write")

    async def _add(self, name: str, phone: str) -> None:
        await self._run_write(lambda: self.store.create_vendor(name, phone), "Vendor added")
        if not self.error:
            self.cursor_index = len(self.store.vendors) - 1
            self._refresh_content()

    async def _edit(self, vendor_id: str, name: str, phone: str) -> None:
        await self._run_write(lambda: self.store.edit_vendor(vendor_id, name, phone), "Vendor updated")

    async def _delete(self, vendor_id: str) -> None:
        await self._run_write(lambda: self.store.delete_vendor(vendor_id), "Vendor deleted")
        self.cursor_index = min(self.cursor_index, max(0, len(self.store.vendors) - 1))
        self._refresh_content()

    async def _run_write(self, write, success: str) -> None:
        self.busy = True
        self.error = "Saving..."
        self._refresh_content()
        try:
            await write()
        except ValidationError as exc:
            self.error = str(exc)
        except (WriteError, VendorNotFoundError) as exc:
            self.error = f"Not saved: {exc}"
            self.typing = None
        else:
            self.error = success
            self.typing = None
            self.value = ""
        finally:
            self.busy = False
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#vendor-body", Static)
        error_widget = self.query_one("#vendor-error", Static)
        help_widget = self.query_one("#vendor-help", Static)

        content = Text(style="white")
        if not self.store.vendors:
            content.append("(no vendors yet, press A to add one)")
        for idx, vendor in enumerate(self.store.vendors):
            if idx > 0:
                content.append("\n")
            content.append("➤ " if idx == self.cursor_index else "  ")
            content.append_text(format_vendor_label(vendor))

        if self.typing is not None:
            label = "New vendor" if self.typing == "add" else "Edit vendor"
            content.append(f"\n\n{label} (name phone): {self.value}|", style="bold white")
            help_widget.update("Type name then phone digits. Enter save, Esc cancel.")
        else:
            help_widget.update("J/K/↑/↓ move, Enter choose, A add, E edit, X delete, Esc/q close")

        body.update(content)
        error_widget.update(self.error or "")
