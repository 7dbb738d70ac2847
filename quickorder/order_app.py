"""Main Textual app class."""

from __future__ import annotations

import logging
import webbrowser
from typing import Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.timer import Timer
from textual.widgets import Header, Static

from quickorder.api import ApiClient
from quickorder.cache import LocalCache
from quickorder.config import HEALTH_POLL_SECONDS
from quickorder.constant import CATEGORIES, DEFAULT_CATEGORY, DEFAULT_UNIT, UNITS
from quickorder.history import SendError, send_order
from quickorder.history_modal import HistoryModal
from quickorder.messages import format_money, order_total
from quickorder.models import CatalogItem
from quickorder.preview_modal import PreviewModal
from quickorder.rendering import format_item_label, format_source_note
from quickorder.store import OrderStore, VendorNotFoundError
from quickorder.validation import ValidationError, validate_item, validate_restaurant_name
from quickorder.vendor_modal import VendorModal

logger = logging.getLogger(__name__)

QUANTITY_STEP = 0.5


class QuickOrderApp(App):
    """A Textual app for composing grocery orders and sending them to vendors."""

    TITLE = "Quick Order"
    SUB_TITLE = "Grocery orders over WhatsApp"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #items-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #order-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #status-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 6;
    }

    #items-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #summary {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    input_text = reactive("")
    item_selected_index = reactive(None)

    BINDINGS = [
        ("up", "move_selection(-1)", "Previous item"),
        ("down", "move_selection(1)", "Next item"),
        ("enter", "confirm_input", "Toggle / confirm"),
        ("backspace", "backspace_query", "Delete char"),
        Binding("ctrl+s", "preview_order", "Preview + Send", priority=True),
        ("ctrl+c", "cancel_input", "Exit input"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        store: OrderStore | None = None,
        open_url: Callable[[str], bool] = webbrowser.open,
    ) -> None:
        super().__init__()
        self.store = store or OrderStore(ApiClient(), LocalCache())
        self.open_url = open_url
        self.system_status = ""
        self.online: bool | None = None
        self._health_timer: Timer | None = None
        self.category_filter: str | None = None
        self._pending_remove_id: str | None = None
        self.store.add_listener(self._refresh_all)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="items-pane"):
                yield Static("Items", classes="pane-title", id="items-title")
                yield Static("(choose a vendor with V)", id="items-list")
            with Vertical(id="order-pane"):
                yield Static(id="status-bar")
                yield Static(id="summary")

    def on_mount(self) -> None:
        self.system_status = "Loading..."
        self._refresh_all()
        self.run_worker(self._startup(), exclusive=True, group="startup")
        self._health_timer = self.set_interval(HEALTH_POLL_SECONDS, self._check_health)

    async def on_unmount(self) -> None:
        if self._health_timer is not None:
            self._health_timer.stop()
            self._health_timer = None
        await self.store.close()

    async def _startup(self) -> None:
        await self.store.load()
        await self._check_health()
        self.system_status = format_source_note(self.store.sources.get("vendors")) or "Ready"
        self._refresh_all()
        if self.store.current_vendor_id is None and self.store.vendors:
            self.action_choose_vendor()

    async def _check_health(self) -> None:
        online = await self.store.api.check_health()
        if online != self.online:
            logger.info("connectivity online=%s", online)
        self.online = online
        self._refresh_status()

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if not event.is_printable or not event.character:
            return

        if self.input_state != "normal":
            self.input_text += event.character
            self.item_selected_index = 0 if self._visible_items() else None
            self._refresh_all()
            event.stop()
            return

        key = event.character
        if key != "d":
            self._pending_remove_id = None
        handlers: dict[str, Callable[[], None]] = {
            "j": lambda: self.action_move_selection(1),
            "k": lambda: self.action_move_selection(-1),
            " ": self._toggle_current,
            "+": lambda: self._step_quantity(QUANTITY_STEP),
            "=": lambda: self._step_quantity(QUANTITY_STEP),
            "-": lambda: self._step_quantity(-QUANTITY_STEP),
            "u": self._cycle_unit,
            "a": self.store.select_all,
            "x": self.store.deselect_all,
            "d": self._remove_current,
            "v": self.action_choose_vendor,
            "p": self.action_preview_order,
            "h": self.action_show_history,
            "r": self.action_refresh,
            "/": lambda: self._enter_input("search"),
            "n": lambda: self._enter_input("new_item"),
            "s": lambda: self._enter_input("rename"),
            "c": self._cycle_category,
        }
        handler = handlers.get(key)
        if handler is None:
            return
        handler()
        event.stop()

    def _enter_input(self, state: str) -> None:
        self.input_state = state
        self.input_text = ""
        self._refresh_all()

    def action_cancel_input(self) -> None:
        if self.input_state == "normal":
            return
        self.input_state = "normal"
        self.input_text = ""
        self._refresh_all()

    def action_backspace_query(self) -> None:
        if self.input_state == "normal" or not self.input_text:
            return
        self.input_text = self.input_text[:-1]
        self._refresh_all()

    def action_confirm_input(self) -> None:
        if self.input_state == "new_item":
            self._add_item_from_query()
            return
        if self.input_state == "rename":
            self._rename_from_query()
            return
        if self.input_state == "search":
            current = self._current_item()
            self.input_state = "normal"
            self.input_text = ""
            if current is not None:
                self.item_selected_index = self._visible_items().index(current)
            self._refresh_all()
            return
        self._toggle_current()

    def action_move_selection(self, delta: int) -> None:
        items = self._visible_items()
        if not items:
            self.item_selected_index = None
            return
        if self.item_selected_index is None:
            self.item_selected_index = 0 if delta > 0 else len(items) - 1
        else:
            self.item_selected_index = (self.item_selected_index + delta) % len(items)
        self._refresh_items()

    def action_refresh(self) -> None:
        self.system_status = "Refreshing..."
        self._refresh_status()
        self.run_worker(self._refresh(), exclusive=True, group="refresh")

    async def _refresh(self) -> None:
        await self.store.refresh_data()
        if self.store.current_vendor_id is not None:
            await self.store.load_vendor_items(self.store.current_vendor_id)
        self.system_status = format_source_note(self.store.sources.get("vendors")) or "Up to date"
        self._refresh_status()

    def action_choose_vendor(self) -> None:
        self.push_screen(VendorModal(self.store), self._on_vendor_chosen)

    def _on_vendor_chosen(self, vendor_id: str | None) -> None:
        if vendor_id is None:
            return
        self.system_status = "Loading items..."
        self._refresh_status()
        self.run_worker(self._load_items(vendor_id), exclusive=True, group="items")

    async def _load_items(self, vendor_id: str) -> None:
        await self.store.load_vendor_items(vendor_id)
        self.item_selected_index = 0 if self.store.items else None
        self.system_status = format_source_note(self.store.sources.get("items")) or "Ready"
        self._refresh_all()

    def action_preview_order(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if not self.store.selected_items():
            self.system_status = "Nothing selected"
            self._refresh_status()
            return
        vendor = self.store.find_vendor(self.store.current_vendor_id)
        self.push_screen(PreviewModal(self.store, vendor), self._on_preview_closed)

    def _on_preview_closed(self, send: bool | None) -> None:
        if not send:
            return
        self.run_worker(self._send(), group="send")

    async def _send(self) -> None:
        vendor = self.store.find_vendor(self.store.current_vendor_id)
        try:
            result = await send_order(self.store, vendor, self.open_url)
        except (VendorNotFoundError, SendError) as exc:
            self.system_status = str(exc)
            self._refresh_status()
            return
        if result is None:
            self.system_status = "Nothing selected"
        elif result.recorded_remotely:
            self.system_status = f"Sent to {vendor.name}"
        else:
            self.system_status = f"Sent to {vendor.name} (saved locally only)"
        self._refresh_all()

    def action_show_history(self) -> None:
        self.push_screen(HistoryModal(self.store))

    def _current_item(self) -> CatalogItem | None:
        items = self._visible_items()
        if self.item_selected_index is None:
            return None
        if not (0 <= self.item_selected_index < len(items)):
            return None
        return items[self.item_selected_index]

    def _toggle_current(self) -> None:
        item = self._current_item()
        if item is not None:
            self.store.toggle_selection(item.id)

    def _step_quantity(self, delta: float) -> None:
        item = self._current_item()
        if item is not None:
            self.store.set_quantity(item.id, item.quantity + delta)

    def _cycle_unit(self) -> None:
        item = self._current_item()
        if item is None:
            return
        idx = UNITS.index(item.unit) if item.unit in UNITS else -1
        self.store.set_unit(item.id, UNITS[(idx + 1) % len(UNITS)])

    def _cycle_category(self) -> None:
        choices = [None, *CATEGORIES]
        idx = choices.index(self.category_filter) if self.category_filter in choices else 0
        self.category_filter = choices[(idx + 1) % len(choices)]
        self.item_selected_index = 0 if self._visible_items() else None
        self._refresh_all()

    def _remove_current(self) -> None:
        item = self._current_item()
        if item is None:
            return
        if self._pending_remove_id != item.id:
            # Second press removes.
            self._pending_remove_id = item.id
            self.system_status = f"Press D again to remove \"{item.name}\""
            self._refresh_status()
            return
        self._pending_remove_id = None
        self.system_status = f"Removed {item.name}"
        self.store.remove_item(item.id)
        if not self._visible_items():
            self.item_selected_index = None

    def _add_item_from_query(self) -> None:
        tokens = self.input_text.split()
        unit = DEFAULT_UNIT
        if len(tokens) > 1 and tokens[-1] in UNITS:
            unit = tokens.pop()
        try:
            name, unit, category = validate_item(" ".join(tokens), unit, DEFAULT_CATEGORY)
        except ValidationError as exc:
            self.system_status = str(exc)
            self._refresh_status()
            return
        self.input_state = "normal"
        self.input_text = ""
        self.store.add_item(name, unit, category)
        self.item_selected_index = len(self._visible_items()) - 1
        self.system_status = f"Added {name}"
        self._refresh_all()

    def _rename_from_query(self) -> None:
        try:
            name = validate_restaurant_name(self.input_text)
        except ValidationError as exc:
            self.system_status = str(exc)
            self._refresh_status()
            return
        self.input_state = "normal"
        self.input_text = ""
        self.system_status = "Restaurant name saved"
        self.store.update_restaurant_name(name)

    def _visible_items(self) -> list[CatalogItem]:
        items = self.store.items
        if self.category_filter is not None:
            items = [item for item in items if item.category == self.category_filter]
        if self.input_state != "search" or not self.input_text:
            return items
        q = self.input_text.lower()
        return [item for item in items if q in item.name.lower()]

    def _refresh_all(self) -> None:
        self._refresh_items()
        self._refresh_status()
        self._refresh_summary()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        start = 0 if selected is None else max(0, min(selected - rows // 2, total - rows))
        return (start, start + rows)

    def _refresh_items(self) -> None:
        try:
            items_widget = self.query_one("#items-list", Static)
            title = self.query_one("#items-title", Static)
        except NoMatches:
            return

        vendor = self.store.find_vendor(self.store.current_vendor_id)
        title.update(f"Items for {vendor.name}" if vendor else "Items")

        items = self._visible_items()
        if not items:
            self.item_selected_index = None
            items_widget.update("(no items)" if vendor else "(choose a vendor with V)")
            return

        if self.item_selected_index is None or self.item_selected_index >= len(items):
            self.item_selected_index = min(self.item_selected_index or 0, len(items) - 1)

        start, end = self._window_bounds(len(items), self._visible_rows(items_widget), self.item_selected_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            lines.append("➤ " if idx == self.item_selected_index else "  ")
            lines.append_text(format_item_label(items[idx]))
        if end < len(items):
            lines.append("\n⋮", style="dim")
        items_widget.update(lines)

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return

        text = Text()
        if self.online is True:
            text.append("● online", style="green")
        elif self.online is False:
            text.append("● offline", style="red")
        else:
            text.append("● checking", style="dim")
        text.append(f"  {self.store.restaurant_name}")
        text.append(f"  [{self.category_filter or 'All'}]\n", style="dim")

        if self.input_state == "search":
            text.append(f"Search: {self.input_text}|")
        elif self.input_state == "new_item":
            text.append(f"New item (name [unit]): {self.input_text}|")
        elif self.input_state == "rename":
            text.append(f"Restaurant name: {self.input_text}|")
        else:
            text.append("Space toggle, +/- qty, U unit, C category, V vendor, S shop name, P send, H history\n", style="dim")
            text.append(self.system_status or "Ready")
        bar.update(text)

    def _refresh_summary(self) -> None:
        try:
            summary = self.query_one("#summary", Static)
        except NoMatches:
            return

        selected = self.store.selected_items()
        if not selected:
            summary.update("(nothing selected)")
            return

        text = Text()
        text.append(f"{len(selected)} selected\n\n", style="bold")
        for item in selected:
            text.append(f"• {item.name}\n")
        text.append(f"\nTotal {format_money(order_total(selected))}", style="bold")
        summary.update(text)
