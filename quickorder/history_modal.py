"""Order history modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from quickorder.rendering import format_history_label
from quickorder.store import OrderStore


class HistoryModal(ModalScreen[None]):
    """Browse sent orders; delete one or clear them all."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "toggle_message", "Show message"),
        ("d", "delete_current", "Delete"),
        ("C", "clear_all", "Clear all"),
    ]

    CSS = """
    HistoryModal {
        align: center middle;
        background: $background 60%;
    }

    #history-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #history-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #history-body {
        color: white;
    }

    #history-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, store: OrderStore) -> None:
        super().__init__()
        self.store = store
        self.show_message = False
        self.confirm_clear = False
        self.confirm_delete = False

    def compose(self) -> ComposeResult:
        with Container(id="history-dialog"):
            yield Static("Order History", id="history-title")
            yield Static(id="history-body")
            yield Static(id="history-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        if self.show_message:
            self.show_message = False
            self._refresh_content()
            return
        self.dismiss()

    def action_move_cursor(self, delta: int) -> None:
        if not self.store.history:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.store.history)
        self.confirm_clear = False
        self.confirm_delete = False
        self._refresh_content()

    def action_toggle_message(self) -> None:
        if self.store.history:
            self.show_message = not self.show_message
        self._refresh_content()

    def action_delete_current(self) -> None:
        if not (0 <= self.cursor_index < len(self.store.history)):
            return
        if not self.confirm_delete:
            self.confirm_delete = True
            self.confirm_clear = False
            self._refresh_content()
            return
        self.confirm_delete = False
        self.store.delete_history_entry(self.store.history[self.cursor_index].id)
        self.cursor_index = min(self.cursor_index, max(0, len(self.store.history) - 1))
        self.show_message = False
        self._refresh_content()

    def action_clear_all(self) -> None:
        # Second press confirms; the clear cannot be undone.
        if not self.confirm_clear:
            self.confirm_clear = True
            self.confirm_delete = False
            self._refresh_content()
            return
        self.store.clear_history()
        self.confirm_clear = False
        self.cursor_index = 0
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#history-body", Static)
        help_text = self.query_one("#history-help", Static)

        history = self.store.history
        if not history:
            body.update("(no orders sent yet)")
            help_text.update("Esc / q close")
            return

        if self.show_message:
            entry = history[self.cursor_index]
            content = Text(style="white")
            content.append_text(format_history_label(entry))
            content.append(f"\n+{entry.vendor_phone}\n\n", style="dim")
            content.append(entry.message)
            body.update(content)
            if self.confirm_delete:
                help_text.update("Press D again to delete this order from history.")
            else:
                help_text.update("Enter / Esc back to list, D delete")
            return

        content = Text(style="white")
        for idx, entry in enumerate(history):
            if idx > 0:
                content.append("\n")
            content.append("➤ " if idx == self.cursor_index else "  ")
            content.append_text(format_history_label(entry))
        body.update(content)

        if self.confirm_delete:
            help_text.update("Press D again to delete this order from history.")
        elif self.confirm_clear:
            help_text.update("Press Shift+C again to remove all orders. This cannot be undone.")
        else:
            help_text.update("J/K move, Enter show message, D delete, Shift+C clear all, Esc close")
