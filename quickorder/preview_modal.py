"""Order preview modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from quickorder.messages import generate_order_message
from quickorder.models import Vendor
from quickorder.store import OrderStore


class PreviewModal(ModalScreen[bool]):
    """Show the exact message that will be sent; Enter sends, Esc goes back."""

    BINDINGS = [
        ("escape", "back", "Back"),
        ("q", "back", "Back"),
        ("ctrl+c", "back", "Back"),
        ("enter", "send", "Send"),
    ]

    CSS = """
    PreviewModal {
        align: center middle;
        background: $background 60%;
    }

    #preview-dialog {
        width: 72;
        height: auto;
        max-height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #preview-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #preview-body {
        margin-bottom: 1;
        color: white;
    }

    #preview-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, store: OrderStore, vendor: Vendor | None) -> None:
        super().__init__()
        self.store = store
        self.vendor = vendor

    def compose(self) -> ComposeResult:
        with Container(id="preview-dialog"):
            yield Static("Order Preview", id="preview-title")
            yield Static(id="preview-body")
            yield Static(id="preview-help")

    def on_mount(self) -> None:
        body = self.query_one("#preview-body", Static)
        help_text = self.query_one("#preview-help", Static)

        if self.vendor is None:
            body.update(Text("Vendor not found", style="bold #ffb3b3"))
            help_text.update("Esc / q to go back")
            return

        message = generate_order_message(self.store.items, self.vendor.name, self.store.restaurant_name)
        content = Text(style="white")
        content.append(f"To {self.vendor.name} (+{self.vendor.phone})\n\n", style="bold white")
        content.append(message)
        body.update(content)
        help_text.update("Enter send via WhatsApp, Esc / q back")

    def action_back(self) -> None:
        self.dismiss(False)

    def action_send(self) -> None:
        if self.vendor is None:
            return
        self.dismiss(True)
