"""Output formatters for resolution results and submission progress."""

import json
from abc import ABC, abstractmethod
from typing import Any

from rich.table import Table

from ..core.models import LifecycleEvent, ResolutionResult, SubmissionReceipt, TransferCall
from ..core.types import LifecycleState
from ..transaction.calls import AMOUNT_PRESETS, format_ether

BASESCAN_TX_URL = "https://basescan.org/tx/"

_STATE_STYLES = {
    LifecycleState.IDLE: ("dim", "Ready"),
    LifecycleState.BUILDING: ("cyan", "Building transaction..."),
    LifecycleState.PENDING: ("yellow", "Waiting for confirmation..."),
    LifecycleState.SUCCESS: ("bold green", "Tip sent!"),
    LifecycleState.ERROR: ("bold red", "Failed"),
}


def short_address(address: str | None) -> str:
    """0xd8dA6B...A96045 style abbreviation."""
    if not address:
        return "Waiting..."
    return f"{address[:8]}...{address[-6:]}"


class OutputFormatter(ABC):
    """Base class for resolution output formatters."""

    @abstractmethod
    def format(self, result: ResolutionResult) -> Any:
        """Format a resolution result."""
        pass


class JSONFormatter(OutputFormatter):
    """Formats results as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format(self, result: ResolutionResult) -> str:
        return json.dumps(result.model_dump(mode="json"), indent=self.indent)


class TableFormatter(OutputFormatter):
    """Formats results as rich tables for CLI output."""

    def format(self, result: ResolutionResult) -> Table:
        table = Table(title=f"Recipient: {result.query.strip() or '-'}", show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")

        table.add_row("Type", result.kind.display_name)
        if result.is_resolved:
            table.add_row("Address", f"[green]{result.address}[/]")
        elif result.error:
            table.add_row("Error", f"[red]{result.error}[/]")
        else:
            table.add_row("Address", "[dim]no input yet[/]")

        if result.display_name:
            table.add_row("Name", result.display_name)
        if result.avatar_url:
            table.add_row("Avatar", result.avatar_url)
        return table

    def format_call(self, call: TransferCall, sponsored: bool) -> Table:
        """Summary shown before the user confirms a submission."""
        table = Table(title="Send Support", show_header=False)
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("Amount", f"{format_ether(call.value_wei)} ETH")
        table.add_row("Recipient", short_address(call.to))
        table.add_row("Gas", "sponsored" if sponsored else "paid by sender")
        return table

    def format_presets(self) -> Table:
        table = Table(title="Amount presets")
        table.add_column("ETH", justify="right")
        table.add_column("About")
        for value, label in AMOUNT_PRESETS:
            table.add_row(value, label)
        return table


def format_event(event: LifecycleEvent) -> str:
    """One rich-markup line per lifecycle transition."""
    style, label = _STATE_STYLES[event.state]
    line = f"[{style}]{label}[/]"
    if event.state == LifecycleState.ERROR and event.message:
        line += f" {event.message}"
    elif event.state == LifecycleState.PENDING and event.tx_hash:
        line += f" [dim]{event.tx_hash}[/]"
    return line


def format_receipt(receipt: SubmissionReceipt) -> str:
    url = f"{BASESCAN_TX_URL}{receipt.tx_hash}"
    sponsored = " (gas sponsored)" if receipt.sponsored else ""
    return f"Your support has been delivered over Base{sponsored}.\n{url}"
