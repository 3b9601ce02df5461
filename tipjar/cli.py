"""CLI entry point for the Base tip jar.

Usage:
    tipjar resolve vitalik.base.eth
    tipjar resolve @dwr --output json
    tipjar send @dwr --amount 0.004
    tipjar presets
"""

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from .core.config import TipJarConfig, get_config
from .core.exceptions import InvalidAmountError, TipJarError
from .core.models import SubmissionReceipt
from .core.types import LifecycleState
from .orchestrator import SubmissionOrchestrator
from .output.formatters import JSONFormatter, TableFormatter, format_event, format_receipt
from .resolution import RecipientResolver, ResolutionSession
from .transaction import DEFAULT_AMOUNT, build_call, negotiate_sponsorship, parse_amount
from .wallet import LocalAccountWallet, WalletBackend, WalletRpcWallet

# Initialize app
app = typer.Typer(
    name="tipjar",
    help="Send small ETH tips on Base to an address, Basename or Farcaster user",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
    )


def build_wallet(config: TipJarConfig) -> Optional[WalletBackend]:
    """Pick a wallet backend: an EIP-5792 wallet first, then a local key."""
    if config.wallet_rpc_url:
        return WalletRpcWallet(rpc_url=config.wallet_rpc_url)
    if config.private_key:
        return LocalAccountWallet(private_key=config.private_key, rpc_url=config.rpc_url)
    return None


@app.command()
def resolve(
    recipient: str = typer.Argument(..., help="Address, name.base.eth, or @farcaster handle"),
    output: str = typer.Option(
        "table",
        "--output", "-o",
        help="Output format: table, json",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Resolve a recipient to a checksummed address.

    Examples:
        tipjar resolve 0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045
        tipjar resolve jesse.base.eth
    """
    setup_logging(verbose)
    resolver = RecipientResolver(config=get_config())
    result = asyncio.run(resolver.resolve(recipient))

    if output.lower() == "json":
        print(JSONFormatter().format(result))
    else:
        console.print(TableFormatter().format(result))

    if not result.is_resolved:
        raise typer.Exit(1)


async def _send(
    recipient: str,
    amount: str,
    assume_yes: bool,
    config: TipJarConfig,
    wallet: WalletBackend,
) -> LifecycleState:
    formatter = TableFormatter()

    session = ResolutionSession(RecipientResolver(config=config), config.debounce_seconds)
    with console.status(f"Resolving {recipient}..."):
        resolution = await session.resolve_now(recipient)
    session.close()

    console.print(formatter.format(resolution))
    if not resolution.is_resolved:
        return LifecycleState.IDLE

    call = build_call(resolution.address, amount)
    if call is None:
        console.print("[red]Cannot build a transfer with these inputs[/]")
        return LifecycleState.IDLE

    def celebrate(receipt: SubmissionReceipt) -> None:
        console.print("\n[bold green]Tip Sent! 🎉[/]")
        console.print(format_receipt(receipt))

    orchestrator = SubmissionOrchestrator(
        wallet,
        required_chain_id=config.chain_id,
        on_success=celebrate,
    )

    if not await orchestrator.ensure_network():
        console.print(f"[red]Switch your wallet to chain {config.chain_id} and try again[/]")
        return LifecycleState.IDLE

    capability = negotiate_sponsorship(config.paymaster_url)
    sponsored = capability is not None and wallet.SUPPORTS_SPONSORSHIP
    console.print(formatter.format_call(call, sponsored=sponsored))

    if not assume_yes and not typer.confirm("Send Support ⚡?"):
        console.print("Cancelled")
        return LifecycleState.IDLE

    return await orchestrator.run(
        call,
        capability,
        on_event=lambda event: console.print(format_event(event)),
    )


@app.command()
def send(
    recipient: str = typer.Argument(..., help="Address, name.base.eth, or @farcaster handle"),
    amount: str = typer.Option(
        DEFAULT_AMOUNT,
        "--amount", "-a",
        help="Amount in ETH (see `tipjar presets`)",
    ),
    yes: bool = typer.Option(
        False,
        "--yes", "-y",
        help="Do not ask for confirmation",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Resolve a recipient and send them a tip.

    Examples:
        tipjar send @dwr
        tipjar send jesse.base.eth --amount 0.01 --yes
    """
    setup_logging(verbose)

    try:
        parse_amount(amount)
    except InvalidAmountError as e:
        console.print(f"[red]{e.message}[/]")
        raise typer.Exit(1)

    config = get_config()
    wallet = build_wallet(config)
    if wallet is None:
        console.print("[red]No wallet configured. Set WALLET_RPC_URL or TIPJAR_PRIVATE_KEY.[/]")
        raise typer.Exit(1)

    try:
        final_state = asyncio.run(_send(recipient, amount, yes, config, wallet))
    except TipJarError as e:
        console.print(f"[red]Error: {e.message}[/]")
        raise typer.Exit(1)

    if final_state != LifecycleState.SUCCESS:
        raise typer.Exit(1)


@app.command()
def presets() -> None:
    """List the suggested tip amounts."""
    console.print(TableFormatter().format_presets())


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
