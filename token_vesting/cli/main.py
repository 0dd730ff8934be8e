"""CLI entry point for the Token Vesting Ledger.

Usage:
    vesting-ledger keygen employer.json
    vesting-ledger create-mint --authority employer.json
    vesting-ledger create-vesting-account acme --mint <MINT> --owner employer.json
    vesting-ledger fund-custody acme 10000 --authority employer.json
    vesting-ledger create-employee-account acme <BENEFICIARY> --start 0 --cliff 0 --duration 100 --amount 100 --owner employer.json
    vesting-ledger claim acme --beneficiary alice.json
    vesting-ledger status acme
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from ..core.config import LedgerConfig
from ..core.exceptions import VestingError
from ..output.audit_trail import AuditTrailFormatter
from ..output.formatters import JSONFormatter, TableFormatter
from ..providers.identity import Keypair
from ..runtime import VestingRuntime

# Initialize app
app = typer.Typer(
    name="vesting-ledger",
    help="Token Vesting Ledger",
    add_completion=False,
)

console = Console()


def setup_logging(verbose: bool = False, level: str = "INFO") -> None:
    """Configure logging."""
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
        force=True,
    )


def _runtime(ctx: typer.Context) -> VestingRuntime:
    state = ctx.obj or {}
    config = state.get("config") or LedgerConfig.load()
    return VestingRuntime.open(config, state.get("state_file"))


def _fail(error: VestingError) -> None:
    console.print(f"[red]{error.kind.value}: {escape(error.message)}[/]")
    raise typer.Exit(1)


@app.callback()
def main_options(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        help="Path to a YAML config file",
    ),
    state_file: Optional[Path] = typer.Option(
        None,
        "--state-file",
        help="Ledger state file (default: <data_dir>/ledger.json)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Token Vesting Ledger: custody-backed vesting schedules and claims."""
    try:
        loaded = LedgerConfig.load(config)
    except VestingError as e:
        _fail(e)
    setup_logging(verbose, loaded.log_level)
    ctx.obj = {"config": loaded, "state_file": state_file}


@app.command()
def keygen(
    outfile: Path = typer.Argument(..., help="Where to write the keypair JSON"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Generate a new signer keypair."""
    if outfile.exists() and not force:
        console.print(f"[red]{outfile} already exists (use --force to overwrite)[/]")
        raise typer.Exit(1)

    keypair = Keypair.generate()
    keypair.save(outfile)
    console.print(f"[green]Saved keypair to {outfile}[/]")
    console.print(f"Identity: {keypair.identity}")


@app.command()
def create_mint(
    ctx: typer.Context,
    authority: Path = typer.Option(..., "--authority", "-a", help="Mint authority keypair file"),
    decimals: Optional[int] = typer.Option(None, "--decimals", "-d", help="Token decimals"),
    seed: Optional[str] = typer.Option(None, "--seed", help="Derive the mint address from this seed"),
) -> None:
    """Create a token mint in the local token program."""
    runtime = _runtime(ctx)
    try:
        mint = runtime.create_mint(Keypair.load(authority), decimals=decimals, seed=seed)
    except VestingError as e:
        _fail(e)

    console.print(f"[green]Created mint[/] {mint.address} (decimals={mint.decimals})")


@app.command()
def create_vesting_account(
    ctx: typer.Context,
    label: str = typer.Argument(..., help="Employer label (at most 32 bytes)"),
    mint: str = typer.Option(..., "--mint", "-m", help="Mint address of the vested token"),
    owner: Path = typer.Option(..., "--owner", "-o", help="Employer keypair file"),
) -> None:
    """Create a vesting account and its custody holding."""
    runtime = _runtime(ctx)
    try:
        account = runtime.create_vesting_account(Keypair.load(owner), label, mint)
    except VestingError as e:
        _fail(e)

    console.print(f"[green]Created vesting account '{account.label}'[/]")
    console.print(f"  Account: {account.address}")
    console.print(f"  Custody: {account.custody_balance_handle}")


@app.command()
def fund_custody(
    ctx: typer.Context,
    label: str = typer.Argument(..., help="Employer label"),
    amount: int = typer.Argument(..., help="Amount in smallest token units"),
    authority: Path = typer.Option(..., "--authority", "-a", help="Mint authority keypair file"),
) -> None:
    """Mint tokens into a vesting account's custody holding."""
    runtime = _runtime(ctx)
    try:
        holding = runtime.fund_custody(Keypair.load(authority), label, amount)
    except VestingError as e:
        _fail(e)

    console.print(f"[green]Custody of '{label}' now holds {holding.balance:,}[/]")


@app.command()
def create_employee_account(
    ctx: typer.Context,
    label: str = typer.Argument(..., help="Employer label"),
    beneficiary: str = typer.Argument(..., help="Beneficiary identity"),
    start: int = typer.Option(..., "--start", help="Schedule start (Unix seconds)"),
    cliff: int = typer.Option(0, "--cliff", help="Cliff duration in seconds"),
    duration: int = typer.Option(..., "--duration", help="Total vesting duration in seconds"),
    amount: int = typer.Option(..., "--amount", help="Total allocation in smallest token units"),
    owner: Path = typer.Option(..., "--owner", "-o", help="Employer keypair file"),
) -> None:
    """Bind a beneficiary to a vesting schedule."""
    runtime = _runtime(ctx)
    try:
        account = runtime.create_employee_account(
            Keypair.load(owner), label, beneficiary, start, cliff, duration, amount
        )
    except VestingError as e:
        _fail(e)

    console.print(f"[green]Created employee account[/] {account.address}")


@app.command()
def claim(
    ctx: typer.Context,
    label: str = typer.Argument(..., help="Employer label"),
    beneficiary: Path = typer.Option(..., "--beneficiary", "-b", help="Beneficiary keypair file"),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table, json"),
) -> None:
    """Claim everything vested but not yet withdrawn."""
    runtime = _runtime(ctx)
    try:
        result = runtime.claim(Keypair.load(beneficiary), label)
    except VestingError as e:
        _fail(e)

    formatter = JSONFormatter() if output.lower() == "json" else TableFormatter()
    formatted = formatter.format_claim(result)
    if output.lower() == "json":
        print(formatted)
    else:
        typer.echo(formatted, nl=False)


@app.command()
def status(
    ctx: typer.Context,
    label: str = typer.Argument(..., help="Employer label"),
    beneficiary: Optional[str] = typer.Argument(None, help="Only this beneficiary"),
    at: Optional[int] = typer.Option(None, "--at", help="Query time (Unix seconds, default: ledger clock)"),
    output: str = typer.Option("table", "--output", "-o", help="Output format: table, json"),
    save: Optional[Path] = typer.Option(None, "--save", "-s", help="Save output to file"),
) -> None:
    """Show vested, withdrawn and releasable amounts."""
    runtime = _runtime(ctx)
    try:
        account = runtime.vesting_account(label)
        if beneficiary:
            statuses = [runtime.status(label, beneficiary, now=at)]
        else:
            statuses = runtime.statuses(label, now=at)
    except VestingError as e:
        _fail(e)

    if output.lower() == "json":
        formatter = JSONFormatter()
        formatted = formatter.format_status(statuses, account)
        print(formatted)
    else:
        formatter = TableFormatter()
        formatted = formatter.format_status(statuses, account)
        typer.echo(formatted, nl=False)

    if save:
        save.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(formatter, TableFormatter):
            formatted = TableFormatter(color=False).format_status(statuses, account)
        formatter.format_to_file(formatted, str(save))
        console.print(f"[green]Saved to {save}[/]")


@app.command()
def events(
    ctx: typer.Context,
    output: str = typer.Option("text", "--output", "-o", help="Output format: text, json"),
) -> None:
    """Show the audit trail of ledger commands."""
    runtime = _runtime(ctx)
    if output.lower() == "json":
        print(JSONFormatter().format_model(runtime.events))
    else:
        console.print(AuditTrailFormatter().format_summary(runtime.events), markup=False)


@app.command()
def set_clock(
    ctx: typer.Context,
    timestamp: int = typer.Argument(..., help="Unix seconds; the clock never moves backwards"),
) -> None:
    """Pin the local ledger clock."""
    runtime = _runtime(ctx)
    try:
        runtime.set_clock(timestamp)
    except VestingError as e:
        _fail(e)

    console.print(f"[green]Ledger clock set to {timestamp}[/]")


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    console.print(f"Token Vesting Ledger v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
