"""Output formatters for ledger views.

Provides two output formats:
- JSON: Machine-readable, complete data
- Table: Human-readable CLI output
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from io import StringIO

from pydantic import BaseModel
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.models import ClaimResult, EmployeeStatus, VestingAccount
from ..core.types import ClaimStatus, Timestamp, VestingPhase

logger = logging.getLogger(__name__)


def format_timestamp(ts: Timestamp) -> str:
    """Render a Unix timestamp as UTC, falling back to the raw number."""
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
    except (OverflowError, OSError, ValueError):
        return str(ts)


def short(value: str, width: int = 12) -> str:
    """Abbreviate a long hex identifier."""
    return value if len(value) <= width else f"{value[:width]}…"


class OutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def format_status(self, statuses: list[EmployeeStatus], account: VestingAccount | None = None) -> str:
        pass

    @abstractmethod
    def format_claim(self, result: ClaimResult) -> str:
        pass

    def format_to_file(self, content: str, filepath: str) -> None:
        """Write formatted output to a file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(content)


class JSONFormatter(OutputFormatter):
    """Formats views as JSON."""

    def __init__(self, indent: int = 2):
        self.indent = indent

    def format_model(self, model: BaseModel | list[BaseModel]) -> str:
        if isinstance(model, list):
            data = [m.model_dump(mode="json") for m in model]
        else:
            data = model.model_dump(mode="json")
        return json.dumps(data, indent=self.indent)

    def format_status(self, statuses: list[EmployeeStatus], account: VestingAccount | None = None) -> str:
        data = {
            "vesting_account": account.model_dump(mode="json") if account else None,
            "employees": [s.model_dump(mode="json") for s in statuses],
        }
        return json.dumps(data, indent=self.indent)

    def format_claim(self, result: ClaimResult) -> str:
        return self.format_model(result)


class TableFormatter(OutputFormatter):
    """Formats views as rich tables."""

    PHASE_STYLES = {
        VestingPhase.CREATED: "dim",
        VestingPhase.PARTIALLY_VESTED: "yellow",
        VestingPhase.FULLY_VESTED: "green",
    }

    def __init__(self, width: int = 110, color: bool = True):
        """
        Initialize table formatter.

        Args:
            width: Console width used for rendering
            color: Emit ANSI styling (disable for files)
        """
        self.width = width
        self.color = color

    def _console(self, output: StringIO) -> Console:
        return Console(file=output, force_terminal=self.color, no_color=not self.color, width=self.width)

    def format_status(self, statuses: list[EmployeeStatus], account: VestingAccount | None = None) -> str:
        output = StringIO()
        console = self._console(output)

        if account:
            console.print(Panel(
                f"[bold cyan]{account.label}[/]\n"
                f"[dim]Account: {account.address}[/]\n"
                f"[dim]Owner:   {account.owner}[/]\n"
                f"[dim]Mint:    {account.token_mint}[/]",
                title="Vesting Account",
                expand=False,
            ))

        if not statuses:
            console.print("[yellow]No employee accounts[/]")
            return output.getvalue()

        table = Table(title=f"Employee Vesting (as of {format_timestamp(statuses[0].as_of)})")
        table.add_column("Beneficiary", style="cyan")
        table.add_column("Allocated", justify="right")
        table.add_column("Vested", justify="right", style="green")
        table.add_column("Withdrawn", justify="right")
        table.add_column("Releasable", justify="right", style="bold green")
        table.add_column("Cliff", style="dim")
        table.add_column("End", style="dim")
        table.add_column("Phase")

        for s in statuses:
            style = self.PHASE_STYLES.get(s.phase, "")
            table.add_row(
                short(s.beneficiary),
                f"{s.total_allocated:,}",
                f"{s.vested:,}",
                f"{s.total_withdrawn:,}",
                f"{s.releasable:,}",
                format_timestamp(s.cliff_time),
                format_timestamp(s.end_time),
                f"[{style}]{s.phase.display_name}[/]" if style else s.phase.display_name,
            )

        if len(statuses) > 1:
            table.add_row("", "", "", "", "", "", "", "", end_section=True)
            table.add_row(
                "[bold]TOTAL[/]",
                f"[bold]{sum(s.total_allocated for s in statuses):,}[/]",
                f"{sum(s.vested for s in statuses):,}",
                f"{sum(s.total_withdrawn for s in statuses):,}",
                f"{sum(s.releasable for s in statuses):,}",
                "",
                "",
                "",
            )

        console.print(table)
        return output.getvalue()

    def format_claim(self, result: ClaimResult) -> str:
        output = StringIO()
        console = self._console(output)

        if result.status == ClaimStatus.NOTHING_TO_CLAIM:
            console.print(
                f"[yellow]Nothing to claim[/] for {short(result.beneficiary)} "
                f"(vested {result.vested:,}, withdrawn {result.total_withdrawn:,})"
            )
            return output.getvalue()

        table = Table(title="Claim", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Amount", f"{result.amount:,}")
        table.add_row("Beneficiary", result.beneficiary)
        table.add_row("Employee account", result.employee_account)
        table.add_row("Vested", f"{result.vested:,}")
        table.add_row("Total withdrawn", f"{result.total_withdrawn:,}")
        table.add_row("Ledger time", format_timestamp(result.claimed_at))
        console.print(table)
        return output.getvalue()
