"""Audit trail formatter.

Renders the ledger's command history:
- every command with its actor and ledger time
- amounts moved
- rejected commands with their error kind
"""

import logging
from collections import Counter

from ..core.models import LedgerEvent
from ..core.types import CommandAction
from .formatters import format_timestamp, short

logger = logging.getLogger(__name__)


class AuditTrailFormatter:
    """Formats audit trail information for transparency."""

    def format_summary(self, events: list[LedgerEvent]) -> str:
        """
        Format a summary of the audit trail.

        Args:
            events: Ledger events in the order they were recorded

        Returns:
            Formatted string summary
        """
        lines = []
        lines.append("=" * 70)
        lines.append("LEDGER AUDIT TRAIL")
        lines.append("=" * 70)
        lines.append("")

        if not events:
            lines.append("  No commands recorded")
            return "\n".join(lines)

        # Totals per command
        lines.append("COMMANDS")
        lines.append("-" * 40)
        totals = Counter(e.action.value for e in events)
        failures = Counter(e.action.value for e in events if not e.success)
        for action, count in totals.items():
            lines.append(f"  {action}: {count} ({failures.get(action, 0)} rejected)")
        lines.append("")

        # History
        lines.append("HISTORY")
        lines.append("-" * 40)
        for e in events:
            status = "OK" if e.success else "REJECTED"
            when = format_timestamp(e.ledger_time) if e.ledger_time is not None else "n/a"
            line = f"  [{status}] {e.action.value} by {short(e.actor or '-')} at {when}"
            if e.amount is not None:
                line += f" amount={e.amount:,}"
            lines.append(line)
            if e.address:
                lines.append(f"    - Address: {e.address}")
            if e.error_kind:
                lines.append(f"    - {e.error_kind}: {e.error_message}")
        lines.append("")

        claimed = sum(e.amount or 0 for e in events if e.action == CommandAction.CLAIM and e.success)
        lines.append(f"Total claimed: {claimed:,}")
        return "\n".join(lines)

    def format_to_file(self, events: list[LedgerEvent], filepath: str) -> None:
        """Write the audit summary to a file."""
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(self.format_summary(events))
