"""Rich display functions for the end-of-run summary."""

from rich.table import Table

from cachectl.core.orchestrator import CleanupSummary
from cachectl.filesystem.models import VerificationReport
from cachectl.utils.formatting import console, format_size, print_success, print_warning


def create_verification_table(report: VerificationReport) -> Table:
    """Create a Rich table with per-outcome verification counts.

    Args:
        report: Report of a verification pass.

    Returns:
        Rich Table configured for outcome display.
    """
    table = Table(
        title="Checksum Verification",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Outcome", width=12)
    table.add_column("Files", justify="right")

    table.add_row("[verified]verified[/]", str(report.verified))
    table.add_row("[mismatch]mismatch[/]", str(report.mismatched))
    if report.unremoved:
        table.add_row("[error]not removed[/]", str(report.unremoved))
    table.add_row("[skipped]skipped[/]", str(report.skipped))
    table.add_row("[error]error[/]", str(report.errors))
    if report.timed_out:
        table.add_row("[warning]pending[/]", str(report.pending))

    return table


def print_summary(summary: CleanupSummary, verbose: bool = False) -> None:
    """Print the totals of a cleanup run.

    The summary line is always printed. With ``verbose`` the verification
    outcome table is shown as well, unless verification was disabled.

    Args:
        summary: Totals of the run.
        verbose: Also print the verification table.
    """
    report = summary.verification
    if verbose and report is not None and report.enabled:
        console.print(create_verification_table(report))

    for step in summary.failed_steps:
        print_warning(f"Step '{step}' did not complete")

    line = (
        f"Removed {summary.files_removed} files, {summary.bytes_removed} bytes "
        f"({format_size(summary.bytes_removed)})"
    )
    if summary.dry_run:
        line += " [dry run, nothing was deleted]"
    print_success(line)
