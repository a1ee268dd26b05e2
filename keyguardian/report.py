"""
Console and JSON reporting for scan results
"""

import json
from collections import OrderedDict
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Finding, ScanResult, Severity

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
}


def group_by_file(findings: List[Finding]) -> "OrderedDict[str, List[Finding]]":
    """Group findings per file, keeping first-seen file order"""
    grouped: "OrderedDict[str, List[Finding]]" = OrderedDict()
    for finding in findings:
        grouped.setdefault(finding.file, []).append(finding)
    return grouped


def render_findings(result: ScanResult, console: Console) -> None:
    """Display scan results grouped by file"""
    console.print()

    if not result.findings:
        console.print(Panel("✅ No API keys or secrets detected!", style="bold green"))
        return

    console.print(
        f"[bold red]🚨 Found {len(result.findings)} potential API key(s) or secret(s):[/bold red]"
    )
    console.print()

    for file_path, findings in group_by_file(result.findings).items():
        table = Table(title=f"📄 {escape(file_path)}", title_justify="left", show_header=True)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Line", justify="right", style="magenta")
        table.add_column("Pattern", style="cyan")
        table.add_column("Match", style="dim")

        for finding in findings:
            severity = Text(
                f"[{finding.severity.value.upper()}]", style=SEVERITY_STYLES[finding.severity]
            )
            table.add_row(
                severity,
                str(finding.line),
                Text(finding.pattern_name),
                Text(finding.match_snippet),
            )

        console.print(table)
        console.print()

    hints = "\n".join(
        [
            "💡 To fix:",
            "  1. Remove the secrets from your code",
            "  2. Use environment variables instead",
            "  3. Add secrets to .env file and .gitignore",
        ]
    )
    console.print(Panel.fit("🛑 Commit blocked to prevent secret exposure!", style="bold red"))
    console.print(hints, style="cyan")


def severity_counts(findings: List[Finding]) -> "OrderedDict[Severity, int]":
    """Finding counts per severity, most severe first"""
    counts: "OrderedDict[Severity, int]" = OrderedDict()
    for severity in sorted(Severity, key=lambda s: s.rank, reverse=True):
        total = sum(1 for finding in findings if finding.severity == severity)
        if total:
            counts[severity] = total
    return counts


def render_summary(result: ScanResult, console: Console) -> None:
    by_severity = ", ".join(
        f"{severity.value}: {total}" for severity, total in severity_counts(result.findings).items()
    )
    summary_text = f"""
[bold]Files Scanned:[/bold] {result.files_scanned}
[bold]Total Findings:[/bold] {len(result.findings)}
[bold]By Severity:[/bold] {by_severity or "-"}
[bold]Warnings:[/bold] {len(result.warnings)}
[bold]Scan Duration:[/bold] {result.scan_duration_seconds:.2f}s
    """.strip()
    console.print(Panel(summary_text, title="📊 Scan Summary", style="green"))


def result_to_dict(result: ScanResult) -> Dict[str, Any]:
    """Serializable form of a result; findings use their camelCase keys"""
    return result.model_dump(mode="json", by_alias=True)


def save_results(result: ScanResult, output_path: str) -> None:
    """Save results to JSON file"""
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)
