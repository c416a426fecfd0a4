"""Markdown and CSV renderings of published diagnostics.

The CLI writes these after ``check`` and ``check-all`` so results can be
reviewed outside an editor.
"""

from __future__ import annotations

from typing import Iterable

from .models import Diagnostic
from .workspace import uri_to_path

CSV_COLUMNS = [
    "Document",
    "Offset",
    "Rule ID",
    "Issue",
    "Message",
    "Suggestions",
    "Sentence",
]


def _format_suggestions(replacements: list[str] | None, max_suggestions: int = 3) -> str:
    """Return a truncated suggestions string ("a, b, c (+N more)")."""
    if not replacements:
        return ""
    if len(replacements) <= max_suggestions:
        return ", ".join(replacements)
    visible = ", ".join(replacements[:max_suggestions])
    return f"{visible} (+{len(replacements) - max_suggestions} more)"


def _escape(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


def build_report_markdown(items: Iterable[tuple[str, list[Diagnostic]]]) -> str:
    """Render ``(uri, diagnostics)`` pairs as a Markdown report."""
    item_list = sorted(items, key=lambda item: item[0])
    total = sum(len(diagnostics) for _, diagnostics in item_list)

    lines = [
        "# LTeX Check Report",
        "",
        f"- Checked {len(item_list)} document(s)",
        f"- Total diagnostics: {total}",
    ]
    if not item_list:
        lines.extend(["", "_No documents were checked._"])
        return "\n".join(lines)

    for uri, diagnostics in item_list:
        lines.extend(["", f"## {uri_to_path(uri).name}", "", f"`{uri}`", ""])
        if not diagnostics:
            lines.append("_No issues found._")
            continue
        lines.append("| Offset | Rule | Issue | Message | Suggestions |")
        lines.append("| --- | --- | --- | --- | --- |")
        for diagnostic in sorted(diagnostics, key=lambda d: d.offset):
            lines.append(
                f"| {diagnostic.offset} | `{diagnostic.rule_id}` "
                f"| {_escape(diagnostic.matched_text) or '-'} "
                f"| {_escape(diagnostic.message)} "
                f"| {_escape(_format_suggestions(diagnostic.replacements)) or '-'} |"
            )
    return "\n".join(lines)


def build_report_csv(items: Iterable[tuple[str, list[Diagnostic]]]) -> list[list[str]]:
    """Return CSV rows (header first) for ``(uri, diagnostics)`` pairs."""
    rows: list[list[str]] = [list(CSV_COLUMNS)]
    for uri, diagnostics in sorted(items, key=lambda item: item[0]):
        path = str(uri_to_path(uri))
        for diagnostic in sorted(diagnostics, key=lambda d: d.offset):
            rows.append(
                [
                    path,
                    str(diagnostic.offset),
                    diagnostic.rule_id,
                    diagnostic.matched_text,
                    diagnostic.message,
                    _format_suggestions(diagnostic.replacements),
                    diagnostic.sentence,
                ]
            )
    return rows
