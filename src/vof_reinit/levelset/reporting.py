# -*- coding: utf-8 -*-
"""
This module provides reporting functions for reinitialization runs.
"""
from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .reinitialize import ReinitializationResult

# Sign conflicts listed individually before the report switches to a count.
MAX_LISTED_CONFLICTS = 10


def format_reinitialization_summary(result: "ReinitializationResult") -> str:
    """
    Formats a summary of a reinitialization run.
    """
    if result is None:
        return "Reinitialization not run."

    report = []
    report.append(f"\n{'--- Level-Set Reinitialization ---':^80}")
    report.append(_format_run_table(result))
    report.append(_format_convergence_history(result))
    report.append(_format_diagnostics(result))
    return "\n".join(filter(None, report))


def _format_run_table(result: "ReinitializationResult") -> str:
    """Formats the table of run statistics."""
    status = "converged" if result.converged else "not converged"
    lines = []
    lines.append(f"  {'Status:':<25} {status}")
    lines.append(f"  {'Cut Cells:':<25} {len(result.cut_cells)}")
    lines.append(f"  {'Cut-Cell Vertices:':<25} {len(result.cut_vertices)}")
    lines.append(f"  {'Passes:':<25} {result.n_passes}")
    if result.history:
        lines.append(f"  {'Final Max Change:':<25} {result.final_change:.4e}")
    return "\n".join(lines)


def _format_convergence_history(result: "ReinitializationResult") -> str | None:
    """Formats the max change of every pass."""
    if not result.history:
        return None
    lines = []
    lines.append(f"\n  {'Pass':<10} {'Max Change':>15}")
    lines.append(f"  {'-'*9} {'-'*15}")
    for i, change in enumerate(result.history, start=1):
        lines.append(f"  {i:<10} {change:>15.4e}")
    return "\n".join(lines)


def _format_diagnostics(result: "ReinitializationResult") -> str:
    """Formats sign conflicts and skipped cells."""
    lines = []
    lines.append(f"\n{'--- Diagnostics ---':^80}")
    if not result.sign_conflicts and not result.skipped_cells:
        lines.append("  No diagnostics recorded.")
        return "\n".join(lines)

    if result.sign_conflicts:
        lines.append(f"  Sign Conflicts: {len(result.sign_conflicts)}")
        for conflict in result.sign_conflicts[:MAX_LISTED_CONFLICTS]:
            lines.append(
                f"    - vertex {conflict.vertex} (pass {conflict.pass_index}): "
                f"{conflict.existing:+.4e} vs {conflict.incoming:+.4e}"
            )
        if len(result.sign_conflicts) > MAX_LISTED_CONFLICTS:
            lines.append(
                f"    ... {len(result.sign_conflicts) - MAX_LISTED_CONFLICTS} more"
            )
    if result.skipped_cells:
        lines.append(f"  Skipped Cells: {len(result.skipped_cells)}")
        lines.append(f"    - {', '.join(str(c) for c in result.skipped_cells)}")
    return "\n".join(lines)
