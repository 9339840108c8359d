"""Checklist scoring and status suggestion for quality checks"""

from typing import Sequence

EVALUATED = ("passed", "failed")


def compute_score(items: Sequence) -> int:
    """Weighted share of passed items among evaluated ones, 0..100"""
    evaluated = [i for i in items if i.status in EVALUATED]
    total_weight = sum(i.weight or 1 for i in evaluated)
    if not total_weight:
        return 0
    passed_weight = sum(i.weight or 1 for i in evaluated if i.status == "passed")
    return round(100 * passed_weight / total_weight)


def suggest_status(items: Sequence, defects: Sequence) -> str:
    if not items:
        return "pending"
    if any(i.status == "pending" for i in items):
        if any(i.status != "pending" for i in items):
            return "in_progress"
        return "pending"

    open_defects = [d for d in defects if d.status != "resolved"]

    if any(i.status == "failed" and i.is_required for i in items):
        return "rejected"
    if any(d.severity == "critical" for d in open_defects):
        return "rejected"
    if any(i.status == "failed" for i in items) or open_defects:
        return "needs_review"
    return "approved"
