# resume_insights/services/skill_matcher.py
"""
Skill overlap scoring.

A target skill counts as matched when it contains, or is contained in, any of
the candidate's skills after case folding. Containment in both directions keeps
"React" matching "React.js Development" and vice versa.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List


def round_half_up(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _normalize(skills: Iterable[str]) -> List[str]:
    seen = []
    for s in skills or []:
        if not isinstance(s, str):
            continue
        low = s.strip().lower()
        if low and low not in seen:
            seen.append(low)
    return seen


def _is_match(target: str, candidates: List[str]) -> bool:
    return any(target in c or c in target for c in candidates)


def matched_skills(candidate_skills: Iterable[str], target_skills: Iterable[str]) -> List[str]:
    """Return the target skills (original spelling, first occurrence) matched by the candidate."""
    candidates = _normalize(candidate_skills)
    if not candidates:
        return []
    out = []
    seen = set()
    for t in target_skills or []:
        if not isinstance(t, str):
            continue
        low = t.strip().lower()
        if not low or low in seen:
            continue
        seen.add(low)
        if _is_match(low, candidates):
            out.append(t.strip())
    return out


def score(candidate_skills: Iterable[str], target_skills: Iterable[str]) -> int:
    """Percentage of target skills matched by the candidate, 0-100."""
    candidates = _normalize(candidate_skills)
    targets = _normalize(target_skills)
    if not candidates or not targets:
        return 0
    matched = sum(1 for t in targets if _is_match(t, candidates))
    return int(round_half_up(100 * matched / len(targets)))
