"""
Duplicate detection between extracted people and an existing chart.

Scores blend name similarity (0.6), title similarity (0.3) and, when both
sides have one, exact location (0.1), normalized by the weights used.
Matches at or below the threshold are discarded. Strategies are only
suggestions; callers may override any of them before applying.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Literal, Sequence

from ..config import DEFAULT_CONFIG, DuplicateConfig
from ..models import GraphNode, PersonNode
from .extraction import ParsedPerson

MergeStrategy = Literal["skip", "update", "create-new"]
MERGE_STRATEGIES: tuple[MergeStrategy, ...] = ("skip", "update", "create-new")

UNCERTAIN_MATCH = "Uncertain match - please review"

# Title words that mean the same thing when abbreviated
TITLE_ABBREVIATIONS: dict[str, tuple[str, ...]] = {
    "vp": ("vice president", "vp", "v.p."),
    "director": ("director", "dir", "dir."),
    "manager": ("manager", "mgr", "mgr."),
    "senior": ("senior", "sr", "sr."),
    "junior": ("junior", "jr", "jr."),
}

_PUNCT = re.compile(r"[^\w\s]")
_SPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    return _SPACE.sub(" ", _PUNCT.sub("", text.lower())).strip()


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance (insert, delete, substitute) between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], current[j - 1], previous[j]) + 1)
        previous = current
    return previous[-1]


def compare_names(a: str, b: str) -> float:
    n1, n2 = normalize(a), normalize(b)
    if n1 == n2:
        return 1.0
    if n1 in n2 or n2 in n1:
        return 0.95

    parts1, parts2 = n1.split(" "), n2.split(" ")
    if len(parts1) >= 2 and len(parts2) >= 2 and parts1[0] == parts2[0] and parts1[-1] == parts2[-1]:
        return 0.9

    longer, shorter = (n1, n2) if len(n1) > len(n2) else (n2, n1)
    if not longer:
        return 1.0
    return 1 - levenshtein_distance(longer, shorter) / len(longer)


def compare_titles(a: str, b: str) -> float:
    t1, t2 = normalize(a), normalize(b)
    if t1 == t2:
        return 1.0
    if t1 in t2 or t2 in t1:
        return 0.8
    for variations in TITLE_ABBREVIATIONS.values():
        if any(v in t1 for v in variations) and any(v in t2 for v in variations):
            return 0.7
    return 0.0


def _same_location(parsed: ParsedPerson, existing: PersonNode) -> bool | None:
    """None when either side has no location."""
    if not parsed.location or not existing.attributes.location:
        return None
    return parsed.location.lower() == existing.attributes.location.lower()


def match_score(parsed: ParsedPerson, existing: PersonNode) -> float:
    score = compare_names(parsed.name, existing.name) * 0.6
    weights = 0.6
    score += compare_titles(parsed.title, existing.attributes.title) * 0.3
    weights += 0.3
    location = _same_location(parsed, existing)
    if location is not None:
        score += (1.0 if location else 0.0) * 0.1
        weights += 0.1
    return score / weights


@dataclass
class DuplicateMatch:
    existing_node: PersonNode
    parsed_person: ParsedPerson
    match_score: float
    match_reasons: list[str] = field(default_factory=list)


def match_reasons(parsed: ParsedPerson, existing: PersonNode) -> list[str]:
    reasons: list[str] = []

    name = compare_names(parsed.name, existing.name)
    if name > 0.95:
        reasons.append("Exact or near-exact name match")
    elif name > 0.85:
        reasons.append("Very similar names")

    title = compare_titles(parsed.title, existing.attributes.title)
    if title > 0.9:
        reasons.append("Same job title")
    elif title > 0.7:
        reasons.append("Similar job titles")

    if _same_location(parsed, existing):
        reasons.append("Same location")

    return reasons or ["Partial match based on multiple factors"]


def find_duplicates(
    parsed: ParsedPerson,
    nodes: Sequence[GraphNode],
    threshold: float = DEFAULT_CONFIG.duplicates.match_threshold,
) -> list[DuplicateMatch]:
    """Existing people scoring above ``threshold``, best first."""
    matches: list[DuplicateMatch] = []
    for node in nodes:
        if not isinstance(node, PersonNode):
            continue
        score = match_score(parsed, node)
        if score > threshold:
            matches.append(DuplicateMatch(node, parsed, score, match_reasons(parsed, node)))
    matches.sort(key=lambda m: m.match_score, reverse=True)
    return matches


def detect_conflicts(parsed: ParsedPerson, existing: PersonNode) -> list[str]:
    """Field-level disagreements worth showing before an update."""
    conflicts: list[str] = []
    title = existing.attributes.title
    if parsed.title and title and compare_titles(parsed.title, title) < 0.7:
        conflicts.append(f'Title mismatch: "{parsed.title}" vs "{title}"')
    if _same_location(parsed, existing) is False:
        conflicts.append(f'Location mismatch: "{parsed.location}" vs "{existing.attributes.location}"')
    return conflicts


@dataclass
class MergeDecision:
    parsed_person: ParsedPerson
    strategy: MergeStrategy
    existing_node_id: str | None = None
    conflicts: list[str] = field(default_factory=list)
    score: float | None = None

    @property
    def requires_review(self) -> bool:
        """Mid-confidence matches are never auto-resolved."""
        return UNCERTAIN_MATCH in self.conflicts

    def with_strategy(self, strategy: MergeStrategy) -> "MergeDecision":
        """Caller override; an update or skip without a matched node becomes create-new."""
        if strategy not in MERGE_STRATEGIES:
            raise ValueError(f"Unknown merge strategy: {strategy}")
        if strategy != "create-new" and self.existing_node_id is None:
            strategy = "create-new"
        return replace(self, strategy=strategy)


def suggest_merge_strategies(
    people: Sequence[ParsedPerson],
    nodes: Sequence[GraphNode],
    config: DuplicateConfig = DEFAULT_CONFIG.duplicates,
) -> list[MergeDecision]:
    decisions: list[MergeDecision] = []
    for person in people:
        duplicates = find_duplicates(person, nodes, config.match_threshold)
        if not duplicates:
            decisions.append(MergeDecision(person, "create-new"))
            continue

        best = duplicates[0]
        if best.match_score > config.strong_match:
            conflicts = detect_conflicts(person, best.existing_node)
            decisions.append(
                MergeDecision(
                    person,
                    "update" if conflicts else "skip",
                    best.existing_node.id,
                    conflicts,
                    best.match_score,
                )
            )
        elif best.match_score > config.review_match:
            decisions.append(
                MergeDecision(person, "update", best.existing_node.id, [UNCERTAIN_MATCH], best.match_score)
            )
        else:
            decisions.append(MergeDecision(person, "create-new", score=best.match_score))
    return decisions
