"""AI-assisted import: extraction results, duplicate detection and merge suggestions."""

from .duplicates import (
    MERGE_STRATEGIES,
    UNCERTAIN_MATCH,
    DuplicateMatch,
    MergeDecision,
    MergeStrategy,
    compare_names,
    compare_titles,
    detect_conflicts,
    find_duplicates,
    levenshtein_distance,
    match_score,
    suggest_merge_strategies,
)
from .extraction import (
    EXTRACTION_PROMPT,
    ExtractionReport,
    ParsedOrgChart,
    ParsedPerson,
    ParsedRelationship,
    validate_extraction,
)

__all__ = [
    "MERGE_STRATEGIES",
    "UNCERTAIN_MATCH",
    "DuplicateMatch",
    "MergeDecision",
    "MergeStrategy",
    "compare_names",
    "compare_titles",
    "detect_conflicts",
    "find_duplicates",
    "levenshtein_distance",
    "match_score",
    "suggest_merge_strategies",
    "EXTRACTION_PROMPT",
    "ExtractionReport",
    "ParsedOrgChart",
    "ParsedPerson",
    "ParsedRelationship",
    "validate_extraction",
]
