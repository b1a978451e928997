"""
Org chart extraction results produced by an external vision model.

The model call itself happens outside this package; here we only parse
its JSON reply and judge its quality. Nothing in this module raises on bad
model output: malformed entries are dropped and reported as warnings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

EXTRACTABLE_RELATIONSHIPS = ("manager", "sponsor", "dotted")
LOW_CONFIDENCE = 0.6

EXTRACTION_PROMPT = """You are an expert at analyzing organizational charts. Extract the following information from the org chart image:

1. People: every person with
   - full name (exactly as shown)
   - job title or role
   - who they report to (manager's name, if visible)
   - any visible attributes (department, brand, channel, location)

2. Relationships:
   - solid lines are direct reporting (type "manager", from the manager to the report)
   - dotted lines are advisory relationships (type "dotted")
   - executive sponsorships (type "sponsor")

Return a JSON object with exactly this schema:
{
  "people": [
    {
      "name": "Full Name",
      "title": "Job Title",
      "reportsTo": "Manager Name or null",
      "departments": ["Department"],
      "brands": ["Brand"],
      "channels": ["Channel"],
      "location": "Location",
      "confidence": 0.95
    }
  ],
  "relationships": [
    {"from": "Manager Name", "to": "Report Name", "type": "manager", "confidence": 0.9}
  ]
}

Use exact names as they appear. Lower the confidence when unsure about a
connection. Include every visible person, even when their relationships are
unclear."""


@dataclass
class ParsedPerson:
    name: str
    title: str = ""
    reports_to: str | None = None
    brands: list[str] = field(default_factory=list)
    channels: list[str] = field(default_factory=list)
    departments: list[str] = field(default_factory=list)
    location: str | None = None
    confidence: float = 1.0


@dataclass
class ParsedRelationship:
    source: str  # person name ("from")
    target: str  # person name ("to")
    type: str = "manager"
    confidence: float = 1.0


@dataclass
class ExtractionMetadata:
    source: str = ""
    extracted_at: str = ""
    model_used: str = ""


@dataclass
class ParsedOrgChart:
    people: list[ParsedPerson] = field(default_factory=list)
    relationships: list[ParsedRelationship] = field(default_factory=list)
    metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)
    parse_warnings: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ParsedOrgChart":
        """Parse a model reply; entries of the wrong shape are dropped with a warning."""
        chart = cls()
        if not isinstance(data, dict):
            chart.parse_warnings.append("Extraction result is not an object")
            return chart

        people = data.get("people") or []
        if not isinstance(people, list):
            chart.parse_warnings.append("'people' is not a list")
            people = []
        for i, raw in enumerate(people):
            person = _parse_person(raw)
            if person is None:
                chart.parse_warnings.append(f"Dropped people[{i}]: missing or invalid name")
            else:
                chart.people.append(person)

        relationships = data.get("relationships") or []
        if not isinstance(relationships, list):
            chart.parse_warnings.append("'relationships' is not a list")
            relationships = []
        for i, raw in enumerate(relationships):
            rel = _parse_relationship(raw)
            if rel is None:
                chart.parse_warnings.append(f"Dropped relationships[{i}]: invalid endpoints or type")
            else:
                chart.relationships.append(rel)

        meta = data.get("metadata")
        if isinstance(meta, dict):
            chart.metadata = ExtractionMetadata(
                source=_str(meta.get("source")) or "",
                extracted_at=_str(meta.get("extractedAt")) or "",
                model_used=_str(meta.get("modelUsed")) or "",
            )
        return chart

    def all_relationships(self) -> list[ParsedRelationship]:
        """Explicit relationships plus a manager edge for each ``reportsTo`` not already listed."""
        result = list(self.relationships)
        seen = {(r.source, r.target) for r in result if r.type == "manager"}
        for person in self.people:
            if person.reports_to and (person.reports_to, person.name) not in seen:
                seen.add((person.reports_to, person.name))
                result.append(ParsedRelationship(person.reports_to, person.name, "manager", person.confidence))
        return result


def _str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


def _confidence(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return min(max(float(value), 0.0), 1.0)
    # A reply without a score is treated as unsure
    return 0.0


def _parse_person(raw: Any) -> ParsedPerson | None:
    if not isinstance(raw, dict):
        return None
    name = _str(raw.get("name"))
    if name is None:
        return None
    return ParsedPerson(
        name=name,
        title=_str(raw.get("title")) or "",
        reports_to=_str(raw.get("reportsTo")),
        brands=_str_list(raw.get("brands")),
        channels=_str_list(raw.get("channels")),
        departments=_str_list(raw.get("departments")),
        location=_str(raw.get("location")),
        confidence=_confidence(raw.get("confidence")),
    )


def _parse_relationship(raw: Any) -> ParsedRelationship | None:
    if not isinstance(raw, dict):
        return None
    source = _str(raw.get("from"))
    target = _str(raw.get("to"))
    rel_type = raw.get("type", "manager")
    if source is None or target is None or rel_type not in EXTRACTABLE_RELATIONSHIPS:
        return None
    return ParsedRelationship(source, target, rel_type, _confidence(raw.get("confidence")))


@dataclass
class ExtractionReport:
    """Quality verdict on an extraction. Warnings never block an import; errors do."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    relationships: list[ParsedRelationship] = field(default_factory=list)
    dropped_relationships: list[ParsedRelationship] = field(default_factory=list)
    low_confidence_people: list[str] = field(default_factory=list)
    low_confidence_relationships: list[ParsedRelationship] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def needs_review(self) -> bool:
        return bool(self.low_confidence_people or self.low_confidence_relationships)


def validate_extraction(chart: ParsedOrgChart, low_confidence: float = LOW_CONFIDENCE) -> ExtractionReport:
    """
    Judge an extraction.

    Relationships naming someone who was not extracted are dropped and
    reported as warnings. ``report.relationships`` holds the ones that
    survive.
    """
    report = ExtractionReport(warnings=list(chart.parse_warnings))

    if not chart.people:
        report.errors.append("No people extracted from image")

    seen: set[str] = set()
    duplicates: list[str] = []
    for person in chart.people:
        key = person.name.lower()
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    if duplicates:
        report.warnings.append(f"Duplicate names found: {', '.join(duplicates)}")

    report.low_confidence_people = [p.name for p in chart.people if p.confidence < low_confidence]
    if report.low_confidence_people:
        report.warnings.append(f"{len(report.low_confidence_people)} people extracted with low confidence")

    names = {p.name for p in chart.people}
    for rel in chart.all_relationships():
        missing = [n for n in (rel.source, rel.target) if n not in names]
        if missing:
            report.dropped_relationships.append(rel)
            for name in missing:
                report.warnings.append(f"Relationship references unknown person: {name}")
            continue
        report.relationships.append(rel)
        if rel.confidence < low_confidence:
            report.low_confidence_relationships.append(rel)

    if report.low_confidence_relationships:
        report.warnings.append(
            f"{len(report.low_confidence_relationships)} relationships extracted with low confidence"
        )

    return report
