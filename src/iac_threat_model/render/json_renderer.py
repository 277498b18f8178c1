"""JSON rendering of threat model documents."""

from ..models import ThreatModelDoc


def render_json(doc: ThreatModelDoc) -> str:
    """Render a document as indented JSON.

    Collections keep the document's order, which is already deterministic, so
    identical input yields identical output apart from `generated_at`.
    """
    return doc.model_dump_json(indent=2, by_alias=True)


def parse_json(text: str | bytes) -> ThreatModelDoc:
    """Parse JSON produced by `render_json` back into a document."""
    return ThreatModelDoc.model_validate_json(text)
