"""
Threat model assembler.

Turns the collector's resource inventory, entry points and data stores into a
single ThreatModelDoc: workload type, trust boundaries, data flows, threats,
security checklist and open questions. Given identical input, two runs
produce identical documents apart from `meta.generated_at`.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from . import __version__
from .checklist import evaluate_checklist
from .facts import ThreatFacts, build_facts
from .inference import infer_data_flows, infer_trust_boundaries, infer_workload_type
from .models import ThreatModelDoc, ThreatModelMeta, ThreatModelOptions, WorkloadType
from .rules import generate_threats

logger = logging.getLogger(__name__)


DATA_STORE_QUESTIONS: tuple[str, ...] = (
    "What types of sensitive data (PII, PHI, financial) will be stored in this system?",
    "What are the data retention and deletion requirements?",
)

PUBLIC_ENDPOINT_QUESTIONS: tuple[str, ...] = (
    "What authentication and authorization mechanisms will be implemented for public endpoints?",
    "Are there rate limiting requirements for public APIs?",
)

WORKLOAD_QUESTIONS: dict[WorkloadType, tuple[str, ...]] = {
    WorkloadType.GENAI_RAG: (
        "What measures will prevent prompt injection and model abuse?",
        "How will you ensure tenant isolation in multi-tenant RAG scenarios?",
        "What content filtering and moderation will be applied to AI outputs?",
    ),
    WorkloadType.DATA_PIPELINE: (
        "What data validation and quality checks will be implemented?",
        "How will you handle PII discovery and masking in data pipelines?",
        "What are the disaster recovery requirements for data processing?",
    ),
    WorkloadType.SERVERLESS_API: (
        "What input validation will be performed on API requests?",
        "How will you prevent SQL/NoSQL injection in database queries?",
    ),
}

COMPLIANCE_QUESTION = "What compliance frameworks (SOC2, HIPAA, PCI-DSS) apply to this system?"

INCIDENT_RESPONSE_QUESTIONS: tuple[str, ...] = (
    "What is the incident response plan for security events?",
    "Who are the security contacts and escalation procedures?",
)


def generate_open_questions(facts: ThreatFacts, workload_type: WorkloadType) -> list[str]:
    """Questions a human reviewer should answer for this architecture."""
    questions: list[str] = []

    if facts.data_stores:
        questions.extend(DATA_STORE_QUESTIONS)

    if facts.has_public_entry_points:
        questions.extend(PUBLIC_ENDPOINT_QUESTIONS)

    questions.extend(WORKLOAD_QUESTIONS.get(workload_type, ()))

    if len(facts.data_stores) > 1:
        questions.append(COMPLIANCE_QUESTION)

    questions.extend(INCIDENT_RESPONSE_QUESTIONS)
    return questions


def build_threat_model_from_facts(
    facts: ThreatFacts,
    options: Optional[ThreatModelOptions] = None,
    *,
    now: Optional[datetime] = None,
) -> ThreatModelDoc:
    """Assemble a ThreatModelDoc from already-normalized facts."""
    options = options or ThreatModelOptions()

    workload_type = infer_workload_type(facts)
    boundaries = infer_trust_boundaries(facts)
    flows = infer_data_flows(facts)

    if facts.inventory:
        threats = generate_threats(facts, workload_type, options.include_general_threats)
    else:
        logger.info("Empty inventory; no threats generated")
        threats = []

    checklist = evaluate_checklist(facts, boundaries)
    open_questions = generate_open_questions(facts, workload_type)

    logger.info(
        f"Threat model built: workload={workload_type.value} resources={len(facts.inventory)} "
        f"boundaries={len(boundaries)} flows={len(flows)} threats={len(threats)}"
    )

    generated_at = (now or datetime.now(timezone.utc)).isoformat()
    return ThreatModelDoc(
        meta=ThreatModelMeta(
            project_name=options.project_name,
            generated_at=generated_at,
            engine_version=options.engine_version or __version__,
        ),
        inventory=facts.inventory,
        entry_points=facts.entry_points,
        data_stores=facts.data_stores,
        boundaries=tuple(boundaries),
        flows=tuple(flows),
        threats=tuple(threats),
        checklist=tuple(checklist),
        open_questions=tuple(open_questions),
        workload_type=workload_type,
    )


def build_threat_model(
    resources: Any,
    entry_points: Any,
    data_stores: Any,
    options: Optional[ThreatModelOptions] = None,
    *,
    now: Optional[datetime] = None,
) -> ThreatModelDoc:
    """
    Build a threat model from the three collector arrays.

    Args:
        resources: Resource entries (mappings or ResourceRef). Malformed
            entries are skipped.
        entry_points: Entry point entries (mappings or EntryPoint).
        data_stores: Data store entries (mappings or DataStore).
        options: Project name, engine version and template options.
        now: Timestamp to record as `generated_at` (defaults to current UTC time).

    Raises:
        InvalidInputError: If any of the three collections is not a
            well-formed array.
    """
    facts = build_facts(resources, entry_points, data_stores)
    return build_threat_model_from_facts(facts, options, now=now)
