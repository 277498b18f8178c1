"""Dispatch from workload type to threat template."""

import logging
from typing import Any, Callable, NamedTuple

from ..facts import ThreatFacts
from ..models import ThreatItem, WorkloadType
from .templates import data_pipeline, general, genai_rag, serverless_api

logger = logging.getLogger(__name__)


class ThreatTemplate(NamedTuple):
    """A template and the function that derives its context from facts."""

    build_context: Callable[[ThreatFacts], Any]
    threats: Callable[[Any], list[ThreatItem]]


GENERAL_TEMPLATE = ThreatTemplate(general.build_context, general.general_cloud_threats)

TEMPLATES: dict[WorkloadType, ThreatTemplate] = {
    WorkloadType.GENAI_RAG: ThreatTemplate(genai_rag.build_context, genai_rag.genai_rag_threats),
    WorkloadType.DATA_PIPELINE: ThreatTemplate(
        data_pipeline.build_context, data_pipeline.data_pipeline_threats
    ),
    WorkloadType.SERVERLESS_API: ThreatTemplate(
        serverless_api.build_context, serverless_api.serverless_api_threats
    ),
    WorkloadType.CONTAINER_APP: GENERAL_TEMPLATE,
    WorkloadType.THREE_TIER: GENERAL_TEMPLATE,
    WorkloadType.GENERAL: GENERAL_TEMPLATE,
}


def generate_threats(
    facts: ThreatFacts,
    workload_type: WorkloadType,
    include_general_threats: bool = True,
) -> list[ThreatItem]:
    """Run the template selected by `workload_type` against the facts.

    When the workload has its own template and `include_general_threats` is
    set, general cloud threats whose ids are not already present are appended
    after the workload-specific ones.
    """
    workload_type = WorkloadType(workload_type)
    template = TEMPLATES.get(workload_type, GENERAL_TEMPLATE)
    threats = list(template.threats(template.build_context(facts)))
    logger.debug(f"Template for {workload_type.value} produced {len(threats)} threats")

    if include_general_threats and template is not GENERAL_TEMPLATE:
        existing_ids = {t.id for t in threats}
        extra = GENERAL_TEMPLATE.threats(GENERAL_TEMPLATE.build_context(facts))
        threats.extend(t for t in extra if t.id not in existing_ids)

    return threats
