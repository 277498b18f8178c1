"""Data flow inference from known service interactions."""

import logging
from typing import NamedTuple, Optional

from ..facts import ThreatFacts
from ..models import DataFlow
from ..services import AI_SERVICES, VECTOR_STORE_SERVICES, Service

logger = logging.getLogger(__name__)

# Edge count above which a single rule's fan-out is reported
LARGE_FANOUT_THRESHOLD = 1000


class FlowRule(NamedTuple):
    """Emit one edge per (source resource, target resource) pair.

    When `return_label` is set, each forward edge is immediately followed by
    the reverse edge carrying that label.
    """

    sources: frozenset[str]
    targets: frozenset[str]
    label: str
    return_label: Optional[str] = None


def _one(service: Service) -> frozenset[str]:
    return frozenset({service.value})


FLOW_RULES: tuple[FlowRule, ...] = (
    FlowRule(_one(Service.APIGATEWAY), _one(Service.LAMBDA), "HTTP requests"),
    FlowRule(_one(Service.LAMBDA), _one(Service.DYNAMODB), "Database operations"),
    FlowRule(_one(Service.LAMBDA), _one(Service.S3), "Object operations"),
    FlowRule(_one(Service.S3), _one(Service.GLUE), "Data ingestion"),
    FlowRule(_one(Service.GLUE), _one(Service.S3), "Processed data output"),
    FlowRule(_one(Service.GLUE), _one(Service.REDSHIFT), "Data warehouse loading"),
    FlowRule(_one(Service.APIGATEWAY), AI_SERVICES, "AI/ML requests"),
    FlowRule(AI_SERVICES, VECTOR_STORE_SERVICES, "Vector similarity search", "Retrieved context"),
)


def _apply_rule(facts: ThreatFacts, rule: FlowRule) -> list[DataFlow]:
    sources = facts.resources_for(rule.sources)
    targets = facts.resources_for(rule.targets)
    if not sources or not targets:
        return []

    flows = []
    for source in sources:
        for target in targets:
            flows.append(DataFlow(source=source.id, target=target.id, label=rule.label))
            if rule.return_label:
                flows.append(DataFlow(source=target.id, target=source.id, label=rule.return_label))

    if len(flows) > LARGE_FANOUT_THRESHOLD:
        logger.warning(
            f"Flow rule '{rule.label}' produced {len(flows)} edges "
            f"({len(sources)} sources x {len(targets)} targets)"
        )
    return flows


def infer_data_flows(facts: ThreatFacts) -> list[DataFlow]:
    """Derive instance-level data flows between resources.

    Every rule whose services are both present contributes the full cross
    product of matching resources, in inventory order.
    """
    flows: list[DataFlow] = []
    for rule in FLOW_RULES:
        rule_flows = _apply_rule(facts, rule)
        if rule_flows:
            logger.debug(f"Flow rule '{rule.label}' matched {len(rule_flows)} edges")
        flows.extend(rule_flows)
    return flows
