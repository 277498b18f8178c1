"""Workload type classification from resource types."""

from typing import Callable

from ..facts import ThreatFacts
from ..models import WorkloadType
from ..services import ResourceType as T

_GENAI_TYPES = frozenset({T.BEDROCK_AGENT, T.BEDROCK_KNOWLEDGE_BASE, T.SAGEMAKER_MODEL})

_PIPELINE_TYPES = frozenset({
    T.GLUE_JOB,
    T.GLUE_CRAWLER,
    T.EMR_CLUSTER,
    T.STATE_MACHINE,
    T.KINESIS_STREAM,
    T.FIREHOSE_STREAM,
    T.DATA_PIPELINE,
})

_SERVERLESS_TYPES = frozenset({T.REST_API, T.HTTP_API, T.LAMBDA_FUNCTION})

_CONTAINER_TYPES = frozenset({
    T.ECS_SERVICE,
    T.ECS_TASK_DEFINITION,
    T.EKS_CLUSTER,
    T.LOAD_BALANCER,
})


def _is_genai(types: frozenset[str]) -> bool:
    return bool(types & _GENAI_TYPES) or any(
        t.startswith(T.SAGEMAKER_ENDPOINT_PREFIX) for t in types
    )


def _is_three_tier(types: frozenset[str]) -> bool:
    return (
        T.LOAD_BALANCER in types
        and bool(types & {T.EC2_INSTANCE, T.AUTOSCALING_GROUP})
        and bool(types & {T.RDS_INSTANCE, T.RDS_CLUSTER})
    )


# Evaluated top to bottom; the first matching rule wins.
WORKLOAD_RULES: tuple[tuple[WorkloadType, Callable[[frozenset[str]], bool]], ...] = (
    (WorkloadType.GENAI_RAG, _is_genai),
    (WorkloadType.DATA_PIPELINE, lambda types: bool(types & _PIPELINE_TYPES)),
    (WorkloadType.SERVERLESS_API, lambda types: bool(types & _SERVERLESS_TYPES)),
    (WorkloadType.CONTAINER_APP, lambda types: bool(types & _CONTAINER_TYPES)),
    (WorkloadType.THREE_TIER, _is_three_tier),
)


def classify_types(types: frozenset[str]) -> WorkloadType:
    """Classify a set of resource types into exactly one workload type."""
    for workload_type, matches in WORKLOAD_RULES:
        if matches(types):
            return workload_type
    return WorkloadType.GENERAL


def infer_workload_type(facts: ThreatFacts) -> WorkloadType:
    """Infer the dominant workload pattern of the inventory."""
    return classify_types(facts.types)
