"""Trust boundary inference."""

from ..facts import ThreatFacts
from ..models import BoundaryType, TrustBoundary
from ..services import ResourceType, Service

ACCOUNT_BOUNDARY = TrustBoundary(
    id="account-boundary",
    name="Cloud Account Boundary",
    type=BoundaryType.ACCOUNT_BOUNDARY,
    description="Boundary between this cloud account and external entities",
)

INTERNET_BOUNDARY = TrustBoundary(
    id="internet-cloud-boundary",
    name="Internet to Cloud",
    type=BoundaryType.INTERNET_TO_CLOUD,
    description="Boundary between the public internet and cloud services",
)

NETWORK_BOUNDARY = TrustBoundary(
    id="vpc-boundary",
    name="VPC Network Boundary",
    type=BoundaryType.NETWORK_BOUNDARY,
    description="Boundary between the VPC and other cloud services",
)

# (service A, service B, boundary) for interactions worth calling out
SERVICE_PAIR_BOUNDARIES: tuple[tuple[str, str, TrustBoundary], ...] = (
    (
        Service.LAMBDA.value,
        Service.DYNAMODB.value,
        TrustBoundary(
            id="lambda-dynamodb-boundary",
            name="Lambda to DynamoDB",
            type=BoundaryType.SERVICE_TO_SERVICE,
            description="Boundary between Lambda functions and DynamoDB tables",
        ),
    ),
    (
        Service.APIGATEWAY.value,
        Service.LAMBDA.value,
        TrustBoundary(
            id="apigw-lambda-boundary",
            name="API Gateway to Lambda",
            type=BoundaryType.SERVICE_TO_SERVICE,
            description="Boundary between API Gateway and Lambda functions",
        ),
    ),
    (
        Service.LAMBDA.value,
        Service.S3.value,
        TrustBoundary(
            id="lambda-s3-boundary",
            name="Lambda to S3",
            type=BoundaryType.SERVICE_TO_SERVICE,
            description="Boundary between Lambda functions and S3 buckets",
        ),
    ),
)


def infer_trust_boundaries(facts: ThreatFacts) -> list[TrustBoundary]:
    """Derive trust boundaries from the inventory and entry points.

    The account boundary is always present. Service-to-service boundaries are
    emitted once per service pair no matter how many resources implement it.
    """
    boundaries = [ACCOUNT_BOUNDARY]

    if facts.has_public_entry_points:
        boundaries.append(INTERNET_BOUNDARY)

    if facts.has_type(ResourceType.VPC):
        boundaries.append(NETWORK_BOUNDARY)

    services = facts.services
    for first, second, boundary in SERVICE_PAIR_BOUNDARIES:
        if first in services and second in services:
            boundaries.append(boundary)

    return boundaries
