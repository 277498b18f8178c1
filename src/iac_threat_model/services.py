"""Closed service-tag vocabulary and the resource types the rules match on."""

import re
from enum import Enum
from typing import Optional


class Service(str, Enum):
    """Service tags the inference rules know about."""

    APIGATEWAY = "apigateway"
    LAMBDA = "lambda"
    DYNAMODB = "dynamodb"
    S3 = "s3"
    GLUE = "glue"
    REDSHIFT = "redshift"
    EMR = "emr"
    STEPFUNCTIONS = "stepfunctions"
    KINESIS = "kinesis"
    BEDROCK = "bedrock"
    SAGEMAKER = "sagemaker"
    OPENSEARCH = "opensearch"
    PINECONE = "pinecone"
    COGNITO = "cognito"
    EC2 = "ec2"
    ECS = "ecs"
    EKS = "eks"
    IAM = "iam"


# Raw service segments that name the same service under another spelling
SERVICE_ALIASES: dict[str, str] = {
    "apigatewayv2": Service.APIGATEWAY.value,
    "opensearchservice": Service.OPENSEARCH.value,
    "elasticsearch": Service.OPENSEARCH.value,
    "kinesisfirehose": Service.KINESIS.value,
    "elasticloadbalancingv2": "elasticloadbalancing",
}

AI_SERVICES: frozenset[str] = frozenset({Service.BEDROCK.value, Service.SAGEMAKER.value})
VECTOR_STORE_SERVICES: frozenset[str] = frozenset({Service.OPENSEARCH.value, Service.PINECONE.value})
COMPUTE_SERVICES: frozenset[str] = frozenset(
    {Service.LAMBDA.value, Service.EC2.value, Service.ECS.value}
)

_SERVICE_TAG_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")


class ResourceType:
    """Resource type names referenced by the rules."""

    BEDROCK_AGENT = "AWS::Bedrock::Agent"
    BEDROCK_KNOWLEDGE_BASE = "AWS::Bedrock::KnowledgeBase"
    SAGEMAKER_MODEL = "AWS::SageMaker::Model"
    SAGEMAKER_ENDPOINT_PREFIX = "AWS::SageMaker::Endpoint"

    GLUE_JOB = "AWS::Glue::Job"
    GLUE_CRAWLER = "AWS::Glue::Crawler"
    EMR_CLUSTER = "AWS::EMR::Cluster"
    STATE_MACHINE = "AWS::StepFunctions::StateMachine"
    KINESIS_STREAM = "AWS::Kinesis::Stream"
    FIREHOSE_STREAM = "AWS::KinesisFirehose::DeliveryStream"
    DATA_PIPELINE = "AWS::DataPipeline::Pipeline"

    REST_API = "AWS::ApiGateway::RestApi"
    HTTP_API = "AWS::ApiGatewayV2::Api"
    LAMBDA_FUNCTION = "AWS::Lambda::Function"

    ECS_SERVICE = "AWS::ECS::Service"
    ECS_TASK_DEFINITION = "AWS::ECS::TaskDefinition"
    EKS_CLUSTER = "AWS::EKS::Cluster"
    LOAD_BALANCER = "AWS::ElasticLoadBalancingV2::LoadBalancer"

    EC2_INSTANCE = "AWS::EC2::Instance"
    AUTOSCALING_GROUP = "AWS::AutoScaling::AutoScalingGroup"
    RDS_INSTANCE = "AWS::RDS::DBInstance"
    RDS_CLUSTER = "AWS::RDS::DBCluster"

    VPC = "AWS::EC2::VPC"
    CLOUDTRAIL_TRAIL = "AWS::CloudTrail::Trail"
    CLOUDFRONT_DISTRIBUTION = "AWS::CloudFront::Distribution"
    S3_BUCKET = "AWS::S3::Bucket"
    DYNAMODB_TABLE = "AWS::DynamoDB::Table"
    REDSHIFT_CLUSTER = "AWS::Redshift::Cluster"
    OPENSEARCH_DOMAIN = "AWS::OpenSearchService::Domain"
    ELASTICSEARCH_DOMAIN = "AWS::Elasticsearch::Domain"
    EFS_FILE_SYSTEM = "AWS::EFS::FileSystem"


def split_type(resource_type: str) -> Optional[list[str]]:
    """Split a 'Provider::Service::Resource' type, or None if it is malformed."""
    if not isinstance(resource_type, str):
        return None
    parts = resource_type.strip().split("::")
    if len(parts) < 2 or any(not part for part in parts):
        return None
    return parts


def normalize_service(resource_type: str, service: Optional[str] = None) -> Optional[str]:
    """Return the canonical service tag for a resource, or None if unrecognizable.

    An explicit service wins over the one derived from the type's second
    segment. Known alternative spellings collapse onto one tag.
    """
    parts = split_type(resource_type)
    if parts is None:
        return None

    raw = service if isinstance(service, str) and service.strip() else parts[1]
    tag = raw.strip().lower()
    tag = SERVICE_ALIASES.get(tag, tag)
    if not _SERVICE_TAG_RE.match(tag):
        return None
    return tag


# Service tags of common resource types that no rule matches on but that are
# still expected in an inventory.
SUPPORTING_SERVICES: frozenset[str] = frozenset({
    "appsync",
    "autoscaling",
    "backup",
    "certificatemanager",
    "cloudformation",
    "cloudfront",
    "cloudtrail",
    "cloudwatch",
    "config",
    "datapipeline",
    "ecr",
    "efs",
    "elasticache",
    "elasticloadbalancing",
    "events",
    "guardduty",
    "kms",
    "lakeformation",
    "logs",
    "rds",
    "route53",
    "secretsmanager",
    "sns",
    "sqs",
    "ssm",
    "wafv2",
})

KNOWN_SERVICES: frozenset[str] = frozenset(s.value for s in Service) | SUPPORTING_SERVICES

# Providers whose service segment is user-chosen
UNCHECKED_PROVIDERS: frozenset[str] = frozenset({"Custom"})


def is_known_service(resource_type: str, service: str) -> bool:
    """True if `service` is in the known vocabulary or the type's provider is unchecked."""
    parts = split_type(resource_type)
    if parts is not None and parts[0] in UNCHECKED_PROVIDERS:
        return True
    return service in KNOWN_SERVICES
