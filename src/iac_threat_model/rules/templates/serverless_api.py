"""Serverless API threat template."""

from pydantic import BaseModel, ConfigDict

from ...facts import ThreatFacts
from ...models import Detection, Mitigation, Stride, ThreatItem
from ...risk import Level
from ...services import Service


class ServerlessApiContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_api_gateway: bool = False
    has_lambda: bool = False
    has_dynamodb: bool = False
    has_s3: bool = False
    has_cognito: bool = False


def build_context(facts: ThreatFacts) -> ServerlessApiContext:
    services = facts.services
    return ServerlessApiContext(
        has_api_gateway=Service.APIGATEWAY.value in services,
        has_lambda=Service.LAMBDA.value in services,
        has_dynamodb=Service.DYNAMODB.value in services,
        has_s3=Service.S3.value in services,
        has_cognito=Service.COGNITO.value in services,
    )


def serverless_api_threats(ctx: ServerlessApiContext) -> list[ThreatItem]:
    """Threats for API Gateway + Lambda style workloads."""
    threats = [
        ThreatItem(
            id="API-1",
            stride_category=Stride.SPOOFING,
            title="Unauthenticated API access",
            scenario="Attacker bypasses authentication mechanisms to access protected API endpoints.",
            affected_assets=("API endpoints", "Backend data", "User accounts"),
            likelihood=Level.HIGH,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement proper authentication (JWT, API keys, IAM)",
                    service_hints=("API Gateway", "Cognito", "IAM"),
                ),
                Mitigation(
                    control="Use API Gateway authorizers for custom authentication logic",
                    service_hints=("API Gateway", "Lambda"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor failed authentication attempts and suspicious access patterns",
                    service_hints=("CloudWatch", "WAF"),
                ),
            ),
        ),
        ThreatItem(
            id="API-2",
            stride_category=Stride.TAMPERING,
            title="SQL/NoSQL injection in Lambda functions",
            scenario="Malicious input in API requests leads to injection attacks against database queries.",
            affected_assets=("Database records", "Application logic", "Data integrity"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Use parameterized queries and ORM/ODM libraries",
                    service_hints=("Lambda", "DynamoDB"),
                ),
                Mitigation(
                    control="Implement input validation and sanitization",
                    service_hints=("API Gateway", "Lambda"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor database error patterns and unusual query structures",
                    service_hints=("CloudWatch", "X-Ray"),
                ),
            ),
        ),
        ThreatItem(
            id="API-3",
            stride_category=Stride.DENIAL_OF_SERVICE,
            title="API rate limiting bypass and resource exhaustion",
            scenario=(
                "Attacker overwhelms API with requests, causing service degradation "
                "or Lambda timeout/memory issues."
            ),
            affected_assets=("API availability", "Lambda concurrency", "Cost budget"),
            likelihood=Level.HIGH,
            impact=Level.MEDIUM,
            mitigations=(
                Mitigation(
                    control="Implement API Gateway throttling and usage plans",
                    service_hints=("API Gateway",),
                ),
                Mitigation(
                    control="Set Lambda reserved concurrency and timeout limits",
                    service_hints=("Lambda",),
                ),
                Mitigation(
                    control="Use AWS WAF for additional rate limiting and filtering",
                    service_hints=("WAF", "API Gateway"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor API request rates and Lambda error/timeout patterns",
                    service_hints=("CloudWatch", "X-Ray"),
                ),
            ),
        ),
        ThreatItem(
            id="API-4",
            stride_category=Stride.INFORMATION_DISCLOSURE,
            title="Sensitive data exposure in API responses",
            scenario=(
                "API accidentally exposes sensitive user data, internal system "
                "information, or error details."
            ),
            affected_assets=("User PII", "System internals", "Error messages"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement response filtering and data minimization",
                    service_hints=("Lambda", "API Gateway"),
                ),
                Mitigation(
                    control="Use structured error handling without sensitive details",
                    service_hints=("Lambda",),
                ),
            ),
            detections=(
                Detection(
                    signal="Scan API responses for PII and sensitive data patterns",
                    service_hints=("Macie", "CloudWatch Insights"),
                ),
            ),
        ),
        ThreatItem(
            id="API-5",
            stride_category=Stride.ELEVATION_OF_PRIVILEGE,
            title="Lambda function privilege escalation",
            scenario=(
                "Compromised Lambda function uses excessive IAM permissions to access "
                "unintended cloud resources."
            ),
            affected_assets=("Cloud resources", "Other Lambda functions", "Data stores"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Apply least-privilege IAM roles to Lambda functions",
                    service_hints=("IAM", "Lambda"),
                ),
                Mitigation(
                    control="Use resource-based policies for fine-grained access control",
                    service_hints=("IAM", "S3", "DynamoDB"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor unusual cloud API calls from Lambda functions",
                    service_hints=("CloudTrail", "GuardDuty"),
                ),
            ),
        ),
    ]

    if ctx.has_dynamodb:
        threats.append(
            ThreatItem(
                id="API-6",
                stride_category=Stride.REPUDIATION,
                title="Insufficient audit logging for data changes",
                scenario=(
                    "Lack of proper audit trails makes it impossible to track who made "
                    "what changes to data."
                ),
                affected_assets=("Data integrity", "Compliance records", "Audit trails"),
                likelihood=Level.MEDIUM,
                impact=Level.MEDIUM,
                mitigations=(
                    Mitigation(
                        control="Enable DynamoDB Streams for change tracking",
                        service_hints=("DynamoDB", "Lambda"),
                    ),
                    Mitigation(
                        control="Implement comprehensive application-level audit logging",
                        service_hints=("CloudWatch Logs", "Lambda"),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor data change patterns and access anomalies",
                        service_hints=("CloudWatch", "DynamoDB Insights"),
                    ),
                ),
            )
        )

    return threats
