"""General cloud application threats (fallback template)."""

from pydantic import BaseModel, ConfigDict

from ...facts import ThreatFacts
from ...models import Detection, Mitigation, Stride, ThreatItem
from ...risk import Level
from ...services import COMPUTE_SERVICES


class GeneralContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_public_endpoints: bool = False
    has_data_stores: bool = False
    has_compute: bool = False
    has_iam: bool = True


def build_context(facts: ThreatFacts) -> GeneralContext:
    return GeneralContext(
        has_public_endpoints=facts.has_public_entry_points,
        has_data_stores=len(facts.data_stores) > 0,
        has_compute=facts.has_service(*COMPUTE_SERVICES),
        # every deployment runs under some IAM principal
        has_iam=True,
    )


def general_cloud_threats(ctx: GeneralContext) -> list[ThreatItem]:
    """Broad threats gated on public endpoints, data stores and compute."""
    threats: list[ThreatItem] = []

    if ctx.has_public_endpoints:
        threats.append(
            ThreatItem(
                id="GEN-1",
                stride_category=Stride.SPOOFING,
                title="Unauthorized access to public endpoints",
                scenario="Attacker gains access to public-facing services without proper authentication.",
                affected_assets=("Public endpoints", "Backend services", "Data"),
                likelihood=Level.HIGH,
                impact=Level.HIGH,
                mitigations=(
                    Mitigation(
                        control="Implement strong authentication and authorization",
                        service_hints=("IAM", "Cognito", "API Gateway"),
                    ),
                    Mitigation(
                        control="Use a web application firewall for additional protection",
                        service_hints=("WAF", "CloudFront"),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor failed authentication attempts and access patterns",
                        service_hints=("CloudWatch", "GuardDuty"),
                    ),
                ),
            )
        )

    if ctx.has_data_stores:
        threats.append(
            ThreatItem(
                id="GEN-2",
                stride_category=Stride.INFORMATION_DISCLOSURE,
                title="Data exposure due to misconfiguration",
                scenario=(
                    "Sensitive data is exposed due to misconfigured storage services or "
                    "overly permissive access policies."
                ),
                affected_assets=("Stored data", "Database contents", "File storage"),
                likelihood=Level.MEDIUM,
                impact=Level.HIGH,
                mitigations=(
                    Mitigation(
                        control="Enable encryption at rest for all data stores",
                        service_hints=("KMS", "S3", "DynamoDB", "RDS"),
                    ),
                    Mitigation(
                        control="Implement least-privilege access policies",
                        service_hints=("IAM", "S3", "DynamoDB"),
                    ),
                    Mitigation(
                        control="Use configuration compliance monitoring",
                        service_hints=("Config", "Security Hub"),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor data access patterns and policy changes",
                        service_hints=("CloudTrail", "Macie"),
                    ),
                ),
            )
        )
        threats.append(
            ThreatItem(
                id="GEN-3",
                stride_category=Stride.TAMPERING,
                title="Unauthorized data modification",
                scenario="Attacker modifies stored data without authorization, compromising data integrity.",
                affected_assets=("Database records", "File contents", "Configuration data"),
                likelihood=Level.MEDIUM,
                impact=Level.HIGH,
                mitigations=(
                    Mitigation(
                        control="Enable versioning and backup for critical data stores",
                        service_hints=("S3", "DynamoDB", "RDS"),
                    ),
                    Mitigation(
                        control="Implement data integrity checks and validation",
                        service_hints=("Lambda", "CloudWatch"),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor data modification patterns and integrity violations",
                        service_hints=("CloudTrail", "CloudWatch"),
                    ),
                ),
            )
        )

    if ctx.has_compute:
        threats.append(
            ThreatItem(
                id="GEN-4",
                stride_category=Stride.ELEVATION_OF_PRIVILEGE,
                title="Compute service privilege escalation",
                scenario=(
                    "Compromised compute resources gain excessive permissions to access "
                    "other cloud services."
                ),
                affected_assets=("Cloud resources", "Service accounts", "Data stores"),
                likelihood=Level.MEDIUM,
                impact=Level.HIGH,
                mitigations=(
                    Mitigation(
                        control="Apply least-privilege IAM roles to all compute resources",
                        service_hints=("IAM", "Lambda", "EC2", "ECS"),
                    ),
                    Mitigation(
                        control="Use instance profiles and service-linked roles",
                        service_hints=("IAM",),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor unusual cloud API calls from compute resources",
                        service_hints=("CloudTrail", "GuardDuty"),
                    ),
                ),
            )
        )
        threats.append(
            ThreatItem(
                id="GEN-5",
                stride_category=Stride.DENIAL_OF_SERVICE,
                title="Resource exhaustion and cost abuse",
                scenario=(
                    "Attacker causes excessive resource consumption leading to service "
                    "degradation or unexpected costs."
                ),
                affected_assets=("Service availability", "Cost budget", "Resource capacity"),
                likelihood=Level.MEDIUM,
                impact=Level.MEDIUM,
                mitigations=(
                    Mitigation(
                        control="Set resource limits and auto-scaling policies",
                        service_hints=("Auto Scaling", "Lambda", "ECS"),
                    ),
                    Mitigation(
                        control="Implement cost budgets and alerts",
                        service_hints=("Budgets", "Cost Explorer"),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor resource utilization and cost anomalies",
                        service_hints=("CloudWatch", "Cost Anomaly Detection"),
                    ),
                ),
            )
        )

    threats.append(
        ThreatItem(
            id="GEN-6",
            stride_category=Stride.REPUDIATION,
            title="Insufficient audit logging",
            scenario=(
                "Lack of comprehensive logging makes it difficult to investigate "
                "security incidents or prove compliance."
            ),
            affected_assets=("Audit trails", "Compliance records", "Incident response"),
            likelihood=Level.HIGH,
            impact=Level.MEDIUM,
            mitigations=(
                Mitigation(
                    control="Enable comprehensive API audit logging",
                    service_hints=("CloudTrail", "S3"),
                ),
                Mitigation(
                    control="Implement centralized log aggregation and retention",
                    service_hints=("CloudWatch Logs", "S3"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor log completeness and retention compliance",
                    service_hints=("Config", "Security Hub"),
                ),
            ),
        )
    )

    return threats
