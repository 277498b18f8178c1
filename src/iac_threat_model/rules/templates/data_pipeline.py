"""Data pipeline threat template."""

from pydantic import BaseModel, ConfigDict

from ...facts import ThreatFacts
from ...models import Detection, Mitigation, Stride, ThreatItem
from ...risk import Level
from ...services import Service


class DataPipelineContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_object_storage: bool = False
    has_etl_job: bool = False
    has_orchestration: bool = False
    has_streaming: bool = False
    has_warehouse: bool = False
    has_cluster_compute: bool = False


def build_context(facts: ThreatFacts) -> DataPipelineContext:
    services = facts.services
    return DataPipelineContext(
        has_object_storage=Service.S3.value in services,
        has_etl_job=Service.GLUE.value in services,
        has_orchestration=Service.STEPFUNCTIONS.value in services,
        has_streaming=Service.KINESIS.value in services,
        has_warehouse=Service.REDSHIFT.value in services,
        has_cluster_compute=Service.EMR.value in services,
    )


def data_pipeline_threats(ctx: DataPipelineContext) -> list[ThreatItem]:
    """Threats for ingestion/ETL/warehouse pipelines."""
    threats = [
        ThreatItem(
            id="DP-1",
            stride_category=Stride.SPOOFING,
            title="Untrusted source can inject fake data into ingestion",
            scenario=(
                "A producer impersonates a trusted data source and writes malicious "
                "or incorrect events/objects."
            ),
            affected_assets=("Raw data", "Downstream datasets", "Analytics outputs"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Authenticate producers (IAM, signed requests) and restrict ingestion endpoints",
                    service_hints=("IAM", "API Gateway", "VPC Endpoints"),
                ),
                Mitigation(
                    control="Use per-source buckets/prefixes and separate roles per source",
                    service_hints=("S3", "IAM"),
                ),
            ),
            detections=(
                Detection(
                    signal="Alert on anomalous write patterns and new principals writing to raw zones",
                    service_hints=("CloudTrail", "GuardDuty", "Security Hub"),
                ),
            ),
        ),
        ThreatItem(
            id="DP-2",
            stride_category=Stride.TAMPERING,
            title="Data tampering in raw/processed zones",
            scenario="An attacker modifies objects or intermediate outputs to poison analytics/ML results.",
            affected_assets=("Stored objects", "ETL outputs"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Enable object versioning; consider Object Lock for immutability in raw zone",
                    service_hints=("S3",),
                ),
                Mitigation(
                    control="Use checksums/hashes across stage boundaries",
                    service_hints=("Glue", "Lambda"),
                ),
            ),
            detections=(
                Detection(
                    signal="Detect object overwrite/delete spikes in raw prefixes",
                    service_hints=("CloudTrail", "CloudWatch"),
                ),
            ),
        ),
        ThreatItem(
            id="DP-3",
            stride_category=Stride.INFORMATION_DISCLOSURE,
            title="PII/sensitive data exposure in processing logs",
            scenario=(
                "Processing jobs log sensitive data values, exposing them in log "
                "groups or job outputs."
            ),
            affected_assets=("CloudWatch Logs", "Job outputs", "Error messages"),
            likelihood=Level.HIGH,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement data masking/redaction in processing code",
                    service_hints=("Glue", "Lambda"),
                ),
                Mitigation(
                    control="Use structured logging with field-level controls",
                    service_hints=("CloudWatch Logs",),
                ),
            ),
            detections=(
                Detection(
                    signal="Scan logs for PII patterns using automated tools",
                    service_hints=("Macie", "CloudWatch Insights"),
                ),
            ),
        ),
        ThreatItem(
            id="DP-4",
            stride_category=Stride.DENIAL_OF_SERVICE,
            title="Resource exhaustion from malformed/large data",
            scenario=(
                "Malicious or malformed input data causes processing jobs to consume "
                "excessive resources or fail."
            ),
            affected_assets=("Processing capacity", "Cost budget", "Downstream systems"),
            likelihood=Level.MEDIUM,
            impact=Level.MEDIUM,
            mitigations=(
                Mitigation(
                    control="Implement input validation and size limits",
                    service_hints=("Glue", "Lambda"),
                ),
                Mitigation(
                    control="Set resource limits and timeouts on processing jobs",
                    service_hints=("Glue", "EMR", "Step Functions"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor job duration and resource consumption anomalies",
                    service_hints=("CloudWatch", "Cost Explorer"),
                ),
            ),
        ),
    ]

    if ctx.has_warehouse:
        threats.append(
            ThreatItem(
                id="DP-5",
                stride_category=Stride.ELEVATION_OF_PRIVILEGE,
                title="Over-privileged data warehouse access",
                scenario=(
                    "Processing roles have excessive permissions to the data warehouse, "
                    "enabling unauthorized data access."
                ),
                affected_assets=("Data warehouse", "Historical data", "Analytics results"),
                likelihood=Level.MEDIUM,
                impact=Level.HIGH,
                mitigations=(
                    Mitigation(
                        control="Use least-privilege IAM roles for each processing stage",
                        service_hints=("IAM", "Redshift"),
                    ),
                    Mitigation(
                        control="Implement row-level security in the warehouse",
                        service_hints=("Redshift",),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor unusual query patterns and data access",
                        service_hints=("Redshift", "CloudTrail"),
                    ),
                ),
            )
        )

    return threats
