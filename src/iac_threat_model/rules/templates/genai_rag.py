"""GenAI / retrieval-augmented generation threat template."""

from pydantic import BaseModel, ConfigDict

from ...facts import ThreatFacts
from ...models import Detection, Mitigation, Stride, ThreatItem
from ...risk import Level
from ...services import VECTOR_STORE_SERVICES, Service


class GenAiRagContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_bedrock: bool = False
    has_sagemaker: bool = False
    has_vector_store: bool = False
    has_s3: bool = False
    has_api_gateway: bool = False


def build_context(facts: ThreatFacts) -> GenAiRagContext:
    services = facts.services
    return GenAiRagContext(
        has_bedrock=Service.BEDROCK.value in services,
        has_sagemaker=Service.SAGEMAKER.value in services,
        has_vector_store=bool(services & VECTOR_STORE_SERVICES),
        has_s3=Service.S3.value in services,
        has_api_gateway=Service.APIGATEWAY.value in services,
    )


def genai_rag_threats(ctx: GenAiRagContext) -> list[ThreatItem]:
    """Threats for managed-model and RAG workloads."""
    threats = [
        ThreatItem(
            id="AI-1",
            stride_category=Stride.SPOOFING,
            title="Prompt injection via user input",
            scenario=(
                "Attacker crafts malicious prompts to manipulate AI model behavior, "
                "bypass safety controls, or extract training data."
            ),
            affected_assets=("AI model responses", "System prompts", "Retrieved context"),
            likelihood=Level.HIGH,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement input sanitization and prompt validation",
                    service_hints=("Lambda", "API Gateway"),
                ),
                Mitigation(
                    control="Use system prompts with clear boundaries and instructions",
                    service_hints=("Bedrock", "SageMaker"),
                ),
                Mitigation(
                    control="Implement output filtering and content moderation",
                    service_hints=("Bedrock", "Comprehend"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor for suspicious prompt patterns and model behavior anomalies",
                    service_hints=("CloudWatch", "Bedrock"),
                ),
            ),
        ),
        ThreatItem(
            id="AI-2",
            stride_category=Stride.INFORMATION_DISCLOSURE,
            title="Cross-tenant data leakage via retrieval",
            scenario=(
                "RAG system retrieves and exposes documents from other tenants due to "
                "insufficient access controls."
            ),
            affected_assets=("Document corpus", "Vector embeddings", "Retrieved context"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement tenant isolation in vector store with metadata filtering",
                    service_hints=("OpenSearch", "Pinecone"),
                ),
                Mitigation(
                    control="Use separate vector indices per tenant or customer",
                    service_hints=("OpenSearch", "S3"),
                ),
                Mitigation(
                    control="Validate document access permissions before retrieval",
                    service_hints=("Lambda", "IAM"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor cross-tenant access attempts and retrieval patterns",
                    service_hints=("CloudTrail", "CloudWatch"),
                ),
            ),
        ),
        ThreatItem(
            id="AI-3",
            stride_category=Stride.TAMPERING,
            title="Vector store poisoning",
            scenario=(
                "Attacker injects malicious documents or embeddings to manipulate "
                "retrieval results and AI responses."
            ),
            affected_assets=("Vector embeddings", "Document corpus", "AI responses"),
            likelihood=Level.MEDIUM,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement document validation and content scanning before ingestion",
                    service_hints=("Textract", "Comprehend", "Macie"),
                ),
                Mitigation(
                    control="Use versioning and audit trails for document changes",
                    service_hints=("S3", "OpenSearch"),
                ),
                Mitigation(
                    control="Restrict document ingestion to authorized sources only",
                    service_hints=("IAM", "S3"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor document ingestion patterns and embedding quality metrics",
                    service_hints=("CloudWatch", "CloudTrail"),
                ),
            ),
        ),
        ThreatItem(
            id="AI-4",
            stride_category=Stride.DENIAL_OF_SERVICE,
            title="Model inference cost abuse",
            scenario=(
                "Attacker floods the system with expensive inference requests to "
                "exhaust budget or cause service degradation."
            ),
            affected_assets=("AI model capacity", "Cost budget", "Service availability"),
            likelihood=Level.HIGH,
            impact=Level.MEDIUM,
            mitigations=(
                Mitigation(
                    control="Implement rate limiting and request throttling",
                    service_hints=("API Gateway", "Lambda"),
                ),
                Mitigation(
                    control="Set cost budgets and alerts for AI service usage",
                    service_hints=("Cost Explorer", "Budgets"),
                ),
                Mitigation(
                    control="Use caching for common queries and responses",
                    service_hints=("ElastiCache", "DynamoDB"),
                ),
            ),
            detections=(
                Detection(
                    signal="Monitor inference request patterns and cost anomalies",
                    service_hints=("CloudWatch", "Cost Anomaly Detection"),
                ),
            ),
        ),
        ThreatItem(
            id="AI-5",
            stride_category=Stride.INFORMATION_DISCLOSURE,
            title="Sensitive data in logs and traces",
            scenario=(
                "User queries, AI responses, or retrieved context containing "
                "PII/sensitive data are logged in plaintext."
            ),
            affected_assets=("CloudWatch Logs", "X-Ray traces", "Application logs"),
            likelihood=Level.HIGH,
            impact=Level.HIGH,
            mitigations=(
                Mitigation(
                    control="Implement data redaction in logging and tracing",
                    service_hints=("Lambda", "CloudWatch"),
                ),
                Mitigation(
                    control="Use structured logging with field-level encryption",
                    service_hints=("KMS", "CloudWatch Logs"),
                ),
                Mitigation(
                    control="Minimize logging of user inputs and AI responses",
                    service_hints=("Lambda", "API Gateway"),
                ),
            ),
            detections=(
                Detection(
                    signal="Scan logs for PII and sensitive data patterns",
                    service_hints=("Macie", "CloudWatch Insights"),
                ),
            ),
        ),
    ]

    if ctx.has_sagemaker:
        threats.append(
            ThreatItem(
                id="AI-6",
                stride_category=Stride.ELEVATION_OF_PRIVILEGE,
                title="Model endpoint privilege escalation",
                scenario=(
                    "Compromised model endpoint gains access to training data or other "
                    "cloud resources beyond intended scope."
                ),
                affected_assets=("Training data", "Model artifacts", "Cloud resources"),
                likelihood=Level.LOW,
                impact=Level.HIGH,
                mitigations=(
                    Mitigation(
                        control="Use least-privilege IAM roles for model endpoints",
                        service_hints=("IAM", "SageMaker"),
                    ),
                    Mitigation(
                        control="Isolate model endpoints in separate VPC subnets",
                        service_hints=("VPC", "SageMaker"),
                    ),
                ),
                detections=(
                    Detection(
                        signal="Monitor unusual API calls from model endpoints",
                        service_hints=("CloudTrail", "GuardDuty"),
                    ),
                ),
            )
        )

    return threats
