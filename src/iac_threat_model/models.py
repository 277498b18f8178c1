"""Pydantic models for the threat model engine."""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)

from .risk import Level, RiskLevel, calculate_risk


class Stride(str, Enum):
    """STRIDE threat category."""

    SPOOFING = "Spoofing"
    TAMPERING = "Tampering"
    REPUDIATION = "Repudiation"
    INFORMATION_DISCLOSURE = "InformationDisclosure"
    DENIAL_OF_SERVICE = "DenialOfService"
    ELEVATION_OF_PRIVILEGE = "ElevationOfPrivilege"


class WorkloadType(str, Enum):
    """Coarse architecture pattern inferred from the inventory."""

    GENAI_RAG = "genai-rag"
    DATA_PIPELINE = "data-pipeline"
    SERVERLESS_API = "serverless-api"
    CONTAINER_APP = "container-app"
    THREE_TIER = "three-tier"
    GENERAL = "general"


class EntryPointKind(str, Enum):
    HTTP_API = "http-api"
    LOAD_BALANCER = "load-balancer"
    CDN = "cdn"
    PUBLIC_STORAGE_WEBSITE = "public-storage-website"
    OTHER = "other"


class DataStoreKind(str, Enum):
    OBJECT_STORAGE = "object-storage"
    KEY_VALUE = "key-value"
    RELATIONAL = "relational"
    WAREHOUSE = "warehouse"
    SEARCH_INDEX = "search-index"
    FILE_SYSTEM = "file-system"
    OTHER = "other"


class EncryptionAtRest(str, Enum):
    KMS = "kms"
    PROVIDER_MANAGED = "provider-managed"
    NONE = "none"
    UNKNOWN = "unknown"


class BoundaryType(str, Enum):
    INTERNET_TO_CLOUD = "InternetToCloud"
    NETWORK_BOUNDARY = "NetworkBoundary"
    ACCOUNT_BOUNDARY = "AccountBoundary"
    SERVICE_TO_SERVICE = "ServiceToService"


class CheckStatus(str, Enum):
    """Status of a checklist item."""

    PASS = "Pass"
    WARN = "Warn"
    UNKNOWN = "Unknown"


class OutputFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Facts
# ---------------------------------------------------------------------------


class FrozenProps(dict):
    """A dict that rejects mutation, so resource props stay as collected."""

    def _read_only(self, *args, **kwargs):
        raise TypeError("resource props are read-only")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __reduce__(self):
        return (FrozenProps, (dict(self),))


def _camel(name: str) -> AliasChoices:
    """Accept both `snake_case` and the camelCase spelling collectors may emit."""
    first, *rest = name.split("_")
    return AliasChoices(name, first + "".join(part.title() for part in rest))


class ResourceRef(_Frozen):
    """A single resource the deployment will create."""

    id: str = Field(description="Stable path-like identifier, unique within the inventory")
    type: str = Field(description="Fully-qualified resource type, e.g. 'AWS::Lambda::Function'")
    service: str = Field(default="", description="Short service tag, e.g. 'lambda'")
    props: Annotated[dict[str, Any], AfterValidator(FrozenProps)] = Field(
        default_factory=FrozenProps,
        description="Small curated subset of resource properties (read-only)",
    )


class EntryPoint(_Frozen):
    """A resource that accepts external traffic."""

    id: str = Field(description="Resource id of the entry point")
    kind: EntryPointKind = Field(description="Kind of entry point")
    is_public: bool = Field(
        validation_alias=_camel("is_public"),
        description="Whether the entry point is reachable from the internet",
    )
    notes: Optional[str] = Field(default=None, description="Free-form notes from the collector")


class DataStore(_Frozen):
    """A resource that persists data."""

    id: str = Field(description="Resource id of the data store")
    kind: DataStoreKind = Field(description="Kind of data store")
    contains_sensitive_data_likely: bool = Field(
        default=True,
        validation_alias=_camel("contains_sensitive_data_likely"),
        description="Heuristic: whether the store likely holds sensitive data",
    )
    encryption_at_rest: EncryptionAtRest = Field(
        default=EncryptionAtRest.UNKNOWN,
        validation_alias=_camel("encryption_at_rest"),
        description="Declared encryption-at-rest mode",
    )


# ---------------------------------------------------------------------------
# Derived artifacts
# ---------------------------------------------------------------------------


class TrustBoundary(_Frozen):
    id: str = Field(description="Boundary identifier")
    name: str = Field(description="Human-readable boundary name")
    type: BoundaryType = Field(description="Boundary category")
    description: str = Field(description="What the boundary separates")


class DataFlow(_Frozen):
    """Directed, labeled edge between two resource or boundary ids."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(alias="from", description="Originating resource or boundary id")
    target: str = Field(alias="to", description="Receiving resource or boundary id")
    label: str = Field(description="Description of the interaction")


class Mitigation(_Frozen):
    control: str = Field(description="Recommended control")
    service_hints: tuple[str, ...] = Field(
        default=(), description="Managed services that help implement the control"
    )


class Detection(_Frozen):
    signal: str = Field(description="Signal to monitor")
    service_hints: tuple[str, ...] = Field(
        default=(), description="Managed services that surface the signal"
    )


class ThreatItem(_Frozen):
    """A single STRIDE threat produced by a rule template."""

    id: str = Field(description="Stable, template-scoped identifier, e.g. 'API-3'")
    stride_category: Stride = Field(description="STRIDE category")
    title: str = Field(description="Short threat title")
    scenario: str = Field(description="Attack narrative")
    affected_assets: tuple[str, ...] = Field(default=(), description="Assets at risk")
    likelihood: Level = Field(description="Likelihood: Low, Medium, High")
    impact: Level = Field(description="Impact: Low, Medium, High")
    mitigations: tuple[Mitigation, ...] = Field(default=(), description="Recommended mitigations")
    detections: tuple[Detection, ...] = Field(default=(), description="Detection signals")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def risk(self) -> RiskLevel:
        """Risk derived from likelihood and impact."""
        return calculate_risk(self.likelihood, self.impact)


class ChecklistItem(_Frozen):
    item: str = Field(description="What was checked")
    status: CheckStatus = Field(description="Pass, Warn or Unknown")
    details: Optional[str] = Field(default=None, description="Supporting detail")


class ThreatModelMeta(_Frozen):
    project_name: Optional[str] = Field(default=None, description="Project name for the report header")
    generated_at: str = Field(description="ISO 8601 UTC timestamp of generation")
    engine_version: Optional[str] = Field(default=None, description="Version of the engine")


class ThreatModelDoc(_Frozen):
    """The assembled threat model document."""

    meta: ThreatModelMeta
    inventory: tuple[ResourceRef, ...] = ()
    entry_points: tuple[EntryPoint, ...] = ()
    data_stores: tuple[DataStore, ...] = ()
    boundaries: tuple[TrustBoundary, ...] = ()
    flows: tuple[DataFlow, ...] = ()
    threats: tuple[ThreatItem, ...] = ()
    checklist: tuple[ChecklistItem, ...] = ()
    open_questions: tuple[str, ...] = ()
    workload_type: WorkloadType = WorkloadType.GENERAL

    @model_validator(mode="after")
    def _unique_threat_ids(self) -> "ThreatModelDoc":
        seen: set[str] = set()
        for threat in self.threats:
            if threat.id in seen:
                raise ValueError(f"Duplicate threat id: {threat.id}")
            seen.add(threat.id)
        return self


# ---------------------------------------------------------------------------
# Options, config and requests
# ---------------------------------------------------------------------------


class ThreatModelOptions(BaseModel):
    """Parameters passed to the assembler."""

    project_name: Optional[str] = Field(default=None, description="Project name for the report header")
    engine_version: Optional[str] = Field(default=None, description="Engine version (defaults to package version)")
    include_general_threats: bool = Field(
        default=True,
        description="Append general cloud threats to workload-specific templates",
    )


class ThreatModelConfig(BaseModel):
    """Output configuration owned by the caller."""

    enabled: bool = Field(default=True, description="Whether threat model generation is enabled")
    formats: list[OutputFormat] = Field(
        default_factory=lambda: [OutputFormat.MARKDOWN, OutputFormat.JSON],
        description="Output formats to write",
    )
    output_dir: str = Field(default="threat-model", description="Directory to write reports into")
    project_name: Optional[str] = Field(default=None, description="Project name override")


class ThreatModelRequest(BaseModel):
    """Request body for generating a threat model."""

    resources: list[dict[str, Any]] = Field(default_factory=list, description="Resource inventory")
    entry_points: list[dict[str, Any]] = Field(
        default_factory=list, validation_alias=_camel("entry_points"), description="Entry points"
    )
    data_stores: list[dict[str, Any]] = Field(
        default_factory=list, validation_alias=_camel("data_stores"), description="Data stores"
    )
    project_name: Optional[str] = Field(
        default=None,
        validation_alias=_camel("project_name"),
        description="Project name for the report header",
    )


class ThreatModelInput(ThreatModelRequest):
    """Input parameters parsed from stdin JSON."""

    cloudformation_template: Optional[dict[str, Any]] = Field(
        default=None,
        description="Synthesized CloudFormation template; replaces the explicit arrays when given",
    )
    config: ThreatModelConfig = Field(
        default_factory=ThreatModelConfig, description="Output configuration"
    )
