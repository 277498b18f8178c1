"""
Collect threat facts from a synthesized CloudFormation template.

Reads the `Resources` section of a template (as written by `cdk synth` or
authored by hand) and produces the resource inventory, entry points and data
stores the threat model builder consumes. Only a small curated subset of each
resource's properties is kept.
"""

from __future__ import annotations

import logging
from typing import Any, NamedTuple, Optional

from ..errors import InvalidInputError
from ..models import (
    DataStore,
    DataStoreKind,
    EncryptionAtRest,
    EntryPoint,
    EntryPointKind,
    ResourceRef,
)
from ..services import ResourceType as T
from ..services import normalize_service

logger = logging.getLogger(__name__)

CDK_PATH_METADATA_KEY = "aws:cdk:path"

# CloudFormation property -> curated prop name, per resource type
CURATED_PROPS: dict[str, dict[str, str]] = {
    T.S3_BUCKET: {"BucketName": "bucket_name", "VersioningConfiguration": "versioning"},
    T.LAMBDA_FUNCTION: {"Runtime": "runtime", "MemorySize": "memory_size", "Timeout": "timeout"},
    T.DYNAMODB_TABLE: {"TableName": "table_name", "BillingMode": "billing_mode"},
    T.RDS_INSTANCE: {"Engine": "engine", "PubliclyAccessible": "publicly_accessible"},
    T.RDS_CLUSTER: {"Engine": "engine"},
    T.LOAD_BALANCER: {"Scheme": "scheme", "Type": "lb_type"},
    T.REST_API: {"Name": "name"},
    T.HTTP_API: {"Name": "name", "ProtocolType": "protocol_type"},
}


class CollectedFacts(NamedTuple):
    """Collector output in the shape the builder expects."""

    resources: list[ResourceRef]
    entry_points: list[EntryPoint]
    data_stores: list[DataStore]


def _is_true(value: Any) -> bool:
    return value is True or (isinstance(value, str) and value.lower() == "true")


def _is_false(value: Any) -> bool:
    return value is False or (isinstance(value, str) and value.lower() == "false")


def _is_intrinsic(value: Any) -> bool:
    """True for `{"Ref": ...}` and `{"Fn::...": ...}` values, which resolve only at deploy time."""
    return (
        isinstance(value, dict)
        and len(value) == 1
        and any(key == "Ref" or key.startswith("Fn::") for key in value)
    )


def _as_dict(value: Any) -> dict[str, Any]:
    """A literal property object, or {} for anything else (intrinsics included)."""
    if isinstance(value, dict) and not _is_intrinsic(value):
        return value
    return {}


def _encryption_from_flag(enabled: Any, kms_key: Any) -> EncryptionAtRest:
    """Encryption mode for resources with an 'encrypted' flag and optional KMS key."""
    if _is_true(enabled):
        return EncryptionAtRest.KMS if kms_key else EncryptionAtRest.PROVIDER_MANAGED
    if _is_false(enabled):
        return EncryptionAtRest.NONE
    return EncryptionAtRest.UNKNOWN


def _encryption_default_off(enabled: Any, kms_key: Any) -> EncryptionAtRest:
    """Like `_encryption_from_flag`, but an absent flag means unencrypted."""
    if enabled is None:
        return EncryptionAtRest.NONE
    return _encryption_from_flag(enabled, kms_key)


def s3_encryption(props: dict[str, Any]) -> EncryptionAtRest:
    encryption = props.get("BucketEncryption")
    if encryption is None:
        return EncryptionAtRest.NONE
    if not isinstance(encryption, dict) or _is_intrinsic(encryption):
        return EncryptionAtRest.UNKNOWN

    rules = encryption.get("ServerSideEncryptionConfiguration")
    if not rules:
        return EncryptionAtRest.NONE
    if not isinstance(rules, list):
        return EncryptionAtRest.UNKNOWN

    default = _as_dict(_as_dict(rules[0]).get("ServerSideEncryptionByDefault"))
    algorithm = default.get("SSEAlgorithm")
    if isinstance(algorithm, str) and algorithm.startswith("aws:kms"):
        return EncryptionAtRest.KMS
    if algorithm == "AES256":
        return EncryptionAtRest.PROVIDER_MANAGED
    return EncryptionAtRest.UNKNOWN


def dynamodb_encryption(props: dict[str, Any]) -> EncryptionAtRest:
    sse = props.get("SSESpecification")
    if sse is None:
        return EncryptionAtRest.NONE
    if not isinstance(sse, dict) or _is_intrinsic(sse):
        return EncryptionAtRest.UNKNOWN
    return _encryption_default_off(sse.get("SSEEnabled"), sse.get("KMSMasterKeyId"))


def rds_encryption(props: dict[str, Any]) -> EncryptionAtRest:
    return _encryption_default_off(props.get("StorageEncrypted"), props.get("KmsKeyId"))


def redshift_encryption(props: dict[str, Any]) -> EncryptionAtRest:
    return _encryption_from_flag(props.get("Encrypted"), props.get("KmsKeyId"))


def search_encryption(props: dict[str, Any]) -> EncryptionAtRest:
    options = _as_dict(props.get("EncryptionAtRestOptions"))
    return _encryption_from_flag(options.get("Enabled"), options.get("KmsKeyId"))


def efs_encryption(props: dict[str, Any]) -> EncryptionAtRest:
    return _encryption_from_flag(props.get("Encrypted"), props.get("KmsKeyId"))


# resource type -> (data store kind, encryption detector)
DATA_STORE_TYPES = {
    T.S3_BUCKET: (DataStoreKind.OBJECT_STORAGE, s3_encryption),
    T.DYNAMODB_TABLE: (DataStoreKind.KEY_VALUE, dynamodb_encryption),
    T.RDS_INSTANCE: (DataStoreKind.RELATIONAL, rds_encryption),
    T.RDS_CLUSTER: (DataStoreKind.RELATIONAL, rds_encryption),
    T.REDSHIFT_CLUSTER: (DataStoreKind.WAREHOUSE, redshift_encryption),
    T.OPENSEARCH_DOMAIN: (DataStoreKind.SEARCH_INDEX, search_encryption),
    T.ELASTICSEARCH_DOMAIN: (DataStoreKind.SEARCH_INDEX, search_encryption),
    T.EFS_FILE_SYSTEM: (DataStoreKind.FILE_SYSTEM, efs_encryption),
}


def _is_private_rest_api(props: dict[str, Any]) -> bool:
    types = _as_dict(props.get("EndpointConfiguration")).get("Types")
    return isinstance(types, list) and types == ["PRIVATE"]


def detect_entry_point(resource_id: str, resource_type: str, props: dict[str, Any]) -> Optional[EntryPoint]:
    """Entry point for a resource, or None if it does not accept external traffic."""
    if resource_type == T.REST_API:
        return EntryPoint(
            id=resource_id,
            kind=EntryPointKind.HTTP_API,
            is_public=not _is_private_rest_api(props),
        )
    if resource_type == T.HTTP_API:
        return EntryPoint(id=resource_id, kind=EntryPointKind.HTTP_API, is_public=True)
    if resource_type == T.LOAD_BALANCER:
        # CloudFormation defaults Scheme to internet-facing
        scheme = props.get("Scheme", "internet-facing")
        return EntryPoint(
            id=resource_id,
            kind=EntryPointKind.LOAD_BALANCER,
            is_public=scheme != "internal",
            notes=f"scheme: {scheme}" if isinstance(scheme, str) else None,
        )
    if resource_type == T.CLOUDFRONT_DISTRIBUTION:
        return EntryPoint(id=resource_id, kind=EntryPointKind.CDN, is_public=True)
    if resource_type == T.S3_BUCKET and props.get("WebsiteConfiguration"):
        return EntryPoint(
            id=resource_id,
            kind=EntryPointKind.PUBLIC_STORAGE_WEBSITE,
            is_public=True,
        )
    return None


def detect_data_store(resource_id: str, resource_type: str, props: dict[str, Any]) -> Optional[DataStore]:
    """Data store for a resource, or None if it does not persist data."""
    known = DATA_STORE_TYPES.get(resource_type)
    if known is None:
        return None
    kind, detect_encryption = known
    return DataStore(
        id=resource_id,
        kind=kind,
        # conservative: assume anything persisted may be sensitive
        contains_sensitive_data_likely=True,
        encryption_at_rest=detect_encryption(props),
    )


def pick_props(resource_type: str, props: dict[str, Any]) -> dict[str, Any]:
    """Curated subset of properties; intrinsic functions are kept as-is."""
    picked: dict[str, Any] = {}
    for cfn_name, name in CURATED_PROPS.get(resource_type, {}).items():
        if cfn_name in props:
            picked[name] = props[cfn_name]
    if resource_type == T.S3_BUCKET and props.get("PublicAccessBlockConfiguration"):
        picked["public_access"] = "blocked"
    return picked


def collect_from_template(template: Any) -> CollectedFacts:
    """Collect resources, entry points and data stores from a template.

    Resources without a usable type are still passed through so the builder
    can report them as malformed.

    Raises:
        InvalidInputError: If the template or its Resources section is not an object.
    """
    if not isinstance(template, dict):
        raise InvalidInputError("CloudFormation template must be an object")
    resources_section = template.get("Resources") or {}
    if not isinstance(resources_section, dict):
        raise InvalidInputError("CloudFormation 'Resources' must be an object")

    resources: list[ResourceRef] = []
    entry_points: list[EntryPoint] = []
    data_stores: list[DataStore] = []

    for logical_id, definition in resources_section.items():
        if not isinstance(definition, dict):
            logger.warning(f"Ignoring resource {logical_id}: definition is not an object")
            continue

        cdk_path = _as_dict(definition.get("Metadata")).get(CDK_PATH_METADATA_KEY)
        resource_id = cdk_path if isinstance(cdk_path, str) and cdk_path else logical_id
        resource_type = definition.get("Type")
        if not isinstance(resource_type, str):
            resource_type = ""
        props = _as_dict(definition.get("Properties"))

        service = normalize_service(resource_type) or ""
        resources.append(
            ResourceRef(
                id=resource_id,
                type=resource_type,
                service=service,
                props=pick_props(resource_type, props),
            )
        )

        entry_point = detect_entry_point(resource_id, resource_type, props)
        if entry_point is not None:
            entry_points.append(entry_point)

        data_store = detect_data_store(resource_id, resource_type, props)
        if data_store is not None:
            data_stores.append(data_store)

    logger.info(
        f"Collected {len(resources)} resources, {len(entry_points)} entry points, "
        f"{len(data_stores)} data stores from template"
    )
    return CollectedFacts(resources, entry_points, data_stores)
