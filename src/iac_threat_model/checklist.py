"""Security controls checklist evaluated against threat facts."""

import logging
from typing import Callable

from .facts import ThreatFacts
from .models import (
    BoundaryType,
    ChecklistItem,
    CheckStatus,
    EncryptionAtRest,
    TrustBoundary,
)
from .services import ResourceType, Service

logger = logging.getLogger(__name__)

ENCRYPTION_ITEM = "All data stores have encryption at rest enabled"
PUBLIC_ENDPOINTS_ITEM = "Public endpoints are properly secured"
BOUNDARY_COVERAGE_ITEM = "Every public entry point crosses a declared trust boundary"
IAM_ITEM = "IAM policies follow least-privilege principle"
CLOUDTRAIL_ITEM = "CloudTrail logging is enabled"


def _check_encryption(facts: ThreatFacts, boundaries: list[TrustBoundary]) -> ChecklistItem:
    if not facts.data_stores:
        return ChecklistItem(item=ENCRYPTION_ITEM, status=CheckStatus.PASS, details="No data stores")

    unencrypted = [ds for ds in facts.data_stores if ds.encryption_at_rest == EncryptionAtRest.NONE]
    unknown = [ds for ds in facts.data_stores if ds.encryption_at_rest == EncryptionAtRest.UNKNOWN]

    if unencrypted:
        return ChecklistItem(
            item=ENCRYPTION_ITEM,
            status=CheckStatus.WARN,
            details=f"{len(unencrypted)} stores without encryption",
        )
    if unknown:
        return ChecklistItem(
            item=ENCRYPTION_ITEM,
            status=CheckStatus.UNKNOWN,
            details=f"{len(unknown)} stores with undetermined encryption",
        )
    return ChecklistItem(item=ENCRYPTION_ITEM, status=CheckStatus.PASS)


def _check_public_endpoints(facts: ThreatFacts, boundaries: list[TrustBoundary]) -> ChecklistItem:
    public = [ep for ep in facts.entry_points if ep.is_public]
    if not public:
        return ChecklistItem(item=PUBLIC_ENDPOINTS_ITEM, status=CheckStatus.PASS)
    return ChecklistItem(
        item=PUBLIC_ENDPOINTS_ITEM,
        status=CheckStatus.UNKNOWN,
        details=f"{len(public)} public endpoints found",
    )


def _check_boundary_coverage(facts: ThreatFacts, boundaries: list[TrustBoundary]) -> ChecklistItem:
    public = [ep for ep in facts.entry_points if ep.is_public]
    if not public:
        return ChecklistItem(item=BOUNDARY_COVERAGE_ITEM, status=CheckStatus.PASS)

    if any(b.type == BoundaryType.INTERNET_TO_CLOUD for b in boundaries):
        return ChecklistItem(
            item=BOUNDARY_COVERAGE_ITEM,
            status=CheckStatus.PASS,
            details=f"{len(public)} public entry points behind the internet boundary",
        )
    return ChecklistItem(
        item=BOUNDARY_COVERAGE_ITEM,
        status=CheckStatus.WARN,
        details=f"{len(public)} public entry points without an internet boundary",
    )


def _check_iam(facts: ThreatFacts, boundaries: list[TrustBoundary]) -> ChecklistItem:
    if facts.has_service(Service.IAM.value):
        details = "Manual review required for IAM policies"
    else:
        details = "No IAM resources declared; review inherited and default roles"
    return ChecklistItem(item=IAM_ITEM, status=CheckStatus.UNKNOWN, details=details)


def _check_cloudtrail(facts: ThreatFacts, boundaries: list[TrustBoundary]) -> ChecklistItem:
    if facts.has_type(ResourceType.CLOUDTRAIL_TRAIL):
        return ChecklistItem(item=CLOUDTRAIL_ITEM, status=CheckStatus.PASS)
    return ChecklistItem(
        item=CLOUDTRAIL_ITEM,
        status=CheckStatus.WARN,
        details="No CloudTrail found in architecture",
    )


CHECKS: tuple[tuple[str, Callable[[ThreatFacts, list[TrustBoundary]], ChecklistItem]], ...] = (
    (ENCRYPTION_ITEM, _check_encryption),
    (PUBLIC_ENDPOINTS_ITEM, _check_public_endpoints),
    (BOUNDARY_COVERAGE_ITEM, _check_boundary_coverage),
    (IAM_ITEM, _check_iam),
    (CLOUDTRAIL_ITEM, _check_cloudtrail),
)


def run_check_safely(
    item: str,
    check_func: Callable[[ThreatFacts, list[TrustBoundary]], ChecklistItem],
    facts: ThreatFacts,
    boundaries: list[TrustBoundary],
) -> ChecklistItem:
    """Run a check, reporting Unknown instead of raising."""
    try:
        return check_func(facts, boundaries)
    except Exception as e:
        logger.error(f"Checklist item '{item}' failed: {e}")
        return ChecklistItem(
            item=item,
            status=CheckStatus.UNKNOWN,
            details=f"Check could not be evaluated: {e}",
        )


def evaluate_checklist(facts: ThreatFacts, boundaries: list[TrustBoundary]) -> list[ChecklistItem]:
    """Evaluate every checklist item, in a fixed order."""
    return [run_check_safely(item, check, facts, boundaries) for item, check in CHECKS]
