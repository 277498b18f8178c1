"""Markdown report rendering of threat model documents."""

from collections import Counter

from ..models import CheckStatus, Detection, Mitigation, Stride, ThreatModelDoc
from ..risk import RiskLevel

RISK_EMOJI: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: "🔴",
    RiskLevel.HIGH: "🟠",
    RiskLevel.MEDIUM: "🟡",
    RiskLevel.LOW: "🟢",
}

STATUS_EMOJI: dict[CheckStatus, str] = {
    CheckStatus.PASS: "✅",
    CheckStatus.WARN: "⚠️",
    CheckStatus.UNKNOWN: "❓",
}

# Histogram order, most severe first
RISK_ORDER = (RiskLevel.CRITICAL, RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW)


def _hint_lines(entries: tuple[Mitigation, ...] | tuple[Detection, ...], attr: str) -> list[str]:
    lines = []
    for entry in entries:
        lines.append(f"- {getattr(entry, attr)}")
        if entry.service_hints:
            lines.append(f"  - *Services:* {', '.join(entry.service_hints)}")
    return lines


def _summary_section(doc: ThreatModelDoc) -> list[str]:
    lines = ["## Executive Summary", ""]
    lines.append(
        f"This threat model identifies **{len(doc.threats)} potential threats** across the architecture:"
    )
    lines.append("")
    histogram = Counter(t.risk for t in doc.threats)
    for risk in RISK_ORDER:
        if histogram[risk]:
            lines.append(f"- {RISK_EMOJI[risk]} **{histogram[risk]} {risk.value}** risk threats")
    lines.append("")
    return lines


def _architecture_section(doc: ThreatModelDoc) -> list[str]:
    services = sorted({r.service for r in doc.inventory})
    public = sum(1 for ep in doc.entry_points if ep.is_public)

    lines = ["## Architecture Overview", ""]
    lines.append(f"**Services:** {len(doc.inventory)} resources across {len(services)} service types")
    lines.append(f"**Entry Points:** {len(doc.entry_points)} ({public} public)")
    lines.append(f"**Data Stores:** {len(doc.data_stores)}")
    lines.append(f"**Trust Boundaries:** {len(doc.boundaries)}")
    lines.append("")

    lines.extend(["### Resource Inventory", ""])
    for service in services:
        resources = sorted((r for r in doc.inventory if r.service == service), key=lambda r: r.id)
        lines.append(f"**{service.upper()}** ({len(resources)})")
        for resource in resources:
            lines.append(f"- `{resource.id}` ({resource.type})")
        lines.append("")

    lines.extend(["### Trust Boundaries", ""])
    for boundary in sorted(doc.boundaries, key=lambda b: b.id):
        lines.append(f"**{boundary.name}** (`{boundary.type.value}`)")
        lines.append(boundary.description)
        lines.append("")

    if doc.flows:
        lines.extend(["### Data Flows", ""])
        for flow in sorted(doc.flows, key=lambda f: (f.source, f.target, f.label)):
            lines.append(f"- `{flow.source}` → `{flow.target}`: {flow.label}")
        lines.append("")

    return lines


def _threat_section(doc: ThreatModelDoc) -> list[str]:
    lines = ["## Threat Analysis", ""]

    for stride in Stride:
        threats = sorted((t for t in doc.threats if t.stride_category == stride), key=lambda t: t.id)
        if not threats:
            continue

        lines.extend([f"### {stride.value}", ""])
        for threat in threats:
            lines.append(f"#### {RISK_EMOJI[threat.risk]} {threat.title} (`{threat.id}`)")
            lines.append("")
            lines.append(
                f"**Risk Level:** {threat.risk.value} "
                f"({threat.likelihood.value} likelihood × {threat.impact.value} impact)"
            )
            lines.append("")
            lines.append(f"**Scenario:** {threat.scenario}")
            lines.append("")

            if threat.affected_assets:
                lines.append(f"**Affected Assets:** {', '.join(threat.affected_assets)}")
                lines.append("")

            if threat.mitigations:
                lines.append("**Mitigations:**")
                lines.extend(_hint_lines(threat.mitigations, "control"))
                lines.append("")

            if threat.detections:
                lines.append("**Detection & Monitoring:**")
                lines.extend(_hint_lines(threat.detections, "signal"))
                lines.append("")

    return lines


def _checklist_section(doc: ThreatModelDoc) -> list[str]:
    lines = ["## Security Controls Checklist", ""]
    if not doc.checklist:
        lines.append("*No automated checks available for this architecture.*")
    for entry in doc.checklist:
        lines.append(f"{STATUS_EMOJI[entry.status]} {entry.item}")
        if entry.details:
            lines.append(f"   *{entry.details}*")
    lines.append("")
    return lines


def _questions_section(doc: ThreatModelDoc) -> list[str]:
    if not doc.open_questions:
        return []
    lines = ["## Open Questions", ""]
    lines.append("The following questions should be addressed during security review:")
    lines.append("")
    for index, question in enumerate(doc.open_questions, 1):
        lines.append(f"{index}. {question}")
    lines.append("")
    return lines


def render_markdown(doc: ThreatModelDoc) -> str:
    """Render a human-readable threat model report."""
    lines = [f"# Threat Model: {doc.meta.project_name or 'Cloud Architecture'}", ""]
    lines.append(f"**Generated:** {doc.meta.generated_at}")
    lines.append(f"**Workload Type:** {doc.workload_type.value}")
    if doc.meta.engine_version:
        lines.append(f"**Engine Version:** {doc.meta.engine_version}")
    lines.append("")

    lines.extend(_summary_section(doc))
    lines.extend(_architecture_section(doc))
    lines.extend(_threat_section(doc))
    lines.extend(_checklist_section(doc))
    lines.extend(_questions_section(doc))

    lines.append("---")
    lines.append("")
    lines.append(
        "*This threat model was generated automatically from the infrastructure definition. "
        "Review and customize it for your specific security requirements.*"
    )
    return "\n".join(lines)
