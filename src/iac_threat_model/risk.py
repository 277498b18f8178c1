"""Likelihood, impact and the fixed risk lookup table."""

from enum import Enum


class Level(str, Enum):
    """Likelihood or impact of a threat."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskLevel(str, Enum):
    """Derived risk classification."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


# (likelihood, impact) -> risk
RISK_MATRIX: dict[tuple[Level, Level], RiskLevel] = {
    (Level.LOW, Level.LOW): RiskLevel.LOW,
    (Level.LOW, Level.MEDIUM): RiskLevel.MEDIUM,
    (Level.LOW, Level.HIGH): RiskLevel.MEDIUM,
    (Level.MEDIUM, Level.LOW): RiskLevel.MEDIUM,
    (Level.MEDIUM, Level.MEDIUM): RiskLevel.HIGH,
    (Level.MEDIUM, Level.HIGH): RiskLevel.HIGH,
    (Level.HIGH, Level.LOW): RiskLevel.MEDIUM,
    (Level.HIGH, Level.MEDIUM): RiskLevel.HIGH,
    (Level.HIGH, Level.HIGH): RiskLevel.CRITICAL,
}


def calculate_risk(likelihood: Level, impact: Level) -> RiskLevel:
    """Look up the risk level for a likelihood/impact pair."""
    return RISK_MATRIX[(Level(likelihood), Level(impact))]
