"""Risk classification and access policy.

Both thresholds are shared by online scoring and offline evaluation; the
confusion metrics treat ``score < HIGH_RISK_THRESHOLD`` as a positive.
"""

from .models import AccessDecision, RiskLevel

HIGH_RISK_THRESHOLD = 40.0
MEDIUM_RISK_THRESHOLD = 70.0

_DECISIONS: dict[RiskLevel, AccessDecision] = {
    RiskLevel.HIGH: AccessDecision.DENY,
    RiskLevel.MEDIUM: AccessDecision.WARN,
    RiskLevel.LOW: AccessDecision.ALLOW,
}


def classify(score: float) -> RiskLevel:
    """Map a trust score to a risk level.

    Args:
        score: Trust score (0-100)

    Returns:
        HIGH below 40, MEDIUM below 70, LOW otherwise
    """
    if score < HIGH_RISK_THRESHOLD:
        return RiskLevel.HIGH
    elif score < MEDIUM_RISK_THRESHOLD:
        return RiskLevel.MEDIUM
    else:
        return RiskLevel.LOW


def decide(risk: RiskLevel) -> AccessDecision:
    """Map a risk level to an access decision."""
    return _DECISIONS[RiskLevel(risk)]


def is_high_risk(score: float, threshold: float = HIGH_RISK_THRESHOLD) -> bool:
    """Return True if the score falls in the high-risk band."""
    return score < threshold
