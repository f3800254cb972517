"""
Candidate causes and descriptions for detected anomalies.

Causes are templated triage hints keyed by metric category, not analysis
results. The category comes from the semantic type assigned by the schema
analyzer; the column name is only consulted when the type maps to nothing.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from .schema import AnomalyKind, Detection, DetectorName

MAX_CAUSES = 3

# Checked in order; first group with a matching keyword wins
CATEGORY_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("revenue", ("revenue", "price", "arpu")),
    ("dau", ("dau", "mau", "user")),
    ("retention", ("retention",)),
    ("engagement", ("session", "engagement")),
    ("error", ("error", "crash")),
]

DEFAULT_CATEGORY = "default"

POSSIBLE_CAUSES: Dict[str, List[str]] = {
    "revenue": [
        "Promotional event or sale",
        "App store featuring",
        "Marketing campaign launched",
        "Payment provider issues",
        "Currency exchange fluctuation",
        "New IAP content released",
    ],
    "dau": [
        "Marketing campaign effect",
        "App store visibility change",
        "Competitor app launch",
        "Technical issues (crashes, servers)",
        "Seasonal effect",
        "Content update released",
    ],
    "retention": [
        "Onboarding flow changed",
        "Game balance adjustment",
        "New content added",
        "Technical stability issues",
        "Matchmaking changes",
    ],
    "engagement": [
        "Event or limited-time content",
        "UI/UX changes",
        "Notification strategy change",
        "Server performance issues",
    ],
    "error": [
        "New build deployment",
        "Third-party SDK update",
        "Server-side changes",
        "Device OS update",
    ],
    DEFAULT_CATEGORY: [
        "Recent update or change",
        "External factors",
        "Data collection issue",
    ],
}


def _category_of(name: str) -> str:
    name = name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def metric_category(semantic_type: str, column: Optional[str] = None) -> str:
    """
    Map a metric to its cause category.

    Args:
        semantic_type: Semantic type of the metric column (e.g. "retention_day")
        column: Column name, used only if the semantic type has no category

    Returns:
        One of "revenue", "dau", "retention", "engagement", "error", "default"
    """
    category = _category_of(semantic_type)
    if category == DEFAULT_CATEGORY and column:
        category = _category_of(column)
    return category


def possible_causes(category: str) -> List[str]:
    causes = POSSIBLE_CAUSES.get(category, POSSIBLE_CAUSES[DEFAULT_CATEGORY])
    return causes[:MAX_CAUSES]


def describe(
    detection: Detection,
    column: str,
    moving_average_window: int = 7,
) -> str:
    """
    Build the one-line description shown on an anomaly card.

    Args:
        detection: Detector output
        column: Metric column name
        moving_average_window: Window size quoted for moving-average findings

    Returns:
        Human-readable sentence
    """
    period = detection.period

    if detection.detector is DetectorName.MOVING_AVERAGE:
        pct = round(detection.deviation * 100)
        return (
            f"{column} deviated {pct}% from {moving_average_window}-period "
            f"moving average on {period}"
        )

    if detection.kind is AnomalyKind.TREND_CHANGE:
        direction = detection.direction or (
            "upward" if detection.percent_change > 0 else "downward"
        )
        return f"Significant {direction} trend change detected in {column} starting {period}"

    change = abs(round(detection.percent_change))
    if detection.kind is AnomalyKind.SPIKE:
        return f"{column} spiked {change}% above baseline on {period}"
    if detection.kind is AnomalyKind.DROP:
        return f"{column} dropped {change}% below baseline on {period}"
    return f"Unusual pattern detected in {column} on {period}"
