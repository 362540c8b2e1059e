"""Detection thresholds."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DetectionConfig:
    """
    Tunable thresholds for the anomaly strategies.

    Attributes:
        min_history_records: Fewer matching history records than this skips
            the historical check. Default 3.
        history_window: Number of most recent records averaged. Default 6.
        historical_review_ratio: |change| above this raises REVIEW.
        historical_anomaly_ratio: |change| above this raises ANOMALY.
        peer_review_multiplier: Salary above peer average times this raises
            REVIEW.
        peer_anomaly_multiplier: Salary above peer average times this raises
            ANOMALY.
        bonus_review_multiplier: Bonus above salary times this raises REVIEW.
    """

    min_history_records: int = 3
    history_window: int = 6
    historical_review_ratio: Decimal = Decimal("0.2")
    historical_anomaly_ratio: Decimal = Decimal("0.5")
    peer_review_multiplier: Decimal = Decimal("1.5")
    peer_anomaly_multiplier: Decimal = Decimal("3")
    bonus_review_multiplier: Decimal = Decimal("2")

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.min_history_records < 1:
            raise ValueError("min_history_records must be at least 1")
        if self.history_window < 1:
            raise ValueError("history_window must be at least 1")
        if self.historical_review_ratio < 0:
            raise ValueError("historical_review_ratio must be non-negative")
        if self.historical_review_ratio > self.historical_anomaly_ratio:
            raise ValueError("historical_review_ratio must not exceed historical_anomaly_ratio")
        if self.peer_review_multiplier <= 0:
            raise ValueError("peer_review_multiplier must be positive")
        if self.peer_review_multiplier > self.peer_anomaly_multiplier:
            raise ValueError("peer_review_multiplier must not exceed peer_anomaly_multiplier")
        if self.bonus_review_multiplier < 0:
            raise ValueError("bonus_review_multiplier must be non-negative")
