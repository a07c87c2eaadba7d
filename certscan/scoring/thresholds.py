"""Confidence thresholds for the extraction cascade and review routing.

The OCR stage thresholds decrease down the cascade: native text must be
high confidence, cloud OCR must beat 0.8, self-hosted OCR must beat 0.6,
and the local fallback is accepted unconditionally.
"""

HIGH_CONFIDENCE_THRESHOLD: float = 0.8
"""Native-text results at or above this score are returned immediately."""

CLOUD_VISION_ACCEPT_THRESHOLD: float = 0.8
"""Cloud OCR results must score strictly above this value."""

SELF_HOSTED_ACCEPT_THRESHOLD: float = 0.6
"""Self-hosted OCR results must score strictly above this value."""

REVIEW_THRESHOLD: float = 0.7
"""Results scoring below this value are flagged for human review."""
