"""Policy data reconciliation service.

Merges repeated automated extractions into long-lived policy records without
fabricating values, silently dropping verified values, or overwriting fields a
human has confirmed.
"""

__version__ = "0.1.0"
