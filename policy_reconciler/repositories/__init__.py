"""Repository layer modules."""

from policy_reconciler.repositories.confirmed_field_repository import ConfirmedFieldRepository
from policy_reconciler.repositories.policy_record_repository import PolicyRecordRepository

__all__ = [
    "ConfirmedFieldRepository",
    "PolicyRecordRepository",
]
