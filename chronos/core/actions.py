"""
Confirmation flow for destructive store operations.
A pending action is requested, then either confirmed (executed once) or cancelled.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional

from .store import RecordStore
from ..util.logging import logger

DELETE_ONE = 'delete_one'
CLEAR_ALL = 'clear_all'


@dataclass(frozen=True)
class PendingAction:
    kind: str  # delete_one, clear_all
    target_id: Optional[str]
    title: str
    message: str

    def to_dict(self) -> Dict:
        return asdict(self)


class ConfirmationFlow:
    """Holds at most one pending action against a store."""

    def __init__(self, store: RecordStore):
        self.store = store
        self.pending: Optional[PendingAction] = None

    def request_delete(self, record_id: str) -> PendingAction:
        self.pending = PendingAction(
            kind=DELETE_ONE,
            target_id=record_id,
            title='Удаление записи',
            message='Вы уверены, что хотите безвозвратно удалить эту запись?'
        )
        logger.log_operation("confirmation.requested", "pending", {"kind": DELETE_ONE, "target_id": record_id})
        return self.pending

    def request_reset(self) -> PendingAction:
        self.pending = PendingAction(
            kind=CLEAR_ALL,
            target_id=None,
            title='Очистка базы данных',
            message='ВНИМАНИЕ: Вы собираетесь удалить ВСЕ записи и настройки дела. '
                    'Это действие нельзя отменить. Продолжить?'
        )
        logger.log_operation("confirmation.requested", "pending", {"kind": CLEAR_ALL})
        return self.pending

    def confirm(self) -> Optional[PendingAction]:
        """Execute the pending action, if any, and clear it. Returns what was executed."""
        action = self.pending
        self.pending = None
        if action is None:
            return None

        if action.kind == DELETE_ONE and action.target_id:
            self.store.delete(action.target_id)
        elif action.kind == CLEAR_ALL:
            self.store.reset()

        logger.log_operation("confirmation.confirmed", "executed", {"kind": action.kind})
        return action

    def cancel(self) -> Optional[PendingAction]:
        action = self.pending
        self.pending = None
        if action is not None:
            logger.log_operation("confirmation.cancelled", "cleared", {"kind": action.kind})
        return action
