"""
Case status catalog. Fixed, ordered; the first entry is the fallback for anything unresolvable.
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class StatusOption:
    code: str
    label: str
    color: str  # presentation hint


STATUS_OPTIONS: List[StatusOption] = [
    StatusOption('created', 'Подготовка', 'slate'),
    StatusOption('sent', 'Отправлено', 'blue'),
    StatusOption('registered', 'Зарегистрировано', 'indigo'),
    StatusOption('processing', 'В работе', 'yellow'),
    StatusOption('satisfied', 'Удовлетворено / Исполнено', 'emerald'),
    StatusOption('rejected', 'Отказано', 'red'),
    StatusOption('ignored', 'Игнорирование', 'orange'),
]

DEFAULT_STATUS = STATUS_OPTIONS[0].code

SUCCESS_STATUSES = frozenset(['satisfied'])
FAILURE_STATUSES = frozenset(['rejected', 'ignored'])


def status_codes() -> List[str]:
    return [option.code for option in STATUS_OPTIONS]


def get_status(code: str) -> StatusOption:
    """Look up a status by code, falling back to the first catalog entry."""
    for option in STATUS_OPTIONS:
        if option.code == code:
            return option
    return STATUS_OPTIONS[0]


def find_status(token: str) -> Optional[StatusOption]:
    """Match a token against codes first, then labels."""
    for option in STATUS_OPTIONS:
        if option.code == token:
            return option
    for option in STATUS_OPTIONS:
        if option.label == token:
            return option
    return None


def resolve_status_code(token: str) -> str:
    option = find_status(token)
    return option.code if option else DEFAULT_STATUS


def status_label(code: str) -> str:
    """Display label for a code; unknown codes render as themselves."""
    for option in STATUS_OPTIONS:
        if option.code == code:
            return option.label
    return code
