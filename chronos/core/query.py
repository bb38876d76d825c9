"""
Query engine: free-text filtering and stable sorting over chronology records.
All functions are pure; they never mutate the records they are given.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .schema import ChronologyRecord, RECORD_FIELDS

ASC = 'asc'
DESC = 'desc'

DEFAULT_SORT_KEY = 'date'
DEFAULT_SORT_DIRECTION = DESC

# Snapshot/CSV spellings accepted as sort keys
_KEY_ALIASES = {'regNo': 'reg_no'}


def normalize_sort_key(key: str) -> str:
    key = _KEY_ALIASES.get(key, key)
    if key not in RECORD_FIELDS:
        raise ValueError(f"Unknown sort key: {key}")
    return key


@dataclass(frozen=True)
class SortConfig:
    key: str = DEFAULT_SORT_KEY
    direction: str = DEFAULT_SORT_DIRECTION

    def __post_init__(self):
        object.__setattr__(self, 'key', normalize_sort_key(self.key))
        if self.direction not in (ASC, DESC):
            raise ValueError(f"Invalid sort direction: {self.direction}")

    def toggle(self, key: str) -> 'SortConfig':
        """Flip direction for the active key; a new key starts ascending."""
        key = normalize_sort_key(key)
        if key == self.key:
            return SortConfig(key, DESC if self.direction == ASC else ASC)
        return SortConfig(key, ASC)


def _matches(record: ChronologyRecord, needle: str) -> bool:
    return any(needle in str(getattr(record, name)).lower() for name in RECORD_FIELDS)


def filter_records(records: Sequence[ChronologyRecord], search: str) -> List[ChronologyRecord]:
    """Keep records where any field's text contains search, case-insensitively."""
    if not search:
        return list(records)
    needle = search.lower()
    return [record for record in records if _matches(record, needle)]


def sort_records(records: Sequence[ChronologyRecord], key: str = DEFAULT_SORT_KEY,
                 direction: str = DEFAULT_SORT_DIRECTION) -> List[ChronologyRecord]:
    """Stable sort on one field. Equal keys keep their relative order in both directions."""
    attr = normalize_sort_key(key)
    # sorted() with reverse=True still preserves the order of equal elements
    return sorted(records, key=lambda record: getattr(record, attr), reverse=(direction == DESC))


def query_records(records: Sequence[ChronologyRecord], search: str = '',
                  sort: Optional[SortConfig] = None) -> List[ChronologyRecord]:
    sort = sort or SortConfig()
    return sort_records(filter_records(records, search), sort.key, sort.direction)


@dataclass(frozen=True)
class ViewState:
    """Search text and sort order of a presentation view."""
    search: str = ''
    sort: SortConfig = SortConfig()

    def with_search(self, search: str) -> 'ViewState':
        return ViewState(search or '', self.sort)

    def toggle_sort(self, key: str) -> 'ViewState':
        return ViewState(self.search, self.sort.toggle(key))
