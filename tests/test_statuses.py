"""
Tests for the case status catalog.
"""

import pytest

from chronos.core.statuses import (
    DEFAULT_STATUS,
    STATUS_OPTIONS,
    find_status,
    get_status,
    resolve_status_code,
    status_codes,
    status_label,
)


class TestStatusCatalog:
    """Test catalog ordering and lookups."""

    def test_catalog_order(self):
        """Codes are fixed and ordered, created first."""
        assert status_codes() == [
            'created', 'sent', 'registered', 'processing', 'satisfied', 'rejected', 'ignored'
        ]
        assert DEFAULT_STATUS == 'created'

    def test_get_status_known_code(self):
        assert get_status('rejected').label == 'Отказано'

    def test_get_status_unknown_code_falls_back_to_first(self):
        assert get_status('archived') is STATUS_OPTIONS[0]
        assert get_status('') is STATUS_OPTIONS[0]

    @pytest.mark.parametrize("token,expected", [
        ('satisfied', 'satisfied'),
        ('Удовлетворено / Исполнено', 'satisfied'),
        ('В работе', 'processing'),
        ('Игнорирование', 'ignored'),
    ])
    def test_find_status_by_code_or_label(self, token, expected):
        assert find_status(token).code == expected

    def test_find_status_no_match(self):
        assert find_status('Closed') is None

    def test_resolve_unknown_token_to_default(self):
        assert resolve_status_code('garbage') == 'created'
        assert resolve_status_code('') == 'created'

    def test_status_label(self):
        assert status_label('sent') == 'Отправлено'
        assert status_label('unknown') == 'unknown'
