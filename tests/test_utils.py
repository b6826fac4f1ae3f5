import pytest

from todo_api.utils import MAX_QUERY_INT, pagination_envelope, parse_positive_int


class TestParsePositiveInt:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, 7),
            ("", 7),
            ("abc", 7),
            ("1.5", 7),
            (" 3 ", 3),
            ("0", 1),
            ("-4", 1),
            (str(MAX_QUERY_INT), MAX_QUERY_INT),
            (str(MAX_QUERY_INT + 1), MAX_QUERY_INT),
            ("9" * 40, MAX_QUERY_INT),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_positive_int(value, 7) == expected

    def test_capped_skip_fits_int64(self):
        assert (MAX_QUERY_INT - 1) * MAX_QUERY_INT < 2**63


class TestPaginationEnvelope:
    def test_materializes_items(self):
        envelope = pagination_envelope(iter([1, 2]), total=5, page=1, limit=2)
        assert envelope == {"data": [1, 2], "page": 1, "limit": 2, "total": 5}
