"""
Identifier Tests

Token id parsing and issued identifier generation.
"""

import pytest

from objects_api.tests.assertions import assert_valid_did
from objects_api.utils.identifiers import generate_simple_did, parse_token_id


@pytest.mark.unit
class TestParseTokenId:
    """Tests for parse_token_id"""

    @pytest.mark.parametrize("value, expected", [("0", 0), ("42", 42), (" 7 ", 7), (5, 5)])
    def test_valid(self, value, expected):
        assert parse_token_id(value) == expected

    @pytest.mark.parametrize("value", ["", "one", "-1", "1.5", "0x10", "١٢", "²", -1, True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_token_id(value)


@pytest.mark.unit
class TestGenerateSimpleDid:
    """Tests for generate_simple_did"""

    def test_format(self):
        assert_valid_did(generate_simple_did())

    def test_unique(self):
        assert generate_simple_did() != generate_simple_did()
