"""
Unit tests for delimited text parsing.
"""

from data_loader import parse_csv


class TestParseCSV:
    """Test cases for parse_csv."""

    def test_well_formed_rows(self):
        """Every well-formed line becomes one row keyed by header."""
        text = "name,age,city\nalice,30,Paris\nbob,25,Berlin\ncarol,41,Rome"
        rows = parse_csv(text)

        assert rows == [
            {"name": "alice", "age": "30", "city": "Paris"},
            {"name": "bob", "age": "25", "city": "Berlin"},
            {"name": "carol", "age": "41", "city": "Rome"},
        ]

    def test_header_order_is_kept(self):
        rows = parse_csv("z,a,m\n1,2,3")
        assert list(rows[0].keys()) == ["z", "a", "m"]

    def test_mismatched_field_count_is_dropped(self):
        """Lines with more or fewer fields than headers are skipped silently."""
        assert parse_csv("a,b\n1,2,3\n4,5") == [{"a": "4", "b": "5"}]
        assert parse_csv("a,b\n1\n4,5\n6,7,8") == [{"a": "4", "b": "5"}]

    def test_fields_are_trimmed_and_unquoted(self):
        text = '"name" , "score"\n  "alice" ,  "10"  \nbob,"7"'
        rows = parse_csv(text)

        assert rows == [
            {"name": "alice", "score": "10"},
            {"name": "bob", "score": "7"},
        ]

    def test_only_one_pair_of_quotes_is_stripped(self):
        rows = parse_csv('label\n""quoted""')
        assert rows == [{"label": '"quoted"'}]

    def test_values_stay_strings(self):
        rows = parse_csv("count,ratio\n42,0.5")
        assert rows[0]["count"] == "42"
        assert rows[0]["ratio"] == "0.5"

    def test_empty_input(self):
        assert parse_csv("") == []
        assert parse_csv("   \n\n  ") == []

    def test_header_only(self):
        assert parse_csv("a,b,c\n") == []

    def test_custom_delimiter(self):
        rows = parse_csv("a;b\n1;2\n3,4;5", delimiter=";")
        assert rows == [{"a": "1", "b": "2"}, {"a": "3,4", "b": "5"}]

    def test_windows_line_endings(self):
        rows = parse_csv("a,b\r\n1,2\r\n3,4\r\n")
        assert rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]

    def test_quoted_delimiter_is_not_supported(self):
        """A delimiter inside quotes still splits the field, so the line is dropped."""
        rows = parse_csv('name,city\n"Smith, J",Paris\nDoe,Rome')
        assert rows == [{"name": "Doe", "city": "Rome"}]

    def test_surrounding_whitespace_is_ignored(self):
        rows = parse_csv("\n\n  a,b\n1,2\n\n")
        assert rows == [{"a": "1", "b": "2"}]
