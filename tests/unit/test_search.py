"""Unit tests for history search and completion."""

from seneca_repl.console.search import complete, find_match

HISTORY = ["foobar", "baz", "xfoo", "qux"]


class TestFindMatch:
    """Test reverse substring search."""

    def test_first_match(self):
        assert find_match(HISTORY, "foo", 0) == "foobar"

    def test_second_match(self):
        assert find_match(HISTORY, "foo", 1) == "xfoo"

    def test_offset_past_matches_finds_nothing(self):
        """No wraparound back to the first match."""
        assert find_match(HISTORY, "foo", 2) is None

    def test_empty_query(self):
        assert find_match(HISTORY, "", 0) is None

    def test_no_match(self):
        assert find_match(HISTORY, "zzz", 0) is None

    def test_duplicates_counted(self):
        assert find_match(["ab", "ab", "b"], "b", 2) == "b"


class TestComplete:
    """Test prefix completion from history."""

    def test_unique_candidate(self):
        assert complete(["list plugins", "quit"], "li") == ("list plugins", ["list plugins"])

    def test_common_prefix(self):
        text, candidates = complete(["role:math,cmd:sum", "role:math,cmd:product"], "ro")

        assert text == "role:math,cmd:"
        assert candidates == ["role:math,cmd:sum", "role:math,cmd:product"]

    def test_no_candidates(self):
        assert complete(["abc"], "x") == ("x", [])

    def test_duplicate_candidates_collapsed(self):
        text, candidates = complete(["ls", "lsx", "ls"], "l")

        assert text == "ls"
        assert candidates == ["ls", "lsx"]
