"""Key parsing tests."""

import pytest

from kvtree import KeyValidationError, is_valid_key, join_key, split_key
from kvtree.keypath import require_key


class TestSplitKey:
    def test_simple_path(self):
        assert split_key("a/b/c") == ["a", "b", "c"]

    def test_single_segment(self):
        assert split_key("name") == ["name"]

    def test_leading_slash_gives_empty_segment(self):
        assert split_key("/test/dir1") == ["", "test", "dir1"]

    def test_trailing_and_double_slashes(self):
        assert split_key("a//b/") == ["a", "", "b", ""]

    def test_join_reverses_split(self):
        for key in ("a/b/c", "/x/", "//", "solo"):
            assert join_key(split_key(key)) == key


class TestValidation:
    @pytest.mark.parametrize("key", [None, "", "   ", "\t\n"])
    def test_blank_keys_are_invalid(self, key):
        assert is_valid_key(key) is False
        with pytest.raises(KeyValidationError, match="Key is not specified"):
            require_key(key)

    @pytest.mark.parametrize("key", ["a", "/", "a/b", " a "])
    def test_non_blank_keys_are_valid(self, key):
        assert is_valid_key(key) is True
        assert require_key(key) == key.split("/")

    def test_non_string_key_is_invalid(self):
        assert is_valid_key(42) is False
