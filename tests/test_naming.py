"""
Tests for public name normalization
"""

import pytest

from introspection.naming import to_public_name


class TestToPublicName:

    @pytest.mark.parametrize("identifier, expected", [
        ("active_user_profiles", "activeUserProfiles"),
        ("add_note_to_user", "addNoteToUser"),
        ("p_user_id", "pUserId"),
        ("users", "users"),
        ("Users_By_Day", "usersByDay"),
    ])
    def test_camel_case(self, identifier, expected):
        assert to_public_name(identifier) == expected

    def test_empty_segments_are_dropped(self):
        """Leading, trailing and doubled underscores do not produce empty words"""
        assert to_public_name("_private") == "private"
        assert to_public_name("double__underscore") == "doubleUnderscore"
        assert to_public_name("trailing_") == "trailing"

    def test_stable_across_calls(self):
        assert to_public_name("get_user_by_id") == to_public_name("get_user_by_id")

    def test_only_underscores_left_unchanged(self):
        assert to_public_name("__") == "__"
