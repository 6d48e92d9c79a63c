"""Tests for score aggregation and exclusion."""

import logging

from afs_backup_ng.core.aggregate import add_match_scores, exclude_matched


class TestAddMatchScores:
    """Tests for add_match_scores."""

    def test_sums_per_volume(self):
        combined = add_match_scores({"a": 1, "b": 1}, {"b": 1, "c": -1})
        assert combined == {"a": 1, "b": 2, "c": -1}

    def test_commutative(self):
        one = {"a": 1, "b": -1, "c": 1}
        two = {"b": 1, "c": -1, "d": 1}
        assert add_match_scores(one, two) == add_match_scores(two, one)

    def test_inputs_not_modified(self):
        one = {"a": 1}
        two = {"a": 1}
        add_match_scores(one, two)
        assert one == {"a": 1}
        assert two == {"a": 1}

    def test_empty(self):
        assert add_match_scores({}, {}) == {}


class TestExcludeMatched:
    """Tests for exclude_matched."""

    def test_positive_selected(self):
        selected, excluded = exclude_matched({"b": 2, "a": 1})
        assert selected == ["a", "b"]
        assert excluded == []

    def test_opposite_matches_cancel_out(self):
        combined = add_match_scores({"v1": 1}, {"v1": -1})
        selected, excluded = exclude_matched(combined)
        assert selected == []
        assert excluded == ["v1"]

    def test_negative_excluded(self):
        selected, excluded = exclude_matched({"a": -1, "b": 1, "c": -2})
        assert selected == ["b"]
        assert excluded == ["a", "c"]

    def test_one_sided_match_is_enough(self):
        """A volume the other rule set never matched is still selected."""
        combined = add_match_scores({"v1": 1}, {})
        assert exclude_matched(combined) == (["v1"], [])

    def test_exclusion_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="afs_backup_ng.core.aggregate"):
            exclude_matched({"user.bob.scratch": -1})
        assert "Explicitly excluding volume user.bob.scratch" in caplog.text
