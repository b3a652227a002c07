"""Tests for DescriptionMatcher."""

import logging

import pytest

from ref_graph.services.description_matcher import DescriptionMatcher


@pytest.fixture
def walked(fake_repository, commit_factory):
    commits = [
        commit_factory("a", "mm: fix page leak"),
        commit_factory("b", "mm: fix page leak in shmem"),
        commit_factory("c", "net: avoid null deref"),
    ]
    for commit in commits:
        fake_repository.add(commit)
    return commits


class TestDescriptionMatcher:
    def test_hash_with_title(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)

        line = f'{walked[2].oid[:12]} ("something else entirely")'

        assert matcher.match(line) == walked[2]

    def test_fixes_prefixed_line(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)

        assert matcher.match(f'Fixes: {walked[1].oid[:12]} ("x")') == walked[1]

    def test_bare_hash(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)

        assert matcher.match(walked[0].oid) == walked[0]
        assert matcher.match(f"  {walked[1].oid[:10]}\n") == walked[1]

    def test_hash_outside_walked_range_is_resolved(self, fake_repository, commit_factory, walked):
        outside = fake_repository.add(commit_factory("z", "Older commit"))
        matcher = DescriptionMatcher(fake_repository, walked)

        assert matcher.match(outside.oid[:12]) == outside

    def test_unknown_hash_logs_warning(self, fake_repository, walked, caplog):
        matcher = DescriptionMatcher(fake_repository, walked)

        with caplog.at_level(logging.WARNING):
            assert matcher.match("0123456789ab") is None
        assert "0123456789ab" in caplog.text

    def test_exact_title_wins_over_substring(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)

        # "mm: fix page leak" is also a substring of walked[1]'s title, and
        # walked[0] comes first; the exact lookup must still be used.
        assert matcher.match("mm: fix page leak in shmem") == walked[1]
        assert matcher.match("mm: fix page leak") == walked[0]

    def test_exact_match_skips_substring_scan_even_if_later(
        self, fake_repository, commit_factory
    ):
        commits = [
            commit_factory("x", "drm: fix crash on resume path"),
            commit_factory("y", "drm: fix crash"),
        ]
        matcher = DescriptionMatcher(fake_repository, commits)

        assert matcher.match("drm: fix crash") == commits[1]

    def test_input_contained_in_title(self, fake_repository, walked, caplog):
        matcher = DescriptionMatcher(fake_repository, walked)

        with caplog.at_level(logging.WARNING):
            assert matcher.match("avoid null deref") == walked[2]
        assert "Imprecise match" in caplog.text

    def test_title_contained_in_input(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)

        assert matcher.match("[PATCH v2] net: avoid null deref (backport)") == walked[2]

    def test_first_containment_match_in_list_order(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)

        assert matcher.match("fix page") == walked[0]

    def test_fuzzy_disabled(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked, fuzzy=False)

        assert matcher.match("avoid null deref") is None
        assert matcher.match("net: avoid null deref") == walked[2]

    def test_no_match(self, fake_repository, walked, caplog):
        matcher = DescriptionMatcher(fake_repository, walked)

        with caplog.at_level(logging.WARNING):
            assert matcher.match("completely unrelated") is None
        assert "cannot be matched" in caplog.text

    def test_duplicate_titles_map_to_newest(self, fake_repository, commit_factory):
        commits = [
            commit_factory("old", "Same title"),
            commit_factory("new", "Same title"),
        ]
        matcher = DescriptionMatcher(fake_repository, commits)

        assert matcher.match("Same title") == commits[1]

    def test_match_lines_skips_blank_and_unmatched(self, fake_repository, walked):
        matcher = DescriptionMatcher(fake_repository, walked)
        lines = [
            f"{walked[0].oid[:12]}\n",
            "\n",
            "no such commit\n",
            "net: avoid null deref\n",
        ]

        assert matcher.match_lines(lines) == [walked[0], walked[2]]
