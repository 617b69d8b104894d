"""Tests for relevance scoring, ranking and pagination."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from circles.models import Candidate, Suggestion, SuggestionAlgorithm
from circles.suggestions.scoring import days_since, paginate, rank, score

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def candidate(profile, strategy=SuggestionAlgorithm.POPULARITY, base=0.0, mutual_count=0) -> Candidate:
    return Candidate(profile=profile, base_score=base, strategy=strategy, mutual_count=mutual_count)


class TestScore:
    def test_bare_profile_keeps_base(self, profile_factory):
        assert score(candidate(profile_factory("a"), base=12.0), 0, NOW) == 12.0

    def test_profile_bonuses(self, profile_factory):
        profile = profile_factory(
            "a", is_verified=True, bio="Climber and coffee nerd", avatar_url="https://cdn.example/a.png"
        )
        # verified 5 + 2 mutual * 15 + bio 2 + avatar 1
        assert score(candidate(profile), 2, NOW) == 38.0

    def test_short_bio_earns_nothing(self, profile_factory):
        assert score(candidate(profile_factory("a", bio="0123456789")), 0, NOW) == 0.0
        assert score(candidate(profile_factory("a", bio="0123456789!")), 0, NOW) == 2.0

    def test_mutual_strategy_counts_connections_three_times(self, profile_factory):
        c = candidate(profile_factory("d"), SuggestionAlgorithm.MUTUAL, base=20.0, mutual_count=2)
        # base 20 + bonus 30 + top-up 40
        assert score(c, 2, NOW) == 90.0

    def test_proximity_top_up(self, profile_factory):
        c = candidate(profile_factory("a"), SuggestionAlgorithm.PROXIMITY, base=8.0)
        assert score(c, 0, NOW) == 18.0

    @pytest.mark.parametrize(
        "age_days,expected",
        [(0, 35.0), (9, 26.0), (29, 6.0), (30, 5.0), (400, 5.0)],
    )
    def test_recency_decay(self, profile_factory, age_days, expected):
        profile = profile_factory("a", created_at=NOW - timedelta(days=age_days, hours=1))
        assert score(candidate(profile, SuggestionAlgorithm.RECENCY, base=5.0), 0, NOW) == expected

    def test_recency_without_created_at(self, profile_factory):
        profile = profile_factory("a", created_at=None)
        assert score(candidate(profile, SuggestionAlgorithm.RECENCY, base=5.0), 0, NOW) == 5.0

    def test_recency_bonus_capped_for_future_created_at(self, profile_factory):
        profile = profile_factory("a", created_at=NOW + timedelta(days=3))
        assert score(candidate(profile, SuggestionAlgorithm.RECENCY, base=5.0), 0, NOW) == 35.0

    def test_never_negative(self, profile_factory):
        assert score(candidate(profile_factory("a"), base=-50.0), 0, NOW) == 0.0


def test_days_since_treats_naive_as_utc():
    assert days_since(datetime(2026, 2, 20), NOW) == 9
    assert days_since(None, NOW) is None


def test_days_since_future_is_zero():
    assert days_since(NOW + timedelta(hours=30), NOW) == 0


class TestRank:
    def test_sorted_by_score_then_id(self, profile_factory):
        profiles = [profile_factory(uid) for uid in ["c", "a", "b"]]
        candidates = [candidate(profiles[0], base=5.0), candidate(profiles[1], base=5.0), candidate(profiles[2], base=9.0)]
        suggestions = [Suggestion(profile=p) for p in profiles]

        ranked = rank(candidates, suggestions, now=NOW)

        assert [s.id for s in ranked] == ["b", "a", "c"]
        assert [s.relevance_score for s in ranked] == [9.0, 5.0, 5.0]

    def test_uses_enriched_mutual_count(self, profile_factory):
        profile = profile_factory("a")
        ranked = rank([candidate(profile)], [Suggestion(profile=profile, mutual_count=3)], now=NOW)
        assert ranked[0].relevance_score == 45.0

    def test_rejects_misaligned_inputs(self, profile_factory):
        with pytest.raises(ValueError):
            rank([candidate(profile_factory("a"))], [], now=NOW)


class TestPaginate:
    def test_pages_and_has_more(self, profile_factory):
        ranked = [Suggestion(profile=profile_factory(f"u{i}")) for i in range(5)]

        page, has_more = paginate(ranked, 0, 2)
        assert [s.id for s in page] == ["u0", "u1"]
        assert has_more is True

        page, has_more = paginate(ranked, 3, 2)
        assert [s.id for s in page] == ["u3", "u4"]
        assert has_more is False

    def test_offset_past_end(self, profile_factory):
        page, has_more = paginate([Suggestion(profile=profile_factory("a"))], 5, 10)
        assert page == []
        assert has_more is False
