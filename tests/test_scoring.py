from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from competeedu.models.enums import BadgeTier
from competeedu.utils.scoring import (
    RankCandidate, ScoreRow, TierPolicy, assign_tier, blend_final_score,
    compute_weighted_score, count_judges, judge_subtotal, public_vote_score, rank_submissions
)

JUDGE_A = uuid4()
JUDGE_B = uuid4()
CREATIVITY = uuid4()
TECHNIQUE = uuid4()


def test_single_judge_weighted_mean():
    rows = [
        ScoreRow(JUDGE_A, CREATIVITY, 80, 60),
        ScoreRow(JUDGE_A, TECHNIQUE, 50, 40),
    ]
    assert compute_weighted_score(rows) == 68.0


def test_judges_count_equally():
    rows = [
        ScoreRow(JUDGE_A, CREATIVITY, 80, 60),
        ScoreRow(JUDGE_A, TECHNIQUE, 50, 40),
        # Judge B only scored one criterion; normalized over what they scored
        ScoreRow(JUDGE_B, CREATIVITY, 100, 60),
    ]
    assert compute_weighted_score(rows) == 84.0
    assert count_judges(rows) == 2


def test_weights_need_not_sum_to_100():
    rows = [
        ScoreRow(JUDGE_A, CREATIVITY, 90, 3),
        ScoreRow(JUDGE_A, TECHNIQUE, 60, 1),
    ]
    assert compute_weighted_score(rows) == 82.5


def test_no_scores_is_none():
    assert compute_weighted_score([]) is None


def test_zero_weight_judge_is_ignored():
    rows = [
        ScoreRow(JUDGE_A, CREATIVITY, 10, 0),
        ScoreRow(JUDGE_B, TECHNIQUE, 70, 40),
    ]
    assert judge_subtotal([rows[0]]) is None
    assert compute_weighted_score(rows) == 70.0
    assert compute_weighted_score([rows[0]]) is None


@pytest.mark.parametrize("scores", [(0, 0), (100, 100), (0, 100), (33.3, 66.7)])
def test_weighted_score_stays_in_range(scores):
    rows = [
        ScoreRow(JUDGE_A, CREATIVITY, scores[0], 70),
        ScoreRow(JUDGE_B, TECHNIQUE, scores[1], 30),
    ]
    assert 0 <= compute_weighted_score(rows) <= 100


def test_public_vote_score_is_relative_to_leader():
    assert public_vote_score(5, 10) == 50.0
    assert public_vote_score(10, 10) == 100.0
    assert public_vote_score(0, 10) == 0.0
    assert public_vote_score(0, 0) == 0.0


def test_blend_final_score():
    assert blend_final_score(80, 100, 0) == 80
    assert blend_final_score(80, 100, None) == 80
    assert blend_final_score(80, 100, 50) == 90.0
    # Capped at the configured maximum share
    assert blend_final_score(80, 100, 100, max_vote_weight_pct=60) == 92.0


def _candidate(score, minutes):
    created_at = datetime(2026, 3, 1, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return RankCandidate(uuid4(), created_at, score)


def test_ranking_breaks_ties_by_earliest_submission():
    late_tie = _candidate(75, 30)
    leader = _candidate(90, 20)
    early_tie = _candidate(75, 10)

    ranked = rank_submissions([late_tie, leader, early_tie], TierPolicy())

    assert [entry.submission_id for entry in ranked] == [
        leader.submission_id, early_tie.submission_id, late_tie.submission_id
    ]
    assert [entry.rank for entry in ranked] == [1, 2, 3]


def test_ranking_is_deterministic_on_full_tie():
    created_at = datetime(2026, 3, 1, tzinfo=timezone.utc)
    candidates = [RankCandidate(uuid4(), created_at, 50) for _ in range(4)]

    first = rank_submissions(candidates, TierPolicy())
    second = rank_submissions(list(reversed(candidates)), TierPolicy())

    assert [entry.submission_id for entry in first] == [entry.submission_id for entry in second]
    assert [entry.submission_id for entry in first] == sorted(
        (c.submission_id for c in candidates), key=str
    )


def test_ranking_drops_unscored():
    ranked = rank_submissions([_candidate(None, 1), _candidate(40, 2)], TierPolicy())
    assert len(ranked) == 1
    assert ranked[0].rank == 1


def test_percentile_tiers():
    policy = TierPolicy()
    tiers = [assign_tier(rank, 20, policy) for rank in range(1, 21)]

    assert tiers.count(BadgeTier.GOLD) == 2
    assert tiers.count(BadgeTier.SILVER) == 3
    assert tiers.count(BadgeTier.BRONZE) == 3
    assert tiers.count(BadgeTier.PARTICIPANT) == 12


def test_small_field_still_has_a_winner():
    assert assign_tier(1, 3, TierPolicy()) == BadgeTier.GOLD
    assert assign_tier(2, 3, TierPolicy()) == BadgeTier.PARTICIPANT


def test_count_tiers():
    policy = TierPolicy(mode="count", gold_count=1, silver_count=1, bronze_count=2)
    assert [assign_tier(rank, 10, policy) for rank in range(1, 6)] == [
        BadgeTier.GOLD, BadgeTier.SILVER, BadgeTier.BRONZE, BadgeTier.BRONZE, BadgeTier.PARTICIPANT
    ]


def test_tier_policy_validation():
    with pytest.raises(ValueError):
        TierPolicy(mode="podium")
    with pytest.raises(ValueError):
        TierPolicy(gold_pct=0.5, silver_pct=0.25)
