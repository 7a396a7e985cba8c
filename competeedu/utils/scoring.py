from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, NamedTuple, Optional
from uuid import UUID

from competeedu.models.enums import BadgeTier


class ScoreRow(NamedTuple):
    """One stored score joined to the weight of its criterion"""
    judge_id: UUID
    criterion_id: UUID
    score: float
    weight: float


class RankCandidate(NamedTuple):
    submission_id: UUID
    created_at: datetime
    score: float


class RankedEntry(NamedTuple):
    submission_id: UUID
    score: float
    rank: int
    tier: BadgeTier


@dataclass(frozen=True)
class TierPolicy:
    """
    Cutoffs for gold/silver/bronze.

    In ``percentile`` mode the *_pct values are cumulative shares of the
    ranked field (0.10, 0.25, 0.40 means top 10% gold, next 15% silver,
    next 15% bronze). In ``count`` mode the *_count values are the number
    of ranks in each tier, taken in order.
    """
    mode: str = "percentile"
    gold_pct: float = 0.10
    silver_pct: float = 0.25
    bronze_pct: float = 0.40
    gold_count: int = 1
    silver_count: int = 2
    bronze_count: int = 3

    def __post_init__(self):
        if self.mode not in ("percentile", "count"):
            raise ValueError(f"Unknown tier policy mode: {self.mode}")
        if self.mode == "percentile" and not (0 <= self.gold_pct <= self.silver_pct <= self.bronze_pct <= 1):
            raise ValueError("Percentile cutoffs must be cumulative and within [0, 1]")
        if self.mode == "count" and min(self.gold_count, self.silver_count, self.bronze_count) < 0:
            raise ValueError("Tier counts must not be negative")

    @classmethod
    def from_settings(cls, settings) -> "TierPolicy":
        return cls(
            mode=settings.tier_policy_mode,
            gold_pct=settings.gold_pct,
            silver_pct=settings.silver_pct,
            bronze_pct=settings.bronze_pct,
            gold_count=settings.gold_count,
            silver_count=settings.silver_count,
            bronze_count=settings.bronze_count,
        )


def judge_subtotal(rows: Iterable[ScoreRow]) -> Optional[float]:
    """
    Weighted mean of one judge's scores over the criteria that judge scored.

    Returns None when the judge scored nothing with a positive weight.
    """
    weighted_sum = 0.0
    weight_sum = 0.0
    for row in rows:
        weighted_sum += row.score * row.weight
        weight_sum += row.weight
    if weight_sum <= 0:
        return None
    return weighted_sum / weight_sum


def compute_weighted_score(rows: Iterable[ScoreRow]) -> Optional[float]:
    """
    Aggregate all judges' scores of a single submission into one 0-100 value.

    Every judge is normalized separately and then counts equally, no matter
    how many criteria they completed. A submission without usable scores
    yields None and must be left out of ranking.
    """
    by_judge: Dict[UUID, List[ScoreRow]] = defaultdict(list)
    for row in rows:
        by_judge[row.judge_id].append(row)

    subtotals = [
        subtotal
        for subtotal in (judge_subtotal(judge_rows) for judge_rows in by_judge.values())
        if subtotal is not None
    ]
    if not subtotals:
        return None

    mean = sum(subtotals) / len(subtotals)
    return round(min(max(mean, 0.0), 100.0), 2)


def count_judges(rows: Iterable[ScoreRow]) -> int:
    return len({row.judge_id for row in rows})


def public_vote_score(votes: int, max_votes: int) -> float:
    """Votes of a submission normalized against the most voted one in the event"""
    if votes <= 0:
        return 0.0
    return round(votes / max(max_votes, 1) * 100, 2)


def blend_final_score(
        weighted_score: float,
        vote_score: float,
        vote_weight_pct: Optional[int],
        max_vote_weight_pct: int = 60
) -> float:
    """Mix the judges' score with the public vote score; weight is capped"""
    weight = min(max(vote_weight_pct or 0, 0), max_vote_weight_pct) / 100
    if weight == 0:
        return weighted_score
    return round(weighted_score * (1 - weight) + vote_score * weight, 2)


def assign_tier(rank: int, total: int, policy: TierPolicy) -> BadgeTier:
    if policy.mode == "count":
        if rank <= policy.gold_count:
            return BadgeTier.GOLD
        if rank <= policy.gold_count + policy.silver_count:
            return BadgeTier.SILVER
        if rank <= policy.gold_count + policy.silver_count + policy.bronze_count:
            return BadgeTier.BRONZE
        return BadgeTier.PARTICIPANT

    if rank == 1:
        return BadgeTier.GOLD
    percentile = rank / total
    if percentile <= policy.gold_pct:
        return BadgeTier.GOLD
    if percentile <= policy.silver_pct:
        return BadgeTier.SILVER
    if percentile <= policy.bronze_pct:
        return BadgeTier.BRONZE
    return BadgeTier.PARTICIPANT


def rank_submissions(candidates: Iterable[RankCandidate], policy: TierPolicy) -> List[RankedEntry]:
    """
    Order scored submissions and give each a sequential rank and a tier.

    Higher score first. On an exact tie the earlier submission wins, and the
    submission id settles anything left so the order is reproducible.
    Candidates without a score are dropped.
    """
    scored = [c for c in candidates if c.score is not None]
    scored.sort(key=lambda c: (-c.score, c.created_at, str(c.submission_id)))

    total = len(scored)
    return [
        RankedEntry(
            submission_id=candidate.submission_id,
            score=candidate.score,
            rank=position,
            tier=assign_tier(position, total, policy),
        )
        for position, candidate in enumerate(scored, 1)
    ]
