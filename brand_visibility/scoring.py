"""
Visibility scoring for Brand Visibility.

Maps presence, prominence and competitor density to a 0-10 score.

Rule table:
    org brand absent:
        2 if no competitors were found, else 0
    org brand present:
        6 base
        + top_rank_bonus   if prominence == 1
        + 2                if prominence <= 3
        + 1                if prominence <= low_rank_cutoff
        - competitor penalty
    clamp to [0, 10], round half-up to the settings' precision

Example:
    >>> score_visibility(True, 1, 2)
    8.6
    >>> score_visibility(False, None, 0)
    2.0
    >>> score_visibility(True, 1, 2, ScoringSettings(penalty="stepped", top_rank_bonus=2))
    8.0
"""

from decimal import ROUND_HALF_UP, Decimal

from brand_visibility.config.schema import ScoringSettings

MIN_SCORE = 0.0
MAX_SCORE = 10.0

BASE_PRESENT_SCORE = 6
ABSENT_NO_COMPETITORS_SCORE = 2
ABSENT_WITH_COMPETITORS_SCORE = 0

MID_RANK_CUTOFF = 3
MID_RANK_BONUS = 2
LOW_RANK_BONUS = 1

MAX_PENALTY = 2.0
GRADUATED_PENALTY_PER_COMPETITOR = 0.2


def competitor_penalty(competitor_count: int, penalty: str = "graduated") -> float:
    """
    Points deducted for competitors mentioned alongside the org brand.

    Example:
        >>> competitor_penalty(3)
        0.6
        >>> competitor_penalty(15)
        2.0
        >>> competitor_penalty(5, "stepped")
        1.0
    """
    if competitor_count < 0:
        raise ValueError(f"competitor_count must be >= 0, got: {competitor_count}")

    if penalty == "graduated":
        # Decimal avoids 3 * 0.2 == 0.6000000000000001
        value = Decimal(competitor_count) * Decimal(str(GRADUATED_PENALTY_PER_COMPETITOR))
        return float(min(Decimal(str(MAX_PENALTY)), value))
    if penalty == "stepped":
        if competitor_count > 8:
            return 2.0
        if competitor_count > 4:
            return 1.0
        return 0.0
    raise ValueError(f"penalty must be 'graduated' or 'stepped', got: {penalty}")


def prominence_bonus(
    prominence: int, top_rank_bonus: int = 3, low_rank_cutoff: int = 6
) -> int:
    """Bonus points for where the org brand's first mention ranks."""
    if prominence < 1:
        raise ValueError(f"prominence must be >= 1, got: {prominence}")

    if prominence == 1:
        return top_rank_bonus
    if prominence <= MID_RANK_CUTOFF:
        return MID_RANK_BONUS
    if prominence <= low_rank_cutoff:
        return LOW_RANK_BONUS
    return 0


def round_score(score: float, decimals: int) -> float:
    """
    Round half-up to the given number of decimals.

    Python's round() uses banker's rounding; half-up keeps 7.5 -> 8.
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(str(score)).quantize(quantum, rounding=ROUND_HALF_UP))


def score_visibility(
    org_brand_present: bool,
    prominence: int | None,
    competitor_count: int,
    settings: ScoringSettings | None = None,
) -> float:
    """
    Compute the 0-10 visibility score for one response.

    Args:
        org_brand_present: True if the org brand was mentioned
        prominence: 1-based rank of the org brand's first mention (None if absent)
        competitor_count: Distinct competitors found in the response
        settings: Rule table variant (defaults to graduated, +3 top bonus)

    Returns:
        Score in [0, 10], rounded per settings.decimals

    Raises:
        ValueError: If org_brand_present and prominence disagree
    """
    settings = settings or ScoringSettings()

    if org_brand_present != (prominence is not None):
        raise ValueError(
            "prominence must be given if and only if the org brand is present "
            f"(present={org_brand_present}, prominence={prominence})"
        )

    if not org_brand_present:
        if competitor_count == 0:
            score = ABSENT_NO_COMPETITORS_SCORE
        else:
            score = ABSENT_WITH_COMPETITORS_SCORE
    else:
        score = BASE_PRESENT_SCORE + prominence_bonus(
            prominence, settings.top_rank_bonus, settings.low_rank_cutoff
        )
        score -= competitor_penalty(competitor_count, settings.penalty)

    score = max(MIN_SCORE, min(MAX_SCORE, float(score)))
    return round_score(score, settings.decimals)
