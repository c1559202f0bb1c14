"""
Prediction Report - how predictable a participant's ratings are.

Combines the baseline rating level, theme and popularity sensitivity, era
spread and rating consistency into one weighted score and a letter grade.
"""

from typing import Optional

from .aggregation import UserStats
from .stats import population_variance

GRADES = [
    (0.8, "A+", "Highly Predictable"),
    (0.7, "A", "Very Predictable"),
    (0.6, "B", "Fairly Predictable"),
    (0.4, "C", "Moderately Predictable"),
]


def grade_for(score: float) -> tuple[str, str]:
    for floor, grade, description in GRADES:
        if score >= floor:
            return grade, description
    return "D", "Unpredictable"


def _factor(name: str, weight: float, value: float, description: str) -> dict:
    return {"name": name, "weight": weight, "value": value, "description": description}


def compute_prediction_report(
    stats: UserStats,
    theme_correlations: list[float],
    popularity_correlation: Optional[float],
    decade_averages: list[float],
    rating_scale: tuple[float, float] = (4.0, 10.0),
) -> dict:
    """
    Build the weighted predictability score.

    Args:
        stats: Target's UserStats (population std-dev)
        theme_correlations: Pearson r of each thematic attribute vs rating
        popularity_correlation: r of popularity vs rating, None if unknown
        decade_averages: Target's mean rating per decade
        rating_scale: (min, max) of the rating scale, to normalise the mean

    Returns:
        Dictionary with score, grade, factors and insight strings
    """
    low, high = rating_scale
    span = (high - low) or 1.0
    baseline = min(1.0, max(0.0, (stats.mean - low) / span))

    factors = [_factor("average_rating", 0.4, baseline, "Your typical rating level")]

    strongest_theme = max((abs(r) for r in theme_correlations), default=0.0)
    if strongest_theme > 0.2:
        factors.append(_factor(
            "theme_preferences", 0.2, strongest_theme, "How much themes influence your ratings"
        ))

    if popularity_correlation is not None and abs(popularity_correlation) > 0.1:
        factors.append(_factor(
            "popularity_bias", 0.15, abs(popularity_correlation), "How much popularity affects your ratings"
        ))

    era_variance = population_variance(decade_averages)
    if era_variance > 0.5:
        factors.append(_factor(
            "era_preferences", 0.15, min(era_variance / 2, 1.0), "How much era affects your ratings"
        ))

    consistency = max(0.0, 1.0 - stats.std / 3)
    factors.append(_factor("rating_consistency", 0.1, consistency, "How consistent your ratings are"))

    total_weight = sum(f["weight"] for f in factors)
    score = sum(f["value"] * f["weight"] for f in factors) / total_weight
    grade, description = grade_for(score)

    insights = []
    if stats.std < 1:
        insights.append("You have very consistent rating patterns")
    elif stats.std > 2:
        insights.append("Your ratings vary quite a bit - you're hard to predict!")
    if strongest_theme > 0.3:
        insights.append("Your ratings are strongly influenced by song themes")
    if popularity_correlation is not None and abs(popularity_correlation) > 0.3:
        insights.append("Song popularity significantly affects your ratings")
    if len(decade_averages) > 1 and max(decade_averages) - min(decade_averages) > 1:
        insights.append("You have strong preferences for certain musical eras")
    if not insights:
        insights.append("Your taste is quite balanced across different factors")

    return {
        "predictability_score": score,
        "grade": grade,
        "grade_description": description,
        "user_avg_rating": stats.mean,
        "rating_std": stats.std,
        "prediction_factors": factors,
        "insights": insights,
        "report_summary": f"Your musical taste is {description.lower()}.",
    }
