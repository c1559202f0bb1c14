"""Text helpers and JSON export for insight cards."""

import json
import math
from datetime import datetime
from pathlib import Path

from .analyzers.cadence import format_hour_timeline


def to_finnish_grade(rating: float) -> str:
    """
    Convert a decimal rating to Finnish school grade notation.

    8.0 -> "8", 8.25 -> "8+", 8.5 -> "8,5", 8.75 -> "9-", 8.9 -> "9"
    """
    whole = math.floor(rating)
    fraction = rating - whole

    if fraction == 0:
        return str(whole)
    elif fraction <= 0.25:
        return f"{whole}+"
    elif fraction <= 0.5:
        return f"{whole},5"
    elif fraction <= 0.75:
        return f"{whole + 1}-"
    return str(whole + 1)


def format_finnish_number(value: float, decimals: int = 2) -> str:
    """Fixed decimals with a comma separator, e.g. 7.456 -> "7,46"."""
    return f"{value:.{decimals}f}".replace(".", ",")


def format_rating(rating: float, individual: bool = False) -> str:
    """Single ratings read as school grades; averages as Finnish decimals."""
    if individual:
        return to_finnish_grade(rating)
    return format_finnish_number(rating, 2)


def format_summary(results: dict) -> str:
    """Plain-text digest of run_all() output for the CLI."""
    lines = [f"Insights for {results['participant_id']}", ""]

    twin = results.get("taste_twin")
    if twin:
        lines.append(
            f"Taste twin:      {twin['twin_name']} (r = {twin['correlation']:.2f}, "
            f"{twin['overlap_count']} shared songs)"
        )

    hot = results.get("hot_take_index")
    if hot:
        lines.append(
            f"Hot take index:  {format_rating(hot['index'])} "
            f"(hotter than {hot['percentile']:.0f}% of reviewers)"
        )

    positivity = results.get("positivity_percentile")
    if positivity:
        lines.append(
            f"Average rating:  {format_rating(positivity['user_avg'])} "
            f"({positivity['all_percentile']:.0f}th percentile)"
        )
        for dimension, cohort in positivity["cohort_percentiles"].items():
            if cohort["suppressed"]:
                lines.append(f"  {dimension:<15} (cohort too small)")
            else:
                lines.append(
                    f"  {dimension:<15} {cohort['percentile']:.0f}th percentile of {cohort['cohort_size']}"
                )

    themes = results.get("theme_affinities")
    if themes:
        lines.append(f"Theme profile:   {themes['classification']}")

    era = results.get("era_bias")
    if era:
        lines.append(f"Era trend:       {era['trend_direction']} (slope {era['trend_slope']:+.3f})")

    cadence = results.get("cadence_archetype")
    if cadence:
        lines.append(
            f"Archetype:       {cadence['archetype_label']} ({cadence['streak_count']} streaks)"
        )
        lines.append("")
        lines.append(format_hour_timeline(cadence["hour_histogram"]))

    report = results.get("prediction_report")
    if report:
        lines.append("")
        lines.append(f"Predictability:  {report['grade']} - {report['grade_description']}")

    if results.get("unavailable"):
        lines.append("")
        for name, reason in results["unavailable"].items():
            lines.append(f"Unavailable: {name} ({reason})")

    return "\n".join(lines)


def export_insights_json(results: dict, output_path: str):
    """
    Export insight cards as JSON.

    Args:
        results: Output of InsightsEngine.run_all()
        output_path: Path to save JSON file
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    export_data = {
        "generated_at": datetime.now().isoformat(),
        "version": "0.1.0",
        "insights": results,
    }

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(export_data, f, indent=2, ensure_ascii=False, default=str)

    print(f"Insights JSON exported to: {output_file}")
