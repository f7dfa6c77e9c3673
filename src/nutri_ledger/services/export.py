"""Projection of the ledger into report sections for a document renderer."""

from dataclasses import dataclass
from datetime import date

from nutri_ledger.domain.activities import ActivityEntry
from nutri_ledger.domain.meals import MealEntry
from nutri_ledger.domain.summary import DailySummary, ProgressMetric
from nutri_ledger.services.derivation import (
    DEFAULT_KEYWORDS,
    MacroKeywords,
    macro_percentage,
    summarize_day,
)
from nutri_ledger.services.ledger import LedgerSnapshot

REPORT_TITLE = "Nutri Ledger - Daily Report"


@dataclass(frozen=True)
class HeaderSection:
    """Report title and generation date."""

    title: str
    generated_on: date

    def to_dict(self) -> dict[str, object]:
        return {
            "type": "header",
            "title": self.title,
            "generated_on": self.generated_on.isoformat(),
        }


@dataclass(frozen=True)
class SummarySection:
    """Daily metrics against goals plus the net calorie balance."""

    summary: DailySummary

    def to_dict(self) -> dict[str, object]:
        return {
            "type": "summary",
            "consumed_calories": self.summary.consumed.calories,
            "burned_calories": self.summary.burned,
            "net_calories": self.summary.net_calories,
            "metrics": [_metric_to_dict(metric) for metric in self.summary.metrics],
        }


@dataclass(frozen=True)
class ActivitySection:
    """Activities in ledger order."""

    activities: tuple[ActivityEntry, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "type": "activities",
            "activities": [
                {
                    "name": activity.name,
                    "intensity": activity.intensity.value,
                    "duration_minutes": activity.duration_minutes,
                    "calories_burned": activity.calories_burned,
                    "met_value": activity.met_value,
                    "timestamp": activity.timestamp,
                }
                for activity in self.activities
            ],
        }


@dataclass(frozen=True)
class MacroLine:
    """One macro with its share of the meal's calories."""

    name: str
    amount: float
    unit: str
    calorie_share: int


@dataclass(frozen=True)
class MealSection:
    """One meal block."""

    position: int
    meal: MealEntry
    macros: tuple[MacroLine, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "type": "meal",
            "position": self.position,
            "id": self.meal.id,
            "title": self.meal.title,
            "timestamp": self.meal.timestamp,
            "calories": self.meal.calories,
            "macros": [
                {
                    "name": line.name,
                    "amount": line.amount,
                    "unit": line.unit,
                    "calorie_share": line.calorie_share,
                }
                for line in self.macros
            ],
            "ingredients": [item.to_record() for item in self.meal.ingredients],
            "image_reference": self.meal.image_reference,
        }


ReportSection = HeaderSection | SummarySection | ActivitySection | MealSection


@dataclass(frozen=True)
class ExportReport:
    """Ordered report sections with a suggested file name."""

    filename: str
    sections: tuple[ReportSection, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "filename": self.filename,
            "sections": [section.to_dict() for section in self.sections],
        }


@dataclass
class ExportProjector:
    """Shapes a ledger snapshot into report sections. Does no layout."""

    keywords: MacroKeywords = DEFAULT_KEYWORDS

    def project(self, snapshot: LedgerSnapshot, generated_on: date) -> ExportReport:
        """Return header, summary, activities and one block per meal."""
        summary = summarize_day(
            snapshot.meals, snapshot.activities, snapshot.goals, self.keywords
        )
        sections: list[ReportSection] = [
            HeaderSection(title=REPORT_TITLE, generated_on=generated_on),
            SummarySection(summary=summary),
            ActivitySection(activities=snapshot.activities),
        ]
        for position, meal in enumerate(snapshot.meals, start=1):
            sections.append(
                MealSection(
                    position=position,
                    meal=meal,
                    macros=tuple(
                        MacroLine(
                            name=macro.name,
                            amount=macro.amount,
                            unit=macro.unit,
                            calorie_share=macro_percentage(
                                macro, meal.calories, self.keywords
                            ),
                        )
                        for macro in meal.macros
                    ),
                )
            )
        return ExportReport(
            filename=report_filename(generated_on), sections=tuple(sections)
        )


def report_filename(day: date) -> str:
    """Return the download name for a report generated on ``day``."""
    return f"nutri-ledger-report-{day.isoformat()}.pdf"


def _metric_to_dict(metric: ProgressMetric) -> dict[str, object]:
    return {
        "key": metric.key,
        "label": metric.label,
        "current": metric.current,
        "goal": metric.goal,
        "unit": metric.unit,
        "percentage": metric.percentage,
        "over_goal": metric.is_over_goal,
    }
