"""Plain-text report generation for a tax year.

Renders a ``YearlySummary`` as a month-by-month reconciliation table
followed by component totals and the list of equipment that still needs
a depreciation schedule.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

import structlog

from .models import YearlySummary, get_month_name
from .tax_rates import EFFECTIVE_DATE, TAX_RATES_VERSION

logger = structlog.get_logger()

CENT = Decimal("0.01")


def format_currency(amount: Decimal) -> str:
    """Format an amount for display, e.g. ``1.234,50 €``."""
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.2f}"
    # German grouping: swap thousands and decimal separators
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{text} €"


@dataclass
class ReportSection:
    """A section of the report."""
    title: str
    content: str
    subsections: list["ReportSection"] = field(default_factory=list)


class YearlyReportGenerator:
    """
    Generate a yearly reconciliation report.

    Reports include:
    - Monthly table (computed allowance, employer reimbursement, net)
    - Year totals by component
    - Equipment flagged for depreciation
    """

    def __init__(self, width: int = 72):
        self.width = width

    def generate(self, summary: YearlySummary) -> str:
        """Render the report as plain text."""
        sections = [
            self._monthly_section(summary),
            self._totals_section(summary),
        ]
        if summary.depreciable_equipment_ids:
            sections.append(self._depreciation_section(summary))

        title = f"Steuerübersicht {summary.year}" if summary.year is not None else "Steuerübersicht"
        lines = ["=" * self.width, title.center(self.width), "=" * self.width, ""]
        for section in sections:
            lines.extend(self._render_section(section))
        lines.append(f"Rates: {TAX_RATES_VERSION} (effective {EFFECTIVE_DATE})")

        logger.info("report_generated", year=summary.year, sections=len(sections))
        return "\n".join(lines)

    def _render_section(self, section: ReportSection) -> list[str]:
        lines = [section.title, "-" * len(section.title), section.content, ""]
        for sub in section.subsections:
            lines.extend(self._render_section(sub))
        return lines

    def _monthly_section(self, summary: YearlySummary) -> ReportSection:
        header = f"{'Monat':<12}{'Absetzbar':>18}{'Spesen':>18}{'Netto':>18}"
        rows = [header]
        for month in summary.months:
            rows.append(
                f"{get_month_name(month.month):<12}"
                f"{format_currency(month.total_computed_allowance):>18}"
                f"{format_currency(month.employer_amount):>18}"
                f"{format_currency(month.net_amount):>18}"
            )
        rows.append(
            f"{'Gesamt':<12}"
            f"{format_currency(summary.total_computed_allowance):>18}"
            f"{format_currency(summary.total_employer_amount):>18}"
            f"{format_currency(summary.year_total):>18}"
        )
        return ReportSection(title="Monatsübersicht", content="\n".join(rows))

    def _totals_section(self, summary: YearlySummary) -> ReportSection:
        items = [
            ("Verpflegung", summary.total_meals),
            ("Fahrtkosten", summary.total_mileage),
            ("Arbeitsmittel (GWG)", summary.total_equipment),
            ("Ausgaben", summary.total_expenses),
            ("Erstattung Arbeitgeber", summary.total_employer_amount),
            ("Netto absetzbar", summary.year_total),
        ]
        content = "\n".join(f"{label:<30}{format_currency(amount):>18}" for label, amount in items)
        return ReportSection(title="Jahressummen", content=content)

    def _depreciation_section(self, summary: YearlySummary) -> ReportSection:
        content = "\n".join(f"- {entry_id}" for entry_id in summary.depreciable_equipment_ids)
        return ReportSection(
            title="Abschreibung erforderlich",
            content=f"Über der GWG-Grenze, nicht im Monatswert enthalten:\n{content}",
        )
