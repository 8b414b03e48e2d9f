"""Tests for the plain-text yearly report."""

from decimal import Decimal

import pytest

from fleetprotax_core import MonthlyEmployerExpense, YearlyReportGenerator, aggregate, build_year
from fleetprotax_core.report_generator import format_currency


class TestFormatCurrency:
    """German currency formatting."""

    @pytest.mark.parametrize(
        "amount,expected",
        [
            ("1234.5", "1.234,50 €"),
            ("0", "0,00 €"),
            ("14", "14,00 €"),
            ("0.005", "0,01 €"),
            ("-100", "-100,00 €"),
            ("1000000", "1.000.000,00 €"),
        ],
    )
    def test_format(self, amount, expected):
        """Thousands use dots, decimals a comma, rounded half up."""
        assert format_currency(Decimal(amount)) == expected


class TestYearlyReportGenerator:
    """Rendering a YearlySummary."""

    @pytest.fixture
    def summary(self, rates, march_trip, march_employer_expense, monitor, laptop):
        return build_year(
            aggregate([march_trip], [monitor, laptop], [], [march_employer_expense], rates, 2025)
        )

    def test_title_and_months(self, summary):
        """Every month appears with its German name."""
        report = YearlyReportGenerator().generate(summary)

        assert "Steuerübersicht 2025" in report
        for name in ("Januar", "März", "Dezember"):
            assert name in report

    def test_totals_row(self, summary):
        """The monthly table ends with a year total."""
        report = YearlyReportGenerator().generate(summary)
        gesamt = next(line for line in report.splitlines() if line.startswith("Gesamt"))

        assert "350,00 €" in gesamt
        assert "50,00 €" in gesamt
        assert "300,00 €" in gesamt

    def test_march_nets_to_zero(self, summary):
        """March shows the computed allowance, the reimbursement and a zero net."""
        report = YearlyReportGenerator().generate(summary)
        march = next(line for line in report.splitlines() if line.startswith("März"))

        assert march.split() == ["März", "50,00", "€", "50,00", "€", "0,00", "€"]

    def test_depreciation_section(self, summary):
        """Equipment above the GWG limit is listed separately."""
        report = YearlyReportGenerator().generate(summary)

        assert "Abschreibung erforderlich" in report
        assert "- eq-laptop" in report

    def test_no_depreciation_section_when_nothing_flagged(self, rates):
        """Years without expensive equipment skip the section."""
        report = YearlyReportGenerator().generate(build_year(aggregate([], [], [], [], rates, 2025)))
        assert "Abschreibung" not in report

    def test_negative_net_rendered(self, rates):
        """Over-reimbursed months show a negative net."""
        employer = [MonthlyEmployerExpense(year=2025, month=7, amount=Decimal("20"))]
        report = YearlyReportGenerator().generate(build_year(aggregate([], [], [], employer, rates, 2025)))

        assert "-20,00 €" in report

    def test_rates_version_footer(self, summary):
        """The report names the rate table it was computed with."""
        footer = YearlyReportGenerator().generate(summary).splitlines()[-1]

        assert footer == "Rates: DE-2025 (effective 2025-01-01)"

    def test_empty_summary(self):
        """An empty summary still renders."""
        report = YearlyReportGenerator(width=40).generate(build_year([]))

        assert report.splitlines()[0] == "=" * 40
        assert "Gesamt" in report
