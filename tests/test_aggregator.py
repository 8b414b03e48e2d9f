"""Tests for monthly aggregation and employer reconciliation."""

from datetime import date
from decimal import Decimal

from fleetprotax_core import (
    ExpenseEntry,
    MonthlyAggregator,
    MonthlyEmployerExpense,
    TripEntry,
    VehicleType,
    aggregate,
    resolve,
)


class TestAggregateShape:
    """Output shape and ordering."""

    def test_empty_year_has_twelve_zero_months(self, rates):
        """A year with no entries still yields 12 all-zero summaries."""
        summaries = aggregate([], [], [], [], rates, 2025)

        assert len(summaries) == 12
        assert [s.month for s in summaries] == list(range(12))
        for summary in summaries:
            assert summary.year == 2025
            assert summary.total_computed_allowance == 0
            assert summary.employer_amount == 0
            assert summary.net_amount == 0
            assert summary.depreciable_equipment_ids == ()

    def test_labels_use_german_month_names(self, rates):
        """Month 2 is März."""
        summaries = aggregate([], [], [], [], rates, 2025)
        assert summaries[0].label == "Januar 2025"
        assert summaries[2].label == "März 2025"


class TestAggregateTotals:
    """Summing entries into months."""

    def test_march_scenario_nets_to_zero(self, rates, march_trip, march_employer_expense):
        """The 50.00 trip against a 50.00 reimbursement nets to 0."""
        summaries = aggregate([march_trip], [], [], [march_employer_expense], rates, 2025)
        march = summaries[2]

        assert march.meal_total == Decimal("14")
        assert march.mileage_total == Decimal("36")
        assert march.total_computed_allowance == Decimal("50.0")
        assert march.employer_amount == Decimal("50.0")
        assert march.net_amount == Decimal("0.0")
        assert march.trip_count == 1

    def test_missing_employer_record_is_zero(self, rates, march_trip):
        """No reimbursement for a month means zero, not an error."""
        march = aggregate([march_trip], [], [], [], rates, 2025)[2]

        assert march.employer_amount == 0
        assert march.net_amount == Decimal("50.0")

    def test_negative_net_is_kept(self, rates):
        """Over-reimbursed months surface a negative net."""
        employer = [MonthlyEmployerExpense(year=2025, month=7, amount=Decimal("100"))]
        august = aggregate([], [], [], employer, rates, 2025)[7]

        assert august.net_amount == Decimal("-100")

    def test_equipment_immediate_and_depreciable(self, rates, monitor, laptop):
        """Immediate items count in their month; depreciable ones are only flagged."""
        summaries = aggregate([], [monitor, laptop], [], [], rates, 2025)

        assert summaries[0].equipment_total == Decimal("300")
        assert summaries[5].equipment_total == 0
        assert summaries[5].total_computed_allowance == 0
        assert summaries[5].depreciable_equipment_ids == ("eq-laptop",)

    def test_expenses_summed_raw(self, rates, train_ticket):
        """Expenses add their amount unchanged."""
        second = ExpenseEntry(expense_date=date(2025, 4, 20), amount=Decimal("10.10"))
        april = aggregate([], [], [train_ticket, second], [], rates, 2025)[3]

        assert april.expense_total == Decimal("50.00")
        assert april.total_computed_allowance == Decimal("50.00")

    def test_filters_other_years(self, rates, march_trip):
        """Entries and reimbursements from other years are ignored."""
        old_trip = march_trip.model_copy(update={"id": "old", "trip_date": date(2024, 3, 5)})
        old_employer = MonthlyEmployerExpense(year=2024, month=2, amount=Decimal("80"))

        march = aggregate([march_trip, old_trip], [], [], [old_employer], rates, 2025)[2]

        assert march.trip_count == 1
        assert march.employer_amount == 0

    def test_duplicate_employer_records_last_wins(self, rates):
        """A later record for the same month overwrites the earlier one."""
        employer = [
            MonthlyEmployerExpense(year=2025, month=0, amount=Decimal("10")),
            MonthlyEmployerExpense(year=2025, month=0, amount=Decimal("25")),
        ]
        january = aggregate([], [], [], employer, rates, 2025)[0]

        assert january.employer_amount == Decimal("25")

    def test_multiple_trips_same_month(self, rates):
        """All trips of a month are summed."""
        trips = [
            TripEntry(trip_date=date(2025, 9, d), vehicle_type=VehicleType.BIKE,
                      distance_km=Decimal("20"), duration_hours=Decimal("9"))
            for d in (1, 2, 3)
        ]
        september = aggregate(trips, [], [], [], rates, 2025)[8]

        assert september.trip_count == 3
        assert september.meal_total == Decimal("42")
        assert september.mileage_total == Decimal("3.00")

    def test_custom_rates_flow_through(self, march_trip):
        """Resolved overrides change the aggregated amounts."""
        rates = resolve({"mileageRateCar": "0.38"})
        march = aggregate([march_trip], [], [], [], rates, 2025)[2]

        assert march.mileage_total == Decimal("45.60")

    def test_identical_inputs_identical_outputs(self, rates, march_trip, monitor, train_ticket):
        """Aggregation is a pure function of its inputs."""
        args = ([march_trip], [monitor], [train_ticket], [], rates, 2025)
        assert aggregate(*args) == aggregate(*args)

    def test_aggregator_class(self, rates, march_trip):
        """MonthlyAggregator binds the rate set."""
        aggregator = MonthlyAggregator(rates)
        assert aggregator.aggregate([march_trip], [], [], [], 2025) == aggregate(
            [march_trip], [], [], [], rates, 2025
        )
