"""
Rollup Engine.

Time-bucketed income/expense series, expense category breakdown, vehicle
profitability and dashboard totals. The compute_* functions are pure over
store snapshots; AnalyticsService fetches the snapshots.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Any, Dict, List, Optional

from fleet_ledger.app.domain.ledger.values import (
    as_amount, enum_value, ledger_now, ledger_zone, parse_ledger_datetime
)
from fleet_ledger.app.models.enums import VehicleStatus
from fleet_ledger.app.models.ledger_enums import ExpenseCategory
from fleet_ledger.app.models.trip_enums import PaymentStatus, TripStatus
from fleet_ledger.app.schemas.analytics import (
    CategoryAmount, DashboardSummary, Granularity, RollupBucket, VehicleProfit
)
from fleet_ledger.app.services.ledger_store import LedgerStore


BUCKET_COUNTS = {
    Granularity.HOURLY: 24,
    Granularity.DAILY: 7,
    Granularity.WEEKLY: 8,
    Granularity.MONTHLY: 6,
}


def _shift_months(moment: datetime, months: int) -> datetime:
    """First day of the month `months` away from moment's month."""
    index = moment.year * 12 + (moment.month - 1) + months
    return moment.replace(year=index // 12, month=index % 12 + 1, day=1)


def _align(granularity: Granularity, moment: datetime) -> datetime:
    """Start of the unit containing `moment`."""
    if granularity == Granularity.HOURLY:
        return moment.replace(minute=0, second=0, microsecond=0)

    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if granularity == Granularity.DAILY:
        return midnight
    if granularity == Granularity.WEEKLY:
        return midnight - timedelta(days=midnight.weekday())
    return midnight.replace(day=1)


def _step(granularity: Granularity, start: datetime, units: int) -> datetime:
    if granularity == Granularity.HOURLY:
        return start + timedelta(hours=units)
    if granularity == Granularity.DAILY:
        return start + timedelta(days=units)
    if granularity == Granularity.WEEKLY:
        return start + timedelta(weeks=units)
    return _shift_months(start, units)


def _label(granularity: Granularity, start: datetime) -> str:
    if granularity == Granularity.HOURLY:
        return start.strftime("%H:%M")
    if granularity == Granularity.DAILY:
        return start.strftime("%a")
    if granularity == Granularity.WEEKLY:
        return f"W{start.isocalendar()[1]}"
    return start.strftime("%b")


def build_buckets(granularity: Granularity, now: datetime) -> List[RollupBucket]:
    """
    Empty buckets ending with the one containing `now`, oldest first.

    Buckets are half-open and contiguous: each end is the next one's start.
    """
    count = BUCKET_COUNTS[granularity]
    current = _align(granularity, now)
    starts = [_step(granularity, current, -i) for i in range(count - 1, -1, -1)]
    ends = starts[1:] + [_step(granularity, current, 1)]

    return [
        RollupBucket(
            label=_label(granularity, start),
            start_inclusive=start,
            end_exclusive=end,
            income=0.0,
            expenses=0.0,
        )
        for start, end in zip(starts, ends)
    ]


def _find_bucket(buckets: List[RollupBucket], moment: datetime) -> Optional[RollupBucket]:
    for bucket in buckets:
        if bucket.start_inclusive <= moment < bucket.end_exclusive:
            return bucket
    return None


def compute_trend(granularity: Granularity, income: List[Any], expenses: List[Any],
                  now: Optional[datetime] = None, tz: Optional[tzinfo] = None) -> List[RollupBucket]:
    """
    Income and expense totals per bucket.

    Income is placed by payment_date, expenses by expense_date; records with
    no usable date are left out.
    """
    tz = tz or ledger_zone()
    now = parse_ledger_datetime(now, tz) if now else datetime.now(tz)
    buckets = build_buckets(granularity, now)

    for record in income:
        moment = parse_ledger_datetime(record.payment_date, tz)
        bucket = _find_bucket(buckets, moment) if moment else None
        if bucket:
            bucket.income += as_amount(record.amount)

    for record in expenses:
        moment = parse_ledger_datetime(record.expense_date, tz)
        bucket = _find_bucket(buckets, moment) if moment else None
        if bucket:
            bucket.expenses += as_amount(record.amount)

    return buckets


def category_label(key: str) -> str:
    return key.replace("_", " ").upper()


def compute_expenses_by_category(expenses: List[Any]) -> List[CategoryAmount]:
    """Expense totals per category in first-seen order; uncategorised counts as miscellaneous."""
    totals: Dict[str, float] = {}
    for record in expenses:
        key = enum_value(record.category) or ExpenseCategory.MISCELLANEOUS.value
        totals[key] = totals.get(key, 0.0) + as_amount(record.amount)

    return [CategoryAmount(category=category_label(key), amount=amount) for key, amount in totals.items()]


def compute_vehicle_profits(vehicles: List[Any], trips: List[Any], expenses: List[Any]) -> List[VehicleProfit]:
    """
    Profit per vehicle: fares of its trips minus expenses tagged to it.

    Every vehicle is listed, including ones with no trips.
    """
    fares: Dict[int, float] = {}
    trip_counts: Dict[int, int] = {}
    for trip in trips:
        if trip.vehicle_id is None:
            continue
        fares[trip.vehicle_id] = fares.get(trip.vehicle_id, 0.0) + as_amount(trip.fare_amount)
        trip_counts[trip.vehicle_id] = trip_counts.get(trip.vehicle_id, 0) + 1

    costs: Dict[int, float] = {}
    for record in expenses:
        if record.vehicle_id is None:
            continue
        costs[record.vehicle_id] = costs.get(record.vehicle_id, 0.0) + as_amount(record.amount)

    return [
        VehicleProfit(
            vehicle_id=vehicle.id,
            vehicle_number=vehicle.vehicle_number,
            trip_count=trip_counts.get(vehicle.id, 0),
            profit=fares.get(vehicle.id, 0.0) - costs.get(vehicle.id, 0.0),
        )
        for vehicle in vehicles
    ]


def compute_dashboard_summary(vehicles: List[Any], drivers: List[Any], trips: List[Any],
                              income: List[Any], expenses: List[Any]) -> DashboardSummary:
    total_income = sum(as_amount(record.amount) for record in income)
    total_expenses = sum(as_amount(record.amount) for record in expenses)

    pending = 0.0
    for trip in trips:
        if enum_value(trip.payment_status) != PaymentStatus.COMPLETED.value:
            pending += as_amount(trip.fare_amount) - as_amount(trip.advance_amount)

    return DashboardSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_profit=total_income - total_expenses,
        total_trips=len(trips),
        completed_trips=sum(1 for trip in trips if enum_value(trip.status) == TripStatus.COMPLETED.value),
        pending_payments=pending,
        active_vehicles=sum(1 for v in vehicles if enum_value(v.status) == VehicleStatus.ACTIVE.value),
        active_drivers=sum(1 for d in drivers if d.is_active),
    )


class AnalyticsService:
    """Read-only analytics over fresh store snapshots."""

    @staticmethod
    async def get_trend(store: LedgerStore, granularity: Granularity,
                        now: Optional[datetime] = None) -> List[RollupBucket]:
        income = await store.list_income()
        expenses = await store.list_expenses()
        return compute_trend(granularity, income, expenses, now or ledger_now())

    @staticmethod
    async def get_expenses_by_category(store: LedgerStore) -> List[CategoryAmount]:
        expenses = await store.list_expenses()
        return compute_expenses_by_category(expenses)

    @staticmethod
    async def get_vehicle_profits(store: LedgerStore) -> List[VehicleProfit]:
        vehicles = await store.list_vehicles()
        trips = await store.list_trips()
        expenses = await store.list_expenses()
        return compute_vehicle_profits(vehicles, trips, expenses)

    @staticmethod
    async def get_dashboard_summary(store: LedgerStore) -> DashboardSummary:
        vehicles = await store.list_vehicles()
        drivers = await store.list_drivers()
        trips = await store.list_trips()
        income = await store.list_income()
        expenses = await store.list_expenses()
        return compute_dashboard_summary(vehicles, drivers, trips, income, expenses)
