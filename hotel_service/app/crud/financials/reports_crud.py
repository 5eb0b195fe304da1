from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List
from dateutil.relativedelta import relativedelta
from fastapi import status
from sqlalchemy import func
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from ...enum.financial_enum import COLLECTED_STATUSES, PaymentStatus, ReportType
from ...enum.hospitality_enum import BLOCKING_STATUSES, OCCUPYING_STATUSES, ReservationStatus, RoomStatus
from ...models.financials.payments import Payment
from ...models.hospitality.guests import Guest
from ...models.hospitality.reservations import Reservation
from ...models.hospitality.rooms import Room
from ...schemas.financials.reports_schemas import (
    CustomReport, DailyReport, DashboardStats, DaySeriesRow, MonthlyReport, OccupancySnapshot,
    PaymentMethodRow, RevenueSnapshot, WeeklyReport
)
from ..hospitality.availability_crud import (
    average_rate, count_active_rooms, date_range, occupancy_series
)
from .payments_crud import build_financial_report, day_bounds

MAX_REPORT_DAYS = 366


def _money(value) -> float:
    return float(Decimal(value or 0).quantize(Decimal("0.01")))


def _bad_request(message: str, code: str = AppStatusCode.INVALID_INPUT):
    return error_response(message=message, status_code=code,
                          http_status=status.HTTP_400_BAD_REQUEST)


# ----------------- Building blocks -----------------
def revenue_snapshot(db: Session, start: date, end: date) -> RevenueSnapshot:
    start_dt, end_dt = day_bounds(start, end)
    count, revenue, refunds = db.query(
        func.count(Payment.id),
        func.coalesce(func.sum(Payment.amount), 0),
        func.coalesce(func.sum(Payment.refund_amount), 0),
    ).filter(
        Payment.payment_status.in_(COLLECTED_STATUSES),
        Payment.payment_date >= start_dt,
        Payment.payment_date <= end_dt,
    ).one()

    return RevenueSnapshot(
        transaction_count=count or 0,
        total_revenue=_money(revenue),
        total_refunds=_money(refunds),
        net_revenue=_money(Decimal(str(revenue or 0)) - Decimal(str(refunds or 0))),
    )


def revenue_by_day(db: Session, start: date, end: date) -> Dict[date, Decimal]:
    start_dt, end_dt = day_bounds(start, end)
    rows = db.query(Payment.payment_date, Payment.amount, Payment.refund_amount).filter(
        Payment.payment_status.in_(COLLECTED_STATUSES),
        Payment.payment_date >= start_dt,
        Payment.payment_date <= end_dt,
    ).all()

    totals = defaultdict(Decimal)
    for paid_at, amount, refunded in rows:
        totals[paid_at.date()] += Decimal(amount) - Decimal(refunded or 0)
    return totals


def movement_counts(db: Session, column, start: date, end: date) -> Dict[date, int]:
    """Arrivals (check_in_date) or departures (check_out_date) per day."""
    rows = db.query(column, func.count(Reservation.id)).filter(
        column >= start,
        column <= end,
        Reservation.status.in_(OCCUPYING_STATUSES),
    ).group_by(column).all()
    return {day: count for day, count in rows}


def new_guest_count(db: Session, start: date, end: date) -> int:
    start_dt, end_dt = day_bounds(start, end)
    return db.query(func.count(Guest.id)).filter(
        Guest.created_at >= start_dt,
        Guest.created_at <= end_dt,
    ).scalar() or 0


def day_series(db: Session, start: date, end: date) -> List[DaySeriesRow]:
    occupancy = {row["day"]: row for row in occupancy_series(db, start, end)}
    arrivals = movement_counts(db, Reservation.check_in_date, start, end)
    departures = movement_counts(db, Reservation.check_out_date, start, end)
    revenue = revenue_by_day(db, start, end)

    return [
        DaySeriesRow(
            day=day,
            occupied_rooms=occupancy[day]["occupied_rooms"],
            occupancy_rate=occupancy[day]["occupancy_rate"],
            check_ins=arrivals.get(day, 0),
            check_outs=departures.get(day, 0),
            revenue=_money(revenue.get(day, 0)),
        )
        for day in date_range(start, end)
    ]


def payment_method_breakdown(db: Session, start: date, end: date) -> List[PaymentMethodRow]:
    start_dt, end_dt = day_bounds(start, end)
    rows = db.query(
        Payment.payment_method,
        func.count(Payment.id),
        func.coalesce(func.sum(Payment.amount), 0),
    ).filter(
        Payment.payment_status.in_(COLLECTED_STATUSES),
        Payment.payment_date >= start_dt,
        Payment.payment_date <= end_dt,
    ).group_by(Payment.payment_method).order_by(Payment.payment_method).all()

    return [
        PaymentMethodRow(payment_method=method, transaction_count=count, total_amount=_money(total))
        for method, count, total in rows
    ]


# ----------------- Daily -----------------
def get_daily_report(db: Session, report_date: date = None) -> DailyReport:
    report_date = report_date or date.today()
    occupancy = occupancy_series(db, report_date, report_date)[0]
    start_dt, end_dt = day_bounds(report_date, report_date)

    new_reservations = db.query(func.count(Reservation.id)).filter(
        Reservation.created_at >= start_dt,
        Reservation.created_at <= end_dt,
    ).scalar() or 0

    return DailyReport(
        report_date=report_date,
        occupancy=OccupancySnapshot(
            total_rooms=occupancy["total_rooms"],
            occupied_rooms=occupancy["occupied_rooms"],
            available_rooms=max(occupancy["total_rooms"] - occupancy["occupied_rooms"], 0),
            occupancy_rate=occupancy["occupancy_rate"],
        ),
        check_ins=movement_counts(db, Reservation.check_in_date, report_date, report_date)
        .get(report_date, 0),
        check_outs=movement_counts(db, Reservation.check_out_date, report_date, report_date)
        .get(report_date, 0),
        revenue=revenue_snapshot(db, report_date, report_date),
        new_guests=new_guest_count(db, report_date, report_date),
        new_reservations=new_reservations,
    )


# ----------------- Weekly -----------------
def get_weekly_report(db: Session, start_date: date = None) -> WeeklyReport:
    start_date = start_date or date.today()
    week_start = start_date - timedelta(days=start_date.weekday())  # Monday
    week_end = week_start + timedelta(days=6)

    days = day_series(db, week_start, week_end)
    busiest = max(days, key=lambda d: (d.occupancy_rate, d.revenue))

    summary = {
        "average_occupancy_rate": round(sum(d.occupancy_rate for d in days) / len(days), 2),
        "total_check_ins": sum(d.check_ins for d in days),
        "total_check_outs": sum(d.check_outs for d in days),
        "total_revenue": _money(sum(Decimal(str(d.revenue)) for d in days)),
        "busiest_day": busiest.day.isoformat(),
        "new_guests": new_guest_count(db, week_start, week_end),
    }
    return WeeklyReport(week_start=week_start, week_end=week_end, days=days, summary=summary)


# ----------------- Monthly -----------------
def get_monthly_report(db: Session, year: int = None, month: int = None) -> MonthlyReport:
    today = date.today()
    year = year or today.year
    month = month or today.month
    if not 1 <= month <= 12:
        _bad_request("Month must be between 1 and 12")
    if not 2000 <= year <= 2100:
        _bad_request("Year is out of range")

    period_start = date(year, month, 1)
    period_end = period_start + relativedelta(months=1) - timedelta(days=1)

    status_rows = db.query(Reservation.status, func.count(Reservation.id)).filter(
        Reservation.check_in_date >= period_start,
        Reservation.check_in_date <= period_end,
    ).group_by(Reservation.status).all()
    reservations = {s.value: 0 for s in ReservationStatus}
    reservations.update({row_status: count for row_status, count in status_rows})
    reservations["total"] = sum(count for _, count in status_rows)

    return MonthlyReport(
        year=year,
        month=month,
        period_start=period_start,
        period_end=period_end,
        reservations=reservations,
        average_occupancy_rate=average_rate(occupancy_series(db, period_start, period_end)),
        revenue=revenue_snapshot(db, period_start, period_end),
        payment_methods=payment_method_breakdown(db, period_start, period_end),
        new_guests=new_guest_count(db, period_start, period_end),
    )


# ----------------- Custom -----------------
def _occupancy_section(db: Session, start: date, end: date) -> Dict:
    series = occupancy_series(db, start, end)
    return {
        "average_occupancy_rate": average_rate(series),
        "peak_occupancy_rate": max((row["occupancy_rate"] for row in series), default=0.0),
        "days": [
            {**row, "day": row["day"].isoformat()} for row in series
        ],
    }


def _guest_section(db: Session, start: date, end: date) -> Dict:
    start_dt, end_dt = day_bounds(start, end)
    by_type = dict(
        db.query(Guest.guest_type, func.count(Guest.id))
        .filter(Guest.created_at >= start_dt, Guest.created_at <= end_dt)
        .group_by(Guest.guest_type)
        .all()
    )

    stays = db.query(
        Reservation.guest_id,
        func.count(Reservation.id),
        func.coalesce(func.sum(Reservation.total_amount), 0),
    ).filter(
        Reservation.status.in_(OCCUPYING_STATUSES),
        Reservation.check_in_date >= start,
        Reservation.check_in_date <= end,
    ).group_by(Reservation.guest_id).all()

    top = sorted(stays, key=lambda row: Decimal(str(row[2])), reverse=True)[:10]
    names = {
        g.id: g.full_name
        for g in db.query(Guest).filter(Guest.id.in_([row[0] for row in top])).all()
    } if top else {}

    return {
        "new_guests": sum(by_type.values()),
        "guests_by_type": by_type,
        "guests_with_stays": len(stays),
        "returning_guests": sum(1 for row in stays if row[1] > 1),
        "top_guests": [
            {"guest_id": guest_id, "name": names.get(guest_id),
             "reservations": count, "total_amount": _money(total)}
            for guest_id, count, total in top
        ],
    }


def get_custom_report(db: Session, start_date: date, end_date: date,
                      report_type: ReportType = ReportType.comprehensive) -> CustomReport:
    if end_date < start_date:
        _bad_request("End date must not be before start date", AppStatusCode.INVALID_DATE_RANGE)
    if (end_date - start_date).days > MAX_REPORT_DAYS:
        _bad_request(f"Report range cannot exceed {MAX_REPORT_DAYS} days",
                     AppStatusCode.INVALID_DATE_RANGE)

    if report_type == ReportType.occupancy:
        data = _occupancy_section(db, start_date, end_date)
    elif report_type == ReportType.financial:
        data = build_financial_report(db, start_date, end_date).model_dump(mode="json")
    elif report_type == ReportType.guest:
        data = _guest_section(db, start_date, end_date)
    else:
        data = {
            "occupancy": _occupancy_section(db, start_date, end_date),
            "financial": build_financial_report(db, start_date, end_date).model_dump(mode="json"),
            "guests": _guest_section(db, start_date, end_date),
        }

    return CustomReport(
        report_type=report_type.value,
        start_date=start_date,
        end_date=end_date,
        data=data,
    )


# ----------------- Dashboard -----------------
def get_dashboard_stats(db: Session) -> DashboardStats:
    today = date.today()
    room_counts = dict(
        db.query(Room.status, func.count(Room.id))
        .filter(Room.is_active == True)
        .group_by(Room.status)
        .all()
    )

    active_reservations = db.query(func.count(Reservation.id)).filter(
        Reservation.status.in_(BLOCKING_STATUSES),
        Reservation.check_out_date >= today,
    ).scalar() or 0

    arrivals = db.query(func.count(Reservation.id)).filter(
        Reservation.check_in_date == today,
        Reservation.status == ReservationStatus.confirmed.value,
    ).scalar() or 0

    departures = db.query(func.count(Reservation.id)).filter(
        Reservation.check_out_date == today,
        Reservation.status == ReservationStatus.checked_in.value,
    ).scalar() or 0

    pending_payments = db.query(func.count(Payment.id)).filter(
        Payment.payment_status == PaymentStatus.pending.value).scalar() or 0

    month_start = today.replace(day=1)

    return DashboardStats(
        total_guests=db.query(func.count(Guest.id)).scalar() or 0,
        total_rooms=count_active_rooms(db),
        available_rooms=room_counts.get(RoomStatus.available.value, 0),
        occupied_rooms=room_counts.get(RoomStatus.occupied.value, 0),
        active_reservations=active_reservations,
        todays_check_ins=arrivals,
        todays_check_outs=departures,
        pending_payments=pending_payments,
        revenue_this_month=revenue_snapshot(db, month_start, today).net_revenue,
    )
