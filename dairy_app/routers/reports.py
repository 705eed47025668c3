from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dairy_app.core.database import get_db
from dairy_app.deps import get_today
from dairy_app.services import reports

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/customer-analysis")
def customer_analysis(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.customer_analysis(db, today)


@router.get("/top-customers-30days")
def top_customers_30days(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.top_customers_30days(db, today)


@router.get("/daily-average")
def daily_average(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.daily_average(db, today)


@router.get("/weekly-trend")
def weekly_trend(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.weekly_trend(db, today)


@router.get("/monthly-trend")
def monthly_trend(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.monthly_trend(db, today)


@router.get("/inactive-customers")
def inactive_customers(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.inactive_customers(db, today)


@router.get("/delivery-time-analysis")
def delivery_time_analysis(db: Session = Depends(get_db)):
    return reports.delivery_time_analysis(db)


@router.get("/daily-distribution")
def daily_distribution(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return reports.daily_distribution(db, today)


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db)):
    return reports.dashboard_stats(db)
