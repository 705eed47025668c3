from __future__ import annotations

from datetime import date, datetime

import pytz

from dairy_app.core.config import APP_TIMEZONE

TIMEZONE = pytz.timezone(APP_TIMEZONE)


def now() -> datetime:
    return datetime.now(TIMEZONE)


def today() -> date:
    """Calendar date in the business timezone, whatever the server clock is set to."""
    return now().date()
