import os
import sys
from datetime import date, datetime, time, timedelta, timezone

import pytest

# ensure workspace root is on sys.path so our application packages can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from config import DEVICE_STATUS_ACTIVE
from database import dispose_database, get_db_session, init_database, init_db
from db_models import EnergyGenerationRecord, SolarUnit

NOW = datetime(2026, 6, 30, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def sqlite_db(tmp_path):
    """Point the session factory at a fresh SQLite file for the duration of a test."""
    dispose_database()
    url = f"sqlite:///{tmp_path / 'solarwatch.db'}"
    init_database(url)
    init_db()
    yield url
    dispose_database()


@pytest.fixture
def add_device(sqlite_db):
    def _add(device_id: str, capacity_watts: float = 5000.0, status: str = DEVICE_STATUS_ACTIVE) -> str:
        with get_db_session() as db:
            db.add(SolarUnit(
                id=device_id,
                serial_number=f"SN-{device_id}",
                capacity_watts=capacity_watts,
                status=status,
                installation_date=date(2024, 1, 1),
            ))
        return device_id

    return _add


@pytest.fixture
def add_readings(sqlite_db):
    """Store one or more readings per day; ``totals`` maps a day to a list of interval values."""

    def _add(device_id: str, totals: dict) -> None:
        with get_db_session() as db:
            for day, values in totals.items():
                if not isinstance(values, (list, tuple)):
                    values = [values]
                for slot, value in enumerate(values):
                    stamp = datetime.combine(day, time(8, 0), tzinfo=timezone.utc) + timedelta(hours=2 * slot)
                    db.add(EnergyGenerationRecord(
                        device_id=device_id,
                        energy_generated=value,
                        timestamp=stamp,
                    ))

    return _add
