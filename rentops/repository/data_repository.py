"""Repository layer responsible for all database access."""

from __future__ import annotations

import random
import sqlite3
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from rentops.domain.models import (
    CLEANING_STATUS_SCHEDULED,
    RESERVATION_STATUS_ACTIVE,
    Apartment,
    CleaningAssignment,
    Reservation,
    ReservationRecordError,
    build_reservation,
)
from rentops.utils.config import Settings, get_settings
from rentops.utils.logger import get_logger


logger = get_logger(__name__)


_DEMO_APARTMENT_NAMES = (
    "Old Town Loft",
    "Harbour View",
    "Garden Studio",
    "Bell Tower Suite",
    "River Terrace",
    "Cathedral Nook",
    "Market Square Flat",
    "Lighthouse Attic",
    "Stone Bridge Duplex",
    "Palm Court",
)

_DEMO_GUESTS = (
    ("Ana", "Kovac", "+385 91 111 2222"),
    ("Marko", "Horvat", "+385 98 333 4444"),
    ("Julia", "Schmidt", "+49 151 555 6666"),
    ("Pierre", "Laurent", "+33 6 77 88 99 00"),
    ("Emma", "Novak", None),
    ("Luca", "Bianchi", "+39 347 123 4567"),
)

_DEMO_CLEANERS = ("cleaner_ivana", "cleaner_petra")

_RESERVATION_COLUMNS = """
    r.id,
    r.apartment_id,
    r.planned_check_in,
    r.planned_check_out,
    r.planned_arrival_time,
    r.planned_checkout_time,
    r.status,
    r.created_at,
    g.first_name AS guest_first_name,
    g.last_name AS guest_last_name,
    g.contact_phone AS guest_contact_phone
"""


def _to_db_timestamp(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat(sep=" ")


class DataRepository:
    """Encapsulates SQLite access so the timeline engine stays storage-agnostic."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._db_path)
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Apartments (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        is_active INTEGER NOT NULL DEFAULT 1 CHECK (is_active IN (0,1)),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Guests (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        first_name TEXT NOT NULL,
                        last_name TEXT NOT NULL,
                        contact_phone TEXT,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Reservations (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        apartment_id INTEGER NOT NULL,
                        guest_id INTEGER,
                        planned_check_in TEXT NOT NULL,
                        planned_check_out TEXT NOT NULL,
                        planned_arrival_time TEXT,
                        planned_checkout_time TEXT,
                        status TEXT NOT NULL DEFAULT 'active'
                            CHECK (status IN ('active', 'canceled', 'completed')),
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (apartment_id) REFERENCES Apartments(id),
                        FOREIGN KEY (guest_id) REFERENCES Guests(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ApartmentCleanings (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        reservation_id INTEGER NOT NULL,
                        apartment_id INTEGER NOT NULL,
                        assigned_to TEXT NOT NULL,
                        scheduled_start_time TEXT NOT NULL,
                        status TEXT NOT NULL DEFAULT 'scheduled'
                            CHECK (status IN ('scheduled', 'completed', 'cancelled')),
                        notes TEXT,
                        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (reservation_id) REFERENCES Reservations(id),
                        FOREIGN KEY (apartment_id) REFERENCES Apartments(id)
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_checkout
                    ON Reservations(status, planned_check_out, apartment_id);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_reservations_checkin
                    ON Reservations(status, planned_check_in, apartment_id);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_cleanings_assignee_status
                    ON ApartmentCleanings(assigned_to, status, scheduled_start_time);
                    """
                )
                conn.commit()
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_demo_data(self, today: Optional[date] = None) -> None:
        """Seed a deterministic demo portfolio around tomorrow, only when empty."""
        random.seed(self._settings.demo_random_seed)
        anchor = (today or date.today()) + timedelta(
            days=self._settings.timeline_default_day_offset
        )
        try:
            with self._connect() as conn:
                cursor = conn.cursor()

                cursor.execute("SELECT COUNT(*) AS count FROM Apartments;")
                if int(cursor.fetchone()["count"]) > 0:
                    logger.info("Demo data already present; skipping seed")
                    return

                apartment_count = min(
                    self._settings.demo_apartment_count,
                    len(_DEMO_APARTMENT_NAMES),
                )
                apartments = [
                    (name, 0 if index == apartment_count - 1 else 1)
                    for index, name in enumerate(_DEMO_APARTMENT_NAMES[:apartment_count])
                ]
                cursor.executemany(
                    "INSERT INTO Apartments (name, is_active) VALUES (?, ?);",
                    apartments,
                )
                cursor.executemany(
                    """
                    INSERT INTO Guests (first_name, last_name, contact_phone)
                    VALUES (?, ?, ?);
                    """,
                    _DEMO_GUESTS,
                )

                cursor.execute("SELECT id FROM Apartments ORDER BY id ASC;")
                apartment_ids = [int(row["id"]) for row in cursor.fetchall()]
                cursor.execute("SELECT id FROM Guests ORDER BY id ASC;")
                guest_ids = [int(row["id"]) for row in cursor.fetchall()]

                checkout_times = (None, "10:00", "12:30", "11:00", None, "13:00")
                arrival_times = (None, "15:00", "13:00", "12:00", "16:30", None)
                reservation_rows = []
                for position, apartment_id in enumerate(apartment_ids):
                    stay_length = random.randint(2, 6)
                    if position % 4 != 3:
                        reservation_rows.append(
                            (
                                apartment_id,
                                random.choice(guest_ids),
                                (anchor - timedelta(days=stay_length)).isoformat(),
                                anchor.isoformat(),
                                None,
                                checkout_times[position % len(checkout_times)],
                            )
                        )
                    if position % 3 != 2:
                        reservation_rows.append(
                            (
                                apartment_id,
                                random.choice(guest_ids),
                                anchor.isoformat(),
                                (anchor + timedelta(days=stay_length)).isoformat(),
                                arrival_times[position % len(arrival_times)],
                                None,
                            )
                        )

                cursor.executemany(
                    """
                    INSERT INTO Reservations (
                        apartment_id,
                        guest_id,
                        planned_check_in,
                        planned_check_out,
                        planned_arrival_time,
                        planned_checkout_time
                    )
                    VALUES (?, ?, ?, ?, ?, ?);
                    """,
                    reservation_rows,
                )

                cursor.execute(
                    """
                    SELECT id, apartment_id, planned_checkout_time
                    FROM Reservations
                    WHERE planned_check_out = ?
                    ORDER BY id ASC;
                    """,
                    (anchor.isoformat(),),
                )
                cleaning_rows = []
                for position, row in enumerate(cursor.fetchall()):
                    if position % 2 == 1:
                        continue
                    start_clock = row["planned_checkout_time"] or self._settings.default_checkout_time
                    start_hour, start_minute = (int(part) for part in start_clock.split(":"))
                    scheduled_start = datetime.combine(anchor, time(start_hour, start_minute))
                    cleaning_rows.append(
                        (
                            int(row["id"]),
                            int(row["apartment_id"]),
                            _DEMO_CLEANERS[position % len(_DEMO_CLEANERS)],
                            _to_db_timestamp(scheduled_start + timedelta(minutes=30)),
                        )
                    )
                cursor.executemany(
                    """
                    INSERT INTO ApartmentCleanings (
                        reservation_id,
                        apartment_id,
                        assigned_to,
                        scheduled_start_time
                    )
                    VALUES (?, ?, ?, ?);
                    """,
                    cleaning_rows,
                )
                conn.commit()
            logger.info(
                "Demo seed completed with %s apartments, %s reservations, %s cleanings",
                len(apartments),
                len(reservation_rows),
                len(cleaning_rows),
            )
        except sqlite3.Error as exc:
            raise RuntimeError(f"Demo data seeding failed: {exc}") from exc

    def create_apartment(self, name: str, is_active: bool = True) -> str:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "INSERT INTO Apartments (name, is_active) VALUES (?, ?);",
                (name, 1 if is_active else 0),
            )
            conn.commit()
            return str(cursor.lastrowid)

    def create_guest(
        self,
        first_name: str,
        last_name: str,
        contact_phone: Optional[str] = None,
    ) -> str:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Guests (first_name, last_name, contact_phone)
                VALUES (?, ?, ?);
                """,
                (first_name, last_name, contact_phone),
            )
            conn.commit()
            return str(cursor.lastrowid)

    def create_reservation(
        self,
        apartment_id: str,
        planned_check_in: date,
        planned_check_out: date,
        planned_arrival_time: Optional[str] = None,
        planned_checkout_time: Optional[str] = None,
        status: str = RESERVATION_STATUS_ACTIVE,
        guest_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> str:
        """Insert a reservation row and return the created id."""
        created_at_value = _to_db_timestamp(created_at or datetime.now())
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO Reservations (
                    apartment_id,
                    guest_id,
                    planned_check_in,
                    planned_check_out,
                    planned_arrival_time,
                    planned_checkout_time,
                    status,
                    created_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                (
                    int(apartment_id),
                    int(guest_id) if guest_id is not None else None,
                    planned_check_in.isoformat(),
                    planned_check_out.isoformat(),
                    planned_arrival_time,
                    planned_checkout_time,
                    status,
                    created_at_value,
                ),
            )
            conn.commit()
            return str(cursor.lastrowid)

    def update_reservation_status(self, reservation_id: str, status: str) -> None:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE Reservations SET status = ? WHERE id = ?;",
                (status, int(reservation_id)),
            )
            conn.commit()

    def create_cleaning(
        self,
        reservation_id: str,
        apartment_id: str,
        assigned_to: str,
        scheduled_start_time: datetime,
        status: str = CLEANING_STATUS_SCHEDULED,
        notes: Optional[str] = None,
    ) -> str:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO ApartmentCleanings (
                    reservation_id,
                    apartment_id,
                    assigned_to,
                    scheduled_start_time,
                    status,
                    notes
                )
                VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    int(reservation_id),
                    int(apartment_id),
                    assigned_to,
                    _to_db_timestamp(scheduled_start_time),
                    status,
                    notes,
                ),
            )
            conn.commit()
            return str(cursor.lastrowid)

    def list_active_apartments(self) -> list[Apartment]:
        """Return active apartments; inactive inventory never reaches scheduling."""
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, name, is_active
                FROM Apartments
                WHERE is_active = 1
                ORDER BY name ASC, id ASC;
                """
            )
            return [
                Apartment(
                    apartment_id=str(row["id"]),
                    name=str(row["name"]),
                    is_active=bool(row["is_active"]),
                )
                for row in cursor.fetchall()
            ]

    def list_reservations_touching_date(self, target_date: date) -> List[Reservation]:
        """Active reservations checking in or out on `target_date`."""
        day = target_date.isoformat()
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_RESERVATION_COLUMNS}
                FROM Reservations AS r
                LEFT JOIN Guests AS g ON g.id = r.guest_id
                WHERE r.status = ?
                  AND (r.planned_check_out = ? OR r.planned_check_in = ?)
                ORDER BY r.id ASC;
                """,
                (RESERVATION_STATUS_ACTIVE, day, day),
            )
            return self._rows_to_reservations(cursor.fetchall())

    def _rows_to_reservations(self, rows: Iterable[sqlite3.Row]) -> List[Reservation]:
        reservations: List[Reservation] = []
        for row in rows:
            payload: dict[str, Any] = {
                "reservation_id": row["id"],
                "apartment_id": row["apartment_id"],
                "planned_check_in": row["planned_check_in"],
                "planned_check_out": row["planned_check_out"],
                "planned_arrival_time": row["planned_arrival_time"],
                "planned_checkout_time": row["planned_checkout_time"],
                "status": row["status"],
                "created_at": row["created_at"],
            }
            if row["guest_first_name"] is not None:
                payload["guest"] = {
                    "first_name": row["guest_first_name"],
                    "last_name": row["guest_last_name"],
                    "contact_phone": row["guest_contact_phone"],
                }
            try:
                reservations.append(build_reservation(payload))
            except ReservationRecordError as exc:
                logger.warning("Skipping reservation %s: %s", row["id"], exc)
        return reservations

    def list_cleanings(
        self,
        *,
        apartment_ids: Optional[Sequence[str]] = None,
        assigned_to: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[CleaningAssignment]:
        """Return cleanings matching all given filters, earliest start first."""
        clauses: list[str] = []
        params: list[Any] = []
        if apartment_ids is not None:
            if not apartment_ids:
                return []
            placeholders = ",".join("?" for _ in apartment_ids)
            clauses.append(f"apartment_id IN ({placeholders})")
            params.extend(int(apartment_id) for apartment_id in apartment_ids)
        if assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(assigned_to)
        if status is not None:
            clauses.append("status = ?")
            params.append(status)
        if start is not None:
            clauses.append("scheduled_start_time >= ?")
            params.append(_to_db_timestamp(start))
        if end is not None:
            clauses.append("scheduled_start_time < ?")
            params.append(_to_db_timestamp(end))
        where_sql = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT
                    id,
                    reservation_id,
                    apartment_id,
                    assigned_to,
                    scheduled_start_time,
                    status,
                    notes
                FROM ApartmentCleanings
                {where_sql}
                ORDER BY scheduled_start_time ASC, id ASC;
                """,
                tuple(params),
            )
            return [
                CleaningAssignment(
                    cleaning_id=str(row["id"]),
                    reservation_id=str(row["reservation_id"]),
                    apartment_id=str(row["apartment_id"]),
                    assigned_to=str(row["assigned_to"]),
                    scheduled_start_time=datetime.fromisoformat(str(row["scheduled_start_time"])),
                    status=str(row["status"]),
                    notes=row["notes"],
                )
                for row in cursor.fetchall()
            ]

    def count_reservations(self) -> int:
        with self._connect() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS count FROM Reservations;")
            return int(cursor.fetchone()["count"])
