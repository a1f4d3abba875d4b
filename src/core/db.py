"""SQLite Record Store for painters, historical jobs, and quote requests."""

import csv
import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from src.core.errors import StoreUnavailable
from src.core.schemas import (
    HistoricalJob,
    JobBrowseFilters,
    JobRequest,
    LocationFilters,
    Painter,
)

logger = logging.getLogger(__name__)

_PAINTERS_TABLE = """
CREATE TABLE IF NOT EXISTS painters (
    record_id         TEXT PRIMARY KEY,
    company_name      TEXT NOT NULL,
    owner_name        TEXT NOT NULL DEFAULT '',
    ss_profile_url    TEXT NOT NULL DEFAULT '',
    whatsapp_number   TEXT NOT NULL DEFAULT '',
    postcode          TEXT,
    suburb            TEXT,
    area              TEXT,
    region            TEXT,
    star_rating       REAL,
    jobs_won          INTEGER,
    number_of_reviews INTEGER,
    engagement_rate   REAL,
    rejection_rate    REAL
);
"""

_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS jobs (
    id                      INTEGER PRIMARY KEY AUTOINCREMENT,
    category                TEXT,
    subtype                 TEXT,
    size                    TEXT,
    total_price             REAL,
    job_description         TEXT NOT NULL DEFAULT '',
    job_description_cleaned TEXT
);
"""

_JOB_REQUESTS_TABLE = """
CREATE TABLE IF NOT EXISTS job_requests (
    id                        INTEGER PRIMARY KEY AUTOINCREMENT,
    customer_name             TEXT NOT NULL,
    customer_email            TEXT NOT NULL,
    customer_mobile           TEXT NOT NULL,
    dealname                  TEXT NOT NULL,
    job_description           TEXT NOT NULL,
    postcode                  TEXT,
    area                      TEXT,
    region                    TEXT,
    budget                    TEXT,
    timing                    TEXT,
    site_visit_availability   TEXT,
    job_size                  TEXT,
    subtype                   TEXT,
    preferred_number_of_quotes INTEGER NOT NULL DEFAULT 3,
    notes                     TEXT,
    created_at                TEXT NOT NULL
);
"""

_PAINTER_COLUMNS = (
    "record_id",
    "company_name",
    "owner_name",
    "ss_profile_url",
    "whatsapp_number",
    "postcode",
    "suburb",
    "area",
    "region",
    "star_rating",
    "jobs_won",
    "number_of_reviews",
    "engagement_rate",
    "rejection_rate",
)

_JOB_COLUMNS = (
    "category",
    "subtype",
    "size",
    "total_price",
    "job_description",
    "job_description_cleaned",
)

_NUMERIC_COLUMNS = {
    "star_rating": float,
    "jobs_won": int,
    "number_of_reviews": int,
    "engagement_rate": float,
    "rejection_rate": float,
    "total_price": float,
}

# Location filter field -> painters column, compared case-insensitively.
_LOCATION_COLUMNS = {
    "postcode": "postcode",
    "suburb": "suburb",
    "area": "area",
    "region": "region",
}

_CLEANED = "lower(coalesce(job_description_cleaned, ''))"
_RAW = "lower(coalesce(job_description, ''))"


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Translate sqlite failures into StoreUnavailable."""
    try:
        yield
    except sqlite3.Error as e:
        logger.warning("Record store failure during %s: %s", action, e)
        msg = f"Record store unavailable during {action}: {e}"
        raise StoreUnavailable(msg) from e


def init_db(path: str | Path) -> sqlite3.Connection:
    """Create the database and tables, returning a connection."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with _store_errors("init_db"):
        conn = sqlite3.connect(str(path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute(_PAINTERS_TABLE)
        conn.execute(_JOBS_TABLE)
        conn.execute(_JOB_REQUESTS_TABLE)
        conn.commit()
    return conn


# ---------------------------------------------------------------------------
# Painters
# ---------------------------------------------------------------------------


def _row_to_painter(row: sqlite3.Row) -> Painter:
    return Painter(
        id=str(row["record_id"]),
        name=row["company_name"],
        owner_name=row["owner_name"] or "",
        profile_url=row["ss_profile_url"] or "",
        whatsapp_number=row["whatsapp_number"] or "",
        postcode=row["postcode"],
        suburb=row["suburb"],
        area=row["area"],
        region=row["region"],
        star_rating=row["star_rating"],
        jobs_won=row["jobs_won"],
        number_of_reviews=row["number_of_reviews"],
        engagement_rate=row["engagement_rate"],
        rejection_rate=row["rejection_rate"],
    )


def insert_painter(conn: sqlite3.Connection, painter: Painter) -> bool:
    """Insert a painter, ignoring if record_id already exists.

    Returns True if a new row was inserted, False if it was a duplicate.
    """
    with _store_errors("insert_painter"):
        try:
            conn.execute(
                f"INSERT INTO painters ({', '.join(_PAINTER_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in _PAINTER_COLUMNS)})",
                (
                    painter.id,
                    painter.name,
                    painter.owner_name,
                    painter.profile_url,
                    painter.whatsapp_number,
                    painter.postcode,
                    painter.suburb,
                    painter.area,
                    painter.region,
                    painter.star_rating,
                    painter.jobs_won,
                    painter.number_of_reviews,
                    painter.engagement_rate,
                    painter.rejection_rate,
                ),
            )
        except sqlite3.IntegrityError:
            return False
        conn.commit()
    return True


def query_painters(conn: sqlite3.Connection, filters: LocationFilters) -> list[Painter]:
    """Return every painter matching all supplied location filters.

    With no filters the whole table is returned. Single bulk read, no paging.
    """
    where: list[str] = []
    params: list[str] = []
    for field, value in filters.active().items():
        where.append(f"lower({_LOCATION_COLUMNS[field]}) = lower(?)")
        params.append(value)

    sql = "SELECT * FROM painters"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY record_id"

    with _store_errors("query_painters"):
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_painter(r) for r in rows]


def get_painter(conn: sqlite3.Connection, record_id: str) -> Painter | None:
    """Fetch a single painter by record_id, or None if absent."""
    with _store_errors("get_painter"):
        row = conn.execute(
            "SELECT * FROM painters WHERE record_id = ?", (record_id,)
        ).fetchone()
    return _row_to_painter(row) if row is not None else None


# ---------------------------------------------------------------------------
# Historical jobs
# ---------------------------------------------------------------------------


def _row_to_job(row: sqlite3.Row) -> HistoricalJob:
    return HistoricalJob(
        id=str(row["id"]),
        category=row["category"],
        subtype=row["subtype"],
        size=row["size"],
        total_price=row["total_price"],
        job_description=row["job_description"] or "",
        job_description_cleaned=row["job_description_cleaned"],
    )


def insert_job(
    conn: sqlite3.Connection,
    *,
    job_description: str,
    category: str | None = None,
    subtype: str | None = None,
    size: str | None = None,
    total_price: float | None = None,
    job_description_cleaned: str | None = None,
) -> int:
    """Record a historical job. Returns the row ID."""
    with _store_errors("insert_job"):
        cursor = conn.execute(
            f"INSERT INTO jobs ({', '.join(_JOB_COLUMNS)}) VALUES (?, ?, ?, ?, ?, ?)",
            (category, subtype, size, total_price, job_description, job_description_cleaned),
        )
        conn.commit()
    return cursor.lastrowid or 0


def get_job(conn: sqlite3.Connection, job_id: str) -> HistoricalJob | None:
    """Fetch a single job by id, or None if absent."""
    with _store_errors("get_job"):
        row = conn.execute("SELECT * FROM jobs WHERE id = ?", (job_id,)).fetchone()
    return _row_to_job(row) if row is not None else None


def browse_jobs(conn: sqlite3.Connection, filters: JobBrowseFilters) -> list[HistoricalJob]:
    """Page through jobs, newest first, with optional equality/price/text filters."""
    where: list[str] = []
    params: list[Any] = []
    for column in ("category", "subtype", "size"):
        value = getattr(filters, column)
        if value:
            where.append(f"{column} = ?")
            params.append(value)
    if filters.min_price is not None:
        where.append("total_price >= ?")
        params.append(filters.min_price)
    if filters.max_price is not None:
        where.append("total_price <= ?")
        params.append(filters.max_price)
    if filters.q:
        where.append("lower(coalesce(job_description_cleaned, job_description)) LIKE ?")
        params.append(f"%{filters.q.lower()}%")

    sql = "SELECT * FROM jobs"
    if where:
        sql += " WHERE " + " AND ".join(where)
    sql += " ORDER BY id DESC LIMIT ? OFFSET ?"
    params.extend([filters.limit, filters.offset])

    with _store_errors("browse_jobs"):
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_job(r) for r in rows]


def query_similar_jobs(
    conn: sqlite3.Connection,
    terms: list[str],
    bias_category: str | None,
    limit: int,
) -> list[HistoricalJob]:
    """Return up to `limit` jobs whose descriptions mention any search term.

    Ordered by a 3-tier similarity (cleaned-description match, raw-description
    match, no match), then by the bias category. Jobs in the bias category
    are included even without a term match; other categories are never
    excluded.
    """
    if not terms and not bias_category:
        return []

    patterns = [f"%{t.lower()}%" for t in terms]
    cleaned_match = " OR ".join(f"{_CLEANED} LIKE ?" for _ in patterns) or "0"
    raw_match = " OR ".join(f"{_RAW} LIKE ?" for _ in patterns) or "0"
    bias_match = "lower(coalesce(category, '')) = lower(?)" if bias_category else "0"

    sql = f"""
        SELECT *,
            CASE WHEN ({cleaned_match}) THEN 2
                 WHEN ({raw_match}) THEN 1
                 ELSE 0 END AS tier,
            CASE WHEN {bias_match} THEN 1 ELSE 0 END AS bias
        FROM jobs
        WHERE ({cleaned_match}) OR ({raw_match}) OR {bias_match}
        ORDER BY tier DESC, bias DESC, id DESC
        LIMIT ?
    """
    bias_params = [bias_category] if bias_category else []
    params: list[Any] = [
        *patterns, *patterns, *bias_params,
        *patterns, *patterns, *bias_params,
        limit,
    ]

    with _store_errors("query_similar_jobs"):
        rows = conn.execute(sql, params).fetchall()
    return [_row_to_job(r) for r in rows]


def query_random_jobs(conn: sqlite3.Connection, limit: int) -> list[HistoricalJob]:
    """Return an unfiltered random sample of jobs."""
    with _store_errors("query_random_jobs"):
        rows = conn.execute(
            "SELECT * FROM jobs ORDER BY RANDOM() LIMIT ?", (limit,)
        ).fetchall()
    return [_row_to_job(r) for r in rows]


# ---------------------------------------------------------------------------
# Job requests
# ---------------------------------------------------------------------------


def insert_job_request(conn: sqlite3.Connection, request: JobRequest) -> int:
    """Record a customer quote request. Returns the row ID."""
    data = request.model_dump()
    data["created_at"] = request.created_at.isoformat()
    columns = list(data)
    with _store_errors("insert_job_request"):
        cursor = conn.execute(
            f"INSERT INTO job_requests ({', '.join(columns)}) "
            f"VALUES ({', '.join('?' for _ in columns)})",
            [data[c] for c in columns],
        )
        conn.commit()
    return cursor.lastrowid or 0


# ---------------------------------------------------------------------------
# Bulk import
# ---------------------------------------------------------------------------


def _coerce(column: str, value: str | None) -> Any:
    if value is None:
        return None
    value = value.strip()
    if column in _NUMERIC_COLUMNS:
        if not value:
            return None
        try:
            return _NUMERIC_COLUMNS[column](float(value))
        except (ValueError, OverflowError):
            return None
    return value or None


def import_csv(conn: sqlite3.Connection, table: str, path: str | Path) -> int:
    """Load painters or jobs from a CSV file with matching column headers.

    Unknown columns are ignored. Returns the number of rows written.
    """
    if table == "painters":
        known = _PAINTER_COLUMNS
    elif table == "jobs":
        known = _JOB_COLUMNS
    else:
        msg = f"Unknown table '{table}'. Expected 'painters' or 'jobs'"
        raise ValueError(msg)

    path = Path(path)
    if not path.exists():
        msg = f"CSV file not found: {path}"
        raise FileNotFoundError(msg)

    written = 0
    with path.open(newline="", encoding="utf-8") as fh, _store_errors("import_csv"):
        for record in csv.DictReader(fh):
            row = {c: _coerce(c, record.get(c)) for c in known if c in record}
            if table == "painters" and not (row.get("record_id") and row.get("company_name")):
                logger.debug("Skipping painter row without record_id/company_name")
                continue
            if table == "jobs":
                row["job_description"] = row.get("job_description") or ""
            columns = list(row)
            cursor = conn.execute(
                f"INSERT OR IGNORE INTO {table} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                [row[c] for c in columns],
            )
            written += cursor.rowcount
        conn.commit()
    logger.info("Imported %d rows into %s from %s", written, table, path)
    return written
