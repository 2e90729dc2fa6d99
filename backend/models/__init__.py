"""
AQL Job Desk - Database Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): jobs.source_draft_id UNIQUE (no double submission);
                      job_drafts.job_number_provisional; personnel ranking columns
v1.0.0 (2026-09-28): Initial schema: locations, personnel, sequence_counters,
                      job_drafts, jobs
"""

from .location import Location, LocationCreate
from .personnel import PersonnelProfile, StaffRole, ExperienceTier, RankingMode, RankedCandidate
from .draft import JobForm, PartEntry, JobDraft, DraftSave, DraftSummary
from .job import JobRecord, JobStatus, CustomerInfo, ALLOWED_TRANSITIONS, can_transition
from .identity import UserSession, UserRole

from typing import Optional
import aiosqlite
import logging

logger = logging.getLogger(__name__)


async def _add_column_if_missing(db, table, column, col_type, default=None):
    """Idempotent ALTER TABLE ADD COLUMN"""
    cursor = await db.execute(f"PRAGMA table_info({table})")
    existing = {row[1] for row in await cursor.fetchall()}
    if column not in existing:
        default_clause = f" DEFAULT {default}" if default is not None else ""
        await db.execute(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}{default_clause}")


async def init_db(db_path: Optional[str] = None):
    """Initialize SQLite database with the job lifecycle schema"""
    from database import get_db_path
    db_path = get_db_path(db_path)
    logger.info(f"Initializing database: {db_path}")

    async with aiosqlite.connect(db_path) as db:
        await db.execute("PRAGMA journal_mode=WAL")
        await db.execute("PRAGMA foreign_keys=ON")

        # ================================================================
        # LOCATIONS (reference data)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS locations (
                id TEXT PRIMARY KEY,
                display_name TEXT NOT NULL,
                facility_code INTEGER NOT NULL CHECK (facility_code >= 0),
                address TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # ================================================================
        # PERSONNEL (inspectors + supervisors)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS personnel (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT,
                role TEXT NOT NULL CHECK (role IN ('inspector', 'supervisor')),
                location_id TEXT REFERENCES locations(id),
                is_available BOOLEAN DEFAULT 1,
                certified BOOLEAN DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await _add_column_if_missing(db, "personnel", "experience", "TEXT")
        await _add_column_if_missing(db, "personnel", "previous_jobs", "INTEGER", 0)
        await _add_column_if_missing(db, "personnel", "match_score", "INTEGER", 0)

        # ================================================================
        # SEQUENCE COUNTERS (one per facility, monotonic)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS sequence_counters (
                facility_code INTEGER PRIMARY KEY,
                last_issued INTEGER NOT NULL DEFAULT 0 CHECK (last_issued >= 0),
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # ================================================================
        # JOB DRAFTS
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS job_drafts (
                draft_id TEXT PRIMARY KEY,
                owner_id TEXT NOT NULL,
                title TEXT NOT NULL DEFAULT 'New Job Draft',
                location_id TEXT,
                current_tab TEXT NOT NULL DEFAULT 'basic',
                form_data TEXT NOT NULL DEFAULT '{}',
                job_number TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await _add_column_if_missing(db, "job_drafts", "job_number_provisional", "BOOLEAN", 0)

        # ================================================================
        # JOBS (submitted, immutable identity)
        # ================================================================
        await db.execute("""
            CREATE TABLE IF NOT EXISTS jobs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                job_number TEXT NOT NULL UNIQUE,
                facility_code INTEGER NOT NULL,
                sequence INTEGER NOT NULL,
                revision INTEGER NOT NULL DEFAULT 1,
                title TEXT,
                location_id TEXT NOT NULL REFERENCES locations(id),
                location_name TEXT,
                customer_name TEXT NOT NULL,
                customer_data TEXT,
                status TEXT NOT NULL DEFAULT 'submitted',
                inspector_ids TEXT NOT NULL DEFAULT '[]',
                supervisor_ids TEXT NOT NULL DEFAULT '[]',
                form_data TEXT NOT NULL DEFAULT '{}',
                source_draft_id TEXT UNIQUE,
                created_by TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,

                UNIQUE(facility_code, sequence, revision)
            )
        """)
        await _add_column_if_missing(db, "jobs", "primary_inspector_id", "TEXT")

        # ================================================================
        # INDEXES
        # ================================================================
        await db.execute("CREATE INDEX IF NOT EXISTS idx_personnel_location ON personnel(location_id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_personnel_role ON personnel(role)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_drafts_owner ON job_drafts(owner_id, updated_at)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_jobs_location ON jobs(location_id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_jobs_fac_seq ON jobs(facility_code, sequence)")

        await db.commit()

    logger.info("Database initialized successfully (job desk schema v1.1.0)")


__all__ = [
    'Location', 'LocationCreate',
    'PersonnelProfile', 'StaffRole', 'ExperienceTier', 'RankingMode', 'RankedCandidate',
    'JobForm', 'PartEntry', 'JobDraft', 'DraftSave', 'DraftSummary',
    'JobRecord', 'JobStatus', 'CustomerInfo', 'ALLOWED_TRANSITIONS', 'can_transition',
    'UserSession', 'UserRole',
    'init_db'
]
