"""
AQL Job Desk - Database Seed Data
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Personnel ranking inputs (experience, previous jobs,
                      match score)
v1.0.0 (2026-09-28): Initial seed data: 3 locations, 8 inspectors/supervisors
"""

import logging

log = logging.getLogger(__name__)


# =============================================================================
# LOCATIONS (3 records)
# =============================================================================

SEED_LOCATIONS = [
    {"id": "loc-lis", "display_name": "Lisbon Hangar 6", "facility_code": 16,
     "address": "Aeroporto Humberto Delgado, Hangar 6, 1700-111 Lisboa"},
    {"id": "loc-opo", "display_name": "Porto Line Station", "facility_code": 21,
     "address": "Aeroporto Francisco Sa Carneiro, 4470-558 Maia"},
    {"id": "loc-fao", "display_name": "Faro Component Shop", "facility_code": 7,
     "address": "Aeroporto de Faro, 8006-901 Faro"},
]


# =============================================================================
# PERSONNEL (8 records)
# =============================================================================

SEED_PERSONNEL = [
    {"id": "insp-001", "name": "Ana Ferreira", "email": "ana.ferreira@aql.pt",
     "role": "inspector", "location_id": "loc-lis", "is_available": True,
     "certified": True, "experience": "senior", "previous_jobs": 212, "match_score": 91},
    {"id": "insp-002", "name": "Bruno Costa", "email": "bruno.costa@aql.pt",
     "role": "inspector", "location_id": "loc-lis", "is_available": True,
     "certified": False, "experience": "junior", "previous_jobs": 14, "match_score": 62},
    {"id": "insp-003", "name": "Carla Mendes", "email": "carla.mendes@aql.pt",
     "role": "inspector", "location_id": "loc-opo", "is_available": True,
     "certified": True, "experience": "mid", "previous_jobs": 88, "match_score": 77},
    {"id": "insp-004", "name": "Diogo Lopes", "email": "diogo.lopes@aql.pt",
     "role": "inspector", "location_id": "loc-opo", "is_available": False,
     "certified": True, "experience": "senior", "previous_jobs": 301, "match_score": 95},
    {"id": "insp-005", "name": "Eva Rocha", "email": "eva.rocha@aql.pt",
     "role": "inspector", "location_id": "loc-fao", "is_available": True,
     "certified": False, "experience": "mid", "previous_jobs": 45, "match_score": 70},
    {"id": "sup-001", "name": "Filipe Nunes", "email": "filipe.nunes@aql.pt",
     "role": "supervisor", "location_id": "loc-lis", "is_available": True,
     "certified": True, "experience": "senior", "previous_jobs": 540, "match_score": 88},
    {"id": "sup-002", "name": "Graca Pinto", "email": "graca.pinto@aql.pt",
     "role": "supervisor", "location_id": "loc-opo", "is_available": True,
     "certified": True, "experience": "mid", "previous_jobs": 120, "match_score": 73},
    {"id": "sup-003", "name": "Helder Sousa", "email": "helder.sousa@aql.pt",
     "role": "supervisor", "location_id": "loc-fao", "is_available": False,
     "certified": False, "experience": "junior", "previous_jobs": 9, "match_score": 40},
]


async def seed_if_empty(db):
    """Populate the database with seed data if the tables are empty.

    Inserts in FK-dependency order: locations -> personnel
    """

    async def _count(table: str) -> int:
        row = await db.execute(f"SELECT COUNT(*) FROM {table}")
        result = await row.fetchone()
        return result[0] if result else 0

    # ------------------------------------------------------------------
    # 1. LOCATIONS
    # ------------------------------------------------------------------
    if await _count("locations") == 0:
        log.info("Seeding locations (%d records)...", len(SEED_LOCATIONS))
        for loc in SEED_LOCATIONS:
            await db.execute(
                """INSERT INTO locations (id, display_name, facility_code, address)
                   VALUES (?, ?, ?, ?)""",
                (loc["id"], loc["display_name"], loc["facility_code"], loc["address"]),
            )

    # ------------------------------------------------------------------
    # 2. PERSONNEL
    # ------------------------------------------------------------------
    if await _count("personnel") == 0:
        log.info("Seeding personnel (%d records)...", len(SEED_PERSONNEL))
        for p in SEED_PERSONNEL:
            await db.execute(
                """INSERT INTO personnel
                   (id, name, email, role, location_id, is_available, certified,
                    experience, previous_jobs, match_score)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (p["id"], p["name"], p["email"], p["role"], p["location_id"],
                 p["is_available"], p["certified"], p["experience"],
                 p["previous_jobs"], p["match_score"]),
            )

    await db.commit()
    log.info("Database seeding complete (v1.1.0).")
