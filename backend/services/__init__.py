"""
AQL Job Desk - Backend Services
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Draft editor, finalization coordinator, staff ranker
v1.0.0 (2026-09-28): Initial services module
"""
