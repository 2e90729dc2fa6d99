"""
AQL Job Desk - API Routers
Version: 1.0.0
"""
