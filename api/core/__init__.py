"""
Building blocks shared by every feature package: environment settings,
the asyncpg-backed `Database`, logging setup and the JSON error envelope.

Feature SQL lives with its feature (`admin/`, `auth/`, `catalog/`).
"""
