"""Autorest - persistence-backed HTTP resource service.

Autorest stores relational entities through SQLAlchemy and exposes them as
HAL-formatted CRUD endpoints over FastAPI.

Architecture Overview:
- **API Layer**: FastAPI routes, resource router factory and middleware
- **Core Layer**: Configuration, logging, errors, metrics and tracing
- **Domain Layer**: Entities and their repositories (cats, cars)
- **Infrastructure Layer**: Async engine, sessions, generic repository and
  Alembic migrations

The database backend is chosen by the active profile: an embedded SQLite
database for development and tests, PostgreSQL or MariaDB for production.
Pending migrations are applied at startup before any traffic is served.
"""
