# app/db/base_class.py
from sqlalchemy import JSON
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# JSONB en PostgreSQL, JSON genérico en el resto (p.ej. SQLite en los tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")
