# gridengine/core/database.py
"""Database configuration, session generator and catalog seeding."""

import logging

from sqlalchemy import create_engine, select
from sqlalchemy.orm import declarative_base, sessionmaker

from gridengine.core.config import get_settings

logger = logging.getLogger(__name__)

DATABASE_URL = get_settings().database_url

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Get a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ===== TABLE CREATION =====


def import_models() -> None:
    """Import every model module so the tables register with Base."""
    from gridengine.catalog import models as catalog_models  # noqa: F401
    from gridengine.filters import models as filter_models  # noqa: F401
    from gridengine.views import models as view_models  # noqa: F401
    from gridengine.entities import models as entity_models  # noqa: F401


def create_all_tables(bind=None) -> None:
    import_models()
    Base.metadata.create_all(bind=bind or engine)


def drop_all_tables(bind=None) -> None:
    import_models()
    Base.metadata.drop_all(bind=bind or engine)


# ===== SEEDING =====


def seed_field_catalog(session) -> int:
    """Insert every registered field that is not yet stored. Returns the number added."""
    from gridengine.catalog.models import DisplayField
    from gridengine.catalog.registry import iter_field_seeds

    existing = {
        (row.module, row.field_name)
        for row in session.execute(select(DisplayField.module, DisplayField.field_name))
    }
    added = 0
    for seed in iter_field_seeds():
        if (seed.module, seed.field_name) in existing:
            continue
        session.add(
            DisplayField(
                module=seed.module,
                field_name=seed.field_name,
                label=seed.label,
                field_type=seed.field_type.value,
                display_order=seed.display_order,
            )
        )
        added += 1
    session.commit()
    return added


def seed_preset_views(session) -> int:
    """Store each module's preset views unless a view of that name exists."""
    from gridengine.catalog.registry import iter_preset_views
    from gridengine.views.models import View, ViewField

    existing = set(session.execute(select(View.module, View.view_name)).tuples())
    added = 0
    for module, view_name, field_names in iter_preset_views():
        if (module, view_name) in existing:
            continue
        session.add(
            View(
                module=module,
                view_name=view_name,
                fields=[
                    ViewField(field_name=name, display_order=position)
                    for position, name in enumerate(field_names, start=1)
                ],
            )
        )
        added += 1
    session.commit()
    return added


def initialize_database(force_recreate: bool = False, seed_sample_data: bool = False) -> None:
    """Create tables, seed the field catalog and optionally sample entities."""
    if force_recreate:
        logger.warning("Force recreate mode: dropping existing tables")
        drop_all_tables()

    create_all_tables()

    session = SessionLocal()
    try:
        added = seed_field_catalog(session)
        logger.info(f"Field catalog seeded with {added} new fields")
        added = seed_preset_views(session)
        logger.info(f"Seeded {added} preset views")
        if seed_sample_data:
            from gridengine.entities.sample_data import seed_sample_entities

            seed_sample_entities(session)
    except Exception:
        session.rollback()
        logger.exception("Database initialization failed")
        raise
    finally:
        session.close()


def init_db() -> None:
    """Initialize the database using the configured settings."""
    initialize_database(seed_sample_data=get_settings().seed_sample_data)
