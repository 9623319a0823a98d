from logging.config import fileConfig
from sqlalchemy import pool
from alembic import context
from app.database import Base, build_engine
from app.config import get_settings
from app.models import HeroImage, QRCode  # noqa: F401 - load models

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)
database_url = get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)
target_metadata = Base.metadata

# SQLite cannot ALTER most column/constraint changes in place
render_as_batch = database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit SQL for the hero_images / qr_codes schema without a connection."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=render_as_batch,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations on a connection (passed in by tests, or built from Settings)."""
    connectable = config.attributes.get("connection", None)
    if connectable is None:
        if database_url.startswith("sqlite"):
            connectable = build_engine(database_url)
        else:
            from sqlalchemy import create_engine
            connectable = create_engine(database_url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=render_as_batch,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
