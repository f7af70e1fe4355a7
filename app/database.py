# app/database.py
import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, create_engine, Session

from app.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Hosted Postgres connection
#
# - sslmode          : verify-full when DB TLS verification is on,
#                      require otherwise
# - pool_size        : small fixed pool (DB_POOL_SIZE, default 5)
# - max_overflow=0   : do not open extra connections beyond the pool
# - pool_pre_ping    : validate connections before using them
# - pool_timeout=10  : fail a request instead of waiting forever for a slot
#
# Hosted Postgres providers cap client connections, so every
# process keeps its footprint fixed.
# ---------------------------------------------------------


def normalize_db_url(raw_url: str, ssl_verify: bool) -> str:
    """
    Turn a provider connection string into a SQLAlchemy URL.

    - `postgres://` is rewritten to `postgresql://`
    - sslmode is appended if it is not already present
    """
    db_url = raw_url
    if db_url.startswith("postgres://"):
        db_url = "postgresql://" + db_url[len("postgres://"):]

    if not db_url.startswith("postgresql"):
        return db_url

    if "sslmode=" not in db_url:
        sslmode = "verify-full" if ssl_verify else "require"
        sep = "&" if "?" in db_url else "?"
        db_url = f"{db_url}{sep}sslmode={sslmode}"
    return db_url


def build_engine(settings: Settings) -> Engine:
    db_url = normalize_db_url(settings.DATABASE_URL, settings.db_ssl_verify)

    kwargs: dict = {"echo": False, "pool_pre_ping": True}
    if make_url(db_url).get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_timeout=10,
            pool_recycle=300,
        )

    new_engine = create_engine(db_url, **kwargs)

    @event.listens_for(new_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        logger.info("✅ Connected to database")

    return new_engine


engine = build_engine(get_settings())


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    The session only checks a connection out of the pool on its first
    query and returns it on commit, so services must commit before any
    outbound call (upload, notification).
    """
    with Session(engine) as session:
        yield session
