# backend/database.py
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv

from config import settings
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)

load_dotenv()

# 1. Database URL from the environment (.env / hosting) or the local SQLite default
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Hosted Postgres providers still hand out postgres://, SQLAlchemy needs postgresql://
if SQLALCHEMY_DATABASE_URL and SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Driver specific options
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False} # SQLite only
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args
)

# SQLite ignores ON DELETE rules unless foreign keys are switched on per connection
if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_db():
    # Register every model on Base.metadata before creating tables
    import models  # noqa: F401
    Base.metadata.create_all(bind=engine)

def commit(db):
    """Commit the session; on failure roll back and raise PersistenceError."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database commit failed: {e}")
        raise PersistenceError("The database rejected the change, nothing was saved") from e
