from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker
from supabase import create_client, Client
import os
from dotenv import load_dotenv

load_dotenv()

# Database URLs
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./volunteerhub.db")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")


def configure_sqlite(engine):
    """Make every SQLite transaction take the write lock when it begins.

    SQLite has no SELECT ... FOR UPDATE and pysqlite defers BEGIN until the
    first write; with BEGIN IMMEDIATE a second writer waits at its first
    read until the holder commits or rolls back.
    """

    @event.listens_for(engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_db_engine(database_url: str):
    if database_url.startswith("sqlite"):
        return configure_sqlite(
            create_engine(
                database_url, connect_args={"check_same_thread": False}
            )
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_recycle=300,  # Recycle connections every 5 minutes
    )


engine = create_db_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Supabase client setup (token verification only)
supabase: Client = None

if SUPABASE_URL and SUPABASE_ANON_KEY:
    supabase = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_supabase() -> Client:
    """Get Supabase client for token verification"""
    if not supabase:
        raise RuntimeError(
            "Supabase client not initialized. Check your environment variables."
        )
    return supabase


def init_db():
    """Initialize database tables"""
    # Models must be imported so they register with the metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def check_db_connection() -> dict:
    """Check database connectivity"""
    status = {"sqlalchemy": False, "supabase": supabase is not None}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        status["sqlalchemy"] = True
    except Exception:
        status["sqlalchemy"] = False

    return status
