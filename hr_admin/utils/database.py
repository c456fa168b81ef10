from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from hr_admin.core.config import DATABASE_URL

# ---------------------
# SQLAlchemy engine / session / Base
# ---------------------
if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        future=True,
    )
else:
    engine = create_engine(
        DATABASE_URL,
        echo=False,
        pool_pre_ping=True,  # drops dead connections automatically
        pool_size=5,
        max_overflow=10,
        future=True,
    )

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
