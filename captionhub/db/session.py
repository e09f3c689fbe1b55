# captionhub/db/session.py

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from captionhub.core.config import settings

database_uri = settings.SQLALCHEMY_DATABASE_URI or "sqlite:///./captionhub.db"

engine = create_engine(
    database_uri,
    pool_pre_ping=True,
    connect_args={"check_same_thread": False} if database_uri.startswith("sqlite") else {}
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Dependency to get DB session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
