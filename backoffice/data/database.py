# backoffice/data/database.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from backoffice.utils.settings import DATABASE_URL

Base = declarative_base()

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    # import modeli, zeby zarejestrowaly sie w Base.metadata
    import backoffice.data.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
