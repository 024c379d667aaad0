from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from onward_app.config.settings import settings

SQLALCHEMY_DATABASE_URL = settings.db_connection_string

_connect_args = {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
