from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from hvacdesk.core.config import settings


def _set_sqlite_pragmas(dbapi_conn, connection_record):
	cursor = dbapi_conn.cursor()
	cursor.execute("PRAGMA foreign_keys=ON")
	cursor.close()


def get_engine(url: str | None = None):
	url = url or settings.DATABASE_URL
	if url.startswith("sqlite"):
		engine = create_engine(url, connect_args={"check_same_thread": False})
		event.listen(engine, "connect", _set_sqlite_pragmas)
		return engine
	return create_engine(url, pool_pre_ping=True)


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
