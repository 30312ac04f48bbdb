from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from inbound.app.config import DATABASE_URL, DB_STATEMENT_TIMEOUT_MS

connect_args = {}
if DATABASE_URL.startswith("postgresql") and DB_STATEMENT_TIMEOUT_MS > 0:
    connect_args["options"] = f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"

engine = create_engine(DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
