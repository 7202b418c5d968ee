from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker, declarative_base

from app import config

engine = create_engine(config.DATABASE_URL, pool_pre_ping=True)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def verify_schema(bind=None) -> None:
    """
    Confere se as tabelas do serviço já existem.

    O schema é provisionado pelas migrations do Alembic; o serviço
    não cria tabelas sob demanda e falha na inicialização se faltar alguma.
    """
    bind = bind or engine
    existing = set(inspect(bind).get_table_names())
    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        raise RuntimeError(
            f"Schema incompleto, tabelas ausentes: {', '.join(missing)}. "
            "Execute 'alembic upgrade head' antes de iniciar o serviço."
        )
