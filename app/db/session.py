from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.config import settings

# --- Base de Datos de Documentos y Análisis ---
# PostgreSQL en producción; SQLite solo para desarrollo local
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def get_db():
    """
    Dependency de FastAPI: una sesión por petición, cerrada al terminar.
    Los servicios hacen commit explícito; no hay transacción que abarque varios pasos.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
