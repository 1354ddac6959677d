# app/core/config.py
import os
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# --- Carga de Variables de Entorno Globales ---
dotenv_path = os.path.join(os.path.dirname(__file__), '..', '..', '.env')
load_dotenv(dotenv_path=dotenv_path, override=False)

class GlobalSettings(BaseSettings):
    """Configuraciones globales de la aplicación."""
    DATABASE_URL: str
    OPENAI_API_KEY: str
    CLOUDINARY_CLOUD_NAME: str
    CLOUDINARY_API_KEY: str
    CLOUDINARY_API_SECRET: str
    SECRET_KEY: str # Clave para verificar los tokens de acceso (HS256)

    # --- Variables con valores por defecto ---
    # None usa el endpoint oficial de OpenAI; cualquier gateway compatible sirve
    AI_GATEWAY_BASE_URL: str | None = None
    EXTRACTION_MODEL: str = "gpt-4o"
    ANALYSIS_MODEL: str = "gpt-4o"
    EXTRACTION_MAX_TOKENS: int = 32000
    ANALYSIS_TEMPERATURE: float = 0.3

    # Límite de caracteres del texto extraído que se envía al análisis
    ANALYSIS_TEXT_LIMIT: int = 15000
    # Número de items de la base de conocimiento usados como contexto
    KB_CONTEXT_LIMIT: int = 20

    STORAGE_FOLDER: str = "documents"
    JWT_AUDIENCE: str = "authenticated"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

# --- Instancia única de las configuraciones ---

@lru_cache
def get_settings() -> GlobalSettings:
    return GlobalSettings()

settings = get_settings()
