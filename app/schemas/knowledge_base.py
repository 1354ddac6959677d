# app/schemas/knowledge_base.py
from datetime import datetime
from pydantic import BaseModel, Field

class KBCategoryCreate(BaseModel):
    """Schema usado para crear una categoría de la base de conocimiento."""
    name: str = Field(..., description="Nombre de la categoría (e.g., 'London Plan', 'BREEAM').")

class KBCategory(KBCategoryCreate):
    id: int

    model_config = {
        "from_attributes": True
    }

class KBItemCreate(BaseModel):
    """Schema usado para crear un item de la base de conocimiento."""
    title: str = Field(..., description="Título corto de la política o norma.")
    content: str = Field(..., description="Texto que se inyecta como contexto en el análisis.")
    category_id: int | None = Field(None, description="Categoría opcional; sin ella se muestra como 'General'.")

class KBItem(KBItemCreate):
    id: int
    created_at: datetime

    model_config = {
        "from_attributes": True
    }
