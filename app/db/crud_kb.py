# app/db/crud_kb.py
from typing import List
from sqlalchemy.orm import Session, joinedload
from app.models.knowledge_base import KBCategory, KBItem
from app.schemas.knowledge_base import KBCategoryCreate, KBItemCreate

def get_category_by_name(db: Session, name: str) -> KBCategory | None:
    return db.query(KBCategory).filter(KBCategory.name == name).first()

def create_category(db: Session, category: KBCategoryCreate) -> KBCategory:
    """Crea una categoría de la base de conocimiento."""
    db_category = KBCategory(name=category.name)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category

def create_kb_item(db: Session, item: KBItemCreate) -> KBItem:
    """Crea un item de la base de conocimiento."""
    db_item = KBItem(title=item.title, content=item.content, category_id=item.category_id)
    db.add(db_item)
    db.commit()
    db.refresh(db_item)
    return db_item

def get_kb_items(db: Session, limit: int = 20) -> List[KBItem]:
    """Recupera los items de la base de conocimiento con su categoría."""
    return (
        db.query(KBItem)
        .options(joinedload(KBItem.category))
        .order_by(KBItem.id.asc())
        .limit(limit)
        .all()
    )

def build_kb_context(db: Session, limit: int = 20) -> str:
    """
    Texto de contexto para el análisis: una entrada por item con el formato
    '[Categoría] Título: Contenido'. Los items sin categoría usan 'General'.
    """
    items = get_kb_items(db, limit=limit)
    return "\n\n".join(
        f"[{item.category.name if item.category else 'General'}] {item.title}: {item.content}"
        for item in items
    )
