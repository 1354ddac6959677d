# app/db/crud.py
from datetime import datetime
from sqlalchemy.orm import Session, joinedload
from app.models.document import Document
from app.models.analysis import DocumentAnalysis
from app.schemas.document import DocumentStatus
from app.schemas.llm_responses import AnalysisPayload
from typing import List, Optional

# --- Documentos ---

def get_document(db: Session, document_id: str, user_id: str) -> Optional[Document]:
    """Obtiene un documento por su ID, dentro de los documentos del usuario."""
    return db.query(Document).filter(Document.id == document_id, Document.user_id == user_id).first()

def get_documents(db: Session, user_id: str) -> List[Document]:
    """Todos los documentos del usuario, del más reciente al más antiguo. Sin paginación."""
    return (
        db.query(Document)
        .filter(Document.user_id == user_id)
        .order_by(Document.created_at.desc())
        .all()
    )

def create_document(db: Session, document_data: dict, user_id: str) -> Document:
    """Crea un nuevo documento asociado al usuario."""
    db_document = Document(**document_data, user_id=user_id)
    db.add(db_document)
    db.commit()
    db.refresh(db_document)
    return db_document

def update_document_status(db: Session, document_id: str, status: DocumentStatus) -> Optional[Document]:
    """Actualiza el estado de un documento."""
    db_document = db.query(Document).filter(Document.id == document_id).first()
    if db_document:
        db_document.status = status.value
        db.commit()
        db.refresh(db_document)
    return db_document

def update_document_text(db: Session, document_id: str, extracted_text: str) -> Optional[Document]:
    """Guarda el texto extraído y marca el documento como analizado."""
    db_document = db.query(Document).filter(Document.id == document_id).first()
    if db_document:
        db_document.extracted_text = extracted_text
        db_document.status = DocumentStatus.analyzed.value
        db.commit()
        db.refresh(db_document)
    return db_document

def get_document_file_path(db: Session, document_id: str, user_id: str) -> Optional[str]:
    """Ruta del objeto almacenado; None si el documento no existe o no tiene ruta."""
    row = db.query(Document.file_path).filter(Document.id == document_id, Document.user_id == user_id).first()
    return row.file_path if row else None

def get_analysis_document_id(db: Session, analysis_id: str, user_id: str) -> Optional[str]:
    """Documento padre de un análisis del usuario; None si el análisis no existe."""
    row = (
        db.query(DocumentAnalysis.document_id)
        .filter(DocumentAnalysis.id == analysis_id, DocumentAnalysis.user_id == user_id)
        .first()
    )
    return row.document_id if row else None

def delete_document(db: Session, document_id: str, user_id: str) -> bool:
    """
    Elimina un documento y, en cascada, sus análisis.
    No toca el archivo almacenado.
    """
    db_document = get_document(db, document_id, user_id)
    if db_document:
        db.delete(db_document)
        db.commit()
        return True
    return False

# --- Análisis ---

def create_analysis(db: Session, document_id: str, user_id: str, payload: AnalysisPayload) -> DocumentAnalysis:
    """Inserta el resultado del análisis de un documento."""
    db_analysis = DocumentAnalysis(document_id=document_id, user_id=user_id, **payload.to_columns())
    db.add(db_analysis)
    db.commit()
    db.refresh(db_analysis)
    return db_analysis

def get_analysis(db: Session, analysis_id: str, user_id: str) -> Optional[DocumentAnalysis]:
    return (
        db.query(DocumentAnalysis)
        .options(joinedload(DocumentAnalysis.document))
        .filter(DocumentAnalysis.id == analysis_id, DocumentAnalysis.user_id == user_id)
        .first()
    )

def get_analyses(db: Session, user_id: str) -> List[DocumentAnalysis]:
    """Análisis del usuario con su documento padre, del más reciente al más antiguo."""
    return (
        db.query(DocumentAnalysis)
        .options(joinedload(DocumentAnalysis.document))
        .filter(DocumentAnalysis.user_id == user_id)
        .order_by(DocumentAnalysis.created_at.desc())
        .all()
    )

def count_analyses_for_document(db: Session, document_id: str) -> int:
    return db.query(DocumentAnalysis).filter(DocumentAnalysis.document_id == document_id).count()

def delete_analysis(db: Session, analysis_id: str, user_id: str) -> int:
    """Elimina un análisis. Devuelve el número de filas borradas (0 no es un error)."""
    deleted = (
        db.query(DocumentAnalysis)
        .filter(DocumentAnalysis.id == analysis_id, DocumentAnalysis.user_id == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted

def sign_analysis(db: Session, db_analysis: DocumentAnalysis, signature_data: str, signed_at: datetime) -> DocumentAnalysis:
    """Registra la firma. La comprobación de firma previa la hace el servicio."""
    db_analysis.signature_data = signature_data
    db_analysis.signed_at = signed_at
    db.commit()
    db.refresh(db_analysis)
    return db_analysis
