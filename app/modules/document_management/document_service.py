# app/modules/document_management/document_service.py
import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import AlreadySignedError, NotFoundError
from app.core.security import UserContext
from app.db import crud
from app.models.analysis import DocumentAnalysis
from app.models.document import Document
from app.schemas.analysis import SignatureData, SignatureRequest

logger = logging.getLogger(__name__)


def list_documents(db: Session, user: UserContext) -> List[Document]:
    return crud.get_documents(db, user.id)


def list_analyses(db: Session, user: UserContext) -> List[DocumentAnalysis]:
    return crud.get_analyses(db, user.id)


def get_document_or_404(db: Session, user: UserContext, document_id: str) -> Document:
    db_document = crud.get_document(db, document_id, user.id)
    if not db_document:
        raise NotFoundError(f"Document {document_id} not found")
    return db_document


def get_analysis_or_404(db: Session, user: UserContext, analysis_id: str) -> DocumentAnalysis:
    db_analysis = crud.get_analysis(db, analysis_id, user.id)
    if not db_analysis:
        raise NotFoundError(f"Analysis {analysis_id} not found")
    return db_analysis


def delete_document(db: Session, user: UserContext, document_id: str) -> bool:
    """
    Borrado simple: elimina el registro y sus análisis en cascada.
    El archivo almacenado NO se elimina; el borrado completo es el del triturador.
    """
    logger.info(f"Eliminando el documento {document_id} del usuario {user.id} (sin borrar el archivo)")
    deleted = crud.delete_document(db, document_id, user.id)
    if not deleted:
        logger.warning(f"Documento con ID {document_id} no encontrado.")
    return deleted


def sign_analysis(db: Session, user: UserContext, analysis_id: str, request: SignatureRequest) -> DocumentAnalysis:
    """
    Adjunta la firma al análisis. Solo se puede firmar una vez: si ya existe
    signed_at se rechaza, sea cual sea la entrada.
    """
    db_analysis = get_analysis_or_404(db, user, analysis_id)
    if db_analysis.signed_at is not None:
        raise AlreadySignedError(f"Analysis {analysis_id} is already signed")

    now = datetime.now(timezone.utc)
    signature = SignatureData(signature=request.signature_image, name=request.name, timestamp=now)
    db_analysis = crud.sign_analysis(db, db_analysis, signature_data=signature.to_json(), signed_at=now)
    logger.info(f"Análisis {analysis_id} firmado por '{request.name}'")
    return db_analysis
