# app/main.py
import logging
from typing import List

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, Response, UploadFile
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

# --- Core Imports ---
from app.core.config import settings
from app.core.exceptions import (
    AlreadySignedError, ExportUnavailableError, FunctionError, InvalidFileTypeError,
    NotFoundError, ShredError, ShredNotConfirmedError, UploadError
)
from app.core.security import UserContext, get_current_user
from app.db.session import get_db, engine
from app.db.base import Base

# --- Service and CRUD Imports ---
from app.db.crud_kb import create_category, create_kb_item, get_category_by_name, get_kb_items
from app.modules.data_ingestion.functions_client import LocalFunctionsClient
from app.modules.data_ingestion.ingestion_service import UploadOrchestrator, UploadedFile
from app.modules.document_analysis.analyzer import analyze_document
from app.modules.document_management import document_service
from app.modules.document_management.shredder import DocumentShredder
from app.modules.document_processing.text_extractor import extract_pdf_text
from app.modules.export.exporter import ExportFormat, export_analysis
from app.modules.storage.object_store import get_object_store

# --- Schema Imports ---
from app.schemas.analysis import AnalysisResponse, ShredRequest, ShredResponse, SignatureRequest
from app.schemas.document import DocumentDetailResponse, DocumentResponse, UploadResponse
from app.schemas.functions import (
    AnalyzeDocumentRequest, AnalyzeDocumentResponse, ExtractTextRequest, ExtractTextResponse
)
from app.schemas.knowledge_base import KBCategory, KBCategoryCreate, KBItem, KBItemCreate

# --- App Initialization ---
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="BidSmith AI - Análisis de Licitaciones",
    description="API para subir documentos de licitación, analizarlos con IA, firmarlos, exportarlos y triturarlos.",
    version="1.0.0"
)

# --- Startup ---

@app.on_event("startup")
def on_startup():
    """Evento de inicio: crea tablas de BD si no existen."""
    logger.info("Creando tablas de la base de datos si no existen...")
    Base.metadata.create_all(bind=engine)

# --- Manejo de Errores ---

@app.exception_handler(FunctionError)
async def function_error_handler(request: Request, exc: FunctionError):
    # Las funciones remotas responden {"error": "..."} con su código HTTP
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})

# --- Funciones Remotas (RPC) ---

@app.post("/functions/extract-pdf-text", response_model=ExtractTextResponse)
async def extract_pdf_text_endpoint(
    body: ExtractTextRequest,
    db: Session = Depends(get_db),
    store=Depends(get_object_store),
    user: UserContext = Depends(get_current_user),
):
    return await extract_pdf_text(db, store, user, file_path=body.file_path, document_id=body.document_id)

@app.post("/functions/analyze-document", response_model=AnalyzeDocumentResponse)
async def analyze_document_endpoint(
    body: AnalyzeDocumentRequest,
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
):
    return await analyze_document(db, user, document_id=body.document_id, extracted_text=body.extracted_text)

# --- Endpoints de Ingesta ---

@app.post("/upload-document/", response_model=UploadResponse)
async def upload_document_endpoint(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store=Depends(get_object_store),
    user: UserContext = Depends(get_current_user),
):
    orchestrator = UploadOrchestrator(db=db, store=store, functions=LocalFunctionsClient(db, store))
    upload = UploadedFile(filename=file.filename, content_type=file.content_type, data=await file.read())
    try:
        result = await orchestrator.run(user, upload)
    except InvalidFileTypeError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except UploadError as e:
        logger.error(f"Upload error: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return UploadResponse(
        document_id=result.document_id,
        file_path=result.file_path,
        stage=orchestrator.stage.value,
        progress=orchestrator.progress,
        text_length=result.text_length,
        analysis_id=result.analysis_id,
    )

# --- Endpoints de Documentos y Análisis ---

@app.get("/documents/", response_model=List[DocumentResponse])
def read_documents(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    return [DocumentResponse.model_validate(doc) for doc in document_service.list_documents(db, user)]

@app.get("/documents/{document_id}", response_model=DocumentDetailResponse)
def read_document(document_id: str, db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    return DocumentDetailResponse.model_validate(document_service.get_document_or_404(db, user, document_id))

@app.delete("/documents/{document_id}", status_code=204)
def delete_document_endpoint(document_id: str, db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    if not document_service.delete_document(db, user, document_id):
        raise HTTPException(status_code=404, detail="Documento no encontrado o no se pudo eliminar.")
    return Response(status_code=204)

@app.get("/analyses/", response_model=List[AnalysisResponse])
def read_analyses(db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    return [AnalysisResponse.from_model(a) for a in document_service.list_analyses(db, user)]

@app.get("/analyses/{analysis_id}", response_model=AnalysisResponse)
def read_analysis(analysis_id: str, db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)):
    return AnalysisResponse.from_model(document_service.get_analysis_or_404(db, user, analysis_id))

@app.post("/analyses/{analysis_id}/sign", response_model=AnalysisResponse)
def sign_analysis_endpoint(
    analysis_id: str, body: SignatureRequest,
    db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)
):
    try:
        db_analysis = document_service.sign_analysis(db, user, analysis_id, body)
    except AlreadySignedError as e:
        raise HTTPException(status_code=409, detail=e.message)
    return AnalysisResponse.from_model(db_analysis)

@app.get("/analyses/{analysis_id}/export")
def export_analysis_endpoint(
    analysis_id: str,
    format: ExportFormat = Query(ExportFormat.pdf),
    db: Session = Depends(get_db),
    user: UserContext = Depends(get_current_user),
):
    db_analysis = document_service.get_analysis_or_404(db, user, analysis_id)
    file_name = db_analysis.document.file_name if db_analysis.document else None
    try:
        result = export_analysis(db_analysis, file_name, format)
    except ExportUnavailableError as e:
        raise HTTPException(status_code=503, detail=e.message)

    headers = {}
    if format != ExportFormat.pdf:
        headers["Content-Disposition"] = f'attachment; filename="{result.filename}"'
    return Response(content=result.content, media_type=result.media_type, headers=headers)

@app.post("/analyses/{analysis_id}/shred", response_model=ShredResponse)
def shred_analysis_endpoint(
    analysis_id: str, body: ShredRequest,
    db: Session = Depends(get_db),
    store=Depends(get_object_store),
    user: UserContext = Depends(get_current_user),
):
    shredder = DocumentShredder(db, store, user, analysis_id=analysis_id, document_id=body.document_id)
    shredder.set_confirmation(body.confirmation)
    try:
        shredder.shred()
    except ShredNotConfirmedError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except ShredError as e:
        raise HTTPException(status_code=500, detail=e.message)
    return ShredResponse(stage=shredder.stage.value, progress=shredder.progress, blob_deleted=shredder.blob_deleted)

# --- Endpoints de Administración de la Base de Conocimiento ---

@app.post("/admin/kb/categories", response_model=KBCategory, status_code=201)
def create_kb_category_endpoint(
    body: KBCategoryCreate, db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)
):
    if get_category_by_name(db, body.name):
        raise HTTPException(status_code=400, detail=f"La categoría '{body.name}' ya existe.")
    return create_category(db, body)

@app.post("/admin/kb/items", response_model=KBItem, status_code=201)
def create_kb_item_endpoint(
    body: KBItemCreate, db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)
):
    return create_kb_item(db, body)

@app.get("/admin/kb/items", response_model=List[KBItem])
def read_kb_items(
    limit: int = Query(100, ge=1), db: Session = Depends(get_db), user: UserContext = Depends(get_current_user)
):
    return get_kb_items(db, limit=limit)
