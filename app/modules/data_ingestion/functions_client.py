# app/modules/data_ingestion/functions_client.py
from sqlalchemy.orm import Session

from app.core.security import UserContext
from app.modules.document_analysis.analyzer import analyze_document
from app.modules.document_processing.text_extractor import extract_pdf_text
from app.schemas.functions import AnalyzeDocumentResponse, ExtractTextResponse


class LocalFunctionsClient:
    """
    Invoca las funciones de extracción y análisis dentro del mismo proceso,
    con la misma firma y los mismos errores (FunctionError) que sus endpoints RPC.
    """

    def __init__(self, db: Session, store):
        self.db = db
        self.store = store

    async def extract_pdf_text(self, user: UserContext, file_path: str, document_id: str) -> ExtractTextResponse:
        return await extract_pdf_text(self.db, self.store, user, file_path=file_path, document_id=document_id)

    async def analyze_document(self, user: UserContext, document_id: str, extracted_text: str) -> AnalyzeDocumentResponse:
        return await analyze_document(self.db, user, document_id=document_id, extracted_text=extracted_text)
