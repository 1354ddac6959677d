# app/modules/document_processing/text_extractor.py
import base64
import logging

import openai
from openai import AsyncOpenAI
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import FunctionError, StorageError
from app.core.prompts import PDF_TEXT_EXTRACTION_PROMPT
from app.core.security import UserContext
from app.db.crud import get_document, update_document_status, update_document_text
from app.schemas.document import DocumentStatus
from app.schemas.functions import ExtractTextResponse

logger = logging.getLogger(__name__)

# Inicializar el cliente de OpenAI de forma asíncrona (cualquier gateway compatible)
client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.AI_GATEWAY_BASE_URL)


async def _request_pdf_text(file_bytes: bytes) -> str:
    """Envía el PDF al modelo como data URL y devuelve el texto plano."""
    encoded = base64.b64encode(file_bytes).decode("ascii")
    response = await client.chat.completions.create(
        model=settings.EXTRACTION_MODEL,
        messages=[
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": PDF_TEXT_EXTRACTION_PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:application/pdf;base64,{encoded}"}},
                ],
            }
        ],
        max_tokens=settings.EXTRACTION_MAX_TOKENS,
    )
    return response.choices[0].message.content or ""


async def extract_pdf_text(
    db: Session, store, user: UserContext, file_path: str | None, document_id: str | None
) -> ExtractTextResponse:
    """
    Descarga el PDF almacenado, extrae su texto con el modelo y lo guarda en el documento.
    Estados: processing durante la llamada, analyzed al guardar el texto, error si el modelo falla.
    """
    if not file_path or not document_id:
        raise FunctionError(400, "File path and document ID required")

    if not get_document(db, document_id, user.id):
        raise FunctionError(404, "Document not found")

    logger.info(f"Descargando archivo del almacenamiento: {file_path}")
    try:
        file_bytes = store.get(file_path)
    except StorageError as e:
        raise FunctionError(500, "Failed to download file", e) from e

    update_document_status(db, document_id, DocumentStatus.processing)

    logger.info(f"Extrayendo texto del documento {document_id} con {settings.EXTRACTION_MODEL}...")
    try:
        extracted_text = await _request_pdf_text(file_bytes)
    except openai.RateLimitError as e:
        logger.warning(f"Límite de peticiones alcanzado al extraer el documento {document_id}")
        update_document_status(db, document_id, DocumentStatus.error)
        raise FunctionError(429, "Rate limit exceeded. Please try again later.", e) from e
    except openai.OpenAIError as e:
        logger.error(f"Error de extracción para el documento {document_id}: {e}", exc_info=True)
        update_document_status(db, document_id, DocumentStatus.error)
        raise FunctionError(500, "Failed to extract text from PDF", e) from e

    logger.info(f"Texto extraído del documento {document_id}, longitud: {len(extracted_text)}")
    update_document_text(db, document_id, extracted_text)

    return ExtractTextResponse(extracted_text=extracted_text, text_length=len(extracted_text))
