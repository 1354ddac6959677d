# app/modules/document_analysis/analyzer.py
import json
import logging
import re

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import FunctionError
from app.core.prompts import TENDER_ANALYST_SYSTEM_PROMPT, TENDER_ANALYSIS_USER_PROMPT
from app.core.security import UserContext
from app.db.crud import create_analysis, get_document, update_document_status
from app.db.crud_kb import build_kb_context
from app.schemas.analysis import AnalysisResponse
from app.schemas.document import DocumentStatus
from app.schemas.functions import AnalyzeDocumentResponse
from app.schemas.llm_responses import AnalysisPayload

logger = logging.getLogger(__name__)

client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.AI_GATEWAY_BASE_URL)

# Del primer '{' al último '}' (greedy), para tolerar texto o fences alrededor del JSON
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")


def parse_analysis_content(content: str) -> AnalysisPayload:
    """
    Interpreta la respuesta del modelo. Si no contiene un objeto JSON válido con la
    forma esperada, devuelve el análisis neutro (puntuación 50, resumen = salida cruda truncada).
    """
    try:
        match = JSON_OBJECT_PATTERN.search(content or "")
        if not match:
            raise ValueError("No JSON found in response")
        return AnalysisPayload.model_validate(json.loads(match.group(0)))
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError también es ValueError
        logger.error(f"No se pudo interpretar la respuesta del modelo: {e}")
        return AnalysisPayload.fallback(content)


async def _request_analysis(kb_context: str, extracted_text: str) -> str:
    response = await client.chat.completions.create(
        model=settings.ANALYSIS_MODEL,
        messages=[
            {"role": "system", "content": TENDER_ANALYST_SYSTEM_PROMPT.format(kb_context=kb_context)},
            {
                "role": "user",
                "content": TENDER_ANALYSIS_USER_PROMPT.format(
                    document_text=extracted_text[:settings.ANALYSIS_TEXT_LIMIT]
                ),
            },
        ],
        temperature=settings.ANALYSIS_TEMPERATURE,
    )
    return response.choices[0].message.content or ""


async def analyze_document(
    db: Session, user: UserContext, document_id: str | None, extracted_text: str | None
) -> AnalyzeDocumentResponse:
    """Genera el análisis de cumplimiento, riesgos y oportunidades y lo persiste."""
    if not document_id or not extracted_text:
        raise FunctionError(400, "Document ID and extracted text required")

    if not get_document(db, document_id, user.id):
        raise FunctionError(404, "Document not found")

    kb_context = build_kb_context(db, limit=settings.KB_CONTEXT_LIMIT)

    logger.info(f"Solicitando análisis del documento {document_id} a {settings.ANALYSIS_MODEL}...")
    try:
        content = await _request_analysis(kb_context, extracted_text)
    except openai.RateLimitError as e:
        logger.warning(f"Límite de peticiones alcanzado al analizar el documento {document_id}")
        raise FunctionError(429, "Rate limit exceeded. Please try again later.", e) from e
    except openai.APIStatusError as e:
        logger.error(f"AI Gateway error: {e.status_code} {e.message}")
        if e.status_code == 402:
            raise FunctionError(402, "Payment required. Please add credits to your workspace.", e) from e
        raise FunctionError(500, "AI Gateway error", e) from e
    except openai.OpenAIError as e:
        logger.error(f"Error al llamar al modelo para el documento {document_id}: {e}", exc_info=True)
        raise FunctionError(500, "AI Gateway error", e) from e

    logger.info("Respuesta del modelo recibida, interpretando...")
    payload = parse_analysis_content(content)

    try:
        update_document_status(db, document_id, DocumentStatus.analyzed)
        db_analysis = create_analysis(db, document_id, user.id, payload)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"No se pudo guardar el análisis del documento {document_id}: {e}", exc_info=True)
        raise FunctionError(500, f"Failed to save analysis: {e}", e) from e

    logger.info(f"Análisis guardado correctamente: {db_analysis.id}")
    return AnalyzeDocumentResponse(analysis=AnalysisResponse.from_model(db_analysis))
