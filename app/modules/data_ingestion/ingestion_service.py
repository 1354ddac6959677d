# app/modules/data_ingestion/ingestion_service.py
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import FunctionError, InvalidFileTypeError, StorageError, UploadError
from app.core.security import UserContext
from app.db.crud import create_document
from app.schemas.document import DocumentStatus

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"


class UploadStage(str, Enum):
    idle = "idle"
    uploading = "uploading"
    extracting = "extracting"
    analyzing = "analyzing"
    complete = "complete"
    error = "error"


@dataclass
class UploadedFile:
    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadResult:
    document_id: str
    file_path: str
    text_length: int
    analysis_id: Optional[str]


def is_pdf(filename: Optional[str], content_type: Optional[str]) -> bool:
    """Solo mira el tipo declarado o la extensión; no inspecciona el contenido."""
    return content_type == PDF_MIME_TYPE or (filename or "").lower().endswith(".pdf")


def build_file_path(user_id: str, filename: str, now: float) -> str:
    """Ruta '{userId}/{epochMillis}_{fileName}'. Dos subidas en el mismo milisegundo colisionan."""
    return f"{user_id}/{int(now * 1000)}_{filename}"


def _log_progress(stage: UploadStage, progress: int) -> None:
    logger.info(f"[Upload] {stage.value}: {progress}%")


class UploadOrchestrator:
    """
    Orquesta la subida de un documento de licitación, en orden estricto:
    almacenamiento -> registro del documento -> extracción de texto -> análisis.

    El primer fallo aborta el resto de pasos y se propaga tal cual como UploadError.
    No hay compensación: un documento creado sin análisis queda en 'pending' o 'error'.
    El progreso es solo informativo.
    """

    def __init__(
        self,
        db: Session,
        store,
        functions,
        clock: Callable[[], float] = time.time,
        on_progress: Callable[[UploadStage, int], None] = _log_progress,
    ):
        self.db = db
        self.store = store
        self.functions = functions
        self.clock = clock
        self.on_progress = on_progress
        self.stage = UploadStage.idle
        self.progress = 0

    def _set(self, stage: UploadStage, progress: int) -> None:
        self.stage = stage
        self.progress = progress
        self.on_progress(stage, progress)

    async def run(self, user: UserContext, upload: UploadedFile) -> UploadResult:
        if not is_pdf(upload.filename, upload.content_type):
            raise InvalidFileTypeError("Please upload a PDF file")

        self._set(UploadStage.uploading, 10)
        try:
            # 1. Subir al almacenamiento
            file_path = build_file_path(user.id, upload.filename, self.clock())
            self._set(UploadStage.uploading, 30)
            self.store.put(file_path, upload.data)
            self._set(UploadStage.uploading, 50)

            # 2. Crear el registro del documento
            db_document = create_document(
                self.db,
                document_data={
                    "file_name": upload.filename,
                    "file_path": file_path,
                    "file_size": upload.size,
                    "mime_type": upload.content_type,
                    "status": DocumentStatus.pending.value,
                },
                user_id=user.id,
            )
            self._set(UploadStage.extracting, 70)

            # 3. Extraer el texto
            extraction = await self.functions.extract_pdf_text(user, file_path, db_document.id)
            self._set(UploadStage.analyzing, 90)

            # 4. Analizar, solo si hay texto
            analysis_id = None
            if extraction.extracted_text:
                analysis = await self.functions.analyze_document(user, db_document.id, extraction.extracted_text)
                analysis_id = analysis.analysis.id

            self._set(UploadStage.complete, 100)
            logger.info(f"Documento {db_document.id} subido y analizado correctamente.")
            return UploadResult(
                document_id=db_document.id,
                file_path=file_path,
                text_length=extraction.text_length,
                analysis_id=analysis_id,
            )

        except FunctionError as e:
            failed_stage = self._fail(e)
            raise UploadError(e.message, stage=failed_stage, status_code=e.status_code, original_error=e) from e
        except StorageError as e:
            failed_stage = self._fail(e)
            raise UploadError(e.message, stage=failed_stage, original_error=e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            failed_stage = self._fail(e)
            raise UploadError(str(e), stage=failed_stage, original_error=e) from e
        except Exception as e:
            # Cualquier otro fallo también devuelve el estado a idle
            self.db.rollback()
            failed_stage = self._fail(e)
            raise UploadError(f"Unexpected upload error: {e}", stage=failed_stage, original_error=e) from e

    def _fail(self, error: Exception) -> str:
        failed_stage = self.stage.value
        logger.error(f"Error en la subida durante '{failed_stage}': {error}")
        self._set(UploadStage.error, 0)
        # Vuelta al estado inicial para permitir reintentar manualmente
        self._set(UploadStage.idle, 0)
        return failed_stage
