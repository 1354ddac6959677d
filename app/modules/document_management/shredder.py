# app/modules/document_management/shredder.py
import logging
from enum import Enum
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ShredError, ShredNotConfirmedError, StorageError
from app.core.security import UserContext
from app.db import crud

logger = logging.getLogger(__name__)

CONFIRMATION_TOKEN = "SHRED"


class ShredStage(str, Enum):
    confirm = "confirm"
    shredding = "shredding"
    complete = "complete"


class DocumentShredder:
    """
    Borrado seguro de un análisis y su documento: fila del análisis, archivo
    almacenado y fila del documento, en ese orden y sin paralelismo.

    Estados: confirm -> shredding -> complete. Cualquier fallo vuelve a confirm
    con el progreso a cero; lo ya borrado no se restaura.
    """

    def __init__(
        self,
        db: Session,
        store,
        user: UserContext,
        analysis_id: str,
        document_id: str,
        on_progress: Callable[[int], None] | None = None,
    ):
        self.db = db
        self.store = store
        self.user = user
        self.analysis_id = analysis_id
        self.document_id = document_id
        self.on_progress = on_progress
        self.stage = ShredStage.confirm
        self.progress = 0
        self.confirmation = ""
        self.blob_deleted = False

    def set_confirmation(self, value: str) -> None:
        # Comparación exacta: "shred" en minúsculas no habilita el borrado
        self.confirmation = value or ""

    @property
    def can_shred(self) -> bool:
        return self.stage == ShredStage.confirm and self.confirmation == CONFIRMATION_TOKEN

    def cancel(self) -> None:
        if self.stage == ShredStage.confirm:
            self.confirmation = ""

    def _advance(self, progress: int) -> None:
        self.progress = progress
        if self.on_progress:
            self.on_progress(progress)

    def shred(self) -> None:
        if not self.can_shred:
            raise ShredNotConfirmedError(f"Type {CONFIRMATION_TOKEN} to confirm")

        # El documento a borrar es siempre el padre del análisis
        if crud.get_analysis_document_id(self.db, self.analysis_id, self.user.id) != self.document_id:
            raise NotFoundError(f"Analysis {self.analysis_id} not found for document {self.document_id}")

        self.stage = ShredStage.shredding
        logger.info(f"Triturando el análisis {self.analysis_id} y el documento {self.document_id}")
        try:
            # 1. Eliminar el análisis
            self._advance(20)
            crud.delete_analysis(self.db, self.analysis_id, self.user.id)
            self._advance(50)

            # 2. Localizar el archivo almacenado
            file_path = crud.get_document_file_path(self.db, self.document_id, self.user.id)
            self._advance(70)

            # 3. Eliminar del almacenamiento (si no hay ruta, no hay nada que borrar)
            if file_path:
                self.store.delete([file_path])
                self.blob_deleted = True
            self._advance(85)

            # 4. Eliminar el registro del documento
            crud.delete_document(self.db, self.document_id, self.user.id)
            self._advance(100)

        except (SQLAlchemyError, StorageError) as e:
            self.db.rollback()
            logger.error(f"Error al triturar el documento {self.document_id}: {e}", exc_info=True)
            self.stage = ShredStage.confirm
            self.progress = 0
            raise ShredError("Failed to shred document", e) from e

        self.stage = ShredStage.complete
        logger.info(f"Documento {self.document_id} triturado permanentemente")
