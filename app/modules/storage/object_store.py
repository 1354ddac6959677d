# app/modules/storage/object_store.py
import io
import logging
from typing import List

import cloudinary
import cloudinary.api
import cloudinary.uploader
import cloudinary.utils
import requests

from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)

# --- Inicialización de Servicios Externos ---
cloudinary.config(
    cloud_name=settings.CLOUDINARY_CLOUD_NAME,
    api_key=settings.CLOUDINARY_API_KEY,
    api_secret=settings.CLOUDINARY_API_SECRET,
    secure=True,
)


class CloudinaryObjectStore:
    """
    Almacén de archivos sobre Cloudinary (recursos 'raw').
    Las rutas lógicas '{userId}/{epochMillis}_{fileName}' se guardan bajo la carpeta configurada.
    """

    def __init__(self, folder: str = settings.STORAGE_FOLDER):
        self.folder = folder.strip("/")

    def _public_id(self, path: str) -> str:
        return f"{self.folder}/{path}"

    def put(self, path: str, data: bytes) -> None:
        public_id = self._public_id(path)
        try:
            cloudinary.uploader.upload(
                io.BytesIO(data),
                public_id=public_id,
                resource_type="raw",
                overwrite=False,
            )
        except Exception as e:
            logger.error(f"Error al subir el archivo a Cloudinary ({public_id}): {e}", exc_info=True)
            raise StorageError(f"Failed to upload file: {e}", e) from e
        logger.info(f"Archivo subido a Cloudinary: {public_id} ({len(data)} bytes)")

    def get(self, path: str) -> bytes:
        public_id = self._public_id(path)
        url, _ = cloudinary.utils.cloudinary_url(public_id, resource_type="raw", type="upload")
        try:
            response = requests.get(url)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Error al descargar el archivo {public_id}: {e}")
            raise StorageError("Failed to download file", e) from e
        return response.content

    def delete(self, paths: List[str]) -> None:
        public_ids = [self._public_id(p) for p in paths]
        try:
            cloudinary.api.delete_resources(public_ids, resource_type="raw")
        except Exception as e:
            logger.error(f"Error al eliminar archivos de Cloudinary {public_ids}: {e}")
            raise StorageError(f"Failed to delete files: {e}", e) from e
        logger.info(f"Archivos eliminados de Cloudinary: {public_ids}")


def get_object_store() -> CloudinaryObjectStore:
    """Dependency de FastAPI para el almacenamiento de objetos."""
    return CloudinaryObjectStore()
