# app/core/exceptions.py


class AppError(Exception):
    """Excepción base para los errores de la aplicación."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class NotFoundError(AppError):
    """El recurso no existe o no pertenece al usuario."""
    pass


class FunctionError(AppError):
    """
    Error de una función remota (extracción o análisis).
    Conserva el código HTTP para propagarlo tal cual al cliente.
    """
    def __init__(self, status_code: int, message: str, original_error: Exception = None):
        super().__init__(message, original_error)
        self.status_code = status_code


class StorageError(AppError):
    """Falla una operación sobre el almacenamiento de objetos."""
    pass


class InvalidFileTypeError(AppError):
    """El archivo subido no está declarado como PDF."""
    pass


class UploadError(AppError):
    """Falla uno de los pasos del pipeline de subida."""
    def __init__(self, message: str, stage: str, status_code: int = 500, original_error: Exception = None):
        super().__init__(message, original_error)
        self.stage = stage
        self.status_code = status_code


class ShredNotConfirmedError(AppError):
    """La confirmación escrita no coincide con el token requerido."""
    pass


class ShredError(AppError):
    """Falla uno de los pasos del borrado seguro."""
    pass


class AlreadySignedError(AppError):
    """El análisis ya tiene una firma registrada."""
    pass


class ExportUnavailableError(AppError):
    """No hay superficie de renderizado disponible para la exportación imprimible."""
    pass
