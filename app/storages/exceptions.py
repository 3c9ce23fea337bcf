from app.core.exceptions import BaseServiceException


class StorageException(BaseServiceException):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ObjectExistsException(StorageException):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Object already exists at '{path}'", status_code=409)
