from typing import Iterable, Iterator, Literal

from pydantic import BaseModel

from app.core.config import MediaSettings
from app.media.schemas import UploadCandidate
from app.media.validator import validate_file


class Rejection(BaseModel):
    name: str
    errors: list[str]

    @property
    def message(self) -> str:
        return f'File "{self.name}" is invalid: {", ".join(self.errors)}'


class FileSelection:
    """
    Files picked or dropped by the user and waiting to be sent.
    Only files that pass validation are kept.
    """

    def __init__(self, settings: MediaSettings) -> None:
        self.settings = settings
        self._files: list[UploadCandidate] = []

    def add(self, candidates: Iterable[UploadCandidate]) -> list[Rejection]:
        rejections: list[Rejection] = []
        for candidate in candidates:
            result = validate_file(candidate, self.settings)
            if result.is_valid:
                self._files.append(candidate)
            else:
                rejections.append(Rejection(name=candidate.name, errors=result.errors))
        return rejections

    def remove(self, index: int | Literal["all"]) -> None:
        if index == "all":
            self.clear()
            return
        del self._files[index]

    def clear(self) -> None:
        self._files.clear()

    @property
    def files(self) -> list[UploadCandidate]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[UploadCandidate]:
        return iter(self._files)
