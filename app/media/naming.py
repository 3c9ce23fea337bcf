import secrets
import string
import time
from typing import Callable

from app.media.constants import MediaCategory
from app.media.schemas import UploadCandidate

TOKEN_ALPHABET = string.digits + string.ascii_lowercase
TOKEN_LENGTH = 13


def epoch_millis() -> int:
    return int(time.time() * 1000)


def random_token(length: int = TOKEN_LENGTH) -> str:
    """
    Lowercase base-36 token. 13 characters give roughly 67 bits of randomness.
    """
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def get_extension(filename: str) -> str:
    """
    Text after the last "." of the filename, case preserved. Empty when there is no ".".
    """
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1]


class StoragePathGenerator:
    """
    Builds collision-resistant object paths scoped by conversation.
    The clock and the token source are injectable so paths are reproducible in tests.
    """

    def __init__(
        self,
        clock: Callable[[], int] = epoch_millis,
        token_factory: Callable[[], str] = random_token,
    ) -> None:
        self.clock = clock
        self.token_factory = token_factory

    def generate_file_name(self, candidate: UploadCandidate, conversation_id: str) -> str:
        """
        Returns `{conversation_id}/{millis}_{token}.{ext}`.
        The "." is omitted when the original name has no extension.
        """
        stem = f"{self.clock()}_{self.token_factory()}"
        extension = get_extension(candidate.name)
        file_name = f"{stem}.{extension}" if extension else stem
        return f"{conversation_id}/{file_name}"

    def generate_path(self, candidate: UploadCandidate, conversation_id: str, category: MediaCategory) -> str:
        return f"{category.value}/{self.generate_file_name(candidate, conversation_id)}"
