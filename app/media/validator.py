from app.core.config import MEGABYTE, MediaSettings
from app.media.classifier import allowed_content_types
from app.media.schemas import UploadCandidate, ValidationResult


def format_size_limit(max_file_size: int) -> str:
    """
    Render the size ceiling in MB, dropping a trailing ".0" (52428800 -> "50").
    """
    megabytes = max_file_size / MEGABYTE
    return f"{megabytes:g}"


def validate_file(candidate: UploadCandidate, settings: MediaSettings) -> ValidationResult:
    """
    Check a candidate against the size ceiling and the allow-lists.
    Both rules are always evaluated so every violation is reported.
    """
    errors: list[str] = []

    if candidate.size > settings.MAX_FILE_SIZE:
        errors.append(f"File size must be less than {format_size_limit(settings.MAX_FILE_SIZE)}MB")

    if candidate.content_type not in allowed_content_types(settings):
        errors.append("File type not supported")

    return ValidationResult(is_valid=not errors, errors=errors)
