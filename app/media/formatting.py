from app.core.config import MediaSettings

SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(size: int) -> str:
    """
    Human readable size with at most two decimals, e.g. 1536 -> "1.5 KB".
    """
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / 1024**exponent, 2)
    return f"{value:g} {SIZE_UNITS[exponent]}"


def get_file_icon(content_type: str | None, settings: MediaSettings) -> str:
    if not content_type:
        return "📎"
    if content_type in settings.IMAGE_TYPES:
        return "🖼️"
    if content_type in settings.VIDEO_TYPES:
        return "🎥"
    if content_type in settings.AUDIO_TYPES:
        return "🎵"
    if "pdf" in content_type:
        return "📄"
    if "word" in content_type:
        return "📝"
    if "excel" in content_type or "spreadsheet" in content_type:
        return "📊"
    if "zip" in content_type or "rar" in content_type:
        return "📦"
    return "📎"
