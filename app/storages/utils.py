import unicodedata

from app.core.config import Settings
from app.core.constants import StorageProvider
from app.storages.interface import ObjectStorage
from app.storages.local import LocalStorage
from app.storages.supabase import SupabaseStorage


def get_storage(settings: Settings) -> ObjectStorage:
    """
    Get the storage backend based on the configured provider.
    """
    if settings.STORAGE_PROVIDER == StorageProvider.LOCAL:
        return LocalStorage(
            base_path=settings.FILE_STORAGE_PATH,
            base_url=f"{str(settings.BASE_URL).rstrip('/')}{settings.API_URL}/v1/media/files",
        )
    elif settings.STORAGE_PROVIDER == StorageProvider.SUPABASE:
        if not settings.SUPABASE.URL or not settings.SUPABASE.KEY:
            raise ValueError("SUPABASE__URL and SUPABASE__KEY are required for Supabase storage")
        return SupabaseStorage(
            url=str(settings.SUPABASE.URL),
            key=settings.SUPABASE.KEY.get_secret_value(),
            bucket=settings.SUPABASE.BUCKET,
        )
    else:
        raise ValueError("Invalid storage provider configured")


def sanitize_filename(filename: str) -> str:
    """
    Sanitize a filename by removing non-ASCII characters.
    Args:
        filename (str): The filename to sanitize
    Returns:
        str: The sanitized filename
    """
    # Normalize and remove non-ASCII characters
    return unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
