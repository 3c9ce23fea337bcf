from pydantic import BaseModel


class ImageLimits(BaseModel):
    """
    Image encoding limits
    """

    max_width: int
    max_height: int
    format: str = "JPEG"
    quality: int = 80
