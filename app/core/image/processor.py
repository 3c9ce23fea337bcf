import io

from PIL import Image, ImageOps, UnidentifiedImageError

from app.core.image.constants import ImageLimits


class ImageProcessor:
    @staticmethod
    def check_needs_resize(image: Image.Image, limits: ImageLimits) -> bool:
        """
        Return True if the image dimensions exceed the allowed limits.
        """
        width, height = image.size
        return width > limits.max_width or height > limits.max_height

    @staticmethod
    def _save_image(image: Image.Image, fmt: str, quality: int) -> bytes:
        """
        Helper method to save an image to an in-memory buffer using the specified format and quality.
        Progressive and optimize flags are enabled.
        """
        output = io.BytesIO()
        image.save(output, format=fmt, quality=quality, optimize=True, progressive=True)
        return output.getvalue()

    @staticmethod
    def encode(content: bytes, limits: ImageLimits) -> bytes:
        """
        Re-encode raw image bytes (e.g. a decoded video frame) for storage.

        Steps:
          1. Open the image and auto-orient it using EXIF data.
          2. Convert to RGB when the target format has no alpha channel.
          3. Resize using the LANCZOS filter while preserving aspect ratio if it exceeds the limits.
          4. Save with the configured format and quality.

        Raises:
            ValueError: If the bytes are not a decodable image
        """
        try:
            with Image.open(io.BytesIO(content)) as image:
                image = ImageOps.exif_transpose(image)

                if image.mode not in ("RGB", "L"):
                    image = image.convert("RGB")

                if ImageProcessor.check_needs_resize(image, limits):
                    width, height = image.size
                    ratio = min(limits.max_width / width, limits.max_height / height)
                    new_size = (max(1, round(width * ratio)), max(1, round(height * ratio)))
                    image = image.resize(new_size, Image.Resampling.LANCZOS)

                return ImageProcessor._save_image(image, limits.format, limits.quality)
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Error processing image: {e}") from e
