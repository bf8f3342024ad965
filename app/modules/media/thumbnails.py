import io
from PIL import Image, ImageOps, UnidentifiedImageError

# formats Pillow can both read and write without extra plugins
_WRITABLE = {"JPEG", "PNG", "WEBP", "GIF"}

class ThumbnailError(ValueError):
    pass

def make_thumbnail(data: bytes, width: int = 400) -> tuple[bytes, str]:
    """
    Downscale an image so its long edge is at most `width` pixels.
    Aspect ratio is preserved and small images are never enlarged.

    Returns the encoded thumbnail and its MIME type, which follows the format
    actually written rather than whatever the upload declared.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = (img.format or "").upper()
            img = ImageOps.exif_transpose(img)
            img.thumbnail((width, width), Image.Resampling.LANCZOS)
            if fmt not in _WRITABLE:
                fmt = "JPEG"
            if fmt == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")
            out = io.BytesIO()
            img.save(out, format=fmt)
            return out.getvalue(), Image.MIME[fmt]
    except (UnidentifiedImageError, OSError) as e:
        raise ThumbnailError(f"cannot derive thumbnail: {e}") from e
