import re

SVG_CONTENT_TYPE = "image/svg+xml"
SVG_EXTENSION = ".svg"

_WIDTH_RE = re.compile(r'(?<![\w:-])width="([^"]+)"')
_HEIGHT_RE = re.compile(r'(?<![\w:-])height="([^"]+)"')
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_SVG_TAG_RE = re.compile(r"<svg[\s>/]", re.IGNORECASE)


class SvgValidationError(ValueError):
    """Upload rejected before it reaches storage."""


def _leading_int(value: str | None) -> int:
    if not value:
        return 0
    match = _LEADING_INT_RE.match(value)
    if not match:
        return 0
    return max(0, int(match.group(1)))


def parse_dimensions(text: str) -> tuple[int, int]:
    """
    Declared width/height of an SVG document.

    Only the first width="..." and height="..." attributes are read and only
    their leading integer counts: "12.5px" -> 12, "100%" -> 100, "auto" -> 0.
    """
    width_match = _WIDTH_RE.search(text or "")
    height_match = _HEIGHT_RE.search(text or "")
    width = _leading_int(width_match.group(1) if width_match else None)
    height = _leading_int(height_match.group(1) if height_match else None)
    return width, height


def validate_svg_upload(
    filename: str | None,
    content_type: str | None,
    data: bytes | None,
    max_bytes: int,
) -> str:
    """Check an uploaded file and return its decoded text."""
    if not filename or data is None:
        raise SvgValidationError("No file provided")

    if not filename.lower().endswith(SVG_EXTENSION):
        raise SvgValidationError("Only SVG allowed")

    normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
    if normalized_type != SVG_CONTENT_TYPE:
        raise SvgValidationError("Only SVG allowed")

    if len(data) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise SvgValidationError(f"File too large (>{limit_mb:g}MB)")

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise SvgValidationError("SVG must be UTF-8 text")

    if not _SVG_TAG_RE.search(text):
        raise SvgValidationError("Not an SVG document")

    return text
