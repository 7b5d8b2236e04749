import io

import docx
import pypdf

from errors import ExtractionError, ExtractionFailed, UnsupportedMediaType
from logger import get_logger
from models import ExtractedText, InputKind

log = get_logger(__name__)

TEXT_PLAIN = "text/plain"
PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
JPEG = "image/jpeg"
PNG = "image/png"
PPT = "application/vnd.ms-powerpoint"
PPTX = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

SUPPORTED_MEDIA_TYPES = [TEXT_PLAIN, PDF, DOCX, JPEG, PNG]
IMAGE_MEDIA_TYPES = {JPEG, PNG}


def _normalize_media_type(media_type: str) -> str:
    # "text/plain; charset=utf-8" → "text/plain"
    return (media_type or "").split(";", 1)[0].strip().lower()


def extract_plain_text(file_bytes: bytes) -> str:
    return file_bytes.decode("utf-8", errors="replace")


def extract_pdf_text(file_bytes: bytes) -> str:
    """Extract the text layer of every page of a PDF."""
    try:
        reader = pypdf.PdfReader(io.BytesIO(file_bytes))
        pages_text = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise ExtractionError(
            "Could not read the PDF. It may be corrupted or password-protected.",
            details=str(e),
        )
    return "\n".join(text for text in pages_text if text)


def extract_docx_text(file_bytes: bytes) -> str:
    """Raw text of a Word document: paragraphs first, then table cells row by row."""
    try:
        document = docx.Document(io.BytesIO(file_bytes))
    except Exception as e:
        raise ExtractionError(
            "Could not read the Word document. It may be corrupted.",
            details=str(e),
        )

    parts = [p.text for p in document.paragraphs if p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def image_placeholder(filename: str) -> str:
    # TODO: replace with OCR once an OCR backend is chosen for image uploads
    return f"Image file: {filename}. This is a placeholder for image content."


def extract_file_text(file_bytes: bytes, media_type: str, filename: str) -> ExtractedText:
    """
    Convert one uploaded file into plain text based on its declared media type.

    Raises UnsupportedMediaType before any parsing is attempted, and
    ExtractionFailed when a text-bearing file yields nothing usable.
    """
    kind = _normalize_media_type(media_type)
    log.info("Extracting %s (%s, %d bytes)", filename, kind or "unknown", len(file_bytes))

    if kind in (PPT, PPTX):
        raise UnsupportedMediaType(
            kind,
            SUPPORTED_MEDIA_TYPES,
            message="PowerPoint files are not currently supported.",
        )
    if kind not in SUPPORTED_MEDIA_TYPES:
        raise UnsupportedMediaType(kind, SUPPORTED_MEDIA_TYPES)

    if kind == TEXT_PLAIN:
        text = extract_plain_text(file_bytes)
    elif kind == PDF:
        text = extract_pdf_text(file_bytes)
    elif kind == DOCX:
        text = extract_docx_text(file_bytes)
    else:
        text = image_placeholder(filename)

    if not text.strip():
        raise ExtractionFailed("Failed to extract content from file.")

    return ExtractedText(text=text, source_kind=InputKind.file, filename=filename)
