from __future__ import annotations

from pathlib import Path

from docx import Document
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from jobheist.core.errors import IngestError

from .models import ParsedDoc

_TEXT_EXTENSIONS = {".txt", ".md"}
SUPPORTED_EXTENSIONS = frozenset({".pdf", ".docx", *_TEXT_EXTENSIONS})


def _parse_txt(file_path: Path) -> tuple[str, int | None, list[str]]:
    raw = file_path.read_bytes()
    try:
        return raw.decode("utf-8"), None, []
    except UnicodeDecodeError:
        return raw.decode("utf-8", errors="replace"), None, ["Text file is not valid UTF-8; undecodable bytes were replaced."]


def _parse_pdf(file_path: Path) -> tuple[str, int | None, list[str]]:
    warnings: list[str] = []
    try:
        reader = PdfReader(str(file_path))
        text_parts: list[str] = []
        for page in reader.pages:
            text_parts.append((page.extract_text() or "").strip())
    except (PyPdfError, ValueError, KeyError) as exc:
        raise IngestError(f"PDF parsing failed for '{file_path.name}': {exc}") from exc

    if not any(text_parts):
        warnings.append("No extractable text found in PDF.")
    return "\n".join(text_parts), len(text_parts), warnings


def _parse_docx(file_path: Path) -> tuple[str, int | None, list[str]]:
    warnings: list[str] = []
    try:
        document = Document(str(file_path))
    except Exception as exc:  # python-docx raises zipfile/lxml/KeyError variants
        raise IngestError(f"DOCX parsing failed for '{file_path.name}': {exc}") from exc

    paragraphs = [p.text.strip() for p in document.paragraphs if p.text and p.text.strip()]
    if not paragraphs:
        warnings.append("No extractable text found in DOCX.")
    return "\n".join(paragraphs), None, warnings


def parse_document(file_path: str | Path) -> ParsedDoc:
    path = Path(file_path).expanduser().resolve()
    if not path.is_file():
        raise IngestError(f"Resume file not found: '{path}'")

    extension = path.suffix.lower()
    try:
        if extension in _TEXT_EXTENSIONS:
            source_type = "txt"
            text, page_count, warnings = _parse_txt(path)
        elif extension == ".pdf":
            source_type = "pdf"
            text, page_count, warnings = _parse_pdf(path)
        elif extension == ".docx":
            source_type = "docx"
            text, page_count, warnings = _parse_docx(path)
        else:
            raise IngestError(
                f"Unsupported file type '{extension}'. Supported types: .pdf, .docx, .txt, .md",
                code="unsupported_file_type",
            )
    except OSError as exc:
        raise IngestError(f"Unable to read resume file '{path}': {exc}") from exc

    return ParsedDoc(
        source_type=source_type,
        text=text,
        page_count=page_count,
        parsing_warnings=warnings,
    )
