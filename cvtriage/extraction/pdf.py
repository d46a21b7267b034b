"""CV text extraction: PDF via pymupdf (optional dependency), plain text as-is."""

from pathlib import Path

TEXT_SUFFIXES = {".txt", ".md"}


def extract_text_from_pdf(path: str | Path) -> str:
    """Extract plain text from a PDF file.

    Raises:
        FileNotFoundError: If the PDF file does not exist.
        ImportError: If pymupdf is not installed.
    """
    path = Path(path)
    if not path.exists():
        msg = f"PDF file not found: {path}"
        raise FileNotFoundError(msg)

    try:
        import pymupdf
    except ImportError:
        msg = (
            "pymupdf is required for PDF extraction. "
            "Install with: pip install 'cvtriage[pdf]'"
        )
        raise ImportError(msg) from None

    with pymupdf.open(str(path)) as doc:
        pages = [page.get_text() for page in doc]
    return "\n".join(pages)


def extract_text(path: str | Path) -> str:
    """Read CV text from a PDF or a plain-text file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file type is not supported.
    """
    path = Path(path)
    if not path.exists():
        msg = f"CV file not found: {path}"
        raise FileNotFoundError(msg)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return extract_text_from_pdf(path)
    if suffix in TEXT_SUFFIXES:
        return path.read_text(encoding="utf-8", errors="ignore")
    msg = f"Unsupported CV file type '{suffix}' (expected .pdf, .txt or .md)"
    raise ValueError(msg)
