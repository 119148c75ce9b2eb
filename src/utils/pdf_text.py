"""Read rendered reports back with pypdf."""
import io

import pypdf


def _reader(content: bytes) -> pypdf.PdfReader:
    return pypdf.PdfReader(io.BytesIO(content))


def validate_pdf_bytes(content: bytes) -> tuple[bool, str]:
    """Check a freshly rendered report before it is served.

    The renderer refuses to return a document that pypdf cannot open or
    that has no pages, so a broken reportlab build surfaces as a render
    error instead of a corrupt download.

    Returns:
        (True, "") for a usable document, otherwise (False, reason)
    """
    if not content:
        return False, "Rendered document is empty"

    try:
        page_count = len(_reader(content).pages)
    except pypdf.errors.PdfReadError as e:
        return False, f"Not a PDF document: {e}"
    except (ValueError, KeyError, TypeError) as e:
        return False, f"Unreadable PDF structure: {e}"

    return (True, "") if page_count else (False, "Rendered document has no pages")


def extract_page_texts(content: bytes) -> list[str]:
    return [page.extract_text() or "" for page in _reader(content).pages]


def extract_report_lines(content: bytes) -> list[str]:
    """Non-blank text lines in page order; a report row's cells appear in column order."""
    return [
        line.strip()
        for text in extract_page_texts(content)
        for line in text.splitlines()
        if line.strip()
    ]
