"""PDF text extraction module."""
import fitz  # PyMuPDF
from pathlib import Path
from typing import List
from utils.logger import setup_logger
from ingestion.models import ExtractedVolume, Page
from ingestion.cleaner import clean_text, count_words

logger = setup_logger(__name__)

TEXT_BLOCK = 0  # PyMuPDF block type for text (1 is image)


class PDFExtractionError(Exception):
    """Raised when PDF extraction fails."""
    pass


def page_text(page: "fitz.Page") -> str:
    """Text of one page with a blank line between text blocks.

    PyMuPDF blocks roughly follow paragraphs, so the blank lines become the
    paragraph breaks the chunker packs on.
    """
    blocks = page.get_text("blocks", sort=True)
    texts = [block[4].strip() for block in blocks if block[6] == TEXT_BLOCK]
    return clean_text('\n\n'.join(text for text in texts if text))


class PDFExtractor:
    """Extracts page text from curriculum PDFs."""

    def extract(self, pdf_path: str) -> ExtractedVolume:
        """Extract cleaned text for every page of a PDF.

        Args:
            pdf_path: Path to PDF file

        Returns:
            ExtractedVolume with one Page per PDF page

        Raises:
            PDFExtractionError: If the file is missing, unreadable or has no pages
        """
        pdf_path = Path(pdf_path)

        if not pdf_path.exists():
            raise PDFExtractionError(f"PDF file not found: {pdf_path}")

        logger.info(f"Extracting text from {pdf_path.name}")

        try:
            doc = fitz.open(pdf_path)
        except Exception as e:
            raise PDFExtractionError(f"Failed to open PDF: {e}") from e

        try:
            if doc.page_count == 0:
                raise PDFExtractionError("PDF has no pages")

            pages: List[Page] = []
            for page_num in range(doc.page_count):
                pages.append(Page(page_number=page_num + 1, text=page_text(doc[page_num])))
        except PDFExtractionError:
            raise
        except Exception as e:
            raise PDFExtractionError(f"Failed to read {pdf_path.name}: {e}") from e
        finally:
            doc.close()

        word_count = sum(count_words(page.text) for page in pages)
        if word_count == 0:
            logger.warning(
                f"{pdf_path.name} has no extractable text. "
                "This may be a scanned image PDF. Please use an OCR'd version."
            )

        logger.info(f"Extracted {len(pages)} pages, {word_count:,} words")

        return ExtractedVolume(title=pdf_path.stem, file_path=str(pdf_path.absolute()), pages=pages)

    def extract_text(self, pdf_path: str) -> str:
        """Extract the whole document as one text, or an empty string on failure.

        Args:
            pdf_path: Path to PDF file

        Returns:
            Page texts joined by newlines
        """
        try:
            volume = self.extract(pdf_path)
        except PDFExtractionError as e:
            logger.error(f"Failed to extract text from {pdf_path}: {e}")
            return ""
        return '\n'.join(page.text for page in volume.pages)
