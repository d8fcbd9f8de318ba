"""PDF page extraction — thin wrapper around LangChain's ``PyPDFLoader``."""

from __future__ import annotations

import logging
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader
from pypdf.errors import PyPdfError

from docchat_ingest.errors import ParseError
from docchat_ingest.models import PageRecord

logger = logging.getLogger(__name__)


def load_pdf_pages(path: str | Path) -> list[PageRecord]:
    """Load a PDF and return one :class:`PageRecord` per page.

    Parameters
    ----------
    path:
        Local file produced by a blob fetcher.

    Returns
    -------
    list[PageRecord]
        Pages in source order, numbered from 1.

    Raises
    ------
    ParseError
        If the file is not a readable PDF.
    """
    try:
        documents = PyPDFLoader(str(path)).load()
    except (PyPdfError, OSError, ValueError, KeyError) as exc:
        logger.error("Could not parse %s: %s", path, exc)
        raise ParseError(f"Unreadable PDF {path}: {exc}", path=str(path)) from exc

    pages: list[PageRecord] = []
    for position, doc in enumerate(documents):
        # pypdf reports 0-based page indices
        page_index = doc.metadata.get("page", position)
        pages.append(PageRecord(text=doc.page_content, page_number=int(page_index) + 1))

    logger.info("Loaded %d pages from %s", len(pages), path)
    return pages
