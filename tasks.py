#tasks.py
import logging
import os
import re
from urllib.parse import urlsplit

from dotenv import load_dotenv

from checklist_parser import ChecklistParseError, ChecklistParser
from compiler import compile_summary
from html_retriever import HTMLRetriever, RetrievalError
from models import ChecklistField, CompilationResult
from taxonomy_order import TaxonomyOrder

load_dotenv()
CHECKLIST_BASE_URL = os.getenv("EBIRD_CHECKLIST_BASE_URL", "https://ebird.org/checklist/")

CHECKLIST_ID_RE = re.compile(r"^S\d+$")

logger = logging.getLogger(__name__)


class CompilationError(RuntimeError):
    def __init__(self, message: str, identifier: str | None = None, field: ChecklistField | None = None):
        self.identifier = identifier
        self.field = field
        super().__init__(message)


def checklist_identifier(url: str) -> str:
    """Last non-empty path component, e.g. 'S123456' for a checklist link."""
    path = urlsplit(url).path
    parts = [p for p in path.split("/") if p]
    return parts[-1] if parts else url


def parse_checklist_input(text: str, base_url: str = CHECKLIST_BASE_URL) -> list[str]:
    """
    Turn pasted input into a list of checklist URLs.

    Accepts full URLs or bare checklist IDs ("S123456"), separated by any
    whitespace. Duplicates are dropped, keeping the first occurrence.
    """
    urls: list[str] = []
    for token in text.split():
        if token.startswith(("http://", "https://")):
            if not urlsplit(token).netloc:
                raise CompilationError(f"'{token}' is not a checklist URL or ID", identifier=token)
            url = token
        elif CHECKLIST_ID_RE.match(token):
            url = base_url + token
        else:
            raise CompilationError(f"'{token}' is not a checklist URL or ID", identifier=token)

        if url not in urls:
            urls.append(url)

    if not urls:
        raise CompilationError("Failed to find any URLs")
    return urls


def compile_checklists(text: str, taxonomy: TaxonomyOrder, retriever=None) -> CompilationResult:
    """
    Fetch and parse every checklist in `text`, then compile the summary.

    The batch is all or nothing: the first checklist that can't be
    downloaded or parsed raises CompilationError and no summary is made.
    """
    urls = parse_checklist_input(text)
    logger.info(f"Compiling {len(urls)} checklist(s)")

    own_retriever = retriever is None
    if own_retriever:
        retriever = HTMLRetriever()
        retriever.configure_from_robots(urls[0])

    parser = ChecklistParser(taxonomy)
    checklists = []
    try:
        for url in urls:
            identifier = checklist_identifier(url)
            try:
                html = retriever.get_html(url)
            except RetrievalError as e:
                raise CompilationError(f"Failed to download checklist from {url}", identifier) from e

            try:
                checklists.append(parser.parse(html, identifier))
            except ChecklistParseError as e:
                raise CompilationError(f"Failed to parse checklist {identifier}: {e}", identifier, e.field) from e
    finally:
        if own_retriever:
            retriever.close()

    summary, warnings = compile_summary(checklists)
    return CompilationResult(
        summary=summary,
        warnings=warnings,
        identifiers=[c.identifier for c in checklists],
    )
