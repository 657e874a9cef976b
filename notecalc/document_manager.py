"""
NoteCalc Document Manager - open documents and their engines.
Each document owns exactly one evaluation engine; nothing is shared between documents.
"""

import logging
import secrets
import string
from datetime import datetime
from typing import Any, Dict, List, Optional

from notecalc.constants import DEFAULT_TITLE, DOCUMENT_ID_LENGTH, TITLE_MAX_LENGTH
from notecalc.engine import NoteCalcEngine
from notecalc.tokens import DisplayRecord

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_document_id(length: int = DOCUMENT_ID_LENGTH) -> str:
    """Short random base-36 id"""
    return ''.join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def get_title(text: str, max_length: int = TITLE_MAX_LENGTH) -> str:
    """
    Derive a document title from its first line.

    Args:
        text (str): Document text
        max_length (int): Longest title allowed

    Returns:
        str: The first line cut at the last space before ``max_length``
        when it is too long, or hard-cut when there is no such space
    """
    if not text:
        return ''
    first_line = text.split('\n')[0]
    prefix = first_line[:max_length]

    if len(first_line) <= max_length or ' ' not in prefix:
        return prefix
    return first_line[:first_line.rfind(' ', 0, max_length + 1)]


def display_title(title: str) -> str:
    """Title shown to the user; empty titles fall back to the default"""
    return title if title else DEFAULT_TITLE


class Document:
    """
    One open document: text, title, timestamps and its engine.
    """

    def __init__(self, doc_id: str, text: str = "", evaluator=None):
        self.id = doc_id
        self.text = text
        self.title = get_title(text)
        self.created_at = datetime.now()
        self.modified_at = self.created_at
        self.engine = NoteCalcEngine(text, evaluator=evaluator)

    def to_dict(self, include_results: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": display_title(self.title),
            "text": self.text,
            "created_at": self.created_at.isoformat(),
            "modified_at": self.modified_at.isoformat(),
        }
        if include_results:
            data["results"] = [record.to_dict() for record in self.engine.project()]
        return data


class DocumentManager:
    """
    Manages open documents and routes text changes to their engines.
    """

    def __init__(self, evaluator=None):
        self.documents: Dict[str, Document] = {}
        self.evaluator = evaluator

    def create_document(self, text: str = "", doc_id: Optional[str] = None) -> Document:
        """
        Create a new document.

        Args:
            text (str): Initial content, evaluated as an initial load
            doc_id (str): Id to use; a random one is generated when omitted

        Returns:
            Document: The created document
        """
        if doc_id is None:
            doc_id = generate_document_id()
            while doc_id in self.documents:
                doc_id = generate_document_id()

        document = Document(doc_id, text, evaluator=self.evaluator)
        self.documents[doc_id] = document
        logger.debug("Created document %s", doc_id)
        return document

    def get_document(self, doc_id: str) -> Optional[Document]:
        return self.documents.get(doc_id)

    def delete_document(self, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            bool: True if deleted successfully
        """
        if doc_id in self.documents:
            del self.documents[doc_id]
            logger.debug("Deleted document %s", doc_id)
            return True
        return False

    def update_document(self, doc_id: str, text: str, is_initial_load: bool = False) -> Optional[List[DisplayRecord]]:
        """
        Evaluate new text for a document and refresh its metadata.

        Args:
            doc_id (str): Document id
            text (str): Complete new document text
            is_initial_load (bool): Re-evaluate every line

        Returns:
            list: Display records, or None if the document does not exist
        """
        document = self.documents.get(doc_id)
        if document is None:
            return None

        results = document.engine.evaluate(text, is_initial_load)
        document.text = text
        document.title = get_title(text)
        document.modified_at = datetime.now()
        return results

    def get_results(self, doc_id: str) -> Optional[List[DisplayRecord]]:
        """Current display records of a document, without re-evaluating"""
        document = self.documents.get(doc_id)
        if document is None:
            return None
        return document.engine.project()

    def list_documents(self) -> List[Document]:
        """
        Non-empty documents, most recently modified first.

        Documents without any text stay open but are not listed.
        """
        listed = [d for d in self.documents.values() if d.text]
        return sorted(listed, key=lambda d: d.modified_at, reverse=True)
