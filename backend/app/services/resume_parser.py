from __future__ import annotations

import io
import logging
import re
from collections import Counter
from typing import Any

import docx
import pdfplumber
from pypdf import PdfReader

logger = logging.getLogger(__name__)

STOP_WORDS = {
    "the",
    "and",
    "for",
    "with",
    "that",
    "this",
    "from",
    "are",
    "was",
    "were",
    "have",
    "has",
    "you",
    "your",
    "our",
    "will",
    "into",
    "over",
    "per",
}


class ResumeParser:
    def parse(self, data: bytes, extension: str) -> dict[str, Any]:
        raw_text = self.extract_text(data, extension)
        return {
            "raw_text": raw_text,
            "keywords": self._extract_keywords(raw_text),
        }

    def extract_text(self, data: bytes, extension: str) -> str:
        extension = extension.lower()
        try:
            if extension == ".pdf":
                return self._read_pdf(data)
            if extension == ".docx":
                return self._read_docx(data)
        except Exception as exc:  # parsers raise a wide range of format errors
            logger.warning("Could not extract text from %s upload: %s", extension, exc)
            return ""
        if extension == ".txt":
            return data.decode("utf-8", errors="ignore")
        return ""

    def _read_pdf(self, data: bytes) -> str:
        texts: list[str] = []
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                for page in pdf.pages:
                    texts.append(page.extract_text() or "")
            if any(t.strip() for t in texts):
                return "\n".join(texts)
        except Exception as exc:
            logger.debug("pdfplumber failed, falling back to pypdf: %s", exc)

        reader = PdfReader(io.BytesIO(data))
        return "\n".join(page.extract_text() or "" for page in reader.pages)

    def _read_docx(self, data: bytes) -> str:
        document = docx.Document(io.BytesIO(data))
        return "\n".join(paragraph.text for paragraph in document.paragraphs)

    def _extract_keywords(self, text: str) -> list[str]:
        if not text or not text.strip():
            return []
        tokens = re.findall(r"[A-Za-z][A-Za-z+#]{2,}", text.lower())
        filtered = [t for t in tokens if t not in STOP_WORDS]
        freq = Counter(filtered)
        return [token for token, _ in freq.most_common(50)]
