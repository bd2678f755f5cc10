from __future__ import annotations

import io
import logging
import re
import warnings
from pathlib import Path
from typing import Any

import pdfplumber

logging.getLogger("pdfplumber").setLevel(logging.ERROR)
logging.getLogger("pdfminer").setLevel(logging.ERROR)
warnings.filterwarnings("ignore", category=UserWarning, module="pdfminer")

_CID_RE = re.compile(r"\(cid:\d+\)")


class PdfExtractError(RuntimeError):
    pass


def extract_text(data: bytes) -> str:
    return _extract(io.BytesIO(data))


def extract_text_from_path(path: str | Path) -> str:
    return _extract(Path(path))


def _extract(source: Any) -> str:
    # Image-only pages yield None from extract_text; they contribute nothing.
    try:
        with pdfplumber.open(source) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as exc:  # noqa: BLE001
        raise PdfExtractError(f"unreadable pdf: {exc}") from exc
    return _CID_RE.sub("", "\n".join(pages))
