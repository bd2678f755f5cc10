from .assembler import DocumentArtifact, artifact_filename, assemble
from .decoder import decode
from .errors import (
    AIServiceError,
    DecodeError,
    EmptySourceError,
    EnhanceError,
    InvalidInputError,
)
from .honors import split_honors_track
from .models import EnhancementRequest, Provenance, ResumeDocument, SourceText
from .normalizer import normalize
from .renderer import ContentBlock, TextRun, render
from .service import (
    analyze_resume,
    build_document,
    career_chat,
    enhance_resume,
    generate_roadmap,
    prepare_request,
)
from .verifier import verify

__all__ = [
    "AIServiceError",
    "ContentBlock",
    "DecodeError",
    "DocumentArtifact",
    "EmptySourceError",
    "EnhanceError",
    "EnhancementRequest",
    "InvalidInputError",
    "Provenance",
    "ResumeDocument",
    "SourceText",
    "TextRun",
    "analyze_resume",
    "artifact_filename",
    "assemble",
    "build_document",
    "career_chat",
    "decode",
    "enhance_resume",
    "generate_roadmap",
    "normalize",
    "prepare_request",
    "render",
    "split_honors_track",
    "verify",
]
