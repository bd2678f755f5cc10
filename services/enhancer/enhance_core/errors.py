from __future__ import annotations


class EnhanceError(Exception):
    default_message = "Error generating ideal resume."

    def __init__(
        self, detail: str, status_code: int = 400, user_message: str | None = None
    ) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
        self.user_message = user_message or self.default_message


class InvalidInputError(EnhanceError):
    def __init__(self, detail: str, user_message: str | None = None) -> None:
        super().__init__(detail, status_code=400, user_message=user_message or detail)


class EmptySourceError(EnhanceError):
    default_message = "PDF content is too short or empty."

    def __init__(self, detail: str = "source_text_too_short") -> None:
        super().__init__(detail, status_code=400)


class DecodeError(EnhanceError):
    default_message = "Error processing resume enhancement. Please try again."

    def __init__(self, detail: str) -> None:
        super().__init__(detail, status_code=502)


class AIServiceError(EnhanceError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail, status_code=502, user_message=f"AI service error: {detail}")
