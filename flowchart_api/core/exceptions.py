"""Error taxonomy for the flowchart pipeline.

Every class carries the HTTP status it maps to and a default user-facing
message. The exception handlers in ``main.py`` turn any of them into an
``{"error": message}`` body.
"""

from typing import Optional


class FlowchartError(Exception):
    """Base exception for the flowchart pipeline."""

    status_code: int = 500
    default_message: str = "予期せぬエラーが発生しました"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidMethod(FlowchartError):
    """Raised for any HTTP method other than POST / OPTIONS."""

    status_code = 405
    default_message = "Method not allowed"


class InvalidInput(FlowchartError):
    """Raised when the request body has no usable ``hypotheses`` array."""

    status_code = 400
    default_message = "有効な仮説データがありません"


class ConfigurationError(FlowchartError):
    """Raised when the upstream credential is missing."""

    default_message = "API key not configured"


class UpstreamError(FlowchartError):
    """Raised when the completion service answers with an error."""

    default_message = "Gemini APIエラーが発生しました"


class UnexpectedUpstreamShape(FlowchartError):
    """Raised when the completion response has no candidate text to extract."""

    default_message = "APIレスポンスに生成結果が含まれていません"


class MalformedUpstreamJSON(FlowchartError):
    """Raised when the generated text is not valid JSON."""

    default_message = "APIから無効なJSONが返されました"


class InvalidUpstreamShape(FlowchartError):
    """Raised when the generated JSON lacks a ``nodes`` array."""

    default_message = "無効なデータ構造がAPIから返されました"
