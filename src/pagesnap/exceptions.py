"""
Snapshot Engine Exception Hierarchy

This module defines the exception hierarchy for the snapshot engine. Errors
carry a stable error code and context so the command-dispatch layer can tell
a bad option apart from a bad root without parsing messages.

Only configuration problems and capture failures ever reach the caller.
Failures inside a rendering pass are converted into warnings on the
returned result (see ``renderers.base``).
"""

import time
from typing import Any, Dict, Optional


class SnapshotError(Exception):
    """
    Base exception class for all snapshot engine errors.

    Attributes:
        error_code: Unique error code for programmatic handling
        timestamp: When the error occurred
        context: Additional context information
        user_message: User-friendly error message
        developer_message: Detailed technical error message
        suggestion: Suggested fix or next steps (if applicable)
    """

    def __init__(
        self,
        message: str,
        error_code: str = "SNAPSHOT_ERROR",
        context: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        """
        Initialize snapshot error with context.

        Args:
            message: Technical error message for developers
            error_code: Unique error code for programmatic handling
            context: Additional context information
            user_message: User-friendly error message
            suggestion: Suggested fix or next steps
        """
        super().__init__(message)
        self.error_code = error_code
        self.timestamp = time.time()
        self.context = context or {}
        self.user_message = user_message or message
        self.developer_message = message
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.developer_message,
            "user_message": self.user_message,
            "timestamp": self.timestamp,
            "context": self.context,
            "suggestion": self.suggestion,
        }

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.developer_message}"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class SnapshotConfigError(SnapshotError):
    """
    Raised when snapshot options are invalid or conflict with each other.

    Examples:
    - include_links requested while the output format is not markdown
    - negative max_depth or non-positive max_lines
    - unknown snapshot mode
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_OPTIONS",
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        kwargs.setdefault("suggestion", "Check the snapshot options passed for this mode.")
        super().__init__(
            message,
            error_code=code,
            context=details,
            **kwargs
        )

    @property
    def code(self) -> str:
        return self.error_code

    @property
    def details(self) -> Dict[str, Any]:
        return self.context


class InvalidRootError(SnapshotConfigError):
    """
    Raised when the root element cannot be used for a snapshot.

    Examples:
    - the document has no <body> and no root was given
    - the root is a text node or a detached element
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, **kwargs):
        kwargs.setdefault("suggestion", "Pass an element that belongs to the captured document.")
        super().__init__(
            message,
            code="INVALID_ROOT",
            details=details,
            **kwargs
        )


# =============================================================================
# RUNTIME ERRORS
# =============================================================================

class TraversalError(SnapshotError):
    """
    Wraps an unexpected failure inside a renderer's traversal loop.

    Renderers never raise this to the caller; it is turned into a warning
    string on the partial result.
    """

    def __init__(
        self,
        message: str,
        mode: Optional[str] = None,
        original: Optional[BaseException] = None,
        **kwargs
    ):
        self.mode = mode
        self.original = original

        context = kwargs.pop("context", None) or {}
        if mode:
            context["mode"] = mode
        if original is not None:
            context["original_exception_type"] = type(original).__name__
            context["original_exception_message"] = str(original)

        super().__init__(
            message,
            error_code="TRAVERSAL_ERROR",
            context=context,
            user_message="The snapshot could not be completed; partial results were returned.",
            **kwargs
        )


class CaptureError(SnapshotError):
    """Raised when a live page cannot be captured into a document snapshot."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        self.url = url

        context = kwargs.pop("context", None) or {}
        if url:
            context["url"] = url

        super().__init__(
            message,
            error_code="CAPTURE_ERROR",
            context=context,
            user_message="The page could not be captured.",
            suggestion="Wait for navigation to settle and retry the capture.",
            **kwargs
        )
