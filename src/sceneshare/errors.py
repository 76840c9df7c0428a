"""Full error hierarchy for the sceneshare SDK.

Every public error class inherits from SceneShareError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the SDK can raise."""

    EMPTY_BATCH = "EMPTY_BATCH"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    MALFORMED_SHARE_TOKEN = "MALFORMED_SHARE_TOKEN"
    CLIPBOARD_UNAVAILABLE = "CLIPBOARD_UNAVAILABLE"
    ASSET_HOST_ERROR = "ASSET_HOST_ERROR"
    ASSET_HOST_NETWORK_ERROR = "ASSET_HOST_NETWORK_ERROR"
    ASSET_HOST_REJECTED = "ASSET_HOST_REJECTED"
    ASSET_HOST_BAD_RESPONSE = "ASSET_HOST_BAD_RESPONSE"
    IMAGE_ERROR = "IMAGE_ERROR"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"
    IMAGE_TYPE_ERROR = "IMAGE_TYPE_ERROR"
    IMAGE_SIZE_ERROR = "IMAGE_SIZE_ERROR"
    IMAGE_PARSE_ERROR = "IMAGE_PARSE_ERROR"
    INVALID_PIPELINE_STATE = "INVALID_PIPELINE_STATE"
    PIPELINE_BUSY = "PIPELINE_BUSY"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class SceneShareError(Exception):
    """Base exception for all sceneshare errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A user-presentable description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Share pipeline errors
# ---------------------------------------------------------------------------

class EmptyBatchError(SceneShareError):
    """Sharing was triggered with no selected images.

    Raised before any network activity.  Context keys: ``total``.
    """

    def __init__(
        self,
        message: str = "Select at least one photo before sharing",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.EMPTY_BATCH,
            message=message,
            context=context,
            cause=cause,
        )


class UploadFailedError(SceneShareError):
    """One upload in a batch did not succeed.

    ``index`` is the 1-based position of the failed image in the submitted
    batch.  The transport-level failure, if any, is chained as ``cause``.

    Context keys: ``index``, ``total``, ``name``, ``reason``.
    """

    def __init__(
        self,
        index: int,
        message: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.index: int = index
        ctx = {"index": index}
        ctx.update(context or {})
        super().__init__(
            code=ErrorCode.UPLOAD_FAILED,
            message=message or f"Photo {index} failed to upload",
            context=ctx,
            cause=cause,
        )


class MalformedShareTokenError(SceneShareError):
    """A share token could not be decoded into an ordered URL list.

    Context keys: ``token`` (truncated), ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.MALFORMED_SHARE_TOKEN,
            message=message,
            context=context,
            cause=cause,
        )


class ClipboardUnavailableError(SceneShareError):
    """The share link could not be written to the clipboard.

    Never changes the pipeline state.
    """

    def __init__(
        self,
        message: str = "Could not copy the link to the clipboard",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.CLIPBOARD_UNAVAILABLE,
            message=message,
            context=context,
            cause=cause,
        )


class PipelineStateError(SceneShareError):
    """The share pipeline was driven through an invalid transition.

    Context keys: ``current_state``, ``requested``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        code: str = ErrorCode.INVALID_PIPELINE_STATE,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class PipelineBusyError(PipelineStateError):
    """A share attempt was started while another one is still running."""

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            cause=cause,
            code=ErrorCode.PIPELINE_BUSY,
        )


# ---------------------------------------------------------------------------
# Asset host errors
# ---------------------------------------------------------------------------

class AssetHostError(SceneShareError):
    """Base class for failures talking to the asset host.

    Context varies by subclass.
    """

    def __init__(
        self,
        code: str = ErrorCode.ASSET_HOST_ERROR,
        message: str = "Asset host error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class AssetHostNetworkError(AssetHostError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.ASSET_HOST_NETWORK_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class AssetHostRejectedError(AssetHostError):
    """The asset host answered with a non-success status code.

    Context keys: ``status_code``, ``host_message``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.ASSET_HOST_REJECTED,
            message=message,
            context=context,
            cause=cause,
        )


class AssetHostResponseError(AssetHostError):
    """The asset host reported success but the body carried no usable URL.

    Context keys: ``status_code``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.ASSET_HOST_BAD_RESPONSE,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Image errors
# ---------------------------------------------------------------------------

class ImageError(SceneShareError):
    """Base class for image ingestion errors.

    Context varies by subclass.
    """

    def __init__(
        self,
        code: str = ErrorCode.IMAGE_ERROR,
        message: str = "Image error",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class ImageNotFoundError(ImageError):
    """The selected image file does not exist on disk.

    Context keys: ``src``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_NOT_FOUND,
            message=message,
            context=context,
            cause=cause,
        )


class ImageTypeError(ImageError):
    """The detected MIME type is not in the configured allowlist.

    Context keys: ``src``, ``detected_mime``, ``allowed_mimes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_TYPE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ImageSizeError(ImageError):
    """The image exceeds the configured maximum upload size.

    Context keys: ``src``, ``size_bytes``, ``max_bytes``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_SIZE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class ImageParseError(ImageError):
    """A data-URI image could not be decoded (malformed base64 / header).

    Context keys: ``src``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.IMAGE_PARSE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
