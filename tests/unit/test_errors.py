"""Tests for the error hierarchy: codes, messages, context, and chaining."""

from __future__ import annotations

import pytest

from sceneshare.errors import (
    AssetHostError,
    AssetHostNetworkError,
    AssetHostRejectedError,
    AssetHostResponseError,
    ClipboardUnavailableError,
    EmptyBatchError,
    ErrorCode,
    ImageError,
    ImageNotFoundError,
    ImageParseError,
    ImageSizeError,
    ImageTypeError,
    MalformedShareTokenError,
    PipelineBusyError,
    PipelineStateError,
    SceneShareError,
    UploadFailedError,
)


@pytest.mark.parametrize(
    "error, code, base",
    [
        (EmptyBatchError(), ErrorCode.EMPTY_BATCH, SceneShareError),
        (UploadFailedError(index=1), ErrorCode.UPLOAD_FAILED, SceneShareError),
        (MalformedShareTokenError("bad"), ErrorCode.MALFORMED_SHARE_TOKEN, SceneShareError),
        (ClipboardUnavailableError(), ErrorCode.CLIPBOARD_UNAVAILABLE, SceneShareError),
        (PipelineStateError("x"), ErrorCode.INVALID_PIPELINE_STATE, SceneShareError),
        (PipelineBusyError("x"), ErrorCode.PIPELINE_BUSY, PipelineStateError),
        (AssetHostError(), ErrorCode.ASSET_HOST_ERROR, SceneShareError),
        (AssetHostNetworkError("x"), ErrorCode.ASSET_HOST_NETWORK_ERROR, AssetHostError),
        (AssetHostRejectedError("x"), ErrorCode.ASSET_HOST_REJECTED, AssetHostError),
        (AssetHostResponseError("x"), ErrorCode.ASSET_HOST_BAD_RESPONSE, AssetHostError),
        (ImageError(), ErrorCode.IMAGE_ERROR, SceneShareError),
        (ImageNotFoundError("x"), ErrorCode.IMAGE_NOT_FOUND, ImageError),
        (ImageTypeError("x"), ErrorCode.IMAGE_TYPE_ERROR, ImageError),
        (ImageSizeError("x"), ErrorCode.IMAGE_SIZE_ERROR, ImageError),
        (ImageParseError("x"), ErrorCode.IMAGE_PARSE_ERROR, ImageError),
    ],
)
def test_codes_and_hierarchy(error, code, base):
    assert error.code == code
    assert isinstance(error, base)
    assert error.cause is None


class TestUploadFailedError:
    def test_default_message_uses_one_based_index(self):
        err = UploadFailedError(index=3)
        assert err.index == 3
        assert err.message == "Photo 3 failed to upload"
        assert str(err) == "Photo 3 failed to upload"
        assert err.context == {"index": 3}

    def test_context_merged_and_cause_chained(self):
        cause = AssetHostNetworkError("timed out", context={"url": "/demo/image/upload"})
        err = UploadFailedError(index=2, context={"total": 4, "name": "b.png"}, cause=cause)
        assert err.context == {"index": 2, "total": 4, "name": "b.png"}
        assert err.cause is cause
        assert err.__cause__ is cause


class TestBaseError:
    def test_repr_includes_context(self):
        err = MalformedShareTokenError("bad", context={"reason": "empty"})
        assert repr(err) == (
            "MalformedShareTokenError(code=<ErrorCode.MALFORMED_SHARE_TOKEN: "
            "'MALFORMED_SHARE_TOKEN'>, message='bad', context={'reason': 'empty'})"
        )

    def test_repr_without_context(self):
        assert "context" not in repr(ClipboardUnavailableError())

    def test_code_is_a_string(self):
        assert EmptyBatchError().code == "EMPTY_BATCH"

    def test_can_be_caught_as_base(self):
        with pytest.raises(SceneShareError):
            raise ImageSizeError("too big", context={"size_bytes": 11, "max_bytes": 10})
