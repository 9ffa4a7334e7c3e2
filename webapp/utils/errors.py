import json
import asyncio
import aiohttp
import kubernetes_asyncio

_NOT_FOUND = "notfound"

#: Failures of a call to the API server that a later attempt may not hit
STORE_ERRORS = (
    kubernetes_asyncio.client.ApiException,
    aiohttp.ClientError,
    asyncio.TimeoutError,
)


class ReconcileError(Exception):
    """Base class of errors raised by the reconcile engine itself."""


class OwnerReferenceError(ReconcileError):
    """The resource lacks the identity needed to own its children.

    Retryable: the resource is skipped for this attempt and tried again
    after the error delay, other resources are unaffected.
    """


def not_found_error(ex: Exception) -> bool:
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return False
    if ex.status == 404:
        return True
    try:
        err = json.loads(ex.body)
    except (TypeError, ValueError):
        return False
    return isinstance(err, dict) and err.get("reason", "").lower() == _NOT_FOUND


def describe_error(ex: Exception) -> str:
    """Short human readable description of a failed store call."""
    if not isinstance(ex, kubernetes_asyncio.client.ApiException):
        return f"{ex.__class__.__name__}: {ex}"

    error_msg = f"Kubernetes API error ({ex.status}): {ex.reason}"
    try:
        if ex.body:
            body = json.loads(ex.body)
            if "message" in body:
                error_msg = f"{error_msg} - {body['message']}"
    except (json.JSONDecodeError, TypeError, AttributeError):
        pass
    return error_msg
