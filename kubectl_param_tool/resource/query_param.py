"""Verifiable query parameters and the errors raised while verifying them."""

from enum import Enum
from typing import Any

from kubectl_param_tool.resource.schema import GroupVersionKind


class VerifiableQueryParam(str, Enum):
    """Query parameters whose server-side support can be checked."""

    DRY_RUN = "dryRun"
    FIELD_VALIDATION = "fieldValidation"


QueryParamDryRun = VerifiableQueryParam.DRY_RUN
QueryParamFieldValidation = VerifiableQueryParam.FIELD_VALIDATION


def is_verifiable(query_param: Any) -> bool:
    """Return True if ``query_param`` names a recognized verifiable parameter."""
    try:
        VerifiableQueryParam(query_param)
    except ValueError:
        return False
    return True


class VerifierError(Exception):
    """Base class for anything that stops support from being confirmed."""


class SchemaError(VerifierError):
    """The OpenAPI document could not be traversed as expected."""


class ParamUnsupportedError(VerifierError):
    """The server does not declare ``param`` for ``gvk``."""

    def __init__(self, gvk: GroupVersionKind, param: Any):
        self.gvk = gvk
        self.param = param
        super().__init__(
            f"{gvk} doesn't support {param_name(param)!r}"
        )


def is_param_unsupported_error(err: BaseException) -> bool:
    return isinstance(err, ParamUnsupportedError)


def param_name(param: Any) -> str:
    if isinstance(param, VerifiableQueryParam):
        return param.value
    return str(param)
