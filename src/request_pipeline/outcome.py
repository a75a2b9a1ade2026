"""Stage outcomes — Continue, Respond, Fail."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from request_pipeline.response import PipelineResponse


@dataclass(frozen=True)
class Continue:
    """Pass control to the next stage."""


@dataclass(frozen=True)
class Respond:
    """Terminate the chain with a response."""

    response: PipelineResponse


@dataclass(frozen=True)
class Fail:
    """Terminate the chain and divert to the error handler."""

    error: BaseException


Outcome = Union[Continue, Respond, Fail]

CONTINUE = Continue()
