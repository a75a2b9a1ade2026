"""Stage abstract base class and StageCategory enum."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import ClassVar

from request_pipeline.context import RequestContext
from request_pipeline.outcome import Outcome


class StageCategory(Enum):
    """Stage categories, defining strict execution order."""

    LOGGING = "logging"
    BODY_PARSING = "body_parsing"
    CORS = "cors"
    AUTHENTICATION = "authentication"
    CUSTOM = "custom"
    HEALTH = "health"
    ROUTING = "routing"

    @property
    def order(self) -> int:
        _ORDER = {
            "logging": 1,
            "body_parsing": 2,
            "cors": 3,
            "authentication": 4,
            "custom": 5,
            "health": 6,
            "routing": 7,
        }
        return _ORDER[self.value]


class Stage(ABC):
    """Base abstraction for all processing units in a pipeline."""

    category: ClassVar[StageCategory]

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def process(self, ctx: RequestContext) -> Outcome: ...

    async def on_response(self, ctx: RequestContext) -> None:
        """Observe the final response on its way out. Must not raise."""
