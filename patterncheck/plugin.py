"""Host-facing interface of the pattern check plugin."""

from __future__ import annotations

import logging
from typing import Optional

from .config import PatternCheckConfig, load_config
from .contracts import ExecuteTaskRequest, PayloadHandlerRequest, PluginMetadata, Result
from .errors import UnimplementedCapabilityError, UnsupportedPlatformError
from .reporting import BaseStepReporter, get_reporter
from .resolver import JmesPathResolver, PathResolver
from .session import EvaluationSession

logger = logging.getLogger(__name__)


class PatternCheckPlugin:
    """Decides whether a flow execution proceeds based on its patterns.

    Callable directly from any host adapter; the plugin does not depend on a
    transport.
    """

    def __init__(
        self,
        reporter: Optional[BaseStepReporter] = None,
        resolver: Optional[PathResolver] = None,
        config: Optional[PatternCheckConfig] = None,
    ) -> None:
        self.config = config or load_config()
        self.reporter = reporter or get_reporter(config=self.config)
        self.resolver = resolver or JmesPathResolver()

    def check_platform(self, platform: Optional[str]) -> None:
        """Raise ``UnsupportedPlatformError`` unless ``platform`` is supported."""
        if platform is None:
            return
        if platform not in self.config.supported_platforms:
            logger.warning(f"Rejecting request for unsupported platform {platform!r}")
            raise UnsupportedPlatformError(
                f"Platform {platform!r} is not supported by this plugin",
                details={
                    "platform": platform,
                    "supported": list(self.config.supported_platforms),
                },
            )

    async def evaluate(self, request: ExecuteTaskRequest) -> Result:
        """Run the pattern check for one execution step."""
        self.check_platform(request.platform)

        session = EvaluationSession(
            execution_id=request.execution_id,
            step_id=request.step_id,
            patterns=request.flow.patterns,
            payload=request.payload,
            reporter=self.reporter,
            resolver=self.resolver,
            platform=request.platform,
            missing_as_empty=self.config.missing_as_empty,
        )
        return await session.run()

    async def handle_payload(self, request: PayloadHandlerRequest) -> Result:
        """Payload endpoints are not provided by this plugin."""
        raise UnimplementedCapabilityError(
            "Payload handling is not supported by this plugin",
            details={"endpoint": request.endpoint},
        )

    def describe(self) -> PluginMetadata:
        """Return the static plugin descriptor."""
        return PluginMetadata()
