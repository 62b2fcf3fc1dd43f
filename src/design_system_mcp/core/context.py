"""Application context for the design system MCP server."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config.settings import DesignSystemConfig
from ..services.extraction_service import ExtractionReport, ExtractionService

logger = logging.getLogger(__name__)


@dataclass
class DesignSystemContext:
    """Context for the design system MCP server.

    Holds the loaded configuration, the extraction service and the component
    catalogue built from it. The catalogue is extracted on first use and kept
    for the lifetime of the server process until refreshed.

    Attributes:
        config: Loaded design system configuration
        service: Extraction service used to build the catalogue
        report: Cached extraction report (None until first extraction)
    """

    config: DesignSystemConfig
    service: ExtractionService
    report: Optional[ExtractionReport] = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def get_report(self) -> ExtractionReport:
        """Return the cached catalogue, extracting it if necessary."""
        async with self._lock:
            if self.report is None:
                self.report = await self._extract()
            return self.report

    async def refresh(self) -> ExtractionReport:
        """Discard the cached catalogue and extract it again."""
        async with self._lock:
            self.report = await self._extract()
            return self.report

    async def _extract(self) -> ExtractionReport:
        logger.info(f"Extracting components from {self.config.root_directory}")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.service.extract)
