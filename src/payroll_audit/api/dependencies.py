"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_audit.calculators.rules import ConfigurationError, RuleTable, RuleTableProvider
from payroll_audit.database import init_db
from payroll_audit.detection.config import DetectionConfig


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_rules_provider(request: Request) -> RuleTableProvider:
    """Rule table provider installed at startup."""
    provider = getattr(request.app.state, "rules_provider", None)
    if provider is None:
        raise ConfigurationError("Tax rules are not loaded")
    return provider


def get_rules(provider: Annotated[RuleTableProvider, Depends(get_rules_provider)]) -> RuleTable:
    """Snapshot of the current rule table for one request."""
    return provider.get()


def get_detection_config(request: Request) -> DetectionConfig:
    return request.app.state.detection_config


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Rules = Annotated[RuleTable, Depends(get_rules)]
RulesProvider = Annotated[RuleTableProvider, Depends(get_rules_provider)]
Detection = Annotated[DetectionConfig, Depends(get_detection_config)]
