"""Rule table inspection and reload endpoints."""

from fastapi import APIRouter, status

from payroll_audit.api.dependencies import RulesProvider
from payroll_audit.api.schemas import ErrorResponse, RuleTableSummary
from payroll_audit.calculators.rules import RuleTableProvider

router = APIRouter(prefix="/rules", tags=["rules"])


def _summary(provider: RuleTableProvider) -> RuleTableSummary:
    table = provider.get()
    return RuleTableSummary(
        social_security_percent=table.social_security_percent,
        income_tax_slabs=len(table.income_tax_slabs),
        professional_tax_locations=sorted(table.professional_tax),
        coverage_gaps={
            section: [[start, end] for start, end in gaps]
            for section, gaps in table.coverage_report().items()
        },
        loaded_at=provider.loaded_at,
    )


@router.get("", response_model=RuleTableSummary)
async def get_rules_summary(provider: RulesProvider) -> RuleTableSummary:
    """Describe the active rule table."""
    return _summary(provider)


@router.post(
    "/reload",
    response_model=RuleTableSummary,
    status_code=status.HTTP_200_OK,
    responses={500: {"model": ErrorResponse}},
)
async def reload_rules(provider: RulesProvider) -> RuleTableSummary:
    """Re-read the rule file and swap it in. The old table stays on failure."""
    provider.reload()
    return _summary(provider)
