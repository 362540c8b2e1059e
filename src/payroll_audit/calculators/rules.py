"""Rule table parsing, validation and loading.

The rule table is loaded from a JSON document with structure:
{
    "social_security_percent": 0.12,
    "income_tax_slabs": [
        {"min": 0, "max": 250000, "rate": 0.0},
        {"min": 250000, "max": null, "rate": 0.10},
        ...
    ],
    "professional_tax": {
        "Mumbai": [{"min": 0, "max": 10000, "tax": 0}, ...],
        "default": [{"min": 0, "max": null, "tax": 0}]
    }
}

Slab bounds are inclusive on both ends. A null ``max`` means no upper limit.
When two slabs share a boundary value, the slab listed first wins.
"""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence, Union

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "default"
REQUIRED_SECTIONS = ("professional_tax", "income_tax_slabs", "social_security_percent")


class ConfigurationError(Exception):
    """Raised when the rule table is missing or malformed."""

    def __init__(self, message: str, section: str | None = None):
        self.section = section
        super().__init__(message)


@dataclass(frozen=True)
class IncomeTaxSlab:
    """Income tax slab; ``rate`` applies to the whole gross pay."""

    min_amount: Decimal
    max_amount: Decimal | None  # None = no upper limit
    rate: Decimal

    def contains(self, amount: Decimal) -> bool:
        if amount < self.min_amount:
            return False
        return self.max_amount is None or amount <= self.max_amount


@dataclass(frozen=True)
class ProfessionalTaxSlab:
    """Flat-amount slab keyed on gross pay."""

    min_amount: Decimal
    max_amount: Decimal | None
    tax: Decimal

    def contains(self, amount: Decimal) -> bool:
        if amount < self.min_amount:
            return False
        return self.max_amount is None or amount <= self.max_amount


Slab = Union[IncomeTaxSlab, ProfessionalTaxSlab]


def find_slab(amount: Decimal, slabs: Sequence[Slab]) -> Slab | None:
    """Return the first slab whose inclusive range contains ``amount``."""
    return next((slab for slab in slabs if slab.contains(amount)), None)


def coverage_gaps(slabs: Sequence[Slab]) -> list[tuple[Decimal, Decimal | None]]:
    """List the ranges of non-negative amounts no slab covers.

    Fractional amounts count: slabs ending at 10000 and starting at 10001
    leave the open range between them uncovered. Adjacent slabs should share
    the boundary value instead.

    Each gap is returned as ``(start, end)``; ``end`` is None when the gap is
    unbounded above.
    """
    gaps: list[tuple[Decimal, Decimal | None]] = []
    covered_to: Decimal | None = None  # highest covered amount so far

    for slab in sorted(slabs, key=lambda s: s.min_amount):
        if covered_to is None:
            if slab.min_amount > 0:
                gaps.append((Decimal("0"), slab.min_amount))
        elif slab.min_amount > covered_to:
            gaps.append((covered_to, slab.min_amount))

        if slab.max_amount is None:
            return gaps
        if covered_to is None or slab.max_amount > covered_to:
            covered_to = slab.max_amount

    gaps.append((covered_to if covered_to is not None else Decimal("0"), None))
    return gaps


def _number(value: Any, section: str, key: str) -> Decimal:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ConfigurationError(f"{section}: '{key}' must be a number", section)
    result = value if isinstance(value, Decimal) else Decimal(str(value))
    # json.load accepts NaN and Infinity
    if not result.is_finite():
        raise ConfigurationError(f"{section}: '{key}' must be a finite number", section)
    return result


def _parse_bounds(raw: Mapping[str, Any], section: str) -> tuple[Decimal, Decimal | None]:
    if not isinstance(raw, Mapping) or "min" not in raw:
        raise ConfigurationError(f"{section}: each slab needs a 'min' bound", section)
    min_amount = _number(raw["min"], section, "min")
    max_raw = raw.get("max")
    max_amount = None if max_raw is None else _number(max_raw, section, "max")
    if min_amount < 0:
        raise ConfigurationError(f"{section}: 'min' must be non-negative", section)
    if max_amount is not None and max_amount < min_amount:
        raise ConfigurationError(
            f"{section}: slab max {max_amount} is below min {min_amount}", section
        )
    return min_amount, max_amount


def _parse_income_slabs(raw: Any) -> tuple[IncomeTaxSlab, ...]:
    section = "income_tax_slabs"
    if not isinstance(raw, list):
        raise ConfigurationError(f"{section} must be a list", section)
    slabs = []
    for item in raw:
        min_amount, max_amount = _parse_bounds(item, section)
        if "rate" not in item:
            raise ConfigurationError(f"{section}: each slab needs a 'rate'", section)
        rate = _number(item["rate"], section, "rate")
        if rate < 0:
            raise ConfigurationError(f"{section}: 'rate' must be non-negative", section)
        slabs.append(IncomeTaxSlab(min_amount, max_amount, rate))
    return tuple(slabs)


def _parse_professional_slabs(location: str, raw: Any) -> tuple[ProfessionalTaxSlab, ...]:
    section = f"professional_tax.{location}"
    if not isinstance(raw, list):
        raise ConfigurationError(f"{section} must be a list", "professional_tax")
    slabs = []
    for item in raw:
        min_amount, max_amount = _parse_bounds(item, section)
        if "tax" not in item:
            raise ConfigurationError(f"{section}: each slab needs a 'tax'", "professional_tax")
        tax = _number(item["tax"], section, "tax")
        if tax < 0:
            raise ConfigurationError(f"{section}: 'tax' must be non-negative", "professional_tax")
        slabs.append(ProfessionalTaxSlab(min_amount, max_amount, tax))
    return tuple(slabs)


@dataclass(frozen=True)
class RuleTable:
    """Immutable deduction rules shared by every calculation."""

    social_security_percent: Decimal
    income_tax_slabs: tuple[IncomeTaxSlab, ...]
    professional_tax: Mapping[str, tuple[ProfessionalTaxSlab, ...]]

    def __post_init__(self) -> None:
        if DEFAULT_LOCATION not in self.professional_tax:
            raise ConfigurationError(
                "professional_tax must define a 'default' entry", "professional_tax"
            )
        ssp = self.social_security_percent
        if not ssp.is_finite() or not Decimal("0") <= ssp <= Decimal("1"):
            raise ConfigurationError(
                "social_security_percent must be between 0 and 1",
                "social_security_percent",
            )
        if not isinstance(self.professional_tax, MappingProxyType):
            object.__setattr__(
                self, "professional_tax", MappingProxyType(dict(self.professional_tax))
            )

    def professional_tax_slabs(self, location: str | None) -> tuple[ProfessionalTaxSlab, ...]:
        """Exact location table if configured, otherwise the default table."""
        if location is not None and location in self.professional_tax:
            return self.professional_tax[location]
        return self.professional_tax[DEFAULT_LOCATION]

    def coverage_report(self) -> dict[str, list[tuple[Decimal, Decimal | None]]]:
        """Uncovered gross-pay ranges per slab table (empty tables omitted)."""
        report: dict[str, list[tuple[Decimal, Decimal | None]]] = {}
        gaps = coverage_gaps(self.income_tax_slabs)
        if gaps:
            report["income_tax_slabs"] = gaps
        for location, slabs in self.professional_tax.items():
            gaps = coverage_gaps(slabs)
            if gaps:
                report[f"professional_tax.{location}"] = gaps
        return report

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> RuleTable:
        """Parse a decoded rule document.

        Raises:
            ConfigurationError: If a required section is missing or malformed
        """
        if not isinstance(payload, Mapping):
            raise ConfigurationError("Rule table must be a JSON object")

        for section in REQUIRED_SECTIONS:
            if payload.get(section) is None:
                raise ConfigurationError(f"Rule table is missing '{section}'", section)

        professional = payload["professional_tax"]
        if not isinstance(professional, Mapping):
            raise ConfigurationError("professional_tax must be an object", "professional_tax")

        return cls(
            social_security_percent=_number(
                payload["social_security_percent"],
                "social_security_percent",
                "social_security_percent",
            ),
            income_tax_slabs=_parse_income_slabs(payload["income_tax_slabs"]),
            professional_tax={
                location: _parse_professional_slabs(location, slabs)
                for location, slabs in professional.items()
            },
        )


def load_rule_table(path: str | Path) -> RuleTable:
    """Load and validate a rule table from a JSON file.

    Coverage gaps are legal (an uncovered amount is taxed at zero) but are
    logged so a misconfigured table does not go unnoticed.
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as fh:
            payload = json.load(fh, parse_float=Decimal)
    except OSError as e:
        raise ConfigurationError(f"Cannot read rule table {path}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Rule table {path} is not valid JSON: {e}")

    table = RuleTable.from_payload(payload)

    for section, gaps in table.coverage_report().items():
        logger.warning("Rule table %s leaves %s uncovered (taxed at zero)", section, gaps)
    logger.info(
        "Loaded rule table from %s (%d income slabs, %d professional tax tables)",
        path,
        len(table.income_tax_slabs),
        len(table.professional_tax),
    )
    return table


class RuleTableProvider:
    """Holds the process-wide rule table and swaps it atomically on reload.

    Readers call ``get()`` once per calculation and keep the returned table;
    a reload never mutates a table another caller already holds.
    """

    def __init__(self, path: str | Path, table: RuleTable | None = None):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._table = table if table is not None else load_rule_table(self.path)
        self.loaded_at = datetime.now(timezone.utc)

    def get(self) -> RuleTable:
        return self._table

    def reload(self) -> RuleTable:
        """Parse the rule file again and swap it in.

        On failure the current table stays in place and the error propagates.
        """
        with self._lock:
            table = load_rule_table(self.path)
            self._table = table
            self.loaded_at = datetime.now(timezone.utc)
        logger.info("Rule table swapped from %s", self.path)
        return table
