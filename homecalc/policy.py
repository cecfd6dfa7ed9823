"""Injectable policy configuration.

Regulatory figures change far more often than the arithmetic that consumes
them, so every constant the engine reads lives on :class:`PolicyConfig`.
Defaults mirror :mod:`homecalc.presets`; a YAML document can override any
subset of them through :func:`load_policy`.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from . import presets
from .errors import PolicyError
from .models import Region


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class RegionRule(_Frozen):
    name: str
    regulated: bool
    mortgage_cap: float = Field(gt=0)
    ltv_first_time: float = Field(gt=0, lt=1)
    ltv_standard: float = Field(gt=0, lt=1)
    stress_test_rate: float = Field(ge=0)
    details: str = ""

    def ltv_for(self, first_time: bool) -> float:
        return self.ltv_first_time if first_time else self.ltv_standard


class TaxBracket(_Frozen):
    up_to: Optional[float] = Field(default=None, gt=0)
    rate: float = Field(ge=0, lt=1)


class AcquisitionTaxPolicy(_Frozen):
    brackets: List[TaxBracket] = Field(
        default_factory=lambda: [TaxBracket(**b) for b in presets.TAX_BRACKETS]
    )
    education_surtax_rate: float = Field(default=presets.EDUCATION_SURTAX_RATE, ge=0)
    first_time_exemption_cap: float = Field(default=presets.FIRST_TIME_EXEMPTION_CAP, ge=0)
    exemption_order: Literal["after_surtax", "before_surtax"] = "after_surtax"

    @model_validator(mode="after")
    def _check_brackets(self) -> "AcquisitionTaxPolicy":
        if not self.brackets:
            raise ValueError("at least one tax bracket is required")
        if self.brackets[-1].up_to is not None:
            raise ValueError("the last tax bracket must be open-ended (up_to: null)")
        bounds = [b.up_to for b in self.brackets[:-1]]
        if any(b is None for b in bounds):
            raise ValueError("only the last tax bracket may be open-ended")
        if bounds != sorted(bounds) or len(set(bounds)) != len(bounds):
            raise ValueError("tax bracket bounds must be strictly ascending")
        return self


class DsrPolicy(_Frozen):
    ratio: float = Field(default=presets.DSR_RATIO, gt=0, le=1)
    # None binds the reference rate to the caller's mortgage rate.
    reference_rate: Optional[float] = Field(default=None, ge=0)


class FirstTimeBuyerPolicy(_Frozen):
    max_income_single: float = Field(default=presets.FIRST_TIME_INCOME_LIMITS["single"], ge=0)
    max_income_joint: float = Field(default=presets.FIRST_TIME_INCOME_LIMITS["joint"], ge=0)


class CreditTier(_Frozen):
    min_score: int = Field(ge=0)
    cap: float = Field(ge=0)
    label: str


class CreditLoanPolicy(_Frozen):
    model: Literal["tiered", "income_only"] = "tiered"
    income_multiplier: float = Field(default=presets.CREDIT_LOAN_TERMS["income_multiplier"], ge=0)
    tiers: List[CreditTier] = Field(
        default_factory=lambda: [CreditTier(**t) for t in presets.CREDIT_TIERS]
    )
    annual_rate: float = Field(default=presets.CREDIT_LOAN_TERMS["annual_rate"], ge=0)
    term_years: int = Field(default=presets.CREDIT_LOAN_TERMS["term_years"], gt=0)

    @model_validator(mode="after")
    def _check_tiers(self) -> "CreditLoanPolicy":
        if self.model == "tiered" and not self.tiers:
            raise ValueError("the tiered credit model needs at least one tier")
        scores = [t.min_score for t in self.tiers]
        if scores != sorted(scores):
            raise ValueError("credit tiers must be ordered by min_score")
        return self


class GovernmentLoanRule(_Frozen):
    name: str
    income_limit: str
    price_limit: str
    ltv: float = Field(gt=0, lt=1)
    interest_rate: str
    requires_first_time: bool = False
    max_income_single: Optional[float] = None
    max_income_joint: Optional[float] = None
    max_price: Optional[float] = None


class SolverPolicy(_Frozen):
    seed_price: float = Field(default=presets.SOLVER_DEFAULTS["seed_price"], ge=0)
    tolerance: float = Field(default=presets.SOLVER_DEFAULTS["tolerance"], gt=0)
    max_iterations: int = Field(default=presets.SOLVER_DEFAULTS["max_iterations"], gt=0)
    strict: bool = False


class PaymentPolicy(_Frozen):
    rate_spread: float = Field(default=presets.PAYMENT_DEFAULTS["rate_spread"], ge=0)
    heavy_ratio: float = Field(default=presets.PAYMENT_DEFAULTS["heavy_ratio"], gt=0)
    moderate_ratio: float = Field(default=presets.PAYMENT_DEFAULTS["moderate_ratio"], gt=0)


def _default_regions() -> Dict[Region, RegionRule]:
    return {Region(code): RegionRule(**rule) for code, rule in presets.REGION_PRESETS.items()}


def _default_catalog() -> List[GovernmentLoanRule]:
    return [GovernmentLoanRule(**p) for p in presets.GOVERNMENT_LOAN_CATALOG]


class PolicyConfig(_Frozen):
    """Every regulatory and product parameter the engine consumes."""

    version: str = "2025"
    regions: Dict[Region, RegionRule] = Field(default_factory=_default_regions)
    tax: AcquisitionTaxPolicy = Field(default_factory=AcquisitionTaxPolicy)
    registration_fee_rate: float = Field(default=presets.REGISTRATION_FEE_RATE, ge=0, lt=1)
    dsr: DsrPolicy = Field(default_factory=DsrPolicy)
    first_time: FirstTimeBuyerPolicy = Field(default_factory=FirstTimeBuyerPolicy)
    credit: CreditLoanPolicy = Field(default_factory=CreditLoanPolicy)
    government_loans: List[GovernmentLoanRule] = Field(default_factory=_default_catalog)
    solver: SolverPolicy = Field(default_factory=SolverPolicy)
    payment: PaymentPolicy = Field(default_factory=PaymentPolicy)
    disclaimer: str = presets.DISCLAIMER

    @model_validator(mode="after")
    def _check_regions(self) -> "PolicyConfig":
        missing = [r.value for r in Region if r not in self.regions]
        if missing:
            raise ValueError(f"policy is missing region rules for: {', '.join(missing)}")
        return self


DEFAULT_POLICY = PolicyConfig()


def load_policy(path: Union[str, Path]) -> PolicyConfig:
    """Read a YAML policy document, keeping defaults for omitted sections."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise PolicyError(f"Cannot read policy file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise PolicyError(f"Policy file {path} must contain a mapping at the top level")
    if "regions" in data:
        merged = {code: dict(rule) for code, rule in presets.REGION_PRESETS.items()}
        overrides = data["regions"] or {}
        if not isinstance(overrides, dict):
            raise PolicyError(f"Policy file {path}: 'regions' must be a mapping of region codes")
        for code, rule in overrides.items():
            if rule is not None and not isinstance(rule, dict):
                raise PolicyError(f"Policy file {path}: region '{code}' must be a mapping")
            merged.setdefault(code, {}).update(rule or {})
        data = {**data, "regions": merged}
    try:
        return PolicyConfig.model_validate(data)
    except ValidationError as exc:
        raise PolicyError(f"Invalid policy file {path}: {exc}") from exc
