"""Types for the offer diagnostic pipeline."""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Input domain
# =============================================================================


class OfferType(str, Enum):
    DEMAND_CREATION = "demand_creation"
    DEMAND_CAPTURE = "demand_capture"
    OUTBOUND_SALES_ENABLEMENT = "outbound_sales_enablement"
    RETENTION_MONETIZATION = "retention_monetization"
    OPERATIONAL_ENABLEMENT = "operational_enablement"


class Promise(str, Enum):
    TOP_OF_FUNNEL_VOLUME = "top_of_funnel_volume"
    MID_FUNNEL_ENGAGEMENT = "mid_funnel_engagement"
    TOP_LINE_REVENUE = "top_line_revenue"
    EFFICIENCY_COST_SAVINGS = "efficiency_cost_savings"
    OPS_COMPLIANCE_OUTCOMES = "ops_compliance_outcomes"
    BRAND_AWARENESS_ONLY = "brand_awareness_only"
    ORGANIC_GROWTH_ONLY = "organic_growth_only"


class IcpIndustry(str, Enum):
    LOCAL_SERVICES = "local_services"
    PROFESSIONAL_SERVICES = "professional_services"
    B2B_SERVICE_AGENCY = "b2b_service_agency"
    DTC_ECOMMERCE = "dtc_ecommerce"
    SAAS_TECH = "saas_tech"


class IcpSize(str, Enum):
    SOLO_FOUNDER = "solo_founder"
    EMPLOYEES_1_5 = "1_5_employees"
    EMPLOYEES_6_20 = "6_20_employees"
    EMPLOYEES_21_100 = "21_100_employees"
    EMPLOYEES_100_PLUS = "100_plus_employees"


class IcpMaturity(str, Enum):
    PRE_REVENUE = "pre_revenue"
    EARLY_TRACTION = "early_traction"
    SCALING = "scaling"
    MATURE = "mature"
    ENTERPRISE = "enterprise"


class IcpSpecificity(str, Enum):
    BROAD = "broad"
    NARROW = "narrow"
    EXACT = "exact"


class PricingStructure(str, Enum):
    RECURRING = "recurring"
    ONE_TIME = "one_time"
    PERFORMANCE_ONLY = "performance_only"
    USAGE_BASED = "usage_based"
    HYBRID = "hybrid"


class RecurringPriceTier(str, Enum):
    UNDER_150 = "under_150"
    FROM_150_TO_500 = "150_500"
    FROM_500_TO_2K = "500_2k"
    FROM_2K_TO_5K = "2k_5k"
    OVER_5K = "5k_plus"


class OneTimePriceTier(str, Enum):
    UNDER_3K = "under_3k"
    FROM_3K_TO_10K = "3k_10k"
    OVER_10K = "10k_plus"


class UsageOutputType(str, Enum):
    LEAD_BASED = "lead_based"
    CONVERSION_BASED = "conversion_based"
    TASK_BASED = "task_based"


class UsageVolumeTier(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class PerformanceBasis(str, Enum):
    PER_APPOINTMENT = "per_appointment"
    PER_OPPORTUNITY = "per_opportunity"
    PER_CLOSED_DEAL = "per_closed_deal"
    PERCENT_REVENUE = "percent_revenue"
    PERCENT_PROFIT = "percent_profit"
    PERCENT_AD_SPEND = "percent_ad_spend"


class PerformanceCompTier(str, Enum):
    UNDER_10_PERCENT = "under_10_percent"
    FROM_10_TO_20_PERCENT = "10_20_percent"
    FROM_20_TO_30_PERCENT = "20_30_percent"
    OVER_30_PERCENT = "over_30_percent"
    UNDER_100_UNIT = "under_100_unit"
    FROM_100_TO_250_UNIT = "100_250_unit"
    FROM_250_TO_500_UNIT = "250_500_unit"
    OVER_500_UNIT = "over_500_unit"


class RiskModel(str, Enum):
    NO_GUARANTEE = "no_guarantee"
    CONDITIONAL_GUARANTEE = "conditional_guarantee"
    FULL_GUARANTEE = "full_guarantee"
    PERFORMANCE_ONLY = "performance_only"
    PAY_AFTER_RESULTS = "pay_after_results"


class FulfillmentModel(str, Enum):
    CUSTOM_DFY = "custom_dfy"
    PACKAGE_BASED = "package_based"
    COACHING_ADVISORY = "coaching_advisory"
    SOFTWARE_PLATFORM = "software_platform"
    STAFFING_PLACEMENT = "staffing_placement"


class ProofLevel(str, Enum):
    NONE = "none"
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    CATEGORY_KILLER = "category_killer"


class OfferConfiguration(BaseModel):
    """Flat description of a sales offer. Every field is nullable until filled in."""

    model_config = ConfigDict(frozen=True)

    offer_type: OfferType | None = None
    promise: Promise | None = None
    icp_industry: IcpIndustry | None = None
    vertical_segment: str | None = Field(None, description="Free-text vertical, e.g. 'HVAC contractors'")
    icp_size: IcpSize | None = None
    icp_maturity: IcpMaturity | None = None
    icp_specificity: IcpSpecificity | None = None
    pricing_structure: PricingStructure | None = None
    recurring_price_tier: RecurringPriceTier | None = None
    one_time_price_tier: OneTimePriceTier | None = None
    usage_output_type: UsageOutputType | None = None
    usage_volume_tier: UsageVolumeTier | None = None
    hybrid_retainer_tier: RecurringPriceTier | None = None
    performance_basis: PerformanceBasis | None = None
    performance_comp_tier: PerformanceCompTier | None = None
    risk_model: RiskModel | None = None
    fulfillment: FulfillmentModel | None = None
    proof_level: ProofLevel | None = None


# =============================================================================
# Latent scoring, gates, bottleneck
# =============================================================================


class LatentKey(str, Enum):
    ECONOMIC_FEASIBILITY = "economic_feasibility"
    PROOF_TO_PROMISE = "proof_to_promise"
    FULFILLMENT_SCALABILITY = "fulfillment_scalability"
    RISK_ALIGNMENT = "risk_alignment"
    CHANNEL_FIT = "channel_fit"
    ICP_SPECIFICITY = "icp_specificity"


class FrictionClass(str, Enum):
    """Economic friction tiers, ordered from least to most friction."""

    VERY_LOW = "very_low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


class LatentScoreSet(BaseModel):
    """Six 0-20 latent dimension scores."""

    economic_feasibility: int = Field(..., ge=0, le=20)
    proof_to_promise: int = Field(..., ge=0, le=20)
    fulfillment_scalability: int = Field(..., ge=0, le=20)
    risk_alignment: int = Field(..., ge=0, le=20)
    channel_fit: int = Field(..., ge=0, le=20)
    icp_specificity: int = Field(..., ge=0, le=20)
    friction_class: FrictionClass = Field(..., description="Economic friction tier behind the EFI score")
    channel_blocking: bool = Field(
        default=False, description="Promise is structurally incompatible with outbound"
    )

    def get(self, key: LatentKey) -> int:
        return getattr(self, key.value)

    def as_dict(self) -> dict[LatentKey, int]:
        return {key: self.get(key) for key in LatentKey}

    def total(self) -> int:
        return sum(self.as_dict().values())


class GateResult(BaseModel):
    """Outcome of hard and soft viability gates."""

    hard_gates: list[str] = Field(default_factory=list, description="Triggered hard gates, in declared order")
    failed_dimension: LatentKey | None = Field(
        None, description="Dimension of the first triggered hard gate"
    )
    soft_gates: list[str] = Field(default_factory=list)
    score_pressure: int = 0
    score_cap: int | None = None

    @property
    def passed(self) -> bool:
        return not self.hard_gates


class ReadinessLabel(str, Enum):
    WEAK = "Weak"
    MODERATE = "Moderate"
    STRONG = "Strong"


class BottleneckSeverity(str, Enum):
    BLOCKING = "blocking"
    CONSTRAINING = "constraining"


class Bottleneck(BaseModel):
    dimension: LatentKey
    label: str
    severity: BottleneckSeverity
    explanation: str
    actionable: bool = Field(
        True, description="False when no dimension is meaningfully worse than its peers"
    )


# =============================================================================
# Diagnostic dimensions, violations, causes
# =============================================================================


class DiagnosticDimensions(BaseModel):
    """Simpler per-dimension scores used by the violation checks."""

    pain_urgency: int = Field(..., ge=0, le=25)
    buying_power: int = Field(..., ge=0, le=20)
    pricing_fit: int = Field(..., ge=0, le=20)
    execution_feasibility: int = Field(..., ge=0, le=15)
    risk_alignment: int = Field(..., ge=0, le=10)
    outbound_fit: int = Field(..., ge=0, le=15)


class ViolationFlags(BaseModel):
    outbound: bool
    execution: bool
    pricing: bool
    buying_power: bool
    risk: bool
    urgency: bool


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FixCategory(str, Enum):
    ICP_SHIFT = "icp_shift"
    PROMISE_SHIFT = "promise_shift"
    FULFILLMENT_SHIFT = "fulfillment_shift"
    PRICING_SHIFT = "pricing_shift"
    RISK_SHIFT = "risk_shift"
    POSITIONING_SHIFT = "positioning_shift"
    FOUNDER_PSYCHOLOGY_CHECK = "founder_psychology_check"


class Violation(BaseModel):
    id: str
    rule: str
    severity: Severity
    recommendation: str | None = Field(
        None, description="None once every advice sentence is screened out"
    )
    fix_category: FixCategory


class Cause(BaseModel):
    id: str
    label: str
    severity: int = Field(..., ge=1)
    category: FixCategory
    fixes: list[str] = Field(default_factory=list)
    primary_group: str | None = None
    secondary_groups: list[str] = Field(default_factory=list)


class PrioritizedFix(BaseModel):
    text: str
    cause_id: str
    cause_label: str
    score: int


# =============================================================================
# Context, problems, context-aware fixes
# =============================================================================


class ContextModifiers(BaseModel):
    cash_flow: Literal["Low", "Moderate", "High"]
    pain_type: Literal["Revenue", "Brand", "Retention", "Efficiency"]
    maturity: Literal["Pre", "Early", "Scaling", "Mature"]
    fulfillment: Literal["Labor", "Hybrid", "Automation", "Staffing"]
    mechanism_strength: Literal["Weak", "Medium", "Strong", "VeryStrong"]


class InferredContext(BaseModel):
    vertical_capital_intensity: Literal["low", "medium", "variable"]
    sales_motion: Literal["sales-led", "project-led", "conversion-led", "product-led"]
    market_awareness: Literal["problem-unaware", "problem-aware", "solution-aware", "vendor-aware"]
    proof_expectation: Literal["low", "medium", "high"]
    budget_expectation: Literal["low", "medium", "high"]


class ProblemCategory(str, Enum):
    ICP_MISMATCH = "icp_mismatch"
    OFFER_TYPE_MISFIT = "offer_type_misfit"
    LOW_BUYING_POWER = "low_buying_power"
    PRICING_MISFIT = "pricing_misfit"
    RISK_MISALIGNMENT = "risk_misalignment"
    LOW_PAIN_URGENCY = "low_pain_urgency"
    FULFILLMENT_MISALIGNMENT = "fulfillment_misalignment"


class DetectedProblem(BaseModel):
    category: ProblemCategory
    label: str
    problem: str
    why_it_matters: str
    severity: int


Effort = Literal["Low", "Medium", "High"]
Impact = Literal["Low", "Medium", "High", "Very High"]


class ContextFix(BaseModel):
    """A routed, context-aware fix with its rendered instruction."""

    id: str
    category: FixCategory
    what_to_change: str
    how_to_change_it: str
    target_condition: str
    effort: Effort
    impact: Impact
    strategic_impact: int = Field(..., ge=1, le=10)
    feasibility: int = Field(..., ge=1, le=10)
    certainty: int
    source: str = Field(..., description="Problem category, 'risk' or 'fulfillment'")
    instruction: str


# =============================================================================
# Stabilization and output
# =============================================================================


class BlockReason(str, Enum):
    """Why a candidate recommendation was rejected."""

    ALREADY_SATISFIED = "already_satisfied"
    CHANNEL_SWITCH_BLOCKED = "channel_switch_blocked"
    PRICING_WITHIN_VIABLE_BAND = "pricing_within_viable_band"
    FULFILLMENT_ALREADY_PRODUCTIZED = "fulfillment_already_productized"
    LOCAL_OPTIMUM_STRUCTURAL_BLOCKED = "local_optimum_structural_blocked"
    SECOND_ORDER_INCONSISTENT = "second_order_inconsistent"


class BlockedCandidate(BaseModel):
    id: str
    kind: Literal["recommendation", "cause_fix", "context_fix", "violation_advice"]
    reason: BlockReason


class StructuredRecommendation(BaseModel):
    id: str
    category: FixCategory
    headline: str
    explanation: str
    action_steps: list[str] = Field(default_factory=list)
    desired_state: str


class TraceEvent(BaseModel):
    stage: str
    detail: dict[str, Any] = Field(default_factory=dict)


class EvaluationResult(BaseModel):
    """Complete output of one diagnostic evaluation."""

    rule_set_version: str
    alignment_score: int = Field(..., ge=0, le=100)
    readiness_label: ReadinessLabel
    ready: bool = Field(..., description="Outbound readiness: true iff no hard gate triggered")
    latent_scores: LatentScoreSet
    gates: GateResult
    bottleneck: Bottleneck
    is_at_local_optimum: bool
    is_optimization_level: bool
    dimensions: DiagnosticDimensions
    violations: list[Violation] = Field(default_factory=list)
    causes: list[Cause] = Field(default_factory=list)
    fixes: list[PrioritizedFix] = Field(default_factory=list)
    context_modifiers: ContextModifiers
    problems: list[DetectedProblem] = Field(default_factory=list)
    context_fixes: list[ContextFix] = Field(default_factory=list)
    recommendations: list[StructuredRecommendation] = Field(default_factory=list)
    recommendations_unavailable: bool = False
    blocked: list[BlockedCandidate] = Field(default_factory=list)
    trace: list[TraceEvent] = Field(default_factory=list)
