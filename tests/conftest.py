"""Pytest configuration and fixtures."""

import os

import pytest

from offer_diagnostic.core.diagnostic.types import (
    FulfillmentModel,
    IcpIndustry,
    IcpMaturity,
    IcpSize,
    IcpSpecificity,
    OfferConfiguration,
    OfferType,
    PerformanceBasis,
    PerformanceCompTier,
    PricingStructure,
    ProofLevel,
    Promise,
    RecurringPriceTier,
    RiskModel,
)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["OFFER_DIAGNOSTIC_ENV"] = "test"
    os.environ["ANTHROPIC_API_KEY"] = "test-key"


# A complete, outbound-ready offer: scores 77 (Strong), bottleneck is EFI
BASE_CONFIG = OfferConfiguration(
    offer_type=OfferType.DEMAND_CAPTURE,
    promise=Promise.TOP_OF_FUNNEL_VOLUME,
    icp_industry=IcpIndustry.B2B_SERVICE_AGENCY,
    vertical_segment="Marketing agencies",
    icp_size=IcpSize.EMPLOYEES_6_20,
    icp_maturity=IcpMaturity.SCALING,
    icp_specificity=IcpSpecificity.NARROW,
    pricing_structure=PricingStructure.RECURRING,
    recurring_price_tier=RecurringPriceTier.FROM_500_TO_2K,
    risk_model=RiskModel.CONDITIONAL_GUARANTEE,
    fulfillment=FulfillmentModel.PACKAGE_BASED,
    proof_level=ProofLevel.STRONG,
)


@pytest.fixture
def base_config() -> OfferConfiguration:
    return BASE_CONFIG


@pytest.fixture
def make_config():
    """Build a configuration from the base offer with field overrides."""

    def _make(**overrides) -> OfferConfiguration:
        return BASE_CONFIG.model_copy(update=overrides)

    return _make


@pytest.fixture
def scenario_a_config(make_config) -> OfferConfiguration:
    """Cheap to sell but unprovable and untriggerable through outbound."""
    return make_config(
        offer_type=OfferType.DEMAND_CREATION,
        promise=Promise.BRAND_AWARENESS_ONLY,
        icp_industry=IcpIndustry.LOCAL_SERVICES,
        icp_size=IcpSize.SOLO_FOUNDER,
        icp_maturity=IcpMaturity.PRE_REVENUE,
        pricing_structure=PricingStructure.PERFORMANCE_ONLY,
        recurring_price_tier=None,
        performance_basis=PerformanceBasis.PER_APPOINTMENT,
        performance_comp_tier=PerformanceCompTier.UNDER_100_UNIT,
        risk_model=RiskModel.PAY_AFTER_RESULTS,
        fulfillment=FulfillmentModel.CUSTOM_DFY,
        proof_level=ProofLevel.NONE,
    )


@pytest.fixture
def scenario_b_config(make_config) -> OfferConfiguration:
    """Enterprise buyers, category-killer proof, software delivery: a local optimum."""
    return make_config(
        promise=Promise.TOP_LINE_REVENUE,
        icp_industry=IcpIndustry.SAAS_TECH,
        vertical_segment="B2B SaaS",
        icp_size=IcpSize.EMPLOYEES_100_PLUS,
        icp_maturity=IcpMaturity.ENTERPRISE,
        icp_specificity=IcpSpecificity.EXACT,
        recurring_price_tier=RecurringPriceTier.OVER_5K,
        risk_model=RiskModel.FULL_GUARANTEE,
        fulfillment=FulfillmentModel.SOFTWARE_PLATFORM,
        proof_level=ProofLevel.CATEGORY_KILLER,
    )
