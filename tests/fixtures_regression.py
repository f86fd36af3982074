"""Regression fixtures for the live rule set (latent-v6).

Each case pins the full latent vector plus score, label, readiness and
bottleneck for one configuration. A rule change that moves any of these
must bump the rule set version and regenerate the fixtures.
"""

RULE_SET_VERSION = "latent-v6"

_BASE = {
    "offer_type": "demand_capture",
    "promise": "top_of_funnel_volume",
    "icp_industry": "b2b_service_agency",
    "vertical_segment": "Marketing agencies",
    "icp_size": "6_20_employees",
    "icp_maturity": "scaling",
    "icp_specificity": "narrow",
    "pricing_structure": "recurring",
    "recurring_price_tier": "500_2k",
    "risk_model": "conditional_guarantee",
    "fulfillment": "package_based",
    "proof_level": "strong",
}

REGRESSION_CASES = [
    {
        "name": "ready_agency_retainer",
        "configuration": _BASE,
        "latents": {
            "economic_feasibility": 11,
            "proof_to_promise": 20,
            "fulfillment_scalability": 16,
            "risk_alignment": 15,
            "channel_fit": 16,
            "icp_specificity": 14,
        },
        "alignment_score": 77,
        "readiness_label": "Strong",
        "ready": True,
        "bottleneck": "economic_feasibility",
        "actionable": True,
    },
    {
        # Moderate proof with a volume promise: one soft gate, price inside its band
        "name": "moderate_proof_volume_promise",
        "configuration": {**_BASE, "proof_level": "moderate"},
        "latents": {
            "economic_feasibility": 11,
            "proof_to_promise": 20,
            "fulfillment_scalability": 16,
            "risk_alignment": 15,
            "channel_fit": 16,
            "icp_specificity": 14,
        },
        "alignment_score": 72,
        "readiness_label": "Moderate",
        "ready": True,
        "bottleneck": "icp_specificity",
        "actionable": False,
    },
    {
        "name": "unprovable_brand_awareness",
        "configuration": {
            **_BASE,
            "offer_type": "demand_creation",
            "promise": "brand_awareness_only",
            "icp_industry": "local_services",
            "icp_size": "solo_founder",
            "icp_maturity": "pre_revenue",
            "pricing_structure": "performance_only",
            "recurring_price_tier": None,
            "performance_basis": "per_appointment",
            "performance_comp_tier": "under_100_unit",
            "risk_model": "pay_after_results",
            "fulfillment": "custom_dfy",
            "proof_level": "none",
        },
        "latents": {
            "economic_feasibility": 19,
            "proof_to_promise": 6,
            "fulfillment_scalability": 1,
            "risk_alignment": 5,
            "channel_fit": 6,
            "icp_specificity": 14,
        },
        # 51/120 is exactly 42.5, rounded half up
        "alignment_score": 43,
        "readiness_label": "Weak",
        "ready": False,
        "bottleneck": "proof_to_promise",
        "actionable": True,
    },
    {
        "name": "enterprise_software_local_optimum",
        "configuration": {
            **_BASE,
            "promise": "top_line_revenue",
            "icp_industry": "saas_tech",
            "vertical_segment": "B2B SaaS",
            "icp_size": "100_plus_employees",
            "icp_maturity": "enterprise",
            "icp_specificity": "exact",
            "recurring_price_tier": "5k_plus",
            "risk_model": "full_guarantee",
            "fulfillment": "software_platform",
            "proof_level": "category_killer",
        },
        "latents": {
            "economic_feasibility": 19,
            "proof_to_promise": 20,
            "fulfillment_scalability": 20,
            "risk_alignment": 10,
            "channel_fit": 16,
            "icp_specificity": 18,
        },
        "alignment_score": 86,
        "readiness_label": "Strong",
        "ready": True,
        "bottleneck": "risk_alignment",
        "actionable": True,
    },
]
