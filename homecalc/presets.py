"""Default 2025 policy tables. All money figures are in 만원 (10,000 KRW)."""

DISCLAIMER = (
    "This calculator produces estimates for reference only. Lending limits, interest rates and tax "
    "relief follow the policy tables bundled with the tool and may have changed; confirm final figures "
    "with a lender. First-time buyer relief applies only after its eligibility requirements are verified, "
    "and DSR/DTI practice differs between financial institutions."
)

REGION_PRESETS = {
    "seoul": {
        "name": "Seoul (speculation-overheated district)",
        "regulated": True,
        "mortgage_cap": 60000,
        "ltv_first_time": 0.80,
        "ltv_standard": 0.50,
        "stress_test_rate": 0.03,
        "details": "Speculation-overheated district. First-time buyers get 80% LTV up to a 6억 mortgage; others 50%.",
    },
    "gyeonggi": {
        "name": "Gyeonggi (adjustment area)",
        "regulated": True,
        "mortgage_cap": 60000,
        "ltv_first_time": 0.80,
        "ltv_standard": 0.70,
        "stress_test_rate": 0.03,
        "details": "Adjustment area. Mortgages capped at 6억; first-time buyers get 80% LTV.",
    },
    "metropolitan": {
        "name": "Metropolitan city (adjustment area)",
        "regulated": True,
        "mortgage_cap": 60000,
        "ltv_first_time": 0.80,
        "ltv_standard": 0.70,
        "stress_test_rate": 0.03,
        "details": "Adjustment area. Same mortgage cap as Seoul applies.",
    },
    "other": {
        "name": "Other regions (unregulated)",
        "regulated": False,
        # no statutory cap; sentinel keeps min() arithmetic finite
        "mortgage_cap": 999999,
        "ltv_first_time": 0.85,
        "ltv_standard": 0.80,
        "stress_test_rate": 0.015,
        "details": "Unregulated. Standard lending criteria apply.",
    },
}

# Marginal acquisition tax bands: 1% up to 6억, 2% up to 9억, 3% above.
TAX_BRACKETS = [{"up_to": 60000, "rate": 0.01}, {"up_to": 90000, "rate": 0.02}, {"up_to": None, "rate": 0.03}]
EDUCATION_SURTAX_RATE = 0.10
FIRST_TIME_EXEMPTION_CAP = 200
REGISTRATION_FEE_RATE = 0.004

DSR_RATIO = 0.40
FIRST_TIME_INCOME_LIMITS = {"single": 5000, "joint": 7000}

CREDIT_TIERS = [
    {"min_score": 0, "cap": 5000, "label": "base"},
    {"min_score": 700, "cap": 6000, "label": "fair"},
    {"min_score": 750, "cap": 8000, "label": "good"},
    {"min_score": 800, "cap": 10000, "label": "excellent"},
    {"min_score": 900, "cap": 15000, "label": "top"},
]
CREDIT_LOAN_TERMS = {"income_multiplier": 0.5, "annual_rate": 0.05, "term_years": 10}

GOVERNMENT_LOAN_CATALOG = [
    {
        "name": "디딤돌 대출 (생애최초)",
        "income_limit": "Single 6,000 / Couple 7,000",
        "price_limit": "Up to 50,000",
        "ltv": 0.80,
        "interest_rate": "2.65%~3.95%",
        "requires_first_time": True,
        "max_income_single": 6000,
        "max_income_joint": 7000,
        "max_price": 50000,
    },
    {
        "name": "보금자리론",
        "income_limit": "No limit",
        "price_limit": "Up to 60,000",
        "ltv": 0.70,
        "interest_rate": "3.8%",
        "max_price": 60000,
    },
    {
        "name": "일반 주담대",
        "income_limit": "No limit",
        "price_limit": "No limit",
        "ltv": 0.70,
        "interest_rate": "4.0%~6.0%",
    },
]

SOLVER_DEFAULTS = {"seed_price": 40000, "tolerance": 100, "max_iterations": 10}
PAYMENT_DEFAULTS = {"rate_spread": 0.005, "heavy_ratio": 0.30, "moderate_ratio": 0.20}
