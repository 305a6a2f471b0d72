import pytest

from mintmind.advice import (
    ADVICE_FALLBACK,
    BUDGET_ADVICE_FALLBACK,
    GeminiAdviceProvider,
    get_financial_advice,
    get_personalized_budget_advice,
    profile_context,
)
from mintmind.domain import RiskLevel, UserProfile


class FakeProvider:
    def __init__(self, reply="Save more."):
        self.reply = reply
        self.prompts = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.reply


def failing_provider(prompt: str) -> str:
    raise RuntimeError("quota exceeded")


def test_profile_context():
    profile = UserProfile(monthly_income=85000, monthly_expenses=40000, risk_level=RiskLevel.LOW)
    text = profile_context(profile)
    assert "Monthly Income: 85,000" in text
    assert "Monthly Surplus: 45,000" in text
    assert "Risk Level: low" in text
    assert profile_context(None) == "User profile not available."


def test_advice_prompt_carries_question_and_profile():
    provider = FakeProvider()
    reply = get_financial_advice("How much SIP?", UserProfile(monthly_income=1000), provider)
    assert reply == "Save more."
    assert "How much SIP?" in provider.prompts[0]
    assert "Monthly Income: 1,000" in provider.prompts[0]


def test_budget_advice_prompt():
    provider = FakeProvider("Looks healthy.")
    assert get_personalized_budget_advice(UserProfile(), provider) == "Looks healthy."
    assert "Recommended SIP amount" in provider.prompts[0]


def test_provider_errors_become_fallbacks():
    assert get_financial_advice("hi", None, failing_provider) == ADVICE_FALLBACK
    assert get_personalized_budget_advice(UserProfile(), failing_provider) == BUDGET_ADVICE_FALLBACK


def test_gemini_provider_requires_key():
    with pytest.raises(ValueError, match="GEMINI_API_KEY"):
        GeminiAdviceProvider(None)
