"""Advice text from a generative-language model, with local fallbacks.

The analytics engine does not depend on this module. Provider failures are
logged and turned into a friendly fallback message.
"""

import logging
from typing import Optional, Protocol

import google.generativeai as genai

from mintmind.config import DEFAULT_MODEL
from mintmind.domain import UserProfile

logger = logging.getLogger(__name__)

ADVICE_FALLBACK = "I'm having trouble right now. Please try again soon!"
BUDGET_ADVICE_FALLBACK = "Unable to generate personalized advice right now."


class AdviceProvider(Protocol):
    def __call__(self, prompt: str) -> str:
        ...


class GeminiAdviceProvider:
    def __init__(self, api_key: Optional[str], model: str = DEFAULT_MODEL):
        if not api_key:
            raise ValueError("GEMINI_API_KEY is not set")
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model)

    def __call__(self, prompt: str) -> str:
        response = self.model.generate_content(prompt)
        return response.text


def _money(value: float) -> str:
    return f"{value:,.0f}"


def profile_context(profile: Optional[UserProfile]) -> str:
    if profile is None:
        return "User profile not available."
    return "\n".join([
        "User's Financial Profile:",
        f"- Monthly Income: {_money(profile.monthly_income)}",
        f"- Monthly Expenses: {_money(profile.monthly_expenses)}",
        f"- Travel Cost: {_money(profile.travel_cost)}",
        f"- Food/Snacks: {_money(profile.food_snacks)}",
        f"- Random Expenses: {_money(profile.random_expenses)}",
        f"- SIP Goal: {_money(profile.sip_goal)}",
        f"- Risk Level: {profile.risk_level.value}",
        f"- Monthly Surplus: {_money(profile.monthly_surplus)}",
        f"- Available to Invest: {_money(profile.planned_savings)}",
    ])


def build_advice_prompt(user_message: str, profile: Optional[UserProfile]) -> str:
    return f"""
You are MintMind AI, a friendly and knowledgeable financial advisor specializing in Indian personal finance, budgeting, SIP, EMI calculations, and wealth planning.

Your role:
- Provide clear, actionable financial advice
- Use Indian context and rupee amounts
- Explain calculations step-by-step
- Keep the tone encouraging and supportive
- Max 300 words

{profile_context(profile)}

User query: {user_message}
"""


def build_budget_advice_prompt(profile: UserProfile) -> str:
    return f"""
Act as a financial advisor. Analyze the profile and give personalized budgeting guidance:

{profile_context(profile)}

Provide:
1) Short assessment of financial health
2) Areas to optimize
3) Recommended SIP amount considering surplus + risk level
4) One practical improvement tip

Max: 250 words. Tone: supportive and clear.
"""


def get_financial_advice(
    user_message: str, profile: Optional[UserProfile], provider: AdviceProvider
) -> str:
    try:
        return provider(build_advice_prompt(user_message, profile))
    except Exception as e:
        logger.error("advice generation error: %s", e)
        return ADVICE_FALLBACK


def get_personalized_budget_advice(profile: UserProfile, provider: AdviceProvider) -> str:
    try:
        return provider(build_budget_advice_prompt(profile))
    except Exception as e:
        logger.error("budget advice generation error: %s", e)
        return BUDGET_ADVICE_FALLBACK
