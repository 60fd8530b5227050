from .advisor_agent import FinancialAdvisor
from .responses import CompletionResult, extract_completion

__all__ = ["FinancialAdvisor", "CompletionResult", "extract_completion"]
