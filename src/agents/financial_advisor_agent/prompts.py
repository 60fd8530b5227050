"""Prompt template, reference data and canned replies for the financial advisor."""

PROMPT_TEMPLATE = (
    "You are a financial assistant designed for beginners. Your goal is to provide "
    "simple, accurate, and helpful advice about investing, budgeting, saving, and "
    "other financial topics. Use beginner-friendly language.\n"
    "\n"
    "If the user asks for investment suggestions, use the investment options to "
    "recommend specific products. If you don't have enough info, respond with your "
    "best financial advice based on the query.\n"
    "\n"
    "Conversation history: {history}\n"
    "User profile: {user_profile}\n"
    "Investment options: {investment_options}\n"
    "\n"
    "User input: {input}\n"
    "Answer:"
)

# name → product type, risk band, average annual return, minimum investment
INVESTMENT_OPTIONS = {
    "SBI Bluechip Fund": {
        "type": "Mutual Fund", "risk": "Medium", "avg_return": "10%", "min_investment": 5000,
    },
    "HDFC Small Cap Fund": {
        "type": "Mutual Fund", "risk": "High", "avg_return": "12%", "min_investment": 5000,
    },
    "NIFTY 50 Index Fund": {
        "type": "Mutual Fund", "risk": "Low", "avg_return": "8%", "min_investment": 1000,
    },
    "Axis Long Term Equity Fund": {
        "type": "Mutual Fund", "risk": "Medium", "avg_return": "11%", "min_investment": 5000,
    },
}

MISSING_CREDENTIAL_REPLY = (
    "I'm having trouble connecting to my knowledge base. Please try again later."
)

PROVIDER_ERROR_REPLY = (
    "I encountered an error while processing your request. Please try again later."
)

UNEXPECTED_FORMAT_REPLY = (
    "I received an unexpected response format. Please try asking your question again."
)
