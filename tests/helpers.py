"""Shared fixtures for backend tests."""
import json
from unittest import mock

EXTRACTION_BODY = json.dumps({
    "transactions": [
        {
            "date": "05/01/2025",
            "description": "SUPERMARKET PURCHASE XYZ",
            "amount": -200.0,
            "suggested_category": "Groceries",
        }
    ],
    "balance_data": {
        "opening_balance": 1200.0,
        "closing_balance": 1000.0,
        "balance_confidence": 95,
        "balance_extraction_notes": "Clearly labelled",
    },
})

PAGE_TEXT = (
    "Account No: 123456789012\n"
    "Opening Balance 1,200.00\n"
    "05/01/2025 SUPERMARKET PURCHASE XYZ 200.00 Dr 1,000.00\n"
)


def fake_response(status_code=200, body=None, text=""):
    """A stand-in for requests.Response."""
    response = mock.Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = "OK" if status_code < 400 else "Error"
    response.text = text
    if body is None:
        response.json.side_effect = ValueError("No JSON")
    else:
        response.json.return_value = body
    return response


def chat_body(content, prompt_tokens=120, completion_tokens=40):
    return {
        "choices": [{"message": {"role": "assistant", "content": content}}],
        "usage": {"prompt_tokens": prompt_tokens, "completion_tokens": completion_tokens},
    }


def error_body(message):
    return {"error": {"message": message}}
