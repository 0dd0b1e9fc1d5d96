import logging

import requests

from errors import UpstreamError

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT_TEMPLATE = (
    "You are a supportive teacher writing a short performance review for a student.\n"
    "Student name: {name}\n"
    "Marks (out of 100):\n"
    "{marks}\n"
    "In two or three short paragraphs, point out the student's strongest subjects, "
    "the subjects that need more attention, and give practical study suggestions. "
    "Keep the tone encouraging and address the student by name."
)


def build_feedback_prompt(student_name, marks):
    """marks: ordered mapping of subject -> mark."""
    lines = "\n".join(f"- {subject.title()}: {mark}" for subject, mark in marks.items())
    return PROMPT_TEMPLATE.format(name=student_name, marks=lines)


class FeedbackClient:
    """Sends a prompt to the Gemini generateContent endpoint, one call per request."""

    def __init__(self, api_key, model="gemini-2.0-flash", timeout=30.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def request_feedback(self, student_name, marks):
        prompt = build_feedback_prompt(student_name, marks)
        try:
            resp = requests.post(
                GEMINI_API_URL.format(model=self.model),
                params={"key": self.api_key},
                headers={"Content-Type": "application/json"},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Gemini request failed: %s", e)
            raise UpstreamError() from e

        if not resp.ok:
            logger.error("Gemini returned %s: %s", resp.status_code, resp.text[:200])
            raise UpstreamError()

        try:
            return resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("Unexpected Gemini response shape: %s", e)
            raise UpstreamError() from e
