"""LLM backend for NeuroSoma health education via the google-genai SDK."""

import logging
import os

from google import genai

logger = logging.getLogger(__name__)

MODEL = os.environ.get("NEUROSOMA_MODEL", "gemini-2.5-flash")


def get_client() -> genai.Client:
    """Create a Gemini client using the API key from environment."""
    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        raise ValueError("GEMINI_API_KEY not set in environment")
    return genai.Client(api_key=api_key)


def generate_text(
    prompt: str,
    system_instruction: str,
    client: genai.Client | None = None,
    temperature: float = 0.7,
    max_output_tokens: int = 2048,
) -> str:
    """Send a single prompt and return the raw response text.

    Raises google.genai errors on API failure. No retries.
    """
    client = client or get_client()
    response = client.models.generate_content(
        model=MODEL,
        contents=[
            genai.types.Content(
                role="user",
                parts=[genai.types.Part(text=prompt)],
            ),
        ],
        config=genai.types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        ),
    )
    return (response.text or "").strip()


def check_llm_health(client: genai.Client | None = None) -> bool:
    """Return True if the configured model is reachable."""
    try:
        client = client or get_client()
        client.models.get(model=MODEL)
    except Exception as e:
        logger.warning("LLM health check failed for %s: %s", MODEL, e)
        return False
    return True
