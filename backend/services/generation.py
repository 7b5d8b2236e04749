import openai
from openai import AsyncOpenAI

from config import get_settings
from errors import EmptyModelResponse, InputValidationError, ModelInvocationError
from logger import get_logger
from models import ExtractedText
from prompts import STUDY_MATERIALS_SYSTEM_PROMPT
from utils import truncate

log = get_logger(__name__)


def get_client() -> AsyncOpenAI:
    s = get_settings()
    return AsyncOpenAI(
        api_key=s.openai_api_key,
        base_url=s.openai_base_url or None,
        timeout=s.model_timeout,
        max_retries=0,
    )


async def complete(messages: list[dict], temperature: float, max_tokens: int) -> str:
    """Run one chat completion and return its text, failing on an empty reply."""
    client = get_client()
    try:
        response = await client.chat.completions.create(
            model=get_settings().chat_model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except openai.APIError as e:
        log.error("Model call failed: %s", e)
        raise ModelInvocationError("Failed to get a response from the AI", details=str(e))

    raw = ""
    if response.choices:
        raw = response.choices[0].message.content or ""
    if not raw.strip():
        raise EmptyModelResponse()
    return raw


async def generate_study_materials(extracted: ExtractedText) -> str:
    """
    Wrap extracted text in the study-materials instructions and ask the model
    once. Returns the raw model text; normalization happens elsewhere.
    """
    if not extracted.text.strip():
        raise InputValidationError("Content is required")

    content = truncate(extracted.text, get_settings().max_content_chars)
    log.info(
        "Generating study materials from %s input (%d chars)",
        extracted.source_kind.value,
        len(content),
    )

    raw = await complete(
        messages=[
            {"role": "system", "content": STUDY_MATERIALS_SYSTEM_PROMPT},
            {"role": "user", "content": content},
        ],
        temperature=0.4,
        max_tokens=8000,
    )
    log.info("Model returned %d chars", len(raw))
    return raw
