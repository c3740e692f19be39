import logging
import re

import httpx

from app.config import settings

logger = logging.getLogger("devconnect.post_writer")

_FENCE_RE = re.compile(r"^```html\n?|\n?```$")
PROMPT_TEMPLATE = (
    "Generate a post on given content (In quill html formate & it should be able to insert "
    "directly into body dont start with html tag) don't add anything else on text & content. "
    "Content: {message}"
)


class PostWriterNotConfigured(Exception):
    pass


class PostWriterError(Exception):
    pass


def is_configured() -> bool:
    return bool(settings.RAPIDAPI_KEY)


def clean_generated_content(raw: str) -> str:
    return _FENCE_RE.sub("", (raw or "").strip())


async def generate_post(message: str) -> str:
    if not is_configured():
        raise PostWriterNotConfigured("Post generation is not configured")
    body = {
        "messages": [{"role": "user", "content": PROMPT_TEMPLATE.format(message=message)}],
        "web_access": False,
    }
    headers = {
        "Content-Type": "application/json",
        "x-rapidapi-key": settings.RAPIDAPI_KEY,
        "x-rapidapi-host": settings.RAPIDAPI_HOST,
    }
    timeout = httpx.Timeout(30.0, connect=5.0)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(settings.RAPIDAPI_URL, json=body, headers=headers)
            resp.raise_for_status()
            data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.error("Error generating social media post: %s", exc)
        raise PostWriterError("Failed to generate social media post") from exc
    content = data.get("result") if isinstance(data, dict) else data
    if not isinstance(content, str) or not content.strip():
        raise PostWriterError("Failed to generate social media post")
    return clean_generated_content(content)
