"""
Image Generation Utilities
===========================

Generate images from text prompts through the provider's chat completions
endpoint.

The provider does not return images in a fixed place. The URL is looked up
with an ordered list of probes (IMAGE_URL_PROBES); the first probe that finds
something wins:

    1. an image URL embedded in choices[0].message.content
    2. a top-level "image_url" field
    3. an "image_url" field on choices[0]

Usage:
    from studio.images import generate_image
    from studio.models import GenerationRequest

    # Simple generation
    url = generate_image(GenerationRequest(prompt="A sunset over mountains"))

    # With options
    url = generate_image(
        GenerationRequest(
            prompt="A paper lantern floating over a river",
            style="cinematic",
            width=1280,
            height=720,
            seed=42,
        ),
        timeout=60,
    )
"""

import re
import logging
import requests

from studio.errors import ProviderError
from studio.models import GenerationRequest
from studio.presets import system_prompt_for
from studio.provider_client import get_config, get_headers, api_url, resolve_model

logger = logging.getLogger(__name__)

IMAGE_URL_PATTERN = re.compile(r"https?://\S+\.(?:jpg|jpeg|png|webp)", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Response probing
# ---------------------------------------------------------------------------

def _first_choice(data: dict) -> dict:
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        return choices[0]
    return {}


def _url_in_message_content(data: dict) -> str | None:
    message = _first_choice(data).get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    match = IMAGE_URL_PATTERN.search(content)
    return match.group(0) if match else None


def _string_or_none(value) -> str | None:
    return value if isinstance(value, str) and value else None


def _url_in_top_level_field(data: dict) -> str | None:
    return _string_or_none(data.get("image_url"))


def _url_in_first_choice_field(data: dict) -> str | None:
    return _string_or_none(_first_choice(data).get("image_url"))


IMAGE_URL_PROBES = [
    _url_in_message_content,
    _url_in_top_level_field,
    _url_in_first_choice_field,
]


def find_image_url(data: dict) -> str | None:
    """Run IMAGE_URL_PROBES in order and return the first URL found."""
    if not isinstance(data, dict):
        return None
    for probe in IMAGE_URL_PROBES:
        url = probe(data)
        if url:
            return url
    return None


# ---------------------------------------------------------------------------
# Request building
# ---------------------------------------------------------------------------

def build_payload(request: GenerationRequest, model: str | None = None) -> dict:
    """Build the JSON body for a chat completions image request."""
    cfg = get_config()
    image_generation = {
        "width": request.width,
        "height": request.height,
        "guidance_scale": request.guidance_scale,
        "num_inference_steps": request.num_inference_steps,
    }
    if request.seed is not None:
        image_generation["seed"] = request.seed

    return {
        "model": resolve_model(model or cfg["model"]),
        "messages": [
            {"role": "system", "content": system_prompt_for(request.system_prompt, request.style)},
            {"role": "user", "content": request.prompt},
        ],
        "max_tokens": 1000,
        "temperature": 0.7,
        "stream": False,
        "image_generation": image_generation,
    }


def _error_details(r: requests.Response):
    try:
        body = r.json()
    except ValueError:
        return r.text[:300]
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message", body)
    return body


def generate_image(
    request: GenerationRequest,
    model: str | None = None,
    timeout: float | None = None,
) -> str:
    """
    Generate one image and return its URL.

    Args:
        request: Prompt and generation settings.
        model:   Model alias or full ID. Defaults to the configured model.
        timeout: Request timeout in seconds. Defaults to the configured timeout.

    Returns:
        URL of the generated image.

    Raises:
        ProviderError: If the request fails, the provider answers with a
            non-2xx status, or no image URL can be found in the response.
    """
    payload = build_payload(request, model=model)
    if timeout is None:
        timeout = get_config()["timeout"]

    try:
        r = requests.post(
            api_url(),
            headers=get_headers(),
            json=payload,
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise ProviderError(f"Image generation request failed: {e}") from e

    if not 200 <= r.status_code < 300:
        details = _error_details(r)
        logger.warning("Provider returned %s: %s", r.status_code, details)
        raise ProviderError(
            f"Image generation failed ({r.status_code}): {details}",
            status_code=r.status_code,
            details=details,
        )

    try:
        data = r.json()
    except ValueError as e:
        raise ProviderError(f"Provider returned invalid JSON: {r.text[:300]}") from e

    image_url = find_image_url(data)
    if not image_url:
        raise ProviderError("No image produced: no image URL found in response", details=data)

    logger.debug("Provider produced %s", image_url)
    return image_url


# ---------------------------------------------------------------------------
# Self-test
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    print("=== Image Generation Utility Test ===\n")

    try:
        url = generate_image(
            GenerationRequest(prompt="A simple red circle on a white background, minimal"),
        )
        print(f"   Image URL: {url}\n")
    except ProviderError as e:
        print(f"   Error: {e}\n")
