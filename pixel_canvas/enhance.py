"""Generative image-edit integration producing an enhanced variant of the art."""
from __future__ import annotations

import base64
import io
import json
import logging
import os
import socket
import urllib.error
import urllib.request
from typing import Any, Dict

from PIL import Image

from .config import EditorConfig, PixelCanvasError

logger = logging.getLogger("pixel_canvas")

DEFAULT_ENHANCE_ENDPOINT = (
    "https://dashscope.aliyuncs.com/api/v1/services/aigc/multimodal-generation/generation"
)
DEFAULT_ENHANCE_MODEL = "qwen-image-edit-plus"
DEFAULT_ENHANCE_PROMPT = (
    "Create a new, more detailed and enhanced version of this pixel art. "
    "Maintain the original subject and style but improve the shading, color "
    "depth, and overall artistic quality."
)
API_KEY_ENV = "DASHSCOPE_API_KEY"


def enhance_image(png_bytes: bytes, config: EditorConfig) -> bytes:
    """Send a flattened PNG to the image-edit service and return its result.

    Args:
        png_bytes: Composite image encoded as PNG (white background).
        config: Session configuration carrying the service options.

    Returns:
        The returned image re-encoded as RGBA PNG bytes.

    Raises:
        PixelCanvasError: On any request, response or decoding failure.
    """
    api_key = config.enhance_api_key or os.getenv(API_KEY_ENV)
    if not api_key:
        raise PixelCanvasError(f"Image enhancement requires {API_KEY_ENV} to be set")

    prompt = (config.enhance_prompt or "").strip() or DEFAULT_ENHANCE_PROMPT
    payload = _build_payload(
        model=config.enhance_model or DEFAULT_ENHANCE_MODEL,
        image_data=_png_to_data_uri(png_bytes),
        prompt=prompt,
    )
    endpoint = config.enhance_endpoint or DEFAULT_ENHANCE_ENDPOINT
    logger.debug(f"Requesting enhancement from {endpoint}")
    response = _post_json(endpoint, api_key, payload, timeout=config.enhance_timeout)
    image_ref = _extract_image(response)
    if image_ref.startswith("data:"):
        raw = _decode_data_uri(image_ref)
    else:
        raw = _download_image(image_ref, timeout=config.enhance_timeout)
    return _normalize_image(raw)


def _png_to_data_uri(png_bytes: bytes) -> str:
    encoded = base64.b64encode(png_bytes).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def _build_payload(model: str, image_data: str, prompt: str) -> Dict[str, Any]:
    return {
        "model": model,
        "input": {
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"image": image_data},
                        {"text": prompt},
                    ],
                }
            ]
        },
        "parameters": {"n": 1, "watermark": False},
    }


def _post_json(
    endpoint: str,
    api_key: str,
    payload: Dict[str, Any],
    timeout: int,
) -> Dict[str, Any]:
    data = json.dumps(payload).encode("utf-8")
    request = urllib.request.Request(
        endpoint,
        data=data,
        headers={
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        },
        method="POST",
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        body = exc.read().decode("utf-8") if exc.fp else ""
        raise PixelCanvasError(_format_http_error(body, exc)) from exc
    except urllib.error.URLError as exc:
        raise PixelCanvasError(f"Enhancement request failed: {exc}") from exc
    except socket.timeout as exc:
        raise PixelCanvasError("Enhancement request timed out") from exc

    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise PixelCanvasError("Enhancement response was not valid JSON") from exc


def _format_http_error(body: str, exc: urllib.error.HTTPError) -> str:
    try:
        payload = json.loads(body) if body else {}
    except json.JSONDecodeError:
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    code = payload.get("code") or payload.get("error_code")
    message = payload.get("message") or payload.get("error_message")
    detail = f"{code}: {message}" if code or message else body.strip()
    detail = detail or "Unknown error"
    return f"Enhancement request failed (HTTP {exc.code}): {detail}"


def _extract_image(response: Dict[str, Any]) -> str:
    try:
        content = response["output"]["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise PixelCanvasError("Enhancement response missing image content") from exc

    if not isinstance(content, list):
        raise PixelCanvasError("Enhancement response contained no images")
    for item in content:
        image_ref = item.get("image") if isinstance(item, dict) else None
        if image_ref:
            return image_ref
    raise PixelCanvasError("No image data found in enhancement response")


def _decode_data_uri(data_uri: str) -> bytes:
    _, _, encoded = data_uri.partition(",")
    try:
        return base64.b64decode(encoded, validate=True)
    except ValueError as exc:
        raise PixelCanvasError("Enhancement image data was not valid base64") from exc


def _download_image(image_url: str, timeout: int) -> bytes:
    try:
        with urllib.request.urlopen(image_url, timeout=timeout) as response:
            return response.read()
    except urllib.error.URLError as exc:
        raise PixelCanvasError(f"Failed to download enhanced image: {exc}") from exc
    except socket.timeout as exc:
        raise PixelCanvasError("Enhanced image download timed out") from exc


def _normalize_image(raw: bytes) -> bytes:
    """Decode the returned bytes fully and re-encode them as RGBA PNG."""
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (OSError, SyntaxError, ValueError) as exc:
        raise PixelCanvasError("Enhanced image could not be decoded") from exc
    buf = io.BytesIO()
    rgba.save(buf, format="PNG")
    return buf.getvalue()
