"""AI-assisted regeneration of a single section draft."""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Union

import requests

from .errors import CollaboratorError, RegenerationPendingError, ValidationError, user_message
from .models import MediaFile, Section, section_from_dict

logger = logging.getLogger(__name__)

EMPTY_INSTRUCTION = "Please enter an edit instruction."
OPENAI_URL = "https://api.openai.com/v1/chat/completions"

RegenerateFn = Callable[["RegenerationRequest"], Awaitable[Union[Section, Dict[str, object]]]]


@dataclass
class RegenerationRequest:
    section_key: str
    kind: str
    draft: Section
    instruction: str
    base_prompt: str = ""
    tone: str = ""
    palette: str = ""
    media: List[MediaFile] = field(default_factory=list)


class RegenerationStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class RegenerationResult:
    status: RegenerationStatus
    section: Optional[Section] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RegenerationStatus.SUCCESS


def validate_instruction(instruction: str) -> str:
    text = (instruction or "").strip()
    if not text:
        raise ValidationError(EMPTY_INSTRUCTION)
    return text


def coerce_response(kind: str, response: object) -> Section:
    """Turn a collaborator response into a section of ``kind``.

    Responses of another kind are rejected so a misbehaving service cannot
    change what the draft is.
    """

    if isinstance(response, Section):
        if response.section_kind != kind:
            raise CollaboratorError(
                f"The AI service returned a {response.section_kind!r} section instead of {kind!r}."
            )
        return copy.deepcopy(response)
    if isinstance(response, dict):
        tag = response.get("kind")
        if isinstance(tag, str) and tag and tag != kind:
            raise CollaboratorError(f"The AI service returned a {tag!r} section instead of {kind!r}.")
        return section_from_dict({**response, "kind": kind})
    raise CollaboratorError("The AI service returned an unreadable response.")


class RegenerationGateway:
    """Sends at most one regeneration request at a time for an editor."""

    def __init__(self, regenerate: RegenerateFn) -> None:
        self._regenerate = regenerate
        self._pending = False

    @property
    def pending(self) -> bool:
        return self._pending

    def begin(self, request: RegenerationRequest) -> None:
        if self._pending:
            raise RegenerationPendingError("A regeneration is already in progress.")
        validate_instruction(request.instruction)
        self._pending = True
        logger.info("Regenerating section %s (%s)", request.section_key, request.kind)

    def call(self, request: RegenerationRequest) -> Awaitable[Union[Section, Dict[str, object]]]:
        return self._regenerate(request)

    def finish(
        self,
        request: RegenerationRequest,
        response: object = None,
        exc: Optional[BaseException] = None,
    ) -> RegenerationResult:
        self._pending = False
        if exc is None:
            try:
                section = coerce_response(request.kind, response)
            except CollaboratorError as err:
                exc = err
            else:
                logger.info("Regenerated section %s", request.section_key)
                return RegenerationResult(RegenerationStatus.SUCCESS, section=section)
        message = user_message(exc, "Failed to regenerate section.")
        logger.warning("Regeneration of %s failed: %s", request.section_key, message)
        return RegenerationResult(RegenerationStatus.FAILURE, error=message)


# ---- OpenAI collaborator ---------------------------------------------


def build_prompt(request: RegenerationRequest) -> str:
    current = json.dumps(request.draft.to_dict(), indent=2)
    lines = [
        "You are an expert web designer and SEO copywriter updating one section of a landing page.",
        f'The page was created from the brief "{request.base_prompt}" with a "{request.tone}" tone '
        f'and a "{request.palette}" color palette.',
        "",
        "Current JSON for the section:",
        current,
        "",
        "Requested change:",
        f'"{request.instruction}"',
        "",
        "Rules:",
        "1. Change the JSON object according to the request; the result must differ from the input.",
        "2. Rewrite text for clarity and readability, using relevant keywords naturally.",
        "3. Keep the number of list items unless the request asks to add or remove some.",
        "4. For new imagery, use the URL of a fitting media library file if there is one; "
        "otherwise write a detailed prompt for an image generator in the image field.",
        "5. Icon names come from the Lucide icon set (e.g. Zap, ShieldCheck, BarChart, Home).",
        "6. For a hero slider, put per-slide text in the slides list.",
        "7. Keep the tone and style of the page.",
        f'8. Keep "kind" set to "{request.kind}" and keep the same field names.',
        "9. Answer with the updated JSON object only, without markdown.",
    ]
    if request.media:
        library = [
            {"url": m.url, "name": m.name, "description": m.description, "keywords": m.keywords}
            for m in request.media
        ]
        lines += ["", "Media library (JSON):", json.dumps(library)]
    return "\n".join(lines)


def map_service_error(message: str, section_key: str) -> CollaboratorError:
    if "model" in message.lower() and ("not exist" in message.lower() or "unavailable" in message.lower()):
        return CollaboratorError(
            "The AI model is currently busy or unavailable. Please wait a moment and try again."
        )
    if "api key" in message.lower():
        return CollaboratorError("The configured API key is not valid. Please check your settings.")
    return CollaboratorError(
        "An unexpected error occurred with the AI service during "
        f'regenerating section "{section_key}". Details: {message}'
    )


class OpenAIRegenerator:
    """Regeneration collaborator backed by the OpenAI chat completions API."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        timeout: float = 60,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.model = model
        self.timeout = timeout
        self.api_key = api_key if api_key is not None else os.environ.get("OPENAI_API_KEY", "")
        self.http = session or requests.Session()

    async def __call__(self, request: RegenerationRequest) -> Dict[str, object]:
        return await asyncio.to_thread(self.complete, request)

    def complete(self, request: RegenerationRequest) -> Dict[str, object]:
        if not self.api_key:
            raise CollaboratorError("Set OPENAI_API_KEY in your environment.")
        try:
            response = self.http.post(
                OPENAI_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [{"role": "user", "content": build_prompt(request)}],
                    "response_format": {"type": "json_object"},
                    "temperature": 0.2,
                },
                timeout=self.timeout,
            )
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise map_service_error(str(exc), request.section_key) from exc

        if response.status_code >= 400 or "error" in payload:
            error = payload.get("error") or {}
            message = error.get("message", "Request failed") if isinstance(error, dict) else str(error)
            raise map_service_error(str(message), request.section_key)

        choices = payload.get("choices") or []
        text = choices[0].get("message", {}).get("content", "") if choices else ""
        try:
            data = json.loads(text.strip())
        except ValueError as exc:
            raise map_service_error("response was not valid JSON", request.section_key) from exc
        if not isinstance(data, dict):
            raise map_service_error("response was not a JSON object", request.section_key)
        return data
