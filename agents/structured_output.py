import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Optional

from anthropic import AsyncAnthropic

from core.config import settings
from core.exceptions import AiValidationError

logger = logging.getLogger(__name__)


@dataclass
class StructuredOutputRequest:
    system_prompt: str
    user_prompt: str
    schema: dict = field(repr=False)
    schema_name: str = "response"
    model: Optional[str] = None
    temperature: Optional[float] = None

    def __post_init__(self):
        if not self.user_prompt or not self.user_prompt.strip():
            raise ValueError("user_prompt must not be empty")
        if not isinstance(self.schema, dict) or self.schema.get("type") != "object":
            raise ValueError("schema must be a JSON Schema object with type 'object'")


class StructuredOutputClient:
    """One schema-constrained round-trip to Claude per call.

    The schema is attached as the input schema of a tool the model is forced
    to call, so the provider constrains the output itself. The tool input (or,
    failing that, the text content) is returned as parsed JSON. No retries.
    """

    def __init__(
        self,
        client: Optional[AsyncAnthropic] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        default_temperature: Optional[float] = None,
    ):
        self._client = client or AsyncAnthropic(api_key=settings.anthropic_api_key, max_retries=0)
        self.model = model or settings.anthropic_model
        self.max_tokens = max_tokens or settings.anthropic_max_tokens
        self.default_temperature = (
            settings.default_temperature if default_temperature is None else default_temperature
        )

    async def generate_structured_output(self, request: StructuredOutputRequest) -> Any:
        model = request.model or self.model
        temperature = self.default_temperature if request.temperature is None else request.temperature
        start = time.perf_counter()

        try:
            response = await self._client.messages.create(
                model=model,
                max_tokens=self.max_tokens,
                temperature=temperature,
                system=request.system_prompt,
                messages=[{"role": "user", "content": request.user_prompt}],
                tools=[
                    {
                        "name": request.schema_name,
                        "description": "Return the extracted data in this exact structure.",
                        "input_schema": request.schema,
                    }
                ],
                tool_choice={"type": "tool", "name": request.schema_name},
            )
            payload = self._extract_payload(response, request.schema_name)
        except AiValidationError as exc:
            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.error("Structured output failed model=%s latency_ms=%d: %s", model, latency_ms, exc)
            raise
        except Exception as exc:
            latency_ms = int((time.perf_counter() - start) * 1000)
            logger.error(
                "Structured output failed model=%s latency_ms=%d error=%s: %s",
                model, latency_ms, type(exc).__name__, exc,
                exc_info=True,
            )
            raise AiValidationError(str(exc) or "Failed to generate structured output") from exc

        latency_ms = int((time.perf_counter() - start) * 1000)
        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "input_tokens", None)
        output_tokens = getattr(usage, "output_tokens", None)
        total_tokens = (
            input_tokens + output_tokens
            if isinstance(input_tokens, int) and isinstance(output_tokens, int)
            else None
        )
        logger.info(
            "Structured output completed model=%s latency_ms=%d tokens.input=%s tokens.output=%s tokens.total=%s",
            model, latency_ms, input_tokens, output_tokens, total_tokens,
        )
        return payload

    @staticmethod
    def _extract_payload(response, tool_name: str) -> Any:
        """Pull the JSON value out of a Messages response."""
        blocks = getattr(response, "content", None) or []

        for block in blocks:
            if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
                if isinstance(block.input, str):
                    return _load_json(block.input)
                if block.input:
                    return block.input
                raise AiValidationError("Model returned empty tool input", raw_output=block.input)

        text = "".join(
            block.text for block in blocks if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            raise AiValidationError("Model returned empty response")
        return _load_json(text)


def _load_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise AiValidationError(f"Model returned invalid JSON: {exc.msg}", raw_output=raw) from exc
