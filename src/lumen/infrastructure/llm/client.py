"""Completion provider adapter built on LiteLLM."""

import json
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import litellm
from pydantic import BaseModel, ValidationError

from lumen.config import LLMConfig
from lumen.infrastructure.llm.exceptions import (
    ProviderResponseError,
    map_provider_exception,
)
from lumen.infrastructure.llm.retry import RetryPolicy
from lumen.infrastructure.llm.templates import create_jinja_env

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CompletionClient:
    """LiteLLM wrapper returning schema-validated output.

    The pydantic output model is sent as the ``response_format`` so the
    remote service constrains generation to its JSON schema; the reply
    is validated again locally before it is returned.
    """

    def __init__(
        self,
        config: LLMConfig,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: LLM configuration (model, temperature, max_tokens).
            retry_policy: Backoff policy for transient failures.
        """
        self._config = config
        self._retry_policy = retry_policy or RetryPolicy()
        self._context_template = create_jinja_env().get_template("context_system.j2")

    @property
    def config(self) -> LLMConfig:
        return self._config

    async def complete(
        self,
        prompt: str,
        output_model: type[ModelT],
        *,
        context: Mapping[str, Any] | None = None,
        temperature: float | None = None,
    ) -> ModelT:
        """Execute a structured chat completion.

        Args:
            prompt: User-visible prompt text.
            output_model: Pydantic model describing the response contract.
            context: Background information sent as a separate system
                message, never merged into the prompt text.
            temperature: Sampling temperature (overrides config).

        Returns:
            Validated instance of ``output_model``.

        Raises:
            ProviderRateLimitError: Rate limit persisted through all retries.
            ProviderServerError: Server errors persisted through all retries.
            ProviderAuthenticationError: Invalid API key.
            ProviderResponseError: Response did not match the schema.
            ProviderError: Other API errors.
        """
        params: dict[str, Any] = {
            "model": self._config.model,
            "temperature": (
                self._config.temperature if temperature is None else temperature
            ),
            "max_tokens": self._config.max_tokens,
            "messages": self._build_messages(prompt, context),
            "response_format": output_model,
        }

        logger.debug(
            "LLM request: model=%s, schema=%s", params["model"], output_model.__name__
        )

        outcome = await self._retry_policy.run(
            lambda: self._request(params, output_model)
        )
        if not outcome.succeeded:
            logger.error(
                "LLM request failed after %d attempt(s): %s",
                outcome.attempts,
                outcome.error,
            )
        return outcome.unwrap()

    async def _request(
        self, params: dict[str, Any], output_model: type[ModelT]
    ) -> ModelT:
        try:
            response = await litellm.acompletion(**params)
        except Exception as e:
            raise map_provider_exception(e) from e

        content = response.choices[0].message.content
        if not content:
            raise ProviderResponseError("Empty response from completion provider")

        try:
            result = output_model.model_validate_json(content)
        except ValidationError as e:
            raise ProviderResponseError(
                f"Response does not match {output_model.__name__}: {e}"
            ) from e

        logger.debug("LLM response received")
        return result

    def _build_messages(
        self, prompt: str, context: Mapping[str, Any] | None
    ) -> list[dict[str, str]]:
        messages: list[dict[str, str]] = []
        if context:
            messages.append(
                {
                    "role": "system",
                    "content": self._context_template.render(
                        context_json=json.dumps(context, indent=2, ensure_ascii=False)
                    ),
                }
            )
        messages.append({"role": "user", "content": prompt})
        return messages
