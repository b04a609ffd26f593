"""
Caller for Anthropic's messages API.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Dict, Sequence, Tuple, Union

import anthropic
from anthropic import AsyncAnthropic

from ..env import load_default_env, resolve_api_key
from ..exceptions import APIError, ProviderConfigurationError, RequestFailedError
from ..models import Anthropic, ModelInfo, ProviderKind
from ..types import CallBase, CallResp, Turn
from .adapters import get_adapter
from .base import ModelCaller, resolve_model, response_payload

logger = logging.getLogger(__name__)


class AnthropicCaller(ModelCaller):
    """
    Caller that talks to a model via Anthropic's public messages API.

    If an API key is not provided it is read from ``ANTHROPIC_API_KEY``.
    ``max_tokens``, when set, overrides the value carried by CallBase.
    """

    name = "Anthropic"
    kind = ProviderKind.ANTHROPIC
    env_vars: Tuple[str, ...] = ("ANTHROPIC_API_KEY",)

    def __init__(
        self,
        model: Union[ModelInfo, str] = Anthropic.CLAUDE_HAIKU_3_5,
        *,
        api_key: str | None = None,
        max_tokens: int | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ):
        self.model = resolve_model(model, self.kind)
        if self.model.provider != self.kind:
            raise ValueError(
                f"{self.name}Caller cannot serve {self.model.provider.value} model '{self.model.id}'"
            )
        self.adapter = get_adapter(self.kind)
        self.max_tokens = max_tokens
        self.timeout = timeout

        if client is not None:
            self._client = client
            return

        load_default_env()
        self.api_key = resolve_api_key(api_key, self.env_vars)
        if not self.api_key:
            raise ProviderConfigurationError(self.name, "API key", self.env_vars)

        # Every failure surfaces to the caller; the SDK must not retry.
        self._client = AsyncAnthropic(api_key=self.api_key, base_url=base_url, max_retries=0)

    async def call(self, params: CallBase, turns: Sequence[Turn] = ()) -> CallResp:
        if self.max_tokens is not None:
            params = dataclasses.replace(params, max_tokens=self.max_tokens)
        request = self.adapter.build_request(self.model, params, turns)
        logger.debug(
            "%s request: model=%s, %d message(s), %d tool(s)",
            self.name,
            self.model.id,
            len(request["messages"]),
            len(request.get("tools", [])),
        )

        extra: Dict[str, Any] = {}
        if self.timeout is not None:
            extra["timeout"] = self.timeout
        try:
            response = await self._client.messages.create(**request, **extra)
        except anthropic.APIStatusError as exc:
            raise RequestFailedError(exc.status_code, exc.response.text) from exc
        except anthropic.APIError as exc:
            raise APIError(exc) from exc

        return self.adapter.parse_response(response_payload(response), self.model)


__all__ = ["AnthropicCaller"]
