"""
Callers for OpenAI-compatible chat completions APIs (OpenAI, Openrouter).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import openai
from openai import AsyncOpenAI

from ..env import load_default_env, resolve_api_key
from ..exceptions import APIError, ProviderConfigurationError, RequestFailedError
from ..models import ModelInfo, OpenAI, Openrouter, ProviderKind
from ..types import CallBase, CallResp, Turn
from .adapters import get_adapter
from .base import ModelCaller, resolve_model, response_payload

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
# These providers kept returning other people's completions.
DEFAULT_OPENROUTER_IGNORE = ("Nebius", "Kluster", "DeepInfra")


class OpenAICaller(ModelCaller):
    """
    Caller that talks to OpenAI's chat completions API.

    If an API key is not provided it is read from ``OPENAI_API_KEY``.
    """

    name = "OpenAI"
    kind = ProviderKind.OPENAI
    env_vars: Tuple[str, ...] = ("OPENAI_API_KEY",)
    default_base_url: Optional[str] = None

    def __init__(
        self,
        model: Union[ModelInfo, str] = OpenAI.GPT_4O_MINI,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ):
        self.model = resolve_model(model, self.kind)
        self.adapter = get_adapter(self.model.provider)
        if self.adapter is not get_adapter(self.kind):
            raise ValueError(
                f"{self.name}Caller cannot serve {self.model.provider.value} model '{self.model.id}'"
            )
        self.timeout = timeout

        if client is not None:
            self._client = client
            return

        load_default_env()
        self.api_key = resolve_api_key(api_key, self.env_vars)
        if not self.api_key:
            raise ProviderConfigurationError(self.name, "API key", self.env_vars)

        # Every failure surfaces to the caller; the SDK must not retry.
        self._client = AsyncOpenAI(
            api_key=self.api_key,
            base_url=base_url or self.default_base_url,
            max_retries=0,
        )

    def _extra_request_args(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {}
        if self.timeout is not None:
            args["timeout"] = self.timeout
        return args

    async def call(self, params: CallBase, turns: Sequence[Turn] = ()) -> CallResp:
        request = self.adapter.build_request(self.model, params, turns)
        logger.debug(
            "%s request: model=%s, %d message(s), %d tool(s)",
            self.name,
            self.model.id,
            len(request["messages"]),
            len(request.get("tools", [])),
        )

        try:
            response = await self._client.chat.completions.create(
                **request, **self._extra_request_args()
            )
        except openai.APIStatusError as exc:
            raise RequestFailedError(exc.status_code, exc.response.text) from exc
        except openai.APIError as exc:
            raise APIError(exc) from exc

        return self.adapter.parse_response(response_payload(response), self.model)


class OpenrouterCaller(OpenAICaller):
    """
    Caller that talks to a model accessible via Openrouter.

    If an API key is not provided it is read from ``OPENROUTER_API_KEY`` or
    ``OR_KEY``. Upstream providers named in ``ignore`` are never routed to.
    """

    name = "Openrouter"
    kind = ProviderKind.OPENROUTER
    env_vars = ("OPENROUTER_API_KEY", "OR_KEY")
    default_base_url = OPENROUTER_BASE_URL

    def __init__(
        self,
        model: Union[ModelInfo, str] = Openrouter.GEMMA_27B_3,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        ignore: Sequence[str] = DEFAULT_OPENROUTER_IGNORE,
        client: Any = None,
    ):
        super().__init__(model, api_key=api_key, base_url=base_url, timeout=timeout, client=client)
        self.ignore = list(ignore)

    def _extra_request_args(self) -> Dict[str, Any]:
        args = super()._extra_request_args()
        if self.ignore:
            args["extra_body"] = {"provider": {"ignore": self.ignore}}
        return args


__all__ = ["OpenAICaller", "OpenrouterCaller", "OPENROUTER_BASE_URL", "DEFAULT_OPENROUTER_IGNORE"]
