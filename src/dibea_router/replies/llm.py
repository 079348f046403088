"""LLM reply generator with per-model circuit breaker and rate-limit retry."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine, Sequence
from typing import TYPE_CHECKING, Any

import litellm
from circuitbreaker import (  # pyright: ignore[reportUnknownVariableType]
    CircuitBreaker,
    CircuitBreakerError,
)
from litellm.exceptions import RateLimitError as LitellmRateLimitError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from dibea_router.constants import (
    CB_LLM_FAILURE_THRESHOLD,
    CB_LLM_RECOVERY_TIMEOUT,
    LLM_MAX_OUTPUT_TOKENS,
    RETRY_INITIAL_WAIT,
    RETRY_MAX_ATTEMPTS,
    RETRY_MAX_WAIT,
    AgentCategory,
)
from dibea_router.resilience.errors import (
    CollaboratorUnavailableError,
    classify_error,
)

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types; typed alias
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion

SYSTEM_PROMPT = (
    "Você é o assistente do portal DIBEA de bem-estar animal. "
    "A mensagem do usuário foi encaminhada ao agente '{agent}'. "
    "Responda em português, em no máximo três frases, de forma "
    "cordial e objetiva. Não invente dados de animais ou processos."
)


def _is_non_rate_limit_error(
    thrown_type: type, thrown_value: BaseException
) -> bool:
    """Return True if NOT a rate limit error (counts as a CB failure)."""
    return not issubclass(thrown_type, LitellmRateLimitError)


# Each model gets independent failure tracking so one provider's
# outage doesn't block fallback to the next.
_breaker_registry: dict[str, CircuitBreaker] = {}  # pyright: ignore[reportUnknownVariableType]


def _get_breaker(model: str) -> CircuitBreaker:  # pyright: ignore[reportUnknownParameterType]
    """Get or create a circuit breaker for the given model."""
    if model not in _breaker_registry:
        _breaker_registry[model] = CircuitBreaker(  # pyright: ignore[reportUnknownMemberType]
            failure_threshold=CB_LLM_FAILURE_THRESHOLD,
            recovery_timeout=CB_LLM_RECOVERY_TIMEOUT,
            expected_exception=_is_non_rate_limit_error,
            name=f"llm_{model}",
        )
    return _breaker_registry[model]


def reset_breakers() -> None:
    """Forget all breaker state (tests, manual recovery)."""
    _breaker_registry.clear()


@retry(
    stop=stop_after_attempt(RETRY_MAX_ATTEMPTS),
    wait=wait_exponential_jitter(
        initial=RETRY_INITIAL_WAIT, max=RETRY_MAX_WAIT
    ),
    retry=retry_if_exception_type(LitellmRateLimitError),
    reraise=True,
)
async def guarded_completion(
    model: str,
    messages: list[dict[str, str]],
    timeout: int,
) -> str:
    """Circuit-breaker-protected completion with rate-limit retry."""
    breaker = _get_breaker(model)
    if breaker.opened:  # pyright: ignore[reportUnknownMemberType]
        raise CircuitBreakerError(breaker)  # pyright: ignore[reportUnknownArgumentType]
    with breaker:  # pyright: ignore[reportUnknownMemberType]
        response: Any = await _acompletion(
            model=model,
            messages=messages,
            timeout=timeout,
            max_tokens=LLM_MAX_OUTPUT_TOKENS,
        )
    return str(response.choices[0].message.content or "").strip()


class LLMReplyGenerator:
    """Writes the reply with the first model in the chain that answers."""

    def __init__(
        self,
        model_chain: Sequence[str],
        *,
        timeout: int = 30,
    ) -> None:
        if not model_chain:
            raise ValueError("model_chain must contain at least one model")
        self._models = list(model_chain)
        self._timeout = timeout

    @property
    def models(self) -> list[str]:
        return list(self._models)

    async def generate_reply(
        self,
        agent: AgentCategory,
        message: str,
        *,
        session_id: str | None = None,
    ) -> str:
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT.format(agent=agent)},
            {"role": "user", "content": message},
        ]
        for model in self._models:
            try:
                content = await guarded_completion(
                    model, messages, self._timeout
                )
            except CircuitBreakerError:
                logger.warning(
                    "event=circuit_open model=%s session_id=%s",
                    model,
                    session_id,
                )
                continue
            except Exception as exc:
                logger.warning(
                    "event=llm_reply_failed model=%s error_class=%s "
                    "session_id=%s",
                    model,
                    classify_error(exc).value,
                    session_id,
                )
                continue
            if content:
                return content
            logger.warning("event=llm_reply_empty model=%s", model)

        raise CollaboratorUnavailableError(
            f"no model produced a reply ({', '.join(self._models)})"
        )
