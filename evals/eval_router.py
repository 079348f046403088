"""Routing acceptance evaluations using pydantic-evals Dataset.

Run with: python -m evals.eval_router

Uses the bundled lexicon and canned replies only, so no network or
LLM calls are made and every run is deterministic.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic_evals import Case, Dataset
from pydantic_evals.evaluators import Evaluator

from dibea_router.constants import AgentCategory, SenderRole
from dibea_router.lexicon.store import LexiconStore
from dibea_router.routing.router import AgentRouter
from dibea_router.routing.schemas import AgentResponse, HistoryMessage
from evals.evaluators import (
    AgentIs,
    ConfidenceAbove,
    EntityEquals,
    HasAction,
)


@dataclass
class RouterInput:
    """Input for a routing eval case."""

    message: str
    history: list[HistoryMessage] = field(
        default_factory=lambda: list[HistoryMessage]()
    )


# Acceptance messages from the portal's agent test script.
ACCEPTANCE: list[tuple[str, AgentCategory]] = [
    ("Quero cadastrar meu novo cachorro", AgentCategory.ANIMAL),
    ("Preciso registrar um gato", AgentCategory.ANIMAL),
    ("Como faço para cadastrar um animal?", AgentCategory.ANIMAL),
    ("Acabei de vacinar o Rex", AgentCategory.PROCEDURE),
    ("Preciso registrar uma consulta veterinária", AgentCategory.PROCEDURE),
    ("O animal tomou medicação hoje", AgentCategory.PROCEDURE),
    ("Quero adotar um cachorro", AgentCategory.TUTOR),
    ("Como funciona o processo de adoção?", AgentCategory.TUTOR),
    ("Preciso cadastrar um tutor", AgentCategory.TUTOR),
    ("Preciso fazer upload de documentos", AgentCategory.DOCUMENT),
    ("Quero enviar a carteira de vacinação", AgentCategory.DOCUMENT),
    ("Como faço para enviar arquivos?", AgentCategory.DOCUMENT),
    ("Quero ver relatórios de adoção", AgentCategory.GENERAL),
    ("Preciso de estatísticas dos animais", AgentCategory.GENERAL),
    ("Como posso buscar um animal específico?", AgentCategory.GENERAL),
    ("Olá, como você está?", AgentCategory.DEFAULT),
    ("Qual é o seu nome?", AgentCategory.DEFAULT),
]


def _case(
    name: str,
    inputs: RouterInput,
    expected: AgentCategory,
    *,
    capability: str,
    extra: list[Evaluator[Any, Any]] | None = None,
) -> Case[RouterInput, AgentResponse, dict[str, str]]:
    return Case(
        name=name,
        inputs=inputs,
        metadata={"capability": capability, "agent": expected.value},
        evaluators=(AgentIs(agent=expected.value), *(extra or [])),
    )


dataset: Dataset[RouterInput, AgentResponse, dict[str, str]] = Dataset(
    cases=[
        *(
            _case(
                message,
                RouterInput(message=message),
                expected,
                capability="routing",
            )
            for message, expected in ACCEPTANCE
        ),
        _case(
            "entities: vaccination of a named animal",
            RouterInput(message="Acabei de vacinar o Rex"),
            AgentCategory.PROCEDURE,
            capability="entities",
            extra=[
                EntityEquals(key="procedure_type", value="VACINACAO"),
                EntityEquals(key="animal_name", value="Rex"),
                HasAction(action_key="create_procedure"),
            ],
        ),
        _case(
            "context: follow-up reuses previous user turn",
            RouterInput(
                message="sim",
                history=[
                    HistoryMessage(
                        sender=SenderRole.USER,
                        content="quero adotar um cachorro",
                    ),
                    HistoryMessage(
                        sender=SenderRole.AGENT,
                        content="Posso ajudar com a adoção.",
                    ),
                ],
            ),
            AgentCategory.TUTOR,
            capability="context",
            extra=[ConfidenceAbove()],
        ),
    ],
)


def build_task(
    router: AgentRouter | None = None,
) -> Callable[[RouterInput], Awaitable[AgentResponse]]:
    """Task function routing each case with canned replies only."""
    agent_router = router or AgentRouter(LexiconStore())

    async def run_router_eval(inputs: RouterInput) -> AgentResponse:
        return await agent_router.route(inputs.message, inputs.history)

    return run_router_eval


def main() -> None:
    """Run routing evaluations."""
    print("DIBEA Agent Router Evaluations")
    print("=" * 50)

    report = dataset.evaluate_sync(build_task())
    report.print(include_input=True, include_output=True)


if __name__ == "__main__":
    main()
