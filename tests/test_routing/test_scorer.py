"""Tests for lexicon scoring."""

from __future__ import annotations

from dibea_router.constants import AgentCategory
from dibea_router.lexicon.schemas import Lexicon
from dibea_router.routing.normalizer import normalize
from dibea_router.routing.scorer import count_occurrences, score
from tests.fakes import minimal_lexicon


class TestCountOccurrences:
    def test_single_token_exact(self) -> None:
        assert count_occurrences(("a", "gato", "b"), ("gato",)) == 1

    def test_exact_does_not_prefix_match(self) -> None:
        assert count_occurrences(("gatos",), ("gato",)) == 0

    def test_prefix_match(self) -> None:
        assert count_occurrences(("gatos",), ("gat",), prefix=True) == 1

    def test_multi_token_contiguous(self) -> None:
        tokens = ("novo", "cachorro", "e", "novo", "gato")
        assert count_occurrences(tokens, ("novo", "cachorr"), prefix=True) == 1

    def test_multi_token_not_contiguous(self) -> None:
        tokens = ("novo", "lindo", "cachorro")
        assert count_occurrences(tokens, ("novo", "cachorro")) == 0

    def test_prefix_only_applies_to_last_token(self) -> None:
        tokens = ("novos", "cachorros")
        assert (
            count_occurrences(tokens, ("novo", "cachorr"), prefix=True) == 0
        )

    def test_every_occurrence_counts(self) -> None:
        assert count_occurrences(("vacina", "vacina"), ("vacin",), prefix=True) == 2

    def test_phrase_longer_than_message(self) -> None:
        assert count_occurrences(("a",), ("a", "b")) == 0

    def test_empty_phrase(self) -> None:
        assert count_occurrences(("a",), ()) == 0


class TestScore:
    def test_all_categories_present(self) -> None:
        board = score(normalize("nada a ver"), minimal_lexicon())
        assert set(board) == set(AgentCategory)
        assert all(v == 0.0 for v in board.values())

    def test_empty_message(self) -> None:
        board = score(normalize("   "), minimal_lexicon())
        assert sum(board.values()) == 0.0

    def test_weighted_accumulation(self) -> None:
        board = score(
            normalize("vacinar o gato no veterinário"), minimal_lexicon()
        )
        assert board[AgentCategory.PROCEDURE] == 4.0  # vacin 3 + veterinari 1
        assert board[AgentCategory.ANIMAL] == 1.0

    def test_repetition_counts(self) -> None:
        board = score(normalize("vacina vacina"), minimal_lexicon())
        assert board[AgentCategory.PROCEDURE] == 6.0

    def test_never_negative(self, lexicon: Lexicon) -> None:
        board = score(normalize("qualquer coisa, nada!"), lexicon)
        assert all(v >= 0 for v in board.values())

    def test_default_never_scored(self, lexicon: Lexicon) -> None:
        board = score(normalize("cachorro vacina adoção"), lexicon)
        assert board[AgentCategory.DEFAULT] == 0.0

    def test_monotonic_in_trigger_tokens(self, lexicon: Lexicon) -> None:
        """Appending a trigger never lowers its category's score."""
        base = score(normalize("preciso de ajuda com o animal"), lexicon)
        more = score(
            normalize("preciso de ajuda com o animal vacinado"), lexicon
        )
        assert more[AgentCategory.PROCEDURE] > base[AgentCategory.PROCEDURE]
        for category in AgentCategory:
            assert more[category] >= base[category]
