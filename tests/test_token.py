"""Tests for cancellation tokens."""

from __future__ import annotations

from engine.token import Token, TokenSource


class TestTokenSource:
    def test_generations_increase(self):
        tokens = TokenSource()
        minted = [tokens.mint() for _ in range(5)]
        gens = [t.generation for t in minted]
        assert gens == sorted(gens)
        assert len(set(gens)) == 5
        assert tokens.generation == 5

    def test_new_token_makes_old_stale(self):
        tokens = TokenSource()
        t1 = tokens.mint()
        assert not tokens.is_stale(t1)
        t2 = tokens.mint()
        assert tokens.is_stale(t1)
        assert not tokens.is_stale(t2)
        assert tokens.current == t2

    def test_invalidate_current(self):
        tokens = TokenSource()
        t1 = tokens.mint()
        assert tokens.invalidate() is True
        assert tokens.is_stale(t1)
        assert tokens.current is None

    def test_invalidate_is_idempotent(self):
        tokens = TokenSource()
        assert tokens.invalidate() is False
        t1 = tokens.mint()
        assert tokens.invalidate(t1) is True
        assert tokens.invalidate(t1) is False

    def test_invalidating_old_token_leaves_current_alone(self):
        tokens = TokenSource()
        t1 = tokens.mint()
        t2 = tokens.mint()
        assert tokens.invalidate(t1) is False
        assert not tokens.is_stale(t2)

    def test_stale_never_becomes_current_again(self):
        tokens = TokenSource()
        t1 = tokens.mint()
        tokens.invalidate()
        tokens.mint()
        assert tokens.is_stale(t1)
        assert tokens.is_stale(Token(t1.generation))

    def test_none_is_stale(self):
        assert TokenSource().is_stale(None)

    def test_str(self):
        assert str(Token(3)) == "run#3"
