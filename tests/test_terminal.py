"""Tests for ncq.tui.terminal.acquire_terminal."""

from __future__ import annotations

import pytest

from ncq.tui.terminal import acquire_terminal

from .virtual_terminal import VirtualTerminal


class TestAcquireTerminal:
    def test_starts_and_stops(self) -> None:
        term = VirtualTerminal()
        received: list[str] = []
        with acquire_terminal(term, received.append, lambda: None) as owned:
            assert owned is term
            assert term.started
            term.simulate_input("x")
        assert received == ["x"]
        assert not term.started
        assert term.stop_count == 1

    def test_stops_on_error(self) -> None:
        term = VirtualTerminal()
        with pytest.raises(KeyError):
            with acquire_terminal(term, lambda data: None, lambda: None):
                raise KeyError("boom")
        assert term.stop_count == 1

    def test_resize_callback_is_wired(self) -> None:
        term = VirtualTerminal(rows=10, columns=40)
        sizes: list[tuple[int, int]] = []
        with acquire_terminal(term, lambda data: None, lambda: sizes.append((term.columns, term.rows))):
            term.simulate_resize(rows=5)
        assert sizes == [(40, 5)]
