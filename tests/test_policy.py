"""
Tests for lazyinstaller.policy module.
"""

from __future__ import annotations

import pytest

from lazyinstaller.policy import decide_update
from lazyinstaller.versioning import EQUAL, GREATER, LESS


class TestDecideUpdate:
    """Tests for decide_update."""

    def test_fresh_install(self):
        decision = decide_update("0.4.7.1", "0.0.0")
        assert decision.action == "install"
        assert decision.comparison == GREATER
        assert decision.proceed is True

    def test_update(self):
        decision = decide_update("1.12.10", "1.12.4")
        assert decision.action == "update"
        assert decision.proceed is True

    def test_up_to_date(self):
        decision = decide_update("1.2", "1.2.0")
        assert decision.action == "up_to_date"
        assert decision.comparison == EQUAL
        assert decision.proceed is False

    def test_never_downgrade(self):
        decision = decide_update("1.0.0", "1.1.0")
        assert decision.action == "downgrade_skipped"
        assert decision.comparison == LESS
        assert decision.proceed is False

    def test_keeps_inputs(self):
        decision = decide_update("2.0", "1.0")
        assert (decision.candidate, decision.installed) == ("2.0", "1.0")

    def test_decision_is_frozen(self):
        decision = decide_update("2.0", "1.0")
        with pytest.raises(AttributeError):
            decision.action = "install"
