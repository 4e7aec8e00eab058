"""Tests for HoverPopupCoordinator timing and dismissal."""

from unittest.mock import MagicMock

import pytest

from text_annotator.coordinators import HoverPopupCoordinator


@pytest.fixture
def live_ids():
    return {"a", "b"}


@pytest.fixture
def popup(live_ids):
    return HoverPopupCoordinator(delay_ms=400, is_live=lambda annotation_id: annotation_id in live_ids)


@pytest.fixture
def requested(popup):
    spy = MagicMock()
    popup.popup_requested.connect(spy)
    return spy


@pytest.fixture
def dismissed(popup):
    spy = MagicMock()
    popup.popup_dismissed.connect(spy)
    return spy


def fire(popup):
    """Simulate the hover delay elapsing."""
    assert popup._timer.isActive()
    popup._on_timeout()


class TestHoverDelay:
    def test_enter_starts_timer(self, popup, requested):
        popup.pointer_entered("a")

        assert popup.pending_id == "a"
        assert popup._timer.interval() == 400
        requested.assert_not_called()

    def test_popup_opens_after_delay(self, popup, requested):
        popup.pointer_entered("a")
        fire(popup)

        requested.assert_called_once_with("a")
        assert popup.active_id == "a"
        assert popup.pending_id is None

    def test_leave_before_delay_cancels(self, popup, requested):
        popup.pointer_entered("a")
        popup.pointer_left("a")

        assert not popup._timer.isActive()
        assert popup.pending_id is None
        requested.assert_not_called()

    def test_moving_to_another_annotation_restarts(self, popup, requested):
        popup.pointer_entered("a")
        popup.pointer_entered("b")
        fire(popup)

        requested.assert_called_once_with("b")

    def test_removed_before_delay_opens_nothing(self, popup, live_ids, requested):
        popup.pointer_entered("a")
        live_ids.discard("a")
        fire(popup)

        requested.assert_not_called()
        assert popup.active_id is None

    def test_reentering_open_popup_is_noop(self, popup, requested):
        popup.pointer_entered("a")
        fire(popup)

        popup.pointer_entered("a")

        assert not popup._timer.isActive()
        assert requested.call_count == 1


class TestDismissal:
    def test_leaving_source_dismisses(self, popup, dismissed):
        popup.pointer_entered("a")
        fire(popup)

        popup.pointer_left("a")

        dismissed.assert_called_once_with("a")
        assert popup.active_id is None

    def test_pointer_over_nothing_dismisses(self, popup, dismissed):
        popup.pointer_entered("a")
        fire(popup)

        popup.pointer_moved("a")
        dismissed.assert_not_called()

        popup.pointer_moved(None)
        dismissed.assert_called_once_with("a")

    def test_pointer_over_other_live_annotation_keeps_popup(self, popup, dismissed):
        popup.pointer_entered("a")
        fire(popup)

        popup.pointer_moved("b")
        dismissed.assert_not_called()

        popup.pointer_moved("ghost")
        dismissed.assert_called_once_with("a")

    def test_pointer_moved_without_popup_is_noop(self, popup, dismissed):
        popup.pointer_moved(None)
        dismissed.assert_not_called()

    def test_new_popup_replaces_old(self, popup, requested, dismissed):
        popup.pointer_entered("a")
        fire(popup)
        popup.pointer_entered("b")
        fire(popup)

        dismissed.assert_called_once_with("a")
        assert popup.active_id == "b"
        assert requested.call_count == 2

    def test_dismiss_cancels_pending_timer(self, popup, dismissed):
        popup.pointer_entered("a")
        popup.dismiss()

        assert not popup._timer.isActive()
        dismissed.assert_not_called()
