"""
Tests for user notices.
"""

import pytest

from gupai.core.notifications import Notifier


class TestNotifier:

    def test_notify_records_notice(self, notifier):
        notice = notifier.notify("Chat deleted", "success")
        assert notice.text == "Chat deleted"
        assert notifier.last is notice
        assert notifier.notices == [notice]

    def test_default_level_is_info(self, notifier):
        assert notifier.notify("Hello").level == "info"

    def test_unknown_level(self, notifier):
        with pytest.raises(ValueError):
            notifier.notify("Oops", "fatal")

    def test_buffer_is_bounded(self):
        notifier = Notifier(max_notices=2)
        for i in range(3):
            notifier.notify(f"notice {i}")
        assert [n.text for n in notifier.notices] == ["notice 1", "notice 2"]

    def test_listeners_receive_notices(self, notifier):
        received = []
        notifier.subscribe(received.append)
        notifier.notify("Chat cleared", "success")
        assert [n.text for n in received] == ["Chat cleared"]

    def test_failing_listener_is_isolated(self, notifier):
        received = []

        def broken(notice):
            raise RuntimeError("listener bug")

        notifier.subscribe(broken)
        notifier.subscribe(received.append)

        notifier.notify("Still delivered", "warning")
        assert len(received) == 1

    def test_clear(self, notifier):
        notifier.notify("one")
        notifier.clear()
        assert notifier.last is None
