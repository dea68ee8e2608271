from __future__ import annotations

import pytest

from uniai.base.cancellation import CancellationToken, check_cancelled
from uniai.base.errors import Cancelled
from uniai.base.http import close_on_cancel


class _Resource:
    def __init__(self) -> None:
        self.closed = 0

    def close(self) -> None:
        self.closed += 1


def test_cancel_runs_callbacks_once_and_cascades():
    parent = CancellationToken()
    child = parent.child()
    seen = []
    parent.on_cancel(lambda: seen.append("parent"))
    child.on_cancel(lambda: seen.append("child"))
    parent.cancel("stop")
    parent.cancel("again")
    assert seen == ["parent", "child"]  # nosec B101
    assert child.reason == "stop"  # nosec B101


def test_callback_registered_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    seen = []
    token.on_cancel(lambda: seen.append(1))
    assert seen == [1]  # nosec B101


def test_check_cancelled_raises_taxonomy_error():
    check_cancelled(None)
    token = CancellationToken()
    check_cancelled(token)
    token.cancel("user aborted")
    with pytest.raises(Cancelled) as ei:
        check_cancelled(token, provider="p", model="m")
    assert ei.value.message == "user aborted"  # nosec B101
    assert ei.value.provider == "p"  # nosec B101


def test_close_on_cancel_scope():
    token = CancellationToken()
    inside, after = _Resource(), _Resource()
    with close_on_cancel(token, inside):
        token.cancel()
    assert inside.closed == 1  # nosec B101
    with close_on_cancel(CancellationToken(), after):
        pass
    assert after.closed == 0  # nosec B101
