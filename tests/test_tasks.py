import threading

import pytest

from multicast_tester.errors import ReadDataError
from multicast_tester.tasks import BackgroundTask


def test_join_returns_result():
    task = BackgroundTask.spawn("worker", lambda: 42)
    assert task.join() == 42
    assert not task.thread.is_alive()


def test_join_reraises_failure():
    def boom():
        raise ReadDataError(OSError("reset"))

    task = BackgroundTask.spawn("worker", boom)
    with pytest.raises(ReadDataError):
        task.join()


def test_join_waits_for_completion():
    gate = threading.Event()
    done = []

    def worker():
        gate.wait()
        done.append(True)

    task = BackgroundTask.spawn("response_listener", worker)
    assert task.name == "response_listener"
    assert task.thread.is_alive()
    gate.set()
    task.join()
    assert done == [True]


def test_join_only_once():
    task = BackgroundTask.spawn("worker", lambda: None)
    task.join()
    with pytest.raises(RuntimeError):
        task.join()
