import threading
from typing import Any, Callable, Optional


class BackgroundTask:
    """
    Thread wrapper whose join() hands back the target's result or re-raises its exception.
    """
    def __init__(self, name: str, target: Callable[[], Any]):
        self._target = target
        self._result: Any = None
        self._error: Optional[BaseException] = None
        self._joined = False
        self.thread = threading.Thread(target=self._run, name=name, daemon=True)

    @classmethod
    def spawn(cls, name: str, target: Callable[[], Any]) -> 'BackgroundTask':
        task = cls(name, target)
        task.thread.start()
        return task

    @property
    def name(self) -> str:
        return self.thread.name

    def _run(self):
        try:
            self._result = self._target()
        except BaseException as e:
            self._error = e

    def join(self) -> Any:
        if self._joined:
            raise RuntimeError(f"task '{self.name}' was already joined")
        self.thread.join()
        self._joined = True
        if self._error is not None:
            raise self._error
        return self._result
