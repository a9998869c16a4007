"""
ScriptExecutor: execute(script, context) -> final value.

Compiles with RestrictedPython, runs in a fresh sandbox, returns the value of the
script's trailing expression (or its `result` global), else NO_VALUE.

The budget (SCRIPT_EXEC_TIMEOUT) is enforced with a repeating SIGALRM timer on the
main thread. Elsewhere the script runs in a daemon worker joined with the budget;
a worker that overruns is abandoned, not killed. Both are cooperative: a script
is interrupted between bytecodes, not inside a long-running C call.
"""

import logging
import signal
import threading
import time
from typing import Any

from jsontools.core.config import settings
from jsontools.core.errors import ScriptExecutionError, ScriptTimeoutError

from .context import ScriptContext
from .outcome import NO_VALUE
from .sandbox import RESULT_NAME, build_restricted_globals, compile_script

_log = logging.getLogger(__name__)

# Re-fire interval after the first alarm, in case a script swallows the interrupt.
_REARM_INTERVAL = 0.1


class _ScriptInterrupt(BaseException):
    """Raised inside the script by the alarm handler; not catchable as Exception."""


def _exec_with_alarm(code: object, g: dict[str, Any], timeout_sec: float) -> None:
    """Run exec(code, g) under SIGALRM. Main thread only."""

    def _handler(signum: int, frame: Any) -> None:
        raise _ScriptInterrupt()

    old = signal.signal(signal.SIGALRM, _handler)
    try:
        signal.setitimer(signal.ITIMER_REAL, timeout_sec, _REARM_INTERVAL)
        try:
            exec(code, g)  # noqa: S102 - RestrictedPython compiled code
        finally:
            signal.setitimer(signal.ITIMER_REAL, 0)
    finally:
        signal.signal(signal.SIGALRM, old)


def _exec_in_worker(code: object, g: dict[str, Any], timeout_sec: float) -> None:
    """Run exec(code, g) in a daemon thread and wait at most timeout_sec."""
    errors: list[Exception] = []
    done = threading.Event()

    def _runner() -> None:
        try:
            exec(code, g)  # noqa: S102 - RestrictedPython compiled code
        except Exception as e:
            errors.append(e)
        finally:
            done.set()

    worker = threading.Thread(target=_runner, name="script-exec", daemon=True)
    worker.start()
    if not done.wait(timeout_sec):
        raise _ScriptInterrupt()
    if errors:
        raise errors[0]


class ScriptExecutor:
    """
    Run a Python script in a RestrictedPython sandbox with ScriptContext (data, py_, jp).
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = settings.SCRIPT_EXEC_TIMEOUT if timeout is None else timeout

    def _run(self, code: object, g: dict[str, Any]) -> None:
        if not self.timeout or self.timeout <= 0:
            exec(code, g)  # noqa: S102 - RestrictedPython compiled code
        elif (
            hasattr(signal, "SIGALRM")
            and threading.current_thread() is threading.main_thread()
        ):
            _exec_with_alarm(code, g, self.timeout)
        else:
            _exec_in_worker(code, g, self.timeout)

    def execute(self, script: str, context: ScriptContext) -> Any:
        """
        Compile script, exec in restricted globals, return its final value.

        Raises ScriptExecutionError when the script fails to compile or raises,
        ScriptTimeoutError when it overruns the budget.
        """
        try:
            code = compile_script(script)
        except SyntaxError as e:
            raise ScriptExecutionError(f"Error compiling script: {e}") from e

        g = build_restricted_globals(context.to_dict())
        started = time.monotonic()
        try:
            self._run(code, g)
        except _ScriptInterrupt:
            _log.warning("Script timed out after %ss", self.timeout)
            raise ScriptTimeoutError(
                f"Script execution timed out after {self.timeout}s"
            ) from None
        except Exception as e:
            raise ScriptExecutionError(f"Error executing script: {e}") from e

        if self.timeout and self.timeout > 0 and time.monotonic() - started > self.timeout:
            raise ScriptTimeoutError(f"Script execution timed out after {self.timeout}s")
        return g.get(RESULT_NAME, NO_VALUE)
