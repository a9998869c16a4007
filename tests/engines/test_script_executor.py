"""Unit tests for engines.script.executor and context."""

import signal
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from jsontools.core.errors import ScriptExecutionError, ScriptTimeoutError
from jsontools.engines.script import NO_VALUE, ScriptContext, ScriptExecutor


def _run(script: str, data: object = None, timeout: float = 5) -> object:
    return ScriptExecutor(timeout=timeout).execute(script, ScriptContext(data))


class TestScriptExecutorBasic:
    def test_trailing_expression_is_result(self) -> None:
        assert _run("[1, 2, 3]") == [1, 2, 3]

    def test_result_from_comprehension(self) -> None:
        out = _run("[x * 2 for x in data['ids']]", {"ids": [1, 2, 3]})
        assert out == [2, 4, 6]

    def test_assigned_result(self) -> None:
        out = _run("total = 0\nfor x in data:\n    total += x\nresult = total", [1, 2, 3])
        assert out == 6

    def test_no_result_returns_no_value(self) -> None:
        assert _run("x = 1") is NO_VALUE

    def test_explicit_none(self) -> None:
        assert _run("None") is None

    def test_update_instruction_passes_through_unchanged(self) -> None:
        out = _run("{'type': 'updateFile', 'data': {'n': data['n'] + 1}}", {"n": 1})
        assert out == {"type": "updateFile", "data": {"n": 2}}

    def test_mutating_loaded_data(self) -> None:
        script = "for row in data:\n    row['seen'] = True\ndata"
        assert _run(script, [{"id": 1}, {"id": 2}]) == [
            {"id": 1, "seen": True},
            {"id": 2, "seen": True},
        ]

    def test_jp_and_py_available(self) -> None:
        script = "{'ids': jp.query(data, '$.rows[*].id'), 'by': py_.group_by(data['rows'], 'k')}"
        data = {"rows": [{"id": 1, "k": "a"}, {"id": 2, "k": "a"}]}
        out = _run(script, data)
        assert out["ids"] == [1, 2]
        assert out["by"] == {"a": data["rows"]}

    def test_script_error(self) -> None:
        with pytest.raises(ScriptExecutionError, match="Error executing script"):
            _run("1 / 0")

    def test_compile_error(self) -> None:
        with pytest.raises(ScriptExecutionError, match="Error compiling script"):
            _run("def f(  ")

    def test_timeout_default_from_settings(self) -> None:
        with patch("jsontools.engines.script.executor.settings") as m:
            m.SCRIPT_EXEC_TIMEOUT = 7
            assert ScriptExecutor().timeout == 7


class TestIsolation:
    def test_denied_names_are_none(self) -> None:
        out = _run("[os is None, sys is None, subprocess is None, open is None, time is None]")
        assert out == [True, True, True, True, True]

    def test_open_unusable(self) -> None:
        with pytest.raises(ScriptExecutionError):
            _run("open('/etc/passwd').read()")

    def test_import_fails(self) -> None:
        with pytest.raises(ScriptExecutionError):
            _run("import os\nos.listdir('/')")

    def test_dunder_access_rejected(self) -> None:
        with pytest.raises(ScriptExecutionError):
            _run("data.__class__", {})

    def test_pydash_dunder_path_rejected(self) -> None:
        with pytest.raises(ScriptExecutionError, match="private attributes"):
            _run("py_.get(data, '__class__.__mro__')", {})

    def test_pydash_generator_frame_walk_rejected(self) -> None:
        script = (
            "ref = []\n"
            "def gen():\n"
            "    yield py_.get(ref[0], 'gi_frame.f_back.f_back.f_globals.threading._os.getcwd')\n"
            "g = gen()\n"
            "ref.append(g)\n"
            "list(g)"
        )
        with pytest.raises(ScriptExecutionError, match="private attributes"):
            _run(script)

    @pytest.mark.parametrize(
        "expr",
        [
            "py_.get(g, 'gi_frame')",
            "py_.get(g, ['gi_frame', 'f_globals'])",
            "py_.map_([g], 'gi_code')",
            "py_.map_([g], py_.property_('gi_frame.f_back'))",
            "py_.get(data, '_os')",
            "py_.invoke(data, 'x._private')",
        ],
    )
    def test_pydash_inspection_paths_rejected(self, expr: str) -> None:
        script = f"def gen():\n    yield 1\ng = gen()\n{expr}"
        with pytest.raises(ScriptExecutionError, match="private attributes"):
            _run(script, {"x": {}})

    def test_pydash_on_data_with_dunder_keys(self) -> None:
        assert _run("py_.get(data, 'a')", {"__meta__": 1, "a": 2}) == 2

    def test_state_does_not_leak_between_runs(self) -> None:
        executor = ScriptExecutor(timeout=5)
        executor.execute("leaked = 1", ScriptContext({}))
        with pytest.raises(ScriptExecutionError):
            executor.execute("leaked", ScriptContext({}))


@pytest.mark.skipif(not hasattr(signal, "SIGALRM"), reason="SIGALRM not available (e.g. Windows)")
class TestTimeout:
    def test_infinite_loop_times_out(self) -> None:
        started = time.monotonic()
        with pytest.raises(ScriptTimeoutError, match="timed out"):
            _run("while True:\n    pass", timeout=0.5)
        assert time.monotonic() - started < 5

    def test_timeout_not_swallowed_by_except_exception(self) -> None:
        script = (
            "while True:\n"
            "    try:\n"
            "        while True:\n"
            "            pass\n"
            "    except Exception:\n"
            "        pass\n"
        )
        with pytest.raises(ScriptTimeoutError):
            _run(script, timeout=0.5)

    def test_timeout_is_not_script_error(self) -> None:
        with pytest.raises(ScriptTimeoutError) as exc_info:
            _run("while True:\n    pass", timeout=0.3)
        assert not isinstance(exc_info.value, ScriptExecutionError)
        assert exc_info.value.kind == "TimeoutExceeded"

    def test_alarm_disarmed_after_run(self) -> None:
        _run("1 + 1", timeout=0.2)
        time.sleep(0.4)
        assert signal.getitimer(signal.ITIMER_REAL) == (0.0, 0.0)


def test_worker_thread_timeout() -> None:
    """Off the main thread the budget is enforced by joining a worker."""
    errors: list[BaseException] = []

    def target() -> None:
        try:
            _run("for i in range(30000000):\n    pass", timeout=0.05)
        except BaseException as e:
            errors.append(e)

    t = threading.Thread(target=target)
    t.start()
    t.join(10)
    assert len(errors) == 1
    assert isinstance(errors[0], ScriptTimeoutError)


def test_worker_thread_script_error() -> None:
    errors: list[BaseException] = []

    def target() -> None:
        try:
            _run("{}['missing']", timeout=5)
        except BaseException as e:
            errors.append(e)

    t = threading.Thread(target=target)
    t.start()
    t.join(10)
    assert len(errors) == 1
    assert isinstance(errors[0], ScriptExecutionError)


class TestScriptContextToDict:
    def test_has_data_py_jp(self) -> None:
        ctx = ScriptContext({"k": "v"})
        d = ctx.to_dict()
        assert d["data"] == {"k": "v"}
        assert callable(d["py_"].get)
        assert callable(d["jp"].query)

    def test_fresh_modules_per_context(self) -> None:
        assert ScriptContext(None).py_ is not ScriptContext(None).py_

    def test_execute_uses_context_bindings(self) -> None:
        ctx = MagicMock()
        ctx.to_dict.return_value = {"data": 41}
        assert ScriptExecutor(timeout=5).execute("data + 1", ctx) == 42
