"""Tests for the text and JSON formatters."""

import json

import chainlog
from chainlog import Level, Log, LogConfig, Raw, StackFilter, use_config
from chainlog.formatters import BLOCKS, COLORS, RESET, format_json, format_text
from chainlog.stacks import Frame

T = "15:04:05 "


def failing_function():
    raise ValueError("deep failure")


class TestFormatText:
    """Layout of the text formatter."""

    def test_minimal(self):
        assert format_text(Log(msg="hi")) == T + "INFO: hi"

    def test_custom_time_format(self, captured):
        captured.config.fmt_time = "%Y-%m-%dT%H:%M:%S | "
        assert format_text(Log(msg="hi")) == "2024-01-02T15:04:05 | INFO: hi"

    def test_levels(self):
        for level in Level:
            assert f"{level.label}: x" in format_text(Log(msg="x", level=level))

    def test_raw_field(self):
        entry = chainlog.module("db").field("sql", Raw("SELECT 1")).field("n", 2)
        assert format_text(Log(msg="q", modules=entry.modules, data=entry.data)) == (
            T + "db: INFO: q {n=2 sql=SELECT 1}"
        )

    def test_traces_only_on_error(self):
        entry = Log(msg="x", traces=("trace line",))
        assert format_text(entry) == T + "INFO: x"
        err = Log(err=ValueError("e"), level=Level.ERROR, traces=("t1", "t2"))
        assert format_text(err) == "t1\nt2\n" + T + "ERROR: e"

    def test_colors(self, captured):
        captured.config.colors = True
        out = format_text(Log(msg="x", level=Level.ERROR, err=ValueError("boom")))
        assert out.startswith(BLOCKS[Level.ERROR] + "  " + RESET + " ")
        assert f"{COLORS[Level.ERROR]}ERROR:{RESET} boom" in out

    def test_no_colors_by_default(self):
        assert "\033[" not in format_text(Log(msg="x"))


class TestStackTrace:
    """Stack traces on errors."""

    FRAMES = (
        Frame("main", "/app/main.py", 10),
        Frame("handler", "/venv/site-packages/flask/app.py", 200),
        Frame("work", "/app/work.py", 42),
    )

    def test_rendered_for_errors(self, captured):
        captured.config.stack_trace = True
        entry = Log(err=ValueError("e"), level=Level.ERROR, stack=self.FRAMES)
        assert format_text(entry) == (
            T + "ERROR: e"
            "\n\tmain\n\t\t/app/main.py:10"
            "\n\thandler\n\t\t/venv/site-packages/flask/app.py:200"
            "\n\twork\n\t\t/app/work.py:42"
        )

    def test_not_rendered_when_disabled(self, captured):
        entry = Log(err=ValueError("e"), level=Level.ERROR, stack=self.FRAMES)
        assert format_text(entry) == T + "ERROR: e"

    def test_filter_exclude(self, captured):
        captured.config.stack_trace = True
        captured.config.stack_filter = StackFilter(exclude=["site-packages"])
        entry = Log(err=ValueError("e"), level=Level.ERROR, stack=self.FRAMES)
        out = format_text(entry)
        assert "flask" not in out
        assert "/app/main.py:10" in out
        assert "/app/work.py:42" in out

    def test_filter_include(self):
        f = StackFilter(include=[r"^work "])
        assert f.apply(self.FRAMES) == (self.FRAMES[2],)

    def test_captured_from_raised_exception(self, captured):
        captured.config.stack_trace = True
        try:
            failing_function()
        except ValueError as e:
            chainlog.module("job").error(e)

        out = captured.out
        assert out.startswith(T + "job: ERROR: deep failure\n\t")
        assert "\n\tfailing_function\n\t\t" in out
        assert "test_formatters.py:" in out

    def test_captured_at_call_site(self, captured):
        captured.config.stack_trace = True
        chainlog.errorf("not raised")
        out = captured.out
        assert "\n\ttest_captured_at_call_site\n\t\t" in out
        assert "chainlog/entry.py" not in out

    def test_stack_stored_on_entry(self, captured):
        captured.config.stack_trace = True
        seen = []
        captured.config.add_output(seen.append)
        chainlog.error(ValueError("x"))
        assert seen[0].stack
        assert seen[0].stack[-1].function == "test_stack_stored_on_entry"


class TestFormatJson:
    """Tests for format_json."""

    def test_info(self):
        entry = chainlog.module("pool").fields({"n": 1, "b": b"x", "ok": True})
        record = json.loads(format_json(Log(msg="hi", modules=entry.modules, data=entry.data)))
        assert record == {
            "time": "2024-01-02T15:04:05",
            "level": "INFO",
            "modules": ["pool"],
            "msg": "hi",
            "fields": {"b": "x", "n": 1, "ok": True},
        }

    def test_error_with_traces_and_stack(self, captured):
        captured.config.stack_trace = True
        entry = Log(
            err=KeyError("k"),
            level=Level.ERROR,
            traces=("t1",),
            stack=(Frame("f", "/a.py", 3),),
        )
        record = json.loads(format_json(entry))
        assert record["error"] == "'k'"
        assert record["error_class"] == "KeyError"
        assert record["traces"] == ["t1"]
        assert record["stack"] == [{"function": "f", "file": "/a.py", "line": 3}]
        assert "msg" not in record

    def test_as_configured_formatter(self, captured):
        captured.config.format = format_json
        chainlog.module("m").field("obj", object).print("x")
        record = json.loads(captured.out)
        assert record["fields"]["obj"] == "<class 'object'>"

    def test_json_traces_are_json(self):
        with use_config(LogConfig(outputs=[], format=format_json)):
            entry = chainlog.module("m").trace("t")
        assert json.loads(entry.traces[0])["level"] == "TRACE"
