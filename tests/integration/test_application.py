"""
End-to-end sessions driven through the Application loop with scripted input.
"""
import io
import json
from types import SimpleNamespace

import pytest

from jute.app.application import AppConfig, Application, SessionOutcome
from jute.core.errors import ExportError, TerminalError
from jute.core.input import InputEvent, Key
from jute.core.renderer import RendererConfig
from jute.main import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_OK, build_parser, config_from_args, main
from jute.renderers import ScriptedRenderer, keys_for_text


def scripted(text: str, *extra: InputEvent) -> ScriptedRenderer:
    return ScriptedRenderer(keys_for_text(text) + list(extra), RendererConfig(stream=io.StringIO()))


def run_session(text: str, config: AppConfig = None):
    renderer = scripted(text)
    stdout = io.BytesIO()
    app = Application(renderer, config, stdout=stdout)
    outcome = app.run()
    return app, renderer, outcome, stdout.getvalue()


class TestSessions:

    def test_single_pair_to_stdout(self):
        app, renderer, outcome, output = run_session("name\tjute\nqy")

        assert outcome == SessionOutcome.EXPORTED
        assert output == b'{"name":"jute"}\n'
        assert renderer.initialized and renderer.cleaned_up
        assert renderer.remaining == 0

    def test_typed_values(self):
        _, _, _, output = run_session("count\t3\neok\ttrue\nqy", AppConfig(typed=True))
        assert output == b'{"count":3,"ok":true}\n'

    def test_duplicate_key_last_write_wins(self):
        _, _, _, output = run_session("k\tv1\nek\tv2\nqy")
        assert output == b'{"k":"v2"}\n'

    def test_submit_key_exports_without_prompt(self):
        _, _, outcome, output = run_session("a\t1\ns")

        assert outcome == SessionOutcome.EXPORTED
        assert output == b'{"a":"1"}\n'

    def test_cancel_at_prompt_exports_nothing(self):
        _, _, outcome, output = run_session("a\t1\nqn")

        assert outcome == SessionOutcome.CANCELLED
        assert output == b""

    def test_end_of_input_cancels(self):
        _, _, outcome, output = run_session("a\t1\n")

        assert outcome == SessionOutcome.CANCELLED
        assert output == b""

    def test_empty_submit_is_rejected_then_recovers(self):
        renderer = scripted("", InputEvent.key_press(Key.ESCAPE),
                            InputEvent.char_press("q"), InputEvent.char_press("y"),
                            *keys_for_text("ea\t1\nqy"))
        stdout = io.BytesIO()
        app = Application(renderer, stdout=stdout)

        assert app.run() == SessionOutcome.EXPORTED
        assert stdout.getvalue() == b'{"a":"1"}\n'
        assert any(frame.status and frame.status.text.startswith("Nothing to export")
                   for frame in renderer.frames)

    def test_allow_empty_exports_empty_object(self):
        renderer = scripted("", InputEvent.key_press(Key.ESCAPE), InputEvent.char_press("s"))
        stdout = io.BytesIO()
        app = Application(renderer, AppConfig(allow_empty=True), stdout=stdout)

        assert app.run() == SessionOutcome.EXPORTED
        assert stdout.getvalue() == b"{}\n"

    def test_frames_follow_the_session(self):
        _, renderer, _, _ = run_session("a\t1\nq")

        first, last = renderer.frames[0], renderer.frames[-1]
        assert first.mode_label == "Editing Mode"
        assert first.title == RendererConfig().title
        assert last.dialog is not None
        assert [entry.key for entry in last.entries] == ["a"]

    def test_vim_scheme(self):
        _, _, _, output = run_session("a\t1\nib\t2\nkxqy", AppConfig(key_scheme="vim"))
        assert output == b'{"b":"2"}\n'

    def test_unknown_scheme_warns(self):
        app, _, _, _ = run_session("", AppConfig(key_scheme="emacs"))

        warnings = [msg.text for msg in app.log_manager.messages if msg.category.name == "WARNING"]
        assert "Unknown key scheme 'emacs', using default" in warnings


class TestFileOutput:

    def test_writes_file(self, tmp_path):
        target = tmp_path / "out.json"
        _, _, outcome, output = run_session("name\tjute\nqy", AppConfig(output=str(target)))

        assert outcome == SessionOutcome.EXPORTED
        assert output == b""
        assert json.loads(target.read_text(encoding="utf-8")) == {"name": "jute"}

    def test_cancel_leaves_no_file(self, tmp_path):
        target = tmp_path / "out.json"
        run_session("name\tjute\nqn", AppConfig(output=str(target)))

        assert not target.exists()

    def test_export_failure_raises_after_cleanup(self, tmp_path):
        renderer = scripted("a\t1\nqy")
        app = Application(renderer, AppConfig(output=str(tmp_path / "missing" / "out.json")))

        with pytest.raises(ExportError):
            app.run()
        assert renderer.cleaned_up

    def test_session_log_saved(self, tmp_path):
        log_path = tmp_path / "session.log"
        run_session("a\t1\nqy", AppConfig(log_file=str(log_path), debug=True))

        content = log_path.read_text(encoding="utf-8")
        assert "Session started" in content
        assert "Added 'a'" in content
        assert "CONFIRM: EDITING_VALUE -> IDLE" in content
        assert "Wrote 1 pairs" in content

    def test_debug_controls_log_file_detail(self, tmp_path):
        quiet_path = tmp_path / "quiet.log"
        debug_path = tmp_path / "debug.log"
        run_session("a\t1\nqy", AppConfig(log_file=str(quiet_path)))
        run_session("a\t1\nqy", AppConfig(log_file=str(debug_path), debug=True))

        quiet = quiet_path.read_text(encoding="utf-8")
        verbose = debug_path.read_text(encoding="utf-8")

        assert "Level: INFO" in quiet
        assert "[DEBUG]" not in quiet
        assert "[INPUT]" not in quiet
        assert "Added 'a'" in quiet
        assert "Level: DEBUG" in verbose
        assert "[DEBUG]" in verbose
        assert "[INPUT]" in verbose
        assert len(verbose.splitlines()) > len(quiet.splitlines())

    def test_session_log_saved_on_export_failure(self, tmp_path):
        log_path = tmp_path / "session.log"
        config = AppConfig(output=str(tmp_path / "missing" / "out.json"), log_file=str(log_path))

        with pytest.raises(ExportError):
            Application(scripted("a\t1\nqy"), config).run()

        assert "Cannot write to" in log_path.read_text(encoding="utf-8")


class InterruptingRenderer(ScriptedRenderer):
    def get_input_events(self):
        raise KeyboardInterrupt


class NoTerminalRenderer(ScriptedRenderer):
    def initialize(self):
        raise TerminalError("jute needs an interactive terminal on stdin")


class BrokenPipeStream:
    def write(self, data):
        raise BrokenPipeError(32, "Broken pipe")

    def flush(self):
        pass


class TestMain:

    @pytest.fixture
    def use_renderer(self, monkeypatch):
        """Make main() build the given renderer class with the given script."""
        def install(renderer_class=ScriptedRenderer, text=""):
            def factory(config):
                return renderer_class(keys_for_text(text), RendererConfig(stream=io.StringIO()))
            monkeypatch.setattr("jute.renderers.terminal_renderer.TerminalRenderer", factory)
        return install

    def test_parser_defaults(self):
        config = config_from_args(build_parser().parse_args([]))
        assert config == AppConfig()

    def test_parser_flags(self):
        args = build_parser().parse_args(
            ["-o", "out.json", "--typed", "--allow-empty", "--indent", "2",
             "--key-scheme", "vim", "--debug"]
        )
        config = config_from_args(args)

        assert config.output == "out.json"
        assert config.typed and config.allow_empty and config.debug
        assert config.indent == 2
        assert config.key_scheme == "vim"

    def test_export_to_stdout(self, use_renderer, capsysbinary):
        use_renderer(text="name\tjute\nqy")

        assert main([]) == EXIT_OK
        assert capsysbinary.readouterr().out == b'{"name":"jute"}\n'

    def test_export_to_file_reports_on_stderr(self, use_renderer, capsys, tmp_path):
        target = tmp_path / "out.json"
        use_renderer(text="a\t1\neb\t2\nqy")

        assert main(["-o", str(target)]) == EXIT_OK
        assert capsys.readouterr().err == f"Saved 2 pairs to {target}\n"
        assert target.exists()

    def test_cancel_exits_cleanly(self, use_renderer, capsysbinary):
        use_renderer(text="a\t1\nqn")

        assert main([]) == EXIT_OK
        assert capsysbinary.readouterr().out == b""

    def test_export_failure(self, use_renderer, capsys, tmp_path):
        use_renderer(text="a\t1\nqy")

        assert main(["-o", str(tmp_path / "missing" / "out.json")]) == EXIT_FAILURE
        assert capsys.readouterr().err.startswith("jute: Cannot write to")

    def test_interrupt(self, use_renderer, capsys):
        use_renderer(InterruptingRenderer)

        assert main([]) == EXIT_INTERRUPTED
        assert "Interrupted" in capsys.readouterr().err

    def test_no_terminal(self, use_renderer, capsys):
        use_renderer(NoTerminalRenderer)

        assert main([]) == EXIT_FAILURE
        assert "interactive terminal" in capsys.readouterr().err

    def test_broken_stdout(self, use_renderer, capsys, monkeypatch):
        use_renderer(text="a\t1\nqy")
        monkeypatch.setattr("jute.app.exporter.sys",
                            SimpleNamespace(stdout=SimpleNamespace(buffer=BrokenPipeStream())))

        assert main([]) == EXIT_FAILURE
        assert capsys.readouterr().err == "jute: Cannot write to stdout: Broken pipe\n"
