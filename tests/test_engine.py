"""Test Engine configuration, caching, escaping and logging."""

from __future__ import annotations

import hashlib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from moustache import (
    VERSION,
    ConfigurationError,
    DictLoader,
    Engine,
    FileSystemLoader,
    HelperCollection,
    StringLoader,
    TemplateNotFoundError,
    TemplateSyntaxError,
)
from moustache.compiler import Compiler
from moustache.environment.exceptions import ErrorCode


@pytest.fixture
def compile_counter(monkeypatch: pytest.MonkeyPatch) -> list[str | None]:
    """Record the name of every template the Compiler compiles."""
    compiled: list[str | None] = []
    original = Compiler.compile

    def counting_compile(self, node, **kwargs):
        compiled.append(kwargs.get("name"))
        return original(self, node, **kwargs)

    monkeypatch.setattr(Compiler, "compile", counting_compile)
    return compiled


class TestTemplateCache:
    """Identical source + configuration compiles once."""

    def test_same_source_same_template(self, engine: Engine) -> None:
        assert engine.load_template("Hi {{a}}") is engine.load_template("Hi {{a}}")

    def test_repeated_render_compiles_once(
        self, engine: Engine, compile_counter: list[str | None]
    ) -> None:
        first = engine.render("{{#a}}{{.}}{{/a}}", {"a": [1, 2]})
        second = engine.render("{{#a}}{{.}}{{/a}}", {"a": [1, 2]})
        assert first == second == "12"
        assert len(compile_counter) == 1

    def test_lambda_templates_are_bounded(
        self,
        engine: Engine,
        compile_counter: list[str | None],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr("moustache.environment.core.LAMBDA_CACHE_SIZE", 2)
        a = engine.load_lambda("a")
        engine.load_lambda("b")
        assert engine.load_lambda("a") is a
        assert len(compile_counter) == 2
        # "b" is least recently used and makes room for "c"
        engine.load_lambda("c")
        engine.load_lambda("b")
        assert len(compile_counter) == 4
        assert engine.load_lambda("c").render() == "c"

    def test_varying_lambda_results_do_not_grow_template_cache(self, engine: Engine) -> None:
        ticks = iter(range(1000))
        data = {"now": lambda: f"tick {next(ticks)}"}
        for _ in range(300):
            engine.render("{{now}}", data)
        assert repr(engine).endswith("templates=1 helpers=0>")

    def test_lambda_result_reuses_loaded_template(self, engine: Engine) -> None:
        template = engine.load_template("Hi {{name}}")
        assert engine.load_lambda("Hi {{name}}") is template

    def test_different_sources_compile_separately(
        self, engine: Engine, compile_counter: list[str | None]
    ) -> None:
        engine.render("a")
        engine.render("b")
        assert len(compile_counter) == 2

    def test_partials_are_cached(self, compile_counter: list[str | None]) -> None:
        engine = Engine(partials={"p": "[{{.}}]"})
        assert engine.render("{{#items}}{{> p}}{{/items}}", {"items": [1, 2, 3]}) == "[1][2][3]"
        assert len(compile_counter) == 2

    def test_same_source_under_two_names_shares_template(self) -> None:
        engine = Engine(loader=DictLoader({"a": "same", "b": "same"}))
        assert engine.load_template("a") is engine.load_template("b")

    def test_clear_cache(self, engine: Engine, compile_counter: list[str | None]) -> None:
        first = engine.load_template("x")
        engine.clear_cache()
        second = engine.load_template("x")
        assert first is not second
        assert len(compile_counter) == 2

    def test_concurrent_first_access_compiles_once(
        self, compile_counter: list[str | None]
    ) -> None:
        engine = Engine()
        source = "{{#items}}{{name}}{{/items}}"
        barrier = threading.Barrier(8)

        def load(_: int):
            barrier.wait()
            return engine.load_template(source)

        with ThreadPoolExecutor(max_workers=8) as executor:
            templates = list(executor.map(load, range(8)))

        assert all(t is templates[0] for t in templates)
        assert len(compile_counter) == 1

    def test_concurrent_rendering(self) -> None:
        engine = Engine(partials={"row": "{{n}};"})
        template = engine.load_template("{{#rows}}{{> row}}{{/rows}}")

        def render(i: int) -> str:
            return template.render({"rows": [{"n": i}, {"n": i + 1}]})

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(render, range(50)))

        assert results == [f"{i};{i + 1};" for i in range(50)]


class TestTemplateClassName:
    def test_key_format(self, engine: Engine) -> None:
        source = "Hello {{name}}"
        digest = hashlib.md5(
            f"version:{VERSION},escape:default,charset:UTF-8,source:{source}".encode()
        ).hexdigest()
        assert engine.get_template_class_name(source) == "Moustache_Template_" + digest

    def test_prefix(self) -> None:
        engine = Engine(template_class_prefix="__Custom_")
        assert engine.get_template_class_name("x").startswith("__Custom_")

    def test_escape_mode_changes_key(self) -> None:
        source = "{{x}}"
        keys = {
            Engine().get_template_class_name(source),
            Engine(escape=str.upper).get_template_class_name(source),
            Engine(autoescape=False).get_template_class_name(source),
            Engine(charset="ISO-8859-1").get_template_class_name(source),
        }
        assert len(keys) == 4

    def test_template_knows_its_key(self, engine: Engine) -> None:
        template = engine.load_template("x")
        assert template.class_name == engine.get_template_class_name("x")


class TestEscaping:
    def test_custom_escape(self) -> None:
        engine = Engine(escape=lambda s: s.replace(" ", "_"))
        assert engine.render("{{x}}|{{{x}}}", {"x": "a b<"}) == "a_b<|a b<"

    def test_autoescape_off(self, engine_raw: Engine) -> None:
        assert engine_raw.render("{{x}}", {"x": "<b>"}) == "<b>"

    def test_charset_fallback(self) -> None:
        engine = Engine(charset="ascii")
        assert engine.render("{{x}}|{{{x}}}", {"x": "café"}) == "caf&#233;|café"

    def test_single_quote_is_not_escaped(self, engine: Engine) -> None:
        assert engine.render("{{x}}", {"x": "it's"}) == "it's"


class TestConfiguration:
    def test_defaults(self, engine: Engine) -> None:
        assert isinstance(engine.loader, StringLoader)
        assert isinstance(engine.partials_loader, DictLoader)
        assert isinstance(engine.helpers, HelperCollection)
        assert engine.escape is None
        assert engine.charset == "UTF-8"
        assert engine.autoescape is True
        assert engine.cache is None
        assert engine.logger is logging.getLogger("moustache")

    def test_non_callable_escape(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            Engine(escape="html")  # type: ignore[arg-type]
        assert exc_info.value.code is ErrorCode.INVALID_OPTION

    def test_configuration_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            Engine(escape=42)  # type: ignore[arg-type]

    def test_unknown_charset(self) -> None:
        with pytest.raises(ConfigurationError):
            Engine(charset="no-such-charset")

    @pytest.mark.parametrize("helpers", [42, "abc", [1, 2]])
    def test_invalid_helpers(self, helpers) -> None:
        with pytest.raises(ConfigurationError):
            Engine(helpers=helpers)

    def test_helpers_from_pairs(self) -> None:
        engine = Engine(helpers=[("a", 1), ("b", 2)])
        assert engine.render("{{a}}{{b}}") == "12"

    @pytest.mark.parametrize("logger", ["moustache", 42, object()])
    def test_invalid_logger(self, logger) -> None:
        with pytest.raises(ConfigurationError):
            Engine(logger=logger)

    def test_logger_adapter(self) -> None:
        adapter = logging.LoggerAdapter(logging.getLogger("moustache.adapter"), {"app": "x"})
        assert Engine(logger=adapter).logger is adapter

    def test_invalid_cache(self) -> None:
        with pytest.raises(ConfigurationError):
            Engine(cache=42)

    def test_invalid_loader(self) -> None:
        with pytest.raises(ConfigurationError):
            Engine(loader=object())  # type: ignore[arg-type]
        with pytest.raises(ConfigurationError):
            Engine(partials_loader="templates/")  # type: ignore[arg-type]

    def test_partials_need_mutable_loader(self) -> None:
        with pytest.raises(ConfigurationError):
            Engine(partials_loader=StringLoader(), partials={"a": "b"})

    def test_set_partials(self, engine: Engine) -> None:
        engine.set_partials({"p": "partial"})
        assert engine.render("{{> p}}") == "partial"
        engine.set_partials({"q": "other"})
        assert engine.render("{{> p}}{{> q}}") == "partialother"

    def test_set_loaders(self, engine: Engine) -> None:
        engine.set_loader(DictLoader({"page": "{{> nav}}!"}))
        engine.set_partials_loader(DictLoader({"nav": "NAV"}))
        assert engine.render("page") == "NAV!"


class TestHelpers:
    def test_accessors(self, engine: Engine) -> None:
        engine.add_helper("site", "Docs")
        assert engine.has_helper("site")
        assert engine.get_helper("site") == "Docs"
        assert engine.render("{{site}}") == "Docs"
        engine.remove_helper("site")
        assert not engine.has_helper("site")
        assert engine.render("{{site}}") == ""

    def test_get_missing_helper(self, engine: Engine) -> None:
        with pytest.raises(KeyError):
            engine.get_helper("nope")

    def test_remove_missing_helper(self, engine: Engine) -> None:
        with pytest.raises(KeyError):
            engine.remove_helper("nope")

    def test_set_helpers_replaces(self) -> None:
        engine = Engine(helpers={"a": 1})
        engine.set_helpers({"b": 2})
        assert not engine.has_helper("a")
        assert engine.render("{{a}}{{b}}") == "2"

    def test_helpers_added_after_compile(self, engine: Engine) -> None:
        template = engine.load_template("{{late}}")
        assert template.render() == ""
        engine.add_helper("late", "now")
        assert template.render() == "now"

    def test_collection_snapshot_is_copy_on_write(self) -> None:
        helpers = HelperCollection({"a": 1})
        snapshot = helpers.snapshot()
        helpers.add("b", 2)
        assert dict(snapshot) == {"a": 1}
        assert sorted(helpers) == ["a", "b"]
        assert len(helpers) == 2


class TestLoading:
    def test_load_template_by_name(self, engine_with_loader: Engine) -> None:
        template = engine_with_loader.load_template("greeting")
        assert template.name == "greeting"
        assert template.render(name="Ada") == "Hello Ada!"

    def test_string_template_name(self, engine: Engine) -> None:
        assert engine.load_template("x").name == "<string>"

    def test_template_not_found(self, engine_with_loader: Engine) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            engine_with_loader.load_template("greetings")
        assert "Did you mean 'greeting'?" in str(exc_info.value)

    def test_file_system_loader(self, tmp_path) -> None:
        (tmp_path / "page.mustache").write_text("<p>{{> footer}}</p>")
        (tmp_path / "footer.mustache").write_text("{{year}}")
        loader = FileSystemLoader(tmp_path)
        engine = Engine(loader=loader, partials_loader=loader)
        assert engine.render("page", {"year": 2024}) == "<p>2024</p>"
        assert engine.load_template("page").name == str(tmp_path / "page.mustache")

    def test_syntax_error_carries_template_name(self) -> None:
        engine = Engine(loader=DictLoader({"bad": "line\n{{#open}}"}))
        with pytest.raises(TemplateSyntaxError) as exc_info:
            engine.load_template("bad")
        assert exc_info.value.name == "bad"
        assert exc_info.value.lineno == 2

    def test_failed_compile_is_not_cached(self, engine: Engine) -> None:
        for _ in range(2):
            with pytest.raises(TemplateSyntaxError):
                engine.load_template("{{/x}}")

    def test_load_partial_missing_returns_none(self, engine: Engine) -> None:
        assert engine.load_partial("missing") is None

    def test_load_lambda_with_delimiters(self, engine: Engine) -> None:
        template = engine.load_lambda("<%a%>{{a}}", "{{=<% %>=}}")
        assert template.render({"a": 1}) == "1{{a}}"

    def test_load_lambda_without_delimiters(self, engine: Engine) -> None:
        assert engine.load_lambda("{{a}}").render({"a": 1}) == "1"

    def test_repr(self, engine: Engine) -> None:
        assert repr(engine).startswith("<Engine loader=StringLoader")
        assert repr(engine.load_template("x")) == "<Template <string>>"


class TestLogging:
    def test_compile_events(self, captured_logger, caplog: pytest.LogCaptureFixture) -> None:
        engine = Engine(logger=captured_logger)
        class_name = engine.get_template_class_name("x{{a}}")
        with caplog.at_level(logging.DEBUG, logger=captured_logger.name):
            engine.render("x{{a}}")
            engine.render("x{{a}}")

        events = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert events == [
            (logging.DEBUG, f'Template cache disabled, parsing "{class_name}" at runtime'),
            (logging.INFO, f'Compiling template to "{class_name}"'),
            (logging.DEBUG, f'Instantiating template: "{class_name}"'),
        ]

    def test_structured_fields(self, captured_logger, caplog: pytest.LogCaptureFixture) -> None:
        engine = Engine(logger=captured_logger)
        with caplog.at_level(logging.DEBUG, logger=captured_logger.name):
            engine.render("y")
        assert all(
            r.moustache == {"class_name": engine.get_template_class_name("y")}
            for r in caplog.records
        )

    def test_missing_partial_warning_through_adapter(self, caplog: pytest.LogCaptureFixture) -> None:
        base = logging.getLogger("moustache.adapter")
        engine = Engine(logger=logging.LoggerAdapter(base, {"request_id": "r1"}))
        with caplog.at_level(logging.WARNING, logger=base.name):
            engine.render("{{> nav}}")
        (record,) = caplog.records
        assert record.levelno == logging.WARNING
        assert record.getMessage() == 'Partial not found: "nav"'
        assert record.moustache == {"name": "nav"}
        assert record.request_id == "r1"

    def test_disabled_levels_are_skipped(
        self, captured_logger, caplog: pytest.LogCaptureFixture
    ) -> None:
        engine = Engine(logger=captured_logger)
        with caplog.at_level(logging.ERROR, logger=captured_logger.name):
            engine.render("{{> nav}}z")
        assert caplog.records == []
