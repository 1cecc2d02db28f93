"""
Execution context tests

Tests the context registry, the capturing console and the module loader.
"""

import sys

import pytest
from pathlib import Path

from runmd.config import AppSettings
from runmd.lib.context import CapturingConsole, ContextRegistry, ModuleLoader
from runmd.lib.transform import FunctionTransform
from runmd.models.render import RenderPassState


@pytest.fixture
def state():
    return RenderPassState()


@pytest.fixture
def registry(state, tmp_path):
    return ContextRegistry(state, tmp_path / "doc.md", AppSettings())


class TestContextRegistry:
    """Test context creation and caching"""

    def test_named_context_is_cached(self, registry):
        """Same name returns the same instance"""
        first = registry.context_get("demo")
        second = registry.context_get("demo")

        assert first is second
        assert "demo" in registry
        assert len(registry) == 1

    def test_anonymous_contexts_are_fresh(self, registry):
        """No name returns a new context every time"""
        first = registry.context_get()
        second = registry.context_get(None)

        assert first is not second
        assert first.namespace is not second.namespace
        assert len(registry) == 0

    def test_distinct_names_distinct_contexts(self, registry):
        """Different names never share bindings"""
        a = registry.context_get("a")
        b = registry.context_get("b")

        a.namespace["x"] = 1
        assert "x" not in b.namespace

    def test_context_get_resets_transform(self, registry, state):
        """Fetching a context, even a cached one, clears the transform"""
        registry.context_get("demo")
        state.transform = FunctionTransform(lambda line, in_block: line)

        registry.context_get("demo")
        assert state.transform is None

    def test_namespace_capabilities(self, registry, tmp_path):
        """Namespaces carry console, print, require and the transform hook"""
        context = registry.context_get()
        namespace = context.namespace

        assert namespace["console"] is context.console
        assert namespace["print"] == context.console.print
        assert namespace["require"] is context.loader
        assert callable(namespace["set_line_transformer"])
        assert namespace["__file__"] == str(tmp_path / "doc.md")
        assert context.loader.base_dir == tmp_path

    def test_namespace_is_registered_module(self, registry):
        """Each namespace belongs to a module importable via sys.modules"""
        context = registry.context_get()

        assert context.namespace["__name__"] == context.module_name
        assert sys.modules[context.module_name] is context.module
        assert context.module_name != registry.context_get().module_name

    def test_modules_release(self, registry):
        """Releasing the pass unregisters every context module"""
        names = [registry.context_get("demo").module_name, registry.context_get().module_name]

        registry.modules_release()
        assert all(name not in sys.modules for name in names)
        assert registry.created == []

    def test_transformer_set(self, registry, state):
        """set_line_transformer installs and clears the transform"""
        registry.transformer_set(lambda line, in_block: line.upper())
        assert state.transform.apply("abc", False) == "ABC"

        registry.transformer_set(None)
        assert state.transform is None

    def test_transformer_set_rejects_non_callable(self, registry):
        """Non-callable transformers are a TypeError"""
        with pytest.raises(TypeError, match="callable"):
            registry.transformer_set(42)


class TestCapturingConsole:
    """Test console.log and print capture"""

    @pytest.fixture
    def console(self, state):
        return CapturingConsole(state, AppSettings())

    def test_log_string(self, console, state):
        """Strings pass through with the marker prefix"""
        console.log("hi")
        assert state.output_lines == ["⇒ hi"]

    def test_log_joins_arguments(self, console, state):
        """Arguments are joined with a single space"""
        console.log("a", 1, [1, 2])
        assert state.output_lines == ["⇒ a 1 [1, 2]"]

    def test_log_formats_objects(self, console, state):
        """Non-strings are pretty-formatted"""
        console.log({"a": 1})
        assert state.output_lines == ["⇒ {'a': 1}"]

    def test_log_multiline(self, console, state):
        """Each line of output gets its own marker"""
        console.log("one\ntwo")
        assert state.output_lines == ["⇒ one", "⇒ two"]

    def test_log_dropped_while_hiding(self, console, state):
        """Nothing is captured while the pass is hiding"""
        state.hide = True
        console.log("secret")
        assert state.output_lines == []

    def test_print_semantics(self, console, state):
        """print uses str(), sep and end"""
        console.print("a", "b", sep="-")
        console.print("c", end="")
        console.print()
        assert state.output_lines == ["⇒ a-b", "⇒ c"]

    def test_print_end_continues_line(self, console, state):
        """Text without a newline stays pending until one arrives"""
        for i in range(3):
            console.print(i, end=" ")
        assert state.output_lines == []

        console.print()
        assert state.output_lines == ["⇒ 0 1 2 "]

    def test_pending_flush(self, console, state):
        """An unterminated line is captured on flush, once"""
        console.write("partial")
        console.pending_flush()
        console.pending_flush()
        assert state.output_lines == ["⇒ partial"]
        assert console.pending == ""

    def test_write_splits_lines(self, console, state):
        """write() behaves like a text stream"""
        console.write("one\ntw")
        console.write("o\n")
        assert state.output_lines == ["⇒ one", "⇒ two"]

    def test_print_trailing_newline_in_text(self, console, state):
        """Only the terminating newline is consumed"""
        console.print("a\n")
        assert state.output_lines == ["⇒ a", "⇒ "]

    def test_print_to_file(self, console, state, tmp_path):
        """An explicit file bypasses capture"""
        target = tmp_path / "out.txt"
        with target.open("w") as handle:
            console.print("to file", file=handle)

        assert state.output_lines == []
        assert target.read_text() == "to file\n"

    def test_custom_marker(self, state):
        """Marker glyph comes from settings"""
        console = CapturingConsole(state, AppSettings(output_marker=">>"))
        console.log("x")
        assert state.output_lines == [">> x"]

    def test_is_runmd(self, console):
        """Code can detect it runs under runmd"""
        assert console.is_runmd is True


class TestModuleLoader:
    """Test require() resolution relative to the document"""

    @pytest.fixture
    def docdir(self, tmp_path):
        (tmp_path / "helpers.py").write_text("VALUE = 7\n")
        package = tmp_path / "tools"
        package.mkdir()
        (package / "__init__.py").write_text("NAME = 'tools'\n")
        before = set(sys.modules)
        yield tmp_path
        for name in set(sys.modules) - before:
            del sys.modules[name]

    def test_relative_file(self, docdir):
        """./file.py loads a sibling file"""
        loader = ModuleLoader(docdir)
        assert loader("./helpers.py").VALUE == 7

    def test_bare_name(self, docdir):
        """A bare name finds name.py beside the document"""
        loader = ModuleLoader(docdir)
        assert loader("helpers").VALUE == 7

    def test_cached_by_path(self, docdir):
        """Different spellings of the same file load it once"""
        loader = ModuleLoader(docdir)
        assert loader("helpers") is loader("./helpers.py")

    def test_package(self, docdir):
        """A directory with __init__.py loads as a package"""
        loader = ModuleLoader(docdir)
        assert loader("tools").NAME == "tools"
        assert loader("./tools").NAME == "tools"

    def test_fallback_import(self, docdir):
        """Names not found locally are imported normally"""
        import json

        loader = ModuleLoader(docdir)
        assert loader("json") is json

    def test_missing_relative_file(self, docdir):
        """A missing relative file is ModuleNotFoundError"""
        loader = ModuleLoader(docdir)
        with pytest.raises(ModuleNotFoundError):
            loader("./missing.py")

    def test_failed_load_not_cached(self, docdir):
        """A module whose code raises is not cached"""
        (docdir / "broken.py").write_text("raise RuntimeError('nope')\n")
        loader = ModuleLoader(docdir)

        with pytest.raises(RuntimeError, match="nope"):
            loader("broken")
        assert loader.modules == {}

    def test_module_registered_and_released(self, docdir):
        """Loaded files are visible in sys.modules until released"""
        loader = ModuleLoader(docdir)
        module = loader("./helpers.py")

        assert sys.modules[module.__name__] is module
        loader.modules_release()
        assert module.__name__ not in sys.modules

    def test_taken_name_gets_unique_key(self, docdir):
        """A file named like a loaded module does not replace it"""
        import json

        (docdir / "json.py").write_text("LOCAL = True\n")
        loader = ModuleLoader(docdir)
        module = loader("./json.py")

        assert module.LOCAL is True
        assert module.__name__ != "json"
        assert sys.modules["json"] is json
        loader.modules_release()
