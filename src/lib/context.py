"""
Execution contexts for block code

Each executable block runs against the namespace of an ExecutionContext.
Contexts are handed out by a ContextRegistry owned by a single render pass:

- Named contexts (```python --context=NAME) are cached, so later blocks with
  the same name see the bindings of earlier ones.
- Anonymous contexts are built fresh for every block and never cached.

Every namespace is the __dict__ of a module registered in sys.modules for
the duration of the render pass (dataclasses and typing look classes up
there by __module__), pre-populated with these capabilities:
    console.log(*args)        capture output into the rendered document
    print(*args, ...)         same sink, with Python print semantics
    require(name)             import a module relative to the document
    set_line_transformer(f)   install a transform for subsequent lines
"""

import builtins
import importlib
import importlib.util
import itertools
import sys
from pathlib import Path
from pprint import pformat
from types import ModuleType
from typing import Any, Callable, Dict, List, Optional, TextIO

from ..config import AppSettings, appsettings
from ..models.render import RenderPassState
from .log import LOG
from .transform import transform_make


_module_ids = itertools.count()


def moduleName_make(stem: Optional[str] = None) -> str:
    """Unique sys.modules key for a context or required module"""
    prefix = f"__runmd_{next(_module_ids)}__"
    return f"{prefix}.{stem}" if stem else prefix


class CapturingConsole:
    """
    Console injected into block namespaces

    Behaves like a text stream: text is buffered until a newline completes
    a line, and each complete line is prefixed with the output marker and
    written into the render pass output buffer, unless the pass is
    currently hiding. pending_flush() emits a trailing partial line.
    """

    is_runmd = True

    def __init__(self, state: RenderPassState, settings: AppSettings) -> None:
        self.state = state
        self.settings = settings
        self.pending = ''

    def line_capture(self, line: str) -> None:
        if not self.state.hide:
            self.state.output_lines.append(self.settings.outputLine_make(line))

    def write(self, text: str) -> None:
        """Append text, capturing every line completed by a newline"""
        *lines, self.pending = (self.pending + text).split('\n')
        for line in lines:
            self.line_capture(line)

    def pending_flush(self) -> None:
        """Capture the unterminated last line, if any"""
        if self.pending:
            line, self.pending = self.pending, ''
            self.line_capture(line)

    def log(self, *args: Any) -> None:
        """Strings pass through; other values are pretty-formatted"""
        parts = [arg if isinstance(arg, str) else pformat(arg) for arg in args]
        self.write(' '.join(parts) + '\n')

    def print(
        self,
        *args: Any,
        sep: Optional[str] = ' ',
        end: Optional[str] = '\n',
        file: Optional[TextIO] = None,
        flush: bool = False,
    ) -> None:
        """
        Drop-in replacement for the print builtin

        An explicit file is honoured; otherwise the text goes to write().
        """
        if file is not None:
            builtins.print(*args, sep=sep, end=end, file=file, flush=flush)
            return

        sep = ' ' if sep is None else sep
        end = '\n' if end is None else end
        self.write(sep.join(str(arg) for arg in args) + end)


class ModuleLoader:
    """
    require() implementation bound to the document's directory

    Resolution order for require(name):
        1. "./x.py", "../x.py", "x.py" → that file, relative to base_dir
        2. "x" → base_dir/x.py, or the package base_dir/x/__init__.py
        3. anything else → importlib.import_module(name)

    File modules are registered in sys.modules under their own name when it
    is free, else under a unique runmd name; modules_release() unregisters
    them.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)
        self.modules: Dict[Path, ModuleType] = {}
        self.registered: List[str] = []

    def path_resolve(self, name: str) -> Optional[Path]:
        """Find the file a require() name refers to, None if not local"""
        candidates = []
        if name.endswith('.py') or name.startswith('.') or '/' in name:
            candidates.append(self.base_dir / name)
        else:
            candidates.append(self.base_dir / f"{name}.py")
            candidates.append(self.base_dir / name / "__init__.py")

        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
            if candidate.is_dir() and (candidate / "__init__.py").is_file():
                return (candidate / "__init__.py").resolve()
        return None

    def module_load(self, path: Path) -> ModuleType:
        """Import a module from a file path, once per loader"""
        if path in self.modules:
            return self.modules[path]

        stem = path.parent.name if path.name == "__init__.py" else path.stem
        module_name = stem if stem not in sys.modules else moduleName_make(stem)
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load module from {path}")

        module = importlib.util.module_from_spec(spec)
        self.modules[path] = module
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except BaseException:
            del self.modules[path]
            sys.modules.pop(module_name, None)
            raise
        self.registered.append(module_name)
        LOG(f"Loaded module {module_name} from {path}", level=3)
        return module

    def modules_release(self) -> None:
        """Remove the modules this loader registered from sys.modules"""
        for module_name in self.registered:
            sys.modules.pop(module_name, None)
        self.registered = []

    def __call__(self, name: str) -> ModuleType:
        path = self.path_resolve(name)
        if path is not None:
            return self.module_load(path)
        if name.startswith('.') or name.endswith('.py'):
            raise ModuleNotFoundError(f"No module file {name!r} relative to {self.base_dir}")
        return importlib.import_module(name)


class ExecutionContext:
    """
    Isolated variable scope plus injected capabilities

    Attributes:
        name: Context name, None for anonymous contexts
        console: Capturing console bound to the render pass
        loader: Module loader bound to the document directory
        module: Module object backing the namespace
        namespace: Globals the block code is executed against
    """

    def __init__(
        self,
        name: Optional[str],
        console: CapturingConsole,
        loader: ModuleLoader,
        transformer_set: Callable[[Any], None],
        filename: str,
    ) -> None:
        self.name = name
        self.console = console
        self.loader = loader
        self.module = ModuleType(moduleName_make())
        self.namespace: Dict[str, Any] = self.module.__dict__
        self.namespace.update({
            '__file__': filename,
            '__builtins__': builtins,
            'console': console,
            'print': console.print,
            'require': loader,
            'set_line_transformer': transformer_set,
        })

    @property
    def module_name(self) -> str:
        return self.module.__name__

    def __repr__(self) -> str:
        return f"ExecutionContext(name={self.name!r}, module={self.module_name!r})"


class ContextRegistry:
    """
    Creates and caches execution contexts for one render pass

    The registry holds the render pass state so that every context it
    builds writes into the same output buffer and transform slot. Context
    modules stay in sys.modules until modules_release() ends the pass.
    """

    def __init__(
        self,
        state: RenderPassState,
        input_file: Path,
        settings: Optional[AppSettings] = None,
    ) -> None:
        self.state = state
        self.input_file = Path(input_file)
        self.settings = settings or appsettings
        self.contexts: Dict[str, ExecutionContext] = {}
        self.created: List[ExecutionContext] = []

    def transformer_set(self, obj: Any) -> None:
        """Install, replace or (with None) clear the active line transform"""
        self.state.transform = transform_make(obj)

    def context_create(self, name: Optional[str]) -> ExecutionContext:
        """Build a new context with fresh bindings"""
        context = ExecutionContext(
            name=name,
            console=CapturingConsole(self.state, self.settings),
            loader=ModuleLoader(self.input_file.parent),
            transformer_set=self.transformer_set,
            filename=str(self.input_file),
        )
        sys.modules[context.module_name] = context.module
        self.created.append(context)
        return context

    def context_get(self, name: Optional[str] = None) -> ExecutionContext:
        """
        Return the context for a block

        Always clears the active line transform first, so each block
        starts without one unless its own code installs it.

        Args:
            name: Context name, None for a fresh anonymous context

        Returns:
            Cached context for a known name, else a new context
        """
        self.state.transform = None

        if name and name in self.contexts:
            LOG(f"Reusing context '{name}'", level=3)
            return self.contexts[name]

        context = self.context_create(name)
        if name:
            self.contexts[name] = context
            LOG(f"Created context '{name}'", level=3)
        return context

    def modules_release(self) -> None:
        """Unregister every module created during the pass"""
        for context in self.created:
            sys.modules.pop(context.module_name, None)
            context.loader.modules_release()
        self.created = []

    def __contains__(self, name: str) -> bool:
        return name in self.contexts

    def __len__(self) -> int:
        return len(self.contexts)
