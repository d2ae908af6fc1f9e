"""Template loaders for the Moustache engine.

Loaders provide template source to the Engine. They implement
`get_source(name)` returning `(source, filename)`, and raise
`TemplateNotFoundError` when the name is unknown.

Built-in Loaders:
- `StringLoader`: The name *is* the source (default main loader)
- `DictLoader`: Load from an in-memory dictionary (default partials loader)
- `FileSystemLoader`: Load ``*.mustache`` files from directories
- `ChoiceLoader`: Try multiple loaders in order

Custom Loaders:
Implement the Loader protocol:
    ```python
    class DatabaseLoader:
        def get_source(self, name: str) -> tuple[str, str | None]:
            row = db.query("SELECT source FROM templates WHERE name = ?", name)
            if not row:
                raise TemplateNotFoundError(f"Template '{name}' not found")
            return row.source, f"db://{name}"
    ```

Thread-Safety:
Loaders should be thread-safe for concurrent `get_source()` calls.

"""

from __future__ import annotations

from collections.abc import Mapping
from difflib import get_close_matches
from pathlib import Path
from typing import Protocol, runtime_checkable

from moustache.environment.exceptions import TemplateNotFoundError


@runtime_checkable
class Loader(Protocol):
    """Anything with ``get_source(name) -> (source, filename)``."""

    def get_source(self, name: str) -> tuple[str, str | None]: ...


class StringLoader:
    """Treat the template name as the template source.

    This is the Engine's default main loader, which is what makes
    ``engine.render("Hello {{planet}}", data)`` work.

    Example:
            >>> StringLoader().get_source("Hi {{name}}")
            ('Hi {{name}}', '<string>')

    """

    __slots__ = ()

    def get_source(self, name: str) -> tuple[str, str]:
        return name, "<string>"


class DictLoader:
    """Load templates from an in-memory dictionary.

    Mutable: templates can be added after construction, which is how
    ``Engine(partials={...})`` and `Engine.set_partials` fill the default
    partials loader.

    Example:
            >>> loader = DictLoader({"user": "<b>{{name}}</b>"})
            >>> loader.set_template("footer", "bye")
            >>> loader.get_source("footer")
            ('bye', None)

    Raises:
        TemplateNotFoundError: If template name not in mapping

    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str] | None = None):
        self._mapping: dict[str, str] = dict(mapping or {})

    def get_source(self, name: str) -> tuple[str, None]:
        if name not in self._mapping:
            available = sorted(self._mapping.keys())
            msg = f"Template '{name}' not found"
            matches = get_close_matches(name, available, n=1, cutoff=0.6)
            if matches:
                msg += f". Did you mean '{matches[0]}'?"
            elif available:
                msg += f". Available: {', '.join(available[:10])}"
                if len(available) > 10:
                    msg += f" ... ({len(available)} total)"
            raise TemplateNotFoundError(msg)
        return self._mapping[name], None

    def set_template(self, name: str, source: str) -> None:
        self._mapping[name] = source

    def set_templates(self, templates: Mapping[str, str]) -> None:
        """Add or replace several templates at once."""
        self._mapping.update(templates)

    def list_templates(self) -> list[str]:
        return sorted(self._mapping.keys())


class FileSystemLoader:
    """Load templates from filesystem directories.

    Names without the configured extension get it appended, so
    ``{{> user}}`` finds ``user.mustache``. Directories are searched in
    order; the first match wins.

    Example:
            >>> loader = FileSystemLoader(["views/", "shared/"])
            >>> source, filename = loader.get_source("layout")
            >>> filename
            'views/layout.mustache'

    Raises:
        TemplateNotFoundError: If template not found in any search path

    """

    __slots__ = ("_encoding", "_extension", "_paths")

    def __init__(
        self,
        paths: str | Path | list[str | Path],
        extension: str = ".mustache",
        encoding: str = "utf-8",
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self._paths = [Path(p) for p in paths]
        if extension and not extension.startswith("."):
            extension = "." + extension
        self._extension = extension
        self._encoding = encoding

    def _filename(self, name: str) -> str:
        if self._extension and not name.endswith(self._extension):
            return name + self._extension
        return name

    def get_source(self, name: str) -> tuple[str, str]:
        """Load template source from filesystem."""
        filename = self._filename(name)
        for base in self._paths:
            path = base / filename
            if path.is_file():
                return path.read_text(self._encoding), str(path)

        raise TemplateNotFoundError(
            f"Template '{name}' not found in: {', '.join(str(p) for p in self._paths)}"
        )

    def list_templates(self) -> list[str]:
        """List all template names (without extension) in search paths."""
        templates = set()
        for base in self._paths:
            if base.is_dir():
                for path in base.rglob(f"*{self._extension}"):
                    name = path.relative_to(base).as_posix()
                    templates.add(name.removesuffix(self._extension))
        return sorted(templates)


class ChoiceLoader:
    """Try multiple loaders in order, returning the first match.

    Example:
            >>> custom = DictLoader({"nav": "<nav>Custom</nav>"})
            >>> default = DictLoader({"nav": "<nav>Default</nav>", "footer": "<footer/>"})
            >>> loader = ChoiceLoader([custom, default])
            >>> loader.get_source("footer")
            ('<footer/>', None)

    Raises:
        TemplateNotFoundError: If no loader can find the template

    Thread-Safety:
        Safe if all child loaders are thread-safe.
    """

    __slots__ = ("_loaders",)

    def __init__(self, loaders: list[Loader]):
        self._loaders = loaders

    def get_source(self, name: str) -> tuple[str, str | None]:
        """Try each loader in order, return first match."""
        for loader in self._loaders:
            try:
                return loader.get_source(name)
            except TemplateNotFoundError:
                continue
        raise TemplateNotFoundError(
            f"Template '{name}' not found in any of {len(self._loaders)} loaders"
        )

    def list_templates(self) -> list[str]:
        """Merge template lists from all loaders (deduplicated, sorted)."""
        templates: set[str] = set()
        for loader in self._loaders:
            if hasattr(loader, "list_templates"):
                templates.update(loader.list_templates())
        return sorted(templates)
