"""Build file-level dependency graphs from Python import statements."""

from __future__ import annotations

import ast
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Any

import networkx as nx

from tlc.architecture.models import relative_name
from tlc.logging_utils import get_logger

LOGGER = get_logger(__name__)

DEFAULT_IGNORE: tuple[str, ...] = (
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    ".tox",
    ".mypy_cache",
    ".pytest_cache",
    "build",
    "dist",
    "node_modules",
    "*.egg-info",
)
DEFAULT_EXTENSIONS: tuple[str, ...] = (".py",)


@dataclass(frozen=True)
class ImportRef:
    """One imported name as written in source."""

    module: str | None
    name: str | None
    level: int
    lineno: int


@dataclass(frozen=True)
class ResolvedImport:
    """Resolution outcome: a local file path or an external top-level package."""

    path: Path | None = None
    external: str | None = None


class DependencyGraph:
    """File dependency graph for a Python source tree, backed by ``networkx``."""

    def __init__(
        self,
        base_path: Path | None = None,
        *,
        ignore: Iterable[str] = DEFAULT_IGNORE,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        source_roots: Iterable[Path] = (),
        include_type_checking: bool = False,
        include_function_imports: bool = False,
    ) -> None:
        """Initialize an empty graph rooted at ``base_path``."""
        self.include_type_checking = include_type_checking
        self.include_function_imports = include_function_imports
        self.base_path = (base_path or Path.cwd()).expanduser().resolve()
        self.ignore = tuple(ignore)
        self.extensions = tuple(extensions)
        self.source_roots = [self.base_path]
        for root in source_roots:
            resolved = self._absolute(root)
            if resolved not in self.source_roots:
                self.source_roots.append(resolved)
        self.graph: nx.DiGraph = nx.DiGraph()
        self.external: set[str] = set()

    def build(self, entry_points: Path | str | Iterable[Path | str]) -> dict[str, Any]:
        """Build the graph by following local imports from entry point files."""
        if isinstance(entry_points, (str, Path)):
            entry_points = [entry_points]
        visited: set[Path] = set()
        for entry in entry_points:
            self._process_file(Path(entry), visited)
        return self.get_graph()

    def build_from_directory(
        self,
        directory: Path | None = None,
        ignore: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        """Build the graph from every source file under ``directory``."""
        root = self._absolute(directory) if directory is not None else self.base_path
        files = self.find_files(root, self.ignore if ignore is None else tuple(ignore))
        LOGGER.info(
            "Scanning source tree",
            extra={"directory": str(root), "file_count": len(files)},
        )
        visited: set[Path] = set()
        for path in files:
            self._process_file(path, visited)
        return self.get_graph()

    def find_files(self, directory: Path, ignore: Iterable[str] = ()) -> list[Path]:
        """Return sorted source files under ``directory`` not matching ignore patterns."""
        if not directory.is_dir():
            raise FileNotFoundError(f"Source directory does not exist: {directory}")
        patterns = tuple(ignore)
        results: list[Path] = []
        for path in sorted(directory.rglob("*")):
            if not path.is_file() or path.suffix not in self.extensions:
                continue
            parts = path.relative_to(directory).parts
            if any(fnmatch(part, pattern) for part in parts for pattern in patterns):
                continue
            results.append(path)
        return results

    def _process_file(self, file_path: Path, visited: set[Path]) -> None:
        pending = [self._absolute(file_path)]
        while pending:
            current = pending.pop()
            if current in visited:
                continue
            visited.add(current)
            self._ensure_node(current)
            targets = self._follow_imports(current)
            pending.extend(reversed([target for target in targets if target not in visited]))

    def _follow_imports(self, absolute: Path) -> list[Path]:
        """Add the edges for one file and return the local files it imports."""
        try:
            source = absolute.read_text(encoding="utf-8-sig")
            refs = self.parse_imports(ast.parse(source, filename=str(absolute)))
        except (OSError, UnicodeDecodeError, SyntaxError, ValueError, RecursionError) as exc:
            LOGGER.warning(
                "Skipping module that could not be parsed",
                extra={"path": str(absolute), "error": str(exc)},
            )
            return []

        targets: list[Path] = []
        for ref in refs:
            resolved = self.resolve_import(ref, absolute)
            if resolved.external is not None:
                self.external.add(resolved.external)
                continue
            if resolved.path is None:
                LOGGER.debug(
                    "Unresolved relative import",
                    extra={"path": str(absolute), "module": ref.module, "line": ref.lineno},
                )
                continue
            self._ensure_node(resolved.path)
            self.graph.add_edge(str(absolute), str(resolved.path))
            targets.append(resolved.path)
        return targets

    def parse_imports(self, tree: ast.AST) -> list[ImportRef]:
        """Extract imported names from a parsed module in source order.

        Imports guarded by ``if TYPE_CHECKING:`` never run, so they are left
        out unless ``include_type_checking`` is set. Imports inside function
        bodies only run when the function is called and are left out unless
        ``include_function_imports`` is set.
        """
        refs: list[ImportRef] = []
        for node in self._import_nodes(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    refs.append(ImportRef(alias.name, None, 0, node.lineno))
            elif isinstance(node, ast.ImportFrom):
                if node.module == "__future__":
                    continue
                for alias in node.names:
                    name = None if alias.name == "*" else alias.name
                    refs.append(ImportRef(node.module, name, node.level, node.lineno))
        refs.sort(key=lambda ref: ref.lineno)
        return refs

    def _import_nodes(self, node: ast.AST) -> Iterator[ast.Import | ast.ImportFrom]:
        yield from self._imports_in(ast.iter_child_nodes(node))

    def _imports_in(self, nodes: Iterable[ast.AST]) -> Iterator[ast.Import | ast.ImportFrom]:
        for child in nodes:
            if isinstance(child, (ast.Import, ast.ImportFrom)):
                yield child
            elif not self.include_function_imports and isinstance(
                child, (ast.FunctionDef, ast.AsyncFunctionDef)
            ):
                continue
            elif (
                not self.include_type_checking
                and isinstance(child, ast.If)
                and _is_type_checking(child.test)
            ):
                yield from self._imports_in(child.orelse)
            else:
                yield from self._import_nodes(child)

    def resolve_import(self, ref: ImportRef, from_file: Path) -> ResolvedImport:
        """Resolve an import to a local file, or classify it as external."""
        if ref.level > 0:
            package_dir = from_file.parent
            for _ in range(ref.level - 1):
                package_dir = package_dir.parent
            path = self._resolve_in(package_dir, ref.module, ref.name)
            return ResolvedImport(path=path)

        for root in self.source_roots:
            path = self._resolve_in(root, ref.module, ref.name)
            if path is not None:
                return ResolvedImport(path=path)
        top_level = (ref.module or "").split(".")[0]
        return ResolvedImport(external=top_level or None)

    def _resolve_in(self, base_dir: Path, module: str | None, name: str | None) -> Path | None:
        module_dir = base_dir.joinpath(*module.split(".")) if module else base_dir
        if name is not None:
            submodule = self._module_file(module_dir / name)
            if submodule is not None:
                return submodule
        if module is None:
            return self._package_init(module_dir)
        return self._module_file(module_dir)

    def _module_file(self, stem: Path) -> Path | None:
        for extension in self.extensions:
            candidate = stem.parent / f"{stem.name}{extension}"
            if candidate.is_file():
                return candidate.resolve()
        return self._package_init(stem)

    def _package_init(self, directory: Path) -> Path | None:
        for extension in self.extensions:
            candidate = directory / f"__init__{extension}"
            if candidate.is_file():
                return candidate.resolve()
        return None

    def _ensure_node(self, path: Path) -> None:
        key = str(path)
        if key not in self.graph:
            self.graph.add_node(key, name=relative_name(key, self.base_path))

    def _absolute(self, path: Path | str) -> Path:
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.base_path / candidate
        return candidate.resolve()

    def get_graph(self) -> dict[str, Any]:
        """Export nodes, edges, external packages and stats."""
        nodes = [
            {
                "id": node,
                "name": data.get("name", node),
                "imports": self.graph.out_degree(node),
                "importedBy": self.graph.in_degree(node),
            }
            for node, data in self.graph.nodes(data=True)
        ]
        edges = [
            {
                "from": source,
                "to": target,
                "fromName": relative_name(source, self.base_path),
                "toName": relative_name(target, self.base_path),
            }
            for source, target in self.graph.edges()
        ]
        return {
            "nodes": nodes,
            "edges": edges,
            "external": sorted(self.external),
            "stats": {
                "totalFiles": len(nodes),
                "totalEdges": len(edges),
                "externalDeps": len(self.external),
            },
        }

    def has_circular(self) -> bool:
        """Fast check for any cycle, self-imports included."""
        return not nx.is_directed_acyclic_graph(self.graph)

    def get_importers(self, file_path: Path | str) -> list[str]:
        """Return files that import ``file_path``."""
        key = str(self._absolute(file_path))
        if key not in self.graph:
            return []
        return list(self.graph.predecessors(key))

    def get_imports(self, file_path: Path | str) -> list[str]:
        """Return files imported by ``file_path``."""
        key = str(self._absolute(file_path))
        if key not in self.graph:
            return []
        return list(self.graph.successors(key))

    def get_files(self) -> list[str]:
        """Return all files currently in the graph."""
        return list(self.graph.nodes)

    def clear(self) -> None:
        """Reset the graph and the external package set."""
        self.graph.clear()
        self.external.clear()


def _is_type_checking(test: ast.expr) -> bool:
    if isinstance(test, ast.Name):
        return test.id == "TYPE_CHECKING"
    if isinstance(test, ast.Attribute):
        return test.attr == "TYPE_CHECKING"
    return False
