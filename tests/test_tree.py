"""Tests for the tree facade, run over the fixture projects."""

import asyncio
import json
import threading
from pathlib import Path

import pytest

from dep_tree import ConfigError, DependencyTree, TreeConfig, build_tree, dependency_tree
from dep_tree.models import DetectiveOptions

FIXTURES = Path(__file__).parent / "fixtures"
JS_PROJECT = FIXTURES / "js_project"
PY_PROJECT = FIXTURES / "py_project"

JS_TREE = {
    "app.js": ["lazy.js", "lib/index.js", "lib/util.js"],
    "lazy.js": [],
    "lib/index.js": ["lib/util.js"],
    "lib/util.js": ["app.js"],
}

PY_TREE = {
    "main.py": ["pkg/__init__.py", "pkg/core.py", "pkg/helpers.py"],
    "pkg/__init__.py": ["pkg/core.py"],
    "pkg/core.py": ["pkg/helpers.py", "pkg/models.py"],
    "pkg/entry.py": ["pkg/__init__.py"],
    "pkg/helpers.py": ["pkg/core.py"],
    "pkg/models.py": [],
}


# ── Fixture projects ──────────────────────────────────────────

class TestJsProject:
    def test_directory(self):
        tree = dependency_tree([JS_PROJECT])
        assert tree.obj() == JS_TREE
        assert tree.warnings() == {"skipped": ["./missing"]}

    def test_entry_file(self):
        tree = dependency_tree([JS_PROJECT / "app.js"])
        assert tree.obj() == JS_TREE

    def test_include_npm(self):
        tree = dependency_tree([JS_PROJECT], TreeConfig(include_npm=True))
        assert tree.obj()["app.js"] == [
            "lazy.js", "lib/index.js", "lib/util.js", "node_modules/lodash/main.js",
        ]
        # package-manager files are never traversed
        assert "node_modules/lodash/main.js" not in tree.obj()

    def test_depth_zero(self):
        tree = dependency_tree([JS_PROJECT / "app.js"], TreeConfig(depth=0))
        # util and index lead back to app; lazy leads nowhere and stays a leaf
        assert tree.obj() == {"app.js": ["app.js", "lazy.js"]}

    def test_depth_one(self):
        tree = dependency_tree([JS_PROJECT / "app.js"], TreeConfig(depth=1))
        assert tree.obj() == JS_TREE

    def test_exclude(self):
        tree = dependency_tree([JS_PROJECT], TreeConfig(exclude=[r"^lib/"]))
        assert tree.obj() == {"app.js": ["lazy.js"], "lazy.js": []}

    def test_dependency_filter(self):
        calls = []

        def keep_non_lazy(dependency, traversed, base_dir):
            calls.append((dependency, traversed, base_dir))
            return not dependency.endswith("lazy.js")

        tree = dependency_tree([JS_PROJECT / "app.js"], TreeConfig(dependency_filter=keep_non_lazy))
        assert "lazy.js" not in tree.obj()
        assert tree.obj()["app.js"] == ["lib/index.js", "lib/util.js"]
        assert all(base == str(JS_PROJECT.resolve()) for _, _, base in calls)

    def test_dependency_filter_none_means_keep(self):
        tree = dependency_tree([JS_PROJECT], TreeConfig(dependency_filter=lambda *args: None))
        assert tree.obj() == JS_TREE

    def test_base_dir(self):
        tree = dependency_tree([JS_PROJECT / "lib"], TreeConfig(base_dir=FIXTURES))
        assert "js_project/lib/util.js" in tree.obj()
        assert tree.obj()["js_project/lib/util.js"] == ["js_project/app.js"]


class TestPyProject:
    def test_directory(self):
        tree = dependency_tree([PY_PROJECT])
        assert tree.obj() == PY_TREE
        assert tree.skipped == ["requests_not_installed"]

    def test_skip_type_imports(self):
        config = TreeConfig(detective_options=DetectiveOptions(skip_type_imports=True))
        tree = dependency_tree([PY_PROJECT], config)
        assert tree.obj()["pkg/core.py"] == ["pkg/helpers.py"]

    def test_only_python_extensions(self):
        tree = dependency_tree([FIXTURES], TreeConfig(file_extensions=["py"]))
        assert all(key.endswith(".py") for key in tree.obj())
        assert "py_project/main.py" in tree.obj()


# ── Injected collaborators ────────────────────────────────────

def _fake_collaborators(graph: dict[str, list[str]], root: Path):
    def parse(file_path, options):
        return graph.get(Path(file_path).name, [])

    def resolve(specifier, file_path, options):
        target = root / specifier
        return target if specifier in graph else None

    return parse, resolve


def test_end_to_end_example(tmp_path):
    proj = tmp_path / "proj"
    proj.mkdir()
    graph = {"a.ext": ["b.ext", "m"], "b.ext": ["a.ext"]}
    for name in graph:
        (proj / name).write_text("")
    parse, resolve = _fake_collaborators(graph, proj)

    tree = dependency_tree([proj / "a.ext"], TreeConfig(parser=parse, resolver=resolve))
    assert tree.obj() == {"a.ext": ["b.ext"], "b.ext": ["a.ext"]}
    assert tree.warnings() == {"skipped": ["m"]}


def test_output_is_byte_identical_across_runs():
    first = dependency_tree([JS_PROJECT, PY_PROJECT], TreeConfig(base_dir=FIXTURES))
    second = dependency_tree([PY_PROJECT, JS_PROJECT], TreeConfig(base_dir=FIXTURES))
    assert first.to_json() == second.to_json()


def test_async_build():
    async def _test():
        return await build_tree([JS_PROJECT])

    tree = asyncio.run(_test())
    assert tree.obj() == JS_TREE


def test_file_discovery_runs_off_the_event_loop(monkeypatch):
    import dep_tree.tree as tree_module

    threads = []
    real_find_files = tree_module.find_files

    def recording_find_files(*args):
        threads.append(threading.current_thread())
        return real_find_files(*args)

    monkeypatch.setattr(tree_module, "find_files", recording_find_files)

    async def _test():
        tree = await build_tree([JS_PROJECT])
        return tree, threading.current_thread()

    tree, loop_thread = asyncio.run(_test())
    assert tree.obj() == JS_TREE
    assert threads and threads[0] is not loop_thread


def test_config_not_mutated():
    config = TreeConfig()
    dependency_tree([JS_PROJECT], config)
    assert config.resolve_options.directory is None


# ── Configuration errors ──────────────────────────────────────

class TestConfigErrors:
    def test_bad_exclude_pattern(self):
        with pytest.raises(ConfigError):
            dependency_tree([JS_PROJECT], TreeConfig(exclude=["("]))

    def test_negative_depth(self):
        with pytest.raises(ConfigError):
            dependency_tree([JS_PROJECT], TreeConfig(depth=-1))

    def test_error_raised_before_traversal(self):
        calls = []

        def parse(file_path, options):
            calls.append(file_path)
            return []

        with pytest.raises(ConfigError):
            dependency_tree([JS_PROJECT], TreeConfig(exclude=["[unclosed"], parser=parse))
        assert calls == []


# ── Graph queries ─────────────────────────────────────────────

def _tree(graph):
    return DependencyTree(graph, [], Path("/proj"))


class TestQueries:
    def test_circular(self):
        assert dependency_tree([JS_PROJECT]).circular() == [["app.js", "lib/index.js", "lib/util.js"]]

    def test_circular_none(self):
        assert _tree({"a.js": ["b.js"], "b.js": []}).circular() == []

    def test_circular_self_loop(self):
        assert _tree({"a.js": ["a.js"]}).circular() == [["a.js"]]

    def test_circular_two_cycles(self):
        tree = _tree({
            "a.js": ["b.js"],
            "b.js": ["a.js", "c.js"],
            "c.js": ["d.js"],
            "d.js": ["c.js"],
        })
        assert tree.circular() == [["a.js", "b.js"], ["c.js", "d.js"]]

    def test_circular_long_ring_has_no_recursion_limit(self):
        names = [f"m{i}.js" for i in range(3001)]
        graph = {name: [names[(i + 1) % len(names)]] for i, name in enumerate(names)}
        assert _tree(graph).circular() == [names]

    def test_circular_long_chain_without_cycle(self):
        names = [f"m{i}.js" for i in range(5000)]
        graph = {name: names[i + 1:i + 2] for i, name in enumerate(names)}
        assert _tree(graph).circular() == []

    def test_depends(self):
        tree = dependency_tree([JS_PROJECT])
        assert tree.depends("lib/util.js") == ["app.js", "lib/index.js"]
        assert tree.depends("unknown.js") == []

    def test_orphans(self):
        tree = _tree({"a.js": ["b.js"], "b.js": [], "c.js": ["b.js"]})
        assert tree.orphans() == ["a.js", "c.js"]

    def test_leaves(self):
        assert dependency_tree([JS_PROJECT]).leaves() == ["lazy.js"]

    def test_to_dict_and_json(self):
        tree = DependencyTree({"a.js": ["b.js"], "b.js": []}, ["x"], Path("/proj"))
        assert tree.to_dict() == {"tree": {"a.js": ["b.js"], "b.js": []}, "skipped": ["x"]}
        assert json.loads(tree.to_json()) == {"a.js": ["b.js"], "b.js": []}
