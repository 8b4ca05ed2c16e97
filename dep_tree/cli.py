"""Click CLI with graph, circular, depends, orphans, leaves and serve subcommands."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path

import click

from dep_tree.config import ConfigError, load_config
from dep_tree.models import TreeConfig
from dep_tree.tree import DependencyTree, dependency_tree


def tree_options(func):
    """Options shared by every command that builds a tree."""
    decorators = [
        click.argument("src", nargs=-1, required=True, type=click.Path(path_type=Path)),
        click.option("--base-dir", type=click.Path(file_okay=False, path_type=Path),
                     help="Directory output paths are relative to"),
        click.option("--depth", type=click.IntRange(min=0), help="Maximum depth from the entry files"),
        click.option("--exclude", "-x", multiple=True, help="Regular expression of paths to leave out"),
        click.option("--include-npm", is_flag=True, help="Add package-manager files as leaf dependencies"),
        click.option("--extensions", "-e", help="Comma separated file extensions to scan"),
        click.option("--ts-alias", "aliases", multiple=True, metavar="NAME=PATH", help="Module alias"),
        click.option("--python-path", multiple=True, type=click.Path(path_type=Path),
                     help="Extra root for absolute Python imports"),
        click.option("--include-core", is_flag=True, help="Keep standard library / builtin modules"),
        click.option("--skip-type-imports", is_flag=True, help="Ignore type-only imports"),
        click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False, path_type=Path),
                     help="Path to a .deptreerc file"),
        click.option("--json", "as_json", is_flag=True, help="Output JSON"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _build_config(
    config_file: Path | None,
    base_dir: Path | None,
    depth: int | None,
    exclude: tuple[str, ...],
    include_npm: bool,
    extensions: str | None,
    aliases: tuple[str, ...],
    python_path: tuple[Path, ...],
    include_core: bool,
    skip_type_imports: bool,
) -> TreeConfig:
    """Merge explicit command line options over the config file."""
    config = load_config(config_file)

    if base_dir is not None:
        config.base_dir = base_dir
    if depth is not None:
        config.depth = depth
    if exclude:
        config.exclude = [*config.exclude, *exclude]
    if include_npm:
        config.include_npm = True
    if extensions:
        config.file_extensions = [e.strip().lstrip(".") for e in extensions.split(",") if e.strip()]
    for alias in aliases:
        name, sep, target = alias.partition("=")
        if not sep or not name:
            raise ConfigError(f"Alias must look like NAME=PATH, got {alias!r}")
        config.resolve_options.aliases[name] = target
    if python_path:
        config.resolve_options.python_paths.extend(python_path)
    if include_core:
        config.detective_options.include_core = True
    if skip_type_imports:
        config.detective_options.skip_type_imports = True
    return config


def with_tree(func):
    """Build the tree from the shared options and pass it to ``func``."""
    @functools.wraps(func)
    def wrapper(src, base_dir, depth, exclude, include_npm, extensions, aliases,
                python_path, include_core, skip_type_imports, config_file, as_json, **kwargs):
        try:
            config = _build_config(
                config_file, base_dir, depth, exclude, include_npm, extensions,
                aliases, python_path, include_core, skip_type_imports,
            )
            tree = dependency_tree(list(src), config)
        except ConfigError as e:
            raise click.ClickException(str(e))
        return func(tree, as_json=as_json, **kwargs)
    return wrapper


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _echo_list(title: str, ids: list[str], empty: str) -> None:
    if not ids:
        click.echo(click.style(empty, fg="green"))
        return
    click.echo(f"\n{title} ({len(ids)}):\n")
    for module_id in ids:
        click.echo(f"  {click.style(module_id, fg='cyan')}")


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """dep-tree: Build dependency graphs of source files."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@tree_options
@click.option("--warning", is_flag=True, help="Show specifiers that could not be resolved")
@with_tree
def graph(tree: DependencyTree, as_json: bool, warning: bool):
    """Print the dependency graph of SRC files and directories."""
    if as_json:
        _echo_json(tree.to_dict() if warning else tree.obj())
        return

    modules = tree.obj()
    if not modules:
        click.echo("No files found.")
    for module_id, dependencies in modules.items():
        click.echo(click.style(module_id, fg="cyan"))
        for dependency in dependencies:
            click.echo(f"  {click.style(dependency, dim=True)}")

    click.echo(f"\nProcessed {len(modules)} file(s)")

    if warning and tree.skipped:
        click.echo(click.style(f"\nSkipped {len(tree.skipped)} file(s):", fg="yellow"))
        for specifier in tree.skipped:
            click.echo(f"  {specifier}")


@cli.command()
@tree_options
@with_tree
def circular(tree: DependencyTree, as_json: bool):
    """Find circular dependencies. Exits with 1 when any are found."""
    cycles = tree.circular()
    if as_json:
        _echo_json(cycles)
    elif not cycles:
        click.echo(click.style("No circular dependency found!", fg="green"))
    else:
        click.echo(click.style(f"Found {len(cycles)} circular dependencies!\n", fg="red"))
        for index, cycle in enumerate(cycles, start=1):
            click.echo(f"  {index}) {' > '.join(cycle)}")
    if cycles:
        click.get_current_context().exit(1)


@cli.command()
@tree_options
@click.option("--id", "module_id", required=True, help="Module to find dependents of")
@with_tree
def depends(tree: DependencyTree, as_json: bool, module_id: str):
    """List modules that depend on the given module."""
    dependents = tree.depends(module_id)
    if as_json:
        _echo_json(dependents)
        return
    _echo_list(f"Modules depending on {module_id}", dependents, f"Nothing depends on {module_id}")


@cli.command()
@tree_options
@with_tree
def orphans(tree: DependencyTree, as_json: bool):
    """List modules no other module depends on."""
    ids = tree.orphans()
    if as_json:
        _echo_json(ids)
        return
    _echo_list("Orphans", ids, "No orphans found")


@cli.command()
@tree_options
@with_tree
def leaves(tree: DependencyTree, as_json: bool):
    """List modules without dependencies."""
    ids = tree.leaves()
    if as_json:
        _echo_json(ids)
        return
    _echo_list("Leaves", ids, "No leaves found")


@cli.command()
@click.option("--port", "-p", default=8421, help="Port number")
@click.option("--host", default="127.0.0.1", help="Host address")
def serve(port: int, host: str):
    """Start the JSON API."""
    try:
        import uvicorn
    except ImportError:
        raise click.ClickException(
            "uvicorn is required for the web API. "
            "Install with: pip install 'dep-tree[web]'"
        )

    from dep_tree.web import create_app

    click.echo(f"Starting dep-tree API at http://{host}:{port}")
    uvicorn.run(create_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    cli()
