"""Tree API: graph, circular dependencies and dependents."""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from dep_tree.config import ConfigError
from dep_tree.models import DetectiveOptions, ResolveOptions, TreeConfig
from dep_tree.tree import DependencyTree, build_tree

router = APIRouter(prefix="/api")


class TreeRequest(BaseModel):
    paths: list[str]
    base_dir: str | None = None
    depth: int | None = None
    exclude: list[str] = Field(default_factory=list)
    include_npm: bool = False
    extensions: list[str] | None = None
    aliases: dict[str, str] = Field(default_factory=dict)
    include_core: bool = False
    skip_type_imports: bool = False


class DependsRequest(TreeRequest):
    id: str


def _to_config(req: TreeRequest) -> TreeConfig:
    config = TreeConfig(
        base_dir=Path(req.base_dir) if req.base_dir else None,
        depth=req.depth,
        exclude=list(req.exclude),
        include_npm=req.include_npm,
        detective_options=DetectiveOptions(
            include_core=req.include_core,
            skip_type_imports=req.skip_type_imports,
        ),
        resolve_options=ResolveOptions(aliases=dict(req.aliases)),
    )
    if req.extensions:
        config.file_extensions = [e.lstrip(".") for e in req.extensions]
    return config


async def _build(req: TreeRequest) -> DependencyTree:
    missing = [p for p in req.paths if not Path(p).exists()]
    if not req.paths or len(missing) == len(req.paths):
        raise HTTPException(404, f"Path not found: {', '.join(missing) or '(none given)'}")
    try:
        return await build_tree(req.paths, _to_config(req))
    except ConfigError as e:
        raise HTTPException(400, str(e))


@router.post("/tree")
async def get_tree(req: TreeRequest):
    tree = await _build(req)
    return tree.to_dict()


@router.post("/circular")
async def get_circular(req: TreeRequest):
    tree = await _build(req)
    return {"circular": tree.circular()}


@router.post("/depends")
async def get_depends(req: DependsRequest):
    tree = await _build(req)
    return {"id": req.id, "depends": tree.depends(req.id)}
