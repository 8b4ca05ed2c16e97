"""FastAPI JSON API for dep-tree."""

from dep_tree.web.app import create_app

__all__ = ["create_app"]
