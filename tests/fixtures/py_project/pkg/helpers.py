def describe(path):
    from .core import run
    return {"path": path, "runner": run.__name__}
