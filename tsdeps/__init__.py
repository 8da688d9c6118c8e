"""tsdeps: module dependency graphs and circular import detection for TypeScript projects."""

__version__ = "0.1.0"
