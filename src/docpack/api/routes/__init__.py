from . import docpacks

__all__ = ["docpacks"]
