from .installer import install

__all__ = ["install"]
