from .storage import ImageStore

__all__ = ["ImageStore"]
