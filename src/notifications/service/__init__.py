from .dispatcher import notify

__all__ = ["notify"]
