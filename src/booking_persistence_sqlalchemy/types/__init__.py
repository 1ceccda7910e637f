from .json import JSONPayload

__all__ = ["JSONPayload"]
