"""Cliente asíncrono de la API del consultorio."""

from .adapter import HttpAdapter, HttpAdapterError, HttpxAdapter
from .use_cases import UseCaseError

__all__ = ["HttpAdapter", "HttpAdapterError", "HttpxAdapter", "UseCaseError"]
