from .base import PostgresResultStore, ResultStore
from .memory import MemoryResultStore


def create_store(backend: str) -> ResultStore:
    if backend == 'postgres':
        return PostgresResultStore()
    if backend == 'memory':
        return MemoryResultStore()
    raise ValueError(f"Unknown store backend: {backend!r}")


__all__ = ['ResultStore', 'PostgresResultStore', 'MemoryResultStore', 'create_store']
