import gc
from functools import wraps

from mpi_arrays import config

def auto_gc(enabled=True):
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            result = func(*args, **kwargs)
            if enabled:
                gc.collect()
            return result
        return wrapper
    return decorator

def log(rank, *args):
    if config.DEBUG and rank == config.ROOT: print(args)

def loga(rank, *args):
    if config.DEBUG: print(f"Rank {rank}:", args)
