# Package-wide settings, read once from the environment at import
import os

ROOT = 0  # rank whose value wins every point write

CHUNK_BYTES = int(os.environ.get("MPI_ARRAYS_CHUNK_BYTES", 2**30))

DEBUG = os.environ.get("MPI_ARRAYS_DEBUG", "").lower() in ("1", "true", "yes")
