"""Package whose build output fails at import time."""

raise ImportError("No module named 'googleapiclient'")
