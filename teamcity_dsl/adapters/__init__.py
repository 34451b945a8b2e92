"""Version-specific generator entry points, each run as ``python -m`` in a child process."""
