"""Integration tests against real git repositories and subprocesses."""
