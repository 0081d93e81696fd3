"""Staged-change verification entry point."""

from commitwise.verification.pipeline import StagedChangeVerifier, verify_staged_changes

__all__ = ["StagedChangeVerifier", "verify_staged_changes"]
