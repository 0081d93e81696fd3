"""Preparing isolated copies so checks can run in them."""

from commitwise.sandbox.dependency_provisioner import (
    DependencyProvisioner,
    ProvisionOutcome,
    ProvisionStatus,
)

__all__ = ["DependencyProvisioner", "ProvisionOutcome", "ProvisionStatus"]
