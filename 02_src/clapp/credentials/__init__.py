"""Credential sync module."""

from .sync import CredentialSync, ICredentialSync, build_runtime_env

__all__ = ["CredentialSync", "ICredentialSync", "build_runtime_env"]
