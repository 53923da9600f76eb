"""
Credential store adapters.
"""

from .file_store import FileCredentialStore

__all__ = ["FileCredentialStore"]
