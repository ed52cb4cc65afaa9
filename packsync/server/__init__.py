"""
PackSync Server Package

FastAPI application that publishes a directory as a modpack.
"""

from .manifest_builder import build_manifest, read_root_mod_id
from .server import create_app

__all__ = ['build_manifest', 'read_root_mod_id', 'create_app']
