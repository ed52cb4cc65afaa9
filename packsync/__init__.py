"""
PackSync - Modpack Synchronization

Client and server for mirroring a server-published modpack into a local
folder, downloading only files whose checksum changed.

Author: PackSync Project
"""

__version__ = "1.0.0"
