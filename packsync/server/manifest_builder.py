"""
PackSync Server - Manifest Builder

Scans the served directory and produces the manifest published at
/servermanifest.json. The owning mod id of a jar is read from its
META-INF/mods.toml (or neoforge.mods.toml).
"""

import logging
import tomllib
import zipfile
from pathlib import Path
from typing import List, Optional, Union

from ..models import FileDescriptor, Manifest
from ..operations.checksum import MISSING_CHECKSUM, compute_checksum

# Create logger
logger = logging.getLogger(__name__)

MOD_METADATA_FILES = ("META-INF/mods.toml", "META-INF/neoforge.mods.toml")


# ==================== Mod Metadata ====================

def read_root_mod_id(jar_path: Path) -> Optional[str]:
    """
    Read the first modId declared in a mod jar.

    Args:
        jar_path: Path to the jar file

    Returns:
        The modId of the first [[mods]] entry, or None if the jar has no
        readable mod metadata
    """
    try:
        with zipfile.ZipFile(jar_path) as jar:
            names = set(jar.namelist())
            for metadata_file in MOD_METADATA_FILES:
                if metadata_file not in names:
                    continue
                with jar.open(metadata_file) as f:
                    metadata = tomllib.load(f)
                for mod in metadata.get("mods", []):
                    if isinstance(mod, dict) and isinstance(mod.get("modId"), str):
                        return mod["modId"]
    except (zipfile.BadZipFile, OSError, tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read mod metadata from {jar_path.name}: {e}")
    return None


# ==================== Manifest Generation ====================

def build_manifest(served_dir: Union[str, Path], forge_version: Optional[str] = None) -> Manifest:
    """
    Build the manifest for every file under served_dir.

    Files are listed in sorted relative-path order. fileName is the POSIX
    relative path; rootModId falls back to the file stem when no mod
    metadata is found.

    Args:
        served_dir: Directory whose files are published
        forge_version: Optional loader version advertised to clients

    Returns:
        Manifest describing the directory
    """
    served_dir = Path(served_dir)
    descriptors: List[FileDescriptor] = []

    for file_path in sorted(p for p in served_dir.rglob("*") if p.is_file()):
        relative_path = file_path.relative_to(served_dir).as_posix()
        checksum = compute_checksum(file_path)
        if checksum == MISSING_CHECKSUM:
            logger.warning(f"Skipping unreadable file {relative_path}")
            continue

        mod_id = None
        if file_path.suffix.lower() == ".jar":
            mod_id = read_root_mod_id(file_path)

        descriptors.append(FileDescriptor(
            file_name=relative_path,
            checksum=checksum,
            owner_module_id=mod_id or file_path.stem
        ))

    logger.info(f"Built manifest with {len(descriptors)} files from {served_dir}")
    return Manifest(forge_version=forge_version, files=tuple(descriptors))
