"""site_snapshot.storage: раскладка снимка на диске."""

from site_snapshot.storage.encoder import artifact_path, canonical_path, encode_path, escaped_path
from site_snapshot.storage.writer import write_artifact

__all__ = ["artifact_path", "canonical_path", "encode_path", "escaped_path", "write_artifact"]
