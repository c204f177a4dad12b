"""s3_local_index: local existence index for objects stored in S3."""

from s3_local_index.version import __version__

__all__ = ["__version__"]
