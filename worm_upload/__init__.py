"""
WORM Uploader.

Provisions an S3-compatible bucket with Object Lock, uploads a single file
with a COMPLIANCE retention lock and verifies the lock on the stored object.
"""

__version__ = "1.0.0"

from worm_upload.cli import main

__all__ = ["main", "__version__"]
