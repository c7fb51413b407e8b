"""Files Gateway: a thin HTTP layer over an S3-compatible object store."""
