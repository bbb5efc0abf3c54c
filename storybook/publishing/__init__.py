"""
Object-store publishing for rendered illustrations.
"""

from .s3_publisher import ArtifactPublisher, S3ArtifactPublisher

__all__ = ["ArtifactPublisher", "S3ArtifactPublisher"]
