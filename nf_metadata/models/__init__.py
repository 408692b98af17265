"""
Domain models shared by the gateway, the orchestrator and scripts.
"""

from nf_metadata.models.entity import ContentAdvisory, ImageRef, MetadataEntity, extract_entities, first_entity

__all__ = [
    "ContentAdvisory",
    "ImageRef",
    "MetadataEntity",
    "extract_entities",
    "first_entity",
]
