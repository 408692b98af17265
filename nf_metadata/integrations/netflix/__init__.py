"""
Netflix web GraphQL integration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nf_metadata.integrations.netflix.graphql_client import (
        MINI_MODAL_QUERY,
        HttpNetflixGraphqlClient,
        NetflixMetadataClient,
        PersistedQueryDescriptor,
    )

__all__ = [
    "MINI_MODAL_QUERY",
    "HttpNetflixGraphqlClient",
    "NetflixMetadataClient",
    "PersistedQueryDescriptor",
]


def __getattr__(name: str):
    if name in __all__:
        from nf_metadata.integrations.netflix import graphql_client

        return getattr(graphql_client, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
