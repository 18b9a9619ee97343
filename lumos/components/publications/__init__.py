"""Publication component - create, read, list, rename and delete publications."""

from lumos.components.publications.component import (
    run_create_publication,
    run_delete_publication,
    run_get_publication,
    run_list_publications,
    run_update_publication,
)
from lumos.components.publications.models import (
    CreatePublicationInput,
    DeletePublicationInput,
    DeletePublicationOutput,
    GetPublicationInput,
    ListPublicationsOutput,
    PublicationConfig,
    PublicationOutput,
    UpdatePublicationInput,
)

__all__ = [
    "run_create_publication",
    "run_delete_publication",
    "run_get_publication",
    "run_list_publications",
    "run_update_publication",
    "CreatePublicationInput",
    "DeletePublicationInput",
    "DeletePublicationOutput",
    "GetPublicationInput",
    "ListPublicationsOutput",
    "PublicationConfig",
    "PublicationOutput",
    "UpdatePublicationInput",
]
