"""Publish component - post lifecycle operations."""

from lumos.components.publish.component import PublishComponent, PublishInput, PublishOutput
from lumos.components.publish.models import (
    PUBLISHED_MESSAGE,
    UNPUBLISHED_MESSAGE,
    CheckPostAccessInput,
    CreatePostInput,
    CreatePostOutput,
    DeletePostInput,
    DeletePostOutput,
    GetPostInput,
    GetPostOutput,
    ListPostsInput,
    ListPostsOutput,
    PostAccessOutput,
    PublishConfig,
    SetPublishedInput,
    SetPublishedOutput,
    UpdatePostInput,
    UpdatePostOutput,
)

__all__ = [
    "PublishComponent",
    "PublishInput",
    "PublishOutput",
    "PUBLISHED_MESSAGE",
    "UNPUBLISHED_MESSAGE",
    "CheckPostAccessInput",
    "CreatePostInput",
    "CreatePostOutput",
    "DeletePostInput",
    "DeletePostOutput",
    "GetPostInput",
    "GetPostOutput",
    "ListPostsInput",
    "ListPostsOutput",
    "PostAccessOutput",
    "PublishConfig",
    "SetPublishedInput",
    "SetPublishedOutput",
    "UpdatePostInput",
    "UpdatePostOutput",
]
