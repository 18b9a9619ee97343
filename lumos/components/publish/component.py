"""Publish component - post lifecycle: create, edit, read, list, publish/unpublish, delete."""

from __future__ import annotations

import logging
from uuid import UUID

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
from lumos.components.publish.ports import ClockPort, StorePort
from lumos.domain.entities import Post, Publication
from lumos.domain.errors import (
    ActionError,
    ErrorKind,
    forbidden,
    invalid_input,
    not_found,
    unauthenticated,
)
from lumos.domain.policy import can_act, post_owner_ids, publication_owner_ids
from lumos.domain.state import is_first_publish, set_published
from lumos.domain.validation import validate_slug, validate_text
from lumos.ports.repo import DuplicateKeyError

logger = logging.getLogger(__name__)

PublishInput = (
    CheckPostAccessInput
    | SetPublishedInput
    | CreatePostInput
    | UpdatePostInput
    | GetPostInput
    | ListPostsInput
    | DeletePostInput
)
PublishOutput = (
    PostAccessOutput
    | SetPublishedOutput
    | CreatePostOutput
    | UpdatePostOutput
    | GetPostOutput
    | ListPostsOutput
    | DeletePostOutput
)


class PublishComponent:
    """Component for managing the post publishing lifecycle."""

    def __init__(
        self,
        store: StorePort,
        clock: ClockPort,
        config: PublishConfig | None = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._config = config or PublishConfig()

    def run(self, input_data: PublishInput) -> PublishOutput:
        """Main dispatcher - routes to appropriate handler based on input type."""
        if isinstance(input_data, CheckPostAccessInput):
            return self.run_check_post_access(input_data)
        elif isinstance(input_data, SetPublishedInput):
            return self.run_set_published(input_data)
        elif isinstance(input_data, CreatePostInput):
            return self.run_create_post(input_data)
        elif isinstance(input_data, UpdatePostInput):
            return self.run_update_post(input_data)
        elif isinstance(input_data, GetPostInput):
            return self.run_get_post(input_data)
        elif isinstance(input_data, ListPostsInput):
            return self.run_list_posts(input_data)
        elif isinstance(input_data, DeletePostInput):
            return self.run_delete_post(input_data)
        else:
            raise TypeError(f"Unknown input type: {type(input_data)}")

    def run_check_post_access(self, input_data: CheckPostAccessInput) -> PostAccessOutput:
        """
        Resolve the post and apply the ownership guard.

        Order is fixed: unauthenticated, then not found, then forbidden.
        """
        if input_data.principal_id is None:
            return PostAccessOutput(success=False, error=unauthenticated())

        post = self._store.posts.get_by_id(input_data.post_id)
        if post is None:
            return PostAccessOutput(success=False, error=not_found("post", "post_id"))

        publication = self._store.publications.get_by_id(post.publication_id)
        if not can_act(input_data.principal_id, post_owner_ids(post, publication)):
            return PostAccessOutput(success=False, error=forbidden())

        return PostAccessOutput(success=True, post=post, publication=publication)

    def run_set_published(self, input_data: SetPublishedInput) -> SetPublishedOutput:
        """Publish or unpublish a post. `published_at` is stamped only once."""
        access = self.run_check_post_access(
            CheckPostAccessInput(principal_id=input_data.principal_id, post_id=input_data.post_id)
        )
        if not access.success or access.post is None:
            return SetPublishedOutput(success=False, error=access.error)

        if not isinstance(input_data.publish, bool):
            return SetPublishedOutput(
                success=False,
                error=invalid_input("INVALID_PUBLISH", "publish must be a boolean", "publish"),
            )

        before = access.post
        after = set_published(before, input_data.publish, self._clock.now())
        self._store.posts.update(after)

        first_publish = is_first_publish(before, after)
        if first_publish:
            logger.info(f"Post {after.id} published for the first time")

        return SetPublishedOutput(
            success=True,
            post=after,
            first_publish=first_publish,
            message=PUBLISHED_MESSAGE if after.is_published else UNPUBLISHED_MESSAGE,
        )

    def run_create_post(self, input_data: CreatePostInput) -> CreatePostOutput:
        """Create a post in a publication the principal owns."""
        if input_data.principal_id is None:
            return CreatePostOutput(success=False, error=unauthenticated())

        publication = self._store.publications.get_by_id(input_data.publication_id)
        if publication is None:
            return CreatePostOutput(
                success=False, error=not_found("publication", "publication_id")
            )

        if not can_act(input_data.principal_id, publication_owner_ids(publication)):
            return CreatePostOutput(success=False, error=forbidden())

        error = self._validate_title(input_data.title) or self._validate_slug(input_data.slug)
        if error:
            return CreatePostOutput(success=False, error=error)

        if self._store.posts.get_by_slug(publication.id, input_data.slug) is not None:
            return CreatePostOutput(success=False, error=_slug_taken())

        now = self._clock.now()
        post = Post(
            publication_id=publication.id,
            author_id=input_data.principal_id,
            title=input_data.title.strip(),
            slug=input_data.slug,
            subtitle=input_data.subtitle,
            content=input_data.content,
            excerpt=input_data.excerpt,
            is_paid=input_data.is_paid,
            created_at=now,
            updated_at=now,
        )
        if input_data.publish:
            post = set_published(post, True, now)

        try:
            self._store.posts.add(post)
        except DuplicateKeyError:
            return CreatePostOutput(success=False, error=_slug_taken())

        return CreatePostOutput(success=True, post=post, first_publish=post.is_published)

    def run_update_post(self, input_data: UpdatePostInput) -> UpdatePostOutput:
        """
        Edit a post. A new slug is re-checked within the publication and a
        change of `is_published` goes through the publish transition, so
        `published_at` is still stamped at most once.
        """
        access = self.run_check_post_access(
            CheckPostAccessInput(principal_id=input_data.principal_id, post_id=input_data.post_id)
        )
        if not access.success or access.post is None:
            return UpdatePostOutput(success=False, error=access.error)
        before = access.post

        if input_data.is_published is not None and not isinstance(input_data.is_published, bool):
            return UpdatePostOutput(
                success=False,
                error=invalid_input("INVALID_PUBLISH", "isPublished must be a boolean", "is_published"),
            )

        error: ActionError | None = None
        if input_data.title is not None:
            error = self._validate_title(input_data.title)
        if error is None and input_data.slug is not None:
            error = self._validate_slug(input_data.slug)
        if error:
            return UpdatePostOutput(success=False, error=error)

        now = self._clock.now()
        updates: dict[str, object] = {"updated_at": now}
        if input_data.title is not None:
            updates["title"] = input_data.title.strip()
        if input_data.slug is not None and input_data.slug != before.slug:
            if self._store.posts.get_by_slug(before.publication_id, input_data.slug) is not None:
                return UpdatePostOutput(success=False, error=_slug_taken())
            updates["slug"] = input_data.slug
        for name in ("subtitle", "content", "excerpt", "is_paid"):
            value = getattr(input_data, name)
            if value is not None:
                updates[name] = value

        after = before.model_copy(update=updates)
        if isinstance(input_data.is_published, bool):
            after = set_published(after, input_data.is_published, now)

        try:
            self._store.posts.update(after)
        except DuplicateKeyError:
            return UpdatePostOutput(success=False, error=_slug_taken())

        first_publish = is_first_publish(before, after)
        if first_publish:
            logger.info(f"Post {after.id} published for the first time")
        return UpdatePostOutput(success=True, post=after, first_publish=first_publish)

    def run_get_post(self, input_data: GetPostInput) -> GetPostOutput:
        """Drafts are visible to their author and the publication owner only."""
        post = self._store.posts.get_by_id(input_data.post_id)
        if post is None:
            return GetPostOutput(success=False, error=not_found("post", "post_id"))

        if not post.is_published:
            publication = self._store.publications.get_by_id(post.publication_id)
            if not can_act(input_data.principal_id, post_owner_ids(post, publication)):
                return GetPostOutput(success=False, error=not_found("post", "post_id"))

        return GetPostOutput(success=True, post=post)

    def run_list_posts(self, input_data: ListPostsInput) -> ListPostsOutput:
        """Newest first. Drafts are listed only for their author and the publication owner."""
        posts = self._store.posts.list_filtered(
            publication_id=input_data.publication_id, published=input_data.published
        )

        publications: dict[UUID, Publication | None] = {}
        visible: list[Post] = []
        for post in posts:
            if not post.is_published:
                if post.publication_id not in publications:
                    publications[post.publication_id] = self._store.publications.get_by_id(
                        post.publication_id
                    )
                owner_ids = post_owner_ids(post, publications[post.publication_id])
                if not can_act(input_data.principal_id, owner_ids):
                    continue
            visible.append(post)
        return ListPostsOutput(success=True, posts=visible)

    def run_delete_post(self, input_data: DeletePostInput) -> DeletePostOutput:
        access = self.run_check_post_access(
            CheckPostAccessInput(principal_id=input_data.principal_id, post_id=input_data.post_id)
        )
        if not access.success:
            return DeletePostOutput(success=False, error=access.error)

        self._store.posts.delete(input_data.post_id)
        return DeletePostOutput(success=True)

    def _validate_title(self, title: str) -> ActionError | None:
        return validate_text(title, "title", min_len=1, max_len=self._config.title_max)

    def _validate_slug(self, slug: str) -> ActionError | None:
        slugs = self._config.slugs
        return validate_slug(slug, slugs, min_len=slugs.post_min, max_len=slugs.post_max)


def _slug_taken() -> ActionError:
    return ActionError(
        ErrorKind.CONFLICT, "SLUG_TAKEN", "A post with this slug already exists", "slug"
    )
