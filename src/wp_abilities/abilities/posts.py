"""``mcp-server/create-post`` ability."""

from __future__ import annotations

import sqlite3

from pydantic import Field

from wp_abilities.abilities.sanitize import sanitize_post_content, sanitize_text_field
from wp_abilities.abilities.types import Ability, AbilityContext, AbilityInput, AbilityOutput
from wp_abilities.store.posts import POST_STATUSES, PostStore


class CreatePostInput(AbilityInput):
    title: str = Field(description="The title of the post")
    content: str = Field(
        description="The content of the post. Must be valid block editor markup"
    )
    status: str = Field(
        default="draft",
        description="The status of the post",
        json_schema_extra={"enum": sorted(POST_STATUSES)},
    )


class CreatePostOutput(AbilityOutput):
    success: bool = Field(description="Whether the post creation completed successfully")
    url: str | None = Field(default=None, description="The URL of the created post")
    post_id: int | None = Field(default=None, description="ID of the created post")
    error: str | None = Field(default=None, description="Error message if post creation failed")


def create_post(payload: CreatePostInput, context: AbilityContext) -> CreatePostOutput:
    settings = context.settings
    status = sanitize_text_field(payload.status)
    if status not in POST_STATUSES:
        status = "draft"

    try:
        store = PostStore(settings.posts_db_path)
        post = store.insert(
            title=sanitize_text_field(payload.title),
            content=sanitize_post_content(payload.content),
            status=status,
            author_id=context.principal.user_id,
        )
    except sqlite3.Error as exc:
        context.logger.warning("Post insert failed: %s", exc)
        return CreatePostOutput(success=False, error=f"Failed to create post: {exc}")

    context.logger.info("Created post %d as %s", post.id, status)
    return CreatePostOutput(
        success=True,
        url=f"{settings.site_url}/?p={post.id}",
        post_id=post.id,
    )


def build_abilities(category: str) -> list[Ability]:
    return [
        Ability(
            name="mcp-server/create-post",
            label="Create Post",
            description="Creates a new blog post with the provided content",
            category=category,
            input_model=CreatePostInput,
            output_model=CreatePostOutput,
            execute=create_post,
            capability="publish_posts",
        )
    ]
