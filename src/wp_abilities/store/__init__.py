"""Local persistence.

Public API: Post, PostStore
"""

from wp_abilities.store.posts import Post, PostStore

__all__ = ["Post", "PostStore"]
