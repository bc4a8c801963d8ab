"""Image reference resolution."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .types import ImageInfo


def parse_image_reference(ref: str) -> ImageInfo:
    """Split an image reference into repository and tag.

    The tag follows the last colon only when that text holds no ``/``, so
    registry ports survive: ``host:5000/name:tag`` gives ``host:5000/name``
    and ``tag`` while ``host:5000/name`` has no tag. Digests stay whole as
    the tag: ``name@sha256:abc`` gives ``name`` and ``sha256:abc``.

    Args:
        ref: Image reference such as ``registry/name:tag``

    Returns:
        The parsed image, or an empty ImageInfo when there is no tag
    """
    ref = (ref or "").strip()
    if not ref:
        return ImageInfo()

    if "@" in ref:
        repository, _, digest = ref.partition("@")
        if repository and digest:
            return ImageInfo(repository=repository, tag=digest)
        return ImageInfo()

    repository, sep, tag = ref.rpartition(":")
    if not sep or "/" in tag or not repository or not tag:
        return ImageInfo()
    return ImageInfo(repository=repository, tag=tag)


def image_from_release_config(config: Mapping[str, Any] | None) -> ImageInfo:
    """Read ``global.image.{repository,tag}`` from stored release values."""
    if not config:
        return ImageInfo()
    global_values = config.get("global")
    if not isinstance(global_values, Mapping):
        return ImageInfo()
    image = global_values.get("image")
    if not isinstance(image, Mapping):
        return ImageInfo()

    repository = image.get("repository")
    tag = image.get("tag")
    if not isinstance(repository, str) or not isinstance(tag, str):
        return ImageInfo()
    return ImageInfo(repository=repository, tag=tag)


def resolve_image(
    explicit: ImageInfo | None,
    *,
    consult_prior: bool,
    prior_config: Mapping[str, Any] | None = None,
    build_output: str = "",
) -> ImageInfo:
    """Pick the image for a reconciliation.

    Priority: a complete explicit image, then the prior release values (only
    when ``consult_prior`` is set, i.e. on create or override), then the
    build step output. Never raises.
    """
    if explicit is not None and explicit.is_complete:
        return explicit

    if consult_prior:
        from_prior = image_from_release_config(prior_config)
        if from_prior.is_complete:
            return from_prior

    return parse_image_reference(build_output)
