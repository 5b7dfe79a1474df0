"""Cache decorators for async functions.

Both decorators take the ``Cache`` they operate on explicitly, so each
application wires its own instance instead of relying on module state.
"""

import functools
import inspect
import re
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from tagcache.core.services.cache_service import Cache
from tagcache.utils.time import TTLLike

F = TypeVar("F", bound=Callable[..., Any])

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def cached(
    cache: Cache[Any],
    prefix: str | None = None,
    ttl: TTLLike | None = None,
    tags: list[str] | None = None,
    key: str | Callable[..., str] | None = None,
) -> Callable[[F], F]:
    """Decorator memoizing an async function through ``cache.wrap``.

    Args:
        cache: The cache to store results in.
        prefix: Key prefix. Defaults to the function's qualified name.
        ttl: Time-to-live for cached results. Uses config default if None.
        tags: Tags for cache invalidation. Supports {arg_name} interpolation.
        key: Custom cache key or function to generate key.
            If string, supports {arg_name} interpolation.
            If callable, receives (*args, **kwargs) and returns key string.

    Returns:
        Decorated function.

    Example:
        @cached(cache, ttl=600, tags=["products", "product:{product_id}"])
        async def get_product(product_id: int) -> dict:
            return await repo.get_product(product_id)

    Arguments that cannot be JSON-encoded make the default key
    unavailable; such calls run uncached.
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)
        default_prefix = prefix or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                arguments = _bind_arguments(signature, args, kwargs)
            except TypeError:
                # Let the function raise its own error for a bad call.
                return await func(*args, **kwargs)

            if key is None:
                cache_key = cache.generate_key(default_prefix, arguments)
            elif callable(key):
                cache_key = key(*args, **kwargs)
            else:
                cache_key = _interpolate_string(key, arguments)

            return await cache.wrap(
                cache_key,
                lambda: func(*args, **kwargs),
                ttl=ttl,
                tags=_resolve_tags(tags, arguments),
            )

        return wrapper  # type: ignore

    return decorator


def invalidates(cache: Cache[Any], tags: list[str]) -> Callable[[F], F]:
    """Decorator invalidating tagged entries after a successful call.

    Args:
        cache: The cache to invalidate entries in.
        tags: Tags to invalidate. Supports {arg_name} interpolation.

    Returns:
        Decorated function.

    Example:
        @invalidates(cache, tags=["products", "product:{product_id}"])
        async def update_product(product_id: int, data: dict) -> dict:
            return await repo.update_product(product_id, data)
    """

    def decorator(func: F) -> F:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            # Execute function first
            result = await func(*args, **kwargs)

            arguments = _bind_arguments(signature, args, kwargs)
            cache.delete_by_tags(_resolve_tags(tags, arguments))

            return result

        return wrapper  # type: ignore

    return decorator


def _bind_arguments(
    signature: inspect.Signature,
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> dict[str, Any]:
    """Map call arguments to parameter names, defaults included."""
    bound = signature.bind(*args, **kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)


def _resolve_tags(
    tags: list[str] | None,
    arguments: Mapping[str, Any],
) -> list[str]:
    """Resolve tags with argument interpolation.

    Args:
        tags: Tag patterns with optional {arg} placeholders.
        arguments: Bound call arguments by parameter name.

    Returns:
        List of resolved tag strings.
    """
    if not tags:
        return []
    return [_interpolate_string(tag, arguments) for tag in tags]


def _interpolate_string(template: str, arguments: Mapping[str, Any]) -> str:
    """Interpolate {arg_name} placeholders in string.

    Unknown placeholders are kept as they are.
    """

    def replacer(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in arguments:
            return str(arguments[name])
        return match.group(0)

    return _PLACEHOLDER.sub(replacer, template)
