"""Declarative caching decorators."""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any, TypeVar

from flycache.cache.ports.outbound import CacheStore
from flycache.cache.types import DEFAULT, Expiry
from flycache.kernel.exceptions import CacheMissException

F = TypeVar("F", bound=Callable[..., Any])


def _resolve_key(func: Callable[..., Any], key: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    bound = inspect.signature(func).bind(*args, **kwargs)
    bound.apply_defaults()
    return key.format(**bound.arguments)


def cacheable(
    store: CacheStore,
    key: str,
    ttl: Expiry = DEFAULT,
    into: Any = None,
) -> Callable[[F], F]:
    """Cache the return value of an async function, skip execution on cache hit.

    The `key` parameter supports format-string interpolation with function
    argument names. For example, `key="user:{user_id}"` will expand
    `{user_id}` from the function's arguments.

    Args:
        store: Cache store to use.
        key: Key template with {param} placeholders.
        ttl: Expiry for cached entries; the store default when omitted.
        into: Expected type of the cached value, passed to ``store.get``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            resolved_key = _resolve_key(func, key, args, kwargs)

            try:
                return await store.get(resolved_key, into)
            except CacheMissException:
                pass

            result = await func(*args, **kwargs)
            await store.set(resolved_key, result, ttl)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def cache_evict(
    store: CacheStore,
    key: str = "",
    all_entries: bool = False,
) -> Callable[[F], F]:
    """Evict a cache entry (or all entries) after method execution.

    Args:
        store: Cache store to use.
        key: Key template with {param} placeholders. Ignored when *all_entries* is ``True``.
        all_entries: When ``True``, flush the entire cache after execution.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)
            if all_entries:
                await store.flush()
            else:
                try:
                    await store.delete(_resolve_key(func, key, args, kwargs))
                except CacheMissException:
                    pass
            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def cache_put(
    store: CacheStore,
    key: str,
    ttl: Expiry = DEFAULT,
) -> Callable[[F], F]:
    """Always execute the method and cache the result.

    Unlike :func:`cacheable`, the decorated function is always invoked.
    This is useful for update operations where you want to refresh the
    cached value.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)
            await store.set(_resolve_key(func, key, args, kwargs), result, ttl)
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
