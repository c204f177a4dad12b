# src/api/facade.py - v2
"""Public API facade: wire every component from one Settings object.

Usage:
    from s3_local_index.api.facade import build_app
    app = build_app()
    stat = app.proxy.url_stat("s3://uploads/2023/01/photo.jpg", StatFlags.QUIET)

All state (caches, tracker, stores) lives on the returned IndexApp; nothing is
module-global, so tests and hosts can build as many isolated apps as needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from s3_local_index.cache.cache_factory import create_cache
from s3_local_index.cache.composite_cache import CompositeCache
from s3_local_index.cache.external_cache import BaseCacheService
from s3_local_index.config.settings import Settings
from s3_local_index.index.builder import IndexBuilder, ObjectLister
from s3_local_index.index.index_manager import IndexManager
from s3_local_index.index.index_store import IndexStore
from s3_local_index.index.maintenance import IndexMaintainer
from s3_local_index.parser.path_parser import PathParser
from s3_local_index.rebuild.rebuild_tracker import RebuildTracker
from s3_local_index.stream.base_backend import BaseStreamBackend
from s3_local_index.stream.proxy import StreamWrapperProxy
from s3_local_index.stream.resolvers.file_resolver import FileResolver
from s3_local_index.stream.resolvers.resolver_chain import ResolverChain

logger = logging.getLogger(__name__)


@dataclass
class IndexApp:
    """Container of wired components.

    ``backend``, ``proxy`` and ``builder`` are None when no bucket is
    configured and no backend was supplied.
    """

    settings: Settings
    parser: PathParser
    cache: CompositeCache
    store: IndexStore
    index_manager: IndexManager
    tracker: RebuildTracker
    maintainer: IndexMaintainer
    resolvers: ResolverChain
    backend: BaseStreamBackend | None = None
    proxy: StreamWrapperProxy | None = None
    builder: IndexBuilder | None = None


def build_app(
    settings: Settings | None = None,
    backend: BaseStreamBackend | None = None,
    cache_service: BaseCacheService | None = None,
    lister: ObjectLister | None = None,
) -> IndexApp:
    """Build an IndexApp.

    Args:
        settings: Global settings. Loaded from environment / .env if None.
        backend: Authoritative stream backend. Built from ``s3_bucket`` if None.
        cache_service: External cache service overriding the redis settings.
        lister: Object lister for index builds. Defaults to the backend when
            it can list keys.

    Returns:
        IndexApp with every component wired.
    """
    settings = settings or Settings()

    parser = PathParser(protocol=settings.s3_protocol)
    cache = create_cache(settings, service=cache_service)
    store = IndexStore(settings.resolved_index_dir)
    index_manager = IndexManager(cache, store, parser, ttl=settings.cache_ttl)
    tracker = RebuildTracker(settings.resolved_rebuild_list_file, parser)
    maintainer = IndexMaintainer(index_manager, tracker)
    resolvers = ResolverChain([FileResolver(index_manager)])

    if backend is None and settings.s3_bucket:
        from s3_local_index.stream.s3_backend import S3StreamBackend

        backend = S3StreamBackend(
            bucket=settings.s3_bucket,
            region=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
            protocol=settings.s3_protocol,
        )

    if lister is None and hasattr(backend, "iter_keys"):
        lister = backend  # type: ignore[assignment]

    app = IndexApp(
        settings=settings,
        parser=parser,
        cache=cache,
        store=store,
        index_manager=index_manager,
        tracker=tracker,
        maintainer=maintainer,
        resolvers=resolvers,
        backend=backend,
    )
    if backend is not None:
        app.proxy = StreamWrapperProxy(backend, resolvers, parser, maintainer)
    if lister is not None:
        app.builder = IndexBuilder(lister, store, cache, tracker, parser)

    logger.debug("Index directory: %s", store.base_dir)
    return app
