"""High-level orchestration for page translation."""

from __future__ import annotations

import logging

from .cache import CacheKey, InMemoryResultCache, ResultCache, content_identity
from .configuration import PipelineConfig
from .errors import CountMismatchError
from .fallback import LanguageFallbackController, determine_languages
from .languages import AUTO
from .providers import TranslationProvider, build_provider
from .reconciler import ResponseReconciler, check_result_shape
from .segmenter import BatchBuilder, FragmentFilter, flatten_page, group_sizes
from .structures import PageText, PageTranslation
from .transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


def _fits(page: PageText, cached: PageTranslation) -> bool:
    """Whether a cached result still has the shape of ``page``."""

    try:
        check_result_shape(group_sizes(page), cached.paragraphs)
    except CountMismatchError:
        logger.debug("Cached result no longer matches the page shape; ignoring it.")
        return False
    return True


class PageTranslator:
    """Coordinates filtering, batching, the remote call and reconciliation."""

    def __init__(
        self,
        *,
        provider: TranslationProvider,
        batch_builder: BatchBuilder,
        config: PipelineConfig,
        cache: ResultCache | None = None,
        fragment_filter: FragmentFilter | None = None,
    ) -> None:
        self.provider = provider
        self.batch_builder = batch_builder
        self.config = config
        self.cache = cache
        self.fragment_filter = fragment_filter or FragmentFilter(
            config.short_content_threshold
        )

    async def translate(
        self,
        page: PageText,
        *,
        source_language: str | None = None,
        target_language: str | None = None,
        content_id: str | None = None,
    ) -> PageTranslation:
        source, target = determine_languages(
            source_language=source_language,
            target_language=target_language,
            preferred_language=self.config.preferred_language,
            second_preferred_language=self.config.second_preferred_language,
        )

        cache_key = CacheKey(
            provider=self.provider.name,
            source_language=source,
            target_language=target,
            content_id=content_id or content_identity(page),
        )
        if self.cache is not None:
            cached = await self.cache.get(cache_key)
            if cached is not None and _fits(page, cached):
                logger.debug("Cache hit for %s", cache_key.as_string())
                return PageTranslation(
                    paragraphs=cached.paragraphs,
                    source_language=cached.source_language,
                    target_language=cached.target_language,
                    retried=cached.retried,
                    from_cache=True,
                )

        fragments = flatten_page(page)
        reconciler = ResponseReconciler(fragments, group_sizes(page))
        filtered = self.fragment_filter.split(fragments)

        if not filtered.selected:
            logger.debug(
                "All %d fragments are pass-through; skipping the remote call.",
                len(fragments),
            )
            return PageTranslation(
                paragraphs=reconciler.passthrough(),
                source_language=source,
                target_language=target,
            )

        request = self.batch_builder.build(filtered.selected, target)
        result = await self.provider.translate_batch(request)
        paragraphs = reconciler.reconcile(request.texts, result)

        controller = LanguageFallbackController(
            source_pinned=source != AUTO,
            target_pinned=bool(target_language),
            preferred_language=self.config.preferred_language,
            second_preferred_language=self.config.second_preferred_language,
        )
        retried = False
        if controller.should_retry(result):
            request = self.batch_builder.retarget(request, controller.fallback_target())
            result = await self.provider.translate_batch(request)
            paragraphs = reconciler.reconcile(request.texts, result)
            retried = True

        translation = PageTranslation(
            paragraphs=paragraphs,
            source_language=result.source_language or source,
            target_language=result.target_language or request.target_language,
            retried=retried,
        )
        logger.info(
            "Translated %d of %d fragments (%s -> %s)%s.",
            len(filtered.selected),
            len(fragments),
            translation.source_language,
            translation.target_language,
            " after language fallback" if retried else "",
        )

        if self.cache is not None:
            await self.cache.put(cache_key, translation)
        return translation


def build_translator(
    source: str,
    config: PipelineConfig,
    *,
    transport: Transport | None = None,
    cache: ResultCache | None = None,
) -> PageTranslator:
    """Create a :class:`PageTranslator` for a configured translation source."""

    endpoint = config.endpoint_for(source)
    provider = build_provider(
        "custom",
        source=source,
        endpoint=endpoint,
        transport=transport or HttpxTransport(timeout=config.request_timeout),
        debug=config.provider_debug,
    )
    if cache is None and config.cache_size > 0:
        cache = InMemoryResultCache(config.cache_size)
    return PageTranslator(
        provider=provider,
        batch_builder=BatchBuilder(endpoint),
        config=config,
        cache=cache,
    )


async def translate_page(
    page: PageText,
    source: str,
    config: PipelineConfig,
    *,
    source_language: str | None = None,
    target_language: str | None = None,
    content_id: str | None = None,
    transport: Transport | None = None,
    cache: ResultCache | None = None,
) -> PageTranslation:
    """Translate ``page`` with the translation source named ``source``."""

    translator = build_translator(source, config, transport=transport, cache=cache)
    return await translator.translate(
        page,
        source_language=source_language,
        target_language=target_language,
        content_id=content_id,
    )
