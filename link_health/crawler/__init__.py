"""Crawl engine: normalizer, frontier, fetcher, extractor and worker pool."""
