"""Upstream adapters. Every public fetch returns a tagged `FetchResult`."""

from narrative.fetchers.results import Empty, FetchResult, MalformedResponse, Ok, unwrap

__all__ = ["Empty", "FetchResult", "MalformedResponse", "Ok", "unwrap"]
