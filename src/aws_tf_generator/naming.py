#!/usr/bin/env python3
"""
Identifier Naming

Resource block names only need to be unique within their own category, while
generated variable and output identifiers must be unique across a whole
generation run, including names imported from a previous run or from existing
state. Both schemes are deterministic for a given input order.
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_NAME = "resource"

T = TypeVar("T")


def make_resource_names_unique(resources: Iterable[T]) -> List[T]:
    """
    Make resource_name unique within one category's sequence

    The first occurrence of a base name is kept as-is; later occurrences get
    the next free _1, _2, ... in input order. Suffixed candidates skip names
    already emitted and explicit names appearing anywhere in the input, so
    web, web, web_1 becomes web, web_2, web_1. An empty base name is treated
    as "resource". The input descriptors are not modified.

    Args:
        resources: Descriptors carrying a resource_name attribute

    Returns:
        New list of descriptors with unique resource names
    """
    resources = list(resources)
    explicit = {resource.resource_name or DEFAULT_RESOURCE_NAME for resource in resources}
    emitted: Set[str] = set()
    name_count: Dict[str, int] = {}
    unique = []

    for resource in resources:
        base = resource.resource_name or DEFAULT_RESOURCE_NAME
        unique_name = base

        if base in emitted:
            count = name_count.get(base, 0)
            while True:
                count += 1
                unique_name = f"{base}_{count}"
                if unique_name not in emitted and unique_name not in explicit:
                    break
            name_count[base] = count

        emitted.add(unique_name)
        unique.append(replace(resource, resource_name=unique_name))

    return unique


def make_name_globally_unique(base: str, used: Set[str]) -> str:
    """Return the lowest free name among base, base_1, base_2, ... and mark it used"""
    name = base
    i = 1
    while name in used:
        name = f"{base}_{i}"
        i += 1
    used.add(name)
    return name


class NameRegistry:
    """
    Consumed-name set for one artifact generation call

    Seed it with imported names before the first allocation so that new
    identifiers never shadow them. Every allocation is checked against the
    imports and against everything allocated earlier by the same registry.
    """

    def __init__(self, imported: Optional[Iterable[str]] = None):
        self._used: Set[str] = set(imported or [])
        self._allocated: List[str] = []

    def allocate(self, base: str) -> str:
        """Allocate a unique identifier for base and record it as consumed"""
        name = make_name_globally_unique(base, self._used)
        if name != base:
            logger.debug(f"Identifier '{base}' already in use, allocated '{name}'")
        self._allocated.append(name)
        return name

    @property
    def allocated(self) -> List[str]:
        """Names handed out by this registry, in allocation order"""
        return list(self._allocated)

    def __contains__(self, name: str) -> bool:
        return name in self._used

    def __len__(self) -> int:
        return len(self._used)
