"""
Platform adapters.

Each adapter turns one external platform's wire format into a ProfileSnapshot:
LeetCode (GraphQL), Codeforces (paired REST), CodeChef (HTML scraping) and
HackerRank (chained REST).
"""

from codescore.services.platforms.base import PlatformAdapter
from codescore.services.platforms.codechef import CodeChefAdapter
from codescore.services.platforms.codeforces import CodeforcesAdapter
from codescore.services.platforms.dispatcher import ADAPTER_CLASSES, PlatformDispatcher, resolve_platform
from codescore.services.platforms.hackerrank import HackerRankAdapter
from codescore.services.platforms.leetcode import LeetCodeAdapter

__all__ = [
    "ADAPTER_CLASSES",
    "CodeChefAdapter",
    "CodeforcesAdapter",
    "HackerRankAdapter",
    "LeetCodeAdapter",
    "PlatformAdapter",
    "PlatformDispatcher",
    "resolve_platform",
]
