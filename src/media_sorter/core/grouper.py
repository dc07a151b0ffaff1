"""Grouping of identical fingerprints with a disjoint-set forest."""

from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Mapping, Union

import imagehash

from media_sorter.core.models import SimilarityGroup
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

Fingerprint = Union[imagehash.ImageHash, int]


class DisjointSet:
    """Union-find over the integers ``0 .. size - 1``."""

    def __init__(self, size: int):
        self.parent = list(range(size))
        self.rank = [0] * size

    def find(self, x: int) -> int:
        root = x
        while self.parent[root] != root:
            root = self.parent[root]
        # Path compression
        while self.parent[x] != root:
            self.parent[x], x = root, self.parent[x]
        return root

    def union(self, x: int, y: int) -> bool:
        """Merge the sets holding x and y. Returns False if already merged."""
        root_x = self.find(x)
        root_y = self.find(y)
        if root_x == root_y:
            return False

        if self.rank[root_x] < self.rank[root_y]:
            self.parent[root_x] = root_y
        elif self.rank[root_x] > self.rank[root_y]:
            self.parent[root_y] = root_x
        else:
            self.parent[root_y] = root_x
            self.rank[root_x] += 1
        return True

    def groups(self) -> Dict[int, List[int]]:
        """Map each root to the members of its set."""
        members: Dict[int, List[int]] = defaultdict(list)
        for index in range(len(self.parent)):
            members[self.find(index)].append(index)
        return dict(members)


def fingerprint_to_int(fingerprint: Fingerprint) -> int:
    if isinstance(fingerprint, int):
        return fingerprint
    # ImageHash renders as the hex string of its bit array
    return int(str(fingerprint), 16)


def hamming_distance(a: Fingerprint, b: Fingerprint) -> int:
    """Number of differing bits between two fingerprints."""
    if isinstance(a, imagehash.ImageHash) and isinstance(b, imagehash.ImageHash):
        return a - b
    return bin(fingerprint_to_int(a) ^ fingerprint_to_int(b)).count("1")


def group_duplicates(fingerprints: Mapping[Path, Fingerprint]) -> List[SimilarityGroup]:
    """
    Cluster paths whose fingerprints are identical.

    Every pair of paths is compared; a Hamming distance of 0 merges their
    sets. Sets with a single member are dropped. Groups are ordered by their
    smallest member path and numbered from 1 in that order.

    Args:
        fingerprints: Fingerprint per successfully hashed path

    Returns:
        List of groups with two or more members
    """
    paths = sorted(fingerprints)
    values = [fingerprint_to_int(fingerprints[path]) for path in paths]
    count = len(paths)

    logger.info(f"Comparing {count} fingerprints pairwise")

    forest = DisjointSet(count)
    for i in range(count):
        value_i = values[i]
        for j in range(i + 1, count):
            if bin(value_i ^ values[j]).count("1") == 0:
                logger.debug(f"Identical images: {paths[i]} and {paths[j]}")
                forest.union(i, j)

    member_lists = [
        sorted(paths[index] for index in indices)
        for indices in forest.groups().values()
        if len(indices) >= 2
    ]
    member_lists.sort(key=lambda members: members[0])

    groups = [
        SimilarityGroup(group_id=number, members=tuple(members))
        for number, members in enumerate(member_lists, 1)
    ]
    logger.info(f"Found {len(groups)} groups of identical images")
    return groups
