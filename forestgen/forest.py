"""ForestComposer: thin orchestrator over placement and canopy generation."""

import logging
import time
from dataclasses import dataclass
from typing import Optional, Tuple

from .canopy import CanopyInstanceGenerator
from .constants import DEFAULT_SEED
from .models import ExclusionZone, ForestParams, TreeDescriptor
from .placement import AreaPlacementSampler, PlacementResult
from .rng import (SeededRandomSource, create_random_source,
                  normalize_seed)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForestResult:
    """One generation pass: the trees plus how placement went."""
    params: ForestParams
    token: object
    trees: Tuple[TreeDescriptor, ...]
    placement: PlacementResult

    def __len__(self):
        return len(self.trees)

    def __iter__(self):
        return iter(self.trees)

    def __getitem__(self, index):
        return self.trees[index]

    @property
    def requested(self) -> int:
        return self.placement.requested

    @property
    def shortfall(self) -> int:
        return self.placement.shortfall


class ForestComposer:
    """Compose a forest and memoise it against (parameters, token).

    The token is an opaque regeneration trigger owned by the caller (e.g. a
    counter bumped by a "regenerate" button).  Calling ``compose`` again
    with the same parameters and token returns the cached result object;
    any change recomputes everything and drops the old result.
    """

    def __init__(self, sampler=None, canopy=None):
        self.sampler = sampler or AreaPlacementSampler()
        self.canopy = canopy or CanopyInstanceGenerator()
        self._cache_key = None
        self._cached: Optional[ForestResult] = None

    @property
    def cached(self) -> Optional[ForestResult]:
        return self._cached

    def invalidate(self) -> None:
        """Forget the cached forest; the next compose recomputes."""
        self._cache_key = None
        self._cached = None

    def compose(self, count, radius, min_distance, tree_scale, leaf_count,
                exclusion_zones=(), seed=DEFAULT_SEED,
                token=None) -> ForestResult:
        params = ForestParams(
            count=count,
            radius=radius,
            min_distance=min_distance,
            tree_scale=tree_scale,
            leaf_count=leaf_count,
            exclusion_zones=tuple(ExclusionZone.coerce(z)
                                  for z in exclusion_zones or ()),
            seed=seed,
        )
        key = (params, token)
        if self._cached is not None and self._cache_key == key:
            logger.debug(f"Forest cache hit (token={token!r})")
            return self._cached

        result = self.generate(params, token=token)
        self._cache_key = key
        self._cached = result
        return result

    def generate(self, params: ForestParams, token=None) -> ForestResult:
        """Run one full generation pass for *params*, bypassing the cache."""
        t0 = time.perf_counter()
        rng = create_random_source(params.seed)
        placement = self.sampler.sample(
            params.count, params.radius, params.min_distance,
            params.exclusion_zones, rng)

        trees = []
        for i, position in enumerate(placement):
            if params.seed is not None:
                tree_seed = normalize_seed(params.seed + i + 1)
            else:
                tree_seed = rng.draw_seed()
            canopy = self.canopy.generate(
                params.leaf_count, SeededRandomSource(tree_seed))
            trees.append(TreeDescriptor(
                index=i,
                position=position,
                derived_seed=tree_seed,
                scale=params.tree_scale,
                canopy=canopy,
            ))
            logger.debug(f"Tree {i}: ({position.x:.2f}, {position.z:.2f}) "
                         f"seed={tree_seed}")

        elapsed = time.perf_counter() - t0
        logger.info(f"Composed forest: requested {placement.requested}, "
                    f"placed {len(trees)} trees x {params.leaf_count} leaves "
                    f"(seed={params.seed}, {elapsed * 1000:.1f} ms)")
        return ForestResult(
            params=params,
            token=token,
            trees=tuple(trees),
            placement=placement,
        )
