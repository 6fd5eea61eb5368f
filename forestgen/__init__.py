"""forestgen package — deterministic procedural forest placement.

Seeded tree placement inside a disc with exclusion zones, plus per-tree
instanced leaf canopies, handed to a renderer as plain data.
"""

from forestgen.canopy import CanopyInstanceGenerator
from forestgen.forest import ForestComposer, ForestResult
from forestgen.models import (CanopyInstanceSet, ExclusionZone, ForestParams,
                              GroundPosition, LeafInstance, TreeDescriptor)
from forestgen.placement import (AreaPlacementSampler, PlacementResult,
                                 estimate_capacity)
from forestgen.rng import (EntropyRandomSource, SeededRandomSource,
                           create_random_source)
