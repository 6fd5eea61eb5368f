"""Hand-off of generated forests to a renderer as plain arrays and dicts.

A renderer uploads these once per generation and keeps its own buffers;
it never writes back into the generator's output.
"""

import numpy as np
from trimesh import transformations as tf

_X_AXIS = [1.0, 0.0, 0.0]
_Y_AXIS = [0.0, 1.0, 0.0]
_Z_AXIS = [0.0, 0.0, 1.0]


def leaf_matrix(leaf) -> np.ndarray:
    """Local 4x4 transform of one leaf: translate @ rotate(XYZ) @ scale."""
    rx, ry, rz = leaf.rotation
    rotation = (tf.rotation_matrix(rx, _X_AXIS)
                @ tf.rotation_matrix(ry, _Y_AXIS)
                @ tf.rotation_matrix(rz, _Z_AXIS))
    return (tf.translation_matrix(leaf.position)
            @ rotation
            @ tf.scale_matrix(leaf.scale))


def instance_matrices(canopy) -> np.ndarray:
    """Stack per-leaf transforms into an (N, 4, 4) float32 array."""
    if len(canopy) == 0:
        return np.zeros((0, 4, 4), dtype=np.float32)
    return np.stack([leaf_matrix(leaf) for leaf in canopy]).astype(np.float32)


def instance_colors(canopy) -> np.ndarray:
    """Per-leaf RGB as an (N, 3) float32 array."""
    if len(canopy) == 0:
        return np.zeros((0, 3), dtype=np.float32)
    return np.array([leaf.color for leaf in canopy], dtype=np.float32)


def tree_matrix(tree) -> np.ndarray:
    """World transform of a tree group: ground position and uniform scale."""
    return (tf.translation_matrix(list(tree.position))
            @ tf.scale_matrix(tree.scale))


def forest_to_dict(result) -> dict:
    """JSON-ready description of a composed forest."""
    placement = result.placement
    token = result.token
    if not (token is None or isinstance(token, (str, int, float, bool))):
        token = repr(token)
    return {
        'params': result.params.to_dict(),
        'token': token,
        'placement': {
            'requested': placement.requested,
            'placed': len(placement),
            'shortfall': placement.shortfall,
            'attempts': placement.attempts,
            'max_attempts': placement.max_attempts,
        },
        'trees': [tree.to_dict() for tree in result.trees],
    }
