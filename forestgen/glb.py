"""GLB preview export of a composed forest.

Static, low-poly stand-in for the real renderer: one mesh per layer
(trunks, crowns, leaves, optional ground and exclusion zones), with leaf
quads carrying their per-instance colours as vertex colours.
"""

import logging
import math
import time

import numpy as np
import trimesh
from shapely.geometry import Point

from . import constants as C
from .instancing import leaf_matrix, tree_matrix
from .models import PathManager

logger = logging.getLogger(__name__)


def _new_group():
    return {'verts': [], 'faces': [], 'offset': 0}


def _make_tapered_prism(cx, cz, y_bot, y_top, r_bot, r_top, nsides=8):
    """Create a tapered prism (frustum) with *nsides* sides.

    Returns (verts, faces) in Y-up [x, y, z] format.
    """
    verts = []
    faces = []

    # Bottom ring then top ring: 2*nsides vertices
    for radius, y in ((r_bot, y_bot), (r_top, y_top)):
        for i in range(nsides):
            angle = 2.0 * math.pi * i / nsides
            verts.append([cx + radius * math.cos(angle), y,
                          cz + radius * math.sin(angle)])

    # Side quads (two triangles each)
    for i in range(nsides):
        j = (i + 1) % nsides
        b0, b1 = i, j
        t0, t1 = nsides + i, nsides + j
        faces.append([b0, b1, t1])
        faces.append([b0, t1, t0])

    # Caps (fan from centre)
    cbot = len(verts)
    verts.append([cx, y_bot, cz])
    ctop = len(verts)
    verts.append([cx, y_top, cz])
    for i in range(nsides):
        j = (i + 1) % nsides
        faces.append([cbot, j, i])
        faces.append([ctop, nsides + i, nsides + j])

    return verts, faces


def _make_sphere(cx, cy, cz, radius, n_lon=12, n_lat=6):
    """Low-poly UV sphere: rings between two pole vertices."""
    verts = [[cx, cy - radius, cz]]
    for i in range(1, n_lat):
        phi = math.pi * i / n_lat - math.pi / 2
        ring_r = radius * math.cos(phi)
        y = cy + radius * math.sin(phi)
        for j in range(n_lon):
            theta = 2 * math.pi * j / n_lon
            verts.append([cx + ring_r * math.cos(theta), y,
                          cz + ring_r * math.sin(theta)])
    top = len(verts)
    verts.append([cx, cy + radius, cz])

    faces = []
    for j in range(n_lon):
        j_next = (j + 1) % n_lon
        faces.append([0, 1 + j, 1 + j_next])
    for i in range(n_lat - 2):
        r0 = 1 + i * n_lon
        r1 = r0 + n_lon
        for j in range(n_lon):
            j_next = (j + 1) % n_lon
            faces.append([r0 + j, r1 + j, r1 + j_next])
            faces.append([r0 + j, r1 + j_next, r0 + j_next])
    last = 1 + (n_lat - 2) * n_lon
    for j in range(n_lon):
        j_next = (j + 1) % n_lon
        faces.append([last + j, top, last + j_next])
    return verts, faces


def _add_to_group(group, verts, faces):
    """Append geometry into a mesh *group* dict."""
    off = group['offset']
    for f in faces:
        group['faces'].append([f[0] + off, f[1] + off, f[2] + off])
    group['verts'].extend(verts)
    group['offset'] += len(verts)


# Unit leaf quad in the XY plane; the instance tilt lays it flat.
_LEAF_QUAD = np.array([
    [-C.LEAF_WIDTH / 2, -C.LEAF_HEIGHT / 2, 0.0, 1.0],
    [C.LEAF_WIDTH / 2, -C.LEAF_HEIGHT / 2, 0.0, 1.0],
    [C.LEAF_WIDTH / 2, C.LEAF_HEIGHT / 2, 0.0, 1.0],
    [-C.LEAF_WIDTH / 2, C.LEAF_HEIGHT / 2, 0.0, 1.0],
])
# Both windings so the quad is visible from either side.
_LEAF_FACES = [[0, 1, 2], [0, 2, 3], [0, 2, 1], [0, 3, 2]]


def _ground_disc(radius, segments=48):
    verts = [[0.0, 0.0, 0.0]]
    for i in range(segments):
        a = 2 * math.pi * i / segments
        verts.append([radius * math.cos(a), 0.0, radius * math.sin(a)])
    faces = [[0, 1 + (i + 1) % segments, 1 + i] for i in range(segments)]
    return verts, faces


def _exclusion_footprints(zones, radius, y=0.02):
    """Flat quads for each zone, clipped to the ground disc."""
    group = _new_group()
    disc = Point(0.0, 0.0).buffer(radius, quad_segs=32)
    for zone in zones:
        clipped = zone.to_polygon().intersection(disc)
        if clipped.is_empty or clipped.geom_type != 'Polygon':
            continue
        coords = list(clipped.exterior.coords)[:-1]
        if len(coords) < 3:
            continue
        verts = [[x, y, z] for x, z in coords]
        # Convex (box clipped by disc), so a fan triangulates it
        faces = [[0, i + 1, i] for i in range(1, len(coords) - 1)]
        _add_to_group(group, verts, faces)
    return group


def build_forest_scene(result, include_ground=False,
                       include_exclusion=False) -> trimesh.Scene:
    """Assemble a trimesh Scene for a composed forest."""
    groups = {
        'tree_trunk': _new_group(),
        'tree_crown': _new_group(),
    }
    leaf_verts = []
    leaf_faces = []
    leaf_colors = []

    for tree in result.trees:
        world = tree_matrix(tree)
        x, _, z = tree.position
        s = tree.scale

        v, f = _make_tapered_prism(
            x, z, 0.0, C.TRUNK_HEIGHT * s,
            C.TRUNK_RADIUS_BOTTOM * s, C.TRUNK_RADIUS_TOP * s,
            nsides=C.TRUNK_SIDES)
        _add_to_group(groups['tree_trunk'], v, f)

        v, f = _make_sphere(x, (C.TRUNK_HEIGHT + C.CROWN_OFFSET) * s, z,
                            C.CROWN_RADIUS * s)
        _add_to_group(groups['tree_crown'], v, f)

        for leaf in tree.canopy:
            m = world @ leaf_matrix(leaf)
            quad = (_LEAF_QUAD @ m.T)[:, :3]
            off = len(leaf_verts)
            leaf_verts.extend(quad.tolist())
            leaf_faces.extend([[a + off, b + off, c + off]
                               for a, b, c in _LEAF_FACES])
            rgba = [int(round(ch * 255)) for ch in leaf.color] + [255]
            leaf_colors.extend([rgba] * 4)

    if include_ground:
        groups['ground'] = _new_group()
        v, f = _ground_disc(result.params.radius)
        _add_to_group(groups['ground'], v, f)
    if include_exclusion and result.params.exclusion_zones:
        groups['exclusion'] = _exclusion_footprints(
            result.params.exclusion_zones, result.params.radius)

    scene = trimesh.Scene()
    for name, group in groups.items():
        if not group['verts'] or not group['faces']:
            continue
        mesh = trimesh.Trimesh(
            vertices=np.array(group['verts'], dtype=np.float64),
            faces=np.array(group['faces'], dtype=np.int64),
            process=False)
        material = trimesh.visual.material.PBRMaterial(
            baseColorFactor=C.LAYER_COLORS.get(name, [0.8, 0.8, 0.8, 1.0]),
            doubleSided=True,
        )
        mesh.visual = trimesh.visual.TextureVisuals(material=material)
        scene.add_geometry(mesh, geom_name=name)

    if leaf_verts:
        leaves = trimesh.Trimesh(
            vertices=np.array(leaf_verts, dtype=np.float64),
            faces=np.array(leaf_faces, dtype=np.int64),
            vertex_colors=np.array(leaf_colors, dtype=np.uint8),
            process=False)
        scene.add_geometry(leaves, geom_name='leaves')

    return scene


def generate_glb(result, output_path: str, include_ground=True,
                 include_exclusion=True) -> str:
    """Write *result* as a binary glTF file.

    Relative paths resolve under the configured output directory.
    Returns the absolute path to the generated file.
    """
    if not result.trees:
        raise ValueError("No trees to export - forest is empty")

    t0 = time.perf_counter()
    output_path = PathManager.get_output_path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    scene = build_forest_scene(result, include_ground=include_ground,
                               include_exclusion=include_exclusion)
    scene.export(str(output_path), file_type='glb')

    logger.info(f"GLB file generated: {output_path} "
                f"({len(result.trees)} trees, "
                f"{time.perf_counter() - t0:.2f}s)")
    return str(output_path)
