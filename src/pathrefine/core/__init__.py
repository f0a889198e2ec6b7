"""Core processing algorithms for pathrefine.

This module contains the core algorithms for:

- Geometry and curve math (arc length, point/tangent/normal at t)
- Affine transforms (parsing, composition, baking)
- Anchor healing (point-importance removal with bridging cubics)
- Multi-stage simplification (straighten, vertex reduction, curve refit)
- Health scoring (density and collinearity penalties)
- Alignment and tiling along a target path
- Merging paths into compound paths by color or proximity
- Preset-driven repair (auto-close plus simplification)
- Point editing (add, remove and join anchors)
- ViewBox fitting, icon squaring and document processing

All engine functions are:
- Pure (inputs are never mutated, new values are returned)
- Deterministic (random variation only with an explicit seed)
- Safe for use in worker processes

Key functions:
- length, point_at, tangent_at, normal_at: Arc-length curve queries
- parse_transform, bake_transform: Transform handling
- heal_once, heal_multiple, optimal_heal_count: Anchor healing
- simplify: Relative-tolerance simplification
- analyze_path, analyze_document: Health scoring
- align_to_path: Repeat a path along another
- fit_to_content: Crop the canvas to the artwork
- perfect_square: Center the artwork on a square icon canvas
- merge_paths, merge_similar_paths: Compound path merging
- repair_path: Auto-close and simplify at a preset intensity
- add_point_to_segment, remove_point, join_points: Point editing

Key classes:
- PathHealer: Heal engine with configurable weights
- PathSimplifier: Simplification pipeline
- PathAnalyzer: Health scoring
- PathAligner: Alignment and tiling
- DocumentProcessor: Runs an operation over every path of a document
"""

from pathrefine.core.alignment import PathAligner, align_to_path, scale_path
from pathrefine.core.analysis import (
    PathAnalyzer,
    analyze_document,
    analyze_path,
    collinear_fraction,
    format_file_size,
    precision_waste,
    score_subpath,
)
from pathrefine.core.editing import (
    add_point_to_segment,
    find_closest_point_on_segment,
    join_points,
    remove_point,
)
from pathrefine.core.curve_math import (
    length,
    normal_at,
    point_at,
    sample,
    segment_length,
    tangent_at,
)
from pathrefine.core.geometry import (
    distance,
    point_segment_distance,
    rotate_point,
    turn_angle,
)
from pathrefine.core.heal import (
    PathHealer,
    analyze_points,
    heal_multiple,
    heal_once,
    importance,
    optimal_heal_count,
)
from pathrefine.core.merge import (
    close_path,
    color_similarity,
    group_paths_by_color,
    group_paths_by_proximity,
    merge_nearby_paths,
    merge_paths,
    merge_selected_paths,
    merge_similar_paths,
    parse_color,
)
from pathrefine.core.processor import (
    OUTPUT_SUFFIXES,
    DocumentProcessor,
    apply_operation,
    process_path,
)
from pathrefine.core.repair import auto_close, repair_path
from pathrefine.core.simplify import PathSimplifier, simplify
from pathrefine.core.smoothing import (
    IdentityOperation,
    PathOperation,
    SmoothOperation,
    compose,
    smooth_path,
)
from pathrefine.core.transforms import (
    apply_transform,
    bake_transform,
    format_transform,
    parse_transform,
    transform_path,
)
from pathrefine.core.viewbox import (
    bake_transforms,
    calculate_bounding_box,
    fit_to_content,
    perfect_square,
)

__all__ = [
    "OUTPUT_SUFFIXES",
    # Processor
    "DocumentProcessor",
    "IdentityOperation",
    # Alignment
    "PathAligner",
    # Analysis
    "PathAnalyzer",
    # Heal
    "PathHealer",
    # Smoothing
    "PathOperation",
    # Simplify
    "PathSimplifier",
    "SmoothOperation",
    # Editing
    "add_point_to_segment",
    "align_to_path",
    "analyze_document",
    "analyze_path",
    "analyze_points",
    "apply_operation",
    # Transforms
    "apply_transform",
    # Repair
    "auto_close",
    "bake_transform",
    # ViewBox
    "bake_transforms",
    "calculate_bounding_box",
    # Merge
    "close_path",
    "collinear_fraction",
    "color_similarity",
    "compose",
    # Geometry
    "distance",
    "find_closest_point_on_segment",
    "fit_to_content",
    "format_file_size",
    "format_transform",
    "group_paths_by_color",
    "group_paths_by_proximity",
    "heal_multiple",
    "heal_once",
    "importance",
    "join_points",
    # Curve math
    "length",
    "merge_nearby_paths",
    "merge_paths",
    "merge_selected_paths",
    "merge_similar_paths",
    "normal_at",
    "optimal_heal_count",
    "parse_color",
    "parse_transform",
    "perfect_square",
    "point_at",
    "point_segment_distance",
    "precision_waste",
    "process_path",
    "remove_point",
    "repair_path",
    "rotate_point",
    "sample",
    "scale_path",
    "score_subpath",
    "segment_length",
    "simplify",
    "smooth_path",
    "tangent_at",
    "transform_path",
    "turn_angle",
]
