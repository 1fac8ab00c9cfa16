"""
Hull mesh validation.

Checks a triangle mesh against the point set it claims to enclose:
- Indices in range and three distinct vertices per face
- Manifold and closed (each edge shared by exactly 2 faces)
- Outward winding (no face plane has the vertex centroid in front of it)
- Containment (no input point beyond a face plane by more than the tolerance)
- Euler characteristic V - E + F == 2
- Degenerate (near zero area) faces, reported as a warning

Any error-level issue makes the report invalid.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

# Faces checked per block in the containment test.
_CONTAINMENT_BLOCK = 256


class ValidationSeverity(Enum):
    """Severity level of validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single problem found in the hull."""
    code: str
    severity: ValidationSeverity
    message: str
    count: int = 1
    details: List[int] = field(default_factory=list)  # face or point indices

    def __str__(self) -> str:
        if self.count > 1:
            return f"[{self.severity.value.upper()}] {self.code}: {self.message} ({self.count} occurrences)"
        return f"[{self.severity.value.upper()}] {self.code}: {self.message}"


@dataclass
class ValidationReport:
    """Result of ``validate_hull``."""
    is_valid: bool
    is_manifold: bool
    is_closed: bool
    is_outward: bool
    contains_all_points: bool

    n_points: int
    n_faces: int
    n_edges: int
    n_vertices: int
    n_boundary_edges: int
    n_non_manifold_edges: int
    n_points_outside: int
    euler_characteristic: int

    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    def summary(self) -> str:
        lines = [
            "Hull Validation Report",
            "=" * 40,
            f"Points: {self.n_points}",
            f"Faces: {self.n_faces}",
            f"Edges: {self.n_edges}",
            f"Vertices: {self.n_vertices}",
            "",
            f"Manifold: {'Yes' if self.is_manifold else 'No'}",
            f"Closed: {'Yes' if self.is_closed else 'No'}",
            f"Outward: {'Yes' if self.is_outward else 'No'}",
            f"Points outside: {self.n_points_outside}",
            f"Euler characteristic: {self.euler_characteristic}",
        ]

        if self.issues:
            lines.append("")
            lines.append("Issues:")
            for issue in self.issues:
                lines.append(f"  - {issue}")

        lines.append("")
        lines.append(f"Overall: {'VALID' if self.is_valid else 'INVALID'}")
        return "\n".join(lines)


def _build_edge_map(faces: np.ndarray) -> Dict[Tuple[int, int], List[int]]:
    """Unordered edge -> indices of the faces using it."""
    edge_to_faces: Dict[Tuple[int, int], List[int]] = defaultdict(list)
    for fi, face in enumerate(faces):
        for i in range(3):
            v1, v2 = int(face[i]), int(face[(i + 1) % 3])
            edge_to_faces[(min(v1, v2), max(v1, v2))].append(fi)
    return edge_to_faces


def _face_planes(points: np.ndarray, faces: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Origins, unit normals and areas of the faces (zero normal if degenerate)."""
    v0 = points[faces[:, 0]]
    cross = np.cross(points[faces[:, 1]] - v0, points[faces[:, 2]] - v0)
    lengths = np.linalg.norm(cross, axis=1)
    safe = np.where(lengths > 0.0, lengths, 1.0)
    return v0, cross / safe[:, np.newaxis], 0.5 * lengths


def _points_outside(
    points: np.ndarray,
    origins: np.ndarray,
    normals: np.ndarray,
    tolerance: float,
) -> np.ndarray:
    """Mask of points beyond at least one face plane."""
    outside = np.zeros(len(points), dtype=bool)
    for start in range(0, len(normals), _CONTAINMENT_BLOCK):
        n = normals[start:start + _CONTAINMENT_BLOCK]
        o = origins[start:start + _CONTAINMENT_BLOCK]
        # dist[i, j] = (p_i - o_j) . n_j
        dist = points @ n.T - np.einsum("ij,ij->i", o, n)[np.newaxis, :]
        outside |= np.any(dist > tolerance, axis=1)
    return outside


def validate_hull(
    points: NDArray[np.float64],
    faces: NDArray[np.int32],
    tolerance: float = 1e-9,
    degenerate_area_threshold: float = 1e-14,
) -> ValidationReport:
    """Validate a hull mesh against its input points.

    Args:
        points: (N, 3) input points
        faces: (F, 3) vertex indices into ``points``
        tolerance: Plane distance tolerance for containment / orientation
        degenerate_area_threshold: Faces below this area get a warning

    Returns:
        ValidationReport with all findings
    """
    points = np.asarray(points, dtype=np.float64)
    faces = np.asarray(faces, dtype=np.int64).reshape(-1, 3)
    n_points = len(points)
    n_faces = len(faces)
    issues: List[ValidationIssue] = []

    logger.debug("Validating hull: %d points, %d faces", n_points, n_faces)

    if n_faces == 0:
        issues.append(ValidationIssue(
            code="EMPTY_HULL",
            severity=ValidationSeverity.ERROR,
            message="Hull has no faces",
        ))
        return ValidationReport(
            is_valid=False, is_manifold=False, is_closed=False, is_outward=False,
            contains_all_points=False, n_points=n_points, n_faces=0, n_edges=0,
            n_vertices=0, n_boundary_edges=0, n_non_manifold_edges=0,
            n_points_outside=n_points, euler_characteristic=0, issues=issues,
        )

    bad_index = np.any((faces < 0) | (faces >= n_points), axis=1)
    if bad_index.any():
        bad = np.flatnonzero(bad_index).tolist()
        issues.append(ValidationIssue(
            code="INVALID_INDICES",
            severity=ValidationSeverity.ERROR,
            message=f"{len(bad)} faces reference points outside [0, {n_points})",
            count=len(bad),
            details=bad[:10],
        ))
        logger.error("Hull has %d faces with out-of-range indices", len(bad))
        faces = faces[~bad_index]
        if not len(faces):
            return ValidationReport(
                is_valid=False, is_manifold=False, is_closed=False, is_outward=False,
                contains_all_points=False, n_points=n_points, n_faces=n_faces, n_edges=0,
                n_vertices=0, n_boundary_edges=0, n_non_manifold_edges=0,
                n_points_outside=n_points, euler_characteristic=0, issues=issues,
            )

    repeated = (faces[:, 0] == faces[:, 1]) | (faces[:, 1] == faces[:, 2]) | (faces[:, 0] == faces[:, 2])
    if repeated.any():
        rep = np.flatnonzero(repeated).tolist()
        issues.append(ValidationIssue(
            code="REPEATED_VERTICES",
            severity=ValidationSeverity.ERROR,
            message=f"{len(rep)} faces repeat a vertex",
            count=len(rep),
            details=rep[:10],
        ))

    edge_to_faces = _build_edge_map(faces)
    boundary = [e for e, fl in edge_to_faces.items() if len(fl) == 1]
    non_manifold = [e for e, fl in edge_to_faces.items() if len(fl) > 2]

    if boundary:
        issues.append(ValidationIssue(
            code="BOUNDARY_EDGES",
            severity=ValidationSeverity.ERROR,
            message=f"Hull has {len(boundary)} boundary edges (not closed)",
            count=len(boundary),
        ))
        logger.warning("Hull has %d boundary edges", len(boundary))

    if non_manifold:
        issues.append(ValidationIssue(
            code="NON_MANIFOLD_EDGES",
            severity=ValidationSeverity.ERROR,
            message=f"Hull has {len(non_manifold)} non-manifold edges (>2 faces)",
            count=len(non_manifold),
        ))
        logger.error("Hull has %d non-manifold edges", len(non_manifold))

    origins, normals, areas = _face_planes(points, faces)

    degenerate = np.flatnonzero(areas < degenerate_area_threshold).tolist()
    if degenerate:
        issues.append(ValidationIssue(
            code="DEGENERATE_FACES",
            severity=ValidationSeverity.WARNING,
            message=f"Hull has {len(degenerate)} degenerate faces (zero area)",
            count=len(degenerate),
            details=degenerate[:10],
        ))

    vertex_ids = np.unique(faces)
    interior = points[vertex_ids].mean(axis=0)
    inward = np.flatnonzero(np.einsum("ij,ij->i", interior - origins, normals) > tolerance).tolist()
    if inward:
        issues.append(ValidationIssue(
            code="INWARD_FACES",
            severity=ValidationSeverity.ERROR,
            message=f"{len(inward)} faces have their normal pointing inward",
            count=len(inward),
            details=inward[:10],
        ))

    outside = np.flatnonzero(_points_outside(points, origins, normals, tolerance)).tolist()
    if outside:
        issues.append(ValidationIssue(
            code="POINTS_OUTSIDE",
            severity=ValidationSeverity.ERROR,
            message=f"{len(outside)} input points lie outside the hull",
            count=len(outside),
            details=outside[:10],
        ))
        logger.error("Hull leaves %d points outside", len(outside))

    n_vertices = len(vertex_ids)
    n_edges = len(edge_to_faces)
    euler = n_vertices - n_edges + len(faces)
    if euler != 2:
        issues.append(ValidationIssue(
            code="EULER_MISMATCH",
            severity=ValidationSeverity.ERROR,
            message=f"V - E + F = {euler}, expected 2",
        ))

    is_valid = not any(i.severity == ValidationSeverity.ERROR for i in issues)

    report = ValidationReport(
        is_valid=is_valid,
        is_manifold=not non_manifold,
        is_closed=not boundary,
        is_outward=not inward,
        contains_all_points=not outside,
        n_points=n_points,
        n_faces=n_faces,
        n_edges=n_edges,
        n_vertices=n_vertices,
        n_boundary_edges=len(boundary),
        n_non_manifold_edges=len(non_manifold),
        n_points_outside=len(outside),
        euler_characteristic=euler,
        issues=issues,
    )

    logger.debug("Validation complete: %s", "VALID" if is_valid else "INVALID")
    return report
