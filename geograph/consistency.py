from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Set

from .model import (
    LINE_LIKE_TYPES,
    Construction,
    CriticalPoint,
    CurveDefinition,
    IntersectionPoint,
    PointOnCurve,
    Polygon,
    TangentLine,
    referenced_curves,
    references,
)

_EXPLICIT_ONLY = (PointOnCurve, TangentLine, CriticalPoint, IntersectionPoint)


@dataclass
class SceneWarning:
    object_id: str
    kind: str
    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return self.message


def _duplicate_ids(constructions: Iterable[Construction]) -> Set[str]:
    seen: Set[str] = set()
    duplicates: Set[str] = set()
    for obj in constructions:
        if obj.id in seen:
            duplicates.add(obj.id)
        seen.add(obj.id)
    return duplicates


def _shape_warning(obj: Construction) -> List[SceneWarning]:
    if isinstance(obj, LINE_LIKE_TYPES) and len(obj.vertex_ids) != 2:
        kind = type(obj).__name__.lower()
        return [
            SceneWarning(obj.id, "malformed", f"{kind} {obj.id} needs 2 vertices, has {len(obj.vertex_ids)}")
        ]
    if isinstance(obj, Polygon) and len(obj.vertex_ids) < 3:
        return [SceneWarning(obj.id, "malformed", f"polygon {obj.id} needs at least 3 vertices")]
    if isinstance(obj, IntersectionPoint) and obj.curve_id_a == obj.curve_id_b:
        return [SceneWarning(obj.id, "self-intersection", f"intersection {obj.id} uses curve {obj.curve_id_a} twice")]
    return []


def check_scene(
    curves: Sequence[CurveDefinition], constructions: Sequence[Construction]
) -> List[SceneWarning]:
    """Report scene problems that will leave objects unresolved."""

    warnings: List[SceneWarning] = []
    object_ids = {obj.id for obj in constructions}
    curve_kinds: Dict[int, str] = {curve.id: curve.kind for curve in curves}

    for dup in sorted(_duplicate_ids(constructions)):
        warnings.append(SceneWarning(dup, "duplicate-id", f"object id {dup} is used more than once"))

    for obj in constructions:
        warnings.extend(_shape_warning(obj))
        for ref in references(obj):
            if ref not in object_ids:
                warnings.append(SceneWarning(obj.id, "dangling", f"{obj.id} references missing object {ref}"))
        for curve_id in referenced_curves(obj):
            kind = curve_kinds.get(curve_id)
            if kind is None:
                warnings.append(SceneWarning(obj.id, "dangling", f"{obj.id} references missing curve {curve_id}"))
            elif isinstance(obj, _EXPLICIT_ONLY) and kind != "explicit":
                warnings.append(
                    SceneWarning(obj.id, "curve-kind", f"{obj.id} needs an explicit curve, curve {curve_id} is {kind}")
                )
    return warnings


__all__ = ["SceneWarning", "check_scene"]
