# estimator/pricing/zones.py
"""Named site zones that group line items by physical area."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, asdict, replace
from typing import Any, Dict, List, Optional, Tuple

from estimator.pricing.items import EstimateItem


@dataclass(frozen=True)
class EstimateZone:
    id: str
    name: str = ""
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EstimateZone":
        return cls(
            id=str(data.get("id") or uuid.uuid4().hex[:12]),
            name=data.get("name") or "",
            notes=data.get("notes"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def add_zone(zones: List[EstimateZone], zone: EstimateZone) -> List[EstimateZone]:
    return [*zones, zone]


def update_zone(zones: List[EstimateZone], zone_id: str,
                changes: Dict[str, Any]) -> List[EstimateZone]:
    changes = {k: v for k, v in changes.items() if k in ("name", "notes")}
    return [replace(z, **changes) if z.id == zone_id else z for z in zones]


def remove_zone(zones: List[EstimateZone], items: List[EstimateItem],
                zone_id: str) -> Tuple[List[EstimateZone], List[EstimateItem]]:
    """Drop a zone; its items stay on the estimate, moved to the unzoned bucket."""
    kept = [z for z in zones if z.id != zone_id]
    orphaned = [replace(i, zone_id=None) if i.zone_id == zone_id else i for i in items]
    return kept, orphaned


def group_by_zone(zones: List[EstimateZone],
                  items: List[EstimateItem]) -> Dict[Optional[str], List[EstimateItem]]:
    """Items keyed by zone id; ``None`` holds unzoned items and dangling references."""
    known = {z.id for z in zones}
    groups: Dict[Optional[str], List[EstimateItem]] = {z.id: [] for z in zones}
    groups[None] = []
    for item in items:
        groups[item.zone_id if item.zone_id in known else None].append(item)
    return groups
