"""
Duplicate Merge Planner

Once a user has reviewed a duplicate group and picked the item to keep,
works out what the kept item should look like and which items go away.
Nothing is written here; the storage layer applies the plan.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from .records import InventoryItemRecord

# Fields copied from a duplicate only when the primary has no value
FILL_IF_MISSING = ["description", "brand", "size", "condition"]

LINK_TYPE_DUPLICATE = "duplicate"


@dataclass
class MergePlan:
    """Field updates for the primary item plus the items to soft-delete."""
    primary_id: str
    duplicate_ids: List[str]
    merged_data: Dict = field(default_factory=dict)
    notes: str = ""

    @property
    def ids_to_delete(self) -> List[str]:
        return list(self.duplicate_ids)


class DuplicateMerger:
    """
    Plans merges and links for a user-chosen primary item.

    Strategy:
    1. merge_and_delete: fold duplicates' data into the primary, then delete them
    2. link: keep every item and record the duplicate relationship
    """

    def plan_merge(
        self,
        primary: InventoryItemRecord,
        duplicates: List[InventoryItemRecord],
    ) -> MergePlan:
        """Work out merged field values for the primary item."""
        self._check_request(primary, duplicates)

        merged_data: Dict = {}

        photos = self._merge_photos(primary, duplicates)
        if photos:
            merged_data["photos"] = photos

        for attr in FILL_IF_MISSING:
            if getattr(primary, attr):
                continue
            donor = next((d for d in duplicates if getattr(d, attr)), None)
            if donor:
                merged_data[attr] = getattr(donor, attr)

        merged_data["quantity"] = sum(
            (d.quantity or 1 for d in duplicates),
            primary.quantity or 1,
        )

        return MergePlan(
            primary_id=primary.id,
            duplicate_ids=[d.id for d in duplicates],
            merged_data=merged_data,
            notes=f"Merge {len(duplicates)} duplicate(s) into '{primary.name}'",
        )

    def plan_links(
        self,
        primary: InventoryItemRecord,
        duplicates: List[InventoryItemRecord],
    ) -> List[Dict[str, str]]:
        """Link rows recording each duplicate against the primary."""
        self._check_request(primary, duplicates)
        return [
            {
                "primary_item_id": primary.id,
                "linked_item_id": dup.id,
                "link_type": LINK_TYPE_DUPLICATE,
            }
            for dup in duplicates
        ]

    def _check_request(
        self,
        primary: InventoryItemRecord,
        duplicates: List[InventoryItemRecord],
    ):
        if not duplicates:
            raise ValueError("At least one duplicate item is required")
        if any(d.id == primary.id for d in duplicates):
            raise ValueError(f"Primary item {primary.id} cannot also be a duplicate")

    def _merge_photos(
        self,
        primary: InventoryItemRecord,
        duplicates: List[InventoryItemRecord],
    ) -> List[str]:
        """Primary's photos first, then any new ones from duplicates, in order."""
        photos = list(primary.photos)
        for dup in duplicates:
            for photo in dup.photos:
                if photo not in photos:
                    photos.append(photo)
        return photos
