"""Flattening of nested sequence structure into a playable timeline.

A sequence is a list of sections. A section holds pose instances and group
blocks, and a group block repeats its items ``sets`` times (one pass per
round). Two per-round adjustments are applied while expanding a group:

* item substitutes replace the base item at ``item_index`` for one round;
* round overrides ("round endings") play extra items after a given round,
  repeated ``sets`` times.

The flattened timeline is a contiguous list of ``TimelineItem`` intervals in
seconds, starting at 0. Timeline ids are derived from the pose instance id so
a client can map an active interval back onto the tree it renders:
``<id>-round-<r>`` inside a group and ``<id>-override-round-<r>-set-<s>`` for
round endings.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from yoga_builder.schemas.sequence import GroupBlock, PoseInstance, Section, SequenceItem
from yoga_builder.services.durations import parse_duration


@dataclass(frozen=True)
class TimelineItem:
    id: str
    pose_instance: PoseInstance
    section_id: str
    start_time: int
    end_time: int

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


@dataclass(frozen=True)
class PoseNames:
    pose_name: str
    variation_name: Optional[str] = None


# variation id -> names, built from the pose library
PoseCatalog = dict[str, PoseNames]


def spoken_name(names: PoseNames | None) -> str | None:
    """Text announced when a pose starts: pose name plus non-default variation."""
    if names is None:
        return None
    text = names.pose_name
    if names.variation_name and "(Default)" not in names.variation_name:
        text += f" {names.variation_name}"
    return text


def display_name(names: PoseNames | None) -> str:
    if names is None:
        return "Unknown"
    if names.variation_name and "(Default)" not in names.variation_name:
        return f"{names.pose_name} ({names.variation_name})"
    return names.pose_name


def effective_items_for_round(group: GroupBlock, round_: int) -> list[SequenceItem]:
    items = list(group.items)
    for sub in group.item_substitutes:
        if sub.round == round_ and 0 <= sub.item_index < len(items):
            items[sub.item_index] = sub.substitute_item
    return items


def calculate_item_duration(item: SequenceItem) -> int:
    if isinstance(item, PoseInstance):
        return parse_duration(item.duration)
    return calculate_group_block_duration(item)


def calculate_group_block_duration(group: GroupBlock) -> int:
    total = 0
    for round_ in range(1, group.sets + 1):
        total += sum(calculate_item_duration(i) for i in effective_items_for_round(group, round_))
        for override in group.round_overrides:
            if override.round == round_:
                total += override.sets * sum(calculate_item_duration(i) for i in override.items)
    return total


def calculate_section_duration(section: Section) -> int:
    return sum(calculate_item_duration(i) for i in section.items)


def calculate_sequence_duration(sections: Iterable[Section]) -> int:
    return sum(calculate_section_duration(s) for s in sections)


def _flatten_item(
    item: SequenceItem,
    section_id: str,
    suffix: str,
    cursor: int,
    out: list[TimelineItem],
) -> int:
    if isinstance(item, PoseInstance):
        seconds = parse_duration(item.duration)
        if seconds > 0:
            out.append(
                TimelineItem(
                    id=f"{item.id}{suffix}",
                    pose_instance=item,
                    section_id=section_id,
                    start_time=cursor,
                    end_time=cursor + seconds,
                )
            )
        return cursor + seconds

    for round_ in range(1, item.sets + 1):
        for child in effective_items_for_round(item, round_):
            cursor = _flatten_item(child, section_id, f"{suffix}-round-{round_}", cursor, out)
        for override in item.round_overrides:
            if override.round != round_:
                continue
            for set_ in range(1, override.sets + 1):
                for child in override.items:
                    cursor = _flatten_item(
                        child,
                        section_id,
                        f"{suffix}-override-round-{round_}-set-{set_}",
                        cursor,
                        out,
                    )
    return cursor


def flatten_sequence_to_timeline(sections: Iterable[Section]) -> list[TimelineItem]:
    timeline: list[TimelineItem] = []
    cursor = 0
    for section in sections:
        for item in section.items:
            cursor = _flatten_item(item, section.id, "", cursor, timeline)
    return timeline


def timeline_total(timeline: list[TimelineItem]) -> int:
    return timeline[-1].end_time if timeline else 0


def find_active_item(timeline: list[TimelineItem], position: float) -> TimelineItem | None:
    for item in timeline:
        if item.start_time <= position < item.end_time:
            return item
    return None


def find_start_time(timeline: list[TimelineItem], instance_id: str) -> int | None:
    """First start time of a pose instance (any round), used for skip-to."""
    for item in timeline:
        if item.pose_instance.id == instance_id:
            return item.start_time
    return None
