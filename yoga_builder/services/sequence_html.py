"""Printable HTML rendering of a sequence (download / print view)."""
from __future__ import annotations

import re
from html import escape

from yoga_builder.schemas.sequence import GroupBlock, PoseInstance, Section, SequenceItem
from yoga_builder.services.durations import format_duration
from yoga_builder.services.timeline import (
    PoseCatalog,
    calculate_group_block_duration,
    calculate_section_duration,
    calculate_sequence_duration,
    display_name,
)


INDENT_PX = 12

STYLE = """
    @media print {
      body { margin: 0; padding: 20px; }
    }
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
      max-width: 800px;
      margin: 0 auto;
      padding: 20px;
      line-height: 1.6;
      color: #333;
    }
    h1 { border-bottom: 2px solid #333; padding-bottom: 10px; display: flex; justify-content: space-between; }
    .row { display: flex; justify-content: space-between; padding: 4px 0; }
    .sub { color: #ea580c; font-size: 12px; }
    .section-header { display: flex; justify-content: space-between; align-items: baseline; }
    .section-divider { border-top: 1px solid #ddd; margin: 20px 0; }
"""


def export_filename(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower() + ".html"


class _Renderer:
    def __init__(self, catalog: PoseCatalog) -> None:
        self.catalog = catalog

    def name_of(self, pose: PoseInstance) -> str:
        return escape(display_name(self.catalog.get(pose.pose_variation_id)))

    def pose(self, pose: PoseInstance, indent: int) -> str:
        return (
            f'<div class="row" style="padding-left: {indent * INDENT_PX}px;">'
            f"<div>{self.name_of(pose)}</div>"
            f'<div style="font-size: 12px; color: #666;">{escape(pose.duration)}</div></div>'
        )

    def item(self, item: SequenceItem, indent: int) -> str:
        if isinstance(item, PoseInstance):
            return self.pose(item, indent)
        return self.group(item, indent)

    def group(self, group: GroupBlock, indent: int) -> str:
        duration = format_duration(calculate_group_block_duration(group))
        parts = [
            '<div style="margin: 8px 0;">',
            f'<div class="row" style="padding-left: {indent * INDENT_PX}px;">'
            f"<div><strong>Group:</strong> {group.sets} sets</div><div><strong>{duration}</strong></div></div>",
            f'<div style="padding-left: {(indent + 1) * INDENT_PX}px;">',
        ]
        for idx, base in enumerate(group.items):
            parts.append(self.item(base, indent + 1))
            for sub in group.item_substitutes:
                if sub.item_index != idx:
                    continue
                if isinstance(sub.substitute_item, PoseInstance):
                    label = self.name_of(sub.substitute_item)
                    length = escape(sub.substitute_item.duration)
                else:
                    label = "Group Block"
                    length = format_duration(calculate_group_block_duration(sub.substitute_item))
                parts.append(
                    f'<div class="row sub" style="padding-left: {(indent + 2) * INDENT_PX}px;">'
                    f"<span>Round {sub.round}: {label}</span><span>{length}</span></div>"
                )
        parts.append("</div>")

        for override in group.round_overrides:
            sets = f" ({override.sets} sets)" if override.sets > 1 else ""
            parts.append(
                f'<div style="padding-left: {(indent + 1) * INDENT_PX}px; margin-top: 8px;">'
                f'<div style="font-size: 12px; color: #666;">Round {override.round} Ending{sets}:</div>'
            )
            parts.extend(self.item(i, indent + 2) for i in override.items)
            parts.append("</div>")

        parts.append("</div>")
        return "".join(parts)

    def section(self, section: Section, first: bool) -> str:
        parts = [] if first else ['<div class="section-divider"></div>']
        parts.append(
            f'<div class="section-header"><h2>{escape(section.name)}</h2>'
            f"<strong>{format_duration(calculate_section_duration(section))}</strong></div>"
        )
        if not section.items:
            parts.append('<p style="font-style: italic; color: #666; padding-left: 12px;">Empty section</p>')
        else:
            parts.append('<div style="padding-left: 12px;">')
            parts.extend(self.item(i, 0) for i in section.items)
            parts.append("</div>")
        return "".join(parts)


def render_sequence_html(name: str, sections: list[Section], catalog: PoseCatalog) -> str:
    renderer = _Renderer(catalog)
    total = format_duration(calculate_sequence_duration(sections))
    body = "".join(renderer.section(s, i == 0) for i, s in enumerate(sections))
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n"
        f'<meta charset="UTF-8">\n<title>{escape(name)}</title>\n<style>{STYLE}</style>\n'
        "</head>\n<body>\n"
        f'<h1><span>{escape(name)}</span><span style="font-size: 18px; font-weight: normal;">{total}</span></h1>\n'
        f"{body}\n</body>\n</html>"
    )
