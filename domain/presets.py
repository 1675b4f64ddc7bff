from __future__ import annotations

from domain.models import Preset, TextField


def _field(field_id: str, content: str, x: float, y: float, size: float, color: str) -> TextField:
    return TextField(id=field_id, page=0, content=content, x=x, y=y, size=size, color=color)


def default_presets() -> list[Preset]:
    return [
        Preset(
            id="cover-page",
            name="Cover Page Info",
            fields=[
                _field("p1", "Ref: {unitId}", 50, 700, 14, "#ffffff"),
                _field("p2", "Date: {issuanceDate}", 50, 680, 14, "#ffffff"),
            ],
        ),
        Preset(
            id="unit-details",
            name="Unit Details",
            fields=[
                _field("ud1", "Unit: {unitId}", 50, 600, 12, "#000000"),
                _field("ud2", "Type: {unitType}", 50, 580, 12, "#000000"),
                _field("ud3", "Beds: {beds}", 200, 600, 12, "#000000"),
                _field("ud4", "BUA: {bua} sqm", 200, 580, 12, "#000000"),
            ],
        ),
        Preset(
            id="sales-contact",
            name="Sales Info",
            fields=[
                _field("sc1", "{userName}", 50, 150, 16, "#000000"),
                _field("sc2", "{userTitle}", 50, 130, 12, "#666666"),
                _field("sc3", "{userPhone}", 50, 110, 12, "#666666"),
                _field("sc4", "{userEmail}", 50, 90, 12, "#666666"),
            ],
        ),
    ]
