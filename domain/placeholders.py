from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional

VariableCategory = Literal["unit", "user", "offer", "payment", "image"]

_TOKEN_RE = re.compile(r"\{([^}]+)\}")
_SINGLE_VAR_RE = re.compile(r"^\{(\w+)\}$", re.ASCII)


@dataclass(frozen=True)
class VariableDefinition:
    name: str
    var: str
    category: VariableCategory
    suffix: Optional[str] = None


AVAILABLE_VARIABLES: tuple[VariableDefinition, ...] = (
    VariableDefinition("Unit ID", "{unitId}", "unit"),
    VariableDefinition("Unit Type", "{unitType}", "unit"),
    VariableDefinition("Floor", "{floor}", "unit"),
    VariableDefinition("Bedrooms", "{beds}", "unit"),
    VariableDefinition("BUA", "{bua}", "unit", " sqm"),
    VariableDefinition("Land Area", "{landArea}", "unit", " sqm"),
    VariableDefinition("Garden Area", "{gardenArea}", "unit", " sqm"),
    VariableDefinition("Covered Terrace", "{coveredTerrace}", "unit", " sqm"),
    VariableDefinition("Uncovered Terrace", "{uncoveredTerrace}", "unit", " sqm"),
    VariableDefinition("Finishing", "{finishing}", "unit"),
    VariableDefinition("Price", "{price}", "unit"),
    VariableDefinition("Agent Name", "{userName}", "user"),
    VariableDefinition("Agent Title", "{userTitle}", "user"),
    VariableDefinition("Agent Phone", "{userPhone}", "user"),
    VariableDefinition("Agent Email", "{userEmail}", "user"),
    VariableDefinition("Issuance Date", "{issuanceDate}", "offer"),
    VariableDefinition("Payment Plan Name", "{paymentPlanName}", "offer"),
    VariableDefinition("Cash Total", "{payCashTotal}", "payment"),
    VariableDefinition("Cash Discount", "{payCashDiscount}", "payment"),
    VariableDefinition("Offer Gallery", "{offerGallery}", "image"),
    VariableDefinition("Unit Location", "{unitLocationImage}", "image"),
    VariableDefinition("Floor Plans", "{floorPlansImagesUrl}", "image"),
)

DUMMY_DATA: dict[str, str] = {
    "{unitId}": "A-101",
    "{unitType}": "2 Bedroom Apartment",
    "{floor}": "3",
    "{beds}": "2",
    "{bua}": "125",
    "{landArea}": "200",
    "{gardenArea}": "50",
    "{coveredTerrace}": "15",
    "{uncoveredTerrace}": "25",
    "{finishing}": "Fully Finished",
    "{price}": "3,500,000",
    "{userName}": "John Smith",
    "{userTitle}": "Senior Sales Consultant",
    "{userPhone}": "+20 123 456 7890",
    "{userEmail}": "john.smith@company.com",
    "{issuanceDate}": "December 7, 2025",
    "{paymentPlanName}": "10% Down Payment Plan",
    "{payCashTotal}": "3,150,000",
    "{payCashDiscount}": "350,000",
}


def replace_placeholders(text: str, data: Optional[dict[str, str]] = None) -> str:
    result = text
    for placeholder, value in (data if data is not None else DUMMY_DATA).items():
        result = result.replace(placeholder, value)
    return result


def variables_by_category() -> dict[str, list[VariableDefinition]]:
    grouped: dict[str, list[VariableDefinition]] = {}
    for variable in AVAILABLE_VARIABLES:
        grouped.setdefault(variable.category, []).append(variable)
    return grouped


def unknown_variables(content: str) -> list[str]:
    """``{token}`` occurrences in ``content`` that are not offer-service variables."""
    known = {variable.var for variable in AVAILABLE_VARIABLES}
    tokens = (f"{{{name}}}" for name in _TOKEN_RE.findall(content))
    return [token for token in dict.fromkeys(tokens) if token not in known]


def single_variable(content: str) -> Optional[str]:
    """Identifier when ``content`` is exactly one ``{identifier}`` token."""
    match = _SINGLE_VAR_RE.match(content)
    return match.group(1) if match else None


def strip_braces(value: str) -> str:
    return value.replace("{", "").replace("}", "")


def infer_image_kind(token: str) -> str:
    if "Gallery" in token:
        return "gallery"
    if "floorPlans" in token:
        return "floorPlan"
    return "unitLocation"
