from __future__ import annotations

from domain.models import ImageField, PaymentPlanField, TextField
from domain.services.convert_v2 import LayoutToV2Converter, V2ToLayoutConverter
from tests.helpers.layout_fixtures import load_layout_payload


def test_export_groups_texts_by_page_and_sorts_numeric_first() -> None:
    fields = [
        TextField(id="last", content="{payCashTotal}", page_reference="{length - 1}", y=100),
        TextField(id="p2", content="Total", page=2, y=300, x=40),
        TextField(id="p0", content="{unitId}", page=0, y=500, x=40),
        TextField(id="tail", content="{price}", page_reference="{length - 2}", y=90),
    ]

    document = LayoutToV2Converter().convert(fields, [], [])

    assert [page["page"] for page in document.pages] == [0, 2, "last", "last - 2"]
    assert document.pages[0]["texts"] == [{"id": "p0", "y": 500, "var": "unitId", "x": 40}]
    assert document.pages[1]["texts"][0]["template"] == "Total"


def test_export_text_options() -> None:
    field = TextField(
        id="t",
        content="{price}",
        y=10.5,
        size=14,
        color="#FF0000",
        is_horizontally_centered=True,
        is_full_number=True,
        requires="{price}",
    )

    (page,) = LayoutToV2Converter().convert([field], [], []).pages

    assert page["texts"] == [
        {
            "id": "t",
            "y": 11,
            "var": "price",
            "align": "center",
            "fontSize": 14,
            "color": "#ff0000",
            "showIf": "price",
            "format": "number",
        }
    ]


def test_export_defaults_follow_converter_settings() -> None:
    field = TextField(id="t", content="x", size=16, color="#333333")

    document = LayoutToV2Converter(font_size=16, color="#333333").convert([field], [], [])

    assert document.defaults == {"fontSize": 16, "color": "#333333"}
    assert "fontSize" not in document.pages[0]["texts"][0]
    assert "color" not in document.pages[0]["texts"][0]


def test_export_images_and_first_plan_only() -> None:
    images = [
        ImageField(id="g", var="{offerGallery}", insert_after_page=1, insert_new_pages=True),
        ImageField(
            id="l", var="{unitLocationImage}", page_reference="{length - 1}", sizing="matchHeight"
        ),
    ]
    plans = [
        PaymentPlanField(selected_only=True, payment_plan_id="first"),
        PaymentPlanField(payment_plan_id="second"),
    ]

    payload = LayoutToV2Converter().convert([], images, plans).to_dict()

    assert payload["version"] == 2
    assert payload["pages"] == []
    assert payload["images"] == [
        {"id": "g", "var": "offerGallery", "insertAfter": 1, "sizing": "matchWidth",
         "newPages": True},
        {"id": "l", "var": "unitLocationImage", "insertAfter": "last - 1",
         "sizing": "matchHeight"},
    ]
    assert payload["paymentPlan"] == {
        "page": "last",
        "selectedOnly": True,
        "paymentPlanId": "first",
    }


def test_export_without_plans_omits_payment_plan() -> None:
    assert "paymentPlan" not in LayoutToV2Converter().convert([], [], []).to_dict()


def test_import_fixture_texts() -> None:
    layout = V2ToLayoutConverter().convert(load_layout_payload("v2_offer.json"))
    texts = {field.content: field for field in layout.text_fields}

    assert layout.source_format == "v2"
    ref = texts["{unitId}"]
    assert (ref.id, ref.page, ref.x, ref.y, ref.size, ref.color) == (
        "ref", 0, 50, 700, 14, "#ffffff"
    )
    title = texts["Offer for {userName}"]
    assert title.is_horizontally_centered
    assert title.size == 20
    cash = texts["{payCashTotal}"]
    assert cash.page_reference == "{length - 1}"
    assert cash.is_full_number
    assert cash.requires == "{payCashTotal}"


def test_import_expands_groups() -> None:
    layout = V2ToLayoutConverter().convert(load_layout_payload("v2_offer.json"))
    grouped = sorted(
        (field for field in layout.text_fields if field.group_id == "details"),
        key=lambda field: field.order_in_group,
    )

    assert [(field.content, field.x, field.y) for field in grouped] == [
        ("BUA", 60, 400),
        ("{bua} sqm", 180, 400),
        ("Price", 60, 380),
        ("{price}", 180, 380),
    ]
    assert all(field.page == 1 and field.size == 12 for field in grouped)
    assert grouped[3].is_full_number
    assert not grouped[2].is_full_number
    assert grouped[2].requires == grouped[3].requires == "{price}"


def test_import_fixture_images_and_plan() -> None:
    layout = V2ToLayoutConverter().convert(load_layout_payload("v2_offer.json"))
    gallery, location = layout.image_fields
    (plan,) = layout.payment_plans

    assert (gallery.id, gallery.var, gallery.insert_after_page) == ("gal", "{offerGallery}", 1)
    assert gallery.insert_new_pages
    assert location.type == "unitLocation"
    assert location.page_reference == "{length - 1}"
    assert location.sizing == "matchHeight"
    assert plan.page_reference == "{length}"
    assert plan.selected_only
    assert plan.payment_plan_id == "plan-10"


def test_numeric_plan_page_falls_back_to_end() -> None:
    payload = {"version": 2, "pages": [], "images": [], "paymentPlan": {"page": 3}}

    (plan,) = V2ToLayoutConverter().convert(payload).payment_plans

    assert plan.page_reference == "{length}"
    assert plan.selected_only is False


def test_reexport_of_imported_fixture_keeps_pages() -> None:
    layout = V2ToLayoutConverter().convert(load_layout_payload("v2_offer.json"))

    exported = LayoutToV2Converter().convert(
        layout.text_fields, layout.image_fields, layout.payment_plans
    )

    assert [page["page"] for page in exported.pages] == [0, 1, "last"]
    assert exported.images[1]["insertAfter"] == "last - 1"
    assert exported.payment_plan == {
        "page": "last",
        "selectedOnly": True,
        "paymentPlanId": "plan-10",
    }


def test_import_accepts_short_hex_colors() -> None:
    payload = {
        "version": 2,
        "defaults": {"color": "#0F8"},
        "pages": [
            {
                "page": 0,
                "texts": [
                    {"id": "ref", "var": "unitId", "x": 50, "y": 700, "color": "#FFF"},
                    {"id": "name", "var": "userName", "x": 50, "y": 680},
                ],
            }
        ],
    }

    layout = V2ToLayoutConverter().convert(payload)

    assert [field.color for field in layout.text_fields] == ["#ffffff", "#00ff88"]
