from __future__ import annotations

from domain.models import ImageField, PaymentPlanField, TextField
from domain.services.convert_legacy import LayoutToLegacyConverter, LegacyToLayoutConverter
from tests.helpers.layout_fixtures import load_layout_payload


def _by_content(fields: list[TextField]) -> dict[str, TextField]:
    return {field.content: field for field in fields}


def test_export_omits_defaults() -> None:
    field = TextField(id="t", content="{unitId}", x=10.4, y=20.6, size=12)

    document = LayoutToLegacyConverter().convert([field], [], [])

    assert document.texts == [{"content": "{unitId}", "y": 21, "size": 12, "page": 0, "x": 10}]


def test_export_text_with_page_reference_and_styles() -> None:
    field = TextField(
        content="{price}",
        page=3,
        page_reference="{length - 1}",
        x=300,
        y=120,
        size=16.5,
        color="#666666",
        is_horizontally_centered=True,
        is_full_number=True,
        requires="{price}",
    )

    (payload,) = LayoutToLegacyConverter().convert([field], [], []).texts

    assert payload == {
        "content": "{price}",
        "y": 120,
        "size": 16.5,
        "pageReference": "{length - 1}",
        "isHorizontallyCentered": True,
        "isFullNumber": True,
        "requires": "{price}",
        "color": {"red": 0.4, "green": 0.4, "blue": 0.4},
    }


def test_export_images_and_plans() -> None:
    images = [
        ImageField(var="{offerGallery}", insert_after_page=2, insert_new_pages=True),
        ImageField(var="{unitLocationImage}", page_reference="{length - 2}", sizing="matchHeight"),
    ]
    plans = [PaymentPlanField(), PaymentPlanField(selected_only=True, payment_plan_id="p-1")]

    document = LayoutToLegacyConverter().convert([], images, plans).to_dict()

    assert document["images"] == [
        {
            "content": "{offerGallery}",
            "x": 0,
            "y": 0,
            "page": 2,
            "isFullWidth": True,
            "insertNewpages": True,
            "rotation": None,
        },
        {"content": "{unitLocationImage}", "x": 0, "y": 0, "pageReference": "{length - 2}",
         "rotation": None},
    ]
    assert document["paymentPlansPages"] == [
        {"pageReference": "{length}"},
        {"pageReference": "{length}", "selectedPaymentPlan": True, "paymentPlanId": "p-1"},
    ]


def test_import_fixture_texts() -> None:
    layout = LegacyToLayoutConverter().convert(load_layout_payload("legacy_offer.json"))
    texts = _by_content(layout.text_fields)

    assert layout.source_format == "legacy"
    assert texts["{unitId}"].color == "#ffffff"
    assert (texts["{unitId}"].x, texts["{unitId}"].y) == (50, 700)
    assert texts["Offer for {userName}"].is_horizontally_centered
    assert texts["{price}"].page_reference == "{length - 1}"
    assert texts["{price}"].is_full_number
    assert texts["{price}"].requires == "{price}"


def test_import_flattens_chains() -> None:
    layout = LegacyToLayoutConverter().convert(load_layout_payload("legacy_offer.json"))
    texts = _by_content(layout.text_fields)

    assert (texts["BUA"].x, texts["BUA"].y) == (60, 400)
    assert (texts["{bua}"].x, texts["{bua}"].y) == (180, 400)
    assert (texts["{beds}"].x, texts["{beds}"].y) == (60, 380)
    assert {texts[key].group_id for key in ("BUA", "{bua}", "{beds}")} == {"1-details"}
    assert [texts[key].order_in_group for key in ("BUA", "{bua}", "{beds}")] == [1, 2, 3]
    assert all(texts[key].page == 1 for key in ("BUA", "{bua}", "{beds}"))


def test_chain_without_positioned_member_is_dropped() -> None:
    payload = {
        "texts": [{"content": "{a}", "size": 12, "page": 0, "chain": "c", "order": 1}],
        "images": [],
    }

    layout = LegacyToLayoutConverter().convert(payload)

    assert layout.text_fields == []
    assert layout.payment_plans == []


def test_import_fixture_images_and_plans() -> None:
    layout = LegacyToLayoutConverter().convert(load_layout_payload("legacy_offer.json"))
    gallery, floor_plans = layout.image_fields
    (plan,) = layout.payment_plans

    assert (gallery.type, gallery.insert_after_page, gallery.sizing) == ("gallery", 1, "matchWidth")
    assert gallery.insert_new_pages
    assert floor_plans.type == "floorPlan"
    assert floor_plans.page_reference == "{length - 2}"
    assert floor_plans.sizing == "matchHeight"
    assert plan.page_reference == "{length}"
    assert plan.selected_only
    assert plan.payment_plan_id == "plan-10"


def test_reexport_preserves_fixture_text_entries() -> None:
    payload = load_layout_payload("legacy_offer.json")
    layout = LegacyToLayoutConverter().convert(payload)

    exported = LayoutToLegacyConverter().convert(
        layout.text_fields, layout.image_fields, layout.payment_plans
    )

    assert exported.texts[0] == payload["texts"][0]
    assert exported.payment_plans_pages == payload["paymentPlansPages"]
