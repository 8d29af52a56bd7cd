"""Integration tests for the tour endpoints."""

import uuid
from decimal import Decimal
from typing import Any

import httpx
import pytest
import pytest_asyncio

from tourdesk.app.models.common import Tier
from tourdesk.app.models.rates import AccommodationRate, EntranceFee, MealRate

pytestmark = pytest.mark.integration


async def create_rate(client: httpx.AsyncClient, category: str, rate: Any) -> str:
    response = await client.post(f"/rates/{category}", json=rate.model_dump(mode="json"))
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def tour_payload(hotel_id: str, lunch_id: str, entrance_id: str) -> dict[str, Any]:
    return {
        "tour_name": "Cairo Classic",
        "duration_days": 2,
        "cities": ["Cairo"],
        "tour_type": "classic",
        "days": [
            {
                "day_number": 1,
                "city": "Cairo",
                "accommodation_id": hotel_id,
                "lunch_meal_id": lunch_id,
                "activities": [{"activity_order": 1, "entrance_id": entrance_id}],
            },
            {"day_number": 2, "city": "Cairo", "accommodation_id": hotel_id},
        ],
    }


@pytest_asyncio.fixture
async def catalogue(
    client: httpx.AsyncClient, hotel: AccommodationRate, lunch: MealRate, entrance: EntranceFee
) -> tuple[str, str, str]:
    return (
        await create_rate(client, "accommodation", hotel),
        await create_rate(client, "meal", lunch),
        await create_rate(client, "entrance", entrance),
    )


@pytest.mark.asyncio
async def test_calculate_inline_tour(client: httpx.AsyncClient, hotel, lunch) -> None:
    body = {
        "tour": {
            "tour_name": "Inline",
            "days": [
                {
                    "day_number": 1,
                    "accommodation": hotel.model_dump(mode="json"),
                    "lunch_meal": lunch.model_dump(mode="json"),
                }
            ],
        },
        "pax": 2,
        "is_euro_passport": True,
        "margin_percent": "20",
    }

    response = await client.post("/tours/calculate", json=body)

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    totals = payload["data"]["pricing"]["totals"]
    assert Decimal(totals["grand_total"]) == Decimal("130")  # 1 room x 100 + 2 x 15
    assert Decimal(totals["per_person_total"]) == Decimal("65")
    quote = payload["data"]["quote"]
    assert Decimal(quote["selling_price"]) == Decimal("156")
    assert Decimal(quote["margin_percent"]) == Decimal("20")


@pytest.mark.asyncio
async def test_calculate_uses_default_margin(client: httpx.AsyncClient, hotel) -> None:
    body = {
        "tour": {"days": [{"day_number": 1, "accommodation": hotel.model_dump(mode="json")}]},
        "pax": 1,
    }

    response = await client.post("/tours/calculate", json=body)

    quote = response.json()["data"]["quote"]
    assert Decimal(quote["margin_percent"]) == Decimal("25")
    assert Decimal(quote["selling_price"]) == Decimal("125")


@pytest.mark.asyncio
async def test_calculate_empty_tour_is_zero(client: httpx.AsyncClient) -> None:
    response = await client.post("/tours/calculate", json={"tour": {}, "pax": 3})

    assert response.status_code == 200
    assert Decimal(response.json()["data"]["pricing"]["totals"]["grand_total"]) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("pax", [0, -1, 101])
async def test_calculate_rejects_bad_pax(client: httpx.AsyncClient, pax: int) -> None:
    response = await client.post("/tours/calculate", json={"tour": {}, "pax": pax})

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_calculate_missing_body_field_is_400(client: httpx.AsyncClient) -> None:
    response = await client.post("/tours/calculate", json={"tour": {}})

    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "Validation failed"
    assert {"field": "pax", "message": "Field required"} in payload["details"]


@pytest.mark.asyncio
async def test_calculate_by_reference(
    client: httpx.AsyncClient, catalogue: tuple[str, str, str]
) -> None:
    body = {"tour": tour_payload(*catalogue), "pax": 3, "is_euro_passport": False}

    response = await client.post("/tours/calculate", json=body)

    assert response.status_code == 200
    pricing = response.json()["data"]["pricing"]
    # Day 1: 2 rooms x 120 + 3 x 18 + 3 x 25; day 2: 2 rooms x 120
    assert [Decimal(d["daily_total"]) for d in pricing["daily_breakdown"]] == [
        Decimal("369"),
        Decimal("240"),
    ]
    assert Decimal(pricing["totals"]["grand_total"]) == Decimal("609")


@pytest.mark.asyncio
async def test_validate_endpoint(client: httpx.AsyncClient) -> None:
    response = await client.post("/tours/validate", json={"tour_name": ""})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["valid"] is False
    assert "Tour name is required" in data["errors"]


@pytest.mark.asyncio
async def test_save_and_fetch_round_trip(
    client: httpx.AsyncClient, catalogue: tuple[str, str, str]
) -> None:
    hotel_id, lunch_id, entrance_id = catalogue

    saved = await client.post(
        "/tours/save", json={"tour": tour_payload(*catalogue), "pax": 2}
    )

    assert saved.status_code == 201, saved.text
    data = saved.json()["data"]
    tour_id = data["tour_id"]
    assert data["tour_code"].startswith("TOUR-CAIROC-2D-")
    assert data["pricing"] is not None

    fetched = await client.get(f"/tours/{tour_id}")
    assert fetched.status_code == 200
    detail = fetched.json()["data"]
    tour = detail["tour"]
    assert tour["tour_name"] == "Cairo Classic"
    assert len(tour["days"]) == 2
    assert [d["day_number"] for d in tour["days"]] == [1, 2]
    assert tour["days"][0]["accommodation_id"] == hotel_id
    assert tour["days"][0]["lunch_meal_id"] == lunch_id
    assert tour["days"][0]["activities"][0]["entrance_id"] == entrance_id
    assert tour["days"][1]["accommodation_id"] == hotel_id
    assert Decimal(detail["latest_pricing"]["grand_total"]) == Decimal(
        data["pricing"]["pricing"]["totals"]["grand_total"]
    )

    listed = await client.get("/tours")
    assert [t["id"] for t in listed.json()["data"]] == [tour_id]


@pytest.mark.asyncio
async def test_calculate_saved_tour(
    client: httpx.AsyncClient, catalogue: tuple[str, str, str]
) -> None:
    saved = await client.post("/tours/save", json={"tour": tour_payload(*catalogue)})
    tour_id = saved.json()["data"]["tour_id"]

    response = await client.post(f"/tours/{tour_id}/calculate", json={"pax": 2})

    assert response.status_code == 200
    # Day 1: 100 + 2 x 15 + 2 x 20; day 2: 100
    assert Decimal(response.json()["data"]["pricing"]["totals"]["grand_total"]) == Decimal("270")


@pytest.mark.asyncio
async def test_save_duplicate_code_is_conflict_and_leaves_no_rows(
    client: httpx.AsyncClient,
) -> None:
    tour = {"tour_code": "TOUR-DUP", "tour_name": "Dup", "days": [{"day_number": 1}]}

    first = await client.post("/tours/save", json={"tour": tour})
    second = await client.post("/tours/save", json={"tour": tour})

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["success"] is False
    listed = await client.get("/tours")
    assert len(listed.json()["data"]) == 1


@pytest.mark.asyncio
async def test_resave_replaces_days(client: httpx.AsyncClient) -> None:
    tour_id = str(uuid.uuid4())
    tour = {
        "id": tour_id,
        "tour_code": "TOUR-EDIT",
        "tour_name": "Edit",
        "days": [{"day_number": 1}, {"day_number": 2}],
    }
    await client.post("/tours/save", json={"tour": tour})

    tour["days"] = [{"day_number": 1, "notes": "only day"}]
    resaved = await client.post("/tours/save", json={"tour": tour})

    assert resaved.status_code == 201
    fetched = await client.get(f"/tours/{tour_id}")
    days = fetched.json()["data"]["tour"]["days"]
    assert len(days) == 1
    assert days[0]["notes"] == "only day"


@pytest.mark.asyncio
async def test_delete_tour(client: httpx.AsyncClient) -> None:
    saved = await client.post("/tours/save", json={"tour": {"tour_name": "Gone"}})
    tour_id = saved.json()["data"]["tour_id"]

    deleted = await client.delete(f"/tours/{tour_id}")
    missing = await client.get(f"/tours/{tour_id}")
    deleted_again = await client.delete(f"/tours/{tour_id}")

    assert deleted.status_code == 200
    assert missing.status_code == 404
    assert missing.json() == {"success": False, "error": f"Tour {tour_id} not found"}
    assert deleted_again.status_code == 404


@pytest.mark.asyncio
async def test_tours_are_org_scoped(client: httpx.AsyncClient) -> None:
    saved = await client.post("/tours/save", json={"tour": {"tour_name": "Private"}})
    tour_id = saved.json()["data"]["tour_id"]
    other = {"Authorization": f"Bearer {uuid.uuid4()}:{uuid.uuid4()}"}

    response = await client.get(f"/tours/{tour_id}", headers=other)
    listed = await client.get("/tours", headers=other)

    assert response.status_code == 404
    assert listed.json()["data"] == []


@pytest.mark.asyncio
async def test_malformed_auth_is_401(client: httpx.AsyncClient) -> None:
    response = await client.get("/tours", headers={"Authorization": "Basic abc"})

    assert response.status_code == 401
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_travel_date_keeps_untiered_reference(
    client: httpx.AsyncClient, hotel: AccommodationRate
) -> None:
    untiered_id = await create_rate(client, "accommodation", hotel)
    await create_rate(
        client,
        "accommodation",
        hotel.model_copy(
            update={"id": uuid.uuid4(), "tier": Tier.standard, "base_rate_eur": Decimal("200")}
        ),
    )
    body = {
        "tour": {"days": [{"day_number": 1, "accommodation_id": untiered_id}]},
        "pax": 2,
        "travel_date": "2026-05-01",
    }

    response = await client.post("/tours/calculate", json=body)

    assert response.status_code == 200, response.text
    assert Decimal(response.json()["data"]["pricing"]["totals"]["grand_total"]) == Decimal("100")


@pytest.mark.asyncio
async def test_save_rejects_inline_rates_missing_from_catalogue(
    client: httpx.AsyncClient, hotel: AccommodationRate, lunch: MealRate
) -> None:
    unsaved_hotel = hotel.model_copy(update={"id": None})
    tour = {
        "tour_code": "TOUR-INLINE",
        "days": [
            {
                "day_number": 1,
                "accommodation": unsaved_hotel.model_dump(mode="json"),
                "lunch_meal": lunch.model_dump(mode="json"),
            }
        ],
    }

    response = await client.post("/tours/save", json={"tour": tour, "pax": 2})

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert {detail["field"] for detail in payload["details"]} == {
        "days.0.accommodation",
        "days.0.lunch_meal",
    }
    listed = await client.get("/tours")
    assert listed.json()["data"] == []


@pytest.mark.asyncio
async def test_save_inline_catalogue_rate_round_trip(
    client: httpx.AsyncClient, hotel: AccommodationRate
) -> None:
    hotel_id = await create_rate(client, "accommodation", hotel)
    tour = {"days": [{"day_number": 1, "accommodation": hotel.model_dump(mode="json")}]}

    saved = await client.post("/tours/save", json={"tour": tour, "pax": 2})

    assert saved.status_code == 201, saved.text
    data = saved.json()["data"]
    snapshot_total = Decimal(data["pricing"]["pricing"]["totals"]["grand_total"])
    assert snapshot_total == Decimal("100")

    fetched = await client.get(f"/tours/{data['tour_id']}")
    assert fetched.json()["data"]["tour"]["days"][0]["accommodation_id"] == hotel_id

    repriced = await client.post(f"/tours/{data['tour_id']}/calculate", json={"pax": 2})
    assert Decimal(repriced.json()["data"]["pricing"]["totals"]["grand_total"]) == snapshot_total
