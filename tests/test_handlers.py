"""Tests for the travel planning tool handlers."""

import pytest

from travel_planner.engine.handlers import (
    HandlerContext,
    format_list,
    format_number,
    handle_create_itinerary,
    handle_get_accommodations,
    handle_get_transport_options,
    handle_optimize_itinerary,
    handle_search_attractions,
)

CTX = HandlerContext(session_id="abc", request_id=1)


def _text(result) -> str:
    assert not result.is_error
    assert len(result.content) == 1
    return result.content[0].text


def test_format_number():
    assert format_number(1500.0) == "1500"
    assert format_number(99.5) == "99.5"
    assert format_number(None) == "Not specified"
    assert format_number(0) == "Not specified"


def test_format_list():
    assert format_list(["food", "museums"], "None") == "food, museums"
    assert format_list([], "None") == "None"
    assert format_list(None, "All") == "All"


@pytest.mark.anyio
async def test_create_itinerary_without_optionals():
    result = await handle_create_itinerary(
        {
            "origin": "Paris",
            "destination": "Rome",
            "startDate": "2025-06-01",
            "endDate": "2025-06-10",
            "budget": None,
            "preferences": None,
        },
        CTX,
    )
    assert _text(result) == (
        "Created itinerary from Paris to Rome\n"
        "Dates: 2025-06-01 to 2025-06-10\n"
        "Budget: Not specified\n"
        "Preferences: None"
    )


@pytest.mark.anyio
async def test_create_itinerary_with_budget_and_preferences():
    result = await handle_create_itinerary(
        {
            "origin": "Oslo",
            "destination": "Bergen",
            "startDate": "2025-07-01",
            "endDate": "2025-07-03",
            "budget": 1500.0,
            "preferences": ["hiking", "fjords"],
        },
        CTX,
    )
    text = _text(result)
    assert "Budget: 1500\n" in text
    assert text.endswith("Preferences: hiking, fjords")


@pytest.mark.anyio
async def test_optimize_itinerary():
    result = await handle_optimize_itinerary(
        {"itineraryId": "it-42", "optimizationCriteria": ["time", "cost"]}, CTX
    )
    assert _text(result) == "Optimized itinerary it-42 based on: time, cost"


@pytest.mark.anyio
async def test_search_attractions_defaults():
    result = await handle_search_attractions(
        {"location": "Kyoto", "radius": 5000, "categories": None}, CTX
    )
    assert _text(result) == "Found attractions near Kyoto\nRadius: 5000 meters\nCategories: All"


@pytest.mark.anyio
async def test_search_attractions_custom():
    result = await handle_search_attractions(
        {"location": "Kyoto", "radius": 1200, "categories": ["temples"]}, CTX
    )
    text = _text(result)
    assert "Radius: 1200 meters" in text
    assert "Categories: temples" in text


@pytest.mark.anyio
async def test_transport_options():
    result = await handle_get_transport_options(
        {"origin": "Berlin", "destination": "Prague", "date": "2025-09-12"}, CTX
    )
    assert _text(result) == "Transport options from Berlin to Prague\nDate: 2025-09-12"


@pytest.mark.anyio
async def test_accommodations():
    result = await handle_get_accommodations(
        {"location": "Lisbon", "checkIn": "2025-05-01", "checkOut": "2025-05-04", "budget": 120},
        CTX,
    )
    assert _text(result) == (
        "Accommodation options in Lisbon\n"
        "Dates: 2025-05-01 to 2025-05-04\n"
        "Budget: 120 per night"
    )
