"""Tests for notifications and favorites endpoints."""

import uuid

import pytest
from httpx import AsyncClient

from sportnest.models.user import User

pytestmark = pytest.mark.asyncio


async def _book(client: AsyncClient, headers: dict, turf_id: str, slot: str = "06:00-07:00"):
    response = await client.post(
        "/api/v1/bookings",
        json={"turf_id": turf_id, "date": "2030-02-10", "slot": slot, "payment_method": "cash"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestNotifications:
    async def test_booking_notifies_owner(
        self,
        client: AsyncClient,
        auth_headers: dict,
        owner_headers: dict,
        test_user: User,
        test_owner: User,
        test_turf: dict,
    ) -> None:
        await _book(client, auth_headers, test_turf["id"])

        response = await client.get("/api/v1/notifications", headers=owner_headers)
        assert response.status_code == 200
        notifications = response.json()
        assert len(notifications) == 1
        notification = notifications[0]
        assert notification["type"] == "booking"
        assert notification["user_id"] == str(test_user.id)
        assert notification["admin_id"] == str(test_owner.id)
        assert notification["user_name"] == test_user.name
        assert notification["turf_name"] == test_turf["name"]
        assert notification["message"] == f"New booking for {test_turf['name']} on 10/02/2030 at 06:00-07:00"
        assert notification["is_read"] is False

    async def test_actor_sees_own_notifications(
        self, client: AsyncClient, auth_headers: dict, test_turf: dict, create_account
    ) -> None:
        await _book(client, auth_headers, test_turf["id"])
        _, stranger_headers = await create_account()

        assert len((await client.get("/api/v1/notifications", headers=auth_headers)).json()) == 1
        assert (await client.get("/api/v1/notifications", headers=stranger_headers)).json() == []

    async def test_mark_read(self, client: AsyncClient, auth_headers: dict, owner_headers: dict, test_turf: dict) -> None:
        await _book(client, auth_headers, test_turf["id"])
        notification_id = (await client.get("/api/v1/notifications", headers=owner_headers)).json()[0]["id"]

        response = await client.put(f"/api/v1/notifications/{notification_id}/read", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["is_read"] is True

        listed = (await client.get("/api/v1/notifications", headers=owner_headers)).json()
        assert listed[0]["is_read"] is True

    async def test_mark_read_foreign_notification(
        self, client: AsyncClient, auth_headers: dict, owner_headers: dict, test_turf: dict, create_account
    ) -> None:
        await _book(client, auth_headers, test_turf["id"])
        notification_id = (await client.get("/api/v1/notifications", headers=owner_headers)).json()[0]["id"]

        _, stranger_headers = await create_account()
        response = await client.put(f"/api/v1/notifications/{notification_id}/read", headers=stranger_headers)
        assert response.status_code == 404


class TestFavorites:
    async def test_add_list_remove(self, client: AsyncClient, auth_headers: dict, test_turf: dict) -> None:
        response = await client.post(f"/api/v1/favorites/{test_turf['id']}", headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["turf"]["name"] == test_turf["name"]

        listed = (await client.get("/api/v1/favorites", headers=auth_headers)).json()
        assert [f["turf_id"] for f in listed] == [test_turf["id"]]

        response = await client.delete(f"/api/v1/favorites/{test_turf['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert (await client.get("/api/v1/favorites", headers=auth_headers)).json() == []

    async def test_add_twice_is_idempotent(self, client: AsyncClient, auth_headers: dict, test_turf: dict) -> None:
        first = await client.post(f"/api/v1/favorites/{test_turf['id']}", headers=auth_headers)
        second = await client.post(f"/api/v1/favorites/{test_turf['id']}", headers=auth_headers)
        assert first.json()["id"] == second.json()["id"]
        assert len((await client.get("/api/v1/favorites", headers=auth_headers)).json()) == 1

    async def test_add_unknown_turf(self, client: AsyncClient, auth_headers: dict) -> None:
        response = await client.post(f"/api/v1/favorites/{uuid.uuid4()}", headers=auth_headers)
        assert response.status_code == 404

    async def test_remove_missing_favorite(self, client: AsyncClient, auth_headers: dict, test_turf: dict) -> None:
        response = await client.delete(f"/api/v1/favorites/{test_turf['id']}", headers=auth_headers)
        assert response.status_code == 404
