"""HTTP-level tests for admin analytics and staff authentication."""
import pytest

from services.security import STAFF, get_password_hash


def _body(service_id, at):
    return {
        "client_name": "Jane Doe",
        "client_email": "jane@example.com",
        "client_phone": "555-123-4567",
        "service": service_id,
        "appointment_date": "2026-10-20",
        "appointment_time": at,
    }


@pytest.mark.integration
@pytest.mark.asyncio
async def test_dashboard_and_health(client, service_id):
    created = await client.post("/api/v1/bookings", json=_body(service_id, "10:00"))
    booking_id = created.json()["booking"]["id"]
    await client.patch(f"/api/v1/bookings/{booking_id}/status", json={"status": "confirmed"})

    dashboard = (await client.get("/api/v1/admin/dashboard")).json()
    assert dashboard["booking_stats"]["confirmed"] == 1
    assert dashboard["top_services"][0]["service_name"] == "Haircut"

    health = (await client.get("/api/v1/admin/system/health")).json()
    assert health["status"] == "healthy"
    assert health["metrics"]["active_bookings"] == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_revenue_period_is_validated(client):
    assert (await client.get("/api/v1/admin/revenue/analytics", params={"period": "week"})).status_code == 200
    assert (await client.get("/api/v1/admin/revenue/analytics", params={"period": "decade"})).status_code == 422


@pytest.mark.integration
@pytest.mark.asyncio
async def test_export_json_and_csv(client, service_id):
    await client.post("/api/v1/bookings", json=_body(service_id, "10:00"))
    await client.post("/api/v1/bookings", json=_body(service_id, "11:00"))

    exported = (await client.get("/api/v1/admin/export/bookings")).json()
    assert exported["total_bookings"] == 2
    assert exported["export_date"].startswith("2026-10-19")

    csv_response = await client.get("/api/v1/admin/export/bookings", params={"format": "csv"})
    assert csv_response.status_code == 200
    assert csv_response.headers["content-type"].startswith("text/csv")
    assert "bookings-2026-10-19.csv" in csv_response.headers["content-disposition"]
    assert len(csv_response.text.strip().splitlines()) == 3


@pytest.mark.integration
@pytest.mark.asyncio
async def test_login_and_admin_access(anonymous_client, db):
    await db[STAFF].insert_one(
        {
            "name": "Salon Admin",
            "email": "admin@luxesalon.com",
            "role": "admin",
            "hashed_password": get_password_hash("s3cret-pass"),
            "is_active": True,
        }
    )

    rejected = await anonymous_client.post(
        "/api/v1/auth/login", data={"username": "admin@luxesalon.com", "password": "wrong"}
    )
    assert rejected.status_code == 401

    login = await anonymous_client.post(
        "/api/v1/auth/login", data={"username": "ADMIN@luxesalon.com", "password": "s3cret-pass"}
    )
    assert login.status_code == 200
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    me = await anonymous_client.get("/api/v1/users/me", headers=headers)
    assert me.json()["role"] == "admin"

    dashboard = await anonymous_client.get("/api/v1/admin/dashboard", headers=headers)
    assert dashboard.status_code == 200

    activity = await anonymous_client.get("/api/v1/admin/users/activity", headers=headers)
    assert activity.status_code == 200
    assert activity.json() == [{"date": "2026-10-19", "active_users": 1}]
    assert me.json()["last_login"] == "2026-10-19T12:00:00"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_user_activity_days_is_validated(client):
    assert (await client.get("/api/v1/admin/users/activity", params={"days": 0})).status_code == 422
    assert (await client.get("/api/v1/admin/users/activity", params={"days": 30})).json() == []


@pytest.mark.integration
@pytest.mark.asyncio
async def test_stylist_is_forbidden_from_admin_routes(anonymous_client, db):
    await db[STAFF].insert_one(
        {
            "name": "Sam Stylist",
            "email": "sam@luxesalon.com",
            "role": "stylist",
            "hashed_password": get_password_hash("stylist-pass"),
            "is_active": True,
        }
    )
    login = await anonymous_client.post(
        "/api/v1/auth/login", data={"username": "sam@luxesalon.com", "password": "stylist-pass"}
    )
    headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    response = await anonymous_client.get("/api/v1/admin/dashboard", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"
