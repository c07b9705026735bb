"""Tests for the settings endpoints."""


class TestSettingsApi:
    async def test_defaults(self, client) -> None:
        data = await (await client.get("/api/settings")).json()
        assert data == {"settings": {"hideHiddenFiles": True}}

    async def test_update(self, client) -> None:
        response = await client.post(
            "/api/settings", json={"hideHiddenFiles": False, "theme": "dark"}
        )
        assert response.status == 200
        assert (await response.json())["settings"] == {
            "hideHiddenFiles": False,
            "theme": "dark",
        }
        data = await (await client.get("/api/settings")).json()
        assert data["settings"]["theme"] == "dark"

    async def test_setting_applies_to_listing(self, client, seed) -> None:
        seed(".hidden/a.mp4")
        await client.post("/api/settings", json={"hideHiddenFiles": False})
        data = await (await client.get("/api/videos")).json()
        assert data["pagination"]["totalCount"] == 1

    async def test_wrong_type(self, client) -> None:
        response = await client.post("/api/settings", json={"hideHiddenFiles": "no"})
        assert response.status == 400
        assert (await response.json())["code"] == "VALIDATION_FAILED"

    async def test_body_must_be_object(self, client) -> None:
        response = await client.post("/api/settings", json=[1, 2])
        assert response.status == 400
        assert (await response.json())["code"] == "INVALID_REQUEST"
