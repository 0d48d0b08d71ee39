"""
Tests for /api/pos endpoints (simulated POS client).
"""

from fastapi import status

from smart_inventory.services.pos_client import SimulatedPosClient

POS_CONFIG = {"system": "square", "apiKey": "sq-secret", "restaurantId": "bar-42"}


class TestPosConfig:

    def test_default_config_is_disconnected(self, client, staff_headers):
        data = client.get("/api/pos/config", headers=staff_headers).json()["data"]

        assert data["connected"] is False
        assert data["mappedItems"] == 0

    def test_configure_hides_api_key(self, client, manager_headers, staff_headers):
        response = client.post("/api/pos/config", json=POS_CONFIG, headers=manager_headers)

        assert response.status_code == status.HTTP_200_OK
        data = client.get("/api/pos/config", headers=staff_headers).json()["data"]
        assert data["connected"] is True
        assert data["system"] == "square"
        assert data["syncFrequency"] == "realtime"
        assert "apiKey" not in data
        assert "sq-secret" not in response.text

    def test_unsupported_system(self, client, manager_headers):
        response = client.post("/api/pos/config", json={**POS_CONFIG, "system": "abacus"}, headers=manager_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"].startswith("Invalid POS system")

    def test_missing_fields(self, client, manager_headers):
        response = client.post("/api/pos/config", json={"system": "toast"}, headers=manager_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_staff_cannot_configure(self, client, staff_headers):
        response = client.post("/api/pos/config", json=POS_CONFIG, headers=staff_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_disconnect(self, client, manager_headers):
        client.post("/api/pos/config", json=POS_CONFIG, headers=manager_headers)
        response = client.delete("/api/pos/config", headers=manager_headers)

        assert response.json()["data"]["connected"] is False


class TestPosSync:

    def test_sync_requires_connection(self, client, staff_headers):
        response = client.post("/api/pos/sync", headers=staff_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"success": False, "error": "POS not connected"}

    def test_sync_accumulates_updates(self, client, manager_headers, staff_headers):
        client.post("/api/pos/config", json=POS_CONFIG, headers=manager_headers)

        first = client.post("/api/pos/sync", headers=staff_headers).json()["data"]
        second = client.post("/api/pos/sync", headers=staff_headers).json()["data"]

        assert 1 <= first["updatedItems"] <= 5
        assert first["updatedItems"] + 1 <= second["updatedItems"] <= first["updatedItems"] + 5
        assert second["lastSync"]

    def test_menu_items(self, client, manager_headers, staff_headers):
        assert client.get("/api/pos/menu-items", headers=staff_headers).status_code == status.HTTP_400_BAD_REQUEST

        client.post("/api/pos/config", json=POS_CONFIG, headers=manager_headers)
        items = client.get("/api/pos/menu-items", headers=staff_headers).json()["data"]
        assert len(items) == 6
        assert items[0]["name"] == "Classic Margarita"


class TestPosMappings:

    def test_save_and_list(self, client, manager_headers, staff_headers, urgent_item):
        client.post("/api/pos/config", json=POS_CONFIG, headers=manager_headers)
        payload = {"mappings": [
            {"posItemId": "menu1", "posItemName": "Classic Margarita", "inventoryItemId": urgent_item.id},
        ]}

        response = client.post("/api/pos/mappings", json=payload, headers=manager_headers)
        assert response.json()["data"] == {"mappedItems": 1}

        mappings = client.get("/api/pos/mappings", headers=staff_headers).json()["data"]
        assert mappings == [{
            "posItemId": "menu1",
            "posItemName": "Classic Margarita",
            "inventoryItemId": urgent_item.id,
            "quantityPerSale": 1,
        }]
        assert client.get("/api/pos/config", headers=staff_headers).json()["data"]["mappedItems"] == 1

    def test_mappings_must_be_a_list(self, client, manager_headers):
        response = client.post("/api/pos/mappings", json={"mappings": "menu1"}, headers=manager_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_inventory_item(self, client, manager_headers):
        payload = {"mappings": [{"posItemId": "menu1", "inventoryItemId": 9999}]}
        response = client.post("/api/pos/mappings", json=payload, headers=manager_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_staff_cannot_save(self, client, staff_headers):
        response = client.post("/api/pos/mappings", json={"mappings": []}, headers=staff_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestPosFailures:

    def test_invalid_sync_frequency(self, client, manager_headers):
        payload = {**POS_CONFIG, "syncFrequency": "hourly"}
        response = client.post("/api/pos/config", json=payload, headers=manager_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"].startswith("Invalid sync frequency")

    def test_unreachable_pos(self, client, manager_headers, staff_headers, app_context):
        class UnreachablePos(SimulatedPosClient):
            async def sync(self, system, restaurant_id, api_key):
                raise ConnectionError("connection refused")

        app_context.pos = UnreachablePos(delay_seconds=0)
        client.post("/api/pos/config", json=POS_CONFIG, headers=manager_headers)

        response = client.post("/api/pos/sync", headers=staff_headers)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"success": False, "error": "POS sync failed: square unavailable"}
