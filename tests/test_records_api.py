"""HTTP tests for /sensoresactuadores.

Ejecutar:
    pytest tests/test_records_api.py -v
"""

from unittest.mock import AsyncMock

from bson import ObjectId

from sensores_api.services import StoreError


MISSING_ID = str(ObjectId())


def create(client, payload: dict) -> dict:
    response = client.post("/sensoresactuadores", json=payload)
    assert response.status_code == 201
    return response.json()


# =============================================================================
# CREATE / FIND
# =============================================================================

class TestCreate:

    def test_create_assigns_id_and_timestamp(self, client, temp_sensor):
        body = create(client, temp_sensor)

        assert ObjectId.is_valid(body["_id"])
        assert body["fechaHora"]
        assert body["tipo"] == "Sensor"
        assert body["nombre"] == "Temp1"
        assert body["valor"] == 22.5
        assert body["unidad"] == "C"

    def test_create_then_find_round_trip(self, client, temp_sensor):
        created = create(client, temp_sensor)

        response = client.get(f"/sensoresactuadores/buscar/{created['_id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_partial_payload_is_accepted(self, client):
        created = create(client, {"nombre": "Sin tipo"})

        found = client.get(f"/sensoresactuadores/buscar/{created['_id']}").json()
        assert found["nombre"] == "Sin tipo"
        assert found["tipo"] is None

    def test_value_keeps_its_type(self, client):
        created = create(client, {"tipo": "actuador", "nombre": "Ventilador", "valor": {"estado": "on", "velocidad": 3}})

        assert created["valor"] == {"estado": "on", "velocidad": 3}

    def test_any_kind_string_is_stored(self, client):
        created = create(client, {"tipo": "camara", "nombre": "Cam1"})

        assert created["tipo"] == "camara"

    def test_numbers_in_text_fields_are_stored_as_text(self, client):
        body = create(client, {"tipo": "sensor", "nombre": 101, "valor": 1, "unidad": 5})

        assert body["nombre"] == "101"
        assert body["unidad"] == "5"
        assert body["valor"] == 1

    def test_value_too_large_for_mongo_is_400(self, client):
        response = client.post("/sensoresactuadores", json={"tipo": "sensor", "nombre": "Big", "valor": 2**70})

        assert response.status_code == 400
        assert response.json() == {"error": "Error al crear el registro"}

    def test_invalid_body_is_400(self, client):
        response = client.post("/sensoresactuadores", json=["not", "an", "object"])

        assert response.status_code == 400
        assert "error" in response.json()

    def test_store_failure_on_create_is_400(self, client, store, temp_sensor):
        store.insert = AsyncMock(side_effect=StoreError("duplicate key"))

        response = client.post("/sensoresactuadores", json=temp_sensor)

        assert response.status_code == 400
        assert response.json() == {"error": "Error al crear el registro"}


class TestFindById:

    def test_missing_id_is_404(self, client):
        response = client.get(f"/sensoresactuadores/buscar/{MISSING_ID}")

        assert response.status_code == 404
        assert response.json() == {"error": "Dispositivo no encontrado"}

    def test_malformed_id_is_404(self, client):
        response = client.get("/sensoresactuadores/buscar/not-an-object-id")

        assert response.status_code == 404

    def test_store_failure_is_500_without_details(self, client, store):
        store.find_by_id = AsyncMock(side_effect=StoreError("connection reset by 10.0.0.5"))

        response = client.get(f"/sensoresactuadores/buscar/{MISSING_ID}")

        assert response.status_code == 500
        assert "10.0.0.5" not in response.text


# =============================================================================
# UPDATE / DELETE
# =============================================================================

class TestUpdate:

    def test_update_returns_post_update_record(self, client, temp_sensor):
        created = create(client, temp_sensor)

        response = client.put(f"/sensoresactuadores/{created['_id']}", json={"valor": 23.1})

        assert response.status_code == 200
        body = response.json()
        assert body["_id"] == created["_id"]
        assert body["valor"] == 23.1
        assert body["nombre"] == "Temp1"

    def test_update_is_persisted(self, client, temp_sensor):
        created = create(client, temp_sensor)
        client.put(f"/sensoresactuadores/{created['_id']}", json={"nombre": "Temp2"})

        found = client.get(f"/sensoresactuadores/buscar/{created['_id']}").json()

        assert found["nombre"] == "Temp2"

    def test_update_missing_id_is_404_and_creates_nothing(self, client):
        response = client.put(f"/sensoresactuadores/{MISSING_ID}", json={"tipo": "sensor", "nombre": "Fantasma"})

        assert response.status_code == 404
        assert response.json() == {"error": "No encontrado"}
        assert client.get(f"/sensoresactuadores/buscar/{MISSING_ID}").status_code == 404
        assert client.get("/sensoresactuadores/buscar", params={"nombre": "Fantasma"}).status_code == 404

    def test_empty_update_returns_record_unchanged(self, client, temp_sensor):
        created = create(client, temp_sensor)

        response = client.put(f"/sensoresactuadores/{created['_id']}", json={})

        assert response.status_code == 200
        assert response.json() == created

    def test_store_failure_is_500(self, client, store):
        store.update_by_id = AsyncMock(side_effect=StoreError("boom"))

        response = client.put(f"/sensoresactuadores/{MISSING_ID}", json={"valor": 1})

        assert response.status_code == 500
        assert response.json() == {"error": "Error al actualizar"}


class TestDelete:

    def test_delete_confirms_and_returns_record(self, client, temp_sensor):
        created = create(client, temp_sensor)

        response = client.delete(f"/sensoresactuadores/{created['_id']}")

        assert response.status_code == 200
        body = response.json()
        assert body["mensaje"] == "Registro eliminado"
        assert body["registro"] == created

    def test_second_delete_is_404(self, client, temp_sensor):
        created = create(client, temp_sensor)

        first = client.delete(f"/sensoresactuadores/{created['_id']}")
        second = client.delete(f"/sensoresactuadores/{created['_id']}")

        assert first.status_code == 200
        assert second.status_code == 404
        assert client.get(f"/sensoresactuadores/buscar/{created['_id']}").status_code == 404

    def test_store_failure_is_500(self, client, store):
        store.delete_by_id = AsyncMock(side_effect=StoreError("boom"))

        response = client.delete(f"/sensoresactuadores/{MISSING_ID}")

        assert response.status_code == 500
        assert response.json() == {"error": "Error al eliminar"}


# =============================================================================
# SEPARADOS
# =============================================================================

class TestPartitioned:

    def test_groups_by_kind_case_insensitive(self, client, temp_sensor, relay_actuator):
        sensor = create(client, temp_sensor)
        actuator = create(client, relay_actuator)
        shouting = create(client, {"tipo": "ACTUADOR", "nombre": "Luz"})

        body = client.get("/sensoresactuadores/separados").json()

        assert [r["_id"] for r in body["sensores"]] == [sensor["_id"]]
        assert [r["_id"] for r in body["actuadores"]] == [actuator["_id"], shouting["_id"]]

    def test_unknown_kinds_are_dropped(self, client, temp_sensor):
        create(client, temp_sensor)
        create(client, {"tipo": "camara", "nombre": "Cam1"})
        create(client, {"nombre": "Sin tipo"})

        body = client.get("/sensoresactuadores/separados").json()

        names = [r["nombre"] for r in body["sensores"] + body["actuadores"]]
        assert names == ["Temp1"]

    def test_empty_store(self, client):
        response = client.get("/sensoresactuadores/separados")

        assert response.status_code == 200
        assert response.json() == {"sensores": [], "actuadores": []}

    def test_malformed_stored_document_is_500_json(self, client, store):
        store.find_all = AsyncMock(return_value=[{"_id": ObjectId(), "tipo": {"x": 1}, "nombre": "Raro"}])

        response = client.get("/sensoresactuadores/separados")

        assert response.status_code == 500
        assert response.json() == {"error": "Error al obtener los datos"}

    def test_store_failure_is_500(self, client, store):
        store.find_all = AsyncMock(side_effect=StoreError("server selection timeout"))

        response = client.get("/sensoresactuadores/separados")

        assert response.status_code == 500
        assert response.json() == {"error": "Error al obtener los datos"}


# =============================================================================
# BUSCAR
# =============================================================================

class TestSearch:

    def test_no_parameters_is_400(self, client, temp_sensor):
        create(client, temp_sensor)

        response = client.get("/sensoresactuadores/buscar")

        assert response.status_code == 400
        assert "nombre" in response.json()["error"]

    def test_empty_parameters_are_400(self, client):
        response = client.get("/sensoresactuadores/buscar", params={"nombre": "", "tipo": ""})

        assert response.status_code == 400

    def test_name_is_case_insensitive_substring(self, client, temp_sensor):
        created = create(client, temp_sensor)

        response = client.get("/sensoresactuadores/buscar", params={"nombre": "temp"})

        assert response.status_code == 200
        assert [r["_id"] for r in response.json()] == [created["_id"]]

    def test_name_matches_anywhere(self, client, relay_actuator):
        create(client, relay_actuator)

        response = client.get("/sensoresactuadores/buscar", params={"nombre": "BOMBA"})

        assert response.status_code == 200

    def test_name_is_literal_text(self, client):
        create(client, {"tipo": "sensor", "nombre": "pH (tanque)"})
        create(client, {"tipo": "sensor", "nombre": "pHX tanque"})

        response = client.get("/sensoresactuadores/buscar", params={"nombre": "(tanque)"})

        assert [r["nombre"] for r in response.json()] == ["pH (tanque)"]

    def test_tipo_sensores(self, client, temp_sensor, relay_actuator):
        sensor = create(client, temp_sensor)
        create(client, relay_actuator)
        create(client, {"tipo": "sensores", "nombre": "Plural"})

        response = client.get("/sensoresactuadores/buscar", params={"tipo": "sensores"})

        assert response.status_code == 200
        assert [r["_id"] for r in response.json()] == [sensor["_id"]]

    def test_tipo_actuadores(self, client, temp_sensor, relay_actuator):
        create(client, temp_sensor)
        actuator = create(client, relay_actuator)

        response = client.get("/sensoresactuadores/buscar", params={"tipo": "actuadores"})

        assert [r["_id"] for r in response.json()] == [actuator["_id"]]

    def test_invalid_tipo_is_400(self, client, temp_sensor):
        create(client, temp_sensor)

        for tipo in ("sensor", "actuador", "todos"):
            response = client.get("/sensoresactuadores/buscar", params={"tipo": tipo})
            assert response.status_code == 400
            assert response.json() == {"error": "El tipo debe ser 'sensores' o 'actuadores'"}

    def test_name_and_tipo_must_both_match(self, client, temp_sensor):
        create(client, temp_sensor)
        create(client, {"tipo": "actuador", "nombre": "Temp valve"})

        response = client.get("/sensoresactuadores/buscar", params={"nombre": "temp", "tipo": "actuadores"})

        assert [r["nombre"] for r in response.json()] == ["Temp valve"]

    def test_no_matches_is_404(self, client, temp_sensor):
        create(client, temp_sensor)

        response = client.get("/sensoresactuadores/buscar", params={"nombre": "humedad"})

        assert response.status_code == 404
        assert response.json() == {"error": "No se encontraron dispositivos"}

    def test_store_failure_is_500(self, client, store):
        store.find_all = AsyncMock(side_effect=StoreError("boom"))

        response = client.get("/sensoresactuadores/buscar", params={"nombre": "x"})

        assert response.status_code == 500


# =============================================================================
# SCENARIOS
# =============================================================================

def test_scenario_created_sensor_shows_up_everywhere(client, temp_sensor):
    created = create(client, temp_sensor)

    by_kind = client.get("/sensoresactuadores/buscar", params={"tipo": "sensores"})
    separated = client.get("/sensoresactuadores/separados").json()

    assert created["_id"] in [r["_id"] for r in by_kind.json()]
    assert created["_id"] in [r["_id"] for r in separated["sensores"]]


def test_root_and_health(client):
    assert client.get("/").json()["name"] == "API Sensores y Actuadores"

    health = client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["subscribers"] == 0
