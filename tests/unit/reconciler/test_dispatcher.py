import pytest

from neoaura.exceptions import AuraApiError, ResourceAlreadyExists, ResourceNotFound
from neoaura.reconciler.models import CUSTOMER_MANAGED_KEY, INSTANCE, Action
from neoaura.testing.config import TEST_TENANT_ID, TEST_TOKEN


class TestDispatch:
    def test_accepted_action(self, aura_api, dispatcher):
        instance = aura_api.add_instance("t1")

        result = dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.PAUSE, instance["id"])

        assert not result.benign_conflict
        assert result.data["id"] == instance["id"]
        assert aura_api.requests == [("POST", f"/v1/instances/{instance['id']}/pause")]

    def test_create_with_payload(self, aura_api, dispatcher):
        payload = {
            "name": "t1",
            "tenant_id": TEST_TENANT_ID,
            "cloud_provider": "gcp",
            "region": "europe-west1",
            "type": "enterprise-db",
            "memory": "4GB",
            "version": "5",
        }

        result = dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.CREATE, payload=payload)

        assert result.data["name"] == "t1"
        assert result.data["password"] == "generated-password"
        assert aura_api.paths("POST") == ["/v1/instances"]

    def test_benign_conflict_returns_current_state_without_polling(self, aura_api, dispatcher):
        instance = aura_api.add_instance("t1", status="paused")
        path = f"/v1/instances/{instance['id']}"

        result = dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.PAUSE, instance["id"])

        assert result.benign_conflict
        assert result.data["status"] == "paused"
        # a single re-fetch of the resource, no polling
        assert aura_api.requests == [("POST", f"{path}/pause"), ("GET", path)]

    def test_benign_conflict_while_in_progress(self, aura_api, dispatcher):
        instance = aura_api.add_instance("t1", status="resuming")

        result = dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.RESUME, instance["id"])

        assert result.benign_conflict
        assert result.data["status"] == "resuming"

    def test_benign_conflict_of_deleted_resource(self, aura_api, dispatcher):
        aura_api.fail_once("DELETE", "/v1/instances/gone", 409, "The database is already deleting")

        result = dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.DELETE, "gone")

        assert result.benign_conflict
        assert result.data == {"id": "gone"}

    def test_rejected_action(self, aura_api, dispatcher):
        instance = aura_api.add_instance("t1")
        aura_api.fail_once(
            "PATCH", f"/v1/instances/{instance['id']}", 400, "Invalid memory size: 3GB", "invalid-memory"
        )

        with pytest.raises(AuraApiError) as e:
            dispatcher.dispatch(
                TEST_TOKEN, INSTANCE, Action.UPDATE, instance["id"], payload={"memory": "3GB"}
            )

        assert e.value.status_code == 400
        assert e.value.message == "Invalid memory size: 3GB"
        assert e.value.reason == "invalid-memory"
        assert str(e.value) == "400 - Invalid memory size: 3GB"

    def test_remote_conflict_is_not_a_duplicate(self, aura_api, dispatcher):
        aura_api.fail_once("POST", "/v1/instances", 409, "An instance with this name already exists")

        with pytest.raises(AuraApiError) as e:
            dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.CREATE, payload={"name": "t1"})

        assert e.value.status_code == 409
        assert not isinstance(e.value, ResourceAlreadyExists)

    def test_unexpected_status(self, aura_api, dispatcher):
        instance = aura_api.add_instance("t1")
        aura_api.fail_once("POST", f"/v1/instances/{instance['id']}/pause", 503, "Service unavailable")

        with pytest.raises(AuraApiError) as e:
            dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.PAUSE, instance["id"])

        assert e.value.status_code == 503
        assert e.value.message == "unexpected response to pause instance: Service unavailable"

    def test_missing_resource(self, aura_api, dispatcher):
        with pytest.raises(ResourceNotFound) as e:
            dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.RESUME, "unknown")

        assert e.value.status_code == 404

    def test_undecodable_error_body(self, httpserver, dispatcher):
        httpserver.expect_request("/v1/instances/abc/pause").respond_with_data(
            "<html>Bad Gateway</html>", status=502
        )

        with pytest.raises(AuraApiError) as e:
            dispatcher.dispatch(TEST_TOKEN, INSTANCE, Action.PAUSE, "abc")

        assert e.value.status_code == 502
        assert "Bad Gateway" in e.value.message


class TestEnsureNameAvailable:
    def test_name_available(self, aura_api, dispatcher):
        aura_api.add_instance("other")

        dispatcher.ensure_name_available(TEST_TOKEN, INSTANCE, TEST_TENANT_ID, "t1")

        assert aura_api.requests == [("GET", "/v1/instances")]

    def test_name_taken(self, aura_api, dispatcher):
        aura_api.add_instance("t1")

        with pytest.raises(ResourceAlreadyExists) as e:
            dispatcher.ensure_name_available(TEST_TOKEN, INSTANCE, TEST_TENANT_ID, "t1")

        assert e.value.message == "instance t1 already exists"
        assert e.value.status_code is None

    def test_name_taken_in_other_tenant(self, aura_api, dispatcher):
        aura_api.add_instance("t1", tenant_id="another-tenant")

        dispatcher.ensure_name_available(TEST_TOKEN, INSTANCE, TEST_TENANT_ID, "t1")

    def test_key_name_taken(self, aura_api, dispatcher):
        aura_api.add_key("my-key")

        with pytest.raises(ResourceAlreadyExists) as e:
            dispatcher.ensure_name_available(TEST_TOKEN, CUSTOMER_MANAGED_KEY, TEST_TENANT_ID, "my-key")

        assert e.value.message == "cmk my-key already exists"
