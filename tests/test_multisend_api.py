import pytest
from fastapi.testclient import TestClient

from tokenforge.common.exceptions import UserRejectedError
from tokenforge.main import app
from tokenforge.modules.multisend.controller import get_batch_orchestrator
from tokenforge.modules.multisend.services.batch_orchestrator import BatchOrchestrator
from tokenforge.modules.multisend.services.record_store import InMemoryRecordStore, get_record_store
from tokenforge.modules.wallet.transaction_submitter import TransactionSubmitter

from .conftest import ALICE, BOB, CAROL, CHAIN_ID, SENDER, FakeWalletProvider


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def client(store, wallet, no_sleep):
    def orchestrator_override():
        submitter = TransactionSubmitter(wallet, expected_chain_id=CHAIN_ID)
        return BatchOrchestrator(submitter, store, sleep=no_sleep)

    app.dependency_overrides[get_record_store] = lambda: store
    app.dependency_overrides[get_batch_orchestrator] = orchestrator_override
    yield TestClient(app)
    app.dependency_overrides.clear()


def batch_payload(*addresses):
    return {
        "recipients": [{"address": a, "amount": "1"} for a in addresses],
        "token_type": "native",
    }


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"
    assert client.get("/").status_code == 200


def test_run_batch_returns_outcome_and_persists(client, wallet):
    wallet.failures[BOB.lower()] = UserRejectedError("Transaction was rejected by user")

    response = client.post("/api/v1/multisend/batches", json=batch_payload(ALICE, BOB, CAROL))

    assert response.status_code == 201
    outcome = response.json()
    assert outcome["status"] == "partially_failed"
    assert len(outcome["transaction_hashes"]) == 2
    assert outcome["failed_addresses"] == [BOB]

    record = client.get(f"/api/v1/multisend/{outcome['record_id']}").json()
    assert record["status"] == "partially_failed"
    assert record["sender_address"] == SENDER
    assert record["total_amount"] == "3"


def test_run_batch_with_invalid_address_is_422(client, store):
    response = client.post("/api/v1/multisend/batches", json=batch_payload("0x1234"))

    assert response.status_code == 422
    assert store.list_all() == []


def test_run_batch_with_duplicates_is_422(client, store):
    payload = batch_payload(ALICE, ALICE)

    response = client.post("/api/v1/multisend/batches", json=payload)

    assert response.status_code == 422
    assert store.list_all() == []


def test_run_batch_without_recipients_is_422(client):
    response = client.post("/api/v1/multisend/batches", json={"recipients": []})

    assert response.status_code == 422


def test_run_batch_on_wrong_network_is_400(store, no_sleep):
    def orchestrator_override():
        submitter = TransactionSubmitter(FakeWalletProvider(chain_id=1), expected_chain_id=CHAIN_ID)
        return BatchOrchestrator(submitter, store, sleep=no_sleep)

    app.dependency_overrides[get_batch_orchestrator] = orchestrator_override
    try:
        response = TestClient(app).post("/api/v1/multisend/batches", json=batch_payload(ALICE))
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 400
    assert "10143" in response.json()["detail"]
    assert store.list_all() == []


def test_create_list_and_update_records(client):
    payload = {
        "sender_address": SENDER,
        "recipients": [{"address": ALICE, "amount": "1"}],
        "total_amount": "1",
    }
    created = client.post("/api/v1/multisend", json=payload)
    assert created.status_code == 201
    record_id = created.json()["id"]
    assert created.json()["status"] == "pending"

    updated = client.put(
        f"/api/v1/multisend/{record_id}",
        json={"status": "confirmed", "transaction_hashes": ["0x01"]},
    )
    assert updated.status_code == 200
    assert updated.json()["status"] == "confirmed"
    assert updated.json()["transaction_hashes"] == ["0x01"]

    listed = client.get("/api/v1/multisend", params={"sender_address": SENDER.lower()})
    assert [r["id"] for r in listed.json()] == [record_id]


def test_update_terminal_record_is_409(client):
    payload = {
        "sender_address": SENDER,
        "recipients": [{"address": ALICE, "amount": "1"}],
        "total_amount": "1",
    }
    record_id = client.post("/api/v1/multisend", json=payload).json()["id"]
    client.put(f"/api/v1/multisend/{record_id}", json={"status": "confirmed", "transaction_hashes": ["0x01"]})

    response = client.put(
        f"/api/v1/multisend/{record_id}",
        json={"status": "pending", "failed_addresses": [ALICE, BOB, CAROL]},
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "RECORD_TERMINAL"
    assert client.get(f"/api/v1/multisend/{record_id}").json()["status"] == "confirmed"


def test_update_with_more_results_than_recipients_is_422(client):
    payload = {
        "sender_address": SENDER,
        "recipients": [{"address": ALICE, "amount": "1"}],
        "total_amount": "1",
    }
    record_id = client.post("/api/v1/multisend", json=payload).json()["id"]

    response = client.put(
        f"/api/v1/multisend/{record_id}",
        json={"failed_addresses": [ALICE, BOB, CAROL]},
    )

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "RESULTS_EXCEED_RECIPIENTS"


def test_create_with_more_results_than_recipients_is_422(client):
    payload = {
        "sender_address": SENDER,
        "recipients": [{"address": ALICE, "amount": "1"}],
        "total_amount": "1",
        "failed_addresses": [ALICE, BOB],
    }

    assert client.post("/api/v1/multisend", json=payload).status_code == 422


def test_create_erc20_record_without_token_address_is_422(client):
    payload = {
        "sender_address": SENDER,
        "recipients": [{"address": ALICE, "amount": "1"}],
        "total_amount": "1",
        "token_type": "erc20",
    }

    assert client.post("/api/v1/multisend", json=payload).status_code == 422


def test_unknown_record_is_404(client):
    assert client.get("/api/v1/multisend/missing").status_code == 404
    assert client.put("/api/v1/multisend/missing", json={"status": "failed"}).status_code == 404


def test_list_pagination(client):
    for amount in ("1", "2", "3"):
        client.post(
            "/api/v1/multisend",
            json={
                "sender_address": SENDER,
                "recipients": [{"address": ALICE, "amount": amount}],
                "total_amount": amount,
            },
        )

    page = client.get("/api/v1/multisend", params={"skip": 1, "limit": 1}).json()

    assert [r["total_amount"] for r in page] == ["2"]


def test_import_recipients(client):
    text = f"{ALICE},1.5\ninvalid_line\n0xABC,2"

    response = client.post("/api/v1/multisend/recipients/import", json={"text": text})

    assert response.status_code == 200
    body = response.json()
    assert body["added"] == 1
    assert body["recipients"] == [{"address": ALICE, "amount": "1.5"}]
    assert body["total_amount"] == "1.5"


def test_import_without_valid_rows_is_422(client):
    response = client.post("/api/v1/multisend/recipients/import", json={"text": "nope\n"})

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "NO_VALID_ROWS"
