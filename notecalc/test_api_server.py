"""
Tests for the NoteCalc API server.
"""

import json

import pytest
from fastapi.testclient import TestClient

from notecalc.api_server import app

client = TestClient(app)


def _create(text):
    response = client.post("/api/documents", json={"text": text})
    assert response.status_code == 200
    return response.json()


def test_health_check():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_create_and_evaluate_document():
    document = _create("x = 2\nx * 3")

    assert document["title"] == "x = 2"
    assert document["results"][0]["type"] == "variable"
    assert document["results"][1]["value"] == pytest.approx(6)

    response = client.post(
        f"/api/documents/{document['id']}/evaluate",
        json={"text": "x = 5\nx * 3\npi = 1"}
    )
    assert response.status_code == 200
    results = response.json()["results"]

    assert results[1]["type"] == "result"
    assert results[1]["value"] == pytest.approx(15)
    assert results[2] == {
        "type": "error", "value": "invalid variable name", "name": None, "display": "Error"
    }

    response = client.get(f"/api/documents/{document['id']}/results")
    assert response.json()["results"] == results


def test_unknown_document_returns_404():
    assert client.get("/api/documents/missing0").status_code == 404
    assert client.get("/api/documents/missing0/results").status_code == 404
    assert client.delete("/api/documents/missing0").status_code == 404
    response = client.post("/api/documents/missing0/evaluate", json={"text": "1"})
    assert response.status_code == 404


def test_list_and_delete_documents():
    document = _create("Trip budget:\nfuel = 120")

    listed = client.get("/api/documents").json()
    assert document["id"] in [d["id"] for d in listed]

    assert client.delete(f"/api/documents/{document['id']}").status_code == 200
    assert client.get(f"/api/documents/{document['id']}").status_code == 404


def test_syntax_highlight_endpoint():
    response = client.post("/api/syntax-highlight", json={"text": "// hello"})
    assert response.status_code == 200
    assert response.json()["highlights"][0]["class"] == "syntax-comment"


def test_constants_and_functions():
    constants = client.get("/api/constants").json()["constants"]
    assert {c["identifier"] for c in constants} == {"pi", "e", "g", "phi"}

    functions = client.get("/api/functions").json()["functions"]
    assert "sqrt" in [f["name"] for f in functions]


def test_websocket_evaluation():
    with client.websocket_connect("/ws") as websocket:
        websocket.send_text(json.dumps({
            "type": "evaluate", "document_id": "wsdoc001", "text": "a = 3k\na / 3"
        }))
        message = websocket.receive_json()

        assert message["type"] == "evaluation_result"
        assert message["document_id"] == "wsdoc001"
        assert message["results"][1]["value"] == pytest.approx(1000)

        websocket.send_text(json.dumps({"type": "unknown"}))
        assert websocket.receive_json()["type"] == "error"

        websocket.send_text("not json")
        assert websocket.receive_json()["type"] == "error"


def test_blank_document_survives_listing():
    document = client.post("/api/documents", json={}).json()

    client.get("/api/documents")
    response = client.post(
        f"/api/documents/{document['id']}/evaluate", json={"text": "1 + 1"}
    )

    assert response.status_code == 200
    assert response.json()["results"][0]["value"] == pytest.approx(2)


def test_websocket_rejects_malformed_evaluate():
    with client.websocket_connect("/ws") as websocket:
        websocket.send_text(json.dumps({"type": "evaluate", "text": 5}))
        assert websocket.receive_json()["type"] == "error"

        # the connection keeps working afterwards
        websocket.send_text(json.dumps({
            "type": "evaluate", "document_id": "wsdoc002", "text": "2 * 4"
        }))
        message = websocket.receive_json()
        assert message["results"][0]["value"] == pytest.approx(8)
