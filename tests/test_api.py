import io
import json
from unittest.mock import Mock, patch

from fastapi.testclient import TestClient
from PIL import Image

from bascula.schemas.weighing import DocumentCategory
from bascula.services.vision import VisionExtractorService


MODEL_OUTPUT = json.dumps({
    "tipo_documento": "Control Diario Cargue de Fruto",
    "totales": {"peso_bascula": "0", "peso_neto_campo": "15000", "total_racimos": "500"},
})


def test_health_ok(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["upstreams"]["vision"] is True
    assert data["upstreams"]["records"] is True


def test_health_reports_unconfigured_upstreams(client: TestClient) -> None:
    with patch("bascula.config.OPENAI_API_KEY", None), \
            patch("bascula.config.BLOB_READ_WRITE_TOKEN", None):
        response = client.get("/health")

    assert response.json()["upstreams"]["vision"] is False
    assert response.json()["upstreams"]["image_archive"] is False


def test_analyze_image_corrects_and_validates(client: TestClient) -> None:
    with patch.object(
        VisionExtractorService,
        "analyze",
        return_value=(DocumentCategory.FRUIT, MODEL_OUTPUT)
    ) as analyze:
        response = client.post("/analyze-image", json={"image": "data:image/jpeg;base64,AAAA"})

    assert response.status_code == 200
    analyze.assert_called_once_with("data:image/jpeg;base64,AAAA", None)

    data = response.json()
    assert data["success"] is True
    assert data["category"] == "FRUIT"
    assert data["extracted_info"] == MODEL_OUTPUT
    assert data["extracted_totals"] == {"peso_bascula": 0, "peso_neto_campo": 15000, "total_racimos": 500}
    assert data["totals"] == {"peso_bascula": 15000, "peso_neto_campo": 0, "total_racimos": 500}
    assert len(data["corrections"]) == 1
    # Field weight 0 is outside the typical FRUIT range
    assert data["validation"]["confidence"] == 0.8
    assert data["validation"]["is_valid"] is False


def test_analyze_image_passes_known_category(client: TestClient) -> None:
    with patch.object(
        VisionExtractorService,
        "analyze",
        return_value=(DocumentCategory.MESH_FRUIT, MODEL_OUTPUT)
    ) as analyze:
        response = client.post("/analyze-image", json={"image": "AAAA", "category": "MESH_FRUIT"})

    assert response.status_code == 200
    analyze.assert_called_once_with("AAAA", DocumentCategory.MESH_FRUIT)
    assert response.json()["category"] == "MESH_FRUIT"


def test_analyze_image_requires_image(client: TestClient) -> None:
    response = client.post("/analyze-image", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "No image provided"


def test_analyze_image_without_api_key(client: TestClient) -> None:
    with patch("bascula.api.analyze.OPENAI_API_KEY", None):
        response = client.post("/analyze-image", json={"image": "AAAA"})

    assert response.status_code == 500


def test_analyze_image_model_failure(client: TestClient) -> None:
    with patch.object(VisionExtractorService, "analyze", side_effect=RuntimeError("timeout")):
        response = client.post("/analyze-image", json={"image": "AAAA"})

    assert response.status_code == 500
    assert "timeout" in response.json()["detail"]


def test_analyze_image_unparseable_output(client: TestClient) -> None:
    with patch.object(
        VisionExtractorService,
        "analyze",
        return_value=(DocumentCategory.FRUIT, "I cannot read this document")
    ):
        response = client.post("/analyze-image", json={"image": "AAAA"})

    assert response.status_code == 422


def test_analyze_uploaded_image(client: TestClient) -> None:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color="white").save(buffer, format="PNG")

    with patch.object(
        VisionExtractorService,
        "analyze",
        return_value=(DocumentCategory.FRUIT, MODEL_OUTPUT)
    ) as analyze:
        response = client.post(
            "/analyze-image/upload",
            files={"file": ("form.png", buffer.getvalue(), "image/png")}
        )

    assert response.status_code == 200
    image_arg = analyze.call_args.args[0]
    assert image_arg.startswith("data:image/png;base64,")


def test_analyze_uploaded_non_image(client: TestClient) -> None:
    response = client.post(
        "/analyze-image/upload",
        files={"file": ("form.txt", b"plain text", "text/plain")}
    )
    assert response.status_code == 400


def test_correct_endpoint(client: TestClient) -> None:
    response = client.post(
        "/corrections/correct",
        json={"totals": {"peso_bascula": 12000, "peso_neto_campo": 0, "total_racimos": 8000}}
    )

    assert response.status_code == 200
    assert response.json() == {
        "corrected": {"peso_bascula": 12000, "peso_neto_campo": 8000, "total_racimos": 0},
        "corrections": ["Moved bunch count 8000 to field weight"],
    }


def test_validate_endpoint_unknown_category(client: TestClient) -> None:
    response = client.post(
        "/corrections/validate",
        json={"totals": {"scale_weight": 13940}, "category": "PALLET"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "confidence": 0.0,
        "warnings": ["unrecognized category"],
        "is_valid": False,
    }


def test_send_to_database_from_analysis_data(client: TestClient) -> None:
    records = Mock()
    records.create_weighing_record.return_value = {"id": "rec123"}

    with patch("bascula.api.records.get_records_client", return_value=records):
        response = client.post(
            "/send-to-database",
            json={
                "analysis_data": {
                    "tipo_documento": "Control Diario Cargue de Fruto Mallas",
                    "totales": {"peso_báscula": "13.940", "racimos": 735},
                }
            }
        )

    assert response.status_code == 200
    data = response.json()
    assert data["record_id"] == "rec123"
    assert data["category"] == "MESH_FRUIT"
    assert data["tipo_peso"] == "Malla Fruto"
    assert data["totals"] == {"peso_bascula": 13940, "peso_neto_campo": 0, "total_racimos": 735}
    assert data["image_url"] is None

    call = records.create_weighing_record.call_args
    assert call.kwargs["category"] is DocumentCategory.MESH_FRUIT
    assert call.kwargs["totals"].scale_weight == 13940


def test_send_to_database_with_reviewed_totals_and_image(client: TestClient) -> None:
    records = Mock()
    records.create_weighing_record.return_value = {"id": "rec456"}
    archive = Mock(enabled=True)
    archive.archive.return_value = "https://blob.example/weighings/a.jpg"

    with patch("bascula.api.records.get_records_client", return_value=records), \
            patch("bascula.api.records.get_image_archive", return_value=archive):
        response = client.post(
            "/send-to-database",
            json={
                "totals": {"peso_bascula": 13940, "peso_neto_campo": 0, "total_racimos": 735},
                "image": "data:image/jpeg;base64,AAAA",
            }
        )

    assert response.status_code == 200
    assert response.json()["image_url"] == "https://blob.example/weighings/a.jpg"
    assert response.json()["category"] == "FRUIT"
    archive.archive.assert_called_once_with(b"\x00\x00\x00", "image/jpeg")
    assert records.create_weighing_record.call_args.kwargs["image_url"] == "https://blob.example/weighings/a.jpg"


def test_send_to_database_bad_blob_response_is_server_error(client: TestClient) -> None:
    records = Mock()
    blob_response = Mock(status_code=200, text="<html>")
    blob_response.json.side_effect = ValueError("Expecting value")

    with patch("bascula.api.records.get_records_client", return_value=records), \
            patch("bascula.api.records.BLOB_READ_WRITE_TOKEN", "blob-token"), \
            patch("bascula.services.image_archive.requests.put", return_value=blob_response):
        response = client.post(
            "/send-to-database",
            json={"totals": {"peso_bascula": 13940}, "image": "AAAA"}
        )

    assert response.status_code == 500
    assert "invalid response" in response.json()["detail"]
    records.create_weighing_record.assert_not_called()


def test_send_to_database_requires_data(client: TestClient) -> None:
    response = client.post("/send-to-database", json={})
    assert response.status_code == 422


def test_send_to_database_upstream_failure(client: TestClient) -> None:
    records = Mock()
    records.create_weighing_record.side_effect = RuntimeError("Airtable API error: 401")

    with patch("bascula.api.records.get_records_client", return_value=records):
        response = client.post(
            "/send-to-database",
            json={"totals": {"peso_bascula": 13940}, "category": "FRUIT"}
        )

    assert response.status_code == 500
    assert "401" in response.json()["detail"]


def test_list_bases(client: TestClient) -> None:
    records = Mock()
    records.list_bases.return_value = {"bases": [{"id": "app1", "name": "Báscula"}]}

    with patch("bascula.api.records.get_records_client", return_value=records):
        response = client.get("/send-to-database/bases")

    assert response.status_code == 200
    assert response.json()["bases"] == [{"id": "app1", "name": "Báscula"}]


def test_list_bases_without_api_key(client: TestClient) -> None:
    with patch("bascula.api.records.AIRTABLE_API_KEY", None):
        response = client.get("/send-to-database/bases")

    assert response.status_code == 400


def test_training_feedback_round_trip(client: TestClient) -> None:
    response = client.post(
        "/training-feedback",
        json={
            "aiDetectedType": "FRUIT",
            "userCorrectedType": "MESH_FRUIT",
            "extractedData": {"peso_bascula": 13940},
            "isCorrect": False,
        }
    )

    assert response.status_code == 200
    assert response.json()["correction_needed"] is True

    stats = client.get("/training-feedback").json()
    assert stats["total_analyses"] == 1
    assert stats["accuracy_rate"] == 0.0
    assert stats["common_errors"] == [{"detected": "FRUIT", "corrected": "MESH_FRUIT", "count": 1}]
