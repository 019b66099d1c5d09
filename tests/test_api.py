"""Test the HTTP endpoints with stubbed AI and renderer."""

import httpx
import pytest

import main
from app.api.deps import get_ai_gateway
from app.services.ai_gateway import GeminiGateway

from conftest import PDF_MARKER


@pytest.fixture
def product_id(client, tee_payload):
    response = client.post("/products/", json=tee_payload)
    assert response.status_code == 201
    return response.json()["id"]


@pytest.fixture
def unparsable_ai(client):
    """Real Gemini binding whose completions are not JSON."""
    envelope = {"candidates": [{"content": {"parts": [{"text": "Sure! {oops"}]}}]}
    gateway = GeminiGateway(
        api_key="k",
        model="gemini-test",
        base_url="https://ai.test/v1beta",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=envelope)),
    )
    main.app.dependency_overrides[get_ai_gateway] = lambda: gateway
    return gateway


def _scores(report):
    return [float(report[k]) for k in ("overall_score", "sustainability_score", "quality_score", "transparency_score")]


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestProductEndpoints:
    """Test /products."""

    def test_create_then_fetch(self, client, product_id):
        data = client.get(f"/products/{product_id}").json()
        assert data["name"] == "Organic Cotton Tee"
        assert data["category"] == "textiles-clothing"
        assert data["status"] == "draft"
        assert data["certifications"] == []

    def test_create_rejects_unknown_category(self, client):
        response = client.post("/products/", json={"name": "Tee", "category": "toys"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "validation_error"
        assert "category" in body["fields"]

    def test_create_rejects_wrong_types(self, client):
        response = client.post("/products/", json={"name": 42, "category": "dairy"})
        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_missing_product_is_404(self, client):
        response = client.get("/products/999")
        assert response.status_code == 404
        assert response.json() == {"detail": "Product not found.", "code": "not_found"}

    def test_patch_is_partial(self, client, product_id):
        response = client.patch(f"/products/{product_id}", json={"brand": "Acme", "id": 77, "user_id": 77})
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == product_id
        assert data["brand"] == "Acme"
        assert data["name"] == "Organic Cotton Tee"

    def test_patch_rejects_blank_name(self, client, product_id):
        assert client.patch(f"/products/{product_id}", json={"name": " "}).status_code == 400

    def test_list_products(self, client, product_id):
        ids = [p["id"] for p in client.get("/products/").json()]
        assert ids == [product_id]


class TestQuestionEndpoints:
    """Test question generation and answers."""

    def test_generate_and_list(self, client, product_id):
        created = client.post(f"/products/{product_id}/generate-questions")
        assert created.status_code == 200
        assert [q["order_index"] for q in created.json()] == [1, 2]

        listed = client.get(f"/products/{product_id}/questions").json()
        assert [q["id"] for q in listed] == [q["id"] for q in created.json()]

    def test_generate_appends(self, client, product_id):
        client.post(f"/products/{product_id}/generate-questions")
        client.post(f"/products/{product_id}/generate-questions")
        assert len(client.get(f"/products/{product_id}/questions").json()) == 4

    def test_generate_for_missing_product(self, client):
        assert client.post("/products/999/generate-questions").status_code == 404

    def test_generation_failure_is_500(self, client, ai, product_id):
        ai.fail_generation = True
        response = client.post(f"/products/{product_id}/generate-questions")
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate AI questions.", "code": "ai_generation_failed"}
        assert client.get(f"/products/{product_id}/questions").json() == []

    def test_unparsable_completion_hides_parser_details(self, client, unparsable_ai, product_id):
        response = client.post(f"/products/{product_id}/generate-questions")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate AI questions.", "code": "ai_generation_failed"}

    def test_answer_question(self, client, product_id):
        question = client.post(f"/products/{product_id}/generate-questions").json()[0]

        response = client.patch(f"/questions/{question['id']}", json={"answer": "Certified farms"})

        assert response.status_code == 200
        assert response.json()["answer"] == "Certified farms"
        progress = client.get(f"/products/{product_id}/progress").json()
        assert progress == {"product_id": product_id, "total_questions": 2, "answered_questions": 1, "completeness": 50}

    @pytest.mark.parametrize("body", [{}, {"answer": None}, {"answer": 12}])
    def test_answer_must_be_a_string(self, client, product_id, body):
        question = client.post(f"/products/{product_id}/generate-questions").json()[0]
        assert client.patch(f"/questions/{question['id']}", json=body).status_code == 400

    def test_answer_unknown_question(self, client):
        assert client.patch("/questions/999", json={"answer": "x"}).status_code == 404


class TestReportEndpoints:
    """Test scoring and PDF download."""

    def test_no_report_yet(self, client, product_id):
        assert client.get(f"/products/{product_id}/report").status_code == 404

    def test_generate_report(self, client, product_id):
        client.post(f"/products/{product_id}/generate-questions")

        report = client.post(f"/products/{product_id}/generate-report").json()

        assert _scores(report) == [72, 80, 65, 70]
        assert report["status"] == "completed"
        assert client.get(f"/products/{product_id}/report").json()["id"] == report["id"]

    def test_scoring_failure_is_500(self, client, ai, product_id):
        ai.fail_scoring = True
        response = client.post(f"/products/{product_id}/generate-report")
        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to calculate transparency score.", "code": "scoring_failed"}
        assert client.get(f"/products/{product_id}/report").status_code == 404

    def test_unparsable_scoring_hides_parser_details(self, client, unparsable_ai, product_id):
        response = client.post(f"/products/{product_id}/generate-report")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to calculate transparency score.", "code": "scoring_failed"}
        assert client.get(f"/products/{product_id}/report").status_code == 404

    def test_pdf_download(self, client, product_id):
        client.post(f"/products/{product_id}/generate-report")

        response = client.get(f"/products/{product_id}/report/pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            'attachment; filename="transparency-report-organic_cotton_tee.pdf"'
        )
        assert response.content == PDF_MARKER

    def test_pdf_download_with_non_ascii_name(self, client):
        product_id = client.post("/products/", json={"name": "İnce Pamuk", "category": "textiles-clothing"}).json()["id"]
        client.post(f"/products/{product_id}/generate-report")

        response = client.get(f"/products/{product_id}/report/pdf")

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="transparency-report-_nce_pamuk.pdf"'

    def test_pdf_without_report_is_404(self, client, product_id):
        assert client.get(f"/products/{product_id}/report/pdf").status_code == 404
        assert client.get("/products/999/report/pdf").status_code == 404

    def test_pdf_render_failure_is_500(self, client, renderer, product_id):
        client.post(f"/products/{product_id}/generate-report")
        renderer.fail = True

        response = client.get(f"/products/{product_id}/report/pdf")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate PDF report.", "code": "render_failed"}


class TestAssessmentFlow:
    """Test the step-by-step flow over HTTP."""

    def test_full_assessment(self, client, tee_payload):
        state = client.post("/assessments/advance", json={"data": tee_payload}).json()
        assert state["step_name"] == "details"
        product_id = state["product"]["id"]

        state = client.post(
            "/assessments/advance", json={"product_id": product_id, "data": {"materials": "Organic cotton"}}
        ).json()
        assert state["step_name"] == "questions"
        assert len(state["generated_questions"]) == 2
        assert state["generation_error"] is None

        blocked = client.post("/assessments/advance", json={"product_id": product_id})
        assert blocked.status_code == 400
        assert blocked.json()["code"] == "incomplete_assessment"

        first = state["generated_questions"][0]
        client.patch(f"/questions/{first['id']}", json={"answer": "Sourced from certified organic farms"})

        state = client.post("/assessments/advance", json={"product_id": product_id}).json()
        assert state["step_name"] == "review"
        assert state["completeness"] == 50

        state = client.post("/assessments/advance", json={"product_id": product_id}).json()
        assert state["step"] == 4
        assert state["product"]["status"] == "completed"

        report = client.get(f"/products/{product_id}/report").json()
        assert _scores(report) == [72, 80, 65, 70]
        assert report["insights"] == ["Good sourcing disclosure"]
        assert report["recommendations"] == ["Disclose dyeing process"]
        assert report["status"] == "completed"

    def test_invalid_first_step(self, client):
        response = client.post("/assessments/advance", json={"data": {"name": "Tee"}})
        assert response.status_code == 400
        assert "category" in response.json()["fields"]

    def test_retreat_and_state(self, client, tee_payload):
        product_id = client.post("/assessments/advance", json={"data": tee_payload}).json()["product"]["id"]

        back = client.post(f"/assessments/{product_id}/retreat").json()
        assert back["step"] == 1
        assert client.post(f"/assessments/{product_id}/retreat").json()["step"] == 1
        assert client.get(f"/assessments/{product_id}").json()["step_name"] == "basic_info"

    def test_generation_failure_still_advances(self, client, ai, tee_payload):
        ai.fail_generation = True
        product_id = client.post("/assessments/advance", json={"data": tee_payload}).json()["product"]["id"]

        state = client.post("/assessments/advance", json={"product_id": product_id, "data": {}}).json()

        assert state["step_name"] == "questions"
        assert state["generated_questions"] == []
        assert state["generation_error"].startswith("Failed to generate AI questions")
