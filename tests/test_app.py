from unittest import TestCase
from unittest.mock import patch

from fastapi.testclient import TestClient
from pdf2image.exceptions import PDFPageCountError

from app import app
from scanner.file_converter import frame_to_png
from tests.synthetic import blank_frame, noise_frame, rectangle_frame


def png_upload(frame, name="frame.png"):
    return (name, frame_to_png(frame), "image/png")


class HealthTests(TestCase):
    def test_health(self):
        response = TestClient(app).get("/health")
        self.assertEqual(response.json(), {"status": "healthy", "service": "document-scanner"})


class AnalyzeEndpointTests(TestCase):
    def setUp(self):
        self.client = TestClient(app)
        self.document = rectangle_frame(400, 400, 40, 40, 360, 360)

    def test_document_detected(self):
        response = self.client.post("/scan/analyze", files={"image": png_upload(self.document)})
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(len(payload["document"]["corners"]), 4)
        self.assertTrue(payload["capture_ready"])
        self.assertEqual(payload["frame"], {"width": 400, "height": 400})
        self.assertIn("blur_score", payload["quality"])

    def test_area_bounds_from_form(self):
        response = self.client.post(
            "/scan/analyze",
            files={"image": png_upload(self.document)},
            data={"max_area": "0.5"},
        )
        payload = response.json()
        self.assertIsNone(payload["document"])
        self.assertFalse(payload["capture_ready"])

    def test_blank_frame(self):
        response = self.client.post("/scan/analyze", files={"image": png_upload(blank_frame(120, 90, 20))})
        payload = response.json()
        self.assertIsNone(payload["document"])
        self.assertTrue(payload["quality"]["is_low_light"])
        self.assertEqual(len(payload["quality"]["warnings"]), 2)

    def test_bad_image_bytes(self):
        response = self.client.post(
            "/scan/analyze",
            files={"image": ("front.jpg", b"not-an-image", "image/jpeg")},
        )
        self.assertEqual(response.status_code, 400)

    def test_unsupported_file_type(self):
        response = self.client.post(
            "/scan/analyze",
            files={"image": ("notes.txt", b"hello", "text/plain")},
        )
        self.assertEqual(response.status_code, 400)

    def test_truncated_png_is_400(self):
        data = frame_to_png(self.document)
        response = self.client.post(
            "/scan/analyze",
            files={"image": ("f.png", data[:len(data) // 2], "image/png")},
        )
        self.assertEqual(response.status_code, 400)

    def test_corrupt_pdf_is_400(self):
        with patch("scanner.file_converter.convert_from_path",
                   side_effect=PDFPageCountError("Unable to get page count.")):
            response = self.client.post(
                "/scan/analyze",
                files={"image": ("f.pdf", b"%PDF-garbage", "application/pdf")},
            )
        self.assertEqual(response.status_code, 400)

    def test_analysis_failure_is_500(self):
        with patch("app.detect_document_edges", side_effect=RuntimeError("boom")):
            response = self.client.post("/scan/analyze", files={"image": png_upload(self.document)})
        self.assertEqual(response.status_code, 500)
        self.assertIn("boom", response.json()["detail"])


class OverlayEndpointTests(TestCase):
    def test_overlay_png(self):
        frame = rectangle_frame(400, 400, 40, 40, 360, 360)
        response = TestClient(app).post("/scan/overlay", files={"image": png_upload(frame)})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["content-type"], "image/png")
        self.assertTrue(response.content.startswith(b"\x89PNG"))


class PhotoEndpointTests(TestCase):
    def test_valid_photo(self):
        response = TestClient(app).post("/photo/validate", files={"photo": png_upload(noise_frame(350, 450))})
        self.assertEqual(response.json(), {"is_valid": True, "errors": []})

    def test_small_photo(self):
        response = TestClient(app).post("/photo/validate", files={"photo": png_upload(noise_frame(100, 120))})
        payload = response.json()
        self.assertFalse(payload["is_valid"])
        self.assertEqual(len(payload["errors"]), 1)

    def test_validation_failure_is_500(self):
        with patch("app.validate_passport_photo", side_effect=RuntimeError("boom")):
            response = TestClient(app).post("/photo/validate", files={"photo": png_upload(noise_frame(350, 450))})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "Photo validation failed: boom")
