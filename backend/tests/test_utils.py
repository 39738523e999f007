"""Unit tests for app.utils payload helpers."""
import base64
import pytest
from app.core.errors import InvalidInput
from app.utils import decode_base64_payload


class TestDecodeBase64Payload:
    def test_bare(self):
        assert decode_base64_payload(base64.b64encode(b"%PDF-1.7").decode()) == b"%PDF-1.7"

    def test_data_url(self):
        payload = "data:application/pdf;base64," + base64.b64encode(b"%PDF").decode()
        assert decode_base64_payload(payload) == b"%PDF"

    def test_line_wrapped(self):
        encoded = base64.b64encode(b"x" * 100).decode()
        wrapped = "\n".join(encoded[i:i + 76] for i in range(0, len(encoded), 76))
        assert decode_base64_payload(wrapped) == b"x" * 100

    @pytest.mark.parametrize("payload", [None, "not base64!", "data:text/plain,hello"])
    def test_rejected(self, payload):
        with pytest.raises(InvalidInput):
            decode_base64_payload(payload)
