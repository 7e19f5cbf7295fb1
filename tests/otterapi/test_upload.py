"""
Unit tests for upload policy negotiation and the object store upload
"""

import io
import os
import json
import tempfile
import unittest
from pathlib import Path

from tests.fakes import (
    POST_RESPONSE,
    UPLOAD_PARAMS,
    FakeTransport,
    make_response,
    multipart_fields,
    sent_cookies,
    upload_params_response,
)
from transcribe.core.exceptions import ParseError, ProtocolError, UploadError
from transcribe.core.models import UploadPolicy, UploadReceipt
from transcribe.otterapi.object_store import (
    ObjectStoreUploader,
    build_form,
    parse_upload_response,
)
from transcribe.otterapi.upload_params import (
    UploadParamsNegotiator,
    format_status,
    parse_upload_params,
)


def sample_policy(**overrides) -> UploadPolicy:
    return parse_upload_params(json.dumps({"status": "ok", "data": dict(UPLOAD_PARAMS, **overrides)}))


class NamedBytesIO(io.BytesIO):
    def __init__(self, data: bytes, name: str):
        super().__init__(data)
        self.name = name


class TestParseUploadParams(unittest.TestCase):
    """Test parse_upload_params"""

    def test_parses_all_fields(self):
        policy = sample_policy()

        self.assertEqual(policy.form_action, "https://s3.example.com/bucket")
        self.assertEqual(policy.key, "k1")
        self.assertEqual(policy.algorithm, UPLOAD_PARAMS["x-amz-algorithm"])
        self.assertEqual(policy.signature, UPLOAD_PARAMS["x-amz-signature"])
        self.assertEqual(policy.date, UPLOAD_PARAMS["x-amz-date"])
        self.assertEqual(policy.policy, UPLOAD_PARAMS["policy"])
        self.assertEqual(policy.credential, UPLOAD_PARAMS["x-amz-credential"])
        self.assertEqual(policy.acl, "private")
        self.assertEqual(policy.success_action_status, "201")

    def test_form_fields_reproduce_response_values(self):
        policy = sample_policy()

        fields = dict(policy.form_fields())

        for name, value in fields.items():
            self.assertEqual(value, str(UPLOAD_PARAMS[name]))
        self.assertNotIn("form_action", fields)
        self.assertEqual(len(policy.form_fields()), 8)

    def test_success_action_status_formats(self):
        self.assertEqual(format_status(201), "201")
        self.assertEqual(format_status(201.0), "201")
        self.assertEqual(format_status("201"), "201")
        self.assertEqual(format_status(201.5), "201.5")

    def test_signed_values_are_not_altered(self):
        policy = sample_policy(policy="  padded+/=  ", key="user/ü file.mp3")

        self.assertEqual(policy.policy, "  padded+/=  ")
        self.assertEqual(policy.key, "user/ü file.mp3")

    def test_malformed_json_raises_parse_error(self):
        with self.assertRaises(ParseError) as ctx:
            parse_upload_params("<html>502 Bad Gateway</html>")
        self.assertEqual(ctx.exception.body, "<html>502 Bad Gateway</html>")

    def test_parse_error_is_a_protocol_error(self):
        with self.assertRaises(ProtocolError):
            parse_upload_params("{")

    def test_non_ok_status_raises_protocol_error(self):
        body = json.dumps({"status": "error", "data": UPLOAD_PARAMS})
        with self.assertRaises(ProtocolError) as ctx:
            parse_upload_params(body)
        self.assertNotIsInstance(ctx.exception, ParseError)

    def test_missing_status_is_accepted(self):
        policy = parse_upload_params(json.dumps({"data": UPLOAD_PARAMS}))
        self.assertEqual(policy.key, "k1")

    def test_missing_data_raises_protocol_error(self):
        with self.assertRaises(ProtocolError):
            parse_upload_params(json.dumps({"status": "ok"}))

    def test_missing_field_is_named(self):
        data = dict(UPLOAD_PARAMS)
        del data["x-amz-signature"]

        with self.assertRaises(ProtocolError) as ctx:
            parse_upload_params(json.dumps({"status": "ok", "data": data}))

        self.assertIn("x-amz-signature", str(ctx.exception))


class TestUploadParamsNegotiator(unittest.TestCase):
    """Test UploadParamsNegotiator"""

    def test_request_carries_session_cookie(self):
        transport = FakeTransport([upload_params_response()])

        policy = UploadParamsNegotiator(transport, timeout=7).get_upload_params("sess456")

        request = transport.requests[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.url, "https://otter.ai/forward/api/v1/speech_upload_params")
        self.assertEqual(sent_cookies(request), {"sessionid": "sess456"})
        self.assertEqual(transport.timeouts, [7])
        self.assertEqual(policy.form_action, "https://s3.example.com/bucket")

    def test_error_carries_status_code(self):
        transport = FakeTransport([make_response(status_code=500, body="oops")])

        with self.assertRaises(ParseError) as ctx:
            UploadParamsNegotiator(transport).get_upload_params("sess456")

        self.assertEqual(ctx.exception.status_code, 500)


class TestParseUploadResponse(unittest.TestCase):
    """Test parse_upload_response"""

    def test_parses_post_response(self):
        receipt = parse_upload_response(POST_RESPONSE)

        self.assertEqual(
            receipt,
            UploadReceipt(
                location="https://s3.example.com/bucket/k1",
                bucket="speech-bucket",
                key="k1",
                etag='"9b2cf535f27731c974343645a3985328"',
            ),
        )

    def test_accepts_bytes_and_namespace(self):
        body = (
            b'<PostResponse xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
            b"<Bucket>b</Bucket><Key>a/b.mp3</Key></PostResponse>"
        )
        receipt = parse_upload_response(body)

        self.assertEqual(receipt.bucket, "b")
        self.assertEqual(receipt.key, "a/b.mp3")
        self.assertEqual(receipt.etag, "")

    def test_malformed_xml_raises_parse_error(self):
        with self.assertRaises(ParseError):
            parse_upload_response("<PostResponse><Bucket>b</Buck")

    def test_wrong_root_raises_parse_error(self):
        with self.assertRaises(ParseError):
            parse_upload_response("<Error><Code>AccessDenied</Code></Error>")

    def test_entity_expansion_is_rejected(self):
        body = (
            '<?xml version="1.0"?><!DOCTYPE r [<!ENTITY a "aaaa">]>'
            "<PostResponse><Bucket>&a;</Bucket><Key>k</Key></PostResponse>"
        )
        with self.assertRaises(ParseError):
            parse_upload_response(body)

    def test_missing_key_raises_protocol_error(self):
        with self.assertRaises(ProtocolError):
            parse_upload_response("<PostResponse><Bucket>b</Bucket></PostResponse>")


class TestObjectStoreUploader(unittest.TestCase):
    """Test ObjectStoreUploader"""

    def setUp(self):
        self.policy = sample_policy()
        self.audio = NamedBytesIO(b"RIFF\x00\x01fake-wave-data", "/tmp/recordings/meeting.wav")

    def test_multipart_body_fields_in_order(self):
        transport = FakeTransport([make_response(status_code=201, body=POST_RESPONSE)])

        ObjectStoreUploader(transport).upload(self.audio, self.policy)

        request = transport.requests[0]
        fields = multipart_fields(transport.bodies[0], request.headers["Content-Type"])

        self.assertEqual(
            [name for name, _, _ in fields],
            [
                "x-amz-algorithm",
                "x-amz-signature",
                "key",
                "x-amz-date",
                "policy",
                "success_action_status",
                "x-amz-credential",
                "acl",
                "file",
            ],
        )
        for (name, filename, content), (field_name, value) in zip(fields, self.policy.form_fields()):
            self.assertEqual(name, field_name)
            self.assertIsNone(filename)
            self.assertEqual(content, value.encode("utf-8"))

        name, filename, content = fields[-1]
        self.assertEqual(filename, "meeting.wav")
        self.assertEqual(content, b"RIFF\x00\x01fake-wave-data")

    def test_request_shape(self):
        transport = FakeTransport([make_response(status_code=201, body=POST_RESPONSE)])

        receipt = ObjectStoreUploader(transport, timeout=300).upload(self.audio, self.policy)

        request = transport.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(request.url, "https://s3.example.com/bucket")
        self.assertTrue(request.headers["Content-Type"].startswith("multipart/form-data; boundary="))
        self.assertEqual(int(request.headers["Content-Length"]), len(transport.bodies[0]))
        self.assertNotIn("Cookie", request.headers)
        self.assertEqual(transport.timeouts, [300])
        self.assertEqual(receipt.bucket, "speech-bucket")
        self.assertEqual(receipt.key, "k1")

    def test_form_is_streamed_from_the_file(self):
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "long.mp3"
            path.write_bytes(b"\xff\xfb" * 4096)

            with open(path, "rb") as audio_file:
                form = build_form(audio_file, self.policy)
                self.assertEqual(audio_file.tell(), 0)

                body = form.read()

                self.assertEqual(audio_file.tell(), 8192)
                self.assertEqual(len(body), form.len)

    def test_pipe_is_rejected_before_sending(self):
        read_fd, write_fd = os.pipe()
        self.addCleanup(os.close, write_fd)
        transport = FakeTransport([make_response(status_code=201, body=POST_RESPONSE)])

        with os.fdopen(read_fd, "rb") as pipe_in:
            with self.assertRaises(UploadError):
                build_form(pipe_in, self.policy)
            with self.assertRaises(UploadError):
                ObjectStoreUploader(transport).upload(pipe_in, self.policy)

        self.assertEqual(transport.requests, [])

    def test_rejected_upload_raises_upload_error(self):
        body = "<Error><Code>AccessDenied</Code></Error>"
        transport = FakeTransport([make_response(status_code=403, body=body)])

        with self.assertRaises(UploadError) as ctx:
            ObjectStoreUploader(transport).upload(self.audio, self.policy)

        self.assertEqual(ctx.exception.status_code, 403)
        self.assertEqual(ctx.exception.body, body)

    def test_malformed_acknowledgement_raises_parse_error(self):
        transport = FakeTransport([make_response(status_code=201, body="not xml")])

        with self.assertRaises(ParseError) as ctx:
            ObjectStoreUploader(transport).upload(self.audio, self.policy)

        self.assertEqual(ctx.exception.status_code, 201)


if __name__ == "__main__":
    unittest.main()
