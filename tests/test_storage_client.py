"""
Object Store Tests
==================

Tests for the S3 and local object store backends.
"""

import asyncio
import io

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.stub import Stubber

from image_bundler.storage.client import LocalObjectStore, ObjectNotFound, S3ObjectStore


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class TestS3ObjectStore:

    def test_get_object(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_response(
            "get_object",
            {"Body": StreamingBody(io.BytesIO(b"jpeg-bytes"), len(b"jpeg-bytes"))},
            {"Bucket": "photos", "Key": "A1_1.jpeg"},
        )
        store = S3ObjectStore(client=s3_client)

        with stubber:
            data = asyncio.run(store.get_object("photos", "A1_1.jpeg"))

        assert data == b"jpeg-bytes"
        stubber.assert_no_pending_responses()

    @pytest.mark.parametrize("code, status", [("NoSuchKey", 404), ("404", 404), ("NotFound", 404)])
    def test_missing_key_is_object_not_found(self, s3_client, code, status):
        stubber = Stubber(s3_client)
        stubber.add_client_error(
            "get_object",
            service_error_code=code,
            http_status_code=status,
            expected_params={"Bucket": "photos", "Key": "A1_2.jpeg"},
        )
        store = S3ObjectStore(client=s3_client)

        with stubber, pytest.raises(ObjectNotFound) as exc_info:
            asyncio.run(store.get_object("photos", "A1_2.jpeg"))

        assert exc_info.value.key == "A1_2.jpeg"

    def test_access_denied_propagates(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_client_error(
            "get_object",
            service_error_code="AccessDenied",
            http_status_code=403,
        )
        store = S3ObjectStore(client=s3_client)

        with stubber, pytest.raises(ClientError):
            asyncio.run(store.get_object("photos", "A1_2.jpeg"))

    def test_put_object(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_response(
            "put_object",
            {},
            {
                "Bucket": "bundles",
                "Key": "A1.zip",
                "Body": b"zip",
                "ContentType": "application/zip",
            },
        )
        store = S3ObjectStore(client=s3_client)

        with stubber:
            asyncio.run(store.put_object("bundles", "A1.zip", b"zip", content_type="application/zip"))

        stubber.assert_no_pending_responses()


class TestLocalObjectStore:

    def test_put_then_get(self, tmp_path):
        store = LocalObjectStore(str(tmp_path))
        asyncio.run(store.put_object("bundles", "A1.zip", b"zip"))
        assert (tmp_path / "bundles" / "A1.zip").read_bytes() == b"zip"
        assert asyncio.run(store.get_object("bundles", "A1.zip")) == b"zip"

    def test_put_overwrites_without_leftovers(self, tmp_path):
        store = LocalObjectStore(str(tmp_path))
        asyncio.run(store.put_object("bundles", "A1.zip", b"old"))
        asyncio.run(store.put_object("bundles", "A1.zip", b"new"))
        assert [p.name for p in (tmp_path / "bundles").iterdir()] == ["A1.zip"]
        assert (tmp_path / "bundles" / "A1.zip").read_bytes() == b"new"

    def test_missing_object(self, tmp_path):
        store = LocalObjectStore(str(tmp_path))
        with pytest.raises(ObjectNotFound):
            asyncio.run(store.get_object("photos", "A1_1.jpeg"))
