import pytest
from httpx import AsyncClient
from unittest.mock import Mock
from botocore.exceptions import ClientError
from app.main import app
from app.uploads.storage import ObjectStorage, get_object_storage


@pytest.fixture
def s3_client():
    client = Mock()
    client.generate_presigned_url.return_value = "https://storage.test/signed"
    app.dependency_overrides[get_object_storage] = lambda: ObjectStorage(
        client=client, public_base_url="https://cdn.test/", expires_in=120
    )
    return client


@pytest.mark.asyncio
async def test_upload_url(client: AsyncClient, s3_client, guest, guest_headers):
    response = await client.post("/uploads/url", json={"bucket": "avatars"}, headers=guest_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["uploadUrl"] == "https://storage.test/signed"
    owner, _, object_id = data["fileName"].partition("/")
    assert owner == str(guest.id)
    assert object_id
    assert data["publicUrl"] == f"https://cdn.test/avatars/{data['fileName']}"

    s3_client.generate_presigned_url.assert_called_once_with(
        "put_object",
        Params={"Bucket": "avatars", "Key": data["fileName"]},
        ExpiresIn=120,
    )


@pytest.mark.asyncio
async def test_upload_url_unique_names(client: AsyncClient, s3_client, guest_headers):
    first = await client.post("/uploads/url", json={"bucket": "gallery"}, headers=guest_headers)
    second = await client.post("/uploads/url", json={"bucket": "gallery"}, headers=guest_headers)
    assert first.json()["fileName"] != second.json()["fileName"]


@pytest.mark.asyncio
async def test_upload_url_unknown_bucket(client: AsyncClient, s3_client, guest_headers):
    response = await client.post("/uploads/url", json={"bucket": "backups"}, headers=guest_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_upload_url_storage_failure(client: AsyncClient, s3_client, practitioner_headers):
    s3_client.generate_presigned_url.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject"
    )

    response = await client.post("/uploads/url", json={"bucket": "videos"}, headers=practitioner_headers)

    assert response.status_code == 502


@pytest.mark.asyncio
async def test_upload_url_unauthorized(client: AsyncClient):
    response = await client.post("/uploads/url", json={"bucket": "avatars"})
    assert response.status_code in [401, 403]
