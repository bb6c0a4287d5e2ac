"""Integration tests for relay routes."""

import pytest
from httpx import AsyncClient
from tests.fakes import MiB, SOURCE_URL, FakeSource


@pytest.fixture
def source() -> FakeSource:
    return FakeSource(size=60 * MiB, content_type="video/mp4")


async def start_session(client: AsyncClient) -> str:
    response = await client.get("/", params={"url": SOURCE_URL})
    assert response.status_code == 200
    return response.json()["session"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_health_check(client: AsyncClient):
    """Test health check endpoint."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_session(client: AsyncClient):
    response = await client.get("/", params={"url": SOURCE_URL})

    assert response.status_code == 200
    body = response.json()
    assert body["total_chunks"] == 3
    assert body["chunk_size"] == 25 * MiB
    assert body["size"] == 60 * MiB
    assert body["type"] == "video/mp4"
    assert body["filename"] == "movie.mp4"
    assert "/upload?session=" in body["message"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_session_requires_url(client: AsyncClient):
    response = await client.get("/")

    assert response.status_code == 400
    assert response.json()["code"] == "MissingParameter"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_second_session_conflicts(client: AsyncClient):
    await start_session(client)

    response = await client.get("/", params={"url": SOURCE_URL})

    assert response.status_code == 409
    assert response.json()["code"] == "SessionAlreadyActive"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_content_length(client: AsyncClient, source: FakeSource):
    source.content_length = None

    response = await client.get("/", params={"url": SOURCE_URL})

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidSize"
    # slot stays free
    source.content_length = "auto"
    assert (await client.get("/", params={"url": SOURCE_URL})).status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unreachable_source(client: AsyncClient, source: FakeSource):
    source.head_status = 404

    response = await client.get("/", params={"url": SOURCE_URL})

    assert response.status_code == 400
    assert response.json()["code"] == "SourceUnreachable"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_chunk_and_repeat(client: AsyncClient, storage):
    session = await start_session(client)

    first = await client.get("/upload", params={"session": session, "chunk": 1, "folder": "/media/"})
    second = await client.get("/upload", params={"session": session, "chunk": 1})

    assert first.status_code == 200
    assert first.json() == {"chunk": 1, "uploaded": True, "already": False, "folder": "media"}
    assert second.status_code == 200
    assert second.json()["already"] is True
    assert storage.count("upload_part") == 1


@pytest.mark.asyncio
@pytest.mark.integration
@pytest.mark.parametrize(
    "params,status,code",
    [
        ({"chunk": 0}, 400, "MissingParameter"),
        ({"session": "SESSION"}, 400, "MissingParameter"),
        ({"session": "SESSION", "chunk": "one"}, 400, "MissingParameter"),
        ({"session": "session_stale_1", "chunk": 0}, 403, "SessionInactive"),
        ({"session": "SESSION", "chunk": 5}, 400, "InvalidChunkIndex"),
    ],
)
async def test_upload_chunk_rejections(client: AsyncClient, storage, params, status, code):
    session = await start_session(client)
    if params.get("session") == "SESSION":
        params = {**params, "session": session}

    response = await client.get("/upload", params=params)

    assert response.status_code == status
    body = response.json()
    assert body["code"] == code
    assert body["error"]
    assert storage.calls == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_upload_chunk_storage_failure_details(client: AsyncClient, storage):
    session = await start_session(client)
    storage.fail_upload_part = True

    response = await client.get("/upload", params={"session": session, "chunk": 2})

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "PartUploadFailed"
    assert body["details"]["chunk"] == 2
    assert body["details"]["part_number"] == 3
    assert "part rejected" in body["details"]["reason"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_folder_conflict(client: AsyncClient):
    session = await start_session(client)
    await client.get("/upload", params={"session": session, "chunk": 0, "folder": "a"})

    response = await client.get("/upload", params={"session": session, "chunk": 1, "folder": "b"})

    assert response.status_code == 409
    assert response.json()["code"] == "FolderConflict"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_progress_and_debug(client: AsyncClient):
    session = await start_session(client)
    await client.get("/upload", params={"session": session, "chunk": 0})

    progress = await client.get("/progress", params={"session": session})
    debug = await client.get("/debug", params={"session": session})

    assert progress.status_code == 200
    assert progress.json()["uploaded_chunks"] == 1
    assert progress.json()["completed"] is False
    assert debug.status_code == 200
    assert debug.json()["active_session"] == session
    assert debug.json()["session_data"]["uploaded"] == [True, False, False]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_progress_unknown_session(client: AsyncClient):
    response = await client.get("/progress", params={"session": "session_missing"})
    assert response.status_code == 404
    assert response.json()["code"] == "SessionNotFound"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_clear_frees_slot(client: AsyncClient, storage):
    session = await start_session(client)
    await client.get("/upload", params={"session": session, "chunk": 0})

    response = await client.get("/clear", params={"session": session})

    assert response.status_code == 200
    assert response.json()["aborted"] is True
    assert storage.count("abort") == 1
    assert (await client.get("/debug", params={"session": session})).status_code == 404
    assert (await client.get("/", params={"url": SOURCE_URL})).status_code == 200


@pytest.mark.asyncio
@pytest.mark.integration
async def test_clear_requires_session(client: AsyncClient):
    response = await client.get("/clear")
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cors_preflight(client: AsyncClient):
    response = await client.options(
        "/upload",
        headers={"Origin": "https://app.example.com", "Access-Control-Request-Method": "GET"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_plain_options(client: AsyncClient):
    response = await client.options("/progress")
    assert response.status_code == 204
