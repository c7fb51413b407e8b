from fastapi import status
from fastapi.testclient import TestClient

from tests.consts import TEST_PUBLIC_BASE_URL

# Constants for testing
TEST_FILE_PATH = "test.txt"
TEST_FILE_CONTENT = b"Hello, world!"
TEST_IMAGE_PATH = "myfolder/img.jpg"
TEST_IMAGE_CONTENT = b"\xff\xd8\xff\xe0" + bytes(i % 251 for i in range(25812))


def test__put_object__returns_descriptor(client: TestClient):
    response = client.put(f"/v1/objects/{TEST_IMAGE_PATH}", content=TEST_IMAGE_CONTENT)

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {
        "path": TEST_IMAGE_PATH,
        "size": 25816,
        "title": None,
        "description": None,
        "url": f"{TEST_PUBLIC_BASE_URL}/v1/objects/{TEST_IMAGE_PATH}",
    }


def test__get_object__streams_uploaded_bytes(client: TestClient):
    client.put(f"/v1/objects/{TEST_IMAGE_PATH}", content=TEST_IMAGE_CONTENT)

    response = client.get(f"/v1/objects/{TEST_IMAGE_PATH}")

    assert response.status_code == status.HTTP_200_OK
    assert response.content == TEST_IMAGE_CONTENT
    assert len(response.content) == 25816
    assert response.headers["content-type"] == "application/octet-stream"
    assert response.headers["content-length"] == "25816"
    assert response.headers["content-disposition"] == 'attachment; filename="img.jpg"'


def test__put_object__overwrites_existing(client: TestClient):
    client.put(f"/v1/objects/{TEST_FILE_PATH}", content=TEST_FILE_CONTENT)

    updated_content = b"updated content"
    response = client.put(f"/v1/objects/{TEST_FILE_PATH}", content=updated_content)

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["size"] == len(updated_content)
    assert client.get(f"/v1/objects/{TEST_FILE_PATH}").content == updated_content


def test__put_object__metadata_headers(client: TestClient):
    response = client.put(
        f"/v1/objects/{TEST_FILE_PATH}",
        content=TEST_FILE_CONTENT,
        headers={"X-Object-Title": "Greeting", "X-Object-Description": "A friendly file"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Greeting"
    assert data["description"] == "A friendly file"


def test__put_object__zero_length(client: TestClient):
    response = client.put("/v1/objects/empty.bin", content=b"")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["size"] == 0

    response = client.get("/v1/objects/empty.bin")
    assert response.status_code == status.HTTP_200_OK
    assert response.content == b""


def test__upload_object__form_defaults_path_to_filename(client: TestClient):
    response = client.post(
        "/v1/objects",
        files={"file": ("report.pdf", b"%PDF-1.4 test", "application/pdf")},
        data={"title": "Quarterly report"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["path"] == "report.pdf"
    assert data["size"] == len(b"%PDF-1.4 test")
    assert data["title"] == "Quarterly report"
    assert data["description"] is None


def test__upload_object__form_with_explicit_path(client: TestClient):
    response = client.post(
        "/v1/objects",
        files={"file": ("report.pdf", b"%PDF-1.4 test", "application/pdf")},
        data={"path": "reports/2024/q3.pdf", "description": "third quarter"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["path"] == "reports/2024/q3.pdf"
    assert client.get("/v1/objects/reports/2024/q3.pdf").content == b"%PDF-1.4 test"


def test__list_objects__empty_bucket(client: TestClient):
    response = client.get("/v1/objects")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"objects": [], "count": 0}


def test__list_objects__with_prefix(client: TestClient):
    for i in range(5):
        client.put(f"/v1/objects/docs/file{i}.txt", content=TEST_FILE_CONTENT)
    client.put("/v1/objects/other/file.txt", content=TEST_FILE_CONTENT)

    response = client.get("/v1/objects", params={"prefix": "docs/"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["count"] == 5
    assert sorted(obj["path"] for obj in data["objects"]) == [f"docs/file{i}.txt" for i in range(5)]
    assert all(obj["size"] == len(TEST_FILE_CONTENT) for obj in data["objects"])
    assert all(obj["url"].startswith(f"{TEST_PUBLIC_BASE_URL}/v1/objects/docs/") for obj in data["objects"])


def test__list_objects__not_recursive(client: TestClient):
    client.put("/v1/objects/top.txt", content=TEST_FILE_CONTENT)
    client.put("/v1/objects/nested/deep.txt", content=TEST_FILE_CONTENT)

    response = client.get("/v1/objects", params={"recursive": "false"})

    assert response.status_code == status.HTTP_200_OK
    assert [obj["path"] for obj in response.json()["objects"]] == ["top.txt"]


def test__health(client: TestClient):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ok"
    assert data["ready"] is True
    assert data["components"] == {"api": "ready", "storage": "ready"}
