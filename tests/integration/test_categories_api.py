def test_create_and_list_categories(client, auth_headers):
    response = client.post(
        "/api/categories",
        json={"name": "Marketing", "description": "Campaigns", "color": "#ff8800", "icon": "megaphone"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["name"] == "Marketing"
    assert data["promptCount"] == 0

    listed = client.get("/api/categories").json()["data"]
    assert [c["name"] for c in listed] == ["Marketing"]


def test_create_category_requires_auth(client):
    assert client.post("/api/categories", json={"name": "Marketing"}).status_code == 401


def test_create_duplicate_category(client, auth_headers):
    client.post("/api/categories", json={"name": "Marketing"}, headers=auth_headers)
    response = client.post("/api/categories", json={"name": "Marketing"}, headers=auth_headers)
    assert response.status_code == 409
    assert response.json() == {"error": "Category with this name already exists"}


def test_create_category_without_name(client, auth_headers):
    response = client.post("/api/categories", json={}, headers=auth_headers)
    assert response.status_code == 400


def test_update_category(client, auth_headers):
    category = client.post("/api/categories", json={"name": "Marketing"}, headers=auth_headers).json()["data"]
    response = client.put(f"/api/categories/{category['id']}", json={"color": "#000000"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["data"]["color"] == "#000000"
    assert response.json()["data"]["name"] == "Marketing"


def test_update_missing_category(client, auth_headers):
    response = client.put("/api/categories/missing", json={"name": "X"}, headers=auth_headers)
    assert response.status_code == 404


def test_delete_category_blocked_while_in_use(client, auth_headers, create_prompt):
    """Test a category with prompts cannot be deleted until they are gone."""
    category = client.post("/api/categories", json={"name": "Marketing"}, headers=auth_headers).json()["data"]
    prompt = create_prompt(category="Marketing")

    response = client.delete(f"/api/categories/{category['id']}", headers=auth_headers)
    assert response.status_code == 400
    assert response.json() == {"error": "Cannot delete category that contains prompts"}

    client.delete(f"/api/prompts/{prompt['id']}", headers=auth_headers)
    response = client.delete(f"/api/categories/{category['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert client.get("/api/categories").json()["data"] == []
