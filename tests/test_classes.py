async def test_create_and_list_classes(client, auth_headers):
    for name in ("Grade 2", "  Grade 1  "):
        resp = await client.post("/api/v1/classes", json={"name": name}, headers=auth_headers)
        assert resp.status_code == 201

    resp = await client.get("/api/v1/classes", headers=auth_headers)
    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Grade 1", "Grade 2"]


async def test_duplicate_class_name_conflicts(client, auth_headers):
    await client.post("/api/v1/classes", json={"name": "Grade 1"}, headers=auth_headers)
    resp = await client.post("/api/v1/classes", json={"name": "Grade 1"}, headers=auth_headers)
    assert resp.status_code == 409


async def test_blank_class_name_is_rejected(client, auth_headers):
    resp = await client.post("/api/v1/classes", json={"name": "   "}, headers=auth_headers)
    assert resp.status_code == 400


async def test_classes_are_scoped_to_school(client, api, other_school_headers):
    await api.create_class("Grade 1")
    resp = await client.get("/api/v1/classes", headers=other_school_headers)
    assert resp.status_code == 200
    assert resp.json() == []
