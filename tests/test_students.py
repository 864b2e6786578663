from datetime import date
from decimal import Decimal

from sqlalchemy import func, select

from sfms.core.models import StudentFeeType

PAST = date(2024, 1, 10)
FUTURE = date(2024, 6, 1)


async def _setup(api):
    g1 = await api.create_class("Grade 1")
    tuition = await api.create_fee_type("Tuition", "1000", [g1["id"]], PAST)
    transport = await api.create_fee_type("Transport", "500", [g1["id"]], FUTURE)
    return g1, tuition, transport


async def test_register_student_snapshots_total(api):
    g1, tuition, transport = await _setup(api)
    student = await api.register_student(
        "Asha",
        "1",
        g1["id"],
        [
            {"fee_type_id": tuition["id"], "discount": "100", "discount_description": "Sibling"},
            {"fee_type_id": transport["id"]},
        ],
    )
    assert student["class_name"] == "Grade 1"
    assert Decimal(student["total_fees"]) == Decimal("1400")
    lines = {l["name"]: l for l in student["fee_lines"]}
    assert Decimal(lines["Tuition"]["net_payable"]) == Decimal("900")
    assert lines["Tuition"]["discount_description"] == "Sibling"
    assert Decimal(lines["Transport"]["assigned_amount"]) == Decimal("500")


async def test_register_with_custom_amount(api):
    g1, tuition, _ = await _setup(api)
    student = await api.register_student(
        "Ravi", "2", g1["id"], [{"fee_type_id": tuition["id"], "assigned_amount": "800"}]
    )
    assert Decimal(student["total_fees"]) == Decimal("800")


async def test_fee_type_not_linked_to_class_is_rejected(client, api):
    g1, tuition, _ = await _setup(api)
    g2 = await api.create_class("Grade 2")
    resp = await client.post(
        "/api/v1/students",
        json={
            "name": "Asha",
            "roll_no": "1",
            "class_id": g2["id"],
            "academic_year": "2024",
            "fee_types": [{"fee_type_id": tuition["id"]}],
        },
        headers=api.headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid fee type selection (not applicable to this class)"


async def test_duplicate_fee_type_selection_is_rejected(client, api):
    g1, tuition, _ = await _setup(api)
    resp = await client.post(
        "/api/v1/students",
        json={
            "name": "Asha",
            "roll_no": "1",
            "class_id": g1["id"],
            "academic_year": "2024",
            "fee_types": [{"fee_type_id": tuition["id"]}, {"fee_type_id": tuition["id"]}],
        },
        headers=api.headers,
    )
    assert resp.status_code == 400


async def test_missing_required_fields(client, api):
    g1, _, _ = await _setup(api)
    resp = await client.post(
        "/api/v1/students",
        json={"name": "Asha", "class_id": g1["id"], "academic_year": "2024"},
        headers=api.headers,
    )
    assert resp.status_code == 422

    resp = await client.post(
        "/api/v1/students",
        json={"name": "  ", "roll_no": "1", "class_id": g1["id"], "academic_year": "2024"},
        headers=api.headers,
    )
    assert resp.status_code == 400


async def test_list_filters_by_class_and_search(client, api):
    g1, tuition, _ = await _setup(api)
    g2 = await api.create_class("Grade 2")
    await api.register_student("Asha Rao", "A-1", g1["id"], [{"fee_type_id": tuition["id"]}])
    await api.register_student("Ravi Kumar", "B-7", g2["id"], [])

    resp = await client.get("/api/v1/students", params={"class_id": g2["id"]}, headers=api.headers)
    assert [s["name"] for s in resp.json()] == ["Ravi Kumar"]

    resp = await client.get("/api/v1/students", params={"search": "asha"}, headers=api.headers)
    assert [s["name"] for s in resp.json()] == ["Asha Rao"]

    resp = await client.get("/api/v1/students", params={"search": "b-7"}, headers=api.headers)
    assert [s["name"] for s in resp.json()] == ["Ravi Kumar"]


async def test_detail_summary_per_view(client, api):
    g1, tuition, transport = await _setup(api)
    student = await api.register_student(
        "Asha",
        "1",
        g1["id"],
        [{"fee_type_id": tuition["id"], "discount": "100"}, {"fee_type_id": transport["id"]}],
    )
    await api.pay(student["id"], "900")

    resp = await client.get(
        f"/api/v1/students/{student['id']}",
        params={"view": "due", "as_of": "2024-03-01"},
        headers=api.headers,
    )
    assert resp.status_code == 200
    summary = resp.json()["summary"]
    assert Decimal(summary["total_assigned"]) == Decimal("1400")
    assert Decimal(summary["total_due"]) == Decimal("900")
    assert Decimal(summary["balance"]) == Decimal("0")
    assert summary["status"] == "paid"
    assert len(resp.json()["payments"]) == 1

    resp = await client.get(
        f"/api/v1/students/{student['id']}",
        params={"view": "total", "as_of": "2024-03-01"},
        headers=api.headers,
    )
    assert resp.json()["summary"]["status"] == "partially_paid"


async def test_update_replaces_assignments(client, api, db_session):
    g1, tuition, transport = await _setup(api)
    student = await api.register_student(
        "Asha", "1", g1["id"], [{"fee_type_id": tuition["id"]}, {"fee_type_id": transport["id"]}]
    )
    resp = await client.put(
        f"/api/v1/students/{student['id']}",
        json={
            "name": "Asha R",
            "roll_no": "1",
            "class_id": g1["id"],
            "academic_year": "2025",
            "status": "inactive",
            "fee_types": [{"fee_type_id": transport["id"], "discount": "50"}],
        },
        headers=api.headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Asha R"
    assert body["status"] == "inactive"
    assert Decimal(body["total_fees"]) == Decimal("450")
    assert [l["name"] for l in body["fee_lines"]] == ["Transport"]

    count = (await db_session.execute(select(func.count(StudentFeeType.id)))).scalar()
    assert count == 1


async def test_failed_update_leaves_assignments_untouched(client, api, db_session):
    g1, tuition, _ = await _setup(api)
    g2 = await api.create_class("Grade 2")
    student = await api.register_student("Asha", "1", g1["id"], [{"fee_type_id": tuition["id"]}])

    resp = await client.put(
        f"/api/v1/students/{student['id']}",
        json={
            "name": "Asha",
            "roll_no": "1",
            "class_id": g2["id"],
            "academic_year": "2024",
            "fee_types": [{"fee_type_id": tuition["id"]}],
        },
        headers=api.headers,
    )
    assert resp.status_code == 400

    resp = await client.get(f"/api/v1/students/{student['id']}", headers=api.headers)
    assert resp.json()["class_name"] == "Grade 1"
    assert [l["name"] for l in resp.json()["fee_lines"]] == ["Tuition"]


async def test_delete_student(client, api):
    g1, tuition, _ = await _setup(api)
    student = await api.register_student("Asha", "1", g1["id"], [{"fee_type_id": tuition["id"]}])

    resp = await client.delete(
        f"/api/v1/students/{student['id']}", params={"confirm_name": "asha"}, headers=api.headers
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Student name does not match. Deletion aborted."

    resp = await client.delete(
        f"/api/v1/students/{student['id']}", params={"confirm_name": "Asha"}, headers=api.headers
    )
    assert resp.status_code == 204
    resp = await client.get(f"/api/v1/students/{student['id']}", headers=api.headers)
    assert resp.status_code == 404


async def test_delete_refused_when_payments_exist(client, api):
    g1, tuition, _ = await _setup(api)
    student = await api.register_student("Asha", "1", g1["id"], [{"fee_type_id": tuition["id"]}])
    await api.pay(student["id"], "100")

    resp = await client.delete(
        f"/api/v1/students/{student['id']}", params={"confirm_name": "Asha"}, headers=api.headers
    )
    assert resp.status_code == 409


async def test_student_of_other_school_is_not_found(client, api, other_school_headers):
    g1, _, _ = await _setup(api)
    student = await api.register_student("Asha", "1", g1["id"], [])
    resp = await client.get(f"/api/v1/students/{student['id']}", headers=other_school_headers)
    assert resp.status_code == 404


async def test_fee_amounts_limited_to_cents(client, api):
    g1, tuition, transport = await _setup(api)
    for selection in (
        {"fee_type_id": tuition["id"], "assigned_amount": "0.005"},
        {"fee_type_id": tuition["id"], "discount": "10.005"},
    ):
        resp = await client.post(
            "/api/v1/students",
            json={
                "name": "Asha",
                "roll_no": "1",
                "class_id": g1["id"],
                "academic_year": "2024",
                "fee_types": [selection],
            },
            headers=api.headers,
        )
        assert resp.status_code == 422

    resp = await client.get("/api/v1/students", headers=api.headers)
    assert resp.json() == []


async def test_snapshot_matches_recomputed_total(client, api):
    g1, tuition, transport = await _setup(api)
    student = await api.register_student(
        "Asha",
        "1",
        g1["id"],
        [
            {"fee_type_id": tuition["id"], "assigned_amount": "0.01"},
            {"fee_type_id": transport["id"], "assigned_amount": "0.01"},
        ],
    )
    resp = await client.get(f"/api/v1/students/{student['id']}", headers=api.headers)
    body = resp.json()
    assert Decimal(body["total_fees"]) == Decimal(body["summary"]["total_assigned"]) == Decimal("0.02")


async def test_over_discount_warned_once_on_write(client, api, caplog):
    g1, tuition, _ = await _setup(api)
    with caplog.at_level("WARNING"):
        student = await api.register_student(
            "Asha", "1", g1["id"], [{"fee_type_id": tuition["id"], "assigned_amount": "100", "discount": "150"}]
        )
        await client.get(f"/api/v1/students/{student['id']}", headers=api.headers)
        await client.get("/api/v1/ledger", headers=api.headers)

    warnings = [r for r in caplog.records if "exceeds assigned amount" in r.getMessage()]
    assert len(warnings) == 1
    assert warnings[0].name == "sfms.api.v1.students.service"
    assert student["fee_lines"][0]["over_discounted"] is True
    assert Decimal(student["total_fees"]) == Decimal("-50")
