import re
from decimal import Decimal


async def _student(api):
    g1 = await api.create_class("Grade 1")
    ft = await api.create_fee_type("Tuition", "1000", [g1["id"]])
    return await api.register_student("Asha", "1", g1["id"], [{"fee_type_id": ft["id"]}])


async def test_record_payment_generates_receipt(api):
    student = await _student(api)
    payment = await api.pay(student["id"], "250.50", mode_of_payment="upi")

    assert Decimal(payment["amount_paid"]) == Decimal("250.50")
    assert payment["mode_of_payment"] == "upi"
    assert re.fullmatch(r"R-\d{13}", payment["receipt_number"])


async def test_record_payment_keeps_given_receipt(api):
    student = await _student(api)
    payment = await api.pay(student["id"], "100", receipt_number="RC-42", date="2024-02-15T10:00:00")
    assert payment["receipt_number"] == "RC-42"
    assert payment["date"].startswith("2024-02-15")
    assert payment["mode_of_payment"] == "cash"


async def test_amount_must_be_positive(client, api):
    student = await _student(api)
    for amount in ("0", "-5"):
        resp = await client.post(
            "/api/v1/payments",
            json={"student_id": student["id"], "amount_paid": amount},
            headers=api.headers,
        )
        assert resp.status_code == 422


async def test_unknown_mode_is_rejected(client, api):
    student = await _student(api)
    resp = await client.post(
        "/api/v1/payments",
        json={"student_id": student["id"], "amount_paid": "10", "mode_of_payment": "barter"},
        headers=api.headers,
    )
    assert resp.status_code == 422


async def test_payment_for_unknown_student(client, auth_headers):
    resp = await client.post(
        "/api/v1/payments",
        json={"student_id": "00000000-0000-0000-0000-000000000000", "amount_paid": "10"},
        headers=auth_headers,
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Student not found"


async def test_student_history_newest_first(client, api):
    student = await _student(api)
    await api.pay(student["id"], "500", date="2024-01-05T09:00:00")
    await api.pay(student["id"], "300", date="2024-02-05T09:00:00")

    resp = await client.get(f"/api/v1/payments/student/{student['id']}", headers=api.headers)
    assert resp.status_code == 200
    assert [Decimal(p["amount_paid"]) for p in resp.json()] == [Decimal("300"), Decimal("500")]


async def test_recent_payments_include_student(client, api):
    student = await _student(api)
    await api.pay(student["id"], "500")

    resp = await client.get("/api/v1/payments", params={"limit": 10}, headers=api.headers)
    assert resp.status_code == 200
    [row] = resp.json()
    assert row["student_name"] == "Asha"
    assert row["roll_no"] == "1"


async def test_accountant_can_record_payment(client, api, accountant_headers):
    student = await _student(api)
    resp = await client.post(
        "/api/v1/payments",
        json={"student_id": student["id"], "amount_paid": "75"},
        headers=accountant_headers,
    )
    assert resp.status_code == 201


async def test_sub_cent_amount_is_rejected(client, api):
    student = await _student(api)
    resp = await client.post(
        "/api/v1/payments",
        json={"student_id": student["id"], "amount_paid": "0.001"},
        headers=api.headers,
    )
    assert resp.status_code == 422

    resp = await client.get(f"/api/v1/payments/student/{student['id']}", headers=api.headers)
    assert resp.json() == []
