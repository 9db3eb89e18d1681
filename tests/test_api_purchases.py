def _order(client, headers, supplier_id=None, discount=3.0):
    return client.post("/purchases", headers=headers, json={
        "supplier_id": supplier_id,
        "document_number": "PO-001",
        "discount": discount,
        "items": [
            {"product_name": "Cimento", "quantity": 2, "unit_price": 10.0},
            {"product_name": "Areia", "quantity": 1, "unit_price": 5.0},
        ],
    })


def test_total_is_derived_on_create(client, purchasing_headers, supplier_factory):
    response = _order(client, purchasing_headers, supplier_factory())

    assert response.status_code == 201
    body = response.json()
    assert body["total_value"] == 22.0
    assert body["status"] == "pending"
    assert body["supplier_name"] == "Casa do Construtor"
    assert [i["total_price"] for i in body["items"]] == [20.0, 5.0]


def test_item_name_comes_from_product(client, purchasing_headers, product_factory):
    product_id = product_factory(name="Tijolo 8 furos")
    response = client.post("/purchases", headers=purchasing_headers, json={
        "items": [{"product_id": product_id, "quantity": 100, "unit_price": 0.9}]})

    assert response.json()["items"][0]["product_name"] == "Tijolo 8 furos"
    assert response.json()["total_value"] == 90.0


def test_discount_larger_than_subtotal(client, purchasing_headers):
    assert _order(client, purchasing_headers, discount=100.0).status_code == 422


def test_order_needs_items(client, purchasing_headers):
    assert client.post("/purchases", headers=purchasing_headers, json={"items": []}).status_code == 422


def test_status_flow(client, purchasing_headers):
    purchase_id = _order(client, purchasing_headers).json()["id"]

    skipped = client.patch(f"/purchases/{purchase_id}/status", headers=purchasing_headers,
                           json={"status": "delivered"})
    assert skipped.status_code == 422

    for status in ("approved", "delivered"):
        response = client.patch(f"/purchases/{purchase_id}/status", headers=purchasing_headers,
                                json={"status": status})
        assert response.status_code == 200
        assert response.json()["status"] == status

    reopened = client.patch(f"/purchases/{purchase_id}/status", headers=purchasing_headers,
                            json={"status": "pending"})
    assert reopened.status_code == 422


def test_list_by_status(client, purchasing_headers):
    _order(client, purchasing_headers)
    second = _order(client, purchasing_headers).json()["id"]
    client.patch(f"/purchases/{second}/status", headers=purchasing_headers, json={"status": "cancelled"})

    page = client.get("/purchases", headers=purchasing_headers, params={"status": "pending"}).json()
    assert page["total"] == 1


def test_storekeeper_cannot_see_purchases(client, storekeeper_headers):
    assert client.get("/purchases", headers=storekeeper_headers).status_code == 403


def test_pdf_and_export(client, purchasing_headers, supplier_factory):
    purchase_id = _order(client, purchasing_headers, supplier_factory()).json()["id"]

    pdf = client.get(f"/purchases/{purchase_id}/pdf", headers=purchasing_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.content.startswith(b"%PDF")

    csv = client.get("/purchases/export", headers=purchasing_headers)
    lines = csv.content.decode("utf-8-sig").splitlines()
    assert lines[0] == "Order no.;Date;Supplier;Items;Total;Status"
    assert lines[1].endswith(";Casa do Construtor;2;22.00;Pending")


def test_delete_purchase(client, purchasing_headers):
    purchase_id = _order(client, purchasing_headers).json()["id"]
    assert client.delete(f"/purchases/{purchase_id}", headers=purchasing_headers).status_code == 200
    assert client.get(f"/purchases/{purchase_id}", headers=purchasing_headers).status_code == 404
