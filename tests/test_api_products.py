def test_create_product_normalizes_code(client, storekeeper_headers):
    response = client.post("/products", headers=storekeeper_headers, json={
        "code": " cim-01 ", "name": "Cimento", "min_stock": 10, "current_stock": 25, "category": "Construção",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["code"] == "CIM-01"
    assert body["current_stock"] == 25
    assert body["status"] == "normal"


def test_duplicate_code(client, storekeeper_headers, product_factory):
    product_factory(code="CIM-01")
    response = client.post("/products", headers=storekeeper_headers, json={"code": "cim-01", "name": "Outro"})
    assert response.status_code == 422


def test_purchasing_cannot_create_products(client, purchasing_headers):
    response = client.post("/products", headers=purchasing_headers, json={"code": "X", "name": "X"})
    assert response.status_code == 403


def test_edit_does_not_touch_stock(client, storekeeper_headers, product_factory):
    product_id = product_factory(current_stock=7)
    response = client.patch(f"/products/{product_id}", headers=storekeeper_headers,
                            json={"name": "Cimento CP III", "current_stock": 500})

    assert response.status_code == 200
    assert response.json()["name"] == "Cimento CP III"
    assert response.json()["current_stock"] == 7


def test_list_filters_by_status(client, storekeeper_headers, product_factory):
    product_factory(code="A", name="A", current_stock=2, min_stock=10)
    product_factory(code="B", name="B", current_stock=15, min_stock=10)
    product_factory(code="C", name="C", current_stock=80, min_stock=10)

    response = client.get("/products", headers=storekeeper_headers, params={"status": "critical"})
    assert response.status_code == 200
    assert [p["code"] for p in response.json()["items"]] == ["A"]
    assert response.json()["total"] == 1

    everything = client.get("/products", headers=storekeeper_headers).json()
    assert everything["total"] == 3


def test_categories(client, storekeeper_headers, product_factory):
    product_factory(code="A", category="Hidráulica")
    product_factory(code="B", category="Elétrica")
    product_factory(code="C", category="")

    response = client.get("/products/unique/categories", headers=storekeeper_headers)
    assert response.json() == ["Elétrica", "Hidráulica"]


def test_missing_product(client, storekeeper_headers):
    assert client.get("/products/999", headers=storekeeper_headers).status_code == 404


def test_product_ledger(client, storekeeper_headers, product_factory):
    product_id = product_factory(current_stock=0)
    client.post("/stock/entries", headers=storekeeper_headers, json={
        "product_id": product_id, "quantity": 10, "unit_price": 5.0, "date": "2024-03-01T10:00:00Z"})
    client.post("/stock/entries", headers=storekeeper_headers, json={
        "product_id": product_id, "quantity": 5, "unit_price": 6.0, "date": "2024-03-05T10:00:00Z"})
    client.post("/stock/exits", headers=storekeeper_headers, json={"product_id": product_id, "quantity": 3})

    ledger = client.get(f"/products/{product_id}/ledger", headers=storekeeper_headers).json()

    assert ledger["current_stock"] == 12
    assert ledger["entries"] == 15
    assert ledger["exits"] == 3
    assert ledger["initial_stock"] == 0
    assert round(ledger["average_cost"], 2) == 5.33
    assert ledger["last_purchase_price"] == 6.0


def test_delete_product(client, storekeeper_headers, product_factory):
    product_id = product_factory()
    assert client.delete(f"/products/{product_id}", headers=storekeeper_headers).status_code == 200
    assert client.get(f"/products/{product_id}", headers=storekeeper_headers).status_code == 404


def test_deleted_product_history_is_not_inherited(client, storekeeper_headers, product_factory):
    old_id = product_factory(code="OLD", current_stock=0)
    client.post("/stock/entries", headers=storekeeper_headers,
                json={"product_id": old_id, "quantity": 10, "unit_price": 9.0})
    client.delete(f"/products/{old_id}", headers=storekeeper_headers)

    created = client.post("/products", headers=storekeeper_headers,
                          json={"code": "NEW", "name": "Novo", "current_stock": 5}).json()
    ledger = client.get(f"/products/{created['id']}/ledger", headers=storekeeper_headers).json()

    assert ledger["entries"] == 0
    assert ledger["initial_stock"] == 5
    assert ledger["average_cost"] == 0

    history = client.get("/stock/movements", headers=storekeeper_headers).json()["items"]
    assert [(m["product_id"], m["product_name"]) for m in history] == [(None, "Cimento CP II")]
