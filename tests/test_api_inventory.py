import json

from datetime import datetime, timezone


def _seed(client, headers, product_factory):
    cement = product_factory(code="CIM-01", name="Cimento", current_stock=0, min_stock=10)
    wire = product_factory(code="FIO-01", name="Fio 2,5mm", current_stock=50, min_stock=5, category="Elétrica")
    client.post("/stock/entries", headers=headers, json={"product_id": cement, "quantity": 10, "unit_price": 30.0})
    client.post("/stock/exits", headers=headers, json={"product_id": cement, "quantity": 4})
    return cement, wire


def test_inventory_rows(client, storekeeper_headers, product_factory):
    _seed(client, storekeeper_headers, product_factory)

    page = client.get("/inventory", headers=storekeeper_headers).json()
    rows = {r["code"]: r for r in page["items"]}

    assert page["total"] == 2
    assert rows["CIM-01"]["initial_stock"] == 0
    assert rows["CIM-01"]["entries"] == 10
    assert rows["CIM-01"]["exits"] == 4
    assert rows["CIM-01"]["status"] == "critical"
    assert rows["CIM-01"]["percentage"] == 60
    assert rows["FIO-01"]["initial_stock"] == 50
    assert rows["FIO-01"]["status"] == "normal"

    critical = client.get("/inventory", headers=storekeeper_headers, params={"status": "critical"}).json()
    assert [r["code"] for r in critical["items"]] == ["CIM-01"]


def test_inventory_export(client, storekeeper_headers, product_factory):
    _seed(client, storekeeper_headers, product_factory)

    response = client.get("/inventory/export", headers=storekeeper_headers)

    assert response.status_code == 200
    lines = response.content.decode("utf-8-sig").splitlines()
    assert lines[0].startswith("Code;Product;Category;Unit;Initial stock;Entries;Exits")
    assert len(lines) == 3


def test_backup_is_admin_only(client, admin_headers, storekeeper_headers, product_factory):
    _seed(client, admin_headers, product_factory)

    assert client.get("/inventory/backup", headers=storekeeper_headers).status_code == 403

    response = client.get("/inventory/backup", headers=admin_headers)
    assert response.status_code == 200
    backup = json.loads(response.content)
    assert len(backup["products"]) == 2
    assert len(backup["stock_movements"]) == 2
    assert "users" not in backup
    assert "exported_at" in backup


def test_dashboard(client, storekeeper_headers, product_factory, supplier_factory):
    _seed(client, storekeeper_headers, product_factory)
    supplier_factory()

    summary = client.get("/dashboard/summary", headers=storekeeper_headers).json()
    assert summary["total_products"] == 2
    assert summary["low_stock_items"] == 1
    assert summary["total_value"] == 180.0
    assert summary["recent_movements"] == 2
    assert summary["active_suppliers"] == 1
    assert summary["pending_purchases"] == 0

    days = client.get("/dashboard/movements-by-day", headers=storekeeper_headers,
                      params={"tz": "America/Sao_Paulo"}).json()["data"]
    assert len(days) == 7
    assert sum(d["entries"] for d in days) == 1
    assert sum(d["exits"] for d in days) == 1

    statuses = client.get("/dashboard/stock-status", headers=storekeeper_headers).json()["data"]
    assert {s["status"]: s["count"] for s in statuses} == {"normal": 1, "warning": 0, "critical": 1}

    categories = client.get("/dashboard/categories", headers=storekeeper_headers).json()["data"]
    assert [c["category"] for c in categories] == ["Construção", "Elétrica"]
    assert categories[0]["value"] == 180.0


def test_dashboard_rejects_unknown_timezone(client, storekeeper_headers):
    response = client.get("/dashboard/summary", headers=storekeeper_headers, params={"tz": "Mars/Olympus"})
    assert response.status_code == 422


def test_old_movements_are_outside_the_week(client, storekeeper_headers, product_factory):
    product_id = product_factory(current_stock=0)
    old = datetime(2020, 1, 1, 12, tzinfo=timezone.utc).isoformat()
    client.post("/stock/entries", headers=storekeeper_headers,
                json={"product_id": product_id, "quantity": 1, "date": old})

    summary = client.get("/dashboard/summary", headers=storekeeper_headers).json()
    assert summary["recent_movements"] == 0
