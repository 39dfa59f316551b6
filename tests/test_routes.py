import unittest
from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from stockledger.database import Base, create_db_engine, make_session_factory, session_scope
from stockledger.dependencies import get_db
from stockledger.main import app
from stockledger.services.user_service import create_user


class RoutesTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite:///:memory:")
        Base.metadata.create_all(bind=self.engine)
        self.Session = make_session_factory(self.engine)

        def override_get_db():
            with session_scope(self.Session) as db:
                yield db

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

        db = self.Session()
        try:
            self.user_id = create_user(db, email="route@example.com", business_name="Route Diner").id
        finally:
            db.close()

    def tearDown(self):
        app.dependency_overrides.clear()
        self.engine.dispose()

    def _categories(self):
        response = self.client.get("/categories", params={"userId": self.user_id})
        self.assertEqual(response.status_code, 200)
        return {row["name"]: row for row in response.json()}

    def _item(self):
        category_id = self._categories()["Vegetables"]["id"]
        response = self.client.post(
            "/items",
            json={
                "name": "Carrot",
                "barcode": "CAR-1",
                "category_id": category_id,
                "user_id": self.user_id,
                "price": 1.5,
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        item_id = response.json()["id"]

        response = self.client.post(
            "/items/details",
            json={
                "item_id": item_id,
                "package_type": "loose",
                "measure": "kg",
                "storage_location": "Chiller",
                "stock_on_hand": 0,
            },
        )
        self.assertEqual(response.status_code, 201, response.text)
        return item_id, category_id

    def _stock_in(self, item_id, quantity, price):
        response = self.client.post(
            "/stock/batches",
            json={"item_id": item_id, "user_id": self.user_id, "quantity": quantity, "price": price},
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.json()["database"], "ok")

    def test_stock_flow_and_report(self):
        item_id, category_id = self._item()

        first = self._stock_in(item_id, 10, 2)
        self.assertTrue(first["isFirstTransaction"])
        self.assertFalse(self._stock_in(item_id, 5, 3)["isFirstTransaction"])

        response = self.client.post(
            "/stock/out", json={"item_id": item_id, "user_id": self.user_id, "quantity": 12}
        )
        self.assertEqual(response.status_code, 201, response.text)
        body = response.json()
        self.assertEqual([w["quantity_taken"] for w in body["withdrawals"]], [10.0, 2.0])
        self.assertAlmostEqual(body["blended_unit_cost"], 2.1667, places=4)

        response = self.client.post(
            "/stock/out", json={"item_id": item_id, "user_id": self.user_id, "quantity": 5}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "insufficient_stock")
        self.assertEqual(float(response.json()["detail"]["available"]), 3.0)

        batches = self.client.get("/stock/batches/{}".format(item_id), params={"userId": self.user_id})
        self.assertEqual([b["remaining_quantity"] for b in batches.json()], [3.0, 0.0])

        today = datetime.now(timezone.utc).date()
        params = {
            "itemId": item_id,
            "userId": self.user_id,
            "fromDate": (today - timedelta(days=1)).isoformat(),
            "toDate": today.isoformat(),
        }
        response = self.client.get("/transactions", params=params)
        self.assertEqual(response.status_code, 200, response.text)
        report = response.json()
        self.assertEqual(
            report["summary"],
            {"opening": 0, "in": 15, "out": 12, "closing": 3, "closingValue": 3.0},
        )
        self.assertEqual(report["usage"]["measure"], "kg")
        self.assertEqual(report["transactions"][0]["flow"], "Open")

        response = self.client.get("/transactions/export", params=params)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        ))
        self.assertTrue(response.content.startswith(b"PK"))

        items = self.client.get(
            "/items/category/{}".format(category_id), params={"userId": self.user_id}
        )
        self.assertEqual([row["name"] for row in items.json()], ["Carrot"])

        response = self.client.delete("/items/{}/{}".format(item_id, self.user_id))
        self.assertEqual(response.status_code, 200)
        batches = self.client.get("/stock/batches/{}".format(item_id), params={"userId": self.user_id})
        self.assertEqual(batches.json(), [])

    def test_stock_quantities_keep_decimal_precision(self):
        item_id, _category_id = self._item()

        batch = self._stock_in(item_id, "2.5", "1.1")
        self.assertEqual(batch["quantity"], 2.5)
        self.assertEqual(batch["price"], 1.1)

        response = self.client.post(
            "/stock/out", json={"item_id": item_id, "user_id": self.user_id, "quantity": 0.00004}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "validation_error")
        self.assertEqual(response.json()["detail"]["field"], "quantity")

        response = self.client.post(
            "/stock/out", json={"item_id": item_id, "user_id": self.user_id, "quantity": "0.1"}
        )
        self.assertEqual(response.status_code, 201, response.text)
        batches = self.client.get("/stock/batches/{}".format(item_id), params={"userId": self.user_id})
        self.assertEqual(batches.json()[0]["remaining_quantity"], 2.4)

    def test_transactions_requires_parameters(self):
        response = self.client.get("/transactions", params={"itemId": 1})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "validation_error")
        self.assertEqual(response.json()["detail"]["fields"], ["userId", "fromDate", "toDate"])

    def test_item_lookups(self):
        item_id, _category_id = self._item()

        response = self.client.get("/items/{}/{}".format(self.user_id, item_id))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["item"]["barcode"], "CAR-1")

        response = self.client.post("/items/barcode", json={"user_id": self.user_id, "barcode": "CAR-1"})
        self.assertEqual(response.json()["id"], item_id)

        response = self.client.put("/items/{}/price".format(item_id), json={"price": 2.25})
        self.assertEqual(response.json()["newPrice"], 2.25)

        self.assertEqual(self.client.get("/items/last-id").json(), {"lastid": item_id})

        response = self.client.post(
            "/items",
            json={"name": "Dup", "barcode": "CAR-1", "category_id": 1, "user_id": self.user_id},
        )
        self.assertEqual(response.status_code, 409)

    def test_categories(self):
        categories = self._categories()
        self.assertEqual(sorted(categories), ["Meats", "Seafoods", "Vegetables"])

        response = self.client.delete(
            "/categories/{}".format(categories["Meats"]["id"]), params={"userId": self.user_id}
        )
        self.assertEqual(response.status_code, 400)

        response = self.client.post(
            "/categories", json={"user_id": self.user_id, "name": "Sauces", "color": "yellow"}
        )
        self.assertEqual(response.status_code, 201)
        category_id = response.json()["id"]
        self.assertEqual(
            self.client.get("/categories/{}/name".format(category_id)).json(), {"name": "Sauces"}
        )

    def test_users(self):
        response = self.client.get("/users/profile", params={"userId": self.user_id})
        self.assertEqual(response.json()["business_name"], "Route Diner")

        response = self.client.get("/users/profile", params={"userId": self.user_id + 1})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"], "not_found")

        response = self.client.put("/users/{}/permit/1".format(self.user_id))
        self.assertEqual(response.json()["permit"], 1)

        response = self.client.put(
            "/users/{}/plan-end-date".format(self.user_id), json={"plan_end_date": "2026-12-31"}
        )
        self.assertEqual(response.json()["plan_end_date"], "2026-12-31")

        listing = self.client.get("/users").json()
        self.assertEqual(listing["count"], 1)
        self.assertEqual(listing["users"][0]["permit"], 1)


if __name__ == "__main__":
    unittest.main()
