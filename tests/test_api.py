from urllib.parse import unquote

USER = {"X-User-Id": "u1"}


class TestLedger:
    def test_create_and_fetch(self, client):
        response = client.post(
            "/transactions",
            json={"type": "EXPENSE", "amount": "250.50", "category": "food", "date": "2024-03-20"},
            headers=USER,
        )
        assert response.status_code == 200
        created = response.json()
        assert created["user_id"] == "u1"

        fetched = client.get(f"/transactions/{created['id']}", headers=USER)
        assert fetched.status_code == 200
        assert fetched.json()["category"] == "food"

    def test_list_range(self, client):
        response = client.get(
            "/transactions", params={"start": "2024-03-01", "end": "2024-03-31"}, headers=USER
        )
        dates = [e["date"] for e in response.json()]
        assert len(dates) == 5
        assert dates == sorted(dates, reverse=True)

    def test_rejects_non_positive_amount(self, client):
        response = client.post("/transactions", json={"type": "INCOME", "amount": 0}, headers=USER)
        assert response.status_code == 422

    def test_other_users_entries_are_hidden(self, client):
        created = client.post(
            "/transactions", json={"type": "INCOME", "amount": 10}, headers=USER
        ).json()
        response = client.get(f"/transactions/{created['id']}", headers={"X-User-Id": "u2"})
        assert response.status_code == 404

    def test_delete(self, client):
        created = client.post(
            "/transactions", json={"type": "INCOME", "amount": 10}, headers=USER
        ).json()
        assert client.delete(f"/transactions/{created['id']}", headers=USER).status_code == 200
        assert client.delete(f"/transactions/{created['id']}", headers=USER).status_code == 404

    def test_budget(self, client):
        assert client.get("/budget", headers=USER).status_code == 404
        client.put("/budget", json={"amount": 20000}, headers=USER)
        client.put("/budget", json={"amount": 25000}, headers=USER)
        assert float(client.get("/budget", headers=USER).json()["amount"]) == 25000


class TestLinks:
    def test_upi_link(self, client):
        response = client.post(
            "/split/links/upi",
            json={"upiId": "me@upi", "name": "Ravi Kumar", "amount": 600, "note": ""},
        )
        assert response.status_code == 200
        assert response.json()["url"] == (
            "upi://pay?pa=me@upi&pn=Ravi+Kumar&am=600.00&cu=INR&tn=Split+expense+payment"
        )

    def test_invalid_upi_id_is_reported(self, client):
        response = client.post(
            "/split/links/upi", json={"upiId": "me", "name": "Ravi", "amount": 1}
        )
        assert response.status_code == 400
        assert "Must include @" in response.json()["detail"]

    def test_short_phone_is_reported(self, client):
        response = client.post(
            "/split/links/whatsapp",
            json={
                "phoneNumber": "12345",
                "receiverName": "Asha",
                "requesterName": "Me",
                "amount": 10,
                "reason": "Tea",
                "requesterUpiId": "me@upi",
            },
        )
        assert response.status_code == 400
        assert "Invalid phone number" in response.json()["detail"]


class TestSplitFlow:
    def _fill(self, client):
        client.patch(
            "/split/trip",
            json={
                "totalAmount": "1200",
                "requesterUpiId": "me@upi",
                "description": "Dinner",
            },
        )
        client.patch("/split/trip/participants/0", json={"name": "Alice", "phoneNumber": "919111111111"})
        return client.post("/split/trip/participants", json={"name": "Bob", "phoneNumber": "919222222222"})

    def test_view_defaults(self, client):
        view = client.get("/split/trip").json()
        assert view["form"]["requesterName"] == "Me"
        assert view["form"]["participants"] == [{"name": "", "phoneNumber": ""}]
        assert view["splitAmountDisplay"] == "0.00"

    def test_request_and_pay(self, client):
        view = self._fill(client).json()
        assert view["splitAmountDisplay"] == "600.00"
        assert view["validParticipants"] == 2

        response = client.post("/split/trip/participants/0/request")
        assert response.status_code == 200
        body = response.json()
        assert "Amount: ₹600.00" in unquote(body["url"])
        assert body["view"]["requests"][0]["status"] == "requested"
        assert body["view"]["form"]["paymentStatus"] == {"0": "requested"}

        paid = client.post("/split/trip/participants/0/paid")
        assert paid.json()["requests"][0]["status"] == "paid"

        again = client.post("/split/trip/participants/0/request")
        assert again.status_code == 409

    def test_paid_needs_request(self, client):
        self._fill(client)
        assert client.post("/split/trip/participants/1/paid").status_code == 409

    def test_request_without_phone(self, client):
        self._fill(client)
        client.patch("/split/trip/participants/1", json={"phoneNumber": ""})
        response = client.post("/split/trip/participants/1/request")
        assert response.status_code == 400

    def test_remove_participant(self, client):
        self._fill(client)
        client.post("/split/trip/participants/1/request")
        view = client.delete("/split/trip/participants/0").json()
        assert [p["name"] for p in view["form"]["participants"]] == ["Bob"]
        assert view["requests"][0]["status"] == "requested"
        assert view["splitAmountDisplay"] == "1200.00"

        assert client.delete("/split/trip/participants/0").status_code == 400
        assert client.delete("/split/trip/participants/5").status_code == 404

    def test_clear(self, client):
        self._fill(client)
        view = client.delete("/split/trip").json()
        assert view["form"]["totalAmount"] == ""
        assert len(view["form"]["participants"]) == 1

    def test_forms_are_scoped_to_the_user(self, client):
        client.patch(
            "/split/split-expense-form",
            json={"requesterUpiId": "alice@upi"},
            headers={"X-User-Id": "alice"},
        )

        bob = client.get("/split/split-expense-form", headers={"X-User-Id": "bob"})
        alice = client.get("/split/split-expense-form", headers={"X-User-Id": "alice"})

        assert bob.json()["form"]["requesterUpiId"] == ""
        assert alice.json()["form"]["requesterUpiId"] == "alice@upi"

    def test_reserved_key_is_not_a_form(self, client):
        assert client.get("/split/links").status_code == 404
        assert client.patch("/split/links", json={"totalAmount": "5"}).status_code == 404


class TestInsights:
    def test_advice(self, client, generator):
        response = client.post("/insights/advice", json={"question": "How am I doing?"}, headers=USER)
        body = response.json()
        assert body["success"] is True
        assert body["advice"] == "Spend less on food."
        assert "monthlyIncome" in body["data"]
        assert "How am I doing?" in generator.prompts[0]

    def test_latest(self, client):
        assert client.get("/insights/advice/latest", headers=USER).status_code == 404
        client.post("/insights/advice", json={"question": "q"}, headers=USER)
        latest = client.get("/insights/advice/latest", headers=USER)
        assert latest.status_code == 200
        assert latest.json()["advice"] == "Spend less on food."
        assert client.get("/insights/unknown/latest", headers=USER).status_code == 404

    def test_quota_is_data_not_an_http_error(self, client, generator):
        generator.error = RuntimeError("rate limit reached")
        response = client.get("/insights/anomalies", headers=USER)
        assert response.status_code == 200
        assert response.json()["error"] == "QUOTA_EXCEEDED"
        assert response.json()["insights"] == []

    def test_report_for_month(self, client, generator):
        generator.reply = '{"monthlySummary": "ok"}'
        response = client.post("/insights/report", json={"month": "2024-03"}, headers=USER)
        body = response.json()
        assert body["report"]["monthlySummary"] == "ok"
        assert body["data"]["currentMonth"]["totalIncome"] == 50000

    def test_report_rejects_bad_month(self, client):
        assert client.post("/insights/report", json={"month": "2024-13"}).status_code == 400
        assert client.post("/insights/report", json={"month": "March"}).status_code == 422
