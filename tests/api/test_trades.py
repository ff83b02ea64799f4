import json

import pytest

from tests.conftest import auth


@pytest.fixture
def items(alice, bob, carol, make_item):
    make_item(1, alice, 40, "Bike")
    make_item(2, bob, 45, "Lamp")
    make_item(3, bob, 60, "Chair")
    make_item(4, carol, 30, "Kettle")


def create(client, user, requester_item_id=1, recipient_item_id=2, **extra):
    return client.post(
        "/trades",
        json={"requesterItemId": requester_item_id, "recipientItemId": recipient_item_id, **extra},
        auth=auth(user),
    )


def act(client, user, trade_id, action):
    return client.patch(f"/trades/{trade_id}", json={"action": action}, auth=auth(user))


class TestAuthentication:
    def test_missing_credentials(self, client, items):
        response = client.get("/trades")
        assert response.status_code == 401
        assert response.json() == {"ok": False, "error": "Unauthorized."}
        assert response.headers["www-authenticate"] == "Basic"

    def test_wrong_password(self, client, items, alice):
        response = client.get("/trades", auth=(alice.username, "wrong"))
        assert response.status_code == 401
        assert response.json()["ok"] is False

    def test_unknown_user(self, client, items):
        response = client.get("/trades", auth=("ghost", "whatever"))
        assert response.status_code == 401


class TestCreateTrade:
    def test_created(self, client, items, alice, bob, fake_redis):
        response = create(client, alice)
        assert response.status_code == 201
        body = response.json()
        assert body["ok"] is True
        assert body["message"] == "Trade request created. Waiting for the other user to agree."
        trade = body["trade"]
        assert trade["status"] == "pending"
        assert trade["requesterId"] == str(alice.user_id)
        assert trade["recipientId"] == str(bob.user_id)
        assert trade["requesterApproved"] is True
        assert trade["recipientApproved"] is False
        assert trade["meetupLocation"] == "Central PD"
        assert trade["recipientItem"]["tier"] == "25-50 coins"

        channel, message = fake_redis.published[-1]
        assert channel == f"trade:{trade['tradeId']}"
        assert json.loads(message)["status"] == "pending"

    @pytest.mark.parametrize(
        "requester_item_id, recipient_item_id, status, error",
        [
            (1, 1, 400, "You must select two different items."),
            (1, 99, 400, "One or both items do not exist."),
            (4, 2, 403, "You can only gamble with your own selected item."),
            (1, 3, 400, "Items must be in the same value bracket."),
            (0, 2, 400, "Both requesterItemId and recipientItemId are required."),
        ],
    )
    def test_rejected(self, client, items, alice, fake_redis, requester_item_id, recipient_item_id, status, error):
        response = create(client, alice, requester_item_id, recipient_item_id)
        assert response.status_code == status
        assert response.json() == {"ok": False, "error": error}
        assert fake_redis.published == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"requesterItemId": True, "recipientItemId": 2},
            {"requesterItemId": 1, "recipientItemId": "2"},
            {"requesterItemId": 1.0, "recipientItemId": 2},
        ],
    )
    def test_non_integer_ids(self, client, items, alice, fake_redis, payload):
        response = client.post("/trades", json=payload, auth=auth(alice))
        assert response.status_code == 400
        assert response.json()["ok"] is False
        assert fake_redis.published == []

    def test_missing_field(self, client, items, alice):
        response = client.post("/trades", json={"requesterItemId": 1}, auth=auth(alice))
        assert response.status_code == 400
        assert response.json()["ok"] is False

    def test_with_spin_proof(self, client, items, alice):
        spin = client.post("/pool/spin", json={"requesterItemId": 1, "candidateItemIds": [2]}).json()
        response = create(client, alice, spinProof=spin["spinProof"])
        assert response.status_code == 201

    def test_with_foreign_spin_proof(self, client, items, alice):
        spin = client.post("/pool/spin", json={"requesterItemId": 1, "candidateItemIds": [4]}).json()
        response = create(client, alice, spinProof=spin["spinProof"])
        assert response.status_code == 400
        assert response.json()["error"] == "Spin proof does not match the selected items."


class TestUpdateTrade:
    def test_end_to_end(self, client, items, alice, bob, fake_redis):
        spin = client.post("/pool/spin", json={"requesterItemId": 1, "candidateItemIds": [2]}).json()
        assert spin["winnerItemId"] == 2

        trade = create(client, alice, 1, spin["winnerItemId"], spinProof=spin["spinProof"]).json()["trade"]
        trade_id = trade["tradeId"]

        response = act(client, bob, trade_id, "accept")
        assert response.status_code == 200
        assert response.json()["trade"]["status"] == "accepted"

        response = act(client, alice, trade_id, "complete")
        assert response.status_code == 200
        assert response.json()["trade"]["status"] == "completed"

        statuses = [json.loads(message)["status"] for _, message in fake_redis.published]
        assert statuses == ["pending", "accepted", "completed"]

    def test_decline(self, client, items, alice, bob):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        trade = act(client, bob, trade_id, "decline").json()["trade"]
        assert trade["status"] == "declined"
        assert trade["declinedBy"] == str(bob.user_id)

    def test_recipient_cannot_cancel(self, client, items, alice, bob):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        response = act(client, bob, trade_id, "cancel")
        assert response.status_code == 403
        assert response.json() == {"ok": False, "error": "Only the trade requester can cancel."}

    def test_complete_requires_accept(self, client, items, alice):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        response = act(client, alice, trade_id, "complete")
        assert response.status_code == 400
        assert response.json()["error"] == "Only accepted trades can be completed."

    def test_terminal_trade(self, client, items, alice, bob):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        act(client, alice, trade_id, "cancel")
        response = act(client, bob, trade_id, "accept")
        assert response.status_code == 400
        assert response.json()["error"] == "Only pending trades can be accepted."

    def test_non_party(self, client, items, alice, carol):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        response = act(client, carol, trade_id, "accept")
        assert response.status_code == 403

    def test_unknown_trade(self, client, items, alice):
        response = act(client, alice, 999, "accept")
        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Trade not found."}

    def test_unknown_action(self, client, items, alice):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        response = act(client, alice, trade_id, "steal")
        assert response.status_code == 400


class TestListTrades:
    def test_lists_trades_of_either_party(self, client, items, alice, bob, carol):
        first = create(client, alice).json()["trade"]["tradeId"]
        second = create(client, alice).json()["trade"]["tradeId"]

        body = client.get("/trades", auth=auth(bob)).json()
        assert body["ok"] is True
        assert body["currentUserId"] == str(bob.user_id)
        assert [trade["tradeId"] for trade in body["trades"]] == [second, first]

        assert client.get("/trades", auth=auth(carol)).json()["trades"] == []


class TestStreamTrade:
    def test_non_party(self, client, items, alice, carol):
        trade_id = create(client, alice).json()["trade"]["tradeId"]
        response = client.get(f"/trades/{trade_id}/stream", auth=auth(carol))
        assert response.status_code == 403

    def test_unknown_trade(self, client, items, alice):
        response = client.get("/trades/999/stream", auth=auth(alice))
        assert response.status_code == 404
