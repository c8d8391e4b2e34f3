"""
Tests for the bill settlement calculation.
"""
from decimal import Decimal
import pytest
from app.core.utils import allocate_money
from app.services.bill_calculation_service import (
    minimize_transfers, calculate_bill_user_obligations
)


@pytest.fixture
def shared_bill(client, alice, bob, carol, bill, add_item, add_participant):
    """
    Bill of 400 shared 1:1:2 by alice, bob and carol.
    Alice fronts 200 for the steak, bob fronts 50% (100) of the wine,
    carol pays 50 directly.
    """
    add_participant(alice["headers"], bill["id"], bob["id"], share_ratio="1")
    add_participant(alice["headers"], bill["id"], carol["id"], share_ratio="2")
    steak = add_item(alice["headers"], bill["id"], "Steak", "100", "2")
    wine = add_item(alice["headers"], bill["id"], "Wine", "200", "1")
    
    client.post(
        "/api/bill-item-payers",
        json={"bill_item_id": steak["id"], "payer_id": alice["id"], "amount": "200"},
        headers=alice["headers"]
    )
    client.post(
        "/api/bill-item-payers",
        json={"bill_item_id": wine["id"], "payer_id": bob["id"], "percent": "50"},
        headers=bob["headers"]
    )
    client.post(
        "/api/payments",
        json={"bill_id": bill["id"], "payer_id": carol["id"], "amount": "50"},
        headers=carol["headers"]
    )
    return bill


def _by_user(calculations):
    return {c["user_id"]: c for c in calculations}


def test_minimize_transfers():
    """Test the greedy transfer minimisation."""
    transfers = minimize_transfers([(1, Decimal("100")), (2, Decimal("-60")), (3, Decimal("-40"))])
    assert [(t.from_user_id, t.to_user_id, t.amount) for t in transfers] == [
        (2, 1, Decimal("60")),
        (3, 1, Decimal("40")),
    ]
    assert minimize_transfers([(1, Decimal("0"))]) == []


def test_allocate_money():
    """Test proportional splits hand out leftover cents by largest remainder."""
    assert allocate_money(Decimal("100"), [Decimal(1)] * 3) == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert allocate_money(Decimal("0.05"), [Decimal(1), Decimal(2)]) == [Decimal("0.02"), Decimal("0.03")]
    assert allocate_money(Decimal("10"), [Decimal(1), Decimal(1), Decimal(1), Decimal(3)]) == [
        Decimal("1.67"), Decimal("1.67"), Decimal("1.66"), Decimal("5.00")
    ]
    assert allocate_money(Decimal("10"), []) == []


def test_obligations(client, alice, bob, carol, shared_bill):
    """Test due, prepaid, paid, net and settled per participant."""
    response = client.get(f"/api/bill-calculations/bill/{shared_bill['id']}", headers=alice["headers"])
    assert response.status_code == 200
    calcs = _by_user(response.json())
    
    assert Decimal(calcs[alice["id"]]["due_amount"]) == Decimal("100")
    assert Decimal(calcs[alice["id"]]["prepaid_amount"]) == Decimal("200")
    assert Decimal(calcs[alice["id"]]["net_amount"]) == Decimal("-100")
    assert calcs[alice["id"]]["is_settled"] is True
    
    # Net exactly zero counts as settled
    assert Decimal(calcs[bob["id"]]["net_amount"]) == 0
    assert calcs[bob["id"]]["is_settled"] is True
    
    assert Decimal(calcs[carol["id"]]["due_amount"]) == Decimal("200")
    assert Decimal(calcs[carol["id"]]["paid_amount"]) == Decimal("50")
    assert Decimal(calcs[carol["id"]]["net_amount"]) == Decimal("150")
    assert calcs[carol["id"]]["is_settled"] is False


def test_due_amounts_sum_to_bill_total(client, alice, bob, carol, shared_bill):
    """Test the shares cover the whole bill."""
    calcs = client.get(f"/api/bill-calculations/bill/{shared_bill['id']}", headers=alice["headers"]).json()
    assert sum(Decimal(c["due_amount"]) for c in calcs) == Decimal("400")


def test_user_obligation(client, alice, carol, make_user, shared_bill):
    """Test a single participant's calculation and the non-participant case."""
    response = client.get(
        f"/api/bill-calculations/bill/{shared_bill['id']}/user/{carol['id']}", headers=alice["headers"]
    )
    assert response.status_code == 200
    assert Decimal(response.json()["net_amount"]) == Decimal("150")
    
    dave = make_user("dave@example.com")
    response = client.get(
        f"/api/bill-calculations/bill/{shared_bill['id']}/user/{dave['id']}", headers=alice["headers"]
    )
    assert response.status_code == 404


def test_update_settled_status(client, alice, carol, shared_bill):
    """Test persisting one participant's status, then re-settling after a payment."""
    base = f"/api/bill-calculations/bill/{shared_bill['id']}/user/{carol['id']}/update-settled"
    
    response = client.post(base, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["is_settled"] is False
    
    client.post(
        "/api/payments",
        json={"bill_id": shared_bill["id"], "payer_id": carol["id"], "amount": "150"},
        headers=carol["headers"]
    )
    response = client.post(base, headers=alice["headers"])
    assert response.json()["is_settled"] is True
    
    users = client.get(f"/api/bill-users/bill/{shared_bill['id']}/users", headers=alice["headers"]).json()
    carol_row = _by_user(users)[carol["id"]]
    assert carol_row["is_settled"] is True
    assert carol_row["settled_at"] is not None


def test_update_all_settled_statuses(client, alice, bob, carol, shared_bill):
    """Test every participant's status is persisted together."""
    response = client.post(
        f"/api/bill-calculations/bill/{shared_bill['id']}/update-all-settled", headers=alice["headers"]
    )
    assert response.status_code == 200
    assert len(response.json()) == 3
    
    users = _by_user(
        client.get(f"/api/bill-users/bill/{shared_bill['id']}/users", headers=alice["headers"]).json()
    )
    assert users[alice["id"]]["is_settled"] is True
    assert users[bob["id"]]["is_settled"] is True
    assert users[carol["id"]]["is_settled"] is False
    assert users[carol["id"]]["settled_at"] is None


def test_settled_status_reverts_when_bill_grows(client, alice, bob, shared_bill, add_item):
    """Test a settled participant becomes unsettled when items are added."""
    url = f"/api/bill-calculations/bill/{shared_bill['id']}/update-all-settled"
    client.post(url, headers=alice["headers"])
    
    add_item(alice["headers"], shared_bill["id"], "Dessert", "400")
    calcs = _by_user(client.post(url, headers=alice["headers"]).json())
    # Bill is now 800: bob owes 200 against 100 prepaid
    assert Decimal(calcs[bob["id"]]["net_amount"]) == Decimal("100")
    assert calcs[bob["id"]]["is_settled"] is False


def test_suggested_transfers(client, alice, carol, shared_bill):
    """Test carol is told to pay alice what alice is owed."""
    response = client.get(
        f"/api/bill-calculations/bill/{shared_bill['id']}/transfers", headers=alice["headers"]
    )
    assert response.status_code == 200
    data = response.json()
    assert data["currency_code"] == "VND"
    assert len(data["transfers"]) == 1
    transfer = data["transfers"][0]
    assert transfer["from_user_id"] == carol["id"]
    assert transfer["to_user_id"] == alice["id"]
    assert Decimal(transfer["amount"]) == Decimal("100")


def test_bill_discount_applies_to_shares(client, alice, bob, bill, add_item, add_participant):
    """Test bill-level discounts reduce every participant's due amount."""
    add_participant(alice["headers"], bill["id"], bob["id"])
    add_item(alice["headers"], bill["id"], "Set menu", "1000")
    client.put(f"/api/bills/{bill['id']}", json={"percent_discount": "10"}, headers=alice["headers"])
    
    calcs = client.get(f"/api/bill-calculations/bill/{bill['id']}", headers=alice["headers"]).json()
    assert [Decimal(c["due_amount"]) for c in calcs] == [Decimal("450"), Decimal("450")]


def test_uneven_shares_allocate_every_cent(client, alice, bob, carol, bill, add_item, add_participant):
    """Test a 3-way split of 100 still adds up to 100 and alice is repaid in full."""
    add_participant(alice["headers"], bill["id"], bob["id"])
    add_participant(alice["headers"], bill["id"], carol["id"])
    item = add_item(alice["headers"], bill["id"], "Pizza", "100")
    client.post(
        "/api/bill-item-payers",
        json={"bill_item_id": item["id"], "payer_id": alice["id"], "amount": "100"},
        headers=alice["headers"]
    )
    
    calcs = client.get(f"/api/bill-calculations/bill/{bill['id']}", headers=alice["headers"]).json()
    assert [Decimal(c["due_amount"]) for c in calcs] == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
    assert sum(Decimal(c["due_amount"]) for c in calcs) == Decimal("100")
    
    transfers = client.get(
        f"/api/bill-calculations/bill/{bill['id']}/transfers", headers=alice["headers"]
    ).json()["transfers"]
    assert all(t["to_user_id"] == alice["id"] for t in transfers)
    assert sum(Decimal(t["amount"]) for t in transfers) == Decimal("66.66")
    assert Decimal(calcs[0]["net_amount"]) == Decimal("-66.66")


def test_removed_participants_are_excluded(client, alice, bob, bill, add_item, add_participant):
    """Test soft-removed participants drop out of the split."""
    add_participant(alice["headers"], bill["id"], bob["id"])
    add_item(alice["headers"], bill["id"], "Pizza", "100")
    client.delete(f"/api/bill-users/bill/{bill['id']}/user/{bob['id']}", headers=alice["headers"])
    
    calcs = client.get(f"/api/bill-calculations/bill/{bill['id']}", headers=alice["headers"]).json()
    assert len(calcs) == 1
    assert Decimal(calcs[0]["due_amount"]) == Decimal("100")


def test_bill_without_participants(client, db_session, alice, bill):
    """Test a bill whose participants were all removed yields no obligations."""
    from app.models import BillUser
    db_session.query(BillUser).update({BillUser.is_active: False})
    db_session.commit()
    
    assert calculate_bill_user_obligations(bill["id"], db_session) == []
    # The creator still has access and gets an empty result
    response = client.get(f"/api/bill-calculations/bill/{bill['id']}", headers=alice["headers"])
    assert response.status_code == 200
    assert response.json() == []


def test_calculation_access_control(client, make_user, shared_bill):
    """Test outsiders cannot read a bill's calculations."""
    dave = make_user("dave@example.com")
    response = client.get(f"/api/bill-calculations/bill/{shared_bill['id']}", headers=dave["headers"])
    assert response.status_code == 403
    response = client.get("/api/bill-calculations/bill/9999", headers=dave["headers"])
    assert response.status_code == 404
