from app.domain.loyalty.tiers import DEFAULT_PROGRAM, points_for_purchase, resolve_tier

TIERS = DEFAULT_PROGRAM["tiers"]


def award(client, customer_id, **body):
    return client.post(f"/api/loyalty-program/customers/{customer_id}/award", json=body)


def test_resolve_tier():
    assert resolve_tier(0, TIERS)["current"]["id"] == "bronze"
    assert resolve_tier(499, TIERS)["points_to_next"] == 1

    top = resolve_tier(6000, TIERS)
    assert top["current"]["id"] == "platinum"
    assert top["next"] is None
    assert top["points_to_next"] is None


def test_points_for_purchase_uses_tier_multiplier():
    silver = TIERS[1]

    assert points_for_purchase(10.99, 10, TIERS[0]) == 109
    assert points_for_purchase(10, 10, silver) == 120


def test_default_program_config(client):
    config = client.get("/api/loyalty-program/config").json()

    assert config["points_per_euro"] == 10
    assert [t["id"] for t in config["tiers"]] == ["bronze", "silver", "gold", "platinum"]


def test_first_purchase_awards_bonus_and_promotes_tier(client, make_customer):
    customer = make_customer()

    response = award(client, customer.id, purchase_amount=60)

    assert response.status_code == 200
    member = response.json()
    assert member["total_points"] == 700
    assert member["available_points"] == 700
    assert member["current_tier"] == "silver"
    assert member["next_tier"] == "gold"
    assert member["points_to_next_tier"] == 800
    assert {t["action"] for t in member["history"]} == {"purchase", "bonus"}


def test_second_purchase_gets_no_bonus(client, make_customer):
    customer = make_customer()
    award(client, customer.id, purchase_amount=60)

    member = award(client, customer.id, purchase_amount=10).json()

    assert member["total_points"] == 820


def test_award_requires_exactly_one_source(client, make_customer):
    customer = make_customer()

    assert award(client, customer.id, purchase_amount=10, points=5).status_code == 422
    assert award(client, customer.id).status_code == 422


def test_manual_adjustment_cannot_go_negative(client, make_customer):
    customer = make_customer()
    award(client, customer.id, points=50)

    response = award(client, customer.id, points=-80)

    assert response.status_code == 400


def test_redeem_reward(client, make_customer):
    customer = make_customer()
    award(client, customer.id, purchase_amount=60)

    response = client.post(
        f"/api/loyalty-program/customers/{customer.id}/redeem", json={"reward_id": "discount-5"}
    )

    assert response.status_code == 200
    member = response.json()
    assert member["available_points"] == 600
    assert member["total_points"] == 700
    assert member["rewards_redeemed"] == 1


def test_redeem_respects_limit_per_customer(client, make_customer):
    customer = make_customer()
    award(client, customer.id, purchase_amount=60)
    url = f"/api/loyalty-program/customers/{customer.id}/redeem"
    client.post(url, json={"reward_id": "discount-5"})

    response = client.post(url, json={"reward_id": "discount-5"})

    assert response.status_code == 400
    assert response.json()["detail"] == "Reward redemption limit reached"


def test_redeem_below_minimum(client, make_customer):
    customer = make_customer()
    award(client, customer.id, points=50)

    response = client.post(
        f"/api/loyalty-program/customers/{customer.id}/redeem", json={"reward_id": "discount-5"}
    )

    assert response.status_code == 400


def test_redeem_unknown_reward(client, make_customer):
    customer = make_customer()
    award(client, customer.id, points=500)

    response = client.post(
        f"/api/loyalty-program/customers/{customer.id}/redeem", json={"reward_id": "yacht"}
    )

    assert response.status_code == 404


def test_update_program_recomputes_tiers(client, make_customer):
    customer = make_customer()
    award(client, customer.id, points=300)
    config = client.get("/api/loyalty-program/config").json()
    config["tiers"][1]["min_points"] = 200

    response = client.put("/api/loyalty-program/config", json=config)

    assert response.status_code == 200
    assert client.get(f"/api/loyalty-program/customers/{customer.id}").json()["current_tier"] == "silver"


def test_update_program_requires_base_tier(client):
    config = client.get("/api/loyalty-program/config").json()
    config["tiers"] = [t for t in config["tiers"] if t["min_points"] > 0]

    response = client.put("/api/loyalty-program/config", json=config)

    assert response.status_code == 422


def test_member_list_and_stats(client, make_customer):
    ana = make_customer(name="Ana", email="ana@example.com")
    make_customer(name="Luis", email="luis@example.com")
    award(client, ana.id, purchase_amount=60)
    client.post(f"/api/loyalty-program/customers/{ana.id}/redeem", json={"reward_id": "discount-5"})

    members = client.get("/api/loyalty-program/customers").json()
    stats = client.get("/api/loyalty-program/stats").json()

    assert [m["email"] for m in members["members"]] == ["ana@example.com"]
    assert stats["total_members"] == 1
    assert stats["points_issued"] == 700
    assert stats["points_redeemed"] == 100
    assert stats["conversion_rate"] == 50
    assert stats["top_rewards"][0]["reward_id"] == "discount-5"


def test_non_member_lookup(client, make_customer):
    customer = make_customer()

    assert client.get(f"/api/loyalty-program/customers/{customer.id}").status_code == 404


def test_export_members(client, make_customer):
    customer = make_customer()
    award(client, customer.id, points=10)

    response = client.get("/api/loyalty-program/export")

    assert response.status_code == 200
    assert "ana@example.com" in response.text
