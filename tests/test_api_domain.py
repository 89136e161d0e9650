"""Behaviour of the domain endpoints behind the authentication layer."""

import pytest

from .conftest import auth_headers

ALICE, BOB, CAROL = 1, 2, 3


@pytest.fixture
def portfolio(client):
    response = client.post("/api/portfolios", json={"name": "Growth", "type": "equity"}, headers=auth_headers(ALICE))
    assert response.status_code == 201
    return response.json()


# --- Savings ------------------------------------------------------------


def test_transactions_default_and_explicit_limit(client, store):
    for n in range(25):
        store.create("transactions", {"userId": ALICE, "type": "roundup", "amount": n})
    headers = auth_headers(ALICE)

    assert len(client.get("/api/users/1/transactions", headers=headers).json()) == 20
    assert len(client.get("/api/users/1/transactions?limit=5", headers=headers).json()) == 5
    assert len(client.get("/api/users/1/transactions?limit=abc", headers=headers).json()) == 20
    newest = client.get("/api/users/1/transactions?limit=1", headers=headers).json()[0]
    assert newest["amount"] == "24.00"


def test_activities_default_to_ten(client, store):
    for _ in range(12):
        store.create("activities", {"userId": ALICE, "type": "roundup"})

    assert len(client.get("/api/users/1/activities", headers=auth_headers(ALICE)).json()) == 10


def test_challenge_lifecycle(client):
    created = client.post(
        "/api/challenges", json={"title": "Emergency fund", "targetAmount": 500}, headers=auth_headers(ALICE)
    )
    assert created.status_code == 201
    challenge = created.json()
    assert challenge["status"] == "active"
    assert challenge["currentAmount"] == "0.00"

    fetched = client.get(f"/api/challenges/{challenge['id']}", headers=auth_headers(ALICE))
    foreign = client.get(f"/api/challenges/{challenge['id']}", headers=auth_headers(BOB))
    updated = client.put(
        f"/api/challenges/{challenge['id']}", json={"currentAmount": "125.50"}, headers=auth_headers(ALICE)
    )

    assert fetched.json() == challenge
    assert foreign.status_code == 403
    assert updated.json()["currentAmount"] == "125.50"
    assert client.get("/api/users/1/challenges", headers=auth_headers(ALICE)).json() == [updated.json()]


def test_create_without_required_field_is_a_bad_request(client):
    response = client.post("/api/challenges", json={"title": "No target"}, headers=auth_headers(ALICE))

    assert response.status_code == 400
    assert response.json() == {"error": "Field 'targetAmount' is required", "code": "VALIDATION_ERROR"}


def test_badge_can_be_marked_earned(client, store):
    store.create("user_badges", {"userId": ALICE, "badgeId": "first-save", "badgeName": "First save"})

    response = client.put("/api/users/1/badges/first-save", json={"earned": True}, headers=auth_headers(ALICE))
    unknown = client.put("/api/users/1/badges/nope", json={"earned": True}, headers=auth_headers(ALICE))

    assert response.json() == {"success": True}
    assert unknown.json() == {"success": True}
    [badge] = client.get("/api/users/1/badges", headers=auth_headers(ALICE)).json()
    assert badge["earned"] is True
    assert badge["earnedAt"]


# --- Investments --------------------------------------------------------


def test_sip_plan_requires_own_portfolio(client, portfolio):
    plan = {
        "portfolioId": portfolio["id"],
        "name": "Monthly index",
        "monthlyAmount": "2000",
        "startDate": "2024-01-01T00:00:00+00:00",
        "nextPaymentDate": "2024-02-01T00:00:00+00:00",
    }

    created = client.post("/api/sip-plans", json=plan, headers=auth_headers(ALICE))
    foreign = client.post("/api/sip-plans", json=plan, headers=auth_headers(BOB))
    missing = client.post("/api/sip-plans", json={**plan, "portfolioId": None}, headers=auth_headers(ALICE))

    assert created.status_code == 201
    assert created.json()["autoInvestRoundups"] is False
    assert foreign.status_code == 403
    assert missing.status_code == 400
    assert len(client.get("/api/users/1/sip-plans", headers=auth_headers(ALICE)).json()) == 1


def test_investments_are_listed_per_portfolio(client, portfolio):
    body = {"portfolioId": portfolio["id"], "type": "buy", "amount": "100", "units": "2.5"}

    created = client.post("/api/investments", json=body, headers=auth_headers(ALICE))
    listed = client.get(f"/api/portfolios/{portfolio['id']}/investments", headers=auth_headers(ALICE))
    foreign = client.get(f"/api/portfolios/{portfolio['id']}/investments", headers=auth_headers(BOB))

    assert created.status_code == 201
    assert listed.json() == [created.json()]
    assert foreign.status_code == 403


def test_investment_goal_update(client):
    goal = client.post(
        "/api/investment-goals", json={"title": "House", "targetAmount": "50000"}, headers=auth_headers(ALICE)
    ).json()

    updated = client.put(f"/api/investment-goals/{goal['id']}", json={"currentAmount": "1000"}, headers=auth_headers(ALICE))

    assert updated.status_code == 200
    assert updated.json()["currentAmount"] == "1000.00"


# --- Gamification -------------------------------------------------------


def test_streak_upsert_tracks_longest(client):
    headers = auth_headers(ALICE)

    first = client.put("/api/users/1/streaks/daily", json={"currentStreak": 3}, headers=headers).json()
    second = client.put("/api/users/1/streaks/daily", json={"currentStreak": 1}, headers=headers).json()

    assert first["longestStreak"] == 3
    assert second["id"] == first["id"]
    assert second["currentStreak"] == 1
    assert second["longestStreak"] == 3
    assert len(client.get("/api/users/1/streaks", headers=headers).json()) == 1


def test_seasonal_challenge_join_and_progress(client):
    challenge = client.post(
        "/api/seasonal-challenges",
        json={
            "title": "Diwali savings",
            "type": "festival",
            "targetAmount": "100",
            "startDate": "2024-10-01T00:00:00+00:00",
            "endDate": "2024-11-15T00:00:00+00:00",
            "participantLimit": 1,
        },
        headers=auth_headers(ALICE),
    ).json()
    assert challenge["createdBy"] == ALICE
    join_url = f"/api/seasonal-challenges/{challenge['id']}/join"

    joined = client.post(join_url, headers=auth_headers(BOB))
    again = client.post(join_url, headers=auth_headers(BOB))
    full = client.post(join_url, headers=auth_headers(CAROL))

    assert joined.status_code == 201
    assert again.json()["error"] == "Already joined this challenge"
    assert full.json()["error"] == "Seasonal challenge is full"

    progress_url = f"/api/seasonal-challenges/{challenge['id']}/progress"
    halfway = client.put(progress_url, json={"progress": 50}, headers=auth_headers(BOB)).json()
    done = client.put(progress_url, json={"progress": 100}, headers=auth_headers(BOB)).json()
    assert halfway["isCompleted"] is False
    assert done["isCompleted"] is True
    assert done["completedAt"]
    assert client.put(progress_url, json={"progress": 10}, headers=auth_headers(CAROL)).status_code == 404
    assert client.get("/api/seasonal-challenges?active=true").json() == [challenge]


def test_joining_unknown_seasonal_challenge(client):
    response = client.post("/api/seasonal-challenges/999/join", headers=auth_headers(ALICE))

    assert response.status_code == 404


def test_achievement_catalogue_and_award(client, store):
    achievement = store.create("achievements", {"name": "First steps", "level": 1, "category": "savings"})
    store.create("achievements", {"name": "Investor", "level": 2, "category": "investing"})

    catalogue = client.get("/api/achievements?category=savings")
    awarded = client.post("/api/users/1/achievements", json={"achievementId": achievement["id"]}, headers=auth_headers(ALICE))
    unknown = client.post("/api/users/1/achievements", json={"achievementId": 4040}, headers=auth_headers(ALICE))

    assert catalogue.json() == [achievement]
    assert awarded.status_code == 201
    assert awarded.json()["isCompleted"] is True
    assert awarded.json()["progress"] == "100.00"
    assert unknown.status_code == 404
    assert len(client.get("/api/users/1/achievements", headers=auth_headers(ALICE)).json()) == 1


def test_reward_redemption_uses_stock(client, store):
    reward = store.create(
        "rewards",
        {"name": "Coffee voucher", "type": "voucher", "pointsCost": 100, "stockQuantity": 1, "validityDays": 7},
    )
    url = "/api/users/1/rewards/redeem"

    redeemed = client.post(url, json={"rewardId": reward["id"]}, headers=auth_headers(ALICE))
    sold_out = client.post(url, json={"rewardId": reward["id"]}, headers=auth_headers(ALICE))

    assert redeemed.status_code == 201
    redemption = redeemed.json()
    assert redemption["pointsSpent"] == 100
    assert len(redemption["redemptionCode"]) == 12
    assert redemption["redemptionCode"] == redemption["redemptionCode"].upper()
    assert redemption["expiresAt"] > redemption["redeemedAt"]
    assert sold_out.json()["error"] == "Reward is out of stock"
    assert store.get("rewards", reward["id"])["stockQuantity"] == 0
    assert client.get("/api/users/1/rewards", headers=auth_headers(ALICE)).json() == [redemption]


# --- Social -------------------------------------------------------------


def test_team_membership_rules(client):
    team = client.post(
        "/api/teams", json={"name": "Savers", "type": "friends", "maxMembers": 2}, headers=auth_headers(ALICE)
    ).json()
    join_url = f"/api/teams/{team['id']}/join"

    joined = client.post(join_url, headers=auth_headers(BOB))
    again = client.post(join_url, headers=auth_headers(BOB))
    full = client.post(join_url, headers=auth_headers(CAROL))

    assert team["captainId"] == ALICE
    assert team["memberCount"] == 1
    assert joined.status_code == 201
    assert again.json()["error"] == "Already a member of this team"
    assert full.json()["error"] == "Team is full"
    [listed] = client.get("/api/teams").json()
    assert listed["memberCount"] == 2
    [bobs] = client.get("/api/users/2/teams", headers=auth_headers(BOB)).json()
    assert bobs["role"] == "member"
    [alices] = client.get("/api/users/1/teams", headers=auth_headers(ALICE)).json()
    assert alices["role"] == "captain"


def test_community_join(client):
    community = client.post(
        "/api/communities", json={"name": "Frugal", "category": "budgeting"}, headers=auth_headers(ALICE)
    ).json()

    joined = client.post(f"/api/communities/{community['id']}/join", headers=auth_headers(BOB))
    again = client.post(f"/api/communities/{community['id']}/join", headers=auth_headers(BOB))

    assert joined.status_code == 201
    assert again.status_code == 400
    [listed] = client.get("/api/communities?category=budgeting").json()
    assert listed["memberCount"] == 2
    assert client.get("/api/communities?category=travel").json() == []


def test_group_goal_contributions(client):
    goal = client.post(
        "/api/group-goals", json={"name": "Trip", "targetAmount": "1000"}, headers=auth_headers(ALICE)
    ).json()

    joined = client.post(f"/api/group-goals/{goal['id']}/join", json={"contributedAmount": "250"}, headers=auth_headers(BOB))

    assert joined.status_code == 201
    [listed] = client.get("/api/group-goals").json()
    assert listed["currentAmount"] == "250.00"
    [mine] = client.get("/api/users/2/group-goals", headers=auth_headers(BOB)).json()
    assert mine["contributedAmount"] == "250.00"
    assert client.get("/api/group-goals?public=true").json() == []


def test_mentorship_is_accepted_by_mentee_only(client):
    created = client.post("/api/mentorships", json={"menteeId": BOB}, headers=auth_headers(ALICE))
    mentorship = created.json()
    url = f"/api/mentorships/{mentorship['id']}/accept"

    by_mentor = client.post(url, headers=auth_headers(ALICE))
    by_mentee = client.post(url, headers=auth_headers(BOB))

    assert created.status_code == 201
    assert mentorship["status"] == "pending"
    assert by_mentor.status_code == 404
    assert by_mentee.status_code == 200
    assert by_mentee.json()["status"] == "active"
    assert len(client.get("/api/users/2/mentorships?role=mentee", headers=auth_headers(BOB)).json()) == 1
    assert client.get("/api/users/2/mentorships?role=mentor", headers=auth_headers(BOB)).json() == []
    assert client.post("/api/mentorships", json={"menteeId": ALICE}, headers=auth_headers(ALICE)).status_code == 400


def test_story_interactions(client):
    story = client.post(
        "/api/stories", json={"content": "Saved my first 1000!", "type": "milestone", "likes": 99}, headers=auth_headers(ALICE)
    ).json()
    url = f"/api/stories/{story['id']}/interactions"

    liked = client.post(url, json={"type": "like"}, headers=auth_headers(BOB))
    liked_again = client.post(url, json={"type": "like"}, headers=auth_headers(BOB))
    empty_comment = client.post(url, json={"type": "comment"}, headers=auth_headers(BOB))
    commented = client.post(url, json={"type": "comment", "comment": "Well done"}, headers=auth_headers(BOB))
    bogus = client.post(url, json={"type": "poke"}, headers=auth_headers(BOB))

    assert story["likes"] == 0
    assert liked.status_code == 201
    assert liked_again.status_code == 400
    assert empty_comment.status_code == 400
    assert commented.status_code == 201
    assert bogus.status_code == 400
    [feed_story] = client.get("/api/stories", headers=auth_headers(CAROL)).json()
    assert feed_story["likes"] == 1
    assert feed_story["comments"] == 1


def test_private_story_rejects_other_users(client):
    story = client.post(
        "/api/stories", json={"content": "Just for me", "type": "note", "isPublic": False}, headers=auth_headers(ALICE)
    ).json()

    response = client.post(f"/api/stories/{story['id']}/interactions", json={"type": "like"}, headers=auth_headers(BOB))

    assert response.status_code == 403
    assert client.get("/api/stories", headers=auth_headers(BOB)).json() == []
    assert len(client.get("/api/users/1/stories", headers=auth_headers(ALICE)).json()) == 1


# --- Insights -----------------------------------------------------------


def test_budget_update(client):
    budget = client.post(
        "/api/budgets", json={"category": "food", "monthlyLimit": "300"}, headers=auth_headers(ALICE)
    ).json()

    updated = client.put(f"/api/budgets/{budget['id']}", json={"currentSpent": "120"}, headers=auth_headers(ALICE))
    foreign = client.put(f"/api/budgets/{budget['id']}", json={"currentSpent": "0"}, headers=auth_headers(BOB))

    assert updated.json()["currentSpent"] == "120.00"
    assert updated.json()["alertThreshold"] == "0.80"
    assert foreign.status_code == 403
    assert client.get("/api/users/1/budgets", headers=auth_headers(ALICE)).json() == [updated.json()]


def test_financial_health_snapshot(client):
    headers = auth_headers(ALICE)
    scores = {
        "overallScore": 72,
        "savingsScore": 80,
        "spendingScore": 65,
        "investmentScore": 70,
        "budgetScore": 75,
        "streakScore": 60,
        "recommendations": ["Automate your SIP"],
    }

    missing = client.get("/api/users/1/financial-health", headers=headers)
    created = client.put("/api/users/1/financial-health", json=scores, headers=headers)
    revised = client.put("/api/users/1/financial-health", json={"overallScore": 75}, headers=headers)

    assert missing.status_code == 404
    assert created.status_code == 200
    assert revised.json()["id"] == created.json()["id"]
    assert revised.json()["overallScore"] == 75
    assert revised.json()["recommendations"] == ["Automate your SIP"]
    assert client.get("/api/users/1/financial-health", headers=headers).json() == revised.json()


@pytest.fixture
def module(store):
    return store.create(
        "education_modules",
        {"title": "Compounding", "category": "investing", "level": "beginner", "content": "..."},
    )


def test_education_progress(client, module):
    headers = auth_headers(ALICE)
    url = "/api/users/1/education/progress"

    started = client.put(url, json={"moduleId": module["id"], "progress": 40}, headers=headers).json()
    finished = client.put(url, json={"moduleId": module["id"], "progress": 100}, headers=headers).json()

    assert started["isCompleted"] is False
    assert started["timeSpent"] == 1
    assert finished["id"] == started["id"]
    assert finished["isCompleted"] is True
    assert finished["timeSpent"] == 2
    assert client.put(url, json={"progress": 10}, headers=headers).status_code == 400
    assert client.put(url, json={"moduleId": 999, "progress": 10}, headers=headers).status_code == 404
    assert client.get(url, headers=headers).json() == [finished]
    assert client.get("/api/education/modules?category=investing").json() == [module]


def test_quiz_hides_answers_and_scores_attempts(client, store, module):
    q1 = store.create(
        "quiz_questions",
        {"moduleId": module["id"], "question": "Rule of 72?", "options": ["a", "b"], "correctAnswer": 1, "explanation": "b"},
    )
    q2 = store.create(
        "quiz_questions",
        {"moduleId": module["id"], "question": "SIP means?", "options": ["a", "b", "c"], "correctAnswer": 2},
    )
    headers = auth_headers(ALICE)
    url = f"/api/education/modules/{module['id']}/quiz-attempts"

    quiz = client.get(f"/api/education/modules/{module['id']}/quiz", headers=headers).json()
    half = client.post(url, json={"answers": {str(q1["id"]): 1, str(q2["id"]): 0}}, headers=headers)
    full = client.post(url, json={"answers": {str(q1["id"]): 1, str(q2["id"]): 2}}, headers=headers)
    malformed = client.post(url, json={"answers": [1, 2]}, headers=headers)

    assert [question["id"] for question in quiz] == [q1["id"], q2["id"]]
    assert all("correctAnswer" not in question and "explanation" not in question for question in quiz)
    assert half.status_code == 201
    assert half.json()["score"] == "50.00"
    assert half.json()["isPassed"] is False
    assert full.json()["score"] == "100.00"
    assert full.json()["correctAnswers"] == 2
    assert full.json()["isPassed"] is True
    assert malformed.status_code == 400


# --- Banking ------------------------------------------------------------


def test_bill_split_membership(client):
    bill = client.post(
        "/api/bill-splits", json={"title": "Dinner", "totalAmount": "90"}, headers=auth_headers(ALICE)
    ).json()
    url = f"/api/bill-splits/{bill['id']}/join"

    joined = client.post(url, json={"shareAmount": "30"}, headers=auth_headers(BOB))
    again = client.post(url, json={"shareAmount": "30"}, headers=auth_headers(BOB))
    no_share = client.post(url, json={}, headers=auth_headers(CAROL))

    assert bill["createdBy"] == ALICE
    assert joined.status_code == 201
    assert joined.json()["owedAmount"] == "30.00"
    assert again.status_code == 400
    assert no_share.status_code == 400
    assert client.get("/api/users/2/bill-splits", headers=auth_headers(BOB)).json() == [bill]
    assert client.get("/api/users/1/bill-splits", headers=auth_headers(ALICE)).json() == [bill]
    assert client.post("/api/bill-splits/999/join", json={"shareAmount": "1"}, headers=auth_headers(BOB)).status_code == 404


def test_bank_accounts_and_scheduled_payments(client):
    headers = auth_headers(ALICE)

    account = client.post("/api/bank-accounts", json={"bankName": "SBI", "accountType": "savings"}, headers=headers)
    payment = client.post(
        "/api/scheduled-payments",
        json={
            "title": "Rent",
            "amount": "15000",
            "recipientUpi": "landlord@upi",
            "frequency": "monthly",
            "nextPaymentDate": "2024-02-01T00:00:00+00:00",
        },
        headers=headers,
    )

    assert account.status_code == 201
    assert payment.status_code == 201
    assert client.get("/api/users/1/bank-accounts", headers=headers).json() == [account.json()]
    assert client.get("/api/users/1/scheduled-payments", headers=headers).json() == [payment.json()]
    assert client.get("/api/users/1/bank-accounts", headers=auth_headers(BOB)).status_code == 403
