import uuid

import pytest

pytestmark = pytest.mark.anyio


async def send_request(client, recipient_id: str):
    return await client.post(f"/users/send-friend-request/{recipient_id}")


async def accept_request(client, request_id: str):
    return await client.post(f"/users/accept-friend-request/{request_id}")


async def test_friend_request_send_accept_flow(client, client_factory, onboarded_user):
    ann = await onboarded_user(client, email="ann@example.com", full_name="Ann")

    async with client_factory() as client_b:
        bob = await onboarded_user(client_b, email="bob@example.com", full_name="Bob")

        r = await send_request(client, bob["id"])
        assert r.status_code == 201, r.text
        sent = r.json()
        assert sent["senderId"] == ann["id"]
        assert sent["recipientId"] == bob["id"]
        assert sent["status"] == "pending"

        outgoing = await client.get("/users/outgoing-requests")
        assert outgoing.status_code == 200
        assert [req["recipient"]["fullName"] for req in outgoing.json()] == ["Bob"]

        r = await client_b.get("/users/friend-requests")
        assert r.status_code == 200
        body = r.json()
        assert [req["id"] for req in body["incomingReqs"]] == [sent["id"]]
        assert body["incomingReqs"][0]["sender"]["fullName"] == "Ann"
        assert body["incomingReqs"][0]["sender"]["nativeLanguage"] == "english"
        assert body["acceptedReqs"] == []

        r = await accept_request(client_b, sent["id"])
        assert r.status_code == 200, r.text
        assert r.json() == {"message": "Friend request accepted"}

        r = await client_b.get("/users/friends")
        assert [f["id"] for f in r.json()] == [ann["id"]]

        r = await client_b.get("/users/friend-requests")
        assert r.json()["incomingReqs"] == []

    r = await client.get("/users/friends")
    assert r.status_code == 200
    friends = r.json()
    assert [f["id"] for f in friends] == [bob["id"]]
    assert set(friends[0]) == {"id", "fullName", "profilePic", "nativeLanguage", "learningLanguage"}

    # The sender sees the request as accepted; the recipient's view does not list it.
    r = await client.get("/users/friend-requests")
    body = r.json()
    assert body["incomingReqs"] == []
    assert [req["id"] for req in body["acceptedReqs"]] == [sent["id"]]
    assert body["acceptedReqs"][0]["recipient"]["fullName"] == "Bob"
    assert body["acceptedReqs"][0]["status"] == "accepted"

    r = await client.get("/users/outgoing-requests")
    assert r.json() == []


async def test_reverse_request_is_a_duplicate(client, client_factory, user_factory):
    ann = await user_factory(client)

    async with client_factory() as client_b:
        bob = await user_factory(client_b)

        r = await send_request(client, bob["id"])
        assert r.status_code == 201

        r = await send_request(client_b, ann["id"])
        assert r.status_code == 400
        assert r.json()["detail"] == "A friend request already exists between you and this user"

    r = await send_request(client, bob["id"])
    assert r.status_code == 400
    assert r.json()["detail"] == "A friend request already exists between you and this user"


async def test_accepting_twice_links_friends_once(client, client_factory, user_factory):
    ann = await user_factory(client)

    async with client_factory() as client_b:
        bob = await user_factory(client_b)
        request_id = (await send_request(client, bob["id"])).json()["id"]

        first = await accept_request(client_b, request_id)
        second = await accept_request(client_b, request_id)
        assert first.status_code == 200
        assert second.status_code == 200

        r = await client_b.get("/users/friends")
        assert [f["id"] for f in r.json()] == [ann["id"]]

    r = await client.get("/users/friends")
    assert [f["id"] for f in r.json()] == [bob["id"]]


async def test_cannot_request_existing_friend(client, client_factory, user_factory):
    await user_factory(client, email="a@x.com", full_name="Ann")

    async with client_factory() as client_b:
        bob = await user_factory(client_b)
        request_id = (await send_request(client, bob["id"])).json()["id"]
        assert (await accept_request(client_b, request_id)).status_code == 200

    r = await send_request(client, bob["id"])
    assert r.status_code == 400
    assert r.json()["detail"] == "You are already friends with this user"


async def test_cannot_request_self(client, user_factory):
    me = await user_factory(client)

    r = await send_request(client, me["id"])
    assert r.status_code == 400
    assert r.json()["detail"] == "You can't send friend request to yourself"


@pytest.mark.parametrize("recipient_id", [str(uuid.uuid4()), "not-a-user-id"])
async def test_request_to_unknown_user_is_not_found(client, user_factory, recipient_id):
    await user_factory(client)

    r = await send_request(client, recipient_id)
    assert r.status_code == 404
    assert r.json()["detail"] == "Recipient not found"


async def test_only_recipient_can_accept(client, client_factory, user_factory):
    await user_factory(client)

    async with client_factory() as client_b:
        bob = await user_factory(client_b)
        request_id = (await send_request(client, bob["id"])).json()["id"]

        async with client_factory() as client_c:
            await user_factory(client_c)
            r = await accept_request(client_c, request_id)
            assert r.status_code == 403

        # The sender cannot accept on the recipient's behalf either.
        r = await accept_request(client, request_id)
        assert r.status_code == 403
        assert r.json()["detail"] == "You are not authorized to accept this request"

        r = await client_b.get("/users/friend-requests")
        assert len(r.json()["incomingReqs"]) == 1

    r = await client.get("/users/friends")
    assert r.json() == []


@pytest.mark.parametrize("request_id", [str(uuid.uuid4()), "nope"])
async def test_accept_unknown_request_is_not_found(client, user_factory, request_id):
    await user_factory(client)

    r = await accept_request(client, request_id)
    assert r.status_code == 404
    assert r.json()["detail"] == "Friend request not found"


async def test_friend_routes_require_auth(client):
    target = str(uuid.uuid4())
    for method, path in [
        ("GET", "/users/recommended"),
        ("GET", "/users/friends"),
        ("GET", "/users/friend-requests"),
        ("GET", "/users/outgoing-requests"),
        ("POST", f"/users/send-friend-request/{target}"),
        ("POST", f"/users/accept-friend-request/{target}"),
    ]:
        r = await client.request(method, path)
        assert r.status_code == 401, (method, path)
