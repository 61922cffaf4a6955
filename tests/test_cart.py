from datetime import timedelta

from jose import jwt

from storefront.services import cart_service
from storefront.utils.security import create_access_token


AUTH_ERROR = {"success": False, "errors": "Please authenticate using a valid token"}


class TestAuthGuard:
    def test_missing_token(self, client):
        for path in ("/addtocart", "/removefromcart", "/getcart"):
            response = client.post(path, json={"itemId": 1})
            assert response.status_code == 401
            assert response.json() == AUTH_ERROR

    def test_tampered_token(self, client, settings, token):
        user_id = jwt.get_unverified_claims(token)["user"]["id"]
        forged = jwt.encode({"user": {"id": user_id}}, "not-the-secret", algorithm=settings.ALGORITHM)

        for bad in (forged, "not-a-token"):
            response = client.post("/getcart", headers={"auth-token": bad})
            assert response.status_code == 401
            assert response.json() == AUTH_ERROR

    def test_expired_token(self, client, settings, token):
        user_id = jwt.get_unverified_claims(token)["user"]["id"]
        expired = create_access_token({"user": {"id": user_id}}, settings, expires_delta=timedelta(seconds=-5))

        response = client.post("/getcart", headers={"auth-token": expired})

        assert response.status_code == 401

    def test_token_for_unknown_user(self, client, settings):
        orphan = create_access_token({"user": {"id": "no-such-user"}}, settings)

        response = client.post("/getcart", headers={"auth-token": orphan})

        assert response.status_code == 401

    def test_bearer_header_is_accepted(self, client, token):
        response = client.post("/getcart", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200


class TestCartRoutes:
    def test_new_user_has_empty_cart(self, client, auth_headers):
        assert client.post("/getcart", headers=auth_headers).json() == {}

    def test_add_increments_by_one(self, client, auth_headers):
        first = client.post("/addtocart", json={"itemId": 7}, headers=auth_headers)
        second = client.post("/addtocart", json={"itemId": 7}, headers=auth_headers)

        assert first.json()["data"] == {"itemId": 7, "quantity": 1}
        assert second.json()["data"] == {"itemId": 7, "quantity": 2}
        assert second.json()["message"] == "Added to cart"
        assert client.post("/getcart", headers=auth_headers).json() == {"7": 2}

    def test_remove_floors_at_zero(self, client, auth_headers):
        client.post("/addtocart", json={"itemId": 3}, headers=auth_headers)

        first = client.post("/removefromcart", json={"itemId": 3}, headers=auth_headers)
        second = client.post("/removefromcart", json={"itemId": 3}, headers=auth_headers)

        assert first.json()["data"]["quantity"] == 0
        assert second.status_code == 200
        assert second.json()["data"]["quantity"] == 0
        assert client.post("/getcart", headers=auth_headers).json() == {}

    def test_item_id_is_validated(self, client, auth_headers):
        response = client.post("/addtocart", json={"itemId": -1}, headers=auth_headers)
        assert response.status_code == 422

        response = client.post("/addtocart", json={"itemId": "abc"}, headers=auth_headers)
        assert response.status_code == 422

    def test_oversized_item_id_is_rejected(self, client, auth_headers):
        response = client.post("/addtocart", json={"itemId": 10**20}, headers=auth_headers)
        assert response.status_code == 422

        response = client.post("/removefromcart", json={"itemId": 2**31}, headers=auth_headers)
        assert response.status_code == 422

    def test_snake_case_item_id(self, client, auth_headers):
        response = client.post("/addtocart", json={"item_id": 2}, headers=auth_headers)

        assert response.json()["data"]["quantity"] == 1

    def test_carts_are_per_user(self, client, auth_headers):
        other = client.post("/signup", json={
            "username": "other",
            "email": "other@example.com",
            "password": "password1",
        }).json()["token"]

        client.post("/addtocart", json={"itemId": 1}, headers=auth_headers)

        assert client.post("/getcart", headers={"auth-token": other}).json() == {}


def test_cart_service_counts(db, settings):
    from storefront.schemas.user import UserCreate
    from storefront.services.auth_service import register_user

    user = register_user(db, UserCreate(username="c", email="c@example.com", password="secret1"), settings)

    for _ in range(3):
        cart_service.add_to_cart(db, user.id, 5)
    cart_service.add_to_cart(db, user.id, 9)
    assert cart_service.remove_from_cart(db, user.id, 5) == 2
    assert cart_service.remove_from_cart(db, user.id, 42) == 0

    assert cart_service.get_cart(db, user.id) == {5: 2, 9: 1}


def test_cart_service_reports_its_own_write(db, settings, monkeypatch):
    from sqlalchemy.orm import Session

    from storefront.models.cart import CartItem
    from storefront.schemas.user import UserCreate
    from storefront.services.auth_service import register_user

    user_id = register_user(db, UserCreate(username="d", email="d@example.com", password="secret1"), settings).id
    real_commit = db.commit

    def commit_then_concurrent_add():
        real_commit()
        with Session(bind=db.get_bind()) as other:
            other.query(CartItem).filter(CartItem.user_id == user_id, CartItem.product_id == 5).update(
                {CartItem.quantity: CartItem.quantity + 1}, synchronize_session=False
            )
            other.commit()

    monkeypatch.setattr(db, "commit", commit_then_concurrent_add)

    assert cart_service.add_to_cart(db, user_id, 5) == 1
    assert cart_service.add_to_cart(db, user_id, 5) == 3
    assert cart_service.remove_from_cart(db, user_id, 5) == 3
    assert cart_service.get_cart(db, user_id) == {5: 4}
