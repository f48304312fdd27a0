import pytest
from pydantic import ValidationError

from bistro.models.review import Review
from bistro.routes.cart_routes import CartItemRequest


def test_cart_item_request_normalizes_email() -> None:
    request = CartItemRequest(email=' U@Example.com ', menuItemId=3, price=7.25)

    assert request.email == 'u@example.com'
    assert request.menu_item_id == 3


def test_cart_lists_only_owner_items(client) -> None:
    client.post('/carts', json={'email': 'u@example.com', 'menuItemId': 1, 'name': 'Soup', 'price': 5})
    client.post('/carts', json={'email': 'v@example.com', 'menuItemId': 2, 'name': 'Salad', 'price': 6})

    response = client.get('/carts', params={'email': 'U@example.com'})

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 1
    assert body[0]['email'] == 'u@example.com'
    assert body[0]['menuItemId'] == 1


def test_cart_item_removal(client) -> None:
    cart_id = client.post('/carts', json={'email': 'u@example.com', 'menuItemId': 1, 'price': 5}).json()['insertedId']

    first = client.delete(f'/carts/{cart_id}')
    second = client.delete(f'/carts/{cart_id}')

    assert first.json() == {'deletedCount': 1}
    assert second.json() == {'deletedCount': 0}
    assert client.get('/carts', params={'email': 'u@example.com'}).json() == []


def test_reviews_are_listed(client, db_session) -> None:
    db_session.add(Review(name='Jane', details='Lovely soup.', rating=5))
    db_session.commit()

    response = client.get('/reviews')

    assert response.status_code == 200
    assert response.json() == [{'id': 1, 'name': 'Jane', 'details': 'Lovely soup.', 'rating': 5.0}]


def test_cart_item_request_rejects_infinite_price() -> None:
    with pytest.raises(ValidationError):
        CartItemRequest(email='u@example.com', menuItemId=1, price=float('inf'))
