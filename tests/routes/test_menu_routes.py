import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from bistro.models.menu import MenuItem
from bistro.models.user import UserRole
from bistro.routes.menu_routes import MenuItemRequest, get_menu_item, update_menu_item


def _soup() -> MenuItemRequest:
    return MenuItemRequest(name='Tomato Soup', category='soup', recipe='Tomatoes, basil', price=6.5, image='soup.png')


def test_get_menu_item_returns_404_when_missing(db_session) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_menu_item(item_id=42, db=db_session)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Menu item not found.'


def test_update_menu_item_reports_modification(db_session) -> None:
    item = MenuItem(name='Soup', category='soup', price=5)
    db_session.add(item)
    db_session.commit()

    changed = update_menu_item(item_id=item.id, data=_soup(), db=db_session)
    unchanged = update_menu_item(item_id=item.id, data=_soup(), db=db_session)
    missing = update_menu_item(item_id=999, data=_soup(), db=db_session)

    assert (changed.matchedCount, changed.modifiedCount) == (1, 1)
    assert (unchanged.matchedCount, unchanged.modifiedCount) == (1, 0)
    assert (missing.matchedCount, missing.modifiedCount) == (0, 0)
    db_session.refresh(item)
    assert item.name == 'Tomato Soup'
    assert item.price == 6.5


def test_menu_create_and_read_are_open(client) -> None:
    created = client.post('/menu', json=_soup().model_dump())
    item_id = created.json()['insertedId']

    listed = client.get('/menu')
    fetched = client.get(f'/menu/{item_id}')

    assert created.status_code == 200
    assert [item['id'] for item in listed.json()] == [item_id]
    assert fetched.json()['name'] == 'Tomato Soup'


def test_menu_delete_requires_admin(client, make_user, auth_headers, db_session) -> None:
    make_user('u@example.com')
    item = MenuItem(name='Soup', price=5)
    db_session.add(item)
    db_session.commit()

    anonymous = client.delete(f'/menu/{item.id}')
    member = client.delete(f'/menu/{item.id}', headers=auth_headers('u@example.com'))

    assert anonymous.status_code == 401
    assert member.status_code == 403
    assert db_session.query(MenuItem).count() == 1


def test_menu_delete_by_admin(client, make_user, auth_headers, db_session) -> None:
    make_user('chef@example.com', role=UserRole.ADMIN)
    item = MenuItem(name='Soup', price=5)
    db_session.add(item)
    db_session.commit()

    response = client.delete(f'/menu/{item.id}', headers=auth_headers('chef@example.com'))

    assert response.status_code == 200
    assert response.json() == {'deletedCount': 1}
    assert db_session.query(MenuItem).count() == 0


def test_menu_item_request_rejects_infinite_price() -> None:
    with pytest.raises(ValidationError):
        MenuItemRequest(name='Soup', price=float('inf'))
