import pytest

from vodshop.errors import AlreadyInWatchlist, UserNotFound
from vodshop.utils.security import Identity
from vodshop.watchlist import service as watchlist_service
from tests.conftest import MOVIE_ID, VIDEO_ID

def test_add_get_remove(store, user, catalog):
    watchlist_service.add(user, MOVIE_ID)
    watchlist_service.add(user, VIDEO_ID)

    titles = [c["title"] for c in watchlist_service.get_watchlist(user)["watchlist"]]
    assert titles == ["The Long Take", "Behind the Scenes"]

    res = watchlist_service.remove(user, MOVIE_ID)
    assert res["watchlist"] == [VIDEO_ID]

def test_add_twice(store, user, catalog):
    watchlist_service.add(user, MOVIE_ID)
    with pytest.raises(AlreadyInWatchlist):
        watchlist_service.add(user, MOVIE_ID)

def test_unknown_user(store):
    with pytest.raises(UserNotFound):
        watchlist_service.get_watchlist(Identity(id="nobody"))
