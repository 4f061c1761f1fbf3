from pacman.services.auth.tokens import TokenStore


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_issue_and_validate():
    store = TokenStore(ttl_hours=1, clock=Clock())
    token = store.issue('alice')
    assert len(token) == 64
    assert store.validate(token) == 'alice'
    assert store.validate('unknown') is None
    assert store.validate(None) is None


def test_tokens_expire():
    clock = Clock()
    store = TokenStore(ttl_hours=1, clock=clock)
    token = store.issue('alice')
    clock.now += 3599
    assert store.validate(token) == 'alice'
    clock.now += 1
    assert store.validate(token) is None
    assert len(store) == 0


def test_issue_sweeps_expired_tokens():
    clock = Clock()
    store = TokenStore(ttl_hours=1, clock=clock)
    store.issue('alice')
    store.issue('bob')
    clock.now += 7200
    store.issue('carol')
    assert len(store) == 1


def test_purge_and_revoke():
    clock = Clock()
    store = TokenStore(ttl_hours=1, clock=clock)
    old = store.issue('alice')
    clock.now += 4000
    fresh = store.issue('bob')
    assert store.purge_expired() == 0
    assert store.validate(old) is None
    assert store.revoke(fresh) is True
    assert store.revoke(fresh) is False
    assert store.validate(fresh) is None
