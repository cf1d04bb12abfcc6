from scrim_bot.core.sessions import SessionStore, WizardSession, WizardStep


class Clock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_put_get_update_remove():
    store = SessionStore()
    store.put(WizardSession(user_id=1, team_name="Alpha"))
    assert store.get(1).team_name == "Alpha"
    assert store.get(2) is None

    updated = store.update(1, lambda s: setattr(s, "division", "Premier"))
    assert updated.division == "Premier"
    assert store.update(2, lambda s: None) is None

    assert store.remove(1).team_name == "Alpha"
    assert 1 not in store
    assert store.remove(1) is None


def test_put_replaces_previous_session():
    store = SessionStore()
    store.put(WizardSession(user_id=1, team_name="Alpha", maps=["Nuke"], step=WizardStep.SERVER_SELECT))
    store.put(WizardSession(user_id=1, team_name="Bravo"))
    session = store.get(1)
    assert session.team_name == "Bravo"
    assert session.maps == []
    assert len(store) == 1


def test_sessions_are_per_user():
    store = SessionStore()
    store.put(WizardSession(user_id=1, team_name="Alpha"))
    store.put(WizardSession(user_id=2, team_name="Bravo"))
    store.remove(1)
    assert store.get(2).team_name == "Bravo"


def test_sweep_drops_only_untouched_sessions():
    clock = Clock()
    store = SessionStore(clock=clock)
    store.put(WizardSession(user_id=1))
    store.put(WizardSession(user_id=2))
    clock.now = 50.0
    store.update(2, lambda s: None)
    clock.now = 100.0
    assert store.sweep(max_age=60) == 1
    assert store.get(1) is None
    assert store.get(2) is not None
