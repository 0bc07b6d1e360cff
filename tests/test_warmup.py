import importlib

import credhash.core as core


def test_warm_up_env(monkeypatch):
    monkeypatch.setenv("CREDHASH_WARMUP", "1")
    importlib.reload(core)
    assert core._warmed_up is True
    monkeypatch.delenv("CREDHASH_WARMUP")
    importlib.reload(core)
    assert core._warmed_up is False


def test_warm_up_function(monkeypatch):
    calls = []
    real_derive = core.derive

    def counting_derive(*args, **kwargs):
        calls.append(args)
        return real_derive(*args, **kwargs)

    monkeypatch.setattr(core, "_warmed_up", False)
    monkeypatch.setattr(core, "derive", counting_derive)
    core.warm_up()
    core.warm_up()
    assert core._warmed_up is True
    assert len(calls) == 1
