import importlib

from courtbook import config
from courtbook.infra import supabase_client

def test_allowed_hosts_default_excludes_test_host(monkeypatch):
    monkeypatch.delenv("ALLOWED_HOSTS", raising=False)
    try:
        importlib.reload(config)
        assert config.ALLOWED_HOSTS == ["localhost", "127.0.0.1"]
        assert "testserver" not in config.ALLOWED_HOSTS
    finally:
        monkeypatch.undo()
        importlib.reload(config)
    # L'hôte des tests vient de l'environnement posé par conftest
    assert "testserver" in config.ALLOWED_HOSTS

def test_allowed_hosts_from_env(monkeypatch):
    monkeypatch.setenv("ALLOWED_HOSTS", " courts.example.in , api.courts.example.in ,")
    try:
        importlib.reload(config)
        assert config.ALLOWED_HOSTS == ["courts.example.in", "api.courts.example.in"]
    finally:
        monkeypatch.undo()
        importlib.reload(config)

def test_only_service_role_client_is_exposed():
    assert hasattr(supabase_client, "get_service_supabase")
    assert not hasattr(supabase_client, "get_supabase")
    assert not hasattr(config, "SUPABASE_ANON")
