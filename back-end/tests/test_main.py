import uvicorn

import main


def test_run_serves_the_app_with_configured_address(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, **options: calls.append((app, options)))
    monkeypatch.setattr(main.settings, "HOST", "0.0.0.0")
    monkeypatch.setattr(main.settings, "PORT", 9000)
    monkeypatch.setattr(main.settings, "ENVIRONMENT", "production")

    main.run()

    assert calls == [
        ("main:app", {"host": "0.0.0.0", "port": 9000, "reload": False, "log_level": main.settings.LOG_LEVEL.lower()}),
    ]
