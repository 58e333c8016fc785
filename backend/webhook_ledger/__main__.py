"""Run the server with uvicorn: ``python -m webhook_ledger``"""
import uvicorn

from webhook_ledger.core.config import settings


def main():
    # Reload needs the app as an import string
    reload = settings.ENVIRONMENT == "development"

    config = {
        "host": settings.HOST,
        "port": settings.PORT,
        "timeout_graceful_shutdown": 30,
    }

    if reload:
        uvicorn.run("webhook_ledger.main:app", reload=True, **config)
    else:
        from webhook_ledger.main import app
        uvicorn.run(app, **config)


if __name__ == "__main__":
    main()
